"""서비스 레이어 패키지 초기화 모듈입니다."""

from cms.services import (
    auth_service,
    diff_service,
    snapshot_store,
    version_events,
    content_adapters,
    version_service,
    content_version_service,
    content_service,
)
