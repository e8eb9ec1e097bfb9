"""버전 변경(현재본/게시본 이동) 알림을 구독자에게 전달하는 프로세스 내 이벤트 허브입니다."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionChange:
    entity_type: str
    entity_id: int
    action: str  # create/draft/restore/publish/unpublish
    version_number: Optional[int] = None


Listener = Callable[[VersionChange], None]

_listeners: List[Listener] = []


def subscribe(listener: Listener) -> Listener:
    if listener not in _listeners:
        _listeners.append(listener)
    return listener


def unsubscribe(listener: Listener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def emit(change: VersionChange) -> None:
    # 커밋 이후에 호출된다. 구독자 실패가 이미 저장된 버전 작업을 되돌리지 않는다.
    for listener in list(_listeners):
        try:
            listener(change)
        except Exception as exc:
            logger.warning(
                "[versioning] listener %r failed for %s#%s (%s): %s",
                listener, change.entity_type, change.entity_id, change.action, exc,
            )
