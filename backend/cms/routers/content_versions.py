"""Content Versions 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cms.config import settings
from cms.database import get_db
from cms.middleware.auth_middleware import get_current_user
from cms.models.user import User
from cms.schemas.version import (
    DraftCreate, DraftResult, MessageOut, PublishRequest, PublishResult,
    RestoreRequest, RestoreResult, VersionCompareOut, VersionDetailOut, VersionHistoryOut,
)
from cms.services import content_version_service

router = APIRouter(prefix="/api/content-versions", tags=["content-versions"])


@router.get("/{content_type}/{content_id}", response_model=VersionHistoryOut)
def list_versions(
    content_type: str,
    content_id: int,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if limit is None:
        limit = settings.VERSION_HISTORY_PAGE_SIZE
    return content_version_service.list_versions(db, content_type, content_id, limit=limit, offset=offset)


# /{version_number} 보다 먼저 등록해야 "compare"가 버전 번호로 해석되지 않는다.
@router.get("/{content_type}/{content_id}/compare", response_model=VersionCompareOut)
def compare_versions(
    content_type: str,
    content_id: int,
    v1: int = Query(..., ge=1),
    v2: int = Query(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_version_service.compare(db, content_type, content_id, v1, v2)


@router.get("/{content_type}/{content_id}/{version_number}", response_model=VersionDetailOut)
def show_version(
    content_type: str,
    content_id: int,
    version_number: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_version_service.show_version(db, content_type, content_id, version_number)


@router.post("/{content_type}/{content_id}/restore", response_model=RestoreResult)
def restore_version(
    content_type: str,
    content_id: int,
    data: RestoreRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_version_service.restore(
        db, content_type, content_id, data.version_number,
        author_id=current_user.user_id,
        notes=data.notes,
    )


@router.post("/{content_type}/{content_id}/publish", response_model=PublishResult)
def publish_version(
    content_type: str,
    content_id: int,
    data: PublishRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_version_service.publish(db, content_type, content_id, data.version_number)


@router.post("/{content_type}/{content_id}/unpublish", response_model=MessageOut)
def unpublish_content(
    content_type: str,
    content_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_version_service.unpublish(db, content_type, content_id)


@router.post("/{content_type}/{content_id}/draft", response_model=DraftResult)
def create_draft(
    content_type: str,
    content_id: int,
    data: DraftCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_version_service.create_draft(
        db, content_type, content_id, data.data,
        author_id=current_user.user_id,
        change_notes=data.change_notes,
    )
