"""Contents 기능 API 라우터입니다. 인사이트/포트폴리오/서비스를 저장하면 새 버전이 기록됩니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cms.database import get_db
from cms.middleware.auth_middleware import get_current_user
from cms.models.user import User
from cms.schemas.content import ContentOut, ContentWrite
from cms.services import content_service

router = APIRouter(prefix="/api/contents", tags=["contents"])


@router.post("/{content_type}", response_model=ContentOut)
def create_content(
    content_type: str,
    data: ContentWrite,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_service.create_content(
        db, content_type, data.data,
        author_id=current_user.user_id,
        change_notes=data.change_notes,
    )


@router.get("/{content_type}/{content_id}", response_model=ContentOut)
def get_content(
    content_type: str,
    content_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_service.get_content(db, content_type, content_id)


@router.put("/{content_type}/{content_id}", response_model=ContentOut)
def update_content(
    content_type: str,
    content_id: int,
    data: ContentWrite,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return content_service.update_content(
        db, content_type, content_id, data.data,
        author_id=current_user.user_id,
        change_summary=data.change_summary,
        change_notes=data.change_notes,
    )
