"""콘텐츠 생성/조회/수정(저장 시 자동 버전 생성) 도메인 서비스입니다."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cms.services import version_service
from cms.services.content_adapters import ContentAdapter, resolve_adapter
from cms.utils.exceptions import SlugConflictError

logger = logging.getLogger(__name__)


def to_response(adapter: ContentAdapter, entity) -> Dict[str, Any]:
    return {
        "content_type": adapter.kind,
        "content_id": adapter.entity_id(entity),
        "data": adapter.fields(entity),
        "is_published": bool(entity.is_published),
        "published_at": entity.published_at,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }


def slug_conflict(exc: IntegrityError) -> SlugConflictError:
    logger.info("[contents] integrity error on save: %s", exc.orig)
    return SlugConflictError()


def create_content(
    db: Session,
    content_type: str,
    data: Any,
    *,
    author_id: Optional[int],
    change_notes: Optional[str] = None,
) -> Dict[str, Any]:
    adapter = resolve_adapter(content_type)
    cleaned = adapter.validate(data, creating=True)

    entity = adapter.model()
    adapter.apply(entity, cleaned)
    try:
        version_service.create_initial_version(
            db,
            adapter=adapter,
            entity=entity,
            author_id=author_id,
            change_notes=change_notes,
        )
    except IntegrityError as exc:
        raise slug_conflict(exc)
    db.refresh(entity)
    return to_response(adapter, entity)


def get_content(db: Session, content_type: str, content_id: int) -> Dict[str, Any]:
    adapter = resolve_adapter(content_type)
    return to_response(adapter, adapter.get_or_404(db, content_id))


def update_content(
    db: Session,
    content_type: str,
    content_id: int,
    data: Any,
    *,
    author_id: Optional[int],
    change_summary: Optional[str] = None,
    change_notes: Optional[str] = None,
) -> Dict[str, Any]:
    adapter = resolve_adapter(content_type)
    entity = adapter.get_or_404(db, content_id)
    cleaned = adapter.validate(data)

    try:
        version_service.save_changes(
            db,
            adapter=adapter,
            entity=entity,
            changes=cleaned,
            author_id=author_id,
            change_summary=change_summary,
            change_notes=change_notes,
        )
    except IntegrityError as exc:
        raise slug_conflict(exc)
    db.refresh(entity)
    return to_response(adapter, entity)
