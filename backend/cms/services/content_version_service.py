"""관리자 화면이 사용하는 버전 이력/비교/복원/게시/초안 API 계약을 구현하는 서비스입니다."""

from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cms.models.content_version import ContentVersion
from cms.models.user import User
from cms.services import diff_service, version_service
from cms.services.content_service import slug_conflict
from cms.services.content_adapters import ContentAdapter, resolve_adapter
from cms.utils.exceptions import NotFoundError


def _resolve(db: Session, content_type: str, content_id: int) -> Tuple[ContentAdapter, Any]:
    adapter = resolve_adapter(content_type)
    return adapter, adapter.get_or_404(db, content_id)


def _author(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"user_id": user.user_id, "name": user.name, "email": user.email}


def to_response(db: Session, row: ContentVersion, *, include_payload: bool = False) -> Dict[str, Any]:
    data = {
        "version_id": row.version_id,
        "entity_type": row.entity_type,
        "entity_id": row.entity_id,
        "version_number": row.version_number,
        "author": _author(row.author),
        "change_summary": version_service.changes_summary(db, row),
        "change_notes": row.change_notes,
        "is_current": bool(row.is_current),
        "is_published": bool(row.is_published),
        "created_at": row.created_at,
        "published_at": row.published_at,
    }
    if include_payload:
        data["payload"] = row.payload or {}
    return data


def _summary(db: Session, row: ContentVersion) -> Dict[str, Any]:
    return {
        "version_number": row.version_number,
        "author": _author(row.author),
        "created_at": row.created_at,
        "change_summary": version_service.changes_summary(db, row),
    }


def list_versions(
    db: Session,
    content_type: str,
    content_id: int,
    *,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Dict[str, Any]:
    adapter, _ = _resolve(db, content_type, content_id)
    rows, total = version_service.get_version_history(
        db, entity_type=adapter.kind, entity_id=content_id, limit=limit, offset=offset,
    )
    return {"versions": [to_response(db, row) for row in rows], "total": total}


def show_version(db: Session, content_type: str, content_id: int, version_number: int) -> Dict[str, Any]:
    adapter, _ = _resolve(db, content_type, content_id)
    row = version_service.get_version(
        db, entity_type=adapter.kind, entity_id=content_id, version_number=version_number,
    )
    return {"version": to_response(db, row, include_payload=True)}


def restore(
    db: Session,
    content_type: str,
    content_id: int,
    version_number: int,
    *,
    author_id: Optional[int],
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    adapter, entity = _resolve(db, content_type, content_id)
    try:
        row = version_service.restore_to_version(
            db,
            adapter=adapter,
            entity=entity,
            version_number=version_number,
            author_id=author_id,
            change_notes=notes,
        )
    except IntegrityError as exc:
        raise slug_conflict(exc)
    return {
        "message": "Version restored successfully",
        "current_version": to_response(db, row, include_payload=True),
    }


def publish(db: Session, content_type: str, content_id: int, version_number: int) -> Dict[str, Any]:
    adapter, entity = _resolve(db, content_type, content_id)
    row = version_service.publish_version(db, adapter=adapter, entity=entity, version_number=version_number)
    return {
        "message": "Version published successfully",
        "published_version": to_response(db, row, include_payload=True),
    }


def unpublish(db: Session, content_type: str, content_id: int) -> Dict[str, Any]:
    adapter, entity = _resolve(db, content_type, content_id)
    previous = version_service.unpublish(db, adapter=adapter, entity=entity)
    if previous is None:
        return {"message": "Content was not published"}
    return {"message": f"Version {previous} unpublished"}


def compare(db: Session, content_type: str, content_id: int, v1: int, v2: int) -> Dict[str, Any]:
    adapter, _ = _resolve(db, content_type, content_id)
    version1 = version_service.find_version(db, entity_type=adapter.kind, entity_id=content_id, version_number=v1)
    version2 = version_service.find_version(db, entity_type=adapter.kind, entity_id=content_id, version_number=v2)
    if version1 is None or version2 is None:
        raise NotFoundError("One or both versions not found")

    return {
        "version1": _summary(db, version1),
        "version2": _summary(db, version2),
        "differences": diff_service.calculate_differences(version1.payload or {}, version2.payload or {}),
    }


def create_draft(
    db: Session,
    content_type: str,
    content_id: int,
    data: Any,
    *,
    author_id: Optional[int],
    change_notes: Optional[str] = None,
) -> Dict[str, Any]:
    adapter, entity = _resolve(db, content_type, content_id)
    row = version_service.create_draft(
        db,
        adapter=adapter,
        entity=entity,
        data=data,
        author_id=author_id,
        change_notes=change_notes,
    )
    return {"message": "Draft created successfully", "draft": to_response(db, row, include_payload=True)}
