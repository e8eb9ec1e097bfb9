"""콘텐츠 버전 생성/복원/게시/초안 정책을 담당하는 도메인 서비스입니다.

현재본(is_current)은 엔티티당 정확히 하나, 게시본(is_published)은 최대 하나여야 한다.
모든 쓰기는 엔티티 리비전 CAS를 먼저 잡은 뒤 하나의 트랜잭션으로 커밋한다.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from cms.config import settings
from cms.models.content_version import ContentVersion, ContentVersionCounter
from cms.services import diff_service, snapshot_store, version_events
from cms.services.content_adapters import ContentAdapter
from cms.services.version_events import VersionChange
from cms.utils.exceptions import (
    ConcurrentModificationError,
    UnsupportedOperationError,
    VersionConflict,
    VersionNotFoundError,
)

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")

VERSION_IGNORED_FIELDS = frozenset({"updated_at", "views_count", "last_viewed_at"})

INITIAL_SUMMARY = "Initial version"
DRAFT_SUMMARY = "Draft version"


def _run_versioned_write(
    db: Session,
    *,
    entity_type: str,
    entity_id: Optional[int],
    work: Callable[[ContentVersionCounter], Any],
    prepare: Optional[Callable[[], int]] = None,
):
    """Run ``work`` under the entity's revision claim and commit, retrying on conflicts.

    ``prepare`` runs first on every attempt inside the same transaction and
    returns the entity id (used when the entity row itself is being inserted).
    """
    attempts = max(1, settings.VERSION_WRITE_RETRIES + 1)
    for attempt in range(1, attempts + 1):
        try:
            if prepare is not None:
                entity_id = prepare()
            counter = snapshot_store.claim_revision(db, entity_type=entity_type, entity_id=entity_id)
            result = work(counter)
            db.commit()
            return result
        except VersionConflict:
            db.rollback()
            logger.info(
                "[versioning] revision conflict on %s#%s (attempt %d/%d)",
                entity_type, entity_id, attempt, attempts,
            )
            if attempt < attempts:
                time.sleep(settings.VERSION_RETRY_BACKOFF_SECONDS * attempt)
        except Exception:
            db.rollback()
            raise

    logger.warning("[versioning] giving up on %s#%s after %d attempts", entity_type, entity_id, attempts)
    raise ConcurrentModificationError()


def _append_current(
    db: Session,
    counter: ContentVersionCounter,
    adapter: ContentAdapter,
    entity,
    *,
    author_id: Optional[int],
    change_summary: Optional[str],
    change_notes: Optional[str],
) -> ContentVersion:
    row = snapshot_store.append(
        db,
        counter=counter,
        payload=adapter.fields(entity),
        author_id=author_id,
        change_summary=change_summary,
        change_notes=change_notes,
    )
    snapshot_store.set_current(
        db,
        entity_type=counter.entity_type,
        entity_id=counter.entity_id,
        version_number=row.version_number,
    )
    return row


def _finish(db: Session, row: ContentVersion, action: str) -> ContentVersion:
    db.refresh(row)
    version_events.emit(
        VersionChange(
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            action=action,
            version_number=row.version_number,
        )
    )
    return row


def should_create_version(before: Dict[str, Any], after: Dict[str, Any]) -> bool:
    changed = {
        name
        for name in set(before) | set(after)
        if not diff_service.values_equal(before.get(name), after.get(name))
    }
    return bool(changed - VERSION_IGNORED_FIELDS)


def create_version(
    db: Session,
    *,
    adapter: ContentAdapter,
    entity,
    author_id: Optional[int],
    change_summary: Optional[str] = None,
    change_notes: Optional[str] = None,
    changes: Optional[Dict[str, Any]] = None,
) -> ContentVersion:
    """Snapshot the live entity as a new current version.

    ``changes`` are applied to the entity inside the same transaction, so a
    retried write never loses the edit that triggered it.
    """
    entity_type = adapter.kind
    entity_id = adapter.entity_id(entity)

    def work(counter):
        if changes:
            adapter.apply(entity, changes)
            # 엔티티 자체의 제약 위반(IntegrityError)은 리비전 충돌과 구분되어야 한다.
            db.flush()
        return _append_current(
            db, counter, adapter, entity,
            author_id=author_id,
            change_summary=change_summary,
            change_notes=change_notes,
        )

    row = _run_versioned_write(db, entity_type=entity_type, entity_id=entity_id, work=work)
    logger.info("[versioning] %s#%s saved as version %s", entity_type, entity_id, row.version_number)
    return _finish(db, row, "create")


def create_initial_version(
    db: Session,
    *,
    adapter: ContentAdapter,
    entity,
    author_id: Optional[int],
    change_notes: Optional[str] = None,
) -> ContentVersion:
    """Insert a new entity together with its first version in one transaction."""

    def prepare():
        db.add(entity)
        db.flush()
        return adapter.entity_id(entity)

    def work(counter):
        return _append_current(
            db, counter, adapter, entity,
            author_id=author_id,
            change_summary=INITIAL_SUMMARY,
            change_notes=change_notes,
        )

    row = _run_versioned_write(db, entity_type=adapter.kind, entity_id=None, work=work, prepare=prepare)
    logger.info("[versioning] %s#%s created as version %s", adapter.kind, row.entity_id, row.version_number)
    return _finish(db, row, "create")


def save_changes(
    db: Session,
    *,
    adapter: ContentAdapter,
    entity,
    changes: Dict[str, Any],
    author_id: Optional[int],
    change_summary: Optional[str] = None,
    change_notes: Optional[str] = None,
) -> Optional[ContentVersion]:
    """Apply an editor's changes; returns None when nothing versioned changed."""
    before = adapter.fields(entity)
    after = {**before, **changes}
    if not should_create_version(before, after):
        logger.debug("[versioning] %s#%s save without significant changes", adapter.kind, adapter.entity_id(entity))
        return None
    return create_version(
        db,
        adapter=adapter,
        entity=entity,
        author_id=author_id,
        change_summary=change_summary,
        change_notes=change_notes,
        changes=changes,
    )


def create_draft(
    db: Session,
    *,
    adapter: ContentAdapter,
    entity,
    data: Any,
    author_id: Optional[int],
    change_notes: Optional[str] = None,
) -> ContentVersion:
    if not adapter.supports_drafts:
        raise UnsupportedOperationError("Draft creation not supported for this content type")
    cleaned = adapter.validate(data)

    entity_type = adapter.kind
    entity_id = adapter.entity_id(entity)

    def work(counter):
        payload = {**adapter.fields(entity), **cleaned}
        return snapshot_store.append(
            db,
            counter=counter,
            payload=payload,
            author_id=author_id,
            change_summary=DRAFT_SUMMARY,
            change_notes=change_notes,
        )

    row = _run_versioned_write(db, entity_type=entity_type, entity_id=entity_id, work=work)
    audit_logger.info(
        "Draft created: %s#%s version=%s by user=%s", entity_type, entity_id, row.version_number, author_id,
    )
    return _finish(db, row, "draft")


def restore_to_version(
    db: Session,
    *,
    adapter: ContentAdapter,
    entity,
    version_number: int,
    author_id: Optional[int],
    change_notes: Optional[str] = None,
) -> ContentVersion:
    """Copy an old version back onto the entity and record it as a new current version.

    History is never rewritten: the restored content gets its own version number.
    """
    entity_type = adapter.kind
    entity_id = adapter.entity_id(entity)

    def work(counter):
        target = snapshot_store.find(
            db, entity_type=entity_type, entity_id=entity_id, version_number=version_number,
        )
        if target is None:
            raise VersionNotFoundError()
        adapter.apply(entity, target.payload)
        # 복원된 slug 등이 다른 콘텐츠와 겹치면 리비전 충돌이 아닌 IntegrityError로 올라가야 한다.
        db.flush()
        return _append_current(
            db, counter, adapter, entity,
            author_id=author_id,
            change_summary=f"Restored to version {version_number}",
            change_notes=change_notes,
        )

    row = _run_versioned_write(db, entity_type=entity_type, entity_id=entity_id, work=work)
    audit_logger.info(
        "Version restore: %s#%s to version=%s as version=%s by user=%s",
        entity_type, entity_id, version_number, row.version_number, author_id,
    )
    return _finish(db, row, "restore")


def publish_version(
    db: Session,
    *,
    adapter: ContentAdapter,
    entity,
    version_number: int,
    now: Optional[datetime] = None,
) -> ContentVersion:
    """Make a version the live one. It does not have to be the current version."""
    entity_type = adapter.kind
    entity_id = adapter.entity_id(entity)

    def work(counter):
        target = snapshot_store.find(
            db, entity_type=entity_type, entity_id=entity_id, version_number=version_number,
        )
        if target is None:
            raise VersionNotFoundError()
        published_at = now or datetime.utcnow()
        snapshot_store.set_published(
            db,
            entity_type=entity_type,
            entity_id=entity_id,
            version_number=version_number,
            published_at=published_at,
        )
        entity.is_published = True
        entity.published_at = target.published_at or published_at
        return target

    row = _run_versioned_write(db, entity_type=entity_type, entity_id=entity_id, work=work)
    audit_logger.info("Version publish: %s#%s version=%s", entity_type, entity_id, version_number)
    return _finish(db, row, "publish")


def unpublish(db: Session, *, adapter: ContentAdapter, entity) -> Optional[int]:
    """Take the entity offline; returns the version number that was live, if any."""
    entity_type = adapter.kind
    entity_id = adapter.entity_id(entity)

    def work(counter):
        live = snapshot_store.published(db, entity_type=entity_type, entity_id=entity_id)
        snapshot_store.set_published(db, entity_type=entity_type, entity_id=entity_id, version_number=None)
        entity.is_published = False
        return live.version_number if live else None

    version_number = _run_versioned_write(db, entity_type=entity_type, entity_id=entity_id, work=work)
    audit_logger.info("Version unpublish: %s#%s was version=%s", entity_type, entity_id, version_number)
    version_events.emit(
        VersionChange(entity_type=entity_type, entity_id=entity_id, action="unpublish", version_number=version_number)
    )
    return version_number


def current_version(db: Session, *, entity_type: str, entity_id: int) -> Optional[ContentVersion]:
    return snapshot_store.current(db, entity_type=entity_type, entity_id=entity_id)


def latest_published_version(db: Session, *, entity_type: str, entity_id: int) -> Optional[ContentVersion]:
    return snapshot_store.published(db, entity_type=entity_type, entity_id=entity_id)


def find_version(db: Session, *, entity_type: str, entity_id: int, version_number: int) -> Optional[ContentVersion]:
    return snapshot_store.find(db, entity_type=entity_type, entity_id=entity_id, version_number=version_number)


def get_version(db: Session, *, entity_type: str, entity_id: int, version_number: int) -> ContentVersion:
    row = find_version(db, entity_type=entity_type, entity_id=entity_id, version_number=version_number)
    if row is None:
        raise VersionNotFoundError()
    return row


def get_version_history(
    db: Session,
    *,
    entity_type: str,
    entity_id: int,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[ContentVersion], int]:
    rows = snapshot_store.list_by_entity(
        db, entity_type=entity_type, entity_id=entity_id, limit=limit, offset=offset,
    )
    total = snapshot_store.count_by_entity(db, entity_type=entity_type, entity_id=entity_id)
    return rows, total


def version_count(db: Session, *, entity_type: str, entity_id: int) -> int:
    return snapshot_store.count_by_entity(db, entity_type=entity_type, entity_id=entity_id)


def has_multiple_versions(db: Session, *, entity_type: str, entity_id: int) -> bool:
    return version_count(db, entity_type=entity_type, entity_id=entity_id) > 1


def changes_summary(db: Session, row: ContentVersion) -> str:
    if row.change_summary:
        return row.change_summary
    prior = snapshot_store.previous(
        db, entity_type=row.entity_type, entity_id=row.entity_id, version_number=row.version_number,
    )
    if prior is None:
        return INITIAL_SUMMARY
    return diff_service.summarize_differences(
        diff_service.calculate_differences(prior.payload or {}, row.payload or {})
    )
