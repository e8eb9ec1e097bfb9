"""콘텐츠 버전 스냅샷의 추가 전용(append-only) 저장소 접근 계층입니다.

정책은 두지 않는다. 버전 번호 할당, 플래그 이동, 엔티티별 리비전 CAS만 담당하며
커밋은 호출자(version_service)가 하나의 트랜잭션으로 수행한다.
"""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from cms.models.content_version import ContentVersion, ContentVersionCounter
from cms.utils.exceptions import VersionConflict


def _for_entity(db: Session, entity_type: str, entity_id: int):
    return db.query(ContentVersion).filter(
        ContentVersion.entity_type == entity_type,
        ContentVersion.entity_id == entity_id,
    )


def claim_revision(db: Session, *, entity_type: str, entity_id: int) -> ContentVersionCounter:
    """Bump the entity's revision with a conditional update.

    Raises VersionConflict when another transaction changed the revision
    between our read and our write, or created the counter row first.
    """
    counter = db.get(ContentVersionCounter, (entity_type, entity_id), populate_existing=True)
    if counter is None:
        seed = (
            db.query(func.max(ContentVersion.version_number))
            .filter(
                ContentVersion.entity_type == entity_type,
                ContentVersion.entity_id == entity_id,
            )
            .scalar()
        )
        counter = ContentVersionCounter(
            entity_type=entity_type,
            entity_id=entity_id,
            last_version_number=seed or 0,
            revision=1,
        )
        db.add(counter)
        try:
            db.flush()
        except IntegrityError as exc:
            raise VersionConflict(entity_type, entity_id) from exc
        return counter

    seen = counter.revision
    result = db.execute(
        update(ContentVersionCounter)
        .where(
            ContentVersionCounter.entity_type == entity_type,
            ContentVersionCounter.entity_id == entity_id,
            ContentVersionCounter.revision == seen,
        )
        .values(revision=seen + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise VersionConflict(entity_type, entity_id)
    db.refresh(counter)
    return counter


def append(
    db: Session,
    *,
    counter: ContentVersionCounter,
    payload: Dict[str, Any],
    author_id: Optional[int],
    change_summary: Optional[str] = None,
    change_notes: Optional[str] = None,
) -> ContentVersion:
    # 엔티티 변경분은 여기서 먼저 내보낸다. 그 IntegrityError는 리비전 충돌이 아니다.
    db.flush()

    version_number = counter.last_version_number + 1
    counter.last_version_number = version_number

    row = ContentVersion(
        entity_type=counter.entity_type,
        entity_id=counter.entity_id,
        version_number=version_number,
        payload=copy.deepcopy(payload),
        author_id=author_id,
        change_summary=change_summary,
        change_notes=change_notes,
        is_current=False,
        is_published=False,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError as exc:
        # 유니크 제약 (entity_type, entity_id, version_number) 이 CAS의 마지막 방어선이다.
        raise VersionConflict(counter.entity_type, counter.entity_id) from exc
    return row


def list_by_entity(
    db: Session,
    *,
    entity_type: str,
    entity_id: int,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[ContentVersion]:
    q = (
        _for_entity(db, entity_type, entity_id)
        .options(joinedload(ContentVersion.author))
        .order_by(ContentVersion.version_number.desc())
    )
    if offset:
        q = q.offset(offset)
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def count_by_entity(db: Session, *, entity_type: str, entity_id: int) -> int:
    return _for_entity(db, entity_type, entity_id).count()


def find(db: Session, *, entity_type: str, entity_id: int, version_number: int) -> Optional[ContentVersion]:
    return (
        _for_entity(db, entity_type, entity_id)
        .filter(ContentVersion.version_number == version_number)
        .first()
    )


def previous(db: Session, *, entity_type: str, entity_id: int, version_number: int) -> Optional[ContentVersion]:
    return (
        _for_entity(db, entity_type, entity_id)
        .filter(ContentVersion.version_number < version_number)
        .order_by(ContentVersion.version_number.desc())
        .first()
    )


def current(db: Session, *, entity_type: str, entity_id: int) -> Optional[ContentVersion]:
    return _for_entity(db, entity_type, entity_id).filter(ContentVersion.is_current == True).first()  # noqa: E712


def published(db: Session, *, entity_type: str, entity_id: int) -> Optional[ContentVersion]:
    return _for_entity(db, entity_type, entity_id).filter(ContentVersion.is_published == True).first()  # noqa: E712


def set_current(db: Session, *, entity_type: str, entity_id: int, version_number: int) -> None:
    _for_entity(db, entity_type, entity_id).filter(
        ContentVersion.is_current == True,  # noqa: E712
        ContentVersion.version_number != version_number,
    ).update({ContentVersion.is_current: False}, synchronize_session="fetch")
    _for_entity(db, entity_type, entity_id).filter(
        ContentVersion.version_number == version_number,
    ).update({ContentVersion.is_current: True}, synchronize_session="fetch")
    db.flush()


def set_published(
    db: Session,
    *,
    entity_type: str,
    entity_id: int,
    version_number: Optional[int],
    published_at: Optional[datetime] = None,
) -> None:
    # published_at은 이전 게시본에서 지우지 않는다. "마지막으로 공개되었던 시각"으로 남긴다.
    holders = _for_entity(db, entity_type, entity_id).filter(ContentVersion.is_published == True)  # noqa: E712
    if version_number is not None:
        holders = holders.filter(ContentVersion.version_number != version_number)
    holders.update({ContentVersion.is_published: False}, synchronize_session="fetch")

    if version_number is not None:
        _for_entity(db, entity_type, entity_id).filter(
            ContentVersion.version_number == version_number,
            ContentVersion.is_published == False,  # noqa: E712
        ).update(
            {ContentVersion.is_published: True, ContentVersion.published_at: published_at},
            synchronize_session="fetch",
        )
    db.flush()
