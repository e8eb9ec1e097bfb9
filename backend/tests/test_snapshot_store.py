"""스냅샷 저장소의 번호 할당/플래그 이동/리비전 CAS 동작을 검증하는 자동화 테스트입니다."""

from datetime import datetime

import pytest
from sqlalchemy import update

from cms.models.content_version import ContentVersion, ContentVersionCounter
from cms.services import snapshot_store
from cms.utils.exceptions import VersionConflict

KIND = "insight"


def _append(db, entity_id, payload, *, current=False):
    counter = snapshot_store.claim_revision(db, entity_type=KIND, entity_id=entity_id)
    row = snapshot_store.append(db, counter=counter, payload=payload, author_id=None)
    if current:
        snapshot_store.set_current(db, entity_type=KIND, entity_id=entity_id, version_number=row.version_number)
    db.commit()
    return row


def test_version_numbers_start_at_one_per_entity(db):
    first = _append(db, 1, {"title": "a"})
    second = _append(db, 1, {"title": "b"})
    other = _append(db, 2, {"title": "c"})

    assert (first.version_number, second.version_number) == (1, 2)
    assert other.version_number == 1


def test_list_by_entity_is_newest_first_and_restartable(db):
    for title in ("a", "b", "c"):
        _append(db, 7, {"title": title})

    rows = snapshot_store.list_by_entity(db, entity_type=KIND, entity_id=7)
    assert [r.version_number for r in rows] == [3, 2, 1]
    assert [r.version_number for r in snapshot_store.list_by_entity(db, entity_type=KIND, entity_id=7)] == [3, 2, 1]

    page = snapshot_store.list_by_entity(db, entity_type=KIND, entity_id=7, limit=1, offset=1)
    assert [r.version_number for r in page] == [2]
    assert snapshot_store.count_by_entity(db, entity_type=KIND, entity_id=7) == 3


def test_payload_is_an_independent_copy(db):
    payload = {"tags": ["x"], "content": {"body": "v1"}}
    row = _append(db, 3, payload)

    payload["tags"].append("y")
    payload["content"]["body"] = "changed"
    db.expire_all()

    stored = snapshot_store.find(db, entity_type=KIND, entity_id=3, version_number=row.version_number)
    assert stored.payload == {"tags": ["x"], "content": {"body": "v1"}}


def test_set_current_moves_the_single_flag(db):
    _append(db, 4, {"title": "a"}, current=True)
    _append(db, 4, {"title": "b"}, current=True)

    snapshot_store.set_current(db, entity_type=KIND, entity_id=4, version_number=1)
    db.commit()

    currents = db.query(ContentVersion).filter(ContentVersion.entity_id == 4, ContentVersion.is_current == True).all()  # noqa: E712
    assert [r.version_number for r in currents] == [1]
    assert snapshot_store.current(db, entity_type=KIND, entity_id=4).version_number == 1


def test_set_published_keeps_old_published_at(db):
    _append(db, 5, {"title": "a"})
    _append(db, 5, {"title": "b"})
    first_live = datetime(2026, 1, 1, 9, 0, 0)
    second_live = datetime(2026, 2, 1, 9, 0, 0)

    snapshot_store.set_published(db, entity_type=KIND, entity_id=5, version_number=1, published_at=first_live)
    db.commit()
    snapshot_store.set_published(db, entity_type=KIND, entity_id=5, version_number=2, published_at=second_live)
    db.commit()

    v1 = snapshot_store.find(db, entity_type=KIND, entity_id=5, version_number=1)
    v2 = snapshot_store.find(db, entity_type=KIND, entity_id=5, version_number=2)
    assert v1.is_published is False
    assert v1.published_at == first_live
    assert v2.is_published is True
    assert v2.published_at == second_live

    snapshot_store.set_published(db, entity_type=KIND, entity_id=5, version_number=None)
    db.commit()
    assert snapshot_store.published(db, entity_type=KIND, entity_id=5) is None
    assert snapshot_store.find(db, entity_type=KIND, entity_id=5, version_number=2).published_at == second_live


def test_published_is_none_when_never_published(db):
    _append(db, 6, {"title": "a"}, current=True)
    assert snapshot_store.published(db, entity_type=KIND, entity_id=6) is None


def test_claim_revision_detects_stale_counter(db, monkeypatch):
    _append(db, 8, {"title": "a"})
    original_get = db.get

    def stale_get(*args, **kwargs):
        row = original_get(*args, **kwargs)
        # 다른 트랜잭션이 읽기와 쓰기 사이에 리비전을 올린 상황
        db.execute(
            update(ContentVersionCounter)
            .where(ContentVersionCounter.entity_type == KIND, ContentVersionCounter.entity_id == 8)
            .values(revision=ContentVersionCounter.revision + 1)
            .execution_options(synchronize_session=False)
        )
        return row

    monkeypatch.setattr(db, "get", stale_get)

    with pytest.raises(VersionConflict):
        snapshot_store.claim_revision(db, entity_type=KIND, entity_id=8)
    db.rollback()


def test_counter_seeds_from_existing_rows(db):
    db.add(ContentVersion(entity_type=KIND, entity_id=9, version_number=4, payload={"title": "legacy"}))
    db.commit()

    row = _append(db, 9, {"title": "next"})
    assert row.version_number == 5
