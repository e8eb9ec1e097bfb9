"""버전 엔진의 현재본/게시본 불변식, 복원, 초안, 재시도 동작을 검증하는 자동화 테스트입니다."""

import threading
from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from cms.config import settings
from cms.models.article import Article
from cms.models.content_version import ContentVersion
from cms.services import content_adapters, snapshot_store, version_events, version_service
from cms.utils.exceptions import (
    ConcurrentModificationError,
    ContentValidationError,
    UnsupportedOperationError,
    VersionConflict,
    VersionNotFoundError,
)
from tests.conftest import TestingSession

ARTICLE = content_adapters.ARTICLE


def _rows(db, entity):
    db.expire_all()
    return (
        db.query(ContentVersion)
        .filter(ContentVersion.entity_type == ARTICLE.kind, ContentVersion.entity_id == entity.article_id)
        .order_by(ContentVersion.version_number)
        .all()
    )


def _assert_flag_invariants(db, entity):
    rows = _rows(db, entity)
    assert sum(1 for r in rows if r.is_current) == 1
    assert sum(1 for r in rows if r.is_published) <= 1
    numbers = [r.version_number for r in rows]
    assert numbers == list(range(1, len(rows) + 1))


def _save(db, entity, user, **changes):
    return version_service.create_version(
        db, adapter=ARTICLE, entity=entity, author_id=user.user_id, changes=changes,
    )


def test_create_version_becomes_current(db, article, seed_users):
    editor = seed_users["editor"]
    second = _save(db, article, editor, title="Final")

    current = version_service.current_version(db, entity_type="insight", entity_id=article.article_id)
    assert current.version_number == second.version_number == 2
    assert current.payload["title"] == "Final"
    assert current.author_id == editor.user_id
    _assert_flag_invariants(db, article)


def test_restore_appends_a_new_current_version(db, article, seed_users):
    editor = seed_users["editor"]
    _save(db, article, editor, title="Final")
    before = {r.version_number: dict(r.payload) for r in _rows(db, article)}

    restored = version_service.restore_to_version(
        db, adapter=ARTICLE, entity=article, version_number=1, author_id=editor.user_id,
    )

    assert restored.version_number == 3
    assert restored.payload == before[1]
    assert restored.change_summary == "Restored to version 1"
    assert article.title == "Draft"
    assert version_service.current_version(db, entity_type="insight", entity_id=article.article_id).version_number == 3

    after = {r.version_number: dict(r.payload) for r in _rows(db, article)}
    assert after[1] == before[1]
    assert after[2] == before[2]
    _assert_flag_invariants(db, article)


def test_restore_unknown_version_raises_and_writes_nothing(db, article, seed_users):
    with pytest.raises(VersionNotFoundError):
        version_service.restore_to_version(
            db, adapter=ARTICLE, entity=article, version_number=42, author_id=seed_users["editor"].user_id,
        )
    assert len(_rows(db, article)) == 1


def test_publish_moves_flag_and_keeps_history(db, article, seed_users):
    _save(db, article, seed_users["editor"], title="Final")
    first_live = datetime(2026, 3, 1, 10, 0, 0)
    second_live = datetime(2026, 3, 2, 10, 0, 0)

    version_service.publish_version(db, adapter=ARTICLE, entity=article, version_number=2, now=first_live)
    published = version_service.publish_version(db, adapter=ARTICLE, entity=article, version_number=1, now=second_live)

    assert published.version_number == 1
    rows = {r.version_number: r for r in _rows(db, article)}
    assert rows[1].is_published is True
    assert rows[1].published_at == second_live
    assert rows[2].is_published is False
    assert rows[2].published_at == first_live
    # 게시본과 편집 중인 현재본은 독립적이다.
    assert rows[2].is_current is True
    assert article.is_published is True
    assert article.published_at == second_live
    _assert_flag_invariants(db, article)


def test_publish_unknown_version_raises(db, article):
    with pytest.raises(VersionNotFoundError):
        version_service.publish_version(db, adapter=ARTICLE, entity=article, version_number=9)
    assert version_service.latest_published_version(db, entity_type="insight", entity_id=article.article_id) is None


def test_unpublish_clears_live_version(db, article):
    version_service.publish_version(db, adapter=ARTICLE, entity=article, version_number=1)
    assert version_service.unpublish(db, adapter=ARTICLE, entity=article) == 1
    assert version_service.latest_published_version(db, entity_type="insight", entity_id=article.article_id) is None
    assert article.is_published is False
    assert version_service.unpublish(db, adapter=ARTICLE, entity=article) is None


def test_draft_does_not_move_current_or_published(db, article, seed_users):
    version_service.publish_version(db, adapter=ARTICLE, entity=article, version_number=1)

    draft = version_service.create_draft(
        db,
        adapter=ARTICLE,
        entity=article,
        data={"title": "Next headline", "tags": ["x", "y"]},
        author_id=seed_users["author"].user_id,
        change_notes="waiting for review",
    )

    assert draft.version_number == 2
    assert draft.is_current is False
    assert draft.is_published is False
    assert draft.change_summary == "Draft version"
    assert draft.payload["title"] == "Next headline"
    assert draft.payload["slug"] == "hello-world"
    assert article.title == "Draft"
    assert version_service.current_version(db, entity_type="insight", entity_id=article.article_id).version_number == 1
    assert version_service.latest_published_version(db, entity_type="insight", entity_id=article.article_id).version_number == 1

    # 초안 이후 저장도 같은 번호 체계를 이어간다.
    assert _save(db, article, seed_users["editor"], title="Saved").version_number == 3
    _assert_flag_invariants(db, article)


def test_draft_rejected_for_kinds_without_drafts(db, seed_users):
    adapter = content_adapters.SERVICE
    entity = adapter.model()
    adapter.apply(entity, {"title": "SEO", "slug": "seo"})
    db.add(entity)
    db.commit()
    version_service.create_version(db, adapter=adapter, entity=entity, author_id=None)

    with pytest.raises(UnsupportedOperationError):
        version_service.create_draft(db, adapter=adapter, entity=entity, data={"title": "x"}, author_id=None)
    assert version_service.version_count(db, entity_type="service", entity_id=entity.service_id) == 1


def test_malformed_draft_rejected_before_write(db, article):
    with pytest.raises(ContentValidationError):
        version_service.create_draft(db, adapter=ARTICLE, entity=article, data={"headline": "x"}, author_id=None)
    with pytest.raises(ContentValidationError):
        version_service.create_draft(db, adapter=ARTICLE, entity=article, data=["title"], author_id=None)
    with pytest.raises(ContentValidationError):
        version_service.create_draft(db, adapter=ARTICLE, entity=article, data={"reading_time": -1}, author_id=None)
    assert version_service.version_count(db, entity_type="insight", entity_id=article.article_id) == 1


def test_version_numbers_never_reused(db, article, seed_users):
    editor = seed_users["editor"]
    _save(db, article, editor, title="Two")
    version_service.create_draft(db, adapter=ARTICLE, entity=article, data={"title": "Three"}, author_id=None)
    version_service.restore_to_version(db, adapter=ARTICLE, entity=article, version_number=1, author_id=None)
    _save(db, article, editor, title="Five")

    assert [r.version_number for r in _rows(db, article)] == [1, 2, 3, 4, 5]
    assert version_service.has_multiple_versions(db, entity_type="insight", entity_id=article.article_id)
    _assert_flag_invariants(db, article)


def test_save_changes_skips_insignificant_saves(db, article, seed_users):
    assert version_service.save_changes(
        db, adapter=ARTICLE, entity=article, changes={"title": "Draft"}, author_id=None,
    ) is None
    assert version_service.version_count(db, entity_type="insight", entity_id=article.article_id) == 1

    row = version_service.save_changes(
        db, adapter=ARTICLE, entity=article, changes={"excerpt": "Intro"}, author_id=seed_users["editor"].user_id,
    )
    assert row.version_number == 2
    assert version_service.should_create_version({"views_count": 1}, {"views_count": 2}) is False


def test_changes_summary_is_derived_when_missing(db, article):
    version_service.create_version(
        db, adapter=ARTICLE, entity=article, author_id=None, changes={"excerpt": "Intro", "title": "Final"},
    )
    rows = _rows(db, article)

    assert version_service.changes_summary(db, rows[0]) == "Initial version"
    assert version_service.changes_summary(db, rows[1]) == "Updated title, Updated excerpt"

    unnamed = ContentVersion(entity_type="insight", entity_id=999, version_number=1, payload={})
    assert version_service.changes_summary(db, unnamed) == "Initial version"


def test_conflict_is_retried_transparently(db, article, monkeypatch):
    monkeypatch.setattr(settings, "VERSION_RETRY_BACKOFF_SECONDS", 0.0)
    real_claim = snapshot_store.claim_revision
    calls = []

    def flaky_claim(db_, **kwargs):
        calls.append(kwargs)
        if len(calls) == 1:
            raise VersionConflict(kwargs["entity_type"], kwargs["entity_id"])
        return real_claim(db_, **kwargs)

    monkeypatch.setattr(snapshot_store, "claim_revision", flaky_claim)

    row = version_service.create_version(
        db, adapter=ARTICLE, entity=article, author_id=None, changes={"title": "Retried"},
    )

    assert len(calls) == 2
    assert row.version_number == 2
    assert row.payload["title"] == "Retried"
    _assert_flag_invariants(db, article)


def test_exhausted_retries_surface_and_roll_back(db, article, monkeypatch):
    monkeypatch.setattr(settings, "VERSION_RETRY_BACKOFF_SECONDS", 0.0)
    monkeypatch.setattr(settings, "VERSION_WRITE_RETRIES", 2)

    def always_conflict(db_, **kwargs):
        raise VersionConflict(kwargs["entity_type"], kwargs["entity_id"])

    monkeypatch.setattr(snapshot_store, "claim_revision", always_conflict)

    with pytest.raises(ConcurrentModificationError):
        version_service.create_version(
            db, adapter=ARTICLE, entity=article, author_id=None, changes={"title": "Lost"},
        )

    monkeypatch.undo()
    assert article.title == "Draft"
    assert len(_rows(db, article)) == 1
    _assert_flag_invariants(db, article)


def test_listeners_are_notified_after_commit(db, article):
    seen = []
    version_events.subscribe(seen.append)

    def broken(change):
        raise RuntimeError("cache down")

    version_events.subscribe(broken)

    version_service.create_version(db, adapter=ARTICLE, entity=article, author_id=None, changes={"title": "New"})
    version_service.publish_version(db, adapter=ARTICLE, entity=article, version_number=2)

    assert [(c.action, c.version_number) for c in seen] == [("create", 2), ("publish", 2)]
    assert seen[0].entity_type == "insight"
    assert seen[0].entity_id == article.article_id


def test_restore_onto_taken_slug_raises_integrity_error(db, article, seed_users):
    _save(db, article, seed_users["editor"], slug="hello-world-old")
    other = ARTICLE.model()
    ARTICLE.apply(other, {"title": "Other", "slug": "hello-world"})
    version_service.create_initial_version(db, adapter=ARTICLE, entity=other, author_id=None)

    with pytest.raises(IntegrityError):
        version_service.restore_to_version(
            db, adapter=ARTICLE, entity=article, version_number=1, author_id=None,
        )

    assert [(r.version_number, r.is_current) for r in _rows(db, article)] == [(1, False), (2, True)]
    assert article.slug == "hello-world-old"


def test_initial_version_is_written_with_the_entity(db, seed_users):
    entity = ARTICLE.model()
    ARTICLE.apply(entity, {"title": "New", "slug": "new-post"})

    row = version_service.create_initial_version(
        db, adapter=ARTICLE, entity=entity, author_id=seed_users["editor"].user_id, change_notes="first cut",
    )

    assert row.version_number == 1
    assert row.is_current is True
    assert row.entity_id == entity.article_id
    assert row.change_summary == "Initial version"
    assert row.payload["slug"] == "new-post"


def test_initial_version_failure_leaves_no_entity(db, monkeypatch):
    monkeypatch.setattr(settings, "VERSION_RETRY_BACKOFF_SECONDS", 0.0)
    monkeypatch.setattr(settings, "VERSION_WRITE_RETRIES", 1)

    def always_conflict(db_, **kwargs):
        raise VersionConflict(kwargs["entity_type"], kwargs["entity_id"])

    monkeypatch.setattr(snapshot_store, "claim_revision", always_conflict)

    entity = ARTICLE.model()
    ARTICLE.apply(entity, {"title": "Orphan", "slug": "orphan"})
    with pytest.raises(ConcurrentModificationError):
        version_service.create_initial_version(db, adapter=ARTICLE, entity=entity, author_id=None)

    assert db.query(Article).filter(Article.slug == "orphan").count() == 0
    assert db.query(ContentVersion).count() == 0


def test_parallel_saves_from_separate_sessions(article, monkeypatch):
    monkeypatch.setattr(settings, "VERSION_RETRY_BACKOFF_SECONDS", 0.01)
    article_id = article.article_id
    writers = 8
    start = threading.Barrier(writers)
    outcomes = []
    lock = threading.Lock()

    def writer(n):
        session = TestingSession()
        try:
            entity = ARTICLE.get_or_404(session, article_id)
            start.wait()
            try:
                row = version_service.save_changes(
                    session, adapter=ARTICLE, entity=entity, changes={"title": f"Writer {n}"}, author_id=None,
                )
                result = ("saved", row.version_number)
            except (ConcurrentModificationError, OperationalError):
                # 503 또는 SQLite 잠금 대기 초과는 허용된다. 잃어버린 행이나 중복 번호는 허용되지 않는다.
                session.rollback()
                result = ("rejected", None)
            with lock:
                outcomes.append(result)
        finally:
            session.close()

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(writers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(outcomes) == writers
    saved = sorted(num for status, num in outcomes if status == "saved")
    assert saved

    check = TestingSession()
    try:
        rows = (
            check.query(ContentVersion)
            .filter(ContentVersion.entity_type == "insight", ContentVersion.entity_id == article_id)
            .order_by(ContentVersion.version_number)
            .all()
        )
        numbers = [r.version_number for r in rows]
        assert numbers == list(range(1, len(rows) + 1))
        assert numbers[1:] == saved
        currents = [r.version_number for r in rows if r.is_current]
        assert currents == [numbers[-1]]
    finally:
        check.close()
