import logging

import pytest
from sqlalchemy.exc import OperationalError

from app.extensions import db
from app.models import Question, Response, User
from app.services import store
from app.services.errors import BackendError


def _insert(response_id, user_id, question_id, skipped=False):
    tag = ("N/A", "N/A") if skipped else ("Positive", "Praise")
    return store.insert_response(
        response_id=response_id,
        user_id=user_id,
        question_id=question_id,
        sentiment=tag[0],
        feedback=tag[1],
        skipped=skipped,
    )


def test_duplicate_response_id_is_rejected_not_overwritten(app, seeded):
    q1, q2, _ = seeded["questions"]
    with app.app_context():
        rid = store.new_response_id()
        _insert(rid, seeded["ann"], q1)
        db.session.expunge_all()
        with pytest.raises(BackendError):
            _insert(rid, seeded["ben"], q2)
        row = db.session.get(Response, rid)
        assert (row.user_id, row.question_id) == (seeded["ann"], q1)
        assert db.session.query(Response).count() == 1


def test_response_ids_are_unique():
    assert len({store.new_response_id() for _ in range(50)}) == 50


def test_increment_adds_exactly_one(app, seeded):
    with app.app_context():
        store.increment_submission_count(seeded["ann"])
        store.increment_submission_count(seeded["ann"])
        assert db.session.get(User, seeded["ann"]).submission_count == 2
        assert db.session.get(User, seeded["ben"]).submission_count == 0


def test_increment_unknown_user_fails(app):
    with app.app_context():
        with pytest.raises(BackendError):
            store.increment_submission_count(424242)


def test_mark_answered_is_idempotent(app, seeded):
    q1 = seeded["questions"][0]
    with app.app_context():
        store.mark_question_answered(q1)
        store.mark_question_answered(q1)
        assert db.session.get(Question, q1).answered is True


def test_mark_answered_falls_back_to_row_update(app, seeded, monkeypatch, caplog):
    q1 = seeded["questions"][0]

    def _broken(question_id):
        raise OperationalError("UPDATE questions", {}, Exception("bulk update refused"))

    monkeypatch.setattr(store, "_mark_answered_bulk", _broken)
    with app.app_context():
        with caplog.at_level(logging.WARNING):
            store.mark_question_answered(q1)
        assert db.session.get(Question, q1).answered is True
    assert any(getattr(r, "event", None) == "store_fallback" for r in caplog.records)


def test_mark_answered_raises_when_both_paths_fail(app, seeded, monkeypatch):
    def _broken(question_id):
        raise OperationalError("UPDATE questions", {}, Exception("down"))

    monkeypatch.setattr(store, "_mark_answered_bulk", _broken)
    monkeypatch.setattr(store, "_mark_answered_row", _broken)
    with app.app_context():
        with pytest.raises(BackendError):
            store.mark_question_answered(seeded["questions"][0])


def test_mark_answered_unknown_question_raises(app):
    with app.app_context():
        with pytest.raises(BackendError):
            store.mark_question_answered(31337)


def _tag(response_id, user_id, question_id):
    store.record_tag(
        response_id=response_id,
        user_id=user_id,
        question_id=question_id,
        sentiment="Neutral",
        feedback="Feedback",
    )


def test_record_tag_writes_row_count_and_answered_together(app, seeded):
    q1 = seeded["questions"][0]
    with app.app_context():
        rid = store.new_response_id()
        _tag(rid, seeded["ben"], q1)
        db.session.expunge_all()
        assert db.session.get(Response, rid).skipped is False
        assert db.session.get(User, seeded["ben"]).submission_count == 1
        assert db.session.get(Question, q1).answered is True


def test_record_tag_falls_back_without_doubling_the_write(app, seeded, monkeypatch, caplog):
    q1 = seeded["questions"][0]

    def _broken(question_id):
        raise OperationalError("UPDATE questions", {}, Exception("bulk update refused"))

    monkeypatch.setattr(store, "_mark_answered_bulk", _broken)
    with app.app_context():
        with caplog.at_level(logging.WARNING):
            _tag(store.new_response_id(), seeded["ann"], q1)
        db.session.expunge_all()
        assert db.session.query(Response).count() == 1
        assert db.session.get(User, seeded["ann"]).submission_count == 1
        assert db.session.get(Question, q1).answered is True
    assert any(getattr(r, "event", None) == "store_fallback" for r in caplog.records)


def test_record_tag_is_all_or_nothing(app, seeded, monkeypatch):
    q1 = seeded["questions"][0]

    def _broken(question_id):
        raise OperationalError("UPDATE questions", {}, Exception("down"))

    monkeypatch.setattr(store, "_mark_answered_bulk", _broken)
    monkeypatch.setattr(store, "_mark_answered_row", _broken)
    with app.app_context():
        with pytest.raises(BackendError):
            _tag(store.new_response_id(), seeded["ann"], q1)
        db.session.expunge_all()
        assert db.session.query(Response).count() == 0
        assert db.session.get(User, seeded["ann"]).submission_count == 0
        assert not db.session.get(Question, q1).answered


def test_record_tag_unknown_user_leaves_nothing(app, seeded):
    with app.app_context():
        with pytest.raises(BackendError):
            _tag(store.new_response_id(), 424242, seeded["questions"][0])
        assert db.session.query(Response).count() == 0


def test_leaderboard_sorted_by_count_then_name(app):
    with app.app_context():
        db.session.add_all([
            User(display_name="Cleo", submission_count=2, is_active=True),
            User(display_name="Abe", submission_count=2, is_active=True),
            User(display_name="Zed", submission_count=5, is_active=True),
            User(display_name="Old", submission_count=9, is_active=False),
        ])
        db.session.commit()
        assert [u.display_name for u in store.leaderboard()] == ["Zed", "Abe", "Cleo"]


def test_rename_keeps_identity_and_count(app, seeded):
    with app.app_context():
        store.increment_submission_count(seeded["ann"])
        user = store.rename_user(seeded["ann"], "Annie")
        assert (user.id, user.display_name, user.submission_count) == (seeded["ann"], "Annie", 1)
        with pytest.raises(BackendError):
            store.rename_user(999_999, "Nobody")


def test_recount_rebuilds_from_tagged_responses(app, seeded):
    q1, q2, q3 = seeded["questions"]
    with app.app_context():
        _insert(store.new_response_id(), seeded["ann"], q1)
        _insert(store.new_response_id(), seeded["ann"], q2)
        _insert(store.new_response_id(), seeded["ann"], q3, skipped=True)
        db.session.get(User, seeded["ben"]).submission_count = 7
        db.session.commit()

        assert store.recount_submissions() == 2
        assert db.session.get(User, seeded["ann"]).submission_count == 2
        assert db.session.get(User, seeded["ben"]).submission_count == 0


def test_export_rows_pairs_response_with_user(app, seeded):
    q1 = seeded["questions"][0]
    with app.app_context():
        rid = store.new_response_id()
        _insert(rid, seeded["ben"], q1)
        rows = store.export_rows()
        assert len(rows) == 1
        resp, user = rows[0]
        assert resp.id == rid
        assert user.display_name == "Ben"
