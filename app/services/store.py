"""
Named operations against the response store. Each call is its own unit of
work: it commits on success, rolls back and raises BackendError on failure.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.extensions import db
from app.models import Question, Response, User
from app.observability import log_event
from .errors import BackendError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def new_response_id() -> str:
    return str(uuid.uuid4())


def _fail(op: str, exc: Exception) -> BackendError:
    db.session.rollback()
    logger.exception("store op failed: %s (%s)", op, type(exc).__name__)
    return BackendError(f"{op} failed")


# --- reads -------------------------------------------------------------------

def list_questions() -> List[Question]:
    try:
        return db.session.execute(db.select(Question).order_by(Question.id)).scalars().all()
    except SQLAlchemyError as exc:
        raise _fail("list_questions", exc) from exc


def get_question(question_id: int) -> Optional[Question]:
    try:
        return db.session.get(Question, question_id)
    except SQLAlchemyError as exc:
        raise _fail("get_question", exc) from exc


def list_responses() -> List[Response]:
    try:
        return db.session.execute(db.select(Response).order_by(Response.created_at, Response.id)).scalars().all()
    except SQLAlchemyError as exc:
        raise _fail("list_responses", exc) from exc


def list_active_users() -> List[User]:
    try:
        return db.session.execute(
            db.select(User).where(User.is_active.is_(True)).order_by(User.display_name, User.id)
        ).scalars().all()
    except SQLAlchemyError as exc:
        raise _fail("list_active_users", exc) from exc


def get_user(user_id: int) -> Optional[User]:
    try:
        return db.session.get(User, user_id)
    except SQLAlchemyError as exc:
        raise _fail("get_user", exc) from exc


def leaderboard() -> List[User]:
    """Active users by descending submission count; name breaks ties."""
    try:
        return db.session.execute(
            db.select(User)
            .where(User.is_active.is_(True))
            .order_by(User.submission_count.desc(), User.display_name, User.id)
        ).scalars().all()
    except SQLAlchemyError as exc:
        raise _fail("leaderboard", exc) from exc


def export_rows() -> List[tuple]:
    """(Response, User) pairs for CSV export, oldest first."""
    try:
        return db.session.execute(
            db.select(Response, User)
            .join(User, User.id == Response.user_id)
            .order_by(Response.created_at, Response.id)
        ).all()
    except SQLAlchemyError as exc:
        raise _fail("export_rows", exc) from exc


# --- writes ------------------------------------------------------------------

def insert_response(
    *,
    response_id: str,
    user_id: int,
    question_id: int,
    sentiment: str,
    feedback: str,
    skipped: bool,
) -> Response:
    """Append one response row. A duplicate id is rejected, never overwritten."""
    row = Response(
        id=response_id,
        user_id=user_id,
        question_id=question_id,
        sentiment=sentiment,
        feedback=feedback,
        skipped=skipped,
    )
    try:
        db.session.add(row)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("insert_response rejected id=%s: %s", response_id, exc.orig)
        raise BackendError(f"Response {response_id} could not be stored") from exc
    except SQLAlchemyError as exc:
        raise _fail("insert_response", exc) from exc
    return row


def _increment_count(user_id: int) -> None:
    # Server-side +1; concurrent increments can't lose updates
    result = db.session.execute(
        db.update(User)
        .where(User.id == user_id)
        .values(submission_count=User.submission_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise BackendError(f"User {user_id} not found for count increment")


def increment_submission_count(user_id: int) -> None:
    try:
        _increment_count(user_id)
        db.session.commit()
    except SQLAlchemyError as exc:
        raise _fail("increment_submission_count", exc) from exc
    except BackendError:
        db.session.rollback()
        raise


def _mark_answered_bulk(question_id: int) -> None:
    result = db.session.execute(
        db.update(Question)
        .where(Question.id == question_id)
        .values(answered=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise BackendError(f"Question {question_id} not updated")


def _mark_answered_row(question_id: int) -> None:
    q = db.session.get(Question, question_id)
    if q is None:
        raise BackendError(f"Question {question_id} not found")
    q.answered = True


def _with_fallback(op: str, primary: Callable[[], T], fallback: Callable[[], T]) -> T:
    """
    Try primary; on failure roll back, log, try fallback; on failure raise
    BackendError. Each callable is a whole unit of work and commits itself,
    so a rolled-back primary leaves nothing behind.
    """
    try:
        return primary()
    except (SQLAlchemyError, BackendError) as exc:
        db.session.rollback()
        log_event("store_fallback", level=logging.WARNING, op=op, reason=type(exc).__name__)
    try:
        return fallback()
    except (SQLAlchemyError, BackendError) as exc:
        raise _fail(op, exc) from exc


def _committed(*steps: Callable[[], None]) -> Callable[[], None]:
    def run() -> None:
        for step in steps:
            step()
        db.session.commit()
    return run


def mark_question_answered(question_id: int) -> None:
    """Idempotent: tagging an already-answered question leaves it answered."""
    _with_fallback(
        "mark_question_answered",
        _committed(lambda: _mark_answered_bulk(question_id)),
        _committed(lambda: _mark_answered_row(question_id)),
    )


def record_tag(*, response_id: str, user_id: int, question_id: int, sentiment: str, feedback: str) -> None:
    """
    Append a tagged response, bump the user's count and mark the question
    answered in one transaction: either all three land or none do.
    """
    def add_row() -> None:
        db.session.add(Response(
            id=response_id,
            user_id=user_id,
            question_id=question_id,
            sentiment=sentiment,
            feedback=feedback,
            skipped=False,
        ))
        db.session.flush()

    _with_fallback(
        "record_tag",
        _committed(add_row, lambda: _increment_count(user_id), lambda: _mark_answered_bulk(question_id)),
        _committed(add_row, lambda: _increment_count(user_id), lambda: _mark_answered_row(question_id)),
    )


def create_user(display_name: str) -> User:
    user = User(display_name=display_name, submission_count=0, is_active=True)
    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as exc:
        raise _fail("create_user", exc) from exc
    return user


def rename_user(user_id: int, display_name: str) -> User:
    try:
        user = db.session.get(User, user_id)
        if user is None:
            raise BackendError(f"User {user_id} not found")
        user.display_name = display_name
        db.session.commit()
    except SQLAlchemyError as exc:
        raise _fail("rename_user", exc) from exc
    return user


def recount_submissions() -> int:
    """Rebuild every user's count from tagged (non-skipped) responses. Returns users touched."""
    try:
        counts = dict(
            db.session.execute(
                db.select(Response.user_id, db.func.count(Response.id))
                .where(Response.skipped.is_(False))
                .group_by(Response.user_id)
            ).all()
        )
        users = db.session.execute(db.select(User)).scalars().all()
        for u in users:
            u.submission_count = int(counts.get(u.id, 0))
        db.session.commit()
        return len(users)
    except SQLAlchemyError as exc:
        raise _fail("recount_submissions", exc) from exc
