"""
Question rotation: which question a user sees next, and how far along we are.

Everything here is pure. Inputs are read-only snapshots (ORM rows or anything
with the same attributes):

    question: .id, .answered (True / False / None)
    response: .user_id, .question_id, .created_at, .skipped

Persisting the new response and the answered flag is the caller's job, done
before the next call so the snapshot reflects it.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from .errors import InvalidState

POLICY_GLOBAL = "global"
POLICY_PER_USER = "per_user"
POLICIES = (POLICY_GLOBAL, POLICY_PER_USER)


def _require_questions(questions: Sequence) -> None:
    if not questions:
        raise InvalidState("Cannot rotate over an empty question list")


def _known(question_id: Optional[int], questions: Sequence) -> bool:
    return bool(question_id) and any(q.id == question_id for q in questions)


def select_next_global(current_question_id: Optional[int], questions: Sequence) -> int:
    """
    First unanswered question by ascending id, skipping the current one so the
    screen changes after a submit. Answered is global: one tag by anyone retires
    the question.

    If the current question is the only one left it comes back again. If none
    are left the current id is returned unchanged; detecting "all done" is up to
    the caller (see global_progress).
    """
    _require_questions(questions)
    ordered = sorted(questions, key=lambda q: q.id)
    unanswered = [q for q in ordered if not q.answered]

    for q in unanswered:
        if q.id != current_question_id:
            return q.id
    if unanswered:
        return unanswered[0].id

    if _known(current_question_id, questions):
        return current_question_id
    return ordered[0].id


def select_next_per_user(
    user_id: Optional[int],
    current_question_id: Optional[int],
    questions: Sequence,
    responses: Iterable,
) -> int:
    """
    Walk the list in its given order, one user at a time.

    - no history yet: stay on the current question (or start at the first)
    - otherwise: first question this user hasn't responded to
    - everything done: resurface the one they responded to longest ago
    """
    _require_questions(questions)
    if user_id is None:
        raise InvalidState("Per-user rotation needs a user")

    mine = [r for r in responses if r.user_id == user_id]
    if not mine:
        if _known(current_question_id, questions):
            return current_question_id
        return questions[0].id

    seen = {r.question_id for r in mine}
    for q in questions:
        if q.id not in seen:
            return q.id

    oldest = min(mine, key=lambda r: r.created_at)
    if _known(oldest.question_id, questions):
        return oldest.question_id
    return questions[0].id


def select_next(
    policy: str,
    user_id: Optional[int],
    current_question_id: Optional[int],
    questions: Sequence,
    responses: Iterable,
) -> int:
    if policy == POLICY_PER_USER:
        return select_next_per_user(user_id, current_question_id, questions, responses)
    if policy == POLICY_GLOBAL:
        return select_next_global(current_question_id, questions)
    raise InvalidState(f"Unknown rotation policy {policy!r}")


def _percent(done: int, total: int) -> int:
    if total <= 0:
        return 0
    pct = (Decimal(done) * 100 / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, min(100, int(pct)))


def global_progress(questions: Sequence, responses: Iterable) -> int:
    """Share of questions (0-100) that anyone has tagged. Skips don't count."""
    tagged = {r.question_id for r in responses if not getattr(r, "skipped", False)}
    return _percent(len(tagged & {q.id for q in questions}), len(questions))


def user_progress(user_id: Optional[int], questions: Sequence, responses: Iterable) -> int:
    if user_id is None:
        return 0
    mine = [r for r in responses if r.user_id == user_id]
    return global_progress(questions, mine)


def progress_for(policy: str, user_id: Optional[int], questions: Sequence, responses: Iterable) -> int:
    """The percentage whose 100 means "done" under the given policy."""
    if policy == POLICY_PER_USER:
        return user_progress(user_id, questions, responses)
    return global_progress(questions, responses)
