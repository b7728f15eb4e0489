"""Everything the tagging screen (or its JSON twin) needs, in one read pass."""
from __future__ import annotations

from typing import Optional

from flask import session

from . import rotation, store
from .errors import InvalidState
from .submission import rotation_policy

CURRENT_QUESTION_KEY = "current_question_id"
CURRENT_QUESTION_USER_KEY = "current_question_user_id"


def _celebration_key(policy: str, user_id: Optional[int]) -> str:
    scope = user_id if policy == rotation.POLICY_PER_USER else "all"
    return f"celebrated:{policy}:{scope}"


def claim_celebration(completed: bool, user_id: Optional[int]) -> bool:
    """True exactly once per gate session (and per user under per-user rotation)."""
    if not completed:
        return False
    key = _celebration_key(rotation_policy(), user_id)
    if session.get(key):
        return False
    session[key] = True
    return True


def remember_question(question_id: Optional[int], user_id: Optional[int] = None) -> None:
    if question_id:
        session[CURRENT_QUESTION_KEY] = question_id
        session[CURRENT_QUESTION_USER_KEY] = user_id
    else:
        session.pop(CURRENT_QUESTION_KEY, None)
        session.pop(CURRENT_QUESTION_USER_KEY, None)


def load_state(user_id: Optional[int]) -> dict:
    """
    The question on screen only changes after a submit or skip, so a stored
    current question wins as long as it still exists.
    """
    policy = rotation_policy()
    questions = store.list_questions()
    responses = store.list_responses()
    users = store.list_active_users()
    board = store.leaderboard()

    by_id = {q.id: q for q in questions}
    selected = next((u for u in users if u.id == user_id), None)
    uid = selected.id if selected else None

    question = by_id.get(session.get(CURRENT_QUESTION_KEY))
    # Per-user rotation picked that question for one user; switching users re-picks
    if policy == rotation.POLICY_PER_USER and session.get(CURRENT_QUESTION_USER_KEY) != uid:
        question = None
    notice = None
    if question is None:
        try:
            if policy == rotation.POLICY_PER_USER and uid is None:
                if not questions:
                    raise InvalidState("Cannot rotate over an empty question list")
                question = questions[0]
            else:
                question = by_id.get(rotation.select_next(policy, uid, None, questions, responses))
        except InvalidState as exc:
            notice = exc.public_message
        remember_question(question.id if question else None, uid)

    progress = rotation.progress_for(policy, uid, questions, responses)
    return {
        "policy": policy,
        "users": [u.to_dict() for u in users],
        "selected_user": selected.to_dict() if selected else None,
        "question": question.to_dict() if question else None,
        "leaderboard": [u.to_dict() for u in board],
        "progress": progress,
        "completed": bool(questions) and progress >= 100,
        "total_questions": len(questions),
        "notice": notice,
    }
