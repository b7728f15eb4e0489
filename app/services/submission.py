from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from flask import current_app

from app.models import SENTIMENT_CHOICES, FEEDBACK_CHOICES, NOT_APPLICABLE
from app.observability import log_event
from app.utils.helpers import to_int_or_none
from . import rotation, store
from .errors import NotFound, ValidationError


@dataclass(frozen=True)
class Submission:
    user_id: int
    question_id: int
    sentiment: str
    feedback: str
    skipped: bool


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submit. `recorded` means a response row was written; `progress` follows the active policy."""
    recorded: bool
    response_id: Optional[str]
    next_question_id: int
    progress: int
    completed: bool


def rotation_policy() -> str:
    policy = (current_app.config.get("ROTATION_POLICY") or rotation.POLICY_GLOBAL).lower()
    return policy if policy in rotation.POLICIES else rotation.POLICY_GLOBAL


def persist_skips() -> bool:
    # Per-user rotation only moves past a skipped question if the skip is on record
    return bool(current_app.config.get("PERSIST_SKIPS")) or rotation_policy() == rotation.POLICY_PER_USER


def validate_submission(user_id: Any, question_id: Any, sentiment: Any, feedback: Any, skipped: bool) -> Submission:
    """Pure input check; never touches the store."""
    uid = to_int_or_none(user_id)
    if uid is None:
        raise ValidationError("Please select a user first")
    qid = to_int_or_none(question_id)
    if qid is None:
        raise ValidationError("No question is being shown")

    if skipped:
        return Submission(uid, qid, NOT_APPLICABLE, NOT_APPLICABLE, True)

    # JSON bodies can carry numbers or lists here
    if not isinstance(sentiment or "", str) or not isinstance(feedback or "", str):
        raise ValidationError("Please select both sentiment and feedback options")
    sentiment = (sentiment or "").strip()
    feedback = (feedback or "").strip()
    if not sentiment or not feedback:
        raise ValidationError("Please select both sentiment and feedback options")
    if sentiment not in SENTIMENT_CHOICES:
        raise ValidationError(f"Unknown sentiment {sentiment!r}")
    if feedback not in FEEDBACK_CHOICES:
        raise ValidationError(f"Unknown feedback category {feedback!r}")
    return Submission(uid, qid, sentiment, feedback, False)


def record_submission(user_id: Any, question_id: Any, sentiment: Any = None, feedback: Any = None,
                      skipped: bool = False) -> SubmissionResult:
    sub = validate_submission(user_id, question_id, sentiment, feedback, skipped)

    user = store.get_user(sub.user_id)
    if user is None or not user.is_active:
        raise ValidationError("Unknown user")
    if store.get_question(sub.question_id) is None:
        raise NotFound("That question no longer exists")

    response_id = None
    if not sub.skipped:
        response_id = store.new_response_id()
        store.record_tag(
            response_id=response_id,
            user_id=sub.user_id,
            question_id=sub.question_id,
            sentiment=sub.sentiment,
            feedback=sub.feedback,
        )
        log_event("response_recorded", user_id=sub.user_id, question_id=sub.question_id,
                  sentiment=sub.sentiment, feedback=sub.feedback)
    elif persist_skips():
        response_id = store.new_response_id()
        store.insert_response(
            response_id=response_id,
            user_id=sub.user_id,
            question_id=sub.question_id,
            sentiment=NOT_APPLICABLE,
            feedback=NOT_APPLICABLE,
            skipped=True,
        )
        log_event("response_skipped", user_id=sub.user_id, question_id=sub.question_id, persisted=True)
    else:
        log_event("response_skipped", user_id=sub.user_id, question_id=sub.question_id, persisted=False)

    # Re-read so the selector sees the writes above
    policy = rotation_policy()
    questions = store.list_questions()
    responses = store.list_responses()
    next_id = rotation.select_next(policy, sub.user_id, sub.question_id, questions, responses)
    progress = rotation.progress_for(policy, sub.user_id, questions, responses)

    return SubmissionResult(
        recorded=response_id is not None,
        response_id=response_id,
        next_question_id=next_id,
        progress=progress,
        completed=progress >= 100,
    )
