from .user import User
from .question import Question
from .response import (
    Response,
    SENTIMENT_CHOICES,
    FEEDBACK_CHOICES,
    NOT_APPLICABLE,
)

__all__ = [
    "User",
    "Question",
    "Response",
    "SENTIMENT_CHOICES",
    "FEEDBACK_CHOICES",
    "NOT_APPLICABLE",
]
