from datetime import datetime, timezone
from sqlalchemy import CheckConstraint
from app.extensions import db

# Plain text + CHECK instead of a DB enum so the vocabularies can evolve
SENTIMENT_POSITIVE = "Positive"
SENTIMENT_NEUTRAL = "Neutral"
SENTIMENT_NEGATIVE = "Negative"
FEEDBACK_PRAISE = "Praise"
FEEDBACK_FEEDBACK = "Feedback"
FEEDBACK_CRITICISM = "Criticism"
NOT_APPLICABLE = "N/A"

# N/A is a pickable tag as well as the value written for a skip
SENTIMENT_CHOICES = (SENTIMENT_POSITIVE, SENTIMENT_NEUTRAL, SENTIMENT_NEGATIVE, NOT_APPLICABLE)
FEEDBACK_CHOICES = (FEEDBACK_PRAISE, FEEDBACK_FEEDBACK, FEEDBACK_CRITICISM, NOT_APPLICABLE)


def _utcnow():
    return datetime.now(timezone.utc)


class Response(db.Model):
    """One user's tag (or recorded skip) for one question. Append-only."""
    __tablename__ = "responses"

    id = db.Column(db.String(36), primary_key=True)  # uuid4 string issued by the caller
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey("questions.id", ondelete="RESTRICT"), nullable=False, index=True)
    sentiment = db.Column(db.String(16), nullable=False)
    feedback = db.Column(db.String(16), nullable=False)
    skipped = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    __table_args__ = (
        CheckConstraint(
            "sentiment IN ('Positive','Neutral','Negative','N/A')",
            name="ck_responses_sentiment_valid",
        ),
        CheckConstraint(
            "feedback IN ('Praise','Feedback','Criticism','N/A')",
            name="ck_responses_feedback_valid",
        ),
        db.Index("ix_responses_user_created_at", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Response id={self.id} user_id={self.user_id} question_id={self.question_id} skipped={self.skipped}>"
