from sqlalchemy import func
from app.extensions import db

class Question(db.Model):
    __tablename__ = "questions"

    id = db.Column(db.Integer, primary_key=True)
    prompt = db.Column(db.Text, nullable=False)
    reference_answer = db.Column(db.Text, nullable=False, default="")
    # Tri-state on purpose: NULL (never touched) reads the same as False
    answered = db.Column(db.Boolean, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Question id={self.id} answered={self.answered!r}>"

    @property
    def is_answered(self) -> bool:
        return bool(self.answered)

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            question=self.prompt,
            answer=self.reference_answer,
            answered=self.is_answered,
        )
