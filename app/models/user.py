from sqlalchemy import func, CheckConstraint
from app.extensions import db

class User(db.Model):
    """A staff member who tags questions. Keyed by id; display_name may change."""
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    display_name = db.Column(db.String(120), nullable=False)
    # Maintained by single UPDATEs in app.services.store, never read-modify-write
    submission_count = db.Column(db.Integer, nullable=False, default=0, server_default=db.text("0"))
    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default=db.true())

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("submission_count >= 0", name="ck_users_submission_count_nonneg"),
        db.Index("ix_users_submission_count", "submission_count"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} display_name={self.display_name!r} count={self.submission_count}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            name=self.display_name,
            count=self.submission_count or 0,
        )
