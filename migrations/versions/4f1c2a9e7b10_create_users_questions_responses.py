"""Create users, questions and responses

Revision ID: 4f1c2a9e7b10
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "4f1c2a9e7b10"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("display_name", sa.String(length=120), nullable=False),
        sa.Column("submission_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("submission_count >= 0", name="ck_users_submission_count_nonneg"),
    )
    op.create_index("ix_users_submission_count", "users", ["submission_count"], unique=False)

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("reference_answer", sa.Text(), nullable=False),
        sa.Column("answered", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "responses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("sentiment", sa.String(length=16), nullable=False),
        sa.Column("feedback", sa.String(length=16), nullable=False),
        sa.Column("skipped", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "sentiment IN ('Positive','Neutral','Negative','N/A')",
            name="ck_responses_sentiment_valid",
        ),
        sa.CheckConstraint(
            "feedback IN ('Praise','Feedback','Criticism','N/A')",
            name="ck_responses_feedback_valid",
        ),
    )
    op.create_index("ix_responses_user_id", "responses", ["user_id"], unique=False)
    op.create_index("ix_responses_question_id", "responses", ["question_id"], unique=False)
    op.create_index("ix_responses_created_at", "responses", ["created_at"], unique=False)
    op.create_index("ix_responses_user_created_at", "responses", ["user_id", "created_at"], unique=False)

def downgrade():
    op.drop_index("ix_responses_user_created_at", table_name="responses")
    op.drop_index("ix_responses_created_at", table_name="responses")
    op.drop_index("ix_responses_question_id", table_name="responses")
    op.drop_index("ix_responses_user_id", table_name="responses")
    op.drop_table("responses")
    op.drop_table("questions")
    op.drop_index("ix_users_submission_count", table_name="users")
    op.drop_table("users")
