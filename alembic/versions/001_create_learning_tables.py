"""Create users, flashcards, learning_sessions and flashcard_reviews tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create learning tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "flashcards",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("front_content", sa.Text(), nullable=False),
        sa.Column("back_content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_flashcards_user_id"), "flashcards", ["user_id"], unique=False)

    op.create_table(
        "learning_sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("flashcards_count", sa.Integer(), nullable=False),
        sa.Column("flashcards_reviewed", sa.Integer(), nullable=True),
        sa.Column("correct_answers", sa.Integer(), nullable=True),
        sa.Column("incorrect_answers", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_learning_sessions_user_id"), "learning_sessions", ["user_id"], unique=False
    )

    op.create_table(
        "flashcard_reviews",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("session_id", sa.Uuid(), nullable=True),
        sa.Column("flashcard_id", sa.Uuid(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("next_review_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "reviewed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["session_id"], ["learning_sessions.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["flashcard_id"], ["flashcards.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_flashcard_reviews_user_id"), "flashcard_reviews", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_flashcard_reviews_session_id"), "flashcard_reviews", ["session_id"], unique=False
    )
    op.create_index(
        op.f("ix_flashcard_reviews_flashcard_id"),
        "flashcard_reviews",
        ["flashcard_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_flashcard_reviews_next_review_date"),
        "flashcard_reviews",
        ["next_review_date"],
        unique=False,
    )


def downgrade() -> None:
    """Drop learning tables."""
    op.drop_index(op.f("ix_flashcard_reviews_next_review_date"), table_name="flashcard_reviews")
    op.drop_index(op.f("ix_flashcard_reviews_flashcard_id"), table_name="flashcard_reviews")
    op.drop_index(op.f("ix_flashcard_reviews_session_id"), table_name="flashcard_reviews")
    op.drop_index(op.f("ix_flashcard_reviews_user_id"), table_name="flashcard_reviews")
    op.drop_table("flashcard_reviews")
    op.drop_index(op.f("ix_learning_sessions_user_id"), table_name="learning_sessions")
    op.drop_table("learning_sessions")
    op.drop_index(op.f("ix_flashcards_user_id"), table_name="flashcards")
    op.drop_table("flashcards")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
