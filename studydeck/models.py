"""Database models."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studydeck.database import Base


class User(Base):
    """User account owning flashcards, sessions and reviews."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    flashcards: Mapped[list["Flashcard"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, email='{self.email}')>"


class Flashcard(Base):
    """A study card with a front (prompt) and a back (answer)."""

    __tablename__ = "flashcards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    front_content: Mapped[str] = mapped_column(Text, nullable=False)
    back_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped[User] = relationship(back_populates="flashcards")
    reviews: Mapped[list["FlashcardReview"]] = relationship(
        back_populates="flashcard", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        """String representation of Flashcard."""
        return f"<Flashcard(id={self.id}, front_content='{self.front_content[:50]}...')>"


class LearningSession(Base):
    """A bounded study interval and its cached progress counters."""

    __tablename__ = "learning_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    flashcards_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    flashcards_reviewed: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    correct_answers: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    incorrect_answers: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)

    reviews: Mapped[list["FlashcardReview"]] = relationship(back_populates="session")

    def __repr__(self) -> str:
        """String representation of LearningSession."""
        return (
            f"<LearningSession(id={self.id}, user_id={self.user_id}, "
            f"reviewed={self.flashcards_reviewed}/{self.flashcards_count})>"
        )


class FlashcardReview(Base):
    """A single answer to one flashcard, with the next time it should be shown."""

    __tablename__ = "flashcard_reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    session_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("learning_sessions.id", ondelete="SET NULL"), index=True, nullable=True
    )
    flashcard_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), index=True, nullable=False
    )
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    next_review_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), index=True, nullable=True
    )
    reviewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    session: Mapped[LearningSession | None] = relationship(back_populates="reviews")
    flashcard: Mapped[Flashcard] = relationship(back_populates="reviews")

    def __repr__(self) -> str:
        """String representation of FlashcardReview."""
        return (
            f"<FlashcardReview(id={self.id}, flashcard_id={self.flashcard_id}, "
            f"is_correct={self.is_correct})>"
        )
