"""Flashcard repository for database operations."""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from studydeck import models


class FlashcardRepository:
    """Repository for Flashcard database operations."""

    def __init__(self, db: Session) -> None:
        """Initialize repository with database session."""
        self.db = db

    def get_by_id(self, flashcard_id: uuid.UUID, user_id: uuid.UUID) -> models.Flashcard | None:
        """Get a flashcard by its ID, verifying user ownership."""
        stmt = select(models.Flashcard).where(
            models.Flashcard.id == flashcard_id,
            models.Flashcard.user_id == user_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_for_user(self, user_id: uuid.UUID, limit: int) -> list[models.Flashcard]:
        """Get up to ``limit`` flashcards owned by the user, oldest first."""
        stmt = (
            select(models.Flashcard)
            .where(models.Flashcard.user_id == user_id)
            .order_by(models.Flashcard.created_at, models.Flashcard.id)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_ids_for_user(self, user_id: uuid.UUID) -> list[uuid.UUID]:
        """Get the IDs of every flashcard owned by the user."""
        stmt = select(models.Flashcard.id).where(models.Flashcard.user_id == user_id)
        return list(self.db.execute(stmt).scalars().all())
