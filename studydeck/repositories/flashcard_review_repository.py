"""FlashcardReview repository for database operations."""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from studydeck import models

logger = logging.getLogger(__name__)


class FlashcardReviewRepository:
    """Repository for FlashcardReview database operations."""

    def __init__(self, db: Session) -> None:
        """Initialize repository with database session."""
        self.db = db

    def get_outcomes_for_session(
        self, session_id: uuid.UUID, user_id: uuid.UUID
    ) -> Sequence[bool]:
        """Get the ``is_correct`` flag of every review recorded in a session."""
        stmt = select(models.FlashcardReview.is_correct).where(
            models.FlashcardReview.session_id == session_id,
            models.FlashcardReview.user_id == user_id,
        )
        return self.db.execute(stmt).scalars().all()

    def count_correct_due_before(
        self, flashcard_ids: Sequence[uuid.UUID], until: datetime
    ) -> int:
        """Count correct reviews of the given flashcards due on or before ``until``."""
        stmt = select(func.count(models.FlashcardReview.id)).where(
            models.FlashcardReview.is_correct.is_(True),
            models.FlashcardReview.next_review_date <= until,
            models.FlashcardReview.flashcard_id.in_(flashcard_ids),
        )
        return self.db.execute(stmt).scalar() or 0

    def get_correct_due_dates_between(
        self,
        flashcard_ids: Sequence[uuid.UUID],
        start: datetime,
        end: datetime,
    ) -> Sequence[datetime]:
        """Get next-review timestamps of correct reviews due within ``[start, end]``."""
        stmt = select(models.FlashcardReview.next_review_date).where(
            models.FlashcardReview.is_correct.is_(True),
            models.FlashcardReview.next_review_date >= start,
            models.FlashcardReview.next_review_date <= end,
            models.FlashcardReview.flashcard_id.in_(flashcard_ids),
        )
        return [d for d in self.db.execute(stmt).scalars().all() if d is not None]

    def create(
        self,
        user_id: uuid.UUID,
        session_id: uuid.UUID | None,
        flashcard_id: uuid.UUID,
        is_correct: bool,
        next_review_date: datetime | None,
        reviewed_at: datetime,
    ) -> models.FlashcardReview:
        """Create a new review record."""
        review = models.FlashcardReview(
            user_id=user_id,
            session_id=session_id,
            flashcard_id=flashcard_id,
            is_correct=is_correct,
            next_review_date=next_review_date,
            reviewed_at=reviewed_at,
        )
        self.db.add(review)
        self.db.flush()
        self.db.refresh(review)
        logger.info(
            f"Created flashcard review: id={review.id}, flashcard_id={flashcard_id}, "
            f"session_id={session_id}"
        )
        return review
