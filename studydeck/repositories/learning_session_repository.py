"""LearningSession repository for database operations."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from studydeck import models

logger = logging.getLogger(__name__)


class LearningSessionRepository:
    """Repository for LearningSession database operations."""

    def __init__(self, db: Session) -> None:
        """Initialize repository with database session."""
        self.db = db

    def get_by_id(self, session_id: uuid.UUID, user_id: uuid.UUID) -> models.LearningSession | None:
        """Get a learning session by its ID for a specific user.

        Args:
            session_id: ID of the learning session
            user_id: ID of the user (for ownership verification)

        Returns:
            Learning session if found and owned by user, None otherwise
        """
        stmt = select(models.LearningSession).where(
            models.LearningSession.id == session_id,
            models.LearningSession.user_id == user_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(
        self,
        user_id: uuid.UUID,
        started_at: datetime,
        flashcards_count: int,
    ) -> models.LearningSession:
        """Create a learning session with zeroed progress counters."""
        session = models.LearningSession(
            user_id=user_id,
            started_at=started_at,
            flashcards_count=flashcards_count,
            flashcards_reviewed=0,
            correct_answers=0,
            incorrect_answers=0,
        )
        self.db.add(session)
        self.db.flush()
        self.db.refresh(session)
        logger.info(
            f"Created learning session: id={session.id}, user_id={user_id}, "
            f"flashcards_count={flashcards_count}"
        )
        return session

    def mark_ended(
        self,
        session: models.LearningSession,
        ended_at: datetime,
        flashcards_reviewed: int,
        correct_answers: int,
        incorrect_answers: int,
    ) -> models.LearningSession:
        """Store the end timestamp and the reconciled progress counters."""
        session.ended_at = ended_at
        session.flashcards_reviewed = flashcards_reviewed
        session.correct_answers = correct_answers
        session.incorrect_answers = incorrect_answers
        self.db.flush()
        return session

    def increment_counters(
        self, session_id: uuid.UUID, user_id: uuid.UUID, is_correct: bool
    ) -> None:
        """Count one more reviewed flashcard on the session row.

        The increment happens in the database so overlapping reviews of the
        same session are all counted.
        """
        table = models.LearningSession
        answer_column = table.correct_answers if is_correct else table.incorrect_answers
        stmt = (
            update(table)
            .where(table.id == session_id, table.user_id == user_id)
            .values(
                {
                    table.flashcards_reviewed: func.coalesce(table.flashcards_reviewed, 0) + 1,
                    answer_column: func.coalesce(answer_column, 0) + 1,
                }
            )
            .execution_options(synchronize_session=False)
        )
        self.db.execute(stmt)
