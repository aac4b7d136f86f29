"""Service layer for learning session business logic."""

import math
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studydeck import models, schemas
from studydeck.config import get_settings
from studydeck.exceptions import (
    FlashcardNotFoundError,
    LearningSessionNotFoundError,
    ServiceError,
    ValidationError,
)
from studydeck.repositories import (
    FlashcardRepository,
    FlashcardReviewRepository,
    LearningSessionRepository,
)
from studydeck.result import Failure, Result, Success

logger = structlog.get_logger(__name__)

END_OF_DAY = time(23, 59, 59)


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Interpret naive timestamps (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def completion_percentage(flashcards_reviewed: int, flashcards_count: int) -> int:
    """Share of the session's flashcards that were reviewed, in whole percent.

    Not clamped: reviewing more flashcards than the session was started with
    yields a value above 100.
    """
    if flashcards_count <= 0:
        return 0
    return round_half_up(flashcards_reviewed / flashcards_count * 100)


def duration_seconds(started_at: datetime, ended_at: datetime) -> int:
    """Whole seconds between two timestamps, never negative."""
    elapsed = (as_utc(ended_at) - as_utc(started_at)).total_seconds()
    return max(0, round_half_up(elapsed))


@dataclass(frozen=True)
class StartedLearningSession:
    """Flashcards to study plus the outcome of recording the session.

    ``tracking`` holds the new session ID on success, or the reason the
    session is not tracked.
    """

    flashcards: list[schemas.LearningSessionFlashcard]
    tracking: Result[uuid.UUID, str]

    @property
    def session_id(self) -> uuid.UUID | None:
        return self.tracking.value_or(None)


class LearningService:
    """Service for starting, ending and summarizing learning sessions."""

    def __init__(
        self,
        db: Session,
        flashcard_repository: FlashcardRepository,
        session_repository: LearningSessionRepository,
        review_repository: FlashcardReviewRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize service with its storage collaborators."""
        self.db = db
        self.flashcard_repo = flashcard_repository
        self.session_repo = session_repository
        self.review_repo = review_repository
        self.clock = clock

    def start_learning_session(
        self,
        user_id: uuid.UUID | None,
        limit: int | None = None,
    ) -> StartedLearningSession:
        """
        Start a learning session and return the flashcards to review.

        A failure to record the session is logged and tolerated: the
        flashcards are still returned and ``tracking`` carries the failure.

        Args:
            user_id: ID of the authenticated user
            limit: Maximum number of flashcards, defaults to the configured limit

        Returns:
            StartedLearningSession with flashcards and tracking outcome

        Raises:
            ValidationError: If no user ID is given
            ServiceError: If the flashcards cannot be fetched
        """
        if not user_id:
            logger.error("learning_session_missing_user")
            raise ValidationError("User ID is required to start a learning session")

        settings = get_settings()
        limit = min(
            limit or settings.DEFAULT_SESSION_FLASHCARD_LIMIT,
            settings.MAX_SESSION_FLASHCARD_LIMIT,
        )
        logger.info("starting_learning_session", user_id=str(user_id), limit=limit)

        try:
            flashcard_models = self.flashcard_repo.get_for_user(user_id, limit)
            flashcards = [
                schemas.LearningSessionFlashcard.model_validate(f) for f in flashcard_models
            ]
        except SQLAlchemyError as e:
            logger.error("flashcard_fetch_failed", user_id=str(user_id), error=str(e))
            raise ServiceError(f"Failed to fetch user flashcards: {e}") from e

        if not flashcards:
            logger.info("no_flashcards_for_user", user_id=str(user_id))
            return StartedLearningSession(
                flashcards=[], tracking=Failure("User has no flashcards")
            )

        tracking = self._try_create_session(user_id, len(flashcards))

        logger.info(
            "learning_session_started",
            user_id=str(user_id),
            flashcard_count=len(flashcards),
            session_id=str(tracking.value_or(None)),
            tracked=tracking.is_success,
        )
        return StartedLearningSession(flashcards=flashcards, tracking=tracking)

    def _try_create_session(
        self, user_id: uuid.UUID, flashcards_count: int
    ) -> Result[uuid.UUID, str]:
        try:
            session = self.session_repo.create(
                user_id=user_id,
                started_at=self.clock(),
                flashcards_count=flashcards_count,
            )
            session_id = session.id
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(
                "learning_session_creation_failed",
                user_id=str(user_id),
                error=str(e),
            )
            return Failure(f"Failed to create learning session: {e}")

        if session_id is None:
            logger.error("learning_session_creation_returned_no_id", user_id=str(user_id))
            return Failure("No session data returned")
        return Success(session_id)

    def end_learning_session(
        self, user_id: uuid.UUID, session_id: uuid.UUID
    ) -> schemas.SessionSummary:
        """
        End a learning session, reconciling its counters from recorded reviews.

        Calling this twice recomputes and overwrites the summary each time.

        Args:
            user_id: ID of the user (for ownership verification)
            session_id: ID of the learning session to end

        Returns:
            Session summary statistics

        Raises:
            LearningSessionNotFoundError: If session not found or user doesn't own it
            ServiceError: If any storage call fails
        """
        session = self._get_owned_session(session_id, user_id)
        ended_at = self.clock()

        try:
            outcomes = self.review_repo.get_outcomes_for_session(session_id, user_id)
        except SQLAlchemyError as e:
            raise ServiceError(f"Failed to get review statistics: {e}") from e

        flashcards_reviewed = len(outcomes)
        correct_answers = sum(1 for is_correct in outcomes if is_correct)
        incorrect_answers = flashcards_reviewed - correct_answers

        summary = schemas.SessionSummary(
            flashcards_reviewed=flashcards_reviewed,
            correct_answers=correct_answers,
            incorrect_answers=incorrect_answers,
            completion_percentage=completion_percentage(
                flashcards_reviewed, session.flashcards_count
            ),
            duration_seconds=duration_seconds(session.started_at, ended_at),
        )

        try:
            self.session_repo.mark_ended(
                session,
                ended_at=ended_at,
                flashcards_reviewed=flashcards_reviewed,
                correct_answers=correct_answers,
                incorrect_answers=incorrect_answers,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ServiceError(f"Failed to update learning session: {e}") from e

        logger.info(
            "learning_session_ended",
            session_id=str(session_id),
            flashcards_reviewed=flashcards_reviewed,
            correct_answers=correct_answers,
            duration_seconds=summary.duration_seconds,
        )
        return summary

    def get_session_summary(
        self, user_id: uuid.UUID, session_id: uuid.UUID
    ) -> schemas.SessionSummary:
        """
        Get summary statistics for a learning session from its stored counters.

        The counters are read as stored on the session row. For a session
        that has not ended, the duration runs up to the current time.

        Raises:
            LearningSessionNotFoundError: If session not found or user doesn't own it
            ServiceError: If the lookup fails
        """
        session = self._get_owned_session(session_id, user_id)
        end_time = session.ended_at or self.clock()

        flashcards_reviewed = session.flashcards_reviewed or 0
        return schemas.SessionSummary(
            flashcards_reviewed=flashcards_reviewed,
            correct_answers=session.correct_answers or 0,
            incorrect_answers=session.incorrect_answers or 0,
            completion_percentage=completion_percentage(
                flashcards_reviewed, session.flashcards_count
            ),
            duration_seconds=duration_seconds(session.started_at, end_time),
        )

    def record_review(
        self,
        user_id: uuid.UUID,
        session_id: uuid.UUID,
        flashcard_id: uuid.UUID,
        is_correct: bool,
        next_review_date: datetime | None = None,
    ) -> schemas.FlashcardReview:
        """
        Record the answer to one flashcard and count it on the session.

        The review row and the session's cached counters are written in the
        same transaction.

        Raises:
            LearningSessionNotFoundError: If session not found or user doesn't own it
            FlashcardNotFoundError: If flashcard not found or user doesn't own it
            ServiceError: If any storage call fails
        """
        self._get_owned_session(session_id, user_id)

        try:
            flashcard = self.flashcard_repo.get_by_id(flashcard_id, user_id)
        except SQLAlchemyError as e:
            raise ServiceError(f"Failed to get flashcard: {e}") from e
        if flashcard is None:
            raise FlashcardNotFoundError(flashcard_id)

        try:
            review = self.review_repo.create(
                user_id=user_id,
                session_id=session_id,
                flashcard_id=flashcard_id,
                is_correct=is_correct,
                next_review_date=as_utc(next_review_date) if next_review_date else None,
                reviewed_at=self.clock(),
            )
            self.session_repo.increment_counters(session_id, user_id, is_correct)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ServiceError(f"Failed to record flashcard review: {e}") from e

        logger.info(
            "flashcard_review_recorded",
            session_id=str(session_id),
            flashcard_id=str(flashcard_id),
            is_correct=is_correct,
        )
        return schemas.FlashcardReview.model_validate(review)

    def get_due_flashcards_count(
        self, user_id: uuid.UUID, today: date
    ) -> schemas.DueCountResponse:
        """
        Count flashcards due today and per day over the coming week.

        "Due today" covers every correct review whose next review date falls
        on or before the end of ``today``. The weekly forecast buckets correct
        reviews due from tomorrow through ``today + DUE_FORECAST_DAYS``, with
        every day present even when nothing is due.

        Args:
            user_id: ID of the user
            today: Reference calendar day (UTC)

        Returns:
            Due-today count and the per-day forecast sorted by date

        Raises:
            ServiceError: If any storage call fails
        """
        forecast_days = get_settings().DUE_FORECAST_DAYS
        tomorrow = today + timedelta(days=1)
        last_day = today + timedelta(days=forecast_days)

        by_day: dict[date, int] = {tomorrow + timedelta(days=i): 0 for i in range(forecast_days)}

        try:
            flashcard_ids = self.flashcard_repo.get_ids_for_user(user_id)
        except SQLAlchemyError as e:
            raise ServiceError(f"Failed to fetch user flashcards: {e}") from e

        due_today = 0
        if flashcard_ids:
            try:
                due_today = self.review_repo.count_correct_due_before(
                    flashcard_ids, datetime.combine(today, END_OF_DAY, tzinfo=UTC)
                )
            except SQLAlchemyError as e:
                raise ServiceError(f"Failed to fetch due today count: {e}") from e

            try:
                due_dates = self.review_repo.get_correct_due_dates_between(
                    flashcard_ids,
                    datetime.combine(tomorrow, time.min, tzinfo=UTC),
                    datetime.combine(last_day, END_OF_DAY, tzinfo=UTC),
                )
            except SQLAlchemyError as e:
                raise ServiceError(f"Failed to fetch next week due cards: {e}") from e

            for due in due_dates:
                day = as_utc(due).date()
                by_day[day] = by_day.get(day, 0) + 1

        days = [schemas.DueCountDay(date=day, count=count) for day, count in sorted(by_day.items())]

        logger.debug(
            "due_flashcards_counted",
            user_id=str(user_id),
            flashcard_count=len(flashcard_ids),
            due_today=due_today,
        )
        return schemas.DueCountResponse(
            due_today=due_today,
            due_next_week=schemas.DueNextWeek(
                total=sum(d.count for d in days),
                by_day=days,
            ),
        )

    def _get_owned_session(
        self, session_id: uuid.UUID, user_id: uuid.UUID
    ) -> models.LearningSession:
        try:
            session = self.session_repo.get_by_id(session_id, user_id)
        except SQLAlchemyError as e:
            raise ServiceError(f"Failed to get learning session: {e}") from e

        if session is None:
            raise LearningSessionNotFoundError(session_id)
        return session
