"""Tests for the learning service, driven by a fixed clock."""

import uuid
from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from studydeck import models
from studydeck.database import Base
from studydeck.exceptions import (
    ErrorKind,
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
from studydeck.result import Failure, Success
from studydeck.services import LearningService
from studydeck.services.learning_service import (
    as_utc,
    completion_percentage,
    duration_seconds,
    round_half_up,
)
from tests.conftest import (
    create_learning_session,
    create_review,
    create_test_flashcards,
    create_test_user,
)

NOW = datetime(2024, 1, 10, 10, 5, 30, tzinfo=UTC)
TODAY = date(2024, 1, 10)


def fixed_clock(*instants: datetime) -> Callable[[], datetime]:
    """Return a clock yielding ``instants`` in order, repeating the last one."""
    remaining: Iterator[datetime] = iter(instants)
    last = instants[-1]

    def clock() -> datetime:
        return next(remaining, last)

    return clock


def make_service(
    db_session: Session,
    clock: Callable[[], datetime] | None = None,
    session_repository: LearningSessionRepository | None = None,
    review_repository: FlashcardReviewRepository | None = None,
) -> LearningService:
    return LearningService(
        db=db_session,
        flashcard_repository=FlashcardRepository(db_session),
        session_repository=session_repository or LearningSessionRepository(db_session),
        review_repository=review_repository or FlashcardReviewRepository(db_session),
        clock=clock or fixed_clock(NOW),
    )


class BrokenSessionRepository(LearningSessionRepository):
    def get_by_id(self, session_id, user_id):  # type: ignore[no-untyped-def]
        raise OperationalError("SELECT learning_sessions", {}, Exception("connection refused"))

    def create(self, user_id, started_at, flashcards_count):  # type: ignore[no-untyped-def]
        raise OperationalError("INSERT INTO learning_sessions", {}, Exception("disk full"))


class MisbehavingSessionRepository(LearningSessionRepository):
    def create(self, user_id, started_at, flashcards_count):  # type: ignore[no-untyped-def]
        raise ValueError("badly formed session row")


class BrokenReviewRepository(FlashcardReviewRepository):
    def count_correct_due_before(self, flashcard_ids, until):  # type: ignore[no-untyped-def]
        raise OperationalError("SELECT flashcard_reviews", {}, Exception("timeout"))


class TestArithmetic:
    """Rounding and clamping rules used by session summaries."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(12.5, 13), (12.49, 12), (0.5, 1), (66.666, 67), (0.0, 0)],
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected

    @pytest.mark.parametrize(
        ("reviewed", "count", "expected"),
        [(1, 8, 13), (3, 5, 60), (2, 3, 67), (0, 5, 0), (5, 5, 100)],
    )
    def test_completion_percentage(self, reviewed: int, count: int, expected: int) -> None:
        assert completion_percentage(reviewed, count) == expected

    def test_completion_percentage_of_empty_session_is_zero(self) -> None:
        assert completion_percentage(3, 0) == 0

    def test_completion_percentage_is_not_clamped(self) -> None:
        assert completion_percentage(7, 5) == 140

    def test_duration_rounds_to_whole_seconds(self) -> None:
        started_at = datetime(2024, 1, 10, 10, 0, 0, tzinfo=UTC)
        assert duration_seconds(started_at, started_at + timedelta(seconds=299.5)) == 300
        assert duration_seconds(started_at, started_at + timedelta(seconds=299.4)) == 299

    def test_duration_never_negative(self) -> None:
        started_at = datetime(2024, 1, 10, 10, 0, 0, tzinfo=UTC)
        assert duration_seconds(started_at, started_at - timedelta(minutes=5)) == 0

    def test_duration_treats_naive_timestamps_as_utc(self) -> None:
        naive_start = datetime(2024, 1, 10, 10, 0, 0)
        assert duration_seconds(naive_start, NOW) == 330
        assert as_utc(naive_start) == datetime(2024, 1, 10, 10, 0, 0, tzinfo=UTC)


class TestStartLearningSession:
    def test_requires_user(self, db_session: Session) -> None:
        with pytest.raises(ValidationError) as exc_info:
            make_service(db_session).start_learning_session(None)

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.status_code == 400

    def test_records_session_at_clock_time(
        self, db_session: Session, test_user: models.User
    ) -> None:
        create_test_flashcards(db_session, test_user, 3)

        started = make_service(db_session).start_learning_session(test_user.id, limit=2)

        assert isinstance(started.tracking, Success)
        assert [f.front_content for f in started.flashcards] == ["Question 0", "Question 1"]
        session = db_session.get(models.LearningSession, started.session_id)
        assert session is not None
        assert as_utc(session.started_at) == NOW
        assert session.flashcards_count == 2

    def test_no_flashcards_is_an_untracked_failure(
        self, db_session: Session, test_user: models.User
    ) -> None:
        started = make_service(db_session).start_learning_session(test_user.id)

        assert started.flashcards == []
        assert started.tracking == Failure("User has no flashcards")
        assert started.session_id is None

    def test_tracking_failure_keeps_flashcards(
        self, db_session: Session, test_user: models.User
    ) -> None:
        create_test_flashcards(db_session, test_user, 4)
        service = make_service(
            db_session, session_repository=BrokenSessionRepository(db_session)
        )

        started = service.start_learning_session(test_user.id)

        assert started.tracking.is_failure
        assert started.tracking.unwrap_error().startswith("Failed to create learning session")
        assert started.session_id is None
        assert len(started.flashcards) == 4


    def test_unexpected_tracking_error_keeps_flashcards(
        self, db_session: Session, test_user: models.User
    ) -> None:
        create_test_flashcards(db_session, test_user, 2)
        service = make_service(
            db_session, session_repository=MisbehavingSessionRepository(db_session)
        )

        started = service.start_learning_session(test_user.id)

        assert started.session_id is None
        assert "badly formed" in started.tracking.unwrap_error()
        assert len(started.flashcards) == 2
        assert db_session.query(models.LearningSession).count() == 0

    def test_services_do_not_share_a_default_clock(self, db_session: Session) -> None:
        first = make_service(db_session)
        second = make_service(db_session)

        assert first.clock is not second.clock
        assert first.clock() == second.clock() == NOW



class TestSessionSummaries:
    def test_summary_of_open_session_runs_to_now(
        self, db_session: Session, test_user: models.User
    ) -> None:
        session = create_learning_session(
            db_session,
            test_user,
            started_at=datetime(2024, 1, 10, 10, 0, 0, tzinfo=UTC),
            flashcards_count=8,
            flashcards_reviewed=1,
            correct_answers=1,
        )

        summary = make_service(db_session).get_session_summary(test_user.id, session.id)

        assert summary.flashcards_reviewed == 1
        assert summary.correct_answers == 1
        assert summary.incorrect_answers == 0
        assert summary.completion_percentage == 13
        assert summary.duration_seconds == 330

    def test_ending_twice_uses_the_later_clock_reading(
        self, db_session: Session, test_user: models.User
    ) -> None:
        flashcards = create_test_flashcards(db_session, test_user, 2)
        session = create_learning_session(
            db_session,
            test_user,
            started_at=datetime(2024, 1, 10, 10, 0, 0, tzinfo=UTC),
            flashcards_count=2,
        )
        create_review(db_session, test_user, flashcards[0], True, session=session)
        service = make_service(
            db_session,
            clock=fixed_clock(
                datetime(2024, 1, 10, 10, 1, 0, tzinfo=UTC),
                datetime(2024, 1, 10, 10, 2, 0, tzinfo=UTC),
            ),
        )

        first = service.end_learning_session(test_user.id, session.id)
        create_review(db_session, test_user, flashcards[1], False, session=session)
        second = service.end_learning_session(test_user.id, session.id)

        assert (first.duration_seconds, first.completion_percentage) == (60, 50)
        assert (second.duration_seconds, second.completion_percentage) == (120, 100)
        assert second.incorrect_answers == 1
        db_session.refresh(session)
        assert as_utc(session.ended_at) == datetime(2024, 1, 10, 10, 2, 0, tzinfo=UTC)

    def test_ending_session_started_in_the_future_has_zero_duration(
        self, db_session: Session, test_user: models.User
    ) -> None:
        session = create_learning_session(
            db_session,
            test_user,
            started_at=NOW + timedelta(minutes=10),
            flashcards_count=1,
        )

        summary = make_service(db_session).end_learning_session(test_user.id, session.id)

        assert summary.duration_seconds == 0

    @pytest.mark.parametrize("operation", ["get_session_summary", "end_learning_session"])
    def test_unknown_session_is_not_found(
        self, db_session: Session, test_user: models.User, operation: str
    ) -> None:
        service = make_service(db_session)

        with pytest.raises(LearningSessionNotFoundError) as exc_info:
            getattr(service, operation)(test_user.id, uuid.uuid4())

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.status_code == 404

    def test_foreign_session_is_not_found(
        self, db_session: Session, test_user: models.User, other_user: models.User
    ) -> None:
        session = create_learning_session(db_session, other_user, started_at=NOW, flashcards_count=1)

        with pytest.raises(LearningSessionNotFoundError):
            make_service(db_session).end_learning_session(test_user.id, session.id)

    def test_storage_failure_is_internal(
        self, db_session: Session, test_user: models.User
    ) -> None:
        service = make_service(
            db_session, session_repository=BrokenSessionRepository(db_session)
        )

        with pytest.raises(ServiceError) as exc_info:
            service.get_session_summary(test_user.id, uuid.uuid4())

        assert exc_info.value.kind is ErrorKind.INTERNAL
        assert exc_info.value.message.startswith("Failed to get learning session")


class TestRecordReview:
    def test_review_is_stamped_with_clock_time(
        self, db_session: Session, test_user: models.User
    ) -> None:
        flashcards = create_test_flashcards(db_session, test_user, 1)
        session = create_learning_session(db_session, test_user, started_at=NOW, flashcards_count=1)

        review = make_service(db_session).record_review(
            test_user.id,
            session.id,
            flashcards[0].id,
            is_correct=True,
            next_review_date=datetime(2024, 1, 12, 9, 0, 0, tzinfo=UTC),
        )

        assert review.session_id == session.id
        assert as_utc(review.reviewed_at) == NOW
        assert review.next_review_date is not None
        assert as_utc(review.next_review_date) == datetime(2024, 1, 12, 9, 0, 0, tzinfo=UTC)
        db_session.refresh(session)
        assert (session.flashcards_reviewed, session.correct_answers) == (1, 1)

    def test_foreign_flashcard_is_not_found(
        self, db_session: Session, test_user: models.User, other_user: models.User
    ) -> None:
        foreign = create_test_flashcards(db_session, other_user, 1)[0]
        session = create_learning_session(db_session, test_user, started_at=NOW, flashcards_count=1)

        with pytest.raises(FlashcardNotFoundError) as exc_info:
            make_service(db_session).record_review(
                test_user.id, session.id, foreign.id, is_correct=False
            )

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert db_session.query(models.FlashcardReview).count() == 0


    def test_overlapping_reviews_are_all_counted(self, tmp_path: Path) -> None:
        database_url = f"sqlite:///{tmp_path / 'overlap.db'}"
        engine = create_engine(database_url)
        Base.metadata.create_all(engine)
        factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        try:
            with factory() as setup:
                user = create_test_user(setup, "overlap@example.com")
                flashcards = create_test_flashcards(setup, user, 2)
                session = create_learning_session(setup, user, started_at=NOW, flashcards_count=2)
                user_id, session_id = user.id, session.id
                flashcard_ids = [f.id for f in flashcards]

            with factory() as first, factory() as second:
                # both requests hold the session row before either writes
                first.get(models.LearningSession, session_id)
                second.get(models.LearningSession, session_id)

                make_service(first).record_review(
                    user_id, session_id, flashcard_ids[0], is_correct=True
                )
                make_service(second).record_review(
                    user_id, session_id, flashcard_ids[1], is_correct=False
                )

            with factory() as check:
                stored = check.get(models.LearningSession, session_id)
                assert stored is not None
                assert stored.flashcards_reviewed == 2
                assert stored.correct_answers == 1
                assert stored.incorrect_answers == 1
                assert check.query(models.FlashcardReview).count() == 2
        finally:
            Base.metadata.drop_all(engine)
            engine.dispose()



class TestDueFlashcardsCount:
    def test_no_flashcards_gives_seven_empty_days(
        self, db_session: Session, test_user: models.User
    ) -> None:
        result = make_service(db_session).get_due_flashcards_count(test_user.id, TODAY)

        assert result.due_today == 0
        assert result.due_next_week.total == 0
        assert [d.count for d in result.due_next_week.by_day] == [0] * 7

    def test_days_start_tomorrow_and_are_sorted(
        self, db_session: Session, test_user: models.User
    ) -> None:
        create_test_flashcards(db_session, test_user, 3)

        result = make_service(db_session).get_due_flashcards_count(test_user.id, TODAY)

        assert [d.date for d in result.due_next_week.by_day] == [
            date(2024, 1, day) for day in range(11, 18)
        ]
        assert all(d.count == 0 for d in result.due_next_week.by_day)

    def test_counts_respect_day_boundaries(
        self,
        db_session: Session,
        test_user: models.User,
        other_user: models.User,
    ) -> None:
        a, b, c = create_test_flashcards(db_session, test_user, 3)
        foreign = create_test_flashcards(db_session, other_user, 1)[0]

        def due(day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
            return datetime(2024, 1, day, hour, minute, second, tzinfo=UTC)

        # due today: last second of today and an overdue card
        create_review(db_session, test_user, a, True, next_review_date=due(10, 23, 59, 59))
        create_review(db_session, test_user, b, True, next_review_date=due(5, 9))
        # incorrect answers are never due
        create_review(db_session, test_user, c, False, next_review_date=due(9))
        create_review(db_session, test_user, c, False, next_review_date=due(12))
        # first and last second of the forecast window
        create_review(db_session, test_user, a, True, next_review_date=due(11))
        create_review(db_session, test_user, b, True, next_review_date=due(17, 23, 59, 59))
        # just outside the window
        create_review(db_session, test_user, c, True, next_review_date=due(18))
        # never scheduled
        create_review(db_session, test_user, c, True)
        # someone else's flashcard
        create_review(db_session, other_user, foreign, True, next_review_date=due(10, 8))
        create_review(db_session, other_user, foreign, True, next_review_date=due(13, 8))

        result = make_service(db_session).get_due_flashcards_count(test_user.id, TODAY)

        assert result.due_today == 2
        assert result.due_next_week.total == 2
        counts = {d.date: d.count for d in result.due_next_week.by_day}
        assert counts == {
            date(2024, 1, 11): 1,
            date(2024, 1, 12): 0,
            date(2024, 1, 13): 0,
            date(2024, 1, 14): 0,
            date(2024, 1, 15): 0,
            date(2024, 1, 16): 0,
            date(2024, 1, 17): 1,
        }

    def test_several_reviews_on_one_day_share_a_bucket(
        self, db_session: Session, test_user: models.User
    ) -> None:
        flashcards = create_test_flashcards(db_session, test_user, 3)
        for hour, flashcard in zip([6, 12, 18], flashcards, strict=True):
            create_review(
                db_session,
                test_user,
                flashcard,
                True,
                next_review_date=datetime(2024, 1, 14, hour, 0, 0, tzinfo=UTC),
            )

        result = make_service(db_session).get_due_flashcards_count(test_user.id, TODAY)

        assert result.due_next_week.total == 3
        assert result.due_next_week.by_day[3].date == date(2024, 1, 14)
        assert result.due_next_week.by_day[3].count == 3

    def test_storage_failure_is_internal(
        self, db_session: Session, test_user: models.User
    ) -> None:
        create_test_flashcards(db_session, test_user, 1)
        service = make_service(
            db_session, review_repository=BrokenReviewRepository(db_session)
        )

        with pytest.raises(ServiceError, match="Failed to fetch due today count"):
            service.get_due_flashcards_count(test_user.id, TODAY)
