"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import uuid  # noqa: E402
from collections.abc import Generator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from studydeck import models  # noqa: E402
from studydeck.database import Base, engine_options, get_db  # noqa: E402
from studydeck.main import app  # noqa: E402
from studydeck.services.auth_service import get_current_user  # noqa: E402

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

test_engine = create_engine(TEST_DATABASE_URL, **engine_options(TEST_DATABASE_URL))

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def test_user(db_session: Session) -> models.User:
    """Create the user every authenticated request runs as."""
    return create_test_user(db_session, "learner@example.com")


@pytest.fixture
def other_user(db_session: Session) -> models.User:
    """Create a second user for ownership checks."""
    return create_test_user(db_session, "someone-else@example.com")


@pytest.fixture
def anonymous_client(db_session: Session) -> Generator[TestClient, Any, None]:
    """Create a test client without an authenticated user."""

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def client(
    anonymous_client: TestClient, test_user: models.User
) -> Generator[TestClient, Any, None]:
    """Create a test client authenticated as ``test_user``."""
    app.dependency_overrides[get_current_user] = lambda: test_user
    yield anonymous_client


# --- Helpers shared by test modules ---


def create_test_user(db_session: Session, email: str) -> models.User:
    """Helper function to create a user."""
    user = models.User(email=email, hashed_password=None)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def create_test_flashcards(
    db_session: Session, user: models.User, count: int
) -> list[models.Flashcard]:
    """Helper function to create ``count`` flashcards with increasing creation times."""
    flashcards = [
        models.Flashcard(
            user_id=user.id,
            front_content=f"Question {i}",
            back_content=f"Answer {i}",
            created_at=datetime(2024, 1, 1, 8, i, 0, tzinfo=UTC),
        )
        for i in range(count)
    ]
    db_session.add_all(flashcards)
    db_session.commit()
    for flashcard in flashcards:
        db_session.refresh(flashcard)
    return flashcards


def create_learning_session(
    db_session: Session,
    user: models.User,
    started_at: datetime,
    flashcards_count: int,
    ended_at: datetime | None = None,
    flashcards_reviewed: int | None = 0,
    correct_answers: int | None = 0,
    incorrect_answers: int | None = 0,
) -> models.LearningSession:
    """Helper function to create a learning session row."""
    session = models.LearningSession(
        user_id=user.id,
        started_at=started_at,
        ended_at=ended_at,
        flashcards_count=flashcards_count,
        flashcards_reviewed=flashcards_reviewed,
        correct_answers=correct_answers,
        incorrect_answers=incorrect_answers,
    )
    db_session.add(session)
    db_session.commit()
    db_session.refresh(session)
    return session


def create_review(
    db_session: Session,
    user: models.User,
    flashcard: models.Flashcard,
    is_correct: bool,
    next_review_date: datetime | None = None,
    session: models.LearningSession | None = None,
) -> models.FlashcardReview:
    """Helper function to create a review without touching session counters."""
    review = models.FlashcardReview(
        user_id=user.id,
        session_id=session.id if session else None,
        flashcard_id=flashcard.id,
        is_correct=is_correct,
        next_review_date=next_review_date,
        reviewed_at=datetime(2024, 1, 10, 12, 0, 0, tzinfo=UTC),
    )
    db_session.add(review)
    db_session.commit()
    db_session.refresh(review)
    return review


def unknown_id() -> str:
    return str(uuid.uuid4())
