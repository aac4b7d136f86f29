"""Repository layer for database operations using repository pattern."""

from studydeck.repositories.flashcard_repository import FlashcardRepository
from studydeck.repositories.flashcard_review_repository import FlashcardReviewRepository
from studydeck.repositories.learning_session_repository import LearningSessionRepository
from studydeck.repositories.user_repository import UserRepository

__all__ = [
    "FlashcardRepository",
    "FlashcardReviewRepository",
    "LearningSessionRepository",
    "UserRepository",
]
