"""Pydantic schemas for request/response validation."""

from studydeck.schemas.learning_schemas import (
    DueCountDay,
    DueCountResponse,
    DueNextWeek,
    FlashcardReview,
    FlashcardReviewCreateRequest,
    LearningSessionFlashcard,
    SessionIdParams,
    SessionSummary,
    SessionSummaryResponse,
    StartLearningSessionRequest,
    StartLearningSessionResponse,
)
from studydeck.schemas.user_schemas import (
    Token,
    UserDetailsResponse,
    UserLoginRequest,
    UserRegisterRequest,
)

__all__ = [
    "DueCountDay",
    "DueCountResponse",
    "DueNextWeek",
    "FlashcardReview",
    "FlashcardReviewCreateRequest",
    "LearningSessionFlashcard",
    "SessionIdParams",
    "SessionSummary",
    "SessionSummaryResponse",
    "StartLearningSessionRequest",
    "StartLearningSessionResponse",
    "Token",
    "UserDetailsResponse",
    "UserLoginRequest",
    "UserRegisterRequest",
]
