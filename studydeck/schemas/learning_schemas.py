"""Pydantic schemas for learning session API request/response validation."""

import uuid
from datetime import date as dt_date
from datetime import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class SessionIdParams(BaseModel):
    """Path parameters identifying a learning session."""

    session_id: uuid.UUID = Field(..., description="ID of the learning session")


class StartLearningSessionRequest(BaseModel):
    """Schema for starting a learning session."""

    limit: int | None = Field(
        None, ge=1, le=100, description="Maximum number of flashcards to study"
    )


class LearningSessionFlashcard(BaseModel):
    """Schema for a flashcard presented during a learning session."""

    id: uuid.UUID
    front_content: str

    model_config = {"from_attributes": True}


class StartLearningSessionResponse(BaseModel):
    """Schema for start learning session response.

    ``session_id`` is null when the user has no flashcards or when the session
    could not be recorded; studying continues without tracking in both cases.
    """

    session_id: uuid.UUID | None = Field(..., description="ID of the tracked session")
    flashcards: list[LearningSessionFlashcard] = Field(
        ..., description="Flashcards to review in this session"
    )


class SessionSummary(BaseModel):
    """Schema for learning session summary statistics."""

    flashcards_reviewed: int = Field(..., ge=0)
    correct_answers: int = Field(..., ge=0)
    incorrect_answers: int = Field(..., ge=0)
    completion_percentage: int = Field(
        ..., ge=0, description="Reviewed share of the session's flashcards, not clamped to 100"
    )
    duration_seconds: int = Field(..., ge=0)


class SessionSummaryResponse(BaseModel):
    """Schema wrapping a session summary, for both GET and PUT."""

    session_summary: SessionSummary


class FlashcardReviewCreateRequest(BaseModel):
    """Schema for recording a review of one flashcard within a session."""

    flashcard_id: uuid.UUID
    is_correct: bool
    next_review_date: dt | None = Field(
        None, description="When the flashcard should be shown next, as scheduled by the client"
    )


class FlashcardReview(BaseModel):
    """Schema for FlashcardReview response."""

    id: uuid.UUID
    session_id: uuid.UUID | None
    flashcard_id: uuid.UUID
    is_correct: bool
    next_review_date: dt | None
    reviewed_at: dt

    model_config = {"from_attributes": True}


class DueCountDay(BaseModel):
    """Number of flashcards due on a single calendar day."""

    date: dt_date
    count: int = Field(..., ge=0)


class DueNextWeek(BaseModel):
    """Due flashcards bucketed by day for the coming week."""

    total: int = Field(..., ge=0)
    by_day: list[DueCountDay] = Field(..., alias="byDay")

    model_config = ConfigDict(populate_by_name=True)


class DueCountResponse(BaseModel):
    """Schema for due flashcards count response."""

    due_today: int = Field(..., ge=0, alias="dueToday")
    due_next_week: DueNextWeek = Field(..., alias="dueNextWeek")

    model_config = ConfigDict(populate_by_name=True)
