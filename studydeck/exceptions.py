"""Custom exception hierarchy for studydeck."""

import uuid
from enum import StrEnum

from fastapi import HTTPException
from starlette import status


class ErrorKind(StrEnum):
    """Classification of a failure, independent of its message text."""

    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class StudydeckError(Exception):
    """Base exception for all studydeck errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        """Initialize exception with message and optional kind override."""
        self.message = message
        if kind is not None:
            self.kind = kind
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        """HTTP status code matching the error kind."""
        return ERROR_STATUS_CODES[self.kind]


class NotFoundError(StudydeckError):
    """Resource not found error."""

    kind = ErrorKind.NOT_FOUND


class LearningSessionNotFoundError(NotFoundError):
    """Learning session absent or owned by someone else."""

    def __init__(self, session_id: uuid.UUID | None = None) -> None:
        """Initialize with the session ID that could not be found."""
        self.session_id = session_id
        if session_id is not None:
            super().__init__(f"Learning session with id {session_id} not found")
        else:
            super().__init__("Learning session not found")


class FlashcardNotFoundError(NotFoundError):
    """Flashcard absent or owned by someone else."""

    def __init__(self, flashcard_id: uuid.UUID) -> None:
        """Initialize with flashcard ID."""
        self.flashcard_id = flashcard_id
        super().__init__(f"Flashcard with id {flashcard_id} not found")


class ValidationError(StudydeckError):
    """Validation error."""

    kind = ErrorKind.VALIDATION


class UnauthorizedError(StudydeckError):
    """No authenticated caller."""

    kind = ErrorKind.UNAUTHORIZED


class ServiceError(StudydeckError):
    """Service layer error, usually a failed storage call."""


CredentialsException = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)
