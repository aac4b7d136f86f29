"""
Result type for operations whose failure is tolerated rather than raised.

Starting a learning session is the main user: the flashcards are still
served when the session row cannot be written, and the caller receives a
``Failure`` describing why the session is not tracked.

Example:
    tracking = service.start_learning_session(user_id).tracking
    if tracking.is_success:
        session_id = tracking.unwrap()
    else:
        logger.warning("untracked_session", reason=tracking.unwrap_error())
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success value type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Fallback value type


@dataclass(frozen=True)
class Success(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    @property
    def is_success(self) -> bool:
        """Always True for Success."""
        return True

    @property
    def is_failure(self) -> bool:
        """Always False for Success."""
        return False

    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    def unwrap_error(self) -> None:
        """Raises ValueError - Success has no error."""
        raise ValueError("Cannot get error from Success result")

    def value_or(self, default: U) -> T | U:
        """Get the value (default is ignored for Success)."""
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    @property
    def is_success(self) -> bool:
        """Always False for Failure."""
        return False

    @property
    def is_failure(self) -> bool:
        """Always True for Failure."""
        return True

    def unwrap(self) -> None:
        """Raises ValueError - Failure has no value."""
        raise ValueError("Cannot get value from Failure result")

    def unwrap_error(self) -> E:
        """Get the error."""
        return self.error

    def value_or(self, default: U) -> U:
        """Return the default value for Failure."""
        return default


Result = Success[T] | Failure[E]
