"""Service layer for business logic."""

from studydeck.services import auth_service
from studydeck.services.learning_service import LearningService, StartedLearningSession

__all__ = [
    "LearningService",
    "StartedLearningSession",
    "auth_service",
]
