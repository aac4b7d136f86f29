from dependency_injector import containers, providers
from sqlalchemy.orm import Session

from studydeck.repositories import (
    FlashcardRepository,
    FlashcardReviewRepository,
    LearningSessionRepository,
)
from studydeck.services.learning_service import LearningService


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Declare db as a dependency that will be provided at runtime
    db = providers.Dependency(instance_of=Session)

    # Repositories
    flashcard_repository = providers.Factory(FlashcardRepository, db=db)
    learning_session_repository = providers.Factory(LearningSessionRepository, db=db)
    flashcard_review_repository = providers.Factory(FlashcardReviewRepository, db=db)

    # Learning module services
    learning_service = providers.Factory(
        LearningService,
        db=db,
        flashcard_repository=flashcard_repository,
        session_repository=learning_session_repository,
        review_repository=flashcard_review_repository,
    )
