"""API routes for learning sessions."""

import logging
import uuid
from datetime import UTC, date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError as PydanticValidationError

from studydeck import schemas
from studydeck.di import inject_service
from studydeck.exceptions import ErrorKind, StudydeckError
from studydeck.models import User
from studydeck.services import LearningService
from studydeck.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/learning", tags=["learning"])


def parse_session_id(session_id: str) -> uuid.UUID:
    """Validate the ``session_id`` path parameter, reporting field errors as 400."""
    try:
        params = schemas.SessionIdParams.model_validate({"session_id": session_id})
    except PydanticValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Invalid session ID",
                "errors": e.errors(include_url=False, include_context=False),
            },
        ) from None
    return params.session_id


get_learning_service = inject_service("learning_service")

CurrentUser = Annotated[User, Depends(get_current_user)]
SessionId = Annotated[uuid.UUID, Depends(parse_session_id)]
LearningServiceDep = Annotated[LearningService, Depends(get_learning_service)]


@router.post(
    "/sessions",
    response_model=schemas.StartLearningSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_learning_session(
    current_user: CurrentUser,
    service: LearningServiceDep,
    request: schemas.StartLearningSessionRequest | None = None,
) -> schemas.StartLearningSessionResponse:
    """
    Start a learning session and return the flashcards to review.

    ``session_id`` is null when the user has no flashcards or when the
    session could not be recorded.
    """
    try:
        started = service.start_learning_session(
            user_id=current_user.id,
            limit=request.limit if request else None,
        )
    except StudydeckError as e:
        if e.kind is ErrorKind.VALIDATION:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
        logger.error(f"Failed to start learning session: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start learning session",
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error starting learning session: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e

    return schemas.StartLearningSessionResponse(
        session_id=started.session_id,
        flashcards=started.flashcards,
    )


@router.get(
    "/sessions/{session_id}",
    response_model=schemas.SessionSummaryResponse,
    status_code=status.HTTP_200_OK,
)
def get_learning_session(
    current_user: CurrentUser,
    session_id: SessionId,
    service: LearningServiceDep,
) -> schemas.SessionSummaryResponse:
    """
    Get the summary of a learning session.

    Returns:
        Stored progress counters, completion percentage and duration

    Raises:
        HTTPException: 404 if the session is absent or not owned, 500 otherwise
    """
    try:
        summary = service.get_session_summary(current_user.id, session_id)
    except StudydeckError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Learning session not found",
            ) from e
        logger.error(f"Error getting learning session {session_id}: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get learning session",
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error getting learning session: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e

    return schemas.SessionSummaryResponse(session_summary=summary)


@router.put(
    "/sessions/{session_id}",
    response_model=schemas.SessionSummaryResponse,
    status_code=status.HTTP_200_OK,
)
def end_learning_session(
    current_user: CurrentUser,
    session_id: SessionId,
    service: LearningServiceDep,
) -> schemas.SessionSummaryResponse:
    """
    End a learning session and calculate its summary statistics.

    Ending an already ended session recomputes and overwrites the summary.

    Raises:
        HTTPException: 404 if the session is absent or not owned, 500 otherwise
    """
    try:
        summary = service.end_learning_session(current_user.id, session_id)
    except StudydeckError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Learning session not found",
            ) from e
        logger.error(f"Error ending learning session {session_id}: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to end learning session",
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error ending learning session: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e

    return schemas.SessionSummaryResponse(session_summary=summary)


@router.post(
    "/sessions/{session_id}/reviews",
    response_model=schemas.FlashcardReview,
    status_code=status.HTTP_201_CREATED,
)
def record_flashcard_review(
    current_user: CurrentUser,
    session_id: SessionId,
    request: schemas.FlashcardReviewCreateRequest,
    service: LearningServiceDep,
) -> schemas.FlashcardReview:
    """
    Record the answer given to one flashcard during a learning session.

    The next review date is scheduled by the client and stored as given.
    """
    try:
        return service.record_review(
            user_id=current_user.id,
            session_id=session_id,
            flashcard_id=request.flashcard_id,
            is_correct=request.is_correct,
            next_review_date=request.next_review_date,
        )
    except StudydeckError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
        logger.error(f"Error recording review in session {session_id}: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record flashcard review",
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error recording review: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        ) from e


@router.get(
    "/due-count",
    response_model=schemas.DueCountResponse,
    status_code=status.HTTP_200_OK,
)
def get_due_flashcards_count(
    current_user: CurrentUser,
    service: LearningServiceDep,
    today: Annotated[
        date | None, Query(description="Reference day (YYYY-MM-DD), defaults to today in UTC")
    ] = None,
) -> schemas.DueCountResponse:
    """Count flashcards due today and per day over the coming week."""
    try:
        return service.get_due_flashcards_count(
            current_user.id, today or datetime.now(UTC).date()
        )
    except Exception as e:
        logger.error(f"Error fetching due flashcards count: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get due flashcards count",
        ) from e
