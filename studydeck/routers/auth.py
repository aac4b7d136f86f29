import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette import status

from studydeck import schemas
from studydeck.config import get_settings
from studydeck.database import DatabaseSession
from studydeck.exceptions import ErrorKind, StudydeckError
from studydeck.models import User
from studydeck.repositories import UserRepository
from studydeck.services.auth_service import (
    authenticate_user,
    create_access_token,
    get_current_user,
    hash_password,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])
limiter = Limiter(key_func=get_remote_address, enabled=get_settings().RATE_LIMIT_ENABLED)


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")  # type: ignore[misc]
async def register(
    request: Request,
    register_data: schemas.UserRegisterRequest,
    db: DatabaseSession,
) -> schemas.Token:
    """
    Register a new user account.

    Returns an access token for immediate login after registration.
    """
    user_repository = UserRepository(db)

    if user_repository.get_by_email(register_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = user_repository.create_with_password(
        email=register_data.email, hashed_password=hash_password(register_data.password)
    )
    db.commit()

    return create_access_token(user.id)


@router.post("/login")
@limiter.limit("5/minute")  # type: ignore[misc]
async def login(
    request: Request,
    credentials: schemas.UserLoginRequest,
    db: DatabaseSession,
) -> schemas.Token:
    try:
        user = authenticate_user(credentials.email, credentials.password, db)
    except StudydeckError as e:
        if e.kind is not ErrorKind.UNAUTHORIZED:
            raise
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    return create_access_token(user.id)


@router.get("/me")
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> schemas.UserDetailsResponse:
    """Get the current user's profile information."""
    return schemas.UserDetailsResponse.model_validate(current_user)
