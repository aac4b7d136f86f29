import uuid
from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
import structlog
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jwt import InvalidTokenError
from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError

from studydeck.config import get_settings
from studydeck.database import DatabaseSession
from studydeck.exceptions import CredentialsException, UnauthorizedError
from studydeck.models import User
from studydeck.repositories import UserRepository
from studydeck.schemas import Token

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"

password_hash = PasswordHash.recommended()
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")
DUMMY_HASH = password_hash.hash("studydeck-timing-placeholder")


def hash_password(plain_password: str) -> str:
    """Hash a plain password for storage."""
    return password_hash.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    try:
        return password_hash.verify(plain_password, hashed_password)
    except UnknownHashError:
        return False


def authenticate_user(email: str, password: str, db: DatabaseSession) -> User:
    """
    Resolve a user from email and password.

    Raises:
        UnauthorizedError: If the email is unknown or the password is wrong
    """
    user = UserRepository(db).get_by_email(email)
    if not user:
        verify_password(password, DUMMY_HASH)  # Constant time to avoid timing difference
        raise UnauthorizedError("Incorrect email or password")
    if not user.hashed_password or not verify_password(password, user.hashed_password):
        raise UnauthorizedError("Incorrect email or password")
    return user


def create_access_token(user_id: uuid.UUID) -> Token:
    settings = get_settings()
    expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    expire = datetime.now(UTC) + timedelta(seconds=expires_in)
    to_encode = {"sub": str(user_id), "exp": expire, "type": "access"}
    access_token = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return Token(
        access_token=access_token,
        token_type="bearer",  # noqa: S106
        expires_in=expires_in,
    )


def verify_access_token(token: str) -> uuid.UUID | None:
    """Verify an access token and return the user ID if valid."""
    try:
        payload = jwt.decode(token, get_settings().SECRET_KEY, algorithms=[ALGORITHM])
        if payload.get("type") != "access":
            return None
        subject = payload.get("sub")
        if subject is None:
            return None
        return uuid.UUID(subject)
    except (InvalidTokenError, ValueError):
        return None


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)], db: DatabaseSession
) -> User:
    """
    Get the current authenticated user from the access token.

    Raises:
        CredentialsException: If token is invalid or user not found
    """
    user_id = verify_access_token(token)
    if user_id is None:
        logger.debug("invalid_access_token")
        raise CredentialsException

    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise CredentialsException
    return user
