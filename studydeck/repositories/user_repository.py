"""User repository for database operations."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from studydeck import models

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session) -> None:
        """Initialize repository with database session."""
        self.db = db

    def get_by_id(self, user_id: uuid.UUID) -> models.User | None:
        """Get a user by ID."""
        stmt = select(models.User).where(models.User.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_email(self, email: str) -> models.User | None:
        """Get a user by email address."""
        stmt = select(models.User).where(models.User.email == email)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_with_password(self, email: str, hashed_password: str) -> models.User:
        """Create a user with an already hashed password."""
        user = models.User(email=email, hashed_password=hashed_password)
        self.db.add(user)
        self.db.flush()
        self.db.refresh(user)
        logger.info(f"Created user: id={user.id}")
        return user
