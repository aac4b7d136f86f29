"""Database engine, session factory and the request-scoped session dependency."""

from collections.abc import Generator
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from studydeck.config import Settings, get_settings


class Base(DeclarativeBase):
    """Base class for all database models."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def engine_options(database_url: str) -> dict[str, Any]:
    """Keyword arguments for ``create_engine`` suited to the database backend."""
    if make_url(database_url).get_backend_name() == "sqlite":
        # A single shared connection keeps in-memory databases alive across threads
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


def initialize_database(settings: Settings) -> None:
    """Create the engine and session factory. Called once from the app lifespan."""
    global _engine, _session_factory  # noqa: PLW0603

    _engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)


def get_session_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> sessionmaker[Session]:
    """Return the session factory, initializing the database on first use."""
    if _session_factory is None:
        initialize_database(settings)
    assert _session_factory is not None
    return _session_factory


def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def get_db(
    session_factory: Annotated[sessionmaker[Session], Depends(get_session_factory)],
) -> Generator[Session, None, None]:
    """Yield one session per request and close it afterwards."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


DatabaseSession = Annotated[Session, Depends(get_db)]
