"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from studydeck.config import configure_logging, get_settings
from studydeck.database import dispose_engine, initialize_database
from studydeck.exceptions import ErrorKind, StudydeckError
from studydeck.routers import auth, learning

settings = get_settings()
configure_logging(settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    initialize_database(settings)
    logger.info("application_started", environment=settings.ENVIRONMENT)
    yield
    dispose_engine()
    logger.info("application_stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
)

app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StudydeckError)
async def studydeck_error_handler(request: Request, exc: StudydeckError) -> JSONResponse:
    """Render errors that escaped the routers, hiding internal causes."""
    if exc.kind is ErrorKind.INTERNAL:
        logger.error("unhandled_service_error", path=request.url.path, error=exc.message)
        detail = "An unexpected error occurred"
    else:
        detail = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(learning.router, prefix=settings.API_PREFIX)


@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": "Welcome to studydeck API"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "healthy"}
