"""API routers."""

from studydeck.routers import auth, learning

__all__ = ["auth", "learning"]
