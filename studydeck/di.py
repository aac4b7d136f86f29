from collections.abc import Callable
from typing import Any

from dependency_injector import providers

from studydeck.core import Container
from studydeck.database import DatabaseSession


def inject_service(provider_name: str) -> Callable[[DatabaseSession], Any]:
    """
    Create a FastAPI dependency for a container provider.

    Each call builds its own container bound to the request-scoped database
    session, so concurrent requests never share provider state.
    """

    def dependency(db: DatabaseSession) -> Any:
        container = Container(db=providers.Object(db))
        return getattr(container, provider_name)()

    return dependency
