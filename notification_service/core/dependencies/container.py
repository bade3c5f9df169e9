"""Access to the ServiceContainer built in the application lifespan."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from notification_service.core.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """Return the container stored on ``app.state`` at startup.

    Raises:
        RuntimeError: If the lifespan has not run.
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        msg = "Service container not initialized; is the application lifespan running?"
        raise RuntimeError(msg)
    return container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
