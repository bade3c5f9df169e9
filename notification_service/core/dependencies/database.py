"""Database session dependency for route handlers.

Route handlers get a request-scoped session:

    @router.get("/items")
    async def list_items(session: SessionDep):
        ...

Code outside a request (workers, CLI) uses ``database.session()`` directly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.dependencies.container import ContainerDep


async def get_db_session(container: ContainerDep) -> AsyncIterator[AsyncSession]:
    """Yield a session that is closed when the request completes."""
    async with container.database.session() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
