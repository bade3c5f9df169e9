"""FastAPI dependencies for the notifications feature."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from notification_service.core.dependencies import ContainerDep
from notification_service.features.notifications.service import IngestionGateway

UNKNOWN_CLIENT = "unknown"


def get_ingestion_gateway(container: ContainerDep) -> IngestionGateway:
    return container.gateway


def get_client_key(request: Request, container: ContainerDep) -> str:
    """Identify the client for rate limiting.

    The first X-Forwarded-For hop is used only when the deployment trusts
    its proxy; otherwise the socket peer address.
    """
    if container.settings.rate_limit.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",", 1)[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


IngestionGatewayDep = Annotated[IngestionGateway, Depends(get_ingestion_gateway)]
ClientKeyDep = Annotated[str, Depends(get_client_key)]
