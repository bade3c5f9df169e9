"""Repository-level exceptions, translated to HTTP errors by the routers."""

from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base class for repository failures."""


class NotFoundError(RepositoryError):
    """No row matched the lookup.

    Attributes:
        model_name: Mapped class that was queried.
        identifier: Column values used in the lookup.
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]) -> None:
        self.model_name = model_name
        self.identifier = identifier
        keys = ", ".join(f"{k}={v!r}" for k, v in identifier.items())
        super().__init__(f"{model_name} not found ({keys})")
