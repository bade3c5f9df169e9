"""Shared API schemas."""

from __future__ import annotations

from notification_service.core.schemas.problem_details import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)

__all__ = ["ProblemDetails", "ValidationErrorItem", "ValidationProblemDetails"]
