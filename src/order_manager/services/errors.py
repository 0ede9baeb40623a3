"""Service layer errors."""

from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    """Base error for service-layer failures."""


class ValidationError(ServiceError):
    """Raised when user input breaks a business rule."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(ServiceError):
    """Raised when a record does not exist in the workspace."""
