"""Custom exceptions for the safety inspections module."""
from __future__ import annotations

from typing import Optional


class SafetyHubError(RuntimeError):
    """Base exception for inspection and weekly report operations."""


class ValidationError(SafetyHubError, ValueError):
    """Raised when a submission or patch breaks a record invariant."""


class NotFoundError(SafetyHubError, KeyError):
    """Raised when a record, finding or report id does not resolve."""

    def __init__(self, kind: str, entity_id: str, parent_id: Optional[str] = None) -> None:
        message = f"{kind} {entity_id!r} not found"
        if parent_id is not None:
            message = f"{message} in {parent_id!r}"
        super().__init__(message)
        self.kind = kind
        self.entity_id = entity_id
        self.parent_id = parent_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class PersistenceError(SafetyHubError):
    """Raised when the local record store rejects a read or write."""

    def __init__(self, message: str, entity_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.entity_id = entity_id


class GeneratorUnavailableError(SafetyHubError):
    """Raised by the narrative client when no text can be produced."""


__all__ = [
    "SafetyHubError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "GeneratorUnavailableError",
]
