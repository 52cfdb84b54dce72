"""
Application-level exception types.

Merge operations report their failures as result values; these exceptions
cover lookups and workflow changes outside the merge path.
"""

from __future__ import annotations


class AppError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        self.detail = detail or message
        super().__init__(message)


class ConfigurationError(AppError):
    """Raised when required configuration is missing or invalid."""


class EntityNotFoundError(AppError):
    """Raised when an episode or panel cannot be found in the store."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            detail=f"{entity_type} not found",
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class BreakdownNotFoundError(EntityNotFoundError):
    """Raised when a pending breakdown was never registered or already discarded."""

    def __init__(self, breakdown_id: object) -> None:
        super().__init__("Breakdown", breakdown_id)


class TransitionRejectedError(AppError):
    """Raised when a transition policy refuses a status change."""

    def __init__(self, entity_type: str, current: str, requested: str) -> None:
        super().__init__(
            f"{entity_type} transition rejected: {current} -> {requested}",
            detail=f"cannot move {entity_type} from {current} to {requested}",
        )
        self.entity_type = entity_type
        self.current = current
        self.requested = requested
