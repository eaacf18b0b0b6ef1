"""Exceptions raised by the lifecycle services."""

from __future__ import annotations


class ScolariteError(Exception):
    """Base exception for service errors."""


class ValidationError(ScolariteError):
    """Malformed or missing input (blank field, out-of-range value, bad format)."""


class NotFoundError(ScolariteError):
    """A referenced record does not exist."""

    def __init__(self, entity: str, field: str, value: object) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field} '{value}' not found")


class ConflictError(ScolariteError):
    """A uniqueness constraint would be violated, or a deletion is blocked by dependents."""


class BusinessRuleError(ScolariteError):
    """An enrollment or grading rule was violated."""


class ConsistencyError(ScolariteError):
    """An operation expected to have taken effect did not. Not recoverable."""
