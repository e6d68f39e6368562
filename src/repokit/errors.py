"""Shared exception hierarchy for repokit."""

from typing import Any, Optional


class RepositoryError(Exception):
    """Base exception for every error raised by repokit."""


# ── Arguments ─────────────────────────────────────────────────────────────────


class InvalidArgumentError(RepositoryError, ValueError):
    """A required argument was None or out of range."""


class EntityValidationError(InvalidArgumentError):
    """Entity failed schema validation before being written."""

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


# ── Lookup ────────────────────────────────────────────────────────────────────


class NotFoundError(RepositoryError, LookupError):
    """No row matched, or a delete affected zero rows."""


# ── Schema ────────────────────────────────────────────────────────────────────


class SchemaError(RepositoryError):
    """Primary key could not be resolved for an entity type."""


class ShapeParseError(SchemaError):
    """Entity type cannot be introspected (not a mapped class)."""


class NoPrimaryKeyError(SchemaError):
    """Entity type declares no primary key column."""


# ── Backend ───────────────────────────────────────────────────────────────────


class BackendError(RepositoryError):
    """Storage backend reported an error; the original is kept on `.original`."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original
