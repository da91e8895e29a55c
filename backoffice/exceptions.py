"""
Domain errors for the back-office model.

Raised by repositories and services; the HTTP layer maps each one to a
status code and never the other way around.
"""

from typing import Any, Optional

from sqlalchemy.exc import IntegrityError


class BackofficeError(Exception):
    """Base exception for all back-office errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BackofficeError):
    """Raised when an id-based lookup misses."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            message=f"{entity} {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )


class DuplicateKeyError(BackofficeError):
    """Raised when a unique key (tax id) is already taken."""

    def __init__(self, entity: str, field: str, value: Any = None):
        message = f"{entity} with this {field} already exists"
        if value is not None:
            message = f"{entity} with {field} {value!r} already exists"
        super().__init__(
            message=message,
            details={"entity": entity, "field": field, "value": value},
        )


class ValidationFailure(BackofficeError):
    """Raised when a required field or a mandatory reference is missing."""

    def __init__(self, message: str, fields: Optional[list] = None):
        super().__init__(message=message, details={"fields": fields or []})


class ReferentialIntegrityViolation(BackofficeError):
    """Raised when a delete or write is blocked by dependent rows."""


def translate_integrity_error(exc: IntegrityError, entity: str) -> BackofficeError:
    """
    Map a storage constraint failure onto the domain taxonomy.

    Works on the driver message, which both SQLite and PostgreSQL phrase
    predictably enough ("UNIQUE constraint failed", "duplicate key value",
    "NOT NULL constraint failed", "null value in column").
    """
    reason = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = reason.lower()
    if "unique" in lowered or "duplicate key" in lowered:
        field = "tax_id" if "tax_id" in lowered else "key"
        return DuplicateKeyError(entity, field)
    if "not null" in lowered or "null value" in lowered:
        return ValidationFailure(f"{entity} is missing a required field: {reason}")
    return ReferentialIntegrityViolation(
        f"{entity} violates a foreign key constraint",
        details={"entity": entity, "reason": reason},
    )
