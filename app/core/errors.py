"""Typed error taxonomy for the candidate core.

Validation and the repository raise these; the service lets them pass
through; the HTTP layer maps each kind to a status code.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for all expected application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or out-of-range input supplied by the caller.

    ``field`` is the dotted path of the first offending attribute, or
    ``None`` when the failure is not tied to a single field.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(AppError):
    """Referenced record does not exist."""

    def __init__(self, entity: str, id: str) -> None:
        super().__init__(f"{entity} with id {id} not found")
        self.entity = entity
        self.id = id


class ConflictError(AppError):
    """Uniqueness violation detected before write."""


class PreconditionFailedError(AppError):
    """Version tag mismatch on a conditional write."""


class DatabaseError(AppError):
    """Unexpected failure from the table store.

    The original exception is kept on ``cause`` for diagnostics and is
    never exposed to HTTP callers.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
