"""Input validation for candidate operations.

Wraps the pydantic models in ``app.models`` and reports the first failure as
an ``app.core.errors.ValidationError`` naming the offending field (dotted
path for nested fields, ``None`` for whole-input errors).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError
from app.models.candidate import CandidateCreate, CandidateUpdate
from app.models.pagination import PaginationOptions


def _first_error(exc: PydanticValidationError) -> ValidationError:
    """Convert the first pydantic error into a ``ValidationError``."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or None
    return ValidationError(error["msg"], field=field)


def _validate(model: type[BaseModel], raw: Any) -> Any:
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise _first_error(exc) from exc


def validate_create(raw: Any) -> CandidateCreate:
    """Validate input for creating a candidate."""
    return _validate(CandidateCreate, raw)


def validate_update(raw: Any) -> CandidateUpdate:
    """Validate partial input for updating a candidate.

    Fails when no recognized field is present.
    """
    update: CandidateUpdate = _validate(CandidateUpdate, raw)
    if not update.model_fields_set:
        raise ValidationError("At least one field must be provided")
    return update


def validate_pagination(raw: Any = None) -> PaginationOptions:
    """Validate list options; ``None`` yields the defaults."""
    return _validate(PaginationOptions, raw or {})
