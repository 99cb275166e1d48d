"""Pydantic models for candidates.

``CandidateCreate`` and ``CandidateUpdate`` carry the field rules applied to
caller input; ``Candidate`` is the full domain record.  All models accept
and emit camelCase aliases (``interviewStage``, ``applicationDate``...) and
also accept snake_case names.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from app.core.constants import (
    NAME_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    POSITION_MAX_LENGTH,
)
from app.models.enums import CandidateStatus, InterviewStage

_NUMERIC = re.compile(r"[+-]?\d+(\.\d*)?")


def _require_text(label: str):
    def check(value: str) -> str:
        if not value.strip():
            raise PydanticCustomError(
                "blank_text", "{label} is required", {"label": label}
            )
        return value

    return check


def _date_to_datetime(value: Any) -> Any:
    """Accept only date/datetime values or ISO-8601 strings.

    A plain ``date`` becomes midnight UTC.  Numbers and numeric strings are
    rejected rather than read as unix timestamps.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=timezone.utc)
    if isinstance(value, str) and not _NUMERIC.fullmatch(value.strip()):
        return value
    raise PydanticCustomError(
        "iso_datetime", "Expected a date or an ISO-8601 datetime string"
    )


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


NameText = Annotated[
    str, Field(max_length=NAME_MAX_LENGTH), AfterValidator(_require_text("Name"))
]
PositionText = Annotated[
    str, Field(max_length=POSITION_MAX_LENGTH), AfterValidator(_require_text("Position"))
]
NotesText = Annotated[str, Field(max_length=NOTES_MAX_LENGTH)]
Salary = Annotated[float, Field(gt=0, strict=True)]
YearsOfExperience = Annotated[float, Field(ge=0, strict=True)]
UtcDatetime = Annotated[
    datetime, BeforeValidator(_date_to_datetime), AfterValidator(_as_utc)
]

_MODEL_CONFIG = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class CandidateCreate(BaseModel):
    """Payload for creating a candidate."""
    model_config = _MODEL_CONFIG

    name: NameText
    email: EmailStr
    phone: str | None = None
    position: PositionText
    status: CandidateStatus | None = None
    interview_stage: InterviewStage | None = None
    application_date: UtcDatetime | None = None
    expected_salary: Salary | None = None
    years_of_experience: YearsOfExperience | None = None
    notes: NotesText | None = None


class CandidateUpdate(BaseModel):
    """Partial payload for updating a candidate.

    Only fields present in the input are applied (``model_fields_set``).
    ``null`` clears an optional field; it is rejected for the others.
    """
    model_config = _MODEL_CONFIG

    name: NameText | None = None
    email: EmailStr | None = None
    phone: str | None = None
    position: PositionText | None = None
    status: CandidateStatus | None = None
    interview_stage: InterviewStage | None = None
    application_date: UtcDatetime | None = None
    expected_salary: Salary | None = None
    years_of_experience: YearsOfExperience | None = None
    notes: NotesText | None = None

    @field_validator(
        "name",
        "email",
        "position",
        "status",
        "interview_stage",
        "application_date",
        mode="before",
    )
    @classmethod
    def _reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise PydanticCustomError(
                "null_not_allowed",
                "{field} cannot be null",
                {"field": to_camel(info.field_name or "")},
            )
        return value


class Candidate(BaseModel):
    """Full candidate record."""
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str
    partition_key: str
    row_key: str
    timestamp: datetime | None = None  # store-managed -- read-only
    etag: str | None = Field(default=None, alias="eTag")  # store-managed version tag

    name: str
    email: str
    phone: str | None = None
    position: str
    status: CandidateStatus = CandidateStatus.new
    interview_stage: InterviewStage = InterviewStage.not_started
    application_date: datetime
    expected_salary: float | None = None
    years_of_experience: float | None = None
    notes: str | None = None

    created_at: datetime
    updated_at: datetime
    created_by: str | None = None
    updated_by: str | None = None
