"""Candidate <-> storage entity mapping.

The table store has no nullable typed columns, so absent optional values are
written as sentinels and read back as ``None``:

- optional strings (phone, notes, created_by, updated_by) -> ``""``
- optional numbers (expected_salary, years_of_experience) -> ``0``

An explicit ``0`` therefore reads back as absent.  Dates are stored as
ISO-8601 UTC strings.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import TypeAdapter

from app.models.candidate import Candidate


_DATETIME = TypeAdapter(datetime)


def _parse_datetime(value: datetime | date | str) -> datetime:
    """Aware UTC datetime from a datetime, a date or an ISO-8601 string.

    Strings go through pydantic, which accepts ``Z`` and any number of
    fractional-second digits (as returned by Postgres ``timestamptz``).
    """
    if isinstance(value, str):
        value = _DATETIME.validate_python(value)
    elif not isinstance(value, datetime):
        value = datetime.combine(value, time(), tzinfo=timezone.utc)

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_store_datetime(value: datetime | date | str) -> str:
    """Coerce a datetime, date or ISO string to an ISO-8601 UTC string."""
    return _parse_datetime(value).isoformat()


def _from_store_datetime(value: datetime | str | None) -> datetime | None:
    """Rebuild an aware UTC datetime from a stored value."""
    if value is None or value == "":
        return None
    return _parse_datetime(value)


def _optional_text(value: Any) -> str | None:
    return value if value else None


def _optional_number(value: Any) -> float | None:
    return value if value else None


def to_storage_entity(candidate: Candidate) -> dict[str, Any]:
    """Map a domain candidate to a flat storage entity.

    ``id`` is not stored; ``row_key`` carries it.  Store-managed ``etag`` and
    ``timestamp`` are left to the store.
    """
    return {
        "partition_key": candidate.partition_key,
        "row_key": candidate.row_key,
        "name": candidate.name,
        "email": candidate.email,
        "phone": candidate.phone or "",
        "position": candidate.position,
        "status": candidate.status.value,
        "interview_stage": candidate.interview_stage.value,
        "application_date": _to_store_datetime(candidate.application_date),
        "expected_salary": candidate.expected_salary or 0,
        "years_of_experience": candidate.years_of_experience or 0,
        "notes": candidate.notes or "",
        "created_at": _to_store_datetime(candidate.created_at),
        "updated_at": _to_store_datetime(candidate.updated_at),
        "created_by": candidate.created_by or "",
        "updated_by": candidate.updated_by or "",
    }


def from_storage_entity(entity: dict[str, Any]) -> Candidate:
    """Map a storage entity back to a domain candidate."""
    return Candidate(
        id=entity.get("id") or entity["row_key"],
        partition_key=entity["partition_key"],
        row_key=entity["row_key"],
        timestamp=_from_store_datetime(entity.get("timestamp")),
        etag=entity.get("etag"),
        name=entity["name"],
        email=entity["email"],
        phone=_optional_text(entity.get("phone")),
        position=entity["position"],
        status=entity["status"],
        interview_stage=entity["interview_stage"],
        application_date=_from_store_datetime(entity["application_date"]),
        expected_salary=_optional_number(entity.get("expected_salary")),
        years_of_experience=_optional_number(entity.get("years_of_experience")),
        notes=_optional_text(entity.get("notes")),
        created_at=_from_store_datetime(entity["created_at"]),
        updated_at=_from_store_datetime(entity["updated_at"]),
        created_by=_optional_text(entity.get("created_by")),
        updated_by=_optional_text(entity.get("updated_by")),
    )
