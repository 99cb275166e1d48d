"""Candidate repository over the key-value table store.

Owns partition-key derivation, duplicate-email detection, paging with
page-local sorting, and optimistic-concurrency updates.

Every ``StoreError`` is wrapped in ``DatabaseError``; typed errors and
anything unexpected propagate unchanged.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from app.core.constants import CANDIDATE_ENTITY_NAME, PARTITION_KEY_PREFIX
from app.core.errors import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PreconditionFailedError,
)
from app.db.table_store import StoreError, TableStore, VersionMismatchError
from app.models.candidate import Candidate, CandidateCreate, CandidateUpdate
from app.models.enums import CandidateStatus, InterviewStage
from app.models.pagination import PaginatedResult, PaginationOptions, SortDirection, SortField
from app.services.mapper import from_storage_entity, to_storage_entity

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = ("id", "partition_key", "row_key", "created_at")


def partition_key_for(moment: datetime) -> str:
    """Return the partition key for a creation time: ``CANDIDATE_<yyyy>-<mm>``."""
    return f"{PARTITION_KEY_PREFIX}_{moment.year:04d}-{moment.month:02d}"


def _next_updated_at(previous: datetime) -> datetime:
    """Current UTC time, bumped past ``previous`` if the clock has not moved."""
    now = datetime.now(timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def sort_candidates(
    candidates: list[Candidate],
    sort_by: SortField,
    sort_direction: SortDirection = "asc",
) -> None:
    """Sort candidates in place by ``sort_by``."""
    if sort_by == "name":
        candidates.sort(
            key=lambda c: (c.name.casefold(), c.name),
            reverse=sort_direction == "desc",
        )
    elif sort_by == "applicationDate":
        candidates.sort(
            key=lambda c: c.application_date.timestamp(),
            reverse=sort_direction == "desc",
        )
    elif sort_by == "status":
        candidates.sort(key=lambda c: c.status.value, reverse=sort_direction == "desc")


class CandidateRepository:
    """Data access for candidates."""

    def __init__(self, store: TableStore) -> None:
        self._store = store

    async def find_all(self) -> list[Candidate]:
        """Return every stored candidate in store order."""
        try:
            return [from_storage_entity(e) async for e in self._store.list_entities()]
        except StoreError as exc:
            raise DatabaseError("Failed to retrieve candidates", exc) from exc

    async def find_by_id(self, id: str) -> Candidate | None:
        """Look up a candidate by id across all partitions.

        Returns ``None`` when no row has ``row_key == id``.
        """
        try:
            async with aclosing(self._store.query_entities("row_key", id)) as rows:
                async for entity in rows:
                    return from_storage_entity(entity)
        except StoreError as exc:
            raise DatabaseError(f"Failed to retrieve candidate with id {id}", exc) from exc
        return None

    async def _email_exists(self, email: str) -> bool:
        async with aclosing(self._store.query_entities("email", email)) as rows:
            async for _ in rows:
                return True
        return False

    async def create(self, dto: CandidateCreate, actor: str | None = None) -> Candidate:
        """Persist a new candidate.

        The duplicate-email check and the write are separate round trips,
        so uniqueness is best-effort under concurrent creates.
        """
        try:
            if await self._email_exists(dto.email):
                raise ConflictError(f"Candidate with email {dto.email} already exists")

            id = str(uuid4())
            now = datetime.now(timezone.utc)
            candidate = Candidate(
                id=id,
                partition_key=partition_key_for(now),
                row_key=id,
                name=dto.name,
                email=dto.email,
                phone=dto.phone,
                position=dto.position,
                status=dto.status or CandidateStatus.new,
                interview_stage=dto.interview_stage or InterviewStage.not_started,
                application_date=dto.application_date or now,
                expected_salary=dto.expected_salary,
                years_of_experience=dto.years_of_experience,
                notes=dto.notes,
                created_at=now,
                updated_at=now,
                created_by=actor,
                updated_by=actor,
            )

            candidate.etag = await self._store.put_entity(to_storage_entity(candidate))
        except StoreError as exc:
            raise DatabaseError("Failed to create candidate", exc) from exc

        logger.info(
            "candidate_created",
            extra={"candidate_id": candidate.id, "partition_key": candidate.partition_key},
        )
        return candidate

    async def update(
        self,
        id: str,
        dto: CandidateUpdate,
        actor: str | None = None,
    ) -> Candidate:
        """Merge ``dto`` over the stored candidate and write it back.

        The write is conditional on the version tag read here; a mismatch
        raises ``PreconditionFailedError`` and is not retried.
        """
        existing = await self.find_by_id(id)
        if existing is None:
            raise NotFoundError(CANDIDATE_ENTITY_NAME, id)

        changes = dto.model_dump(exclude_unset=True)
        for field in _IMMUTABLE_FIELDS:
            changes.pop(field, None)
        changes.update(
            id=existing.id,
            partition_key=existing.partition_key,
            row_key=existing.row_key,
            created_at=existing.created_at,
            updated_at=_next_updated_at(existing.updated_at),
        )
        if actor is not None:
            changes["updated_by"] = actor

        updated = existing.model_copy(update=changes)

        try:
            updated.etag = await self._store.update_entity(
                to_storage_entity(updated), etag=existing.etag
            )
        except VersionMismatchError as exc:
            logger.warning("candidate_update_conflict", extra={"candidate_id": id})
            raise PreconditionFailedError(
                f"Candidate with id {id} was modified by another request; reload and retry"
            ) from exc
        except StoreError as exc:
            raise DatabaseError(f"Failed to update candidate with id {id}", exc) from exc

        logger.info("candidate_updated", extra={"candidate_id": id})
        return updated

    async def delete(self, id: str) -> None:
        """Physically delete a candidate; its key pair comes from a lookup."""
        candidate = await self.find_by_id(id)
        if candidate is None:
            raise NotFoundError(CANDIDATE_ENTITY_NAME, id)

        try:
            await self._store.delete_entity(candidate.partition_key, candidate.row_key)
        except StoreError as exc:
            raise DatabaseError(f"Failed to delete candidate with id {id}", exc) from exc

        logger.info("candidate_deleted", extra={"candidate_id": id})

    async def list(self, options: PaginationOptions) -> PaginatedResult[Candidate]:
        """Fetch one page in store order, optionally sorted within the page."""
        try:
            page = await self._store.list_page(
                options.page_size, options.continuation_token
            )
        except StoreError as exc:
            raise DatabaseError("Failed to list candidates", exc) from exc

        candidates = [from_storage_entity(entity) for entity in page.items]
        if options.sort_by:
            sort_candidates(candidates, options.sort_by, options.sort_direction)

        return PaginatedResult[Candidate](
            items=candidates,
            page_size=options.page_size,
            continuation_token=page.continuation_token,
        )
