"""Candidate service: the single entry point used by request handlers.

Validates raw input and delegates to ``CandidateRepository``.  The only
error translation done here is ``find_by_id -> None`` to ``NotFoundError``;
every other typed error passes through unchanged.
"""

from __future__ import annotations

from typing import Any

from app.core.constants import CANDIDATE_ENTITY_NAME
from app.core.errors import NotFoundError
from app.models.candidate import Candidate
from app.models.pagination import PaginatedResult, PaginationOptions
from app.services.repository import CandidateRepository
from app.services.validation import validate_create, validate_update


class CandidateService:
    """Orchestrates validation and repository calls for one request."""

    def __init__(self, repository: CandidateRepository) -> None:
        self._repository = repository

    async def create_candidate(self, raw: Any, actor: str | None = None) -> Candidate:
        dto = validate_create(raw)
        return await self._repository.create(dto, actor=actor)

    async def get_candidate_by_id(self, id: str) -> Candidate:
        candidate = await self._repository.find_by_id(id)
        if candidate is None:
            raise NotFoundError(CANDIDATE_ENTITY_NAME, id)
        return candidate

    async def update_candidate(
        self,
        id: str,
        raw: Any,
        actor: str | None = None,
    ) -> Candidate:
        dto = validate_update(raw)
        return await self._repository.update(id, dto, actor=actor)

    async def delete_candidate(self, id: str) -> None:
        await self._repository.delete(id)

    async def list_candidates(
        self, options: PaginationOptions | None = None
    ) -> PaginatedResult[Candidate]:
        return await self._repository.list(options or PaginationOptions())
