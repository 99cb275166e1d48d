"""Candidate CRUD endpoints.

Each request builds its own ``CandidateService`` bound to the shared store
client.  Typed errors are mapped to status codes by ``error_response_for``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse, Response

from app.core.errors import ValidationError
from app.db.table_store import get_candidate_store
from app.services.candidates import CandidateService
from app.services.repository import CandidateRepository
from app.services.validation import validate_pagination
from app.routers.responses import (
    error_response_for,
    serialize_candidate,
    serialize_page,
    success_response,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_candidate_service() -> CandidateService:
    """Request-scoped service over the configured table store."""
    store = await get_candidate_store()
    return CandidateService(CandidateRepository(store))


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise ValidationError("Request body must be valid JSON") from exc


@router.get("")
async def list_candidates(
    request: Request,
    service: CandidateService = Depends(get_candidate_service),
) -> JSONResponse:
    """List one page of candidates.

    Query: ``pageSize`` (1-100), ``continuationToken``, ``sortBy``
    (name | applicationDate | status), ``sortDirection`` (asc | desc).
    Sorting applies within the returned page only.
    """
    try:
        options = validate_pagination(dict(request.query_params))
        result = await service.list_candidates(options)
    except Exception as exc:
        return error_response_for(exc)
    return success_response(serialize_page(result))


@router.get("/{candidate_id}")
async def get_candidate(
    candidate_id: str,
    service: CandidateService = Depends(get_candidate_service),
) -> JSONResponse:
    """Return a single candidate."""
    try:
        candidate = await service.get_candidate_by_id(candidate_id)
    except Exception as exc:
        return error_response_for(exc)
    return success_response(serialize_candidate(candidate))


@router.post("")
async def create_candidate(
    request: Request,
    service: CandidateService = Depends(get_candidate_service),
) -> JSONResponse:
    """Create a candidate; 409 when the email is already registered."""
    try:
        raw = await _read_json(request)
        candidate = await service.create_candidate(raw)
    except Exception as exc:
        return error_response_for(exc)
    return success_response(serialize_candidate(candidate), status_code=201)


@router.put("/{candidate_id}")
async def update_candidate(
    candidate_id: str,
    request: Request,
    service: CandidateService = Depends(get_candidate_service),
) -> JSONResponse:
    """Apply a partial update; 412 when the record changed since it was read."""
    try:
        raw = await _read_json(request)
        candidate = await service.update_candidate(candidate_id, raw)
    except Exception as exc:
        return error_response_for(exc)
    return success_response(serialize_candidate(candidate))


@router.delete("/{candidate_id}", response_model=None)
async def delete_candidate(
    candidate_id: str,
    service: CandidateService = Depends(get_candidate_service),
) -> Response:
    """Delete a candidate; 204 on success."""
    try:
        await service.delete_candidate(candidate_id)
    except Exception as exc:
        return error_response_for(exc)
    return Response(status_code=204)
