"""Shared test fixtures.

Provides an in-memory ``TableStore`` fake, repository / service fixtures
bound to it, a candidate factory, and a FastAPI ``TestClient`` whose
candidate service uses the fake store.
"""

from __future__ import annotations

import os

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")

from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.db.table_store import EntityPage, StoreError, VersionMismatchError
from app.models.candidate import Candidate
from app.services.candidates import CandidateService
from app.services.mapper import to_storage_entity
from app.services.repository import CandidateRepository


class InMemoryTableStore:
    """Dict-backed ``TableStore`` ordered by ``(partition_key, row_key)``.

    Set ``fail_with`` to make every call raise that exception.
    """

    def __init__(self) -> None:
        self.rows: dict[tuple[str, str], dict[str, Any]] = {}
        self.fail_with: Exception | None = None
        self.put_calls = 0
        self.update_etags: list[str | None] = []
        self.deleted: list[tuple[str, str]] = []

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _ordered(self) -> list[dict[str, Any]]:
        return [dict(self.rows[key]) for key in sorted(self.rows)]

    def _write(self, entity: dict[str, Any]) -> str:
        etag = uuid4().hex
        self.rows[(entity["partition_key"], entity["row_key"])] = {
            **entity,
            "etag": etag,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return etag

    def seed(self, candidate: Candidate, etag: str = "etag-1") -> Candidate:
        """Store ``candidate`` directly, bypassing the repository."""
        self.rows[(candidate.partition_key, candidate.row_key)] = {
            **to_storage_entity(candidate),
            "etag": etag,
            "timestamp": candidate.updated_at.isoformat(),
        }
        return candidate

    async def put_entity(self, entity: dict[str, Any]) -> str:
        self._check()
        self.put_calls += 1
        return self._write(entity)

    async def query_entities(
        self, field: str, value: str
    ) -> AsyncGenerator[dict[str, Any], None]:
        self._check()
        for row in self._ordered():
            if row.get(field) == value:
                yield row

    async def list_entities(self) -> AsyncGenerator[dict[str, Any], None]:
        self._check()
        for row in self._ordered():
            yield row

    async def list_page(
        self,
        page_size: int,
        continuation_token: str | None = None,
    ) -> EntityPage:
        self._check()
        rows = self._ordered()
        start = int(continuation_token) if continuation_token else 0
        end = start + page_size
        return EntityPage(
            items=rows[start:end],
            continuation_token=str(end) if end < len(rows) else None,
        )

    async def update_entity(
        self,
        entity: dict[str, Any],
        etag: str | None = None,
    ) -> str:
        self._check()
        self.update_etags.append(etag)
        key = (entity["partition_key"], entity["row_key"])
        current = self.rows.get(key)
        if current is None or (etag is not None and current["etag"] != etag):
            raise VersionMismatchError(f"stale etag for {key}")
        return self._write(entity)

    async def delete_entity(self, partition_key: str, row_key: str) -> None:
        self._check()
        self.deleted.append((partition_key, row_key))
        self.rows.pop((partition_key, row_key), None)


def make_candidate(**overrides: Any) -> Candidate:
    """Build a stored-looking candidate; keyword overrides win."""
    id = overrides.pop("id", str(uuid4()))
    created = overrides.pop(
        "created_at", datetime(2026, 3, 4, 9, 30, tzinfo=timezone.utc)
    )
    fields: dict[str, Any] = {
        "id": id,
        "partition_key": "CANDIDATE_2026-03",
        "row_key": id,
        "name": "Jane Roe",
        "email": f"{id[:8]}@example.com",
        "position": "Engineer",
        "application_date": created,
        "created_at": created,
        "updated_at": created,
    }
    fields.update(overrides)
    return Candidate(**fields)


@pytest.fixture()
def memory_store() -> InMemoryTableStore:
    """Provide an empty in-memory table store."""
    return InMemoryTableStore()


@pytest.fixture()
def repository(memory_store: InMemoryTableStore) -> CandidateRepository:
    """Provide a repository over the in-memory store."""
    return CandidateRepository(memory_store)


@pytest.fixture()
def service(repository: CandidateRepository) -> CandidateService:
    """Provide a service over the in-memory repository."""
    return CandidateService(repository)


@pytest.fixture()
def store_failure() -> StoreError:
    """A store-level failure to inject via ``memory_store.fail_with``."""
    return StoreError("connection reset by peer")


@pytest.fixture()
def api_client(memory_store: InMemoryTableStore) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient whose service uses the in-memory store."""
    from app.main import app
    from app.routers.candidates import get_candidate_service

    app.dependency_overrides[get_candidate_service] = lambda: CandidateService(
        CandidateRepository(memory_store)
    )
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def candidate_factory():
    """Provide ``make_candidate`` to tests."""
    return make_candidate
