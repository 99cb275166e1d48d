"""Key-value table store used for candidate entities.

Defines the capability interface the repository depends on (``TableStore``)
and ``SupabaseTableStore``, which implements it over a Supabase (PostgREST)
table keyed by ``(partition_key, row_key)`` with two store-managed columns:

- ``etag``: opaque version tag, regenerated on every write
- ``timestamp``: time of the last write

Paged reads use keyset pagination in ``(partition_key, row_key)`` order.
The continuation token is an opaque urlsafe-base64 blob that only this
module parses.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import uuid4

import httpx
from postgrest import APIError
from pydantic import BaseModel
from supabase import AsyncClient

from app.core.config import settings
from app.core.errors import ValidationError
from app.db.supabase import get_supabase

logger = logging.getLogger(__name__)

_CLIENT_ERRORS: tuple[type[Exception], ...] = (APIError, httpx.HTTPError)
_SCAN_PAGE_SIZE = 1000


class StoreError(Exception):
    """Failure reported by the underlying store client."""


class VersionMismatchError(StoreError):
    """Conditional write rejected: the stored version tag has changed."""


class EntityPage(BaseModel):
    """One page of raw entities plus the cursor for the next page."""
    items: list[dict[str, Any]] = []
    continuation_token: str | None = None


class TableStore(Protocol):
    """Capabilities the candidate repository needs from a table store."""

    async def put_entity(self, entity: dict[str, Any]) -> str:
        """Insert or replace by ``(partition_key, row_key)``; return the new etag."""
        ...

    def query_entities(
        self, field: str, value: str
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Iterate entities whose ``field`` equals ``value``."""
        ...

    def list_entities(self) -> AsyncGenerator[dict[str, Any], None]:
        """Iterate every entity in store order."""
        ...

    async def list_page(
        self,
        page_size: int,
        continuation_token: str | None = None,
    ) -> EntityPage:
        """Return one page of entities, resuming from ``continuation_token``."""
        ...

    async def update_entity(
        self,
        entity: dict[str, Any],
        etag: str | None = None,
    ) -> str:
        """Replace an existing entity, conditionally on ``etag``; return the new etag."""
        ...

    async def delete_entity(self, partition_key: str, row_key: str) -> None:
        """Delete the entity stored under the key pair."""
        ...


# ---------------------------------------------------------------------------
# Continuation tokens
# ---------------------------------------------------------------------------

def encode_continuation_token(partition_key: str, row_key: str) -> str:
    """Encode the keys of the last row of a page into an opaque token."""
    raw = json.dumps({"pk": partition_key, "rk": row_key}, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_continuation_token(token: str) -> tuple[str, str]:
    """Decode a token produced by ``encode_continuation_token``.

    Raises ``ValidationError`` on tokens this store did not issue.
    """
    try:
        payload = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
        return str(payload["pk"]), str(payload["rk"])
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise ValidationError(
            "Invalid continuation token", field="continuationToken"
        ) from exc


def _quote(value: str) -> str:
    """Quote a value for use inside a PostgREST logic tree."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _new_etag() -> str:
    return uuid4().hex


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Supabase implementation
# ---------------------------------------------------------------------------

class SupabaseTableStore:
    """``TableStore`` backed by a Supabase table."""

    def __init__(self, client: AsyncClient, table_name: str) -> None:
        self._client = client
        self._table_name = table_name

    def _table(self) -> Any:
        return self._client.table(self._table_name)

    async def _execute(self, query: Any, operation: str) -> list[dict[str, Any]]:
        try:
            result = await query.execute()
        except _CLIENT_ERRORS as exc:
            logger.warning(
                "table_store_request_failed",
                extra={
                    "table": self._table_name,
                    "operation": operation,
                    "error_message": str(exc),
                },
            )
            raise StoreError(f"{operation} failed on table {self._table_name}") from exc
        return result.data or []

    async def ping(self) -> None:
        """Issue a minimal read to confirm the table is reachable."""
        await self._execute(self._table().select("row_key").limit(1), "ping")

    async def put_entity(self, entity: dict[str, Any]) -> str:
        etag = _new_etag()
        row = {**entity, "etag": etag, "timestamp": _utc_now_iso()}
        await self._execute(
            self._table().upsert(row, on_conflict="partition_key,row_key"),
            "put_entity",
        )
        return etag

    async def query_entities(
        self, field: str, value: str
    ) -> AsyncGenerator[dict[str, Any], None]:
        rows = await self._execute(
            self._table()
            .select("*")
            .eq(field, value)
            .order("partition_key")
            .order("row_key"),
            "query_entities",
        )
        for row in rows:
            yield row

    async def list_entities(self) -> AsyncGenerator[dict[str, Any], None]:
        token: str | None = None
        while True:
            page = await self.list_page(_SCAN_PAGE_SIZE, token)
            for row in page.items:
                yield row
            token = page.continuation_token
            if token is None:
                break

    async def list_page(
        self,
        page_size: int,
        continuation_token: str | None = None,
    ) -> EntityPage:
        query = self._table().select("*")
        if continuation_token:
            pk, rk = decode_continuation_token(continuation_token)
            query = query.or_(
                f"partition_key.gt.{_quote(pk)},"
                f"and(partition_key.eq.{_quote(pk)},row_key.gt.{_quote(rk)})"
            )
        # One extra row tells us whether another page exists
        rows = await self._execute(
            query.order("partition_key").order("row_key").limit(page_size + 1),
            "list_page",
        )

        next_token: str | None = None
        if len(rows) > page_size:
            rows = rows[:page_size]
            last = rows[-1]
            next_token = encode_continuation_token(last["partition_key"], last["row_key"])

        return EntityPage(items=rows, continuation_token=next_token)

    async def update_entity(
        self,
        entity: dict[str, Any],
        etag: str | None = None,
    ) -> str:
        new_etag = _new_etag()
        row = {**entity, "etag": new_etag, "timestamp": _utc_now_iso()}
        query = (
            self._table()
            .update(row)
            .eq("partition_key", entity["partition_key"])
            .eq("row_key", entity["row_key"])
        )
        if etag is not None:
            query = query.eq("etag", etag)

        rows = await self._execute(query, "update_entity")
        if not rows:
            if etag is not None:
                raise VersionMismatchError(
                    f"Entity {entity['row_key']} was modified or removed since it was read"
                )
            raise StoreError(f"Entity {entity['row_key']} does not exist")
        return new_etag

    async def delete_entity(self, partition_key: str, row_key: str) -> None:
        await self._execute(
            self._table()
            .delete()
            .eq("partition_key", partition_key)
            .eq("row_key", row_key),
            "delete_entity",
        )


async def get_candidate_store() -> SupabaseTableStore:
    """Return a table store bound to the configured candidates table."""
    client = await get_supabase()
    return SupabaseTableStore(client, settings.CANDIDATES_TABLE)
