"""Unit tests for the Supabase-backed table store."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from postgrest import APIError

from app.core.errors import ValidationError
from app.db.table_store import (
    EntityPage,
    StoreError,
    SupabaseTableStore,
    VersionMismatchError,
    decode_continuation_token,
    encode_continuation_token,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _chainable_table_mock(data: list[dict[str, Any]] | None = None) -> MagicMock:
    """Return a table mock that supports fluent chaining.

    ``execute`` is awaitable and resolves to an object with ``.data``.
    """
    m = MagicMock()
    for method in (
        "select", "insert", "upsert", "update", "delete", "eq",
        "or_", "order", "limit",
    ):
        getattr(m, method).return_value = m
    m.execute = AsyncMock(return_value=MagicMock(data=data))
    return m


def _store_with(table_mock: MagicMock) -> SupabaseTableStore:
    client = MagicMock()
    client.table.return_value = table_mock
    return SupabaseTableStore(client, "candidates")


def _row(pk: str, rk: str) -> dict[str, str]:
    return {"partition_key": pk, "row_key": rk, "name": rk}


class TestContinuationToken:

    def test_decode_inverts_encode(self) -> None:
        token = encode_continuation_token("CANDIDATE_2026-10", "abc")

        assert decode_continuation_token(token) == ("CANDIDATE_2026-10", "abc")

    def test_token_is_opaque(self) -> None:
        token = encode_continuation_token("CANDIDATE_2026-10", "abc")

        assert "CANDIDATE" not in token

    @pytest.mark.parametrize("token", ["not-a-token", "e30=", "!!!"])
    def test_foreign_token_rejected(self, token: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            decode_continuation_token(token)

        assert exc_info.value.field == "continuationToken"


class TestPutEntity:

    @pytest.mark.asyncio
    async def test_upserts_with_fresh_etag(self) -> None:
        table = _chainable_table_mock(data=[{}])
        store = _store_with(table)

        etag = await store.put_entity({"partition_key": "P", "row_key": "R", "name": "n"})

        row = table.upsert.call_args.args[0]
        assert row["etag"] == etag
        assert row["partition_key"] == "P"
        assert "timestamp" in row
        assert table.upsert.call_args.kwargs["on_conflict"] == "partition_key,row_key"

    @pytest.mark.asyncio
    async def test_client_error_becomes_store_error(self) -> None:
        table = _chainable_table_mock()
        table.execute.side_effect = APIError({"message": "boom", "code": "500"})
        store = _store_with(table)

        with pytest.raises(StoreError):
            await store.put_entity({"partition_key": "P", "row_key": "R"})

    @pytest.mark.asyncio
    async def test_connection_error_becomes_store_error(self) -> None:
        table = _chainable_table_mock()
        table.execute.side_effect = httpx.ConnectError("connection refused")
        store = _store_with(table)

        with pytest.raises(StoreError) as exc_info:
            await store.put_entity({"partition_key": "P", "row_key": "R"})

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestQueryEntities:

    @pytest.mark.asyncio
    async def test_equality_filter(self) -> None:
        table = _chainable_table_mock(data=[_row("P", "R1")])
        store = _store_with(table)

        rows = [row async for row in store.query_entities("email", "a@x.com")]

        assert rows == [_row("P", "R1")]
        table.eq.assert_called_once_with("email", "a@x.com")

    @pytest.mark.asyncio
    async def test_no_rows(self) -> None:
        store = _store_with(_chainable_table_mock(data=None))

        assert [row async for row in store.query_entities("row_key", "x")] == []


class TestListPage:

    @pytest.mark.asyncio
    async def test_first_page_with_more_rows(self) -> None:
        table = _chainable_table_mock(data=[_row("P", "a"), _row("P", "b"), _row("P", "c")])
        store = _store_with(table)

        page = await store.list_page(2)

        assert [r["row_key"] for r in page.items] == ["a", "b"]
        assert page.continuation_token is not None
        assert decode_continuation_token(page.continuation_token) == ("P", "b")
        table.limit.assert_called_once_with(3)
        table.or_.assert_not_called()

    @pytest.mark.asyncio
    async def test_last_page_has_no_token(self) -> None:
        store = _store_with(_chainable_table_mock(data=[_row("P", "a")]))

        page = await store.list_page(2)

        assert page.continuation_token is None

    @pytest.mark.asyncio
    async def test_resumes_after_token_keys(self) -> None:
        table = _chainable_table_mock(data=[_row("Q", "z")])
        store = _store_with(table)

        await store.list_page(5, encode_continuation_token("P", "b"))

        expression = table.or_.call_args.args[0]
        assert 'partition_key.gt."P"' in expression
        assert 'and(partition_key.eq."P",row_key.gt."b")' in expression


class TestListEntities:

    @pytest.mark.asyncio
    async def test_walks_every_page(self) -> None:
        store = SupabaseTableStore(MagicMock(), "candidates")

        pages = [
            EntityPage(items=[_row("P", "a")], continuation_token="t1"),
            EntityPage(items=[_row("P", "b")], continuation_token=None),
        ]
        with patch.object(store, "list_page", AsyncMock(side_effect=pages)) as mock_page:
            rows = [row async for row in store.list_entities()]

        assert [r["row_key"] for r in rows] == ["a", "b"]
        assert mock_page.call_args_list[1].args[1] == "t1"


class TestUpdateEntity:

    @pytest.mark.asyncio
    async def test_conditional_on_etag(self) -> None:
        table = _chainable_table_mock(data=[_row("P", "R")])
        store = _store_with(table)

        new_etag = await store.update_entity(_row("P", "R"), etag="old")

        assert new_etag != "old"
        table.eq.assert_any_call("partition_key", "P")
        table.eq.assert_any_call("row_key", "R")
        table.eq.assert_any_call("etag", "old")
        assert table.update.call_args.args[0]["etag"] == new_etag

    @pytest.mark.asyncio
    async def test_no_match_with_etag_is_version_mismatch(self) -> None:
        store = _store_with(_chainable_table_mock(data=[]))

        with pytest.raises(VersionMismatchError):
            await store.update_entity(_row("P", "R"), etag="old")

    @pytest.mark.asyncio
    async def test_no_match_without_etag_is_store_error(self) -> None:
        store = _store_with(_chainable_table_mock(data=[]))

        with pytest.raises(StoreError) as exc_info:
            await store.update_entity(_row("P", "R"))

        assert not isinstance(exc_info.value, VersionMismatchError)


class TestDeleteEntity:

    @pytest.mark.asyncio
    async def test_deletes_by_key_pair(self) -> None:
        table = _chainable_table_mock(data=[])
        store = _store_with(table)

        await store.delete_entity("P", "R")

        table.delete.assert_called_once_with()
        table.eq.assert_any_call("partition_key", "P")
        table.eq.assert_any_call("row_key", "R")
