"""Pagination request/response value objects (not persisted)."""

from __future__ import annotations

from typing import Annotated, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MIN_PAGE_SIZE

T = TypeVar("T")

SortField = Literal["name", "applicationDate", "status"]
SortDirection = Literal["asc", "desc"]


class PaginationOptions(BaseModel):
    """Options for listing candidates.

    ``sort_by`` orders items within the fetched page only; the continuation
    token is opaque and forward-only.
    """
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    page_size: Annotated[int, Field(ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE
    continuation_token: str | None = None
    sort_by: SortField | None = None
    sort_direction: SortDirection = "asc"


class PaginatedResult(BaseModel, Generic[T]):
    """One page of results."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    items: list[T] = []
    page_size: int
    continuation_token: str | None = None
    total_count: int | None = None
