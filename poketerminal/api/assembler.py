"""
Poke Terminal: Response Assembler

Builds the JSON envelopes the dashboard consumes:

    list endpoints:   {data, page, pageSize, count, totalCount}
    entity endpoints: {data}
    failures:         {error}  with a 500 status and a fixed message

Internal error detail is logged, never returned in a response body.
"""

from __future__ import annotations

from typing import Any, Sequence, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from poketerminal.models.canonical import CanonicalModel

T = TypeVar("T")


class NotFoundError(Exception):
    """A lookup by id matched nothing (or matched a set outside the allow-list)."""


class ErrorResponse(BaseModel):
    error: str


def paginate(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """
    Slice a fully materialized list for 1-based page numbers.

    Out-of-range pages yield an empty list.
    """
    page = max(page, 1)
    page_size = max(page_size, 1)
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def list_envelope(
    items: Sequence[CanonicalModel],
    page: int,
    page_size: int,
    total_count: int,
) -> dict[str, Any]:
    """Envelope for an already-paginated slice."""
    return {
        "data": [item.to_json() for item in items],
        "page": page,
        "pageSize": page_size,
        "count": len(items),
        "totalCount": total_count,
    }


def paginated_envelope(
    items: Sequence[CanonicalModel],
    page: int,
    page_size: int,
) -> dict[str, Any]:
    """Paginate a full list locally and wrap the slice."""
    sliced = paginate(items, page, page_size)
    return list_envelope(sliced, page=page, page_size=page_size, total_count=len(items))


def entity_envelope(item: CanonicalModel) -> dict[str, Any]:
    return {"data": item.to_json()}


def error_response(
    message: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
) -> JSONResponse:
    """Fixed-shape failure body."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )
