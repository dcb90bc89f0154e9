from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Generic, Literal, TypeVar

from typing_extensions import TypedDict

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_SIZE = 24  # two years of monthly rows
MAX_SIZE = 120


class PageRequest(TypedDict):
    page: int  # 1-based
    size: int


class PageMeta(TypedDict):
    page: int
    size: int
    total: int
    pages: int


class PageResponse(TypedDict, Generic[T]):  # type: ignore[misc]
    ok: Literal[True]
    items: list[T]
    meta: PageMeta


class PaginationError(ValueError):
    """Raised when pagination query params are invalid."""


def _parse_int(raw: str | None, name: str, default: int) -> int:
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise PaginationError(f"invalid {name} parameter") from e


def parse_page_params(args: Mapping[str, str | None]) -> PageRequest:
    """Read ``page``/``size`` from request args; size is capped at MAX_SIZE."""
    page = _parse_int(args.get("page"), "page", DEFAULT_PAGE)
    size = _parse_int(args.get("size"), "size", DEFAULT_SIZE)
    if page < 1:
        raise PaginationError("page must be >= 1")
    if size < 1:
        raise PaginationError("size must be >= 1")
    return PageRequest(page=page, size=min(size, MAX_SIZE))


def page_offset(page_req: PageRequest) -> int:
    return (page_req["page"] - 1) * page_req["size"]


def make_page_response(items: Sequence[T], page_req: PageRequest, total: int) -> PageResponse[T]:
    pages = -(-total // page_req["size"])
    return PageResponse(  # type: ignore[call-arg]
        ok=True,
        items=list(items),
        meta=PageMeta(page=page_req["page"], size=page_req["size"], total=total, pages=pages),
    )


__all__ = [
    "PageRequest",
    "PageMeta",
    "PageResponse",
    "PaginationError",
    "parse_page_params",
    "page_offset",
    "make_page_response",
]
