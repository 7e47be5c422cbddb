from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a filtered list, shaped like the list endpoints' payload."""

    data: list[T]
    current_page: int
    last_page: int
    total: int
    per_page: int


def paginate(items: Sequence[T], page: int, per_page: int) -> Page[T]:
    per_page = max(int(per_page), 1)
    total = len(items)
    last_page = max(math.ceil(total / per_page), 1)
    current = min(max(int(page), 1), last_page)

    start = (current - 1) * per_page
    return Page(
        data=list(items[start:start + per_page]),
        current_page=current,
        last_page=last_page,
        total=total,
        per_page=per_page,
    )


def matches_search(query: str, *fields) -> bool:
    """Case-insensitive substring match over any of the given fields."""

    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in str(f).lower() for f in fields if f)
