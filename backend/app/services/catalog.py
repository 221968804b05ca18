"""Page through three challenge partitions without loading all of them.

Partitions are walked in fixed priority order (for you, others, completed).
Only the partitions a page actually overlaps are fetched from, and each
fetch asks for exactly the rows that fall inside the page window.

Counting and fetching are separate reads. If membership changes in between,
a page can come back one item short or long of what the totals promise;
that is accepted, not corrected.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from app.core.errors import ValidationError

FOR_YOU = "for_you"
OTHERS = "others"
COMPLETED = "completed"
PARTITION_ORDER = (FOR_YOU, OTHERS, COMPLETED)


class Partition(Protocol):
    name: str

    def count(self) -> int: ...

    def fetch(self, offset: int, limit: int) -> list: ...


@dataclass
class ListPartition:
    """Partition over an already ordered in-memory sequence."""

    name: str
    items: Sequence[Any]

    def count(self) -> int:
        return len(self.items)

    def fetch(self, offset: int, limit: int) -> list:
        return list(self.items[offset:offset + limit])


@dataclass(frozen=True)
class PageSlice:
    partition_index: int
    offset: int
    limit: int


@dataclass
class PageResult:
    items: list = field(default_factory=list)  # [(partition name, item)]
    page: int = 1
    total_pages: int = 0
    total_count: int = 0


def total_pages_for(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if total_count else 0


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp into [1, total_pages], treating an empty listing as one page."""
    return max(1, min(page, total_pages or 1))


def plan_page(counts: Sequence[int], page: int, page_size: int) -> list[PageSlice]:
    """Which (partition, offset, limit) reads make up `page`.

    `page` is expected to be clamped already.
    """
    if page_size < 1:
        raise ValidationError("page_size must be >= 1")

    skip = (page - 1) * page_size
    remaining = page_size
    slices: list[PageSlice] = []
    for idx, count in enumerate(counts):
        if remaining <= 0:
            break
        if skip >= count:
            skip -= count
            continue
        take = min(remaining, count - skip)
        slices.append(PageSlice(partition_index=idx, offset=skip, limit=take))
        skip = 0
        remaining -= take
    return slices


def compose_page(partitions: Sequence[Partition], page: int, page_size: int) -> PageResult:
    if page_size < 1:
        raise ValidationError("page_size must be >= 1")

    counts = [p.count() for p in partitions]
    total = sum(counts)
    pages = total_pages_for(total, page_size)
    page = clamp_page(page, pages)

    items = []
    for sl in plan_page(counts, page, page_size):
        part = partitions[sl.partition_index]
        items.extend((part.name, row) for row in part.fetch(sl.offset, sl.limit))

    return PageResult(items=items, page=page, total_pages=pages, total_count=total)
