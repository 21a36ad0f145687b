"""Paging - offset/limit normalization and first/prev/next/last link computation.

Invariants:
    - compute_page_links is PURE: same four inputs, same PageLinks
    - first and last are always present; prev and next only when such a page exists
    - No link ever has a negative start; a range cut at 0 shrinks its size instead
    - Fetching the last link's (start, size) returns exactly the tail of the collection

Design Decisions:
    - Links are (start, size) pairs; rendering to URLs happens in the API layer
    - An offset past the end walks backward in whole pages until it re-enters the range
"""

from dataclasses import dataclass
from typing import NamedTuple

from worktrack.core.domain_types import MAX_WORK_ITEM_ID


class PageLink(NamedTuple):
    """A page addressed by start index and maximum item count."""
    start: int
    size: int


@dataclass(frozen=True)
class PageLinks:
    first: PageLink
    last: PageLink
    prev: PageLink | None = None
    next: PageLink | None = None


def _clip_at_origin(start: int, limit: int) -> PageLink:
    """Cut a range that starts before 0 so it starts at 0."""
    if start < 0:
        return PageLink(0, limit + start)
    return PageLink(start, limit)


def _retreat_into_range(offset: int, limit: int, total_count: int) -> int:
    """First whole-page step back from an out-of-range offset that intersects the range."""
    return offset - (((offset - total_count) // limit) + 1) * limit


def compute_page_links(
    offset: int, limit: int, result_count: int, total_count: int,
) -> PageLinks:
    """Compute first/prev/next/last for a page at ``offset`` of ``limit`` items."""
    if offset < 0 or limit < 1 or result_count < 0 or total_count < 0:
        raise ValueError(
            f"invalid paging input offset={offset} limit={limit} "
            f"result_count={result_count} total_count={total_count}",
        )

    # first: sized to end where the page sequence through offset begins
    first = PageLink(0, offset % limit if offset > 0 else limit)

    prev = None
    if offset > 0 and total_count > 0:
        if offset <= total_count:
            prev_start = offset - limit
        else:
            prev_start = _retreat_into_range(offset, limit, total_count)
        prev = _clip_at_origin(prev_start, limit)

    next_ = None
    next_start = offset + result_count
    if next_start < total_count:
        next_ = PageLink(next_start, limit)

    if total_count == 0:
        last = PageLink(0, limit)
    else:
        if offset < total_count:
            last_start = offset + ((total_count - offset - 1) // limit) * limit
        else:
            last_start = _retreat_into_range(offset, limit, total_count)
        last = _clip_at_origin(last_start, limit)
        # never reach past the final item
        last = PageLink(last.start, min(last.size, total_count - last.start))

    return PageLinks(first=first, last=last, prev=prev, next=next_)


def normalize_paging(
    raw_offset: str | None,
    raw_limit: int | None,
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """Lenient request paging: bad or out-of-range offset -> 0, bad limit -> default, cap at max."""
    offset = 0
    if raw_offset is not None:
        try:
            offset = int(raw_offset)
        except ValueError:
            offset = 0
    if offset < 0 or offset > MAX_WORK_ITEM_ID:
        offset = 0

    limit = default_limit if raw_limit is None else raw_limit
    if limit <= 0:
        limit = default_limit
    elif limit > max_limit:
        limit = max_limit
    return offset, limit


def format_page_link(path: str, link: PageLink) -> str:
    return f"{path}?page[offset]={link.start}&page[limit]={link.size}"
