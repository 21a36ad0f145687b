"""Work Item Listing - filtered count + fetch, then page links from the result shape.

Invariants:
    - The filter is parsed before any storage access (bad filter -> BadParameterError)
    - Links are computed from (offset, limit, returned count, total), nothing else
"""

from dataclasses import dataclass

from worktrack.core.paging import PageLinks, compute_page_links
from worktrack.core.repository_protocols import WorkItemStore
from worktrack.core.simple_filter import parse_filter
from worktrack.core.work_item_type import WorkItem


@dataclass(frozen=True)
class WorkItemPage:
    items: list[WorkItem]
    links: PageLinks
    total_count: int
    offset: int
    limit: int


async def list_work_items(
    items: WorkItemStore, raw_filter: str | None, offset: int, limit: int,
) -> WorkItemPage:
    expression = parse_filter(raw_filter)
    found, total = await items.count_and_fetch(expression, offset, limit)
    return WorkItemPage(
        items=found,
        links=compute_page_links(offset, limit, len(found), total),
        total_count=total,
        offset=offset,
        limit=limit,
    )
