"""JSON:API Rendering - work items, types, identities and paging links as resource objects.

Invariants:
    - A work item's version is always rendered as attributes.version
    - system.assignee is rendered as relationships.assignee, never as an attribute
    - relationships.baseType always names the work item type
    - Paging links are absolute URLs built from the request URL path
"""

from fastapi import Request

from worktrack.core.domain_types import (
    API_TYPE_IDENTITY, API_TYPE_WORK_ITEM, API_TYPE_WORK_ITEM_TYPE, SYSTEM_ASSIGNEE,
)
from worktrack.core.paging import PageLinks, format_page_link
from worktrack.core.repository_protocols import Identity
from worktrack.core.work_item_type import WorkItem, WorkItemType


def collection_url(request: Request) -> str:
    """Absolute URL of the request without its query string."""
    return str(request.url.replace(query="", fragment=""))


def _base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def render_work_item(
    request: Request, work_item: WorkItem, work_item_type: WorkItemType,
) -> dict:
    attributes = work_item_type.convert_from_model(work_item)
    relationships: dict = {
        "baseType": {
            "data": {"id": work_item.type, "type": API_TYPE_WORK_ITEM_TYPE},
        },
    }
    assignee = attributes.pop(SYSTEM_ASSIGNEE, None)
    if assignee is not None:
        relationships["assignee"] = {
            "data": {"id": assignee, "type": API_TYPE_IDENTITY},
        }
    return {
        "type": API_TYPE_WORK_ITEM,
        "id": str(work_item.id),
        "attributes": attributes,
        "relationships": relationships,
        "links": {
            "self": f"{_base_url(request)}/api/v1/workitems/{work_item.id}",
        },
    }


def render_page_links(request: Request, links: PageLinks) -> dict:
    path = collection_url(request)
    rendered = {
        "first": format_page_link(path, links.first),
        "last": format_page_link(path, links.last),
    }
    if links.prev is not None:
        rendered["prev"] = format_page_link(path, links.prev)
    if links.next is not None:
        rendered["next"] = format_page_link(path, links.next)
    return rendered


def render_work_item_type(work_item_type: WorkItemType) -> dict:
    return {
        "type": API_TYPE_WORK_ITEM_TYPE,
        "id": work_item_type.name,
        "attributes": work_item_type.to_dict(),
    }


def render_identity(identity: Identity) -> dict:
    return {
        "type": API_TYPE_IDENTITY,
        "id": str(identity.id),
        "attributes": {
            "username": identity.username,
            "fullName": identity.full_name,
            "imageURL": identity.image_url,
        },
    }
