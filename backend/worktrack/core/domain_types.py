"""Domain Types - identity types, wire type names and system field names.

Invariants:
    - WorkItemId is an int in [0, MAX_WORK_ITEM_ID]; the wire form is its decimal string
    - parse_work_item_id never raises on bad input, it returns None
    - System field names are the single source of truth for built-in fields

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, full type-checker support
    - str Enum for field kinds: serializes into the type definitions without custom encoders
"""

import re
from enum import Enum
from typing import NewType
from uuid import UUID


# --- Identity Types ----------------------------------------------------------

WorkItemId = NewType("WorkItemId", int)
IdentityId = NewType("IdentityId", UUID)

_WORK_ITEM_ID_PATTERN = re.compile(r"[0-9]+", re.ASCII)

# Largest value of the work_items.id column (SQL INTEGER)
MAX_WORK_ITEM_ID = 2**31 - 1


def parse_work_item_id(raw: str) -> WorkItemId | None:
    """Parse a wire id into the integer key space, None if it cannot exist."""
    if not isinstance(raw, str) or not _WORK_ITEM_ID_PATTERN.fullmatch(raw):
        return None
    value = int(raw)
    if value > MAX_WORK_ITEM_ID:
        return None
    return WorkItemId(value)


# --- JSON:API resource type names ---------------------------------------------

API_TYPE_WORK_ITEM = "workitems"
API_TYPE_WORK_ITEM_TYPE = "workitemtypes"
API_TYPE_IDENTITY = "identities"


# --- System fields -----------------------------------------------------------

SYSTEM_TITLE = "system.title"
SYSTEM_DESCRIPTION = "system.description"
SYSTEM_STATE = "system.state"
SYSTEM_CREATOR = "system.creator"
SYSTEM_ASSIGNEE = "system.assignee"
SYSTEM_REMOTE_ITEM_ID = "system.remote_item_id"

# Attribute carrying the claimed version; never a schema field
VERSION_ATTRIBUTE = "version"

SYSTEM_STATE_VALUES = ("new", "open", "in progress", "resolved", "closed")


class FieldKind(str, Enum):
    """Closed set of field kinds a work item type may declare."""
    STRING = "string"
    MARKUP = "markup"
    INTEGER = "integer"
    FLOAT = "float"
    DURATION = "duration"
    INSTANT = "instant"
    URL = "url"
    USER = "user"
    ENUM = "enum"
    LIST = "list"


SIMPLE_KINDS = frozenset({
    FieldKind.STRING, FieldKind.MARKUP, FieldKind.INTEGER, FieldKind.FLOAT,
    FieldKind.DURATION, FieldKind.INSTANT, FieldKind.URL, FieldKind.USER,
})
