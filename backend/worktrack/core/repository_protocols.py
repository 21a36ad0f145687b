"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - conditional_replace is a single atomic compare-and-replace on (id, version)

Design Decisions:
    - Protocol over ABC: structural subtyping, the SQL stores and test fakes need no base class
    - Infrastructure failures raise InternalError; the expected outcomes of a
      conditional write are values (ReplaceOutcome), not exceptions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol

from worktrack.core.domain_types import IdentityId, WorkItemId
from worktrack.core.simple_filter import FilterExpression
from worktrack.core.work_item_type import WorkItem, WorkItemType


class ReplaceOutcome(str, Enum):
    COMMITTED = "committed"
    VERSION_MISMATCH = "version_mismatch"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Identity:
    id: IdentityId
    username: str
    full_name: str | None = None
    image_url: str | None = None


class WorkItemStore(Protocol):
    """Contract for work item persistence - implemented by shell."""
    async def get(self, work_item_id: WorkItemId) -> WorkItem | None: ...
    async def conditional_replace(
        self, work_item_id: WorkItemId, expected_version: int, new_record: WorkItem,
    ) -> ReplaceOutcome: ...
    async def insert(self, type_name: str, fields: Mapping[str, Any]) -> WorkItem: ...
    async def delete(self, work_item_id: WorkItemId) -> bool: ...
    async def count_and_fetch(
        self, expression: FilterExpression, offset: int, limit: int,
    ) -> tuple[list[WorkItem], int]: ...


class IdentityStore(Protocol):
    """Contract for identity lookups - implemented by shell."""
    async def exists(self, identity_id: IdentityId) -> bool: ...
    async def resolve(self, identity_id: IdentityId) -> Identity: ...


class WorkItemTypeStore(Protocol):
    """Contract for work item type persistence - implemented by shell."""
    async def load_all(self) -> list[WorkItemType]: ...
    async def insert(self, work_item_type: WorkItemType) -> None: ...
