"""Schema Registry - immutable snapshot of all work item types, keyed by name.

Invariants:
    - A SchemaRegistry instance never changes after construction
    - with_type() returns a NEW registry (copy-on-write); readers keep their snapshot
    - lookup() raises NotFoundError for unknown names, never returns None
"""

from types import MappingProxyType
from typing import Iterable

from worktrack.core.errors import NotFoundError
from worktrack.core.work_item_type import WorkItemType


class SchemaRegistry:
    """Read-only mapping type name -> WorkItemType."""

    def __init__(self, types: Iterable[WorkItemType] = ()):
        self._types = MappingProxyType({t.name: t for t in types})

    def lookup(self, type_name: str) -> WorkItemType:
        work_item_type = self._types.get(type_name)
        if work_item_type is None:
            raise NotFoundError("work item type", type_name)
        return work_item_type

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def names(self) -> list[str]:
        return sorted(self._types)

    def types(self) -> list[WorkItemType]:
        return [self._types[name] for name in self.names()]

    def with_type(self, work_item_type: WorkItemType) -> "SchemaRegistry":
        return SchemaRegistry([*self._types.values(), work_item_type])
