"""Work Item Types - named schemas and the typed work item they govern.

Invariants:
    - WorkItemType.fields is an ordered, read-only mapping field name -> FieldDefinition
    - convert_attributes rejects any key the type does not declare (no silent drops)
    - convert_attributes is all-or-nothing: the first bad field aborts the whole batch
    - WorkItem is a frozen value; mutations build a new WorkItem

Design Decisions:
    - Attribute conversion lives on the type: the type read from storage decides
      what the caller may set, never the payload
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from worktrack.core.domain_types import (
    FieldKind, WorkItemId, VERSION_ATTRIBUTE,
    SYSTEM_TITLE, SYSTEM_DESCRIPTION, SYSTEM_STATE, SYSTEM_CREATOR,
    SYSTEM_ASSIGNEE, SYSTEM_REMOTE_ITEM_ID, SYSTEM_STATE_VALUES,
)
from worktrack.core.errors import BadParameterError
from worktrack.core.field_types import FieldDefinition


@dataclass(frozen=True)
class WorkItem:
    """A versioned, schema-typed record."""
    id: WorkItemId
    type: str
    version: int
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkItemType:
    """Named set of field definitions."""
    name: str
    fields: Mapping[str, FieldDefinition]

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def has_field(self, field_name: str) -> bool:
        return field_name in self.fields

    def convert_to_model(self, field_name: str, value: Any) -> Any:
        definition = self.fields.get(field_name)
        if definition is None:
            raise BadParameterError(field_name, value, expected="a field of " + self.name)
        return definition.convert_to_model(field_name, value)

    def convert_attributes(self, attributes: Mapping[str, Any]) -> dict[str, Any]:
        """Convert every present attribute (except version) to its stored value."""
        converted = {}
        for field_name, value in attributes.items():
            if field_name == VERSION_ATTRIBUTE:
                continue
            converted[field_name] = self.convert_to_model(field_name, value)
        return converted

    def missing_required(self, fields: Mapping[str, Any]) -> list[str]:
        """Required field names without a value in ``fields``."""
        return [
            name for name, definition in self.fields.items()
            if definition.required and fields.get(name) is None
        ]

    def convert_from_model(self, work_item: WorkItem) -> dict[str, Any]:
        """Wire representation of a work item's fields (version included)."""
        wire: dict[str, Any] = {VERSION_ATTRIBUTE: work_item.version}
        for field_name, definition in self.fields.items():
            if field_name in work_item.fields:
                wire[field_name] = definition.convert_from_model(
                    field_name, work_item.fields[field_name],
                )
        return wire

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "fields": {name: d.to_dict() for name, d in self.fields.items()},
        }

    @classmethod
    def from_dict(cls, name: str, fields: Any) -> "WorkItemType":
        if not isinstance(fields, dict) or not fields:
            raise BadParameterError("fields", fields, expected="a non-empty object")
        return cls(
            name=name,
            fields={
                field_name: FieldDefinition.from_dict(field_name, definition)
                for field_name, definition in fields.items()
            },
        )


def _system_fields() -> dict[str, FieldDefinition]:
    return {
        SYSTEM_TITLE: FieldDefinition(FieldKind.STRING, required=True),
        SYSTEM_DESCRIPTION: FieldDefinition(FieldKind.MARKUP),
        SYSTEM_STATE: FieldDefinition(
            FieldKind.ENUM, required=True,
            values=SYSTEM_STATE_VALUES, base_kind=FieldKind.STRING,
        ),
        SYSTEM_CREATOR: FieldDefinition(FieldKind.USER),
        SYSTEM_ASSIGNEE: FieldDefinition(FieldKind.USER),
        SYSTEM_REMOTE_ITEM_ID: FieldDefinition(FieldKind.STRING),
    }


SYSTEM_USER_STORY = "system.userstory"
SYSTEM_BUG = "system.bug"
SYSTEM_FEATURE = "system.feature"


def system_work_item_types() -> list[WorkItemType]:
    """Built-in types seeded at startup when absent."""
    return [
        WorkItemType(name, _system_fields())
        for name in (SYSTEM_USER_STORY, SYSTEM_BUG, SYSTEM_FEATURE)
    ]
