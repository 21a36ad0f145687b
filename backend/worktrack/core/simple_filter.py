"""Simple Filter - parses the list endpoint's JSON equality filter.

Invariants:
    - A filter is a JSON object of key -> scalar; constraints are ANDed
    - "Type"/"type" constrains the work item type; every other key a stored field
    - Parsing never touches storage; query building happens in the repository
"""

import json
from dataclasses import dataclass, field
from typing import Any

from worktrack.core.errors import BadParameterError

TYPE_KEYS = frozenset({"Type", "type"})

# Integers compared in SQL must fit a signed 64-bit column value
_MAX_SQL_INTEGER = 2**63 - 1


@dataclass(frozen=True)
class FilterExpression:
    type_name: str | None = None
    field_equals: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.type_name is None and not self.field_equals


def parse_filter(raw: str | None) -> FilterExpression:
    """Parse the ``filter`` query parameter, BadParameterError when malformed."""
    if raw is None or not raw.strip():
        return FilterExpression()
    try:
        document = json.loads(raw)
    except json.JSONDecodeError:
        raise BadParameterError("filter", raw, expected="a JSON object")
    if not isinstance(document, dict):
        raise BadParameterError("filter", raw, expected="a JSON object")

    type_name = None
    field_equals = {}
    for key, value in document.items():
        if value is None or isinstance(value, (dict, list)):
            raise BadParameterError("filter", raw, expected=f"a scalar value for '{key}'")
        if isinstance(value, int) and not isinstance(value, bool) and abs(value) > _MAX_SQL_INTEGER:
            raise BadParameterError("filter", raw, expected=f"a 64-bit integer for '{key}'")
        if key in TYPE_KEYS:
            if not isinstance(value, str):
                raise BadParameterError("filter", raw, expected="a type name")
            type_name = value
        else:
            field_equals[key] = value
    return FilterExpression(type_name=type_name, field_equals=field_equals)
