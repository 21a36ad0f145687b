"""Field Types - per-kind conversion between wire values and stored field values.

Invariants:
    - Conversion is table-driven: one converter per simple FieldKind, enum and list
      compose the simple converters (no duck-typed casts)
    - Every rejected value surfaces as BadParameterError naming the field and the value
    - Stored values are JSON-native (str, int, float, list) so the fields column
      round-trips through JSON unchanged
    - None clears an optional field; None on a required field is rejected

Design Decisions:
    - bool is rejected wherever a number is expected (bool is an int subclass)
    - Instants are normalized to ISO-8601 in UTC; naive timestamps are read as UTC
    - user fields (e.g. system.creator) are only checked to be UUIDs here; the
      assignee is the one relation whose identity is existence-checked, by the
      relation resolver in the service layer
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import urlsplit
from uuid import UUID

from worktrack.core.domain_types import FieldKind, SIMPLE_KINDS
from worktrack.core.errors import BadParameterError


class ConversionError(ValueError):
    """A wire value is not acceptable for a field kind."""


_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)


def _to_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ConversionError("expected a string")
    return value


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise ConversionError("expected an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise ConversionError("expected an integer")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ConversionError("expected a number")
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            raise ConversionError("expected a number")
    else:
        raise ConversionError("expected a number")
    if not math.isfinite(result):
        raise ConversionError("expected a finite number")
    return result


def _to_duration(value: Any) -> int:
    seconds = _to_integer(value)
    if seconds < 0:
        raise ConversionError("expected a non-negative number of seconds")
    return seconds


def _to_instant(value: Any) -> str:
    if isinstance(value, bool):
        raise ConversionError("expected an instant")
    if isinstance(value, (int, float)):
        try:
            moment = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ConversionError("epoch seconds out of range")
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ConversionError("expected an ISO-8601 instant")
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
    else:
        raise ConversionError("expected an instant")
    return moment.astimezone(timezone.utc).isoformat()


def _to_url(value: Any) -> str:
    text = _to_string(value)
    parts = urlsplit(text)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConversionError("expected an absolute http(s) URL")
    return text


def _to_user(value: Any) -> str:
    if isinstance(value, UUID):
        return str(value)
    text = _to_string(value)
    try:
        return str(UUID(text))
    except ValueError:
        raise ConversionError("expected a UUID")


# ADR: explicit table, adding a kind means adding a row here
_SIMPLE_CONVERTERS: dict[FieldKind, Callable[[Any], Any]] = {
    FieldKind.STRING: _to_string,
    FieldKind.MARKUP: _to_string,
    FieldKind.INTEGER: _to_integer,
    FieldKind.FLOAT: _to_float,
    FieldKind.DURATION: _to_duration,
    FieldKind.INSTANT: _to_instant,
    FieldKind.URL: _to_url,
    FieldKind.USER: _to_user,
}


def convert_simple(kind: FieldKind, value: Any) -> Any:
    """Convert with a simple kind's converter, ConversionError when rejected."""
    return _SIMPLE_CONVERTERS[kind](value)


def parse_kind(raw: Any, parameter: str) -> FieldKind:
    """Map a wire kind name to FieldKind or raise BadParameterError."""
    try:
        return FieldKind(raw)
    except ValueError:
        raise BadParameterError(
            parameter, raw, expected=", ".join(k.value for k in FieldKind),
        )


@dataclass(frozen=True)
class FieldDefinition:
    """Kind, conversion rules and required flag of one work item field."""
    kind: FieldKind
    required: bool = False
    # enum: allowed values, converted by base_kind
    values: tuple = ()
    base_kind: FieldKind | None = None
    # list: kind of every element
    component_kind: FieldKind | None = None

    def convert_to_model(self, field_name: str, value: Any) -> Any:
        """Convert a wire value into the stored value, or raise BadParameterError."""
        if value is None:
            if self.required:
                raise BadParameterError(field_name, value, expected="a value")
            return None
        try:
            return self._convert(value)
        except ConversionError as e:
            raise BadParameterError(field_name, value, expected=str(e))

    def convert_from_model(self, field_name: str, value: Any) -> Any:
        """Convert a stored value into its wire representation."""
        if value is None:
            return None
        if self.kind is FieldKind.LIST:
            return list(value)
        return value

    def _convert(self, value: Any) -> Any:
        if self.kind in SIMPLE_KINDS:
            return _SIMPLE_CONVERTERS[self.kind](value)
        if self.kind is FieldKind.ENUM:
            converted = _SIMPLE_CONVERTERS[self.base_kind or FieldKind.STRING](value)
            if converted not in self.values:
                raise ConversionError(
                    "one of " + ", ".join(str(v) for v in self.values),
                )
            return converted
        if self.kind is FieldKind.LIST:
            if not isinstance(value, (list, tuple)):
                raise ConversionError("expected a list")
            convert = _SIMPLE_CONVERTERS[self.component_kind or FieldKind.STRING]
            return [convert(element) for element in value]
        raise ConversionError(f"unsupported kind {self.kind}")

    def to_dict(self) -> dict:
        """Serializable definition, as stored and rendered on the wire."""
        field_type: dict[str, Any] = {"kind": self.kind.value}
        if self.kind is FieldKind.ENUM:
            field_type["baseType"] = (self.base_kind or FieldKind.STRING).value
            field_type["values"] = list(self.values)
        if self.kind is FieldKind.LIST:
            field_type["componentType"] = (
                self.component_kind or FieldKind.STRING
            ).value
        return {"required": self.required, "type": field_type}

    @classmethod
    def from_dict(cls, field_name: str, data: Any) -> "FieldDefinition":
        """Build a definition from its serialized form, validating the rules."""
        if not isinstance(data, dict) or not isinstance(data.get("type"), dict):
            raise BadParameterError(f"fields.{field_name}", data)
        field_type = data["type"]
        required = data.get("required", False)
        if not isinstance(required, bool):
            raise BadParameterError(f"fields.{field_name}.required", required)
        kind = parse_kind(field_type.get("kind"), f"fields.{field_name}.type.kind")

        if kind is FieldKind.ENUM:
            base_kind = parse_kind(
                field_type.get("baseType", FieldKind.STRING.value),
                f"fields.{field_name}.type.baseType",
            )
            raw_values = field_type.get("values")
            if base_kind not in SIMPLE_KINDS or not isinstance(raw_values, list) or not raw_values:
                raise BadParameterError(
                    f"fields.{field_name}.type.values", raw_values,
                    expected="a non-empty list of values",
                )
            try:
                values = tuple(_SIMPLE_CONVERTERS[base_kind](v) for v in raw_values)
            except ConversionError as e:
                raise BadParameterError(
                    f"fields.{field_name}.type.values", raw_values, expected=str(e),
                )
            return cls(kind, required, values=values, base_kind=base_kind)

        if kind is FieldKind.LIST:
            component_kind = parse_kind(
                field_type.get("componentType"),
                f"fields.{field_name}.type.componentType",
            )
            if component_kind not in SIMPLE_KINDS:
                raise BadParameterError(
                    f"fields.{field_name}.type.componentType", component_kind.value,
                    expected="a simple kind",
                )
            return cls(kind, required, component_kind=component_kind)

        return cls(kind, required)
