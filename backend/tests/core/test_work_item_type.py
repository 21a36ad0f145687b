"""Work Item Types - verifies attribute conversion against a type's fields.

Tests:
    - Unknown attribute keys are rejected, version is skipped
    - Conversion is all-or-nothing
    - Required-field detection and wire rendering
    - from_dict validation and system type seeds
"""

import pytest

from worktrack.core.domain_types import (
    FieldKind, WorkItemId, SYSTEM_ASSIGNEE, SYSTEM_STATE, SYSTEM_TITLE,
)
from worktrack.core.errors import BadParameterError
from worktrack.core.field_types import FieldDefinition
from worktrack.core.work_item_type import (
    WorkItem, WorkItemType, system_work_item_types,
    SYSTEM_BUG, SYSTEM_FEATURE, SYSTEM_USER_STORY,
)


@pytest.fixture
def task_type():
    return WorkItemType("task", {
        "title": FieldDefinition(FieldKind.STRING, required=True),
        "estimate": FieldDefinition(FieldKind.INTEGER),
    })


def test_convert_attributes_skips_version(task_type):
    assert task_type.convert_attributes({"version": 3, "estimate": "5"}) == {"estimate": 5}


def test_unknown_attribute_rejected(task_type):
    with pytest.raises(BadParameterError) as exc_info:
        task_type.convert_attributes({"colour": "red"})
    assert exc_info.value.parameter == "colour"


def test_one_bad_value_rejects_the_batch(task_type):
    with pytest.raises(BadParameterError) as exc_info:
        task_type.convert_attributes({"title": "ok", "estimate": "lots"})
    assert exc_info.value.parameter == "estimate"


def test_missing_required(task_type):
    assert task_type.missing_required({"estimate": 1}) == ["title"]
    assert task_type.missing_required({"title": "x"}) == []


def test_convert_from_model_includes_version(task_type):
    item = WorkItem(WorkItemId(1), "task", 4, {"title": "x", "estimate": 2})
    assert task_type.convert_from_model(item) == {
        "version": 4, "title": "x", "estimate": 2,
    }


def test_fields_are_read_only(task_type):
    with pytest.raises(TypeError):
        task_type.fields["extra"] = FieldDefinition(FieldKind.STRING)


def test_from_dict_round_trips_definition(task_type):
    rebuilt = WorkItemType.from_dict("task", task_type.to_dict()["fields"])
    assert rebuilt == task_type


@pytest.mark.parametrize("fields", [None, {}, [], "title"])
def test_from_dict_requires_fields(fields):
    with pytest.raises(BadParameterError):
        WorkItemType.from_dict("empty", fields)


def test_system_types():
    types = {t.name: t for t in system_work_item_types()}
    assert set(types) == {SYSTEM_USER_STORY, SYSTEM_BUG, SYSTEM_FEATURE}
    story = types[SYSTEM_USER_STORY]
    assert story.fields[SYSTEM_TITLE].required
    assert story.fields[SYSTEM_STATE].kind is FieldKind.ENUM
    assert story.fields[SYSTEM_ASSIGNEE].kind is FieldKind.USER
