"""Versioned Entity Store - verifies optimistic-concurrency updates of work items.

Invariants:
    - A committed save advances version by exactly 1
    - PATCH semantics: attributes absent from the payload keep their stored value
    - A stale or missing claimed version writes nothing
    - Of two saves claiming the same version, exactly one commits

Design Decisions:
    - SQL-backed tests run against in-memory SQLite; the race between load and
      write is simulated with a store whose conditional write loses
"""

import uuid

import pytest

from worktrack.core.domain_types import (
    SYSTEM_ASSIGNEE, SYSTEM_DESCRIPTION, SYSTEM_STATE, SYSTEM_TITLE, WorkItemId,
)
from worktrack.core.errors import BadParameterError, NotFoundError, VersionConflictError
from worktrack.core.relationships import AssigneeRef, RelationshipBlock
from worktrack.core.repository_protocols import ReplaceOutcome
from worktrack.core.work_item_type import SYSTEM_BUG, SYSTEM_USER_STORY, WorkItem
from worktrack.services.identity_repository import SqlIdentityStore
from worktrack.services.relation_resolver import RelationResolver
from worktrack.services.versioned_store import VersionedEntityStore, claimed_version
from worktrack.services.work_item_repository import SqlWorkItemStore


@pytest.fixture
def store(test_db, registry):
    return VersionedEntityStore(
        test_db, SqlWorkItemStore(test_db), registry,
        RelationResolver(SqlIdentityStore(test_db)),
    )


# --- claimed_version ------------------------------------------------------------

def test_missing_version_is_conflict():
    with pytest.raises(VersionConflictError):
        claimed_version({SYSTEM_TITLE: "x"})


@pytest.mark.parametrize("raw", ["abc", 1.5, None, -1, True])
def test_malformed_version_is_bad_parameter(raw):
    with pytest.raises(BadParameterError) as exc_info:
        claimed_version({"version": raw})
    assert exc_info.value.parameter == "version"


def test_numeric_string_version_accepted():
    assert claimed_version({"version": "3"}) == 3


# --- save -----------------------------------------------------------------------

async def test_save_increments_version(store, seed_work_item):
    saved = await store.save(str(seed_work_item.id), {"version": 0, SYSTEM_TITLE: "New"})
    assert saved.version == 1
    assert saved.fields[SYSTEM_TITLE] == "New"
    again = await store.save(str(seed_work_item.id), {"version": 1, SYSTEM_TITLE: "Newer"})
    assert again.version == 2


async def test_save_preserves_absent_fields(store, seed_work_item):
    saved = await store.save(
        str(seed_work_item.id), {"version": 0, SYSTEM_DESCRIPTION: "details"},
    )
    assert saved.fields[SYSTEM_TITLE] == "Initial title"
    assert saved.fields[SYSTEM_STATE] == "new"
    assert saved.fields[SYSTEM_DESCRIPTION] == "details"


async def test_stale_version_leaves_record_unchanged(store, seed_work_item):
    item_id = str(seed_work_item.id)
    for n in range(3):
        await store.save(item_id, {"version": n, SYSTEM_TITLE: f"v{n + 1}"})

    with pytest.raises(VersionConflictError):
        await store.save(item_id, {"version": 2, SYSTEM_TITLE: "stale"})

    stored = await store.load(item_id)
    assert stored.version == 3
    assert stored.fields[SYSTEM_TITLE] == "v3"


async def test_missing_version_writes_nothing(store, seed_work_item):
    with pytest.raises(VersionConflictError):
        await store.save(str(seed_work_item.id), {SYSTEM_TITLE: "no version"})
    assert (await store.load(str(seed_work_item.id))).version == 0


async def test_unknown_field_writes_nothing(store, seed_work_item):
    with pytest.raises(BadParameterError) as exc_info:
        await store.save(
            str(seed_work_item.id), {"version": 0, SYSTEM_TITLE: "ok", "colour": "red"},
        )
    assert exc_info.value.parameter == "colour"
    stored = await store.load(str(seed_work_item.id))
    assert stored.version == 0
    assert stored.fields[SYSTEM_TITLE] == "Initial title"


async def test_invalid_value_is_bad_parameter(store, seed_work_item):
    with pytest.raises(BadParameterError) as exc_info:
        await store.save(str(seed_work_item.id), {"version": 0, SYSTEM_STATE: "sleeping"})
    assert exc_info.value.parameter == SYSTEM_STATE


@pytest.mark.parametrize("raw_id", ["abc", "-1", "99999"])
async def test_unknown_or_unparsable_id_is_not_found(store, registry, raw_id):
    with pytest.raises(NotFoundError):
        await store.save(raw_id, {"version": 0})


async def test_same_version_claimed_twice_commits_once(store, seed_work_item):
    item_id = str(seed_work_item.id)
    await store.save(item_id, {"version": 0, SYSTEM_TITLE: "first"})
    with pytest.raises(VersionConflictError):
        await store.save(item_id, {"version": 0, SYSTEM_TITLE: "second"})
    stored = await store.load(item_id)
    assert stored.version == 1
    assert stored.fields[SYSTEM_TITLE] == "first"


# --- lost race between load and conditional write -------------------------------

class _LosingStore:
    """Returns the stored item, then loses the conditional write."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.item = WorkItem(
            WorkItemId(1), SYSTEM_USER_STORY, 5,
            {SYSTEM_TITLE: "t", SYSTEM_STATE: "new"},
        )

    async def get(self, work_item_id):
        return self.item

    async def conditional_replace(self, work_item_id, expected_version, new_record):
        assert expected_version == 5
        assert new_record.version == 6
        return self.outcome


class _NoIdentities:
    async def exists(self, identity_id):
        return False


async def test_lost_race_is_version_conflict(registry):
    store = VersionedEntityStore(
        None, _LosingStore(ReplaceOutcome.VERSION_MISMATCH), registry,
        RelationResolver(_NoIdentities()),
    )
    with pytest.raises(VersionConflictError):
        await store.save("1", {"version": 5, SYSTEM_TITLE: "x"})


async def test_deleted_between_load_and_write_is_not_found(registry):
    store = VersionedEntityStore(
        None, _LosingStore(ReplaceOutcome.NOT_FOUND), registry,
        RelationResolver(_NoIdentities()),
    )
    with pytest.raises(NotFoundError):
        await store.save("1", {"version": 5})


# --- relationships --------------------------------------------------------------

async def test_assignee_set_and_cleared(store, seed_work_item, seed_identity):
    item_id = str(seed_work_item.id)
    assigned = await store.save(
        item_id, {"version": 0},
        RelationshipBlock(assignee=AssigneeRef(str(seed_identity.id))),
    )
    assert assigned.fields[SYSTEM_ASSIGNEE] == str(seed_identity.id)

    cleared = await store.save(
        item_id, {"version": 1}, RelationshipBlock(assignee=AssigneeRef(None)),
    )
    assert cleared.fields[SYSTEM_ASSIGNEE] is None


async def test_unknown_assignee_writes_nothing(store, seed_work_item):
    with pytest.raises(BadParameterError):
        await store.save(
            str(seed_work_item.id), {"version": 0, SYSTEM_TITLE: "changed"},
            RelationshipBlock(assignee=AssigneeRef(str(uuid.uuid4()))),
        )
    stored = await store.load(str(seed_work_item.id))
    assert stored.version == 0
    assert stored.fields[SYSTEM_TITLE] == "Initial title"


# --- create / delete ------------------------------------------------------------

async def test_create_starts_at_version_zero(store):
    created = await store.create(SYSTEM_BUG, {SYSTEM_TITLE: "Crash", SYSTEM_STATE: "open"})
    assert created.version == 0
    assert created.type == SYSTEM_BUG
    assert (await store.load(str(created.id))).fields[SYSTEM_TITLE] == "Crash"


async def test_create_requires_required_fields(store):
    with pytest.raises(BadParameterError) as exc_info:
        await store.create(SYSTEM_BUG, {SYSTEM_TITLE: "No state"})
    assert exc_info.value.parameter == SYSTEM_STATE


async def test_create_with_unknown_type_is_bad_parameter(store):
    with pytest.raises(BadParameterError):
        await store.create("ghost.type", {SYSTEM_TITLE: "x"})


async def test_delete(store, seed_work_item):
    await store.delete(str(seed_work_item.id))
    with pytest.raises(NotFoundError):
        await store.load(str(seed_work_item.id))
    with pytest.raises(NotFoundError):
        await store.delete(str(seed_work_item.id))


async def test_unknown_assignee_attribute_writes_nothing(store, seed_work_item):
    with pytest.raises(BadParameterError):
        await store.save(
            str(seed_work_item.id),
            {"version": 0, SYSTEM_TITLE: "changed", SYSTEM_ASSIGNEE: str(uuid.uuid4())},
        )
    stored = await store.load(str(seed_work_item.id))
    assert stored.version == 0
    assert SYSTEM_ASSIGNEE not in stored.fields
    assert stored.fields[SYSTEM_TITLE] == "Initial title"


async def test_relationship_assignee_wins_over_attribute(store, seed_work_item, seed_identity):
    saved = await store.save(
        str(seed_work_item.id),
        {"version": 0, SYSTEM_ASSIGNEE: str(uuid.uuid4())},
        RelationshipBlock(assignee=AssigneeRef(str(seed_identity.id))),
    )
    assert saved.fields[SYSTEM_ASSIGNEE] == str(seed_identity.id)
