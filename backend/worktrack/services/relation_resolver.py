"""Relation Resolver - turns a relationship block into checked field assignments.

Invariants:
    - An explicit null assignee clears the field (assignment to None)
    - A present assignee id must be a UUID AND exist in the identity store
    - Both failures are BadParameterError on the relationship path, never a generic error
    - Output is a plain field-name -> stored-value dict, applied in the same
      persist as the converted attributes
    - A system.assignee value in the attribute bag is moved into the relationship
      block (move_assignee_attribute), so it is existence-checked the same way
"""

import logging
from typing import Any, Mapping
from uuid import UUID

from worktrack.core.domain_types import IdentityId, SYSTEM_ASSIGNEE
from worktrack.core.errors import BadParameterError
from worktrack.core.relationships import RelationshipBlock, AssigneeRef
from worktrack.core.repository_protocols import IdentityStore
from worktrack.core.work_item_type import WorkItemType

logger = logging.getLogger(__name__)

ASSIGNEE_PATH = "data.relationships.assignee.data.id"


def move_assignee_attribute(
    attributes: Mapping[str, Any], relationships: RelationshipBlock | None,
) -> tuple[dict[str, Any], RelationshipBlock | None]:
    """Split system.assignee out of the attributes into the relationship block.

    The relationship block wins when both name an assignee.
    """
    remaining = dict(attributes)
    if SYSTEM_ASSIGNEE not in remaining:
        return remaining, relationships
    value = remaining.pop(SYSTEM_ASSIGNEE)
    if relationships is not None and relationships.assignee is not None:
        return remaining, relationships
    identity_id = None if value is None else str(value)
    return remaining, RelationshipBlock(assignee=AssigneeRef(identity_id))


class RelationResolver:
    """Validates relationship references against the identity store."""

    def __init__(self, identities: IdentityStore):
        self._identities = identities

    async def resolve(
        self, relationships: RelationshipBlock | None, work_item_type: WorkItemType,
    ) -> dict[str, Any]:
        if relationships is None or relationships.assignee is None:
            return {}
        if not work_item_type.has_field(SYSTEM_ASSIGNEE):
            raise BadParameterError(
                "data.relationships.assignee", relationships.assignee.identity_id,
                expected=f"no assignee on {work_item_type.name}",
            )
        return {SYSTEM_ASSIGNEE: await self._resolve_assignee(relationships.assignee)}

    async def _resolve_assignee(self, ref: AssigneeRef) -> str | None:
        if ref.identity_id is None:
            return None
        try:
            identity_id = IdentityId(UUID(ref.identity_id))
        except (ValueError, TypeError, AttributeError):
            raise BadParameterError(ASSIGNEE_PATH, ref.identity_id)
        if not await self._identities.exists(identity_id):
            logger.info(f"Unknown assignee {identity_id}")
            raise BadParameterError(ASSIGNEE_PATH, ref.identity_id)
        return str(identity_id)
