"""Work Item Schemas - JSON:API documents for work item create and update.

Invariants:
    - attributes is a free-form bag; the stored type decides which keys are valid
    - relationships.assignee present with data null (or data.id null) means "clear"
    - relationships.assignee absent (or without a data member) means "leave unchanged"
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from worktrack.core.relationships import AssigneeRef, RelationshipBlock


class AssigneeData(BaseModel):
    id: str | None = None
    type: Literal["identities"] = "identities"


class RelationAssignee(BaseModel):
    data: AssigneeData | None = None


class BaseTypeData(BaseModel):
    id: str = Field(min_length=1)
    type: Literal["workitemtypes"] = "workitemtypes"


class RelationBaseType(BaseModel):
    data: BaseTypeData


class WorkItemRelationships(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    assignee: RelationAssignee | None = None
    base_type: RelationBaseType | None = Field(None, alias="baseType")

    def to_block(self) -> RelationshipBlock:
        """Relationship changes in core terms."""
        if self.assignee is None or "data" not in self.assignee.model_fields_set:
            return RelationshipBlock()
        data = self.assignee.data
        return RelationshipBlock(
            assignee=AssigneeRef(identity_id=data.id if data else None),
        )


class WorkItemDataForUpdate(BaseModel):
    id: str
    type: Literal["workitems"] = "workitems"
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: WorkItemRelationships | None = None


class UpdateWorkItemPayload(BaseModel):
    """PATCH /workitems/{id} body."""
    data: WorkItemDataForUpdate


class WorkItemDataForCreate(BaseModel):
    type: Literal["workitems"] = "workitems"
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: WorkItemRelationships


class CreateWorkItemPayload(BaseModel):
    """POST /workitems body; relationships.baseType names the type."""
    data: WorkItemDataForCreate
