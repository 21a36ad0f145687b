"""Work Item Type Schemas - request body for type creation.

Field definitions stay a raw dict here; FieldDefinition.from_dict validates them
so the rules live in one place.
"""

from typing import Any

from pydantic import BaseModel, Field


class CreateWorkItemTypePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    fields: dict[str, Any]
