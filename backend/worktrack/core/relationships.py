"""Relationship changes carried by a work item payload, in core terms."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AssigneeRef:
    """Assignee reference from the payload; identity_id None means clear."""
    identity_id: str | None


@dataclass(frozen=True)
class RelationshipBlock:
    """Relationships a caller may change; None means untouched."""
    assignee: AssigneeRef | None = None
