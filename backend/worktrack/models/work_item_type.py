"""WorkItemType ORM - persisted schema of a work item type.

Invariants:
    - name is the primary key (unique, immutable)
    - fields holds FieldDefinition.to_dict() per field name, in declaration order
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from worktrack.db.base import Base


class WorkItemType(Base):
    """Persisted work item type row."""
    __tablename__ = "work_item_types"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    fields: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
