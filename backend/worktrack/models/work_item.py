"""WorkItem ORM - one row per work item.

Invariants:
    - id is an auto-incremented integer primary key
    - version starts at 0 and is only ever changed by a conditional UPDATE
      keyed on (id, version)
    - fields holds the stored (converted) values keyed by field name

Design Decisions:
    - type is the type name, not a foreign key: types are immutable and loaded
      into the schema registry at startup
    - Integer (not BigInteger) key: autoincrement works on SQLite in tests
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from worktrack.db.base import Base


class WorkItem(Base):
    """Persisted work item row."""
    __tablename__ = "work_items"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    type: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True,
    )
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    fields: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
