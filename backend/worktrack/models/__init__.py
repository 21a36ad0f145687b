"""ORM Models - SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Field values and type definitions are stored as JSON, validated on write only

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from worktrack.models.work_item import WorkItem  # noqa: F401
from worktrack.models.work_item_type import WorkItemType  # noqa: F401
from worktrack.models.identity import Identity  # noqa: F401
