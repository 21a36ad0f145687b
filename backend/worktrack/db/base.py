"""SQLAlchemy Declarative Base - shared metadata for every worktrack table.

Invariants:
    - All models inherit from Base
    - Constraint and index names follow NAMING_CONVENTION, so migrations can
      refer to them by name on every backend
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
