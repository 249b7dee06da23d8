"""SQLAlchemy declarative Base and shared model configuration."""

from sqlalchemy.orm import DeclarativeBase

# All tables share the site prefix used by the content subsystem.
TABLE_PREFIX = "tsms_"


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
