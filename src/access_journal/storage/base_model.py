"""Centralized SQLAlchemy declarative base for the journal's ORM models.

Using a single base ensures all models are registered with the same metadata
registry, so creating the schema of a store database creates every table.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models in the access journal."""

    pass
