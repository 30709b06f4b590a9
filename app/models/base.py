"""SQLAlchemy declarative Base shared by the books and users tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; Base.metadata drives create_all and alembic autogenerate."""
