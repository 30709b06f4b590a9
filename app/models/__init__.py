"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.book import BookRow
from app.models.user import UserRow

__all__ = ["Base", "BookRow", "UserRow"]
