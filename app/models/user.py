"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import JSON, Column, DateTime, String

from app.models.base import Base


class UserRow(Base):
    """
    User account for JWT authentication and role-based access control.

    email is stored normalized (trimmed, lowercase) so the unique index is
    case-insensitive in effect. roles: e.g. ["editor"], ["admin"].
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    roles = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
