"""Core app configuration, database, security and errors."""

from app.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
