"""Core app configuration, database and security primitives."""

from clima.core.config import get_settings, settings
from clima.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
