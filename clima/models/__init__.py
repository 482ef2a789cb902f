"""SQLAlchemy ORM models."""

from clima.models.base import Base
from clima.models.user import Usuario

__all__ = ["Base", "Usuario"]
