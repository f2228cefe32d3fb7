"""SQLAlchemy ORM models."""

from authsvc.models.base import Base
from authsvc.models.user import User

__all__ = ["Base", "User"]
