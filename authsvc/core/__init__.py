"""Core app configuration, database and crypto primitives."""

from authsvc.core.config import Settings, get_settings
from authsvc.core.database import build_engine, build_session_factory, get_db

__all__ = ["Settings", "get_settings", "build_engine", "build_session_factory", "get_db"]
