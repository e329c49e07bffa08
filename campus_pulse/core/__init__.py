"""Core app configuration and database."""

from campus_pulse.core.config import Settings, get_settings
from campus_pulse.core.database import Database, get_db

__all__ = ["Database", "Settings", "get_db", "get_settings"]
