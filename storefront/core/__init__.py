"""Core app configuration, database and security."""

from storefront.core.config import get_settings, settings
from storefront.core.database import Database, get_db

__all__ = ["Database", "get_db", "get_settings", "settings"]
