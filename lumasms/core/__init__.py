"""Settings and database session wiring shared by the API, services and scripts."""

from lumasms.core.config import get_settings, settings
from lumasms.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
