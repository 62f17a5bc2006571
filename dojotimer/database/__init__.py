"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import ConfigEntry, SharedConfigEntry
from .config_store import ConfigStore, SNAPSHOT_KEYS

__all__ = [
    "get_session",
    "init_db",
    "configure_engine",
    "ConfigEntry",
    "SharedConfigEntry",
    "ConfigStore",
    "SNAPSHOT_KEYS",
]
