"""Database package."""

from .db import configure_engine, get_session, init_db
from .gateway import (
    CorruptRecordError,
    PersistedRecord,
    PersistenceGateway,
    Statistics,
    reconcile,
)
from .models import KeyValue
from .store import KeyValueStore

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "CorruptRecordError",
    "PersistedRecord",
    "PersistenceGateway",
    "Statistics",
    "reconcile",
    "KeyValue",
    "KeyValueStore",
]
