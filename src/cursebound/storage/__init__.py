"""Storage module for Cursebound persistence and realtime sync.

Provides:
- The collaborator protocol (persist / fetch / subscribe) and change events
- An in-memory store for tests and single-table play
- A SQLite store with retrying writes
- The outbound sync queue used by the controller
"""

from cursebound.storage.base import (
    ChangeBroadcaster,
    ChangeEvent,
    ChangeType,
    Collaborator,
    EntityKind,
    Subscription,
    deserialize,
    serialize,
)
from cursebound.storage.database import SQLiteStore
from cursebound.storage.factory import create_store
from cursebound.storage.memory import InMemoryStore
from cursebound.storage.sync import SyncQueue

__all__ = [
    "ChangeBroadcaster",
    "ChangeEvent",
    "ChangeType",
    "Collaborator",
    "EntityKind",
    "Subscription",
    "deserialize",
    "serialize",
    "SQLiteStore",
    "create_store",
    "InMemoryStore",
    "SyncQueue",
]
