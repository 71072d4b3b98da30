"""Build the configured storage backend."""

from __future__ import annotations

from cursebound.core.config import Settings, get_settings
from cursebound.core.logging import get_logger
from cursebound.storage.base import Collaborator
from cursebound.storage.database import SQLiteStore
from cursebound.storage.memory import InMemoryStore


logger = get_logger(__name__)


def create_store(settings: Settings | None = None) -> Collaborator:
    """Create the collaborator selected by ``settings.storage.backend``.

    Args:
        settings: Application settings; defaults to ``get_settings()``.

    Returns:
        An InMemoryStore or a SQLiteStore.
    """
    settings = settings or get_settings()
    storage = settings.storage
    if storage.backend == "sqlite":
        logger.info("Using SQLite storage", path=str(storage.database_path))
        return SQLiteStore(storage.database_path, retry_attempts=storage.retry_attempts)
    logger.info("Using in-memory storage")
    return InMemoryStore()


__all__ = ["create_store"]
