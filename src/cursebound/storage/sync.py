"""Outbound sync queue between the controller and the collaborator.

Local transitions are applied first and synced afterwards. The queue keeps
at most one pending write per entity, so a burst of edits to the same
character sends only the latest value. Failed writes are reported through
``on_error`` and dropped; the local state that produced them is kept.
"""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel

from cursebound.core.exceptions import CollaboratorError
from cursebound.core.logging import get_logger
from cursebound.storage.base import Collaborator, EntityKind, kind_of


logger = get_logger(__name__)

ErrorHandler = Callable[[EntityKind, BaseModel, CollaboratorError], None]


class SyncQueue:
    """Fire-and-forget writer with per-entity coalescing.

    Attributes:
        collaborator: Destination of the writes.
        autoflush: Flush after every enqueue.
    """

    def __init__(
        self,
        collaborator: Collaborator,
        *,
        on_error: ErrorHandler | None = None,
        autoflush: bool = True,
    ) -> None:
        self.collaborator = collaborator
        self.autoflush = autoflush
        self._on_error = on_error
        self._pending: dict[tuple[EntityKind, str], BaseModel] = {}
        self._flushing = False

    @property
    def pending(self) -> int:
        """Number of writes waiting to be flushed."""
        return len(self._pending)

    def enqueue(self, entity: BaseModel, kind: EntityKind | None = None) -> None:
        """Schedule ``entity`` to be persisted, replacing any pending write of it."""
        kind = EntityKind(kind) if kind is not None else kind_of(entity)
        key = (kind, str(getattr(entity, "id")))
        self._pending.pop(key, None)
        self._pending[key] = entity
        if self.autoflush:
            self.flush()

    def flush(self) -> int:
        """Persist every pending write in enqueue order.

        Returns:
            Number of writes that failed.
        """
        if self._flushing:
            return 0
        self._flushing = True
        failures = 0
        try:
            while self._pending:
                key = next(iter(self._pending))
                entity = self._pending.pop(key)
                kind = key[0]
                try:
                    self.collaborator.persist(kind, entity)
                except CollaboratorError as exc:
                    failures += 1
                    logger.error("Sync failed", kind=kind.value, id=key[1], error=exc.message)
                    if self._on_error is not None:
                        self._on_error(kind, entity, exc)
        finally:
            self._flushing = False
        return failures

    def clear(self) -> None:
        """Drop pending writes without sending them."""
        self._pending.clear()


__all__ = ["SyncQueue", "ErrorHandler"]
