"""In-process collaborator: dict storage plus synchronous change delivery.

Suitable for tests and single-table play. Several controllers sharing one
InMemoryStore see each other's writes as remote events, in write order.
"""

from __future__ import annotations

import copy

from pydantic import BaseModel

from cursebound.core.logging import get_logger
from cursebound.storage.base import (
    ChangeBroadcaster,
    ChangeEvent,
    ChangeHandler,
    ChangeType,
    EntityKind,
    Filter,
    Payload,
    Subscription,
    deserialize,
    matches,
    serialize,
)


logger = get_logger(__name__)


class InMemoryStore:
    """Collaborator keeping serialized entities in memory.

    Example:
        >>> store = InMemoryStore()
        >>> store.persist(EntityKind.CHARACTER, hero)
        >>> store.fetch(EntityKind.CHARACTER, {"id": hero.id})[0] == hero
        True
    """

    def __init__(self) -> None:
        self._tables: dict[EntityKind, dict[str, Payload]] = {kind: {} for kind in EntityKind}
        self._broadcaster = ChangeBroadcaster()

    def persist(self, kind: EntityKind, entity: BaseModel) -> None:
        """Insert or overwrite ``entity`` and notify subscribers."""
        kind = EntityKind(kind)
        payload = serialize(entity)
        entity_id = str(payload["id"])
        table = self._tables[kind]
        change = ChangeType.UPDATE if entity_id in table else ChangeType.INSERT
        table[entity_id] = payload
        logger.debug("Entity persisted", kind=kind.value, id=entity_id, change=change.value)
        self._broadcaster.publish(
            ChangeEvent(kind=kind, change=change, entity_id=entity_id, payload=copy.deepcopy(payload))
        )

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        """Remove an entity; returns False if it was not stored."""
        kind = EntityKind(kind)
        payload = self._tables[kind].pop(str(entity_id), None)
        if payload is None:
            return False
        logger.debug("Entity deleted", kind=kind.value, id=str(entity_id))
        self._broadcaster.publish(
            ChangeEvent(kind=kind, change=ChangeType.DELETE, entity_id=str(entity_id), payload=payload)
        )
        return True

    def fetch(self, kind: EntityKind, filter: Filter | None = None) -> list[BaseModel]:
        """Return stored entities of ``kind`` matching ``filter``, in insertion order."""
        kind = EntityKind(kind)
        return [
            deserialize(kind, payload)
            for payload in self._tables[kind].values()
            if matches(payload, filter)
        ]

    def subscribe(
        self,
        kind: EntityKind,
        filter: Filter | None,
        on_insert: ChangeHandler | None = None,
        on_update: ChangeHandler | None = None,
        on_delete: ChangeHandler | None = None,
    ) -> Subscription:
        """Deliver future changes to ``kind`` matching ``filter``."""
        return self._broadcaster.subscribe(kind, filter, on_insert, on_update, on_delete)

    @property
    def subscriber_count(self) -> int:
        return self._broadcaster.listener_count

    def count(self, kind: EntityKind) -> int:
        return len(self._tables[EntityKind(kind)])


__all__ = ["InMemoryStore"]
