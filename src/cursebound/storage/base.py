"""Collaborator interface shared by every storage backend.

The engine talks to persistence and realtime delivery through three calls:
``persist``, ``fetch`` and ``subscribe``. Entities travel as pydantic JSON
payloads and are rebuilt with ``model_validate``, so a record received from
storage or from a peer passes the same validators as one built locally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, StrEnum
from itertools import count
from typing import Any, Callable, Mapping, Protocol
from uuid import UUID

from pydantic import BaseModel

from cursebound.core.exceptions import CollaboratorError
from cursebound.core.logging import get_logger
from cursebound.models.character import Character
from cursebound.models.dice import DiceRoll
from cursebound.models.session import GameSession
from cursebound.models.vows import BindingVow


logger = get_logger(__name__)


# =============================================================================
# Entity Kinds and Serialization
# =============================================================================


class EntityKind(StrEnum):
    """Kinds of entity the collaborator stores."""

    SESSION = "game_session"
    CHARACTER = "character"
    DICE_ROLL = "dice_roll"
    BINDING_VOW = "binding_vow"


class ChangeType(StrEnum):
    """Kinds of change delivered to subscribers."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


ENTITY_MODELS: dict[EntityKind, type[BaseModel]] = {
    EntityKind.SESSION: GameSession,
    EntityKind.CHARACTER: Character,
    EntityKind.DICE_ROLL: DiceRoll,
    EntityKind.BINDING_VOW: BindingVow,
}

Payload = dict[str, Any]
Filter = Mapping[str, Any]


def serialize(entity: BaseModel) -> Payload:
    """Dump an entity to a JSON-compatible dict."""
    return entity.model_dump(mode="json")


def deserialize(kind: EntityKind | str, payload: Mapping[str, Any]) -> BaseModel:
    """Rebuild an entity of ``kind`` from its payload.

    Raises:
        pydantic.ValidationError: If the payload breaks a model invariant.
    """
    return ENTITY_MODELS[EntityKind(kind)].model_validate(dict(payload))


def kind_of(entity: BaseModel) -> EntityKind:
    """Return the entity kind for a model instance."""
    for kind, model in ENTITY_MODELS.items():
        if isinstance(entity, model):
            return kind
    raise CollaboratorError(
        f"Cannot persist {type(entity).__name__}",
        operation="persist",
        details={"type": type(entity).__name__},
    )


def _normalize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


def matches(payload: Mapping[str, Any], filter: Filter | None) -> bool:
    """Whether every filter field equals the payload's top-level field."""
    if not filter:
        return True
    return all(_normalize(payload.get(key)) == _normalize(value) for key, value in filter.items())


# =============================================================================
# Change Events and Subscriptions
# =============================================================================


@dataclass(frozen=True)
class ChangeEvent:
    """A change to one entity, as delivered to subscribers.

    Attributes:
        kind: Entity kind.
        change: Insert, update or delete.
        entity_id: Id of the changed entity.
        payload: Serialized entity (the old value for deletes).
    """

    kind: EntityKind
    change: ChangeType
    entity_id: str
    payload: Payload = field(default_factory=dict)

    def entity(self) -> BaseModel:
        """Validate and rebuild the payload as a model."""
        return deserialize(self.kind, self.payload)


ChangeHandler = Callable[[ChangeEvent], None]


class Subscription:
    """Handle for a live subscription; ``release`` stops delivery."""

    def __init__(self, kind: EntityKind, release: Callable[[], None]) -> None:
        self.kind = kind
        self._release = release
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def release(self) -> None:
        """Stop delivery. Calling it again does nothing."""
        if not self._active:
            return
        self._active = False
        self._release()
        logger.debug("Subscription released", kind=self.kind.value)


class Collaborator(Protocol):
    """Persistence and realtime delivery used by the controller."""

    def persist(self, kind: EntityKind, entity: BaseModel) -> None:
        ...

    def fetch(self, kind: EntityKind, filter: Filter | None = None) -> list[BaseModel]:
        ...

    def subscribe(
        self,
        kind: EntityKind,
        filter: Filter | None,
        on_insert: ChangeHandler | None = None,
        on_update: ChangeHandler | None = None,
        on_delete: ChangeHandler | None = None,
    ) -> Subscription:
        ...


@dataclass
class _Listener:
    kind: EntityKind
    filter: Filter | None
    handlers: dict[ChangeType, ChangeHandler | None]


class ChangeBroadcaster:
    """Fan change events out to matching subscribers in registration order."""

    def __init__(self) -> None:
        self._listeners: dict[int, _Listener] = {}
        self._ids = count()

    def subscribe(
        self,
        kind: EntityKind,
        filter: Filter | None,
        on_insert: ChangeHandler | None = None,
        on_update: ChangeHandler | None = None,
        on_delete: ChangeHandler | None = None,
    ) -> Subscription:
        """Register handlers for changes to ``kind`` matching ``filter``."""
        kind = EntityKind(kind)
        listener_id = next(self._ids)
        self._listeners[listener_id] = _Listener(
            kind=kind,
            filter=dict(filter) if filter else None,
            handlers={
                ChangeType.INSERT: on_insert,
                ChangeType.UPDATE: on_update,
                ChangeType.DELETE: on_delete,
            },
        )
        logger.debug("Subscription opened", kind=kind.value, filter=filter)
        return Subscription(kind, lambda: self._listeners.pop(listener_id, None))

    def publish(self, event: ChangeEvent) -> None:
        """Deliver ``event`` to every matching live handler."""
        for listener in list(self._listeners.values()):
            if listener.kind != event.kind or not matches(event.payload, listener.filter):
                continue
            handler = listener.handlers.get(event.change)
            if handler is not None:
                handler(event)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


__all__ = [
    "EntityKind",
    "ChangeType",
    "ENTITY_MODELS",
    "Payload",
    "Filter",
    "serialize",
    "deserialize",
    "kind_of",
    "matches",
    "ChangeEvent",
    "ChangeHandler",
    "Subscription",
    "Collaborator",
    "ChangeBroadcaster",
]
