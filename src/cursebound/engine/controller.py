"""Game controller: the single owner of table state.

The controller is the boundary between a UI and the rules engine. Each
command applies a pure transition to the current TableState, publishes
the new state to listeners, then hands the changed entities to the sync
queue. Remote changes from the collaborator pass through the same model
validators and engine transitions but are never synced back out.

Error policy:
    - ValidationError (empty roster, unknown vow, unauthorized actor,
      attributes beyond point buy, unknown resource or attribute name) is
      recovered: state is left unchanged and a warning notification is sent.
    - InvalidStateError from roll_dice and from commands that need a session
      is raised to the caller.
    - CollaboratorError during sync becomes an error notification; the local
      state is not rolled back.

Example:
    >>> controller = GameController(InMemoryStore())
    >>> controller.bind_user(User(name="Gojo", role=UserRole.MASTER))
    >>> controller.open_session(name="Shibuya")
    >>> controller.roll_dice(DieType.D20, modifier=5, difficulty_class=20)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Callable, Iterable, Sequence
from uuid import UUID

import pydantic
from pydantic import BaseModel

from cursebound.core.config import Settings, get_settings
from cursebound.core.exceptions import (
    CollaboratorError,
    CombatAlreadyActiveError,
    CombatNotActiveError,
    InvalidStateError,
    ValidationError,
)
from cursebound.core.logging import bind_context, configure_from_settings, get_logger
from cursebound.engine import combat as combat_engine
from cursebound.engine import vows as vow_engine
from cursebound.engine.dice import (
    DiceResolver,
    DiceRoller,
    ModifierContributor,
    ResolutionContext,
)
from cursebound.engine.point_buy import PointBuy
from cursebound.models.abilities import InnateAbility, PersonalityTrait
from cursebound.models.character import Attributes, Character, MagicProficiency, create_character
from cursebound.models.combat import CombatState
from cursebound.models.dice import DiceRoll
from cursebound.models.enums import AttributeName, DieType, ResourceName, VowKind, VowSubtype
from cursebound.models.session import GameSession, User
from cursebound.models.vows import BindingVow, VowEffect
from cursebound.storage.base import (
    ChangeEvent,
    ChangeType,
    Collaborator,
    EntityKind,
    Subscription,
)
from cursebound.storage.factory import create_store
from cursebound.storage.sync import SyncQueue


logger = get_logger(__name__)


# =============================================================================
# State and Notifications
# =============================================================================


class NotificationLevel(StrEnum):
    """Severity of a transient notification."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """Transient message for the user; not part of the table state."""

    level: NotificationLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class TableState:
    """Everything the local client knows about the table.

    Attributes:
        user: The local user, once bound.
        session: The open session with its combat state and roll history.
        characters: Characters taking part in the session.
    """

    user: User | None = None
    session: GameSession | None = None
    characters: tuple[Character, ...] = ()

    def character(self, character_id: UUID) -> Character | None:
        """Return the character with ``character_id``, if present."""
        for character in self.characters:
            if character.id == character_id:
                return character
        return None

    @property
    def bound_character(self) -> Character | None:
        """The character the local user plays, if any."""
        if self.user is None:
            return None
        if self.user.character_id is not None:
            found = self.character(self.user.character_id)
            if found is not None:
                return found
        for character in self.characters:
            if character.owner_id == self.user.id and character.is_player:
                return character
        return None

    @property
    def combat(self) -> CombatState:
        """Combat state of the open session; idle when no session is open."""
        return self.session.combat if self.session is not None else CombatState()

    def with_character(self, character: Character) -> "TableState":
        """Insert or replace ``character`` by id."""
        if self.character(character.id) is None:
            return replace(self, characters=(*self.characters, character))
        return replace(
            self,
            characters=tuple(character if c.id == character.id else c for c in self.characters),
        )

    def without_character(self, character_id: UUID) -> "TableState":
        return replace(
            self,
            characters=tuple(c for c in self.characters if c.id != character_id),
        )


StateListener = Callable[[TableState], None]
NotificationListener = Callable[[Notification], None]


# =============================================================================
# Controller
# =============================================================================


class GameController:
    """Owns the TableState and applies commands and remote events to it.

    Attributes:
        store: Persistence and realtime collaborator.
        settings: Application settings.
        resolver: Dice resolver used by roll_dice.
        sync: Outbound sync queue.
    """

    def __init__(
        self,
        store: Collaborator,
        *,
        settings: Settings | None = None,
        roller: DiceRoller | None = None,
        contributors: Sequence[ModifierContributor] = (),
        autoflush: bool = True,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Collaborator used for persistence and subscriptions.
            settings: Settings; defaults to ``get_settings()``.
            roller: Dice source; defaults to a SystemRandom-backed roller.
            contributors: Roll modifier contributors.
            autoflush: Flush the sync queue after every command.
        """
        self.store = store
        self.settings = settings or get_settings()
        self.roller = roller or DiceRoller()
        self.resolver = DiceResolver(
            self.roller,
            contributors=contributors,
            black_flash_margin=self.settings.game.black_flash_margin,
            restore_ratio=self.settings.game.black_flash_restore_ratio,
        )
        self.sync = SyncQueue(store, on_error=self._on_sync_error, autoflush=autoflush)
        self._state = TableState()
        self._listeners: list[StateListener] = []
        self._notification_listeners: list[NotificationListener] = []
        self._subscriptions: list[Subscription] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        roller: DiceRoller | None = None,
        contributors: Sequence[ModifierContributor] = (),
    ) -> "GameController":
        """Configure logging and storage from ``settings`` and build a controller.

        This is the entry point for a client process: it applies the log
        level and format, then opens the configured storage backend.

        Args:
            settings: Settings; defaults to ``get_settings()``.
            roller: Dice source.
            contributors: Roll modifier contributors.

        Returns:
            A controller bound to a fresh store.
        """
        settings = settings or get_settings()
        configure_from_settings(settings)
        store = create_store(settings)
        logger.info("Controller started", backend=settings.storage.backend)
        return cls(store, settings=settings, roller=roller, contributors=contributors)

    # =========================================================================
    # Observers
    # =========================================================================

    @property
    def state(self) -> TableState:
        return self._state

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every transition.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)
        return lambda: self._remove(self._listeners, listener)

    def add_notification_listener(self, listener: NotificationListener) -> Callable[[], None]:
        """Call ``listener`` with every notification.

        Returns:
            A callable that removes the listener.
        """
        self._notification_listeners.append(listener)
        return lambda: self._remove(self._notification_listeners, listener)

    @staticmethod
    def _remove(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def _set_state(self, state: TableState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        """Log a notification and hand it to notification listeners."""
        notification = Notification(level=NotificationLevel(level), message=message)
        log = {
            NotificationLevel.WARNING: logger.warning,
            NotificationLevel.ERROR: logger.error,
        }.get(notification.level, logger.info)
        log("Notification", level=notification.level.value, message=message)
        for listener in list(self._notification_listeners):
            listener(notification)
        return notification

    def _on_sync_error(self, kind: EntityKind, entity: BaseModel, exc: CollaboratorError) -> None:
        self.notify(NotificationLevel.ERROR, f"Failed to save {kind.value}: {exc.message}")

    # =========================================================================
    # Context Helpers
    # =========================================================================

    def _require_session(self, action: str) -> GameSession:
        session = self._state.session
        if session is None:
            raise InvalidStateError(
                f"Cannot {action} without an open session",
                current_state="no_session",
                expected_states=["session_open"],
            )
        return session

    def _require_character(self, character_id: UUID) -> Character:
        character = self._state.character(character_id)
        if character is None:
            raise ValidationError(
                f"Unknown character {character_id}",
                field_name="character_id",
                invalid_value=str(character_id),
            )
        return character

    def _authorize_vow(self, character: Character) -> None:
        user = self._state.user
        if user is not None and (user.is_master or character.owner_id == user.id):
            return
        raise ValidationError(
            f"Only the game master or the owner may manage vows of '{character.name}'",
            field_name="actor",
            invalid_value=str(user.id) if user else None,
        )

    def _recover(self, exc: ValidationError | InvalidStateError) -> None:
        self.notify(NotificationLevel.WARNING, exc.message)

    # =========================================================================
    # Session Commands
    # =========================================================================

    def bind_user(self, user: User) -> None:
        """Bind the local user."""
        bind_context(user_id=str(user.id), role=user.role.value)
        logger.info("User bound", user=user.name, role=user.role.value)
        self._set_state(replace(self._state, user=user))

    def open_session(
        self,
        session_id: UUID | None = None,
        *,
        name: str = "Campaign Session",
    ) -> GameSession:
        """Create a new session, or load an existing one from the collaborator.

        Loading reassembles the session's characters, roll history (in
        creation order) and vows.

        Raises:
            InvalidStateError: If ``session_id`` is not stored.
            CollaboratorError: If the load fails.
        """
        self.disconnect()
        if session_id is None:
            user = self._state.user
            master_id = user.id if user is not None and user.is_master else None
            session = GameSession(name=name, master_id=master_id)
            bind_context(session_id=str(session.id))
            logger.info("Session created", session=session.name, id=str(session.id))
            self._set_state(replace(self._state, session=session, characters=()))
            self.sync.enqueue(session, EntityKind.SESSION)
            return session

        try:
            found = self.store.fetch(EntityKind.SESSION, {"id": session_id})
            if not found:
                raise InvalidStateError(
                    f"Session {session_id} not found",
                    current_state="missing",
                    expected_states=["stored"],
                )
            session_filter = {"session_id": session_id}
            characters = self.store.fetch(EntityKind.CHARACTER, session_filter)
            rolls = self.store.fetch(EntityKind.DICE_ROLL, session_filter)
            vows = self.store.fetch(EntityKind.BINDING_VOW, session_filter)
        except CollaboratorError as exc:
            self.notify(NotificationLevel.ERROR, f"Failed to load session: {exc.message}")
            raise

        ordered_rolls = tuple(sorted(rolls, key=lambda roll: roll.timestamp))
        session = found[0].model_copy(update={"dice_rolls": ordered_rolls})
        state = replace(self._state, session=session, characters=tuple(characters))
        for vow in vows:
            owner = state.character(vow.character_id)
            if owner is not None:
                state = state.with_character(vow_engine.replace_vow(owner, vow))

        bind_context(session_id=str(session.id))
        logger.info(
            "Session loaded",
            session=session.name,
            characters=len(state.characters),
            rolls=len(ordered_rolls),
        )
        self._set_state(state)
        return session

    # =========================================================================
    # Character Commands
    # =========================================================================

    def start_point_buy(self) -> PointBuy:
        """Open an attribute editor with the configured budget."""
        return PointBuy.start(self.settings.game.point_buy_budget)

    def create_character(
        self,
        name: str,
        attributes: PointBuy | Attributes | None = None,
        *,
        background: str = "",
        magic_proficiency: MagicProficiency | None = None,
        innate_ability: InnateAbility | str | None = None,
        personality: Iterable[PersonalityTrait] = (),
        is_player: bool = True,
        owner_id: UUID | None = None,
    ) -> Character | None:
        """Create a character in the open session.

        Attributes must be reachable through point buy: every value within
        [8, 15] and the total cost within the budget. A raw ``Attributes``
        is checked against the configured budget, a ``PointBuy`` against its
        own. A player character created by a user who plays nobody yet
        becomes that user's bound character.

        Returns:
            The new character, or None if the attributes or the innate
            ability were rejected.

        Raises:
            InvalidStateError: If no session is open.
        """
        session = self._require_session("create a character")
        if isinstance(attributes, PointBuy):
            attributes, budget = attributes.attributes, attributes.budget
        else:
            budget = self.settings.game.point_buy_budget
        user = self._state.user
        if owner_id is None and is_player and user is not None:
            owner_id = user.id

        try:
            build = PointBuy.from_attributes(attributes or Attributes(), budget)
            character = create_character(
                name,
                build.attributes,
                session_id=session.id,
                owner_id=owner_id,
                background=background,
                magic_proficiency=magic_proficiency,
                innate_ability=innate_ability,
                personality=personality,
                is_player=is_player,
            )
        except ValidationError as exc:
            self._recover(exc)
            return None

        session = session.with_character(character.id)
        state = replace(self._state.with_character(character), session=session)
        if user is not None and user.character_id is None and owner_id == user.id and is_player:
            state = replace(state, user=user.model_copy(update={"character_id": character.id}))

        logger.info(
            "Character created",
            character=name,
            id=str(character.id),
            player=is_player,
            points_spent=build.spent,
        )
        self._set_state(state)
        self.sync.enqueue(character, EntityKind.CHARACTER)
        self.sync.enqueue(session, EntityKind.SESSION)
        return character

    def update_character(self, character: Character) -> Character | None:
        """Replace a character of the session with an edited copy."""
        try:
            self._require_session("update a character")
            self._require_character(character.id)
        except ValidationError as exc:
            self._recover(exc)
            return None
        self._set_state(self._state.with_character(character))
        self.sync.enqueue(character, EntityKind.CHARACTER)
        return character

    def update_resource(
        self,
        character_id: UUID,
        resource: ResourceName | str,
        value: int,
    ) -> Character | None:
        """Set a resource pool's current value, clamped to ``[0, max]``."""
        try:
            character = self._require_character(character_id)
            pool_name = self._resource_name(resource)
        except ValidationError as exc:
            self._recover(exc)
            return None
        updated = character.set_resource(pool_name, value)
        logger.debug(
            "Resource updated",
            character=character.name,
            resource=pool_name.value,
            requested=value,
            current=updated.resources.get(pool_name).current,
        )
        self._set_state(self._state.with_character(updated))
        self.sync.enqueue(updated, EntityKind.CHARACTER)
        return updated

    @staticmethod
    def _resource_name(resource: ResourceName | str) -> ResourceName:
        try:
            return ResourceName(resource)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown resource pool: {resource}",
                field_name="resource",
                invalid_value=str(resource),
            ) from exc

    # =========================================================================
    # Dice Commands
    # =========================================================================

    def roll_dice(
        self,
        die_type: DieType | str,
        modifier: int = 0,
        difficulty_class: int | None = None,
        *,
        attribute: AttributeName | str | None = None,
        character_id: UUID | None = None,
    ) -> DiceRoll | None:
        """Roll for the local user and record the result.

        The roll's character is ``character_id`` when given, otherwise the
        user's bound character. A Black Flash refills that character's pe,
        ether and vigor.

        Returns:
            The recorded roll, or None if ``attribute`` is unknown.

        Raises:
            InvalidStateError: If no session is open or no user is bound.
        """
        state = self._state
        user = state.user
        character = state.character(character_id) if character_id else state.bound_character
        context = ResolutionContext(
            session_id=state.session.id if state.session else None,
            actor_id=user.id if user else None,
            actor_name=user.name if user else "",
            character=character,
        )
        try:
            outcome = self.resolver.resolve(
                context,
                die_type,
                modifier,
                difficulty_class,
                attribute=attribute,
            )
        except ValidationError as exc:
            self._recover(exc)
            return None

        new_state = replace(state, session=state.session.with_roll(outcome.roll))
        if outcome.character is not None and outcome.character != character:
            new_state = new_state.with_character(outcome.character)
        self._set_state(new_state)

        if outcome.roll.critical_bonus:
            if any(outcome.restored.values()):
                message = f"Black Flash! {outcome.character.name} recovers PE, Ether and Vigor"
            else:
                message = f"Black Flash! {context.actor_name} rolled {outcome.roll.total}"
            self.notify(NotificationLevel.INFO, message)

        self.sync.enqueue(outcome.roll, EntityKind.DICE_ROLL)
        if outcome.restored and outcome.character is not None:
            self.sync.enqueue(outcome.character, EntityKind.CHARACTER)
        return outcome.roll

    def recent_rolls(self, limit: int | None = None) -> list[DiceRoll]:
        """Most recent rolls first, for display."""
        session = self._state.session
        if session is None:
            return []
        return session.recent_rolls(limit or self.settings.game.recent_roll_limit)

    # =========================================================================
    # Combat Commands
    # =========================================================================

    def _commit_combat(self, session: GameSession, combat: CombatState) -> CombatState:
        session = session.with_combat(combat)
        self._set_state(replace(self._state, session=session))
        self.sync.enqueue(session, EntityKind.SESSION)
        return combat

    def start_combat(self, character_ids: Iterable[UUID] | None = None) -> CombatState:
        """Start combat with the given characters, or every session character.

        Raises:
            InvalidStateError: If no session is open.
        """
        session = self._require_session("start combat")
        try:
            if character_ids is None:
                roster = list(self._state.characters)
            else:
                roster = [self._require_character(cid) for cid in character_ids]
            combat = combat_engine.start_combat(session.combat, roster, self.roller)
        except (ValidationError, CombatAlreadyActiveError) as exc:
            self._recover(exc)
            return session.combat
        return self._commit_combat(session, combat)

    def next_turn(self) -> CombatState:
        """Advance to the next participant; notifies and no-ops while idle."""
        session = self._require_session("advance a turn")
        try:
            combat = combat_engine.advance_turn(session.combat)
        except CombatNotActiveError as exc:
            self._recover(exc)
            return session.combat
        return self._commit_combat(session, combat)

    def end_combat(self) -> CombatState:
        """End combat and discard the roster."""
        session = self._require_session("end combat")
        return self._commit_combat(session, combat_engine.end_combat(session.combat))

    # =========================================================================
    # Vow Commands
    # =========================================================================

    def add_binding_vow(
        self,
        character_id: UUID,
        name: str,
        benefit: VowEffect,
        *,
        penalty: VowEffect | None = None,
        kind: VowKind = VowKind.MOMENTARY,
        subtype: VowSubtype | None = None,
        description: str = "",
        activation_condition: str = "",
        duration: int | None = None,
    ) -> BindingVow | None:
        """Create a vow for a character; only the master or the owner may."""
        try:
            character = self._require_character(character_id)
            self._authorize_vow(character)
            vow = BindingVow(
                character_id=character.id,
                session_id=character.session_id,
                name=name,
                kind=kind,
                subtype=subtype,
                description=description,
                activation_condition=activation_condition,
                benefit=benefit,
                penalty=penalty,
                duration=duration,
            )
            updated = vow_engine.add_vow(character, vow)
        except ValidationError as exc:
            self._recover(exc)
            return None
        self._set_state(self._state.with_character(updated))
        self.sync.enqueue(vow, EntityKind.BINDING_VOW)
        self.sync.enqueue(updated, EntityKind.CHARACTER)
        return vow

    def toggle_binding_vow(
        self,
        character_id: UUID,
        vow_id: UUID,
        active: bool | None = None,
    ) -> BindingVow | None:
        """Flip a vow on or off, or set it when ``active`` is given."""
        try:
            character = self._require_character(character_id)
            self._authorize_vow(character)
            updated = vow_engine.toggle_vow(character, vow_id, active)
        except ValidationError as exc:
            self._recover(exc)
            return None
        vow = updated.find_vow(vow_id)
        self._set_state(self._state.with_character(updated))
        self.sync.enqueue(vow, EntityKind.BINDING_VOW)
        self.sync.enqueue(updated, EntityKind.CHARACTER)
        return vow

    # =========================================================================
    # Remote Events
    # =========================================================================

    @property
    def connected(self) -> bool:
        return bool(self._subscriptions)

    def connect(self) -> None:
        """Subscribe to changes of the open session's entities.

        Raises:
            InvalidStateError: If no session is open.
        """
        session = self._require_session("connect")
        self.disconnect()
        handler = self.apply_remote
        try:
            self._subscriptions = [
                self.store.subscribe(EntityKind.SESSION, {"id": session.id}, handler, handler, handler),
                *(
                    self.store.subscribe(kind, {"session_id": session.id}, handler, handler, handler)
                    for kind in (EntityKind.CHARACTER, EntityKind.DICE_ROLL, EntityKind.BINDING_VOW)
                ),
            ]
        except CollaboratorError as exc:
            self.disconnect()
            self.notify(NotificationLevel.ERROR, f"Realtime connection failed: {exc.message}")
            return
        logger.info("Connected to realtime updates", session=str(session.id))

    def disconnect(self) -> None:
        """Release every subscription."""
        if not self._subscriptions:
            return
        for subscription in self._subscriptions:
            subscription.release()
        self._subscriptions = []
        logger.info("Disconnected from realtime updates")

    def apply_remote(self, event: ChangeEvent) -> bool:
        """Apply a change delivered by the collaborator.

        Payloads are rebuilt through the model validators; one that breaks
        an invariant is dropped with a warning. Applying a remote change
        never enqueues an outbound write.

        Returns:
            True if the local state changed.
        """
        if self._state.session is None:
            return False
        try:
            entity = event.entity()
        except pydantic.ValidationError as exc:
            logger.warning(
                "Rejected remote change",
                kind=event.kind.value,
                id=event.entity_id,
                errors=exc.error_count(),
            )
            self.notify(NotificationLevel.WARNING, f"Ignored invalid {event.kind.value} update")
            return False

        new_state = self._apply_entity(event.kind, event.change, entity)
        if new_state is None or new_state == self._state:
            return False
        logger.debug("Remote change applied", kind=event.kind.value, change=event.change.value)
        self._set_state(new_state)
        return True

    def _apply_entity(
        self,
        kind: EntityKind,
        change: ChangeType,
        entity: BaseModel,
    ) -> TableState | None:
        state = self._state
        session = state.session
        deleted = change == ChangeType.DELETE

        if kind == EntityKind.SESSION:
            if deleted:
                self.notify(NotificationLevel.WARNING, "The session was closed")
                return replace(state, session=None, characters=())
            remote = entity.model_copy(update={"dice_rolls": session.dice_rolls})
            return replace(state, session=remote)

        if kind == EntityKind.CHARACTER:
            if deleted:
                return state.without_character(entity.id)
            return state.with_character(entity)

        if kind == EntityKind.DICE_ROLL:
            if deleted or session.has_roll(entity.id):
                return None
            return replace(state, session=session.with_roll(entity))

        if kind == EntityKind.BINDING_VOW:
            owner = state.character(entity.character_id)
            if owner is None:
                return None
            if deleted:
                remaining = tuple(v for v in owner.binding_vows if v.id != entity.id)
                return state.with_character(owner.with_vows(remaining))
            return state.with_character(vow_engine.replace_vow(owner, entity))

        return None


__all__ = [
    "NotificationLevel",
    "Notification",
    "TableState",
    "StateListener",
    "NotificationListener",
    "GameController",
]
