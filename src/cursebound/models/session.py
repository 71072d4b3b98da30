"""Session models: who is at the table and what the table has done.

A GameSession owns its combat state and its roll history; it references
(does not own) the characters taking part.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from cursebound.core.constants import RECENT_ROLL_LIMIT
from cursebound.models.combat import CombatState
from cursebound.models.dice import DiceRoll
from cursebound.models.enums import UserRole


class User(BaseModel):
    """A person at the table.

    Attributes:
        id: Unique user identifier.
        name: Display name.
        role: Player or game master.
        character_id: Character the user plays, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique user ID")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    role: UserRole = Field(default=UserRole.PLAYER, description="Table role")
    character_id: UUID | None = Field(default=None, description="Played character")

    @property
    def is_master(self) -> bool:
        """Whether the user runs the game."""
        return self.role == UserRole.MASTER


class GameSession(BaseModel):
    """A running campaign session.

    ``dice_rolls`` is excluded from serialization: rolls are persisted as
    their own entity and reassembled when the session is loaded.

    Attributes:
        id: Unique session identifier.
        name: Session name.
        master_id: User running the session.
        character_ids: Characters taking part.
        combat: Combat state.
        dice_rolls: Roll history, oldest first.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique session ID")
    name: str = Field(
        default="Campaign Session",
        min_length=1,
        max_length=200,
        description="Session name",
    )
    master_id: UUID | None = Field(default=None, description="Game master")
    character_ids: tuple[UUID, ...] = Field(default=(), description="Participating characters")
    combat: CombatState = Field(default_factory=CombatState, description="Combat state")
    dice_rolls: tuple[DiceRoll, ...] = Field(
        default=(),
        exclude=True,
        description="Roll history, oldest first",
    )

    def with_combat(self, combat: CombatState) -> "GameSession":
        """Return a copy holding ``combat``."""
        return self.model_copy(update={"combat": combat})

    def with_roll(self, roll: DiceRoll) -> "GameSession":
        """Return a copy with ``roll`` appended to the history."""
        return self.model_copy(update={"dice_rolls": (*self.dice_rolls, roll)})

    def with_character(self, character_id: UUID) -> "GameSession":
        """Return a copy referencing ``character_id`` (no-op if present)."""
        if character_id in self.character_ids:
            return self
        return self.model_copy(update={"character_ids": (*self.character_ids, character_id)})

    def has_roll(self, roll_id: UUID) -> bool:
        """Whether the history already holds ``roll_id``."""
        return any(roll.id == roll_id for roll in self.dice_rolls)

    def recent_rolls(self, limit: int = RECENT_ROLL_LIMIT) -> list[DiceRoll]:
        """Last ``limit`` rolls, most recent first."""
        if limit <= 0:
            return []
        return list(reversed(self.dice_rolls[-limit:]))


__all__ = [
    "User",
    "GameSession",
]
