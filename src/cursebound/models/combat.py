"""Pydantic V2 schemas for combat tracking.

The combat state is a plain value: transitions live in
``cursebound.engine.combat`` and always build a new CombatState, which
re-runs the invariant check below. States that violate it, including ones
received from a remote peer, cannot be constructed.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CombatParticipant(BaseModel):
    """Entity taking part in combat.

    Attributes:
        id: Unique participant identifier.
        name: Display name.
        initiative: Initiative total (d20 + dexterity).
        is_player: Whether a player controls the participant.
        character_ref: The underlying character, if any.
        is_current_turn: Whether it is this participant's turn.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique participant ID")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    initiative: int = Field(description="Initiative total")
    is_player: bool = Field(default=True, description="Player controlled")
    character_ref: UUID | None = Field(default=None, description="Character reference")
    is_current_turn: bool = Field(default=False, description="Holds the turn")


class CombatState(BaseModel):
    """Current state of a session's combat.

    Attributes:
        active: Whether combat is running.
        participants: Participants in initiative order.
        current_turn_index: Index of the participant holding the turn.
        round: Current round, starting at 1.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    active: bool = Field(default=False, description="Combat running")
    participants: tuple[CombatParticipant, ...] = Field(
        default=(),
        description="Participants in initiative order",
    )
    current_turn_index: int = Field(default=0, ge=0, description="Current turn index")
    round: int = Field(default=1, ge=1, description="Current round")

    @model_validator(mode="after")
    def check_turn_holder(self) -> "CombatState":
        """Exactly one turn holder while active, none while idle."""
        holders = [i for i, p in enumerate(self.participants) if p.is_current_turn]
        if self.active:
            if not self.participants:
                raise ValueError("active combat requires participants")
            if self.current_turn_index >= len(self.participants):
                msg = (
                    f"current_turn_index {self.current_turn_index} out of range "
                    f"for {len(self.participants)} participants"
                )
                raise ValueError(msg)
            if holders != [self.current_turn_index]:
                msg = f"turn holders {holders} != [{self.current_turn_index}]"
                raise ValueError(msg)
        else:
            if holders:
                raise ValueError("idle combat cannot have a turn holder")
            if self.current_turn_index != 0:
                raise ValueError("idle combat must reset current_turn_index")
        return self

    @property
    def current_participant(self) -> CombatParticipant | None:
        """The participant holding the turn, or None while idle."""
        if not self.active:
            return None
        return self.participants[self.current_turn_index]


__all__ = [
    "CombatParticipant",
    "CombatState",
]
