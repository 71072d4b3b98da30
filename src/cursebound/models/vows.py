"""Binding vow models.

A binding vow is a self-imposed restriction a character takes on in
exchange for a mechanical benefit, optionally paired with a penalty.
Vows are owned by exactly one character and toggled on and off by play.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from cursebound.models.enums import VowEffectKind, VowKind, VowSubtype


class VowEffect(BaseModel):
    """A benefit or penalty attached to a vow.

    Attributes:
        kind: What the effect changes.
        value: Magnitude of the effect (meaning depends on kind).
        target: Optional target, e.g. an attribute or ability name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: VowEffectKind = Field(description="Effect kind")
    value: float = Field(description="Effect magnitude")
    target: str | None = Field(default=None, max_length=100, description="Effect target")


class BindingVow(BaseModel):
    """A risk/reward pact attached to a character.

    Attributes:
        id: Unique vow identifier.
        character_id: Owning character.
        session_id: Session the vow was created in.
        name: Display name.
        kind: Momentary or permanent.
        subtype: Optional inhibitor/subjugated flavor.
        description: Free-text description.
        activation_condition: When the vow applies.
        benefit: Effect granted while the vow holds.
        penalty: Effect suffered in exchange, if any.
        active: Whether the vow is currently in force.
        duration: Rounds a momentary vow lasts, if limited.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique vow ID")
    character_id: UUID = Field(description="Owning character")
    session_id: UUID | None = Field(default=None, description="Session of creation")
    name: str = Field(min_length=1, max_length=100, description="Vow name")
    kind: VowKind = Field(default=VowKind.MOMENTARY, description="Vow duration kind")
    subtype: VowSubtype | None = Field(default=None, description="Vow subtype")
    description: str = Field(default="", max_length=2000, description="Description")
    activation_condition: str = Field(default="", max_length=500, description="Condition")
    benefit: VowEffect = Field(description="Benefit granted")
    penalty: VowEffect | None = Field(default=None, description="Penalty suffered")
    active: bool = Field(default=False, description="Vow currently in force")
    duration: int | None = Field(default=None, ge=0, description="Duration in rounds")

    def effects(self) -> tuple[VowEffect, ...]:
        """Benefit followed by penalty, when one exists."""
        if self.penalty is None:
            return (self.benefit,)
        return (self.benefit, self.penalty)


__all__ = [
    "VowEffect",
    "BindingVow",
]
