"""Ability, spell and personality models owned by a character.

Every character has exactly one innate ability, chosen at creation from
``INNATE_ABILITIES``. Spiritual abilities and spells are collections that
grow during play. Personality traits hold at most one entry per category.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cursebound.models.enums import (
    AbilityEffectType,
    EffectTarget,
    MagicSchool,
    PersonalityCategory,
    ResourceName,
)


class AbilityEffect(BaseModel):
    """One effect of an ability or spell.

    Attributes:
        type: What the effect does.
        value: Magnitude of the effect.
        target: Who the effect lands on.
        duration: Rounds the effect lasts, if limited.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: AbilityEffectType = Field(description="Effect type")
    value: int = Field(default=0, description="Effect magnitude")
    target: EffectTarget = Field(default=EffectTarget.SELF, description="Effect target")
    duration: int | None = Field(default=None, ge=0, description="Duration in rounds")


class InnateAbility(BaseModel):
    """The technique a character is born with.

    Attributes:
        id: Catalog identifier, e.g. ``fire-manipulation``.
        name: Display name.
        description: What the ability does.
        cost: Points spent from ``resource_type`` per use.
        resource_type: Pool paid from; never health.
        level: Current mastery level.
        max_level: Highest reachable level.
        effects: Effects applied on use.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, max_length=100, description="Catalog ID")
    name: str = Field(min_length=1, max_length=100, description="Ability name")
    description: str = Field(default="", max_length=2000, description="Description")
    cost: int = Field(ge=0, description="Cost per use")
    resource_type: ResourceName = Field(description="Pool paid from")
    level: int = Field(default=1, ge=1, description="Mastery level")
    max_level: int = Field(default=5, ge=1, description="Maximum level")
    effects: tuple[AbilityEffect, ...] = Field(default=(), description="Effects")

    @field_validator("resource_type")
    @classmethod
    def reject_health(cls, value: ResourceName) -> ResourceName:
        if value == ResourceName.HEALTH:
            raise ValueError("abilities are paid with pe, ether or vigor")
        return value


class SpiritualAbility(BaseModel):
    """An ability granted by a bound spirit."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique ability ID")
    name: str = Field(min_length=1, max_length=100, description="Ability name")
    description: str = Field(default="", max_length=2000, description="Description")
    spirit_name: str = Field(default="", max_length=100, description="Granting spirit")
    cost: int = Field(default=0, ge=0, description="Ether cost per use")
    unlocked: bool = Field(default=False, description="Available to use")
    effects: tuple[AbilityEffect, ...] = Field(default=(), description="Effects")


class Spell(BaseModel):
    """A spell from one of the schools of magic.

    Attributes:
        id: Unique spell identifier.
        name: Display name.
        school: School the spell belongs to.
        level: Spell level.
        cost: Ether cost per cast.
        description: What the spell does.
        effects: Effects applied on cast.
        is_proficient: Whether the caster is proficient with the spell.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique spell ID")
    name: str = Field(min_length=1, max_length=100, description="Spell name")
    school: MagicSchool = Field(description="School of magic")
    level: int = Field(default=1, ge=1, le=10, description="Spell level")
    cost: int = Field(default=0, ge=0, description="Cost per cast")
    description: str = Field(default="", max_length=2000, description="Description")
    effects: tuple[AbilityEffect, ...] = Field(default=(), description="Effects")
    is_proficient: bool = Field(default=False, description="Caster proficiency")


class PersonalityTrait(BaseModel):
    """How strongly a character leans toward a personality category."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: PersonalityCategory
    intensity: int = Field(ge=1, le=3, description="1 low, 2 medium, 3 high")


INNATE_ABILITIES: tuple[InnateAbility, ...] = (
    InnateAbility(
        id="fire-manipulation",
        name="Fire Manipulation",
        description="Control and create flames with your will",
        cost=15,
        resource_type=ResourceName.PE,
        effects=(AbilityEffect(type=AbilityEffectType.DAMAGE, value=25, target=EffectTarget.ENEMY),),
    ),
    InnateAbility(
        id="shadow-step",
        name="Shadow Step",
        description="Teleport through shadows instantly",
        cost=20,
        resource_type=ResourceName.PE,
        effects=(AbilityEffect(type=AbilityEffectType.UTILITY, value=30, target=EffectTarget.SELF),),
    ),
    InnateAbility(
        id="mind-read",
        name="Mind Reading",
        description="Peer into the thoughts of others",
        cost=25,
        resource_type=ResourceName.ETHER,
        effects=(AbilityEffect(type=AbilityEffectType.UTILITY, value=0, target=EffectTarget.ENEMY),),
    ),
    InnateAbility(
        id="time-dilation",
        name="Time Dilation",
        description="Slow down time around you",
        cost=30,
        resource_type=ResourceName.VIGOR,
        effects=(
            AbilityEffect(
                type=AbilityEffectType.BUFF,
                value=50,
                target=EffectTarget.SELF,
                duration=3,
            ),
        ),
    ),
)
"""Innate abilities offered at character creation; the first is the default."""


def find_innate_ability(ability_id: str) -> InnateAbility | None:
    """Return the catalog entry with ``ability_id``, if any."""
    for ability in INNATE_ABILITIES:
        if ability.id == ability_id:
            return ability
    return None


__all__ = [
    "AbilityEffect",
    "InnateAbility",
    "SpiritualAbility",
    "Spell",
    "PersonalityTrait",
    "INNATE_ABILITIES",
    "find_innate_ability",
]
