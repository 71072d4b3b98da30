"""Character models: attributes, resource pools and owned collections.

A Character exclusively owns its resource pools, its attribute set, its
innate ability, personality traits, binding vows, spiritual abilities and
spells. Characters are immutable; every change produces a copy via
``model_copy`` so the controller can swap whole values atomically.

Example:
    >>> attrs = Attributes(constitution=14, innate=12)
    >>> hero = create_character("Yuji", attrs)
    >>> hero.resources.health.max
    136
"""

from __future__ import annotations

from typing import Annotated, Iterable
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cursebound.core.constants import DEFAULT_ATTRIBUTE_VALUE, RESOURCE_FORMULAS
from cursebound.core.exceptions import ValidationError
from cursebound.models.abilities import (
    INNATE_ABILITIES,
    InnateAbility,
    PersonalityTrait,
    SpiritualAbility,
    Spell,
    find_innate_ability,
)
from cursebound.models.enums import AttributeName, MagicSchool, PersonalityCategory, ResourceName
from cursebound.models.resources import ResourcePool, ResourceSet
from cursebound.models.vows import BindingVow


AttributeScore = Annotated[int, Field(ge=0, le=99)]


class Attributes(BaseModel):
    """The nine named attributes of a character.

    Bounds here are loose; the tighter [8, 15] range only applies while
    the point-buy editor is in use.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strength: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    dexterity: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    constitution: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    intelligence: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    charisma: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    wisdom: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    innate: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    spiritual: AttributeScore = DEFAULT_ATTRIBUTE_VALUE
    magic: AttributeScore = DEFAULT_ATTRIBUTE_VALUE

    def get(self, name: AttributeName | str) -> int:
        """Return the value of attribute ``name``."""
        return getattr(self, AttributeName(name).value)

    def with_value(self, name: AttributeName | str, value: int) -> "Attributes":
        """Return a copy with attribute ``name`` set to ``value``."""
        return Attributes(**{**self.model_dump(), AttributeName(name).value: value})


class MagicProficiency(BaseModel):
    """A character's school of magic and their level in it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    school: MagicSchool = MagicSchool.INVOCATION
    level: int = Field(default=1, ge=1, le=10)


def derive_resources(attributes: Attributes) -> ResourceSet:
    """Compute full resource pools for a new character.

    Each pool's max is ``base + coefficient * attribute``; see
    ``RESOURCE_FORMULAS``.

    Args:
        attributes: The character's attributes.

    Returns:
        ResourceSet with every pool filled to capacity.
    """
    pools = {}
    for name, (base, per_point, source) in RESOURCE_FORMULAS.items():
        pools[name] = ResourcePool.full(base + per_point * attributes.get(source))
    return ResourceSet(**pools)


class Character(BaseModel):
    """A player or non-player character.

    Attributes:
        id: Unique character identifier.
        session_id: Session the character plays in.
        owner_id: User who controls the character, if any.
        name: Display name.
        level: Character level.
        attributes: The nine attributes.
        resources: Health, pe, ether and vigor pools.
        background: Free-text background.
        magic_proficiency: School of magic and level.
        innate_ability: Technique chosen at creation.
        personality: Personality traits, at most one per category.
        binding_vows: Vows owned by this character.
        spiritual_abilities: Abilities granted by bound spirits.
        spells: Known spells.
        is_player: Whether a player (not the master) controls the character.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique character ID")
    session_id: UUID | None = Field(default=None, description="Session reference")
    owner_id: UUID | None = Field(default=None, description="Controlling user")
    name: str = Field(min_length=1, max_length=100, description="Character name")
    level: int = Field(default=1, ge=1, description="Character level")
    attributes: Attributes = Field(default_factory=Attributes)
    resources: ResourceSet = Field(description="Resource pools")
    background: str = Field(default="", max_length=5000, description="Background")
    magic_proficiency: MagicProficiency = Field(default_factory=MagicProficiency)
    innate_ability: InnateAbility = Field(default_factory=lambda: INNATE_ABILITIES[0])
    personality: tuple[PersonalityTrait, ...] = Field(default=(), description="Traits")
    binding_vows: tuple[BindingVow, ...] = Field(default=(), description="Owned vows")
    spiritual_abilities: tuple[SpiritualAbility, ...] = Field(default=())
    spells: tuple[Spell, ...] = Field(default=(), description="Known spells")
    is_player: bool = Field(default=True, description="Controlled by a player")

    @model_validator(mode="after")
    def check_personality(self) -> "Character":
        """At most one trait per personality category."""
        categories = [trait.category for trait in self.personality]
        if len(categories) != len(set(categories)):
            raise ValueError("personality categories must be unique")
        return self

    def with_personality(
        self,
        category: PersonalityCategory | str,
        intensity: int,
    ) -> "Character":
        """Return a copy with ``category`` set to ``intensity``; 0 removes it."""
        category = PersonalityCategory(category)
        traits = tuple(t for t in self.personality if t.category != category)
        if intensity > 0:
            traits = (*traits, PersonalityTrait(category=category, intensity=intensity))
        return Character(**{**self.__dict__, "personality": traits})

    def with_spell(self, spell: Spell) -> "Character":
        """Return a copy that knows ``spell``."""
        return self.model_copy(update={"spells": (*self.spells, spell)})

    def with_resources(self, resources: ResourceSet) -> "Character":
        """Return a copy holding ``resources``."""
        return self.model_copy(update={"resources": resources})

    def set_resource(self, name: ResourceName | str, value: int) -> "Character":
        """Return a copy with pool ``name`` set to ``value`` (clamped)."""
        return self.with_resources(self.resources.set_current(name, value))

    def with_vows(self, vows: tuple[BindingVow, ...]) -> "Character":
        """Return a copy owning ``vows``."""
        return self.model_copy(update={"binding_vows": tuple(vows)})

    def find_vow(self, vow_id: UUID) -> BindingVow | None:
        """Return the owned vow with ``vow_id``, if any."""
        for vow in self.binding_vows:
            if vow.id == vow_id:
                return vow
        return None


def create_character(
    name: str,
    attributes: Attributes | None = None,
    *,
    session_id: UUID | None = None,
    owner_id: UUID | None = None,
    background: str = "",
    magic_proficiency: MagicProficiency | None = None,
    innate_ability: InnateAbility | str | None = None,
    personality: Iterable[PersonalityTrait] = (),
    is_player: bool = True,
) -> Character:
    """Create a character with resources derived from its attributes.

    Args:
        name: Character name.
        attributes: Attribute set; defaults to all tens.
        session_id: Session the character joins.
        owner_id: Controlling user.
        background: Free-text background.
        magic_proficiency: School and level; defaults to level 1 invocation.
        innate_ability: Ability or catalog id; defaults to the first catalog entry.
        personality: Initial personality traits.
        is_player: Whether a player controls the character.

    Returns:
        A new Character with full pools.

    Raises:
        ValidationError: If ``innate_ability`` names no catalog entry.
    """
    attributes = attributes or Attributes()
    if innate_ability is None:
        innate_ability = INNATE_ABILITIES[0]
    elif isinstance(innate_ability, str):
        found = find_innate_ability(innate_ability)
        if found is None:
            raise ValidationError(
                f"Unknown innate ability: {innate_ability}",
                field_name="innate_ability",
                invalid_value=innate_ability,
            )
        innate_ability = found
    return Character(
        name=name,
        session_id=session_id,
        owner_id=owner_id,
        attributes=attributes,
        resources=derive_resources(attributes),
        background=background,
        magic_proficiency=magic_proficiency or MagicProficiency(),
        innate_ability=innate_ability,
        personality=tuple(personality),
        is_player=is_player,
    )


__all__ = [
    "AttributeScore",
    "Attributes",
    "MagicProficiency",
    "derive_resources",
    "Character",
    "create_character",
]
