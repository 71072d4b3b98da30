"""Enumeration types for the Cursebound engine."""

from __future__ import annotations

from enum import StrEnum


class DieType(StrEnum):
    """Dice the roller understands."""

    D4 = "d4"
    D6 = "d6"
    D8 = "d8"
    D10 = "d10"
    D12 = "d12"
    D20 = "d20"
    D100 = "d100"

    @property
    def sides(self) -> int:
        """Number of faces on the die.

        Returns:
            Face count parsed from the die name (e.g. 20 for d20).
        """
        return int(self.value[1:])


class AttributeName(StrEnum):
    """The nine character attributes."""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    CHARISMA = "charisma"
    WISDOM = "wisdom"
    INNATE = "innate"
    SPIRITUAL = "spiritual"
    MAGIC = "magic"


class ResourceName(StrEnum):
    """The four resource pools a character owns."""

    HEALTH = "health"
    PE = "pe"
    ETHER = "ether"
    VIGOR = "vigor"


BLACK_FLASH_POOLS: tuple[ResourceName, ...] = (
    ResourceName.PE,
    ResourceName.ETHER,
    ResourceName.VIGOR,
)
"""Pools refilled by a Black Flash; health is never touched."""


class VowKind(StrEnum):
    """How long a binding vow lasts."""

    MOMENTARY = "momentary"
    PERMANENT = "permanent"


class VowSubtype(StrEnum):
    """Optional flavor of a binding vow."""

    INHIBITOR = "inhibitor"
    SUBJUGATED = "subjugated"


class VowEffectKind(StrEnum):
    """What a vow's benefit or penalty changes."""

    COST_REDUCTION = "cost_reduction"
    DAMAGE_MULTIPLIER = "damage_multiplier"
    ATTRIBUTE_MODIFIER = "attribute_modifier"
    SPECIAL = "special"


class MagicSchool(StrEnum):
    """Schools of magic a character can be proficient in."""

    INVOCATION = "invocation"
    CONJURATION = "conjuration"
    MANIPULATION = "manipulation"
    ENCHANTMENT = "enchantment"
    DIVINATION = "divination"


class AbilityEffectType(StrEnum):
    """What an ability or spell does when used."""

    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    UTILITY = "utility"


class EffectTarget(StrEnum):
    """Who an ability effect lands on."""

    SELF = "self"
    ALLY = "ally"
    ENEMY = "enemy"
    AREA = "area"


class PersonalityCategory(StrEnum):
    """Personality facets a character can lean toward."""

    HEROIC = "heroic"
    IMPULSIVE = "impulsive"
    CAUTIOUS = "cautious"
    AGGRESSIVE = "aggressive"
    DIPLOMATIC = "diplomatic"
    MYSTERIOUS = "mysterious"


class UserRole(StrEnum):
    """Role of a person at the table."""

    PLAYER = "player"
    MASTER = "master"


__all__ = [
    "DieType",
    "AttributeName",
    "ResourceName",
    "BLACK_FLASH_POOLS",
    "VowKind",
    "VowSubtype",
    "VowEffectKind",
    "MagicSchool",
    "AbilityEffectType",
    "EffectTarget",
    "PersonalityCategory",
    "UserRole",
]
