"""Pydantic V2 schemas for the Cursebound engine.

All models are immutable values with ``extra="forbid"``; collections are
tuples. Transitions build new instances, which re-run every validator.

Submodules:
    enums: Enumeration types (DieType, AttributeName, ResourceName, ...)
    resources: ResourcePool and ResourceSet with the clamping invariant
    character: Attributes, Character and resource derivation
    vows: BindingVow and VowEffect
    abilities: InnateAbility catalog, SpiritualAbility, Spell, PersonalityTrait
    dice: DiceRoll records
    combat: CombatParticipant and CombatState
    session: User and GameSession

Example:
    >>> from cursebound.models import Attributes, create_character
    >>> hero = create_character("Yuji", Attributes(dexterity=14))
    >>> hero.resources.pe.current
    60
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from cursebound.models.enums import (
    BLACK_FLASH_POOLS,
    AbilityEffectType,
    AttributeName,
    DieType,
    EffectTarget,
    MagicSchool,
    PersonalityCategory,
    ResourceName,
    UserRole,
    VowEffectKind,
    VowKind,
    VowSubtype,
)

# =============================================================================
# Values and Entities
# =============================================================================
from cursebound.models.resources import ResourcePool, ResourceSet, clamp
from cursebound.models.vows import BindingVow, VowEffect
from cursebound.models.abilities import (
    INNATE_ABILITIES,
    AbilityEffect,
    InnateAbility,
    PersonalityTrait,
    SpiritualAbility,
    Spell,
    find_innate_ability,
)
from cursebound.models.character import (
    Attributes,
    Character,
    MagicProficiency,
    create_character,
    derive_resources,
)
from cursebound.models.dice import DiceRoll
from cursebound.models.combat import CombatParticipant, CombatState
from cursebound.models.session import GameSession, User


__all__ = [
    # === Enumerations ===
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
    # === Resources ===
    "clamp",
    "ResourcePool",
    "ResourceSet",
    # === Characters and Vows ===
    "Attributes",
    "MagicProficiency",
    "Character",
    "create_character",
    "derive_resources",
    "VowEffect",
    "BindingVow",
    "AbilityEffect",
    "InnateAbility",
    "INNATE_ABILITIES",
    "find_innate_ability",
    "SpiritualAbility",
    "Spell",
    "PersonalityTrait",
    # === Rolls, Combat, Sessions ===
    "DiceRoll",
    "CombatParticipant",
    "CombatState",
    "User",
    "GameSession",
]
