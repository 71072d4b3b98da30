"""Dice rolling and roll resolution.

This module provides the single source of randomness in the engine
(``DiceRoller``) and the resolution rules built on top of it
(``DiceResolver``): modifier, difficulty check, and the Black Flash
critical-bonus rule with its resource restoration.

The engine is synchronous and pure apart from the one random draw per
roll; the resolver returns the new roll and the updated character, and
the caller decides where to store them.

Example:
    >>> resolver = DiceResolver(DiceRoller())
    >>> outcome = resolver.resolve(context, DieType.D20, 5, difficulty_class=20)
    >>> outcome.roll.critical_bonus
    False
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable
from uuid import UUID

from cursebound.core.constants import BLACK_FLASH_MARGIN, BLACK_FLASH_RESTORE_RATIO
from cursebound.core.exceptions import DiceRollError, InvalidStateError, ValidationError
from cursebound.core.logging import get_logger
from cursebound.models.character import Character
from cursebound.models.dice import DiceRoll
from cursebound.models.enums import BLACK_FLASH_POOLS, AttributeName, DieType, VowEffectKind
from cursebound.models.resources import ResourceSet
from cursebound.engine.vows import active_vow_effects


logger = get_logger(__name__)


@runtime_checkable
class RandomSource(Protocol):
    """Anything with ``random.Random``'s ``randint``."""

    def randint(self, a: int, b: int) -> int:  # pragma: no cover - protocol
        ...


class DiceRoller:
    """Draw die faces from an injectable random source.

    Production code uses ``random.SystemRandom``, which draws from the
    operating system and cannot be predicted from earlier rolls. Tests pass
    a seeded ``random.Random`` or a scripted source.

    Example:
        >>> roller = DiceRoller(rng=random.Random(42))
        >>> 1 <= roller.roll(DieType.D20) <= 20
        True
    """

    def __init__(self, *, rng: RandomSource | None = None, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            rng: Random source to draw from.
            seed: Seed for a reproducible ``random.Random`` when no rng is given.
        """
        if rng is not None:
            self._rng = rng
        elif seed is not None:
            self._rng = random.Random(seed)
        else:
            self._rng = random.SystemRandom()
        logger.debug("DiceRoller initialized", source=type(self._rng).__name__, seed=seed)

    def roll(self, die_type: DieType | str) -> int:
        """Roll one die.

        Args:
            die_type: Die to roll.

        Returns:
            A face in ``[1, sides]``.

        Raises:
            DiceRollError: If the die type is unknown or the source misbehaves.
        """
        try:
            die = DieType(die_type)
        except ValueError as exc:
            raise DiceRollError(f"Unknown die type: {die_type}", die_type=str(die_type)) from exc

        face = self._rng.randint(1, die.sides)
        if not 1 <= face <= die.sides:
            raise DiceRollError(
                f"Random source returned {face} for {die}",
                die_type=die.value,
                details={"face": face},
            )
        return face


@dataclass(frozen=True)
class ResolutionContext:
    """Who is rolling, and where.

    Attributes:
        session_id: Session the roll belongs to.
        actor_id: User making the roll.
        actor_name: Display name of the user.
        character: Character bound to the actor, if any.
    """

    session_id: UUID | None
    actor_id: UUID | None
    actor_name: str = ""
    character: Character | None = None


@dataclass(frozen=True)
class RollRequest:
    """What is being rolled; passed to modifier contributors."""

    die_type: DieType
    modifier: int
    difficulty_class: int | None = None
    attribute: AttributeName | None = None


@dataclass(frozen=True)
class RollOutcome:
    """Result of a resolution.

    Attributes:
        roll: The immutable roll record.
        character: The bound character after any restoration, or None.
        restored: Amount added to each pool by a Black Flash.
    """

    roll: DiceRoll
    character: Character | None
    restored: dict[str, int] = field(default_factory=dict)


class ModifierContributor(Protocol):
    """Adds to a roll's modifier given the rolling character."""

    def __call__(self, character: Character | None, request: RollRequest) -> int:
        ...


class ActiveVowModifier:
    """Opt-in contributor applying active ``attribute_modifier`` vow effects.

    Only effects whose target names the rolled attribute count; benefit and
    penalty values are summed and truncated toward zero. Nothing registers
    this contributor by default.
    """

    def __call__(self, character: Character | None, request: RollRequest) -> int:
        if character is None or request.attribute is None:
            return 0
        total = 0.0
        for effect in active_vow_effects(character, VowEffectKind.ATTRIBUTE_MODIFIER):
            if effect.target == request.attribute.value:
                total += effect.value
        return int(total)


def is_black_flash(
    die_type: DieType,
    raw_result: int,
    total: int,
    difficulty_class: int | None,
    *,
    margin: int = BLACK_FLASH_MARGIN,
) -> bool:
    """Check the Black Flash condition.

    A natural 20 on a d20 against a difficulty class, whose total beats
    the DC by at least ``margin``. Stricter than a plain natural-20 success.
    """
    return (
        die_type == DieType.D20
        and raw_result == DieType.D20.sides
        and difficulty_class is not None
        and total >= difficulty_class + margin
    )


def restore_on_black_flash(
    resources: ResourceSet,
    *,
    ratio: float = BLACK_FLASH_RESTORE_RATIO,
) -> tuple[ResourceSet, dict[str, int]]:
    """Refill pe, ether and vigor by ``floor(max * ratio)`` each.

    Each pool is clamped to its own max; health is untouched.

    Returns:
        The new resource set and the amount added per pool name.
    """
    restored: dict[str, int] = {}
    for name in BLACK_FLASH_POOLS:
        pool = resources.get(name)
        new_pool = pool.restore(math.floor(pool.max * ratio))
        restored[name.value] = new_pool.current - pool.current
        resources = resources.with_pool(name, new_pool)
    return resources, restored


class DiceResolver:
    """Resolve rolls against the rules.

    Attributes:
        roller: Source of die faces.
        contributors: Modifier contributors consulted on every roll.
        black_flash_margin: Margin over the DC required for a Black Flash.
        restore_ratio: Fraction of each pool restored on a Black Flash.
    """

    def __init__(
        self,
        roller: DiceRoller | None = None,
        *,
        contributors: Sequence[ModifierContributor] = (),
        black_flash_margin: int = BLACK_FLASH_MARGIN,
        restore_ratio: float = BLACK_FLASH_RESTORE_RATIO,
    ) -> None:
        self.roller = roller or DiceRoller()
        self.contributors: list[ModifierContributor] = list(contributors)
        self.black_flash_margin = black_flash_margin
        self.restore_ratio = restore_ratio

    def add_contributor(self, contributor: ModifierContributor) -> None:
        """Register a modifier contributor."""
        self.contributors.append(contributor)

    def effective_modifier(self, character: Character | None, request: RollRequest) -> int:
        """Base modifier plus every contributor's share."""
        return request.modifier + sum(c(character, request) for c in self.contributors)

    def resolve(
        self,
        context: ResolutionContext | None,
        die_type: DieType | str,
        modifier: int = 0,
        difficulty_class: int | None = None,
        *,
        attribute: AttributeName | str | None = None,
    ) -> RollOutcome:
        """Roll a die and apply the resolution rules.

        Args:
            context: Session and actor making the roll.
            die_type: Die to roll.
            modifier: Base modifier.
            difficulty_class: Target number; omit for unopposed rolls.
            attribute: Attribute the modifier came from, recorded on the roll.

        Returns:
            RollOutcome with the roll and the (possibly restored) character.

        Raises:
            InvalidStateError: If no session or actor is bound.
            DiceRollError: If the die type is unknown.
            ValidationError: If the attribute is unknown.
        """
        if context is None or context.session_id is None or context.actor_id is None:
            raise InvalidStateError(
                "Cannot roll without an established session and actor",
                current_state="unbound",
                expected_states=["session_bound"],
            )

        try:
            die = DieType(die_type)
        except ValueError as exc:
            raise DiceRollError(f"Unknown die type: {die_type}", die_type=str(die_type)) from exc
        try:
            attr = AttributeName(attribute) if attribute is not None else None
        except ValueError as exc:
            raise ValidationError(
                f"Unknown attribute: {attribute}",
                field_name="attribute",
                invalid_value=str(attribute),
            ) from exc

        request = RollRequest(
            die_type=die,
            modifier=modifier,
            difficulty_class=difficulty_class,
            attribute=attr,
        )
        character = context.character
        effective = self.effective_modifier(character, request)

        raw = self.roller.roll(die)
        total = raw + effective
        success = total >= difficulty_class if difficulty_class is not None else None
        critical = is_black_flash(
            die, raw, total, difficulty_class, margin=self.black_flash_margin
        )

        roll = DiceRoll(
            session_id=context.session_id,
            actor_id=context.actor_id,
            actor_name=context.actor_name,
            die_type=die,
            raw_result=raw,
            modifier=effective,
            total=total,
            attribute_used=attr,
            difficulty_class=difficulty_class,
            success=success,
            critical_bonus=critical,
        )

        logger.info(
            "Dice rolled",
            die_type=die.value,
            raw=raw,
            modifier=effective,
            total=total,
            dc=difficulty_class,
            success=success,
            black_flash=critical,
        )

        restored: dict[str, int] = {}
        if critical:
            if character is None:
                logger.warning("Black Flash with no bound character", actor=context.actor_name)
            else:
                resources, restored = restore_on_black_flash(
                    character.resources, ratio=self.restore_ratio
                )
                character = character.with_resources(resources)
                logger.info("Black Flash restoration", character=character.name, **restored)

        return RollOutcome(roll=roll, character=character, restored=restored)


__all__ = [
    "RandomSource",
    "DiceRoller",
    "ResolutionContext",
    "RollRequest",
    "RollOutcome",
    "ModifierContributor",
    "ActiveVowModifier",
    "is_black_flash",
    "restore_on_black_flash",
    "DiceResolver",
]
