"""Combat state machine: Idle -> Active -> Idle.

All transitions are pure functions from one CombatState to the next. The
new state is built through the model constructor, so the turn-holder
invariant is re-checked on every step.

Example:
    >>> state = start_combat(CombatState(), [hero, villain], DiceRoller())
    >>> state = advance_turn(state)
    >>> state = end_combat(state)
"""

from __future__ import annotations

from typing import Sequence

from cursebound.core.exceptions import (
    CombatAlreadyActiveError,
    CombatNotActiveError,
    EmptyRosterError,
)
from cursebound.core.logging import get_logger
from cursebound.engine.dice import DiceRoller
from cursebound.models.character import Character
from cursebound.models.combat import CombatParticipant, CombatState
from cursebound.models.enums import AttributeName, DieType


logger = get_logger(__name__)


def roll_initiative(character: Character, roller: DiceRoller) -> int:
    """Roll a d20 and add the character's dexterity score."""
    return roller.roll(DieType.D20) + character.attributes.get(AttributeName.DEXTERITY)


def start_combat(
    state: CombatState,
    roster: Sequence[Character],
    roller: DiceRoller,
) -> CombatState:
    """Roll initiative for everyone and open round 1.

    Participants are ordered by descending initiative. The sort is stable,
    so tied participants keep their roster order. One d20 is drawn per
    roster entry, in roster order.

    Args:
        state: Current combat state; must be idle.
        roster: Characters entering combat.
        roller: Dice source for initiative.

    Returns:
        Active CombatState with the first participant holding the turn.

    Raises:
        EmptyRosterError: If the roster is empty.
        CombatAlreadyActiveError: If combat is already running.
    """
    if state.active:
        raise CombatAlreadyActiveError(
            "Combat is already active",
            current_state="active",
            expected_states=["idle"],
        )
    if not roster:
        raise EmptyRosterError()

    rolled = [
        CombatParticipant(
            name=character.name,
            initiative=roll_initiative(character, roller),
            is_player=character.is_player,
            character_ref=character.id,
        )
        for character in roster
    ]
    ordered = sorted(rolled, key=lambda p: p.initiative, reverse=True)
    participants = tuple(
        p.model_copy(update={"is_current_turn": i == 0}) for i, p in enumerate(ordered)
    )

    new_state = CombatState(
        active=True,
        participants=participants,
        current_turn_index=0,
        round=1,
    )
    logger.info(
        "Combat started",
        participants=len(participants),
        order=[p.name for p in participants],
        initiatives=[p.initiative for p in participants],
    )
    return new_state


def advance_turn(state: CombatState) -> CombatState:
    """Pass the turn to the next participant.

    Wrapping back to the first participant starts a new round.

    Raises:
        CombatNotActiveError: If combat is idle.
    """
    if not state.active:
        raise CombatNotActiveError(
            "Cannot advance turn outside combat",
            current_state="idle",
            expected_states=["active"],
        )

    count = len(state.participants)
    next_index = (state.current_turn_index + 1) % count
    next_round = state.round + 1 if next_index == 0 else state.round

    participants = tuple(
        p.model_copy(update={"is_current_turn": i == next_index})
        for i, p in enumerate(state.participants)
    )
    new_state = CombatState(
        active=True,
        participants=participants,
        current_turn_index=next_index,
        round=next_round,
    )
    logger.debug(
        "Turn advanced",
        current=participants[next_index].name,
        index=next_index,
        round=next_round,
    )
    if next_round != state.round:
        logger.info("New round", round=next_round)
    return new_state


def end_combat(state: CombatState) -> CombatState:
    """Discard the roster and return to idle."""
    if state.active:
        logger.info("Combat ended", rounds=state.round, participants=len(state.participants))
    return CombatState()


__all__ = [
    "roll_initiative",
    "start_combat",
    "advance_turn",
    "end_combat",
]
