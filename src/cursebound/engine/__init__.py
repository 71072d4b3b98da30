"""Rules engine for Cursebound.

Provides:
- Dice rolling and resolution with the Black Flash rule
- The combat state machine (start, advance, end)
- The point-buy attribute editor
- Binding vow operations
- GameController, which owns table state and syncs it
"""

from cursebound.engine.combat import advance_turn, end_combat, roll_initiative, start_combat
from cursebound.engine.controller import (
    GameController,
    Notification,
    NotificationLevel,
    TableState,
)
from cursebound.engine.dice import (
    ActiveVowModifier,
    DiceResolver,
    DiceRoller,
    ModifierContributor,
    ResolutionContext,
    RollOutcome,
    RollRequest,
    is_black_flash,
    restore_on_black_flash,
)
from cursebound.engine.point_buy import PointBuy, step_cost
from cursebound.engine.vows import active_vow_effects, add_vow, replace_vow, toggle_vow

__all__ = [
    # Dice
    "DiceRoller",
    "DiceResolver",
    "ResolutionContext",
    "RollRequest",
    "RollOutcome",
    "ModifierContributor",
    "ActiveVowModifier",
    "is_black_flash",
    "restore_on_black_flash",
    # Combat
    "roll_initiative",
    "start_combat",
    "advance_turn",
    "end_combat",
    # Point buy
    "step_cost",
    "PointBuy",
    # Vows
    "add_vow",
    "replace_vow",
    "toggle_vow",
    "active_vow_effects",
    # Controller
    "GameController",
    "TableState",
    "Notification",
    "NotificationLevel",
]
