"""Cursebound - resolution and combat engine for a tabletop RPG companion.

The engine owns the rules; storage and realtime delivery are an external
collaborator reached through ``persist``, ``fetch`` and ``subscribe``.

Example:
    >>> from cursebound import GameController, InMemoryStore, User, UserRole
    >>>
    >>> controller = GameController(InMemoryStore())
    >>> controller.bind_user(User(name="Gojo", role=UserRole.MASTER))
    >>> controller.open_session(name="Shibuya Incident")
    >>> controller.create_character("Yuji")
    >>> controller.start_combat()
    >>> controller.next_turn()

Modules:
    core: Configuration, logging, constants and exceptions.
    models: Pydantic V2 schemas (characters, rolls, combat, sessions, vows).
    engine: Dice resolution, combat state machine, point buy, vows, controller.
    storage: Collaborator protocol, in-memory and SQLite stores, sync queue.
"""

from __future__ import annotations

# Core
from cursebound.core.config import Settings, get_settings
from cursebound.core.exceptions import CurseboundError
from cursebound.core.logging import configure_logging, get_logger

# Models
from cursebound.models import (
    Attributes,
    BindingVow,
    Character,
    CombatState,
    DiceRoll,
    DieType,
    GameSession,
    ResourcePool,
    User,
    UserRole,
    VowEffect,
    create_character,
)

# Engine
from cursebound.engine import (
    DiceResolver,
    DiceRoller,
    GameController,
    PointBuy,
    TableState,
)

# Storage
from cursebound.storage import InMemoryStore, SQLiteStore, create_store


__version__ = "0.1.0"
__author__ = "Cursebound Team"

__all__ = [
    # Version
    "__version__",
    # Core
    "Settings",
    "get_settings",
    "CurseboundError",
    "configure_logging",
    "get_logger",
    # Models
    "Attributes",
    "BindingVow",
    "Character",
    "CombatState",
    "DiceRoll",
    "DieType",
    "GameSession",
    "ResourcePool",
    "User",
    "UserRole",
    "VowEffect",
    "create_character",
    # Engine
    "DiceResolver",
    "DiceRoller",
    "GameController",
    "PointBuy",
    "TableState",
    # Storage
    "InMemoryStore",
    "SQLiteStore",
    "create_store",
]
