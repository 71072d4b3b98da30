"""Core module providing configuration, logging, constants and exceptions.

Exports:
    Exceptions:
        CurseboundError: Base exception for all application errors.
        ValidationError: Caller input violates a constraint.
        InvalidStateError: Required context is absent.
        CollaboratorError: Persistence/realtime boundary failed.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from cursebound.core.config import (
    GameSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from cursebound.core.exceptions import (
    CollaboratorError,
    CombatAlreadyActiveError,
    CombatError,
    CombatNotActiveError,
    ConfigurationError,
    CurseboundError,
    DiceRollError,
    EmptyRosterError,
    GameEngineError,
    InvalidStateError,
    ValidationError,
)
from cursebound.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
    "CurseboundError",
    "ConfigurationError",
    "ValidationError",
    "GameEngineError",
    "InvalidStateError",
    "CombatError",
    "EmptyRosterError",
    "CombatNotActiveError",
    "CombatAlreadyActiveError",
    "DiceRollError",
    "CollaboratorError",
    # Configuration
    "Settings",
    "GameSettings",
    "StorageSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
