"""Custom exception hierarchy for the Cursebound rules engine.

All exceptions inherit from CurseboundError so the UI boundary can catch a
single type and turn it into a transient notification, while engine code
raises the most specific class available.

The taxonomy has three families:

- ValidationError: caller-supplied input violates a constraint. The
  controller recovers locally and leaves state unchanged.
- InvalidStateError: an operation was invoked without its required context
  (no bound session, no active combat). Surfaced to the caller.
- CollaboratorError: the persistence/realtime boundary failed. Never retried
  by the engine and never rolled back.

Example:
    >>> from cursebound.core.exceptions import CombatNotActiveError
    >>> raise CombatNotActiveError("Cannot advance turn", current_state="idle")
"""

from __future__ import annotations

from typing import Any


class CurseboundError(Exception):
    """Base exception for all Cursebound errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(CurseboundError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(CurseboundError):
    """Raised when caller-supplied input violates a stated constraint.

    Examples are an empty combat roster, a duplicate vow id, or a vow
    created by someone who neither masters the session nor owns the
    character.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(CurseboundError):
    """Base exception for dice, combat and vow engine errors."""


class InvalidStateError(GameEngineError):
    """Raised when an operation's required context is absent.

    Typical causes are rolling dice with no bound session or actor, or
    advancing a turn while no combat is running.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: List of valid states that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class CombatError(GameEngineError):
    """Raised when combat tracking encounters an error."""

    def __init__(
        self,
        message: str,
        *,
        participant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            participant_id: Identifier of the participant involved.
            round_number: Current combat round when the error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if participant_id:
            combined_details["participant_id"] = participant_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class EmptyRosterError(ValidationError, CombatError):
    """Raised when combat is started with no characters."""

    def __init__(self, message: str = "Cannot start combat with an empty roster") -> None:
        """Initialize the empty roster error.

        Args:
            message: Human-readable error description.
        """
        ValidationError.__init__(self, message, field_name="roster", details={"roster_size": 0})


class CombatNotActiveError(InvalidStateError):
    """Raised when a turn is advanced while no combat is running."""


class CombatAlreadyActiveError(InvalidStateError):
    """Raised when combat is started while another one is running."""


class DiceRollError(GameEngineError):
    """Raised when a die cannot be rolled."""

    def __init__(
        self,
        message: str,
        *,
        die_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with die context.

        Args:
            message: Human-readable error description.
            die_type: The die that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if die_type:
            combined_details["die_type"] = die_type
        super().__init__(message, details=combined_details)


# =============================================================================
# Persistence Collaborator Exceptions
# =============================================================================


class CollaboratorError(CurseboundError):
    """Raised when the persistence/realtime collaborator fails.

    The engine neither retries the failed operation nor rolls back the
    optimistic local state that preceded it.
    """

    def __init__(
        self,
        message: str,
        *,
        entity_kind: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize collaborator error with operation context.

        Args:
            message: Human-readable error description.
            entity_kind: Kind of entity being stored or read.
            operation: Collaborator operation (persist, fetch, subscribe).
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if entity_kind:
            combined_details["entity_kind"] = entity_kind
        if operation:
            combined_details["operation"] = operation
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "CurseboundError",
    # Configuration & validation
    "ConfigurationError",
    "ValidationError",
    # Game engine
    "GameEngineError",
    "InvalidStateError",
    "CombatError",
    "EmptyRosterError",
    "CombatNotActiveError",
    "CombatAlreadyActiveError",
    "DiceRollError",
    # Collaborator
    "CollaboratorError",
]
