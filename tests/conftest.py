"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Cursebound test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable
from uuid import uuid4

import pytest

from cursebound.core.config import Settings, clear_settings_cache
from cursebound.engine.controller import GameController
from cursebound.engine.dice import DiceResolver, DiceRoller, ResolutionContext
from cursebound.models.character import Attributes, Character, create_character
from cursebound.models.enums import UserRole
from cursebound.models.session import User
from cursebound.storage.memory import InMemoryStore


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


class ScriptedRandom:
    """Random source that returns a fixed script of draws.

    Each ``randint`` call pops the next value and records the requested
    range, so tests can assert both the result and which die was rolled.
    """

    def __init__(self, draws: Iterable[int] = ()) -> None:
        self.draws = list(draws)
        self.calls: list[tuple[int, int]] = []

    def push(self, *draws: int) -> None:
        self.draws.extend(draws)

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self.draws:
            raise AssertionError("ScriptedRandom ran out of draws")
        return self.draws.pop(0)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "CURSEBOUND_DEBUG": "true",
        "CURSEBOUND_LOG_LEVEL": "DEBUG",
        "CURSEBOUND_GAME_POINT_BUY_BUDGET": "30",
        "CURSEBOUND_GAME_BLACK_FLASH_MARGIN": "3",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from the environment's .env file."""
    return Settings(_env_file=None)


# =============================================================================
# Dice Fixtures
# =============================================================================


@pytest.fixture
def scripted_random() -> ScriptedRandom:
    """An empty scripted random source; push draws in the test."""
    return ScriptedRandom()


@pytest.fixture
def scripted_roller(scripted_random: ScriptedRandom) -> DiceRoller:
    """DiceRoller drawing from ``scripted_random``."""
    return DiceRoller(rng=scripted_random)


@pytest.fixture
def dice_roller() -> DiceRoller:
    """Create a DiceRoller with a fixed seed for reproducible tests."""
    return DiceRoller(seed=42)


@pytest.fixture
def resolver(scripted_roller: DiceRoller) -> DiceResolver:
    """DiceResolver over the scripted roller."""
    return DiceResolver(scripted_roller)


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def master() -> User:
    """A game master."""
    return User(name="Gojo", role=UserRole.MASTER)


@pytest.fixture
def player() -> User:
    """A player without a character yet."""
    return User(name="Itadori", role=UserRole.PLAYER)


@pytest.fixture
def sample_attributes() -> Attributes:
    """Provide a sample attribute spread.

    Returns:
        Attributes with raised constitution, innate and dexterity.
    """
    return Attributes(dexterity=14, constitution=14, innate=12, spiritual=10, magic=8)


@pytest.fixture
def sample_character(sample_attributes: Attributes, player: User) -> Character:
    """A player character owned by ``player``.

    Pools: health 136, pe 66, ether 40, vigor 41.
    """
    return create_character(
        "Yuji",
        sample_attributes,
        session_id=uuid4(),
        owner_id=player.id,
    )


@pytest.fixture
def drained_character(sample_character: Character) -> Character:
    """``sample_character`` with pe, ether and vigor at zero."""
    return (
        sample_character.set_resource("pe", 0)
        .set_resource("ether", 0)
        .set_resource("vigor", 0)
    )


@pytest.fixture
def roll_context(sample_character: Character, player: User) -> ResolutionContext:
    """Resolution context binding ``player`` and ``sample_character``."""
    return ResolutionContext(
        session_id=sample_character.session_id,
        actor_id=player.id,
        actor_name=player.name,
        character=sample_character,
    )


# =============================================================================
# Storage and Controller Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    """A fresh in-memory collaborator."""
    return InMemoryStore()


@pytest.fixture
def controller(
    store: InMemoryStore,
    settings: Settings,
    scripted_roller: DiceRoller,
) -> GameController:
    """Controller over the in-memory store with scripted dice."""
    return GameController(store, settings=settings, roller=scripted_roller)


@pytest.fixture
def master_controller(controller: GameController, master: User) -> GameController:
    """Controller with a master bound and a fresh session open."""
    controller.bind_user(master)
    controller.open_session(name="Shibuya Incident")
    return controller


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Path to a SQLite file inside a temporary directory."""
    return tmp_path / "data" / "cursebound.db"
