"""Integration tests for character lifecycle.

Tests the complete character flow: point buy, creation, vows, and rolls
that read those vows.
"""

from __future__ import annotations

import pytest

from cursebound.core.config import Settings
from cursebound.engine.controller import GameController
from cursebound.engine.dice import ActiveVowModifier, DiceRoller
from cursebound.engine.point_buy import PointBuy
from cursebound.models.enums import AttributeName, DieType, VowEffectKind, VowKind
from cursebound.models.session import User
from cursebound.models.vows import VowEffect
from cursebound.storage.base import EntityKind
from cursebound.storage.memory import InMemoryStore

from conftest import ScriptedRandom


@pytest.fixture
def vow_dice() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def vow_controller(
    store: InMemoryStore,
    settings: Settings,
    player: User,
    vow_dice: ScriptedRandom,
) -> GameController:
    """Player controller that applies active attribute vows to rolls."""
    controller = GameController(
        store,
        settings=settings,
        roller=DiceRoller(rng=vow_dice),
        contributors=[ActiveVowModifier()],
    )
    controller.bind_user(player)
    controller.open_session(name="Jujutsu High")
    return controller


class TestCharacterFlow:
    """Test character creation, vows and rolls."""

    def test_point_buy_to_character(self, vow_controller: GameController) -> None:
        """Spend the budget and create a character from it."""
        build = (
            PointBuy.start()
            .adjust(AttributeName.DEXTERITY, 4)
            .adjust(AttributeName.INNATE, 5)
            .adjust(AttributeName.MAGIC, -2)
        )

        assert build.remaining == 27 - 5 - 7 + 2

        character = vow_controller.create_character("Todo", build, background="Boogie Woogie")

        assert character.attributes.innate == 15
        assert character.resources.pe.max == 75
        assert character.resources.vigor.max == 41
        assert vow_controller.state.bound_character == character
        assert vow_controller.state.user.character_id == character.id

    def test_vow_changes_rolls_while_active(
        self,
        vow_controller: GameController,
        vow_dice: ScriptedRandom,
    ) -> None:
        """An active attribute vow shifts rolls of that attribute only."""
        character = vow_controller.create_character("Todo")
        vow = vow_controller.add_binding_vow(
            character.id,
            "Clap",
            VowEffect(kind=VowEffectKind.ATTRIBUTE_MODIFIER, value=3, target="dexterity"),
            penalty=VowEffect(kind=VowEffectKind.ATTRIBUTE_MODIFIER, value=-1, target="dexterity"),
            kind=VowKind.PERMANENT,
        )
        vow_dice.push(11, 11, 11)

        inactive = vow_controller.roll_dice(DieType.D20, 2, 15, attribute="dexterity")
        vow_controller.toggle_binding_vow(character.id, vow.id)
        active = vow_controller.roll_dice(DieType.D20, 2, 15, attribute="dexterity")
        other = vow_controller.roll_dice(DieType.D20, 2, 15, attribute="strength")

        assert (inactive.total, inactive.success) == (13, False)
        assert (active.modifier, active.total, active.success) == (4, 15, True)
        assert other.total == 13
        assert [r.id for r in vow_controller.recent_rolls()] == [other.id, active.id, inactive.id]

    def test_resource_edits_are_clamped(self, vow_controller: GameController) -> None:
        """Manual edits stay within each pool's bounds."""
        character = vow_controller.create_character("Todo")

        low = vow_controller.update_resource(character.id, "health", -10)
        high = vow_controller.update_resource(character.id, "ether", 10_000)

        assert low.resources.health.current == 0
        assert high.resources.ether.current == high.resources.ether.max
        assert vow_controller.store.fetch(EntityKind.CHARACTER) == [high]
