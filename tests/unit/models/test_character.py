"""Tests for character models and derived resources."""

from __future__ import annotations

from uuid import uuid4

import pytest

from cursebound.models.character import (
    Attributes,
    Character,
    MagicProficiency,
    create_character,
    derive_resources,
)
from cursebound.models.enums import AttributeName, MagicSchool, VowEffectKind
from cursebound.models.vows import BindingVow, VowEffect


class TestAttributes:
    """Tests for the attribute set."""

    def test_defaults_to_ten(self) -> None:
        """Test every attribute starts at 10."""
        attrs = Attributes()

        assert all(attrs.get(name) == 10 for name in AttributeName)

    def test_with_value(self) -> None:
        """Test with_value returns a modified copy."""
        attrs = Attributes()

        raised = attrs.with_value(AttributeName.DEXTERITY, 14)

        assert raised.dexterity == 14
        assert attrs.dexterity == 10

    def test_extra_fields_forbidden(self) -> None:
        """Test unknown attributes are rejected."""
        with pytest.raises(ValueError):
            Attributes(luck=12)


class TestDeriveResources:
    """Tests for resource derivation from attributes."""

    def test_default_sheet(self) -> None:
        """Test pools for an all-tens sheet."""
        resources = derive_resources(Attributes())

        assert resources.health.max == 120
        assert resources.pe.max == 60
        assert resources.ether.max == 40
        assert resources.vigor.max == 45

    def test_formula_sources(self, sample_attributes: Attributes) -> None:
        """Test each pool follows its source attribute."""
        resources = derive_resources(sample_attributes)

        assert resources.health.max == 80 + 4 * 14
        assert resources.pe.max == 30 + 3 * 12
        assert resources.ether.max == 20 + 2 * 10
        assert resources.vigor.max == 25 + 2 * 8

    def test_pools_start_full(self, sample_attributes: Attributes) -> None:
        """Test new pools are filled to capacity."""
        resources = derive_resources(sample_attributes)

        for pool in (resources.health, resources.pe, resources.ether, resources.vigor):
            assert pool.current == pool.max


class TestCharacter:
    """Tests for the Character model."""

    def test_create_character(self, sample_character: Character) -> None:
        """Test the factory wires attributes and resources."""
        assert sample_character.name == "Yuji"
        assert sample_character.resources.health.max == 136
        assert sample_character.magic_proficiency == MagicProficiency()
        assert sample_character.binding_vows == ()

    def test_set_resource_clamps(self, sample_character: Character) -> None:
        """Test resource edits go through the pool clamp."""
        hurt = sample_character.set_resource("health", -20)
        overfilled = sample_character.set_resource("pe", 1000)

        assert hurt.resources.health.current == 0
        assert overfilled.resources.pe.current == overfilled.resources.pe.max
        assert sample_character.resources.health.current == 136

    def test_find_vow(self, sample_character: Character) -> None:
        """Test vows can be looked up by id."""
        vow = BindingVow(
            character_id=sample_character.id,
            name="Reveal the technique",
            benefit=VowEffect(kind=VowEffectKind.DAMAGE_MULTIPLIER, value=1.5),
        )
        with_vow = sample_character.with_vows((vow,))

        assert with_vow.find_vow(vow.id) == vow
        assert with_vow.find_vow(uuid4()) is None

    def test_json_round_trip(self, sample_character: Character) -> None:
        """Test the persisted representation validates back unchanged."""
        payload = sample_character.model_dump(mode="json")

        assert Character.model_validate(payload) == sample_character

    def test_npc(self) -> None:
        """Test non-player characters carry no owner."""
        npc = create_character(
            "Jogo",
            is_player=False,
            magic_proficiency=MagicProficiency(school=MagicSchool.INVOCATION, level=7),
        )

        assert npc.is_player is False
        assert npc.owner_id is None
        assert npc.magic_proficiency.level == 7
