"""Tests for innate abilities, spells and personality traits."""

from __future__ import annotations

import pydantic
import pytest

from cursebound.core.exceptions import ValidationError
from cursebound.models.abilities import (
    INNATE_ABILITIES,
    AbilityEffect,
    InnateAbility,
    PersonalityTrait,
    Spell,
    find_innate_ability,
)
from cursebound.models.character import Character, create_character
from cursebound.models.enums import (
    AbilityEffectType,
    EffectTarget,
    MagicSchool,
    PersonalityCategory,
    ResourceName,
)


class TestInnateAbilityCatalog:
    """Tests for the creation-time ability catalog."""

    def test_catalog_entries(self) -> None:
        """Test the four techniques with their cost and paying pool."""
        assert [(a.id, a.cost, a.resource_type) for a in INNATE_ABILITIES] == [
            ("fire-manipulation", 15, ResourceName.PE),
            ("shadow-step", 20, ResourceName.PE),
            ("mind-read", 25, ResourceName.ETHER),
            ("time-dilation", 30, ResourceName.VIGOR),
        ]

    def test_find(self) -> None:
        """Test lookup by id."""
        ability = find_innate_ability("time-dilation")

        assert ability is not None
        assert ability.effects[0].type == AbilityEffectType.BUFF
        assert ability.effects[0].duration == 3
        assert find_innate_ability("ten-shadows") is None

    def test_health_cannot_pay(self) -> None:
        """Test abilities are never paid from health."""
        with pytest.raises(pydantic.ValidationError):
            InnateAbility(id="blood", name="Blood", cost=5, resource_type=ResourceName.HEALTH)

    def test_negative_cost_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            InnateAbility(id="free", name="Free", cost=-1, resource_type=ResourceName.PE)


class TestCharacterAbilities:
    """Tests for the abilities a character owns."""

    def test_default_innate_ability(self) -> None:
        """Test a new character gets the first catalog entry."""
        assert create_character("Yuji").innate_ability == INNATE_ABILITIES[0]

    def test_choose_by_id(self) -> None:
        """Test an ability id picks the matching catalog entry."""
        character = create_character("Yaga", innate_ability="mind-read")

        assert character.innate_ability.name == "Mind Reading"
        assert character.innate_ability.resource_type == ResourceName.ETHER

    def test_unknown_id_raises(self) -> None:
        """Test an id missing from the catalog raises ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            create_character("Yuji", innate_ability="ten-shadows")

        assert exc_info.value.details["field_name"] == "innate_ability"

    def test_custom_ability(self) -> None:
        """Test a character may carry an ability outside the catalog."""
        ability = InnateAbility(
            id="straw-doll",
            name="Straw Doll",
            cost=10,
            resource_type=ResourceName.PE,
            effects=(AbilityEffect(type=AbilityEffectType.DAMAGE, value=12, target=EffectTarget.ENEMY),),
        )

        character = create_character("Nobara", innate_ability=ability)

        assert character.innate_ability == ability

    def test_with_spell(self) -> None:
        spell = Spell(name="Red", school=MagicSchool.INVOCATION, level=3, cost=12)

        character = create_character("Gojo").with_spell(spell)

        assert character.spells == (spell,)

    def test_json_round_trip(self) -> None:
        """Test abilities, spells and traits survive serialization."""
        character = (
            create_character("Gojo", innate_ability="time-dilation")
            .with_spell(Spell(name="Blue", school=MagicSchool.MANIPULATION))
            .with_personality(PersonalityCategory.MYSTERIOUS, 3)
        )

        restored = Character.model_validate(character.model_dump(mode="json"))

        assert restored == character


class TestPersonality:
    """Tests for personality traits."""

    def test_set_replace_remove(self) -> None:
        """Test setting a category twice replaces it and zero removes it."""
        character = create_character("Todo").with_personality("heroic", 1)
        character = character.with_personality(PersonalityCategory.HEROIC, 3)

        assert character.personality == (
            PersonalityTrait(category=PersonalityCategory.HEROIC, intensity=3),
        )
        assert character.with_personality("heroic", 0).personality == ()

    def test_duplicate_categories_rejected(self) -> None:
        """Test a category may appear only once."""
        traits = [
            PersonalityTrait(category=PersonalityCategory.AGGRESSIVE, intensity=1),
            PersonalityTrait(category=PersonalityCategory.AGGRESSIVE, intensity=2),
        ]

        with pytest.raises(pydantic.ValidationError):
            create_character("Mahito", personality=traits)

    @pytest.mark.parametrize("intensity", [0, 4])
    def test_intensity_bounds(self, intensity: int) -> None:
        with pytest.raises(pydantic.ValidationError):
            PersonalityTrait(category=PersonalityCategory.CAUTIOUS, intensity=intensity)

    def test_unknown_category(self) -> None:
        with pytest.raises(ValueError):
            create_character("Todo").with_personality("brooding", 2)
