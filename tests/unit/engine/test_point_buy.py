"""Tests for the point-buy attribute editor."""

from __future__ import annotations

import pytest

from cursebound.core.exceptions import ValidationError
from cursebound.engine.point_buy import PointBuy, step_cost
from cursebound.models.character import Attributes
from cursebound.models.enums import AttributeName


class TestStepCost:
    """Tests for per-step pricing."""

    @pytest.mark.parametrize(
        ("current", "expected"),
        [(8, 1), (10, 1), (12, 1), (13, 2), (14, 2)],
    )
    def test_raise(self, current: int, expected: int) -> None:
        """Test raising into (13, 15] costs 2, otherwise 1."""
        assert step_cost(current, +1) == expected

    @pytest.mark.parametrize(
        ("current", "expected"),
        [(9, 1), (13, 1), (14, 2), (15, 2)],
    )
    def test_lower(self, current: int, expected: int) -> None:
        """Test lowering from above 13 refunds 2, otherwise 1."""
        assert step_cost(current, -1) == expected


class TestPointBuy:
    """Tests for PointBuy.adjust."""

    def test_starting_state(self) -> None:
        """Test the editor opens on all tens with 27 points."""
        editor = PointBuy.start()

        assert editor.remaining == 27
        assert editor.spent == 0
        assert editor.attributes == Attributes()

    def test_ten_to_fourteen_costs_five(self) -> None:
        """Test 10 -> 14 costs 1 + 1 + 1 + 2 as a single adjustment."""
        editor = PointBuy.start().adjust(AttributeName.STRENGTH, 4)

        assert editor.attributes.strength == 14
        assert editor.remaining == 22
        assert editor.spent == 5

    def test_stepwise_matches_lump(self) -> None:
        """Test one step at a time costs the same as a multi-step delta."""
        editor = PointBuy.start()
        for _ in range(4):
            editor = editor.adjust("strength", 1)

        assert editor.remaining == 22

    def test_lowering_refunds(self) -> None:
        """Test lowering refunds the same amounts."""
        raised = PointBuy.start().adjust("wisdom", 5)
        lowered = raised.adjust("wisdom", -5)

        assert raised.remaining == 27 - 7
        assert lowered.remaining == 27
        assert lowered.attributes.wisdom == 10

    def test_lowering_below_start_gains_points(self) -> None:
        """Test dropping a ten to eight frees two points."""
        editor = PointBuy.start().adjust("charisma", -2)

        assert editor.attributes.charisma == 8
        assert editor.remaining == 29

    @pytest.mark.parametrize(("attribute", "delta"), [("magic", 6), ("magic", -3)])
    def test_out_of_range_is_noop(self, attribute: str, delta: int) -> None:
        """Test adjustments leaving [8, 15] return the editor unchanged."""
        editor = PointBuy.start()

        assert editor.adjust(attribute, delta) is editor

    def test_over_budget_is_noop(self) -> None:
        """Test unaffordable raises return the editor unchanged."""
        editor = PointBuy.start(budget=4)

        assert editor.adjust("innate", 4) is editor
        assert editor.adjust("innate", 3).remaining == 1

    def test_budget_never_negative(self) -> None:
        """Test spending everything then raising again is refused."""
        editor = PointBuy.start()
        for attribute in ("strength", "dexterity", "constitution"):
            editor = editor.adjust(attribute, 5)
        exhausted = editor.adjust("innate", 5)

        assert editor.remaining == 27 - 21
        assert exhausted.remaining >= 0
        assert exhausted.adjust("spiritual", 5).remaining >= 0

    def test_zero_delta(self) -> None:
        """Test a zero delta returns the editor itself."""
        editor = PointBuy.start()

        assert editor.adjust("strength", 0) is editor

    def test_custom_budget(self) -> None:
        """Test the budget is configurable."""
        editor = PointBuy.start(budget=30)

        assert editor.remaining == 30
        assert editor.adjust("strength", 5).spent == 7

    def test_unknown_attribute_is_noop(self) -> None:
        """Test an attribute the sheet does not have leaves the editor unchanged."""
        editor = PointBuy.start()

        assert editor.adjust("luck", 1) is editor


class TestFromAttributes:
    """Tests for checking a finished attribute set."""

    def test_reachable_spread(self) -> None:
        """Test lowered attributes pay for raises and the leftover is reported."""
        attributes = Attributes(strength=15, dexterity=15, constitution=15, charisma=8, wisdom=8)

        editor = PointBuy.from_attributes(attributes)

        assert editor.attributes == attributes
        assert editor.spent == 21 - 4
        assert editor.remaining == 27 - 17

    def test_default_sheet_costs_nothing(self) -> None:
        """Test all tens spend no points."""
        assert PointBuy.from_attributes(Attributes()).remaining == 27

    @pytest.mark.parametrize(
        ("attributes", "field"),
        [
            (Attributes(strength=40, dexterity=99), "strength"),
            (Attributes(magic=7), "magic"),
            (Attributes(innate=16), "innate"),
        ],
    )
    def test_out_of_range_raises(self, attributes: Attributes, field: str) -> None:
        """Test values outside [8, 15] raise ValidationError naming the attribute."""
        with pytest.raises(ValidationError) as exc_info:
            PointBuy.from_attributes(attributes)

        assert exc_info.value.details["field_name"] == field

    def test_over_budget_raises(self) -> None:
        """Test a spread costing more than the budget raises."""
        attributes = Attributes(strength=15, dexterity=15, constitution=15, innate=15)

        with pytest.raises(ValidationError):
            PointBuy.from_attributes(attributes)

    def test_custom_budget(self) -> None:
        """Test the same spread fits a larger budget."""
        attributes = Attributes(strength=15, dexterity=15, constitution=15, innate=15)

        assert PointBuy.from_attributes(attributes, budget=30).remaining == 2
