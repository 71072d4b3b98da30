"""Point-buy attribute editor used during character creation.

Raising an attribute costs 1 point per step up to 13 and 2 points per
step above it; lowering refunds the same amount. While the editor is in
use every attribute stays within [8, 15] and the remaining budget never
goes negative. An adjustment that would break either rule is ignored
rather than raised: the editor returns itself unchanged. A finished
attribute set built elsewhere is checked with ``PointBuy.from_attributes``,
which does raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cursebound.core.constants import (
    POINT_BUY_BUDGET,
    POINT_BUY_MAX,
    POINT_BUY_MIN,
    POINT_BUY_THRESHOLD,
)
from cursebound.core.exceptions import ValidationError
from cursebound.core.logging import get_logger
from cursebound.models.character import Attributes
from cursebound.models.enums import AttributeName


logger = get_logger(__name__)


def step_cost(current: int, direction: int) -> int:
    """Points moved by a single step from ``current``.

    Args:
        current: Attribute value before the step.
        direction: +1 to raise, -1 to lower.

    Returns:
        Cost of raising (positive) or refund of lowering (positive).
    """
    if direction > 0:
        return 2 if current + 1 > POINT_BUY_THRESHOLD else 1
    return 2 if current > POINT_BUY_THRESHOLD else 1


@dataclass(frozen=True)
class PointBuy:
    """Attribute set under construction plus the points left to spend.

    Attributes:
        attributes: Current attribute values.
        remaining: Points still available.
        budget: Total points the editor started with.
    """

    attributes: Attributes = field(default_factory=Attributes)
    remaining: int = POINT_BUY_BUDGET
    budget: int = POINT_BUY_BUDGET

    @classmethod
    def start(cls, budget: int = POINT_BUY_BUDGET) -> "PointBuy":
        """Open the editor on a default sheet with a full budget."""
        return cls(attributes=Attributes(), remaining=budget, budget=budget)

    @classmethod
    def from_attributes(
        cls,
        attributes: Attributes,
        budget: int = POINT_BUY_BUDGET,
    ) -> "PointBuy":
        """Replay ``attributes`` through a fresh editor.

        Lowered attributes are applied first so their refunds can pay for
        raises, the same order a player would need.

        Args:
            attributes: Finished attribute set to check.
            budget: Points available.

        Returns:
            Editor holding ``attributes`` and the points left over.

        Raises:
            ValidationError: If any attribute is outside the editor's range
                or the set costs more than ``budget``.
        """
        editor = cls.start(budget)
        targets = sorted(
            AttributeName,
            key=lambda name: attributes.get(name) - editor.attributes.get(name),
        )
        for name in targets:
            target = attributes.get(name)
            editor = editor.adjust(name, target - editor.attributes.get(name))
            if editor.attributes.get(name) != target:
                raise ValidationError(
                    f"Attribute {name.value}={target} is not reachable by point buy "
                    f"within [{POINT_BUY_MIN}, {POINT_BUY_MAX}] and {budget} points",
                    field_name=name.value,
                    invalid_value=target,
                )
        return editor

    @property
    def spent(self) -> int:
        """Points spent so far."""
        return self.budget - self.remaining

    def adjust(self, attribute: AttributeName | str, delta: int) -> "PointBuy":
        """Move ``attribute`` by ``delta`` steps.

        Each step is priced at the value it starts from, so a multi-step
        raise across the threshold mixes 1- and 2-point steps.

        Args:
            attribute: Attribute to change.
            delta: Signed number of steps.

        Returns:
            A new editor, or ``self`` if the attribute is unknown or any
            step is out of range or unaffordable.
        """
        try:
            name = AttributeName(attribute)
        except ValueError:
            logger.warning("Point-buy unknown attribute", attribute=str(attribute))
            return self
        if delta == 0:
            return self

        direction = 1 if delta > 0 else -1
        value = self.attributes.get(name)
        remaining = self.remaining

        for _ in range(abs(delta)):
            target = value + direction
            if not POINT_BUY_MIN <= target <= POINT_BUY_MAX:
                logger.debug("Point-buy step out of range", attribute=name.value, target=target)
                return self
            cost = step_cost(value, direction)
            if direction > 0:
                if cost > remaining:
                    logger.debug(
                        "Point-buy step unaffordable",
                        attribute=name.value,
                        cost=cost,
                        remaining=remaining,
                    )
                    return self
                remaining -= cost
            else:
                remaining += cost
            value = target

        return PointBuy(
            attributes=self.attributes.with_value(name, value),
            remaining=remaining,
            budget=self.budget,
        )


__all__ = [
    "step_cost",
    "PointBuy",
]
