"""Immutable record of a resolved dice roll."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cursebound.models.enums import AttributeName, DieType


class DiceRoll(BaseModel):
    """A single resolved roll, created once and never mutated.

    Attributes:
        id: Unique roll identifier.
        session_id: Session whose history holds the roll.
        actor_id: User who rolled.
        actor_name: Cached actor name for display.
        die_type: Die rolled.
        raw_result: Face that came up.
        modifier: Total modifier applied.
        total: raw_result + modifier.
        attribute_used: Attribute the modifier came from, if any.
        difficulty_class: Target number, if the roll was opposed.
        success: total >= difficulty_class; None for unopposed rolls.
        critical_bonus: Whether the roll triggered a Black Flash.
        timestamp: When the roll was made.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique roll ID")
    session_id: UUID = Field(description="Owning session")
    actor_id: UUID = Field(description="Rolling user")
    actor_name: str = Field(max_length=100, description="Rolling user's name")
    die_type: DieType = Field(description="Die rolled")
    raw_result: int = Field(ge=1, description="Natural die result")
    modifier: int = Field(default=0, description="Modifier applied")
    total: int = Field(description="raw_result + modifier")
    attribute_used: AttributeName | None = Field(default=None, description="Attribute")
    difficulty_class: int | None = Field(default=None, description="Target number")
    success: bool | None = Field(default=None, description="Met the target")
    critical_bonus: bool = Field(default=False, description="Black Flash triggered")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Creation time",
    )

    @model_validator(mode="after")
    def check_arithmetic(self) -> "DiceRoll":
        """Reject records whose numbers do not add up."""
        if self.raw_result > self.die_type.sides:
            msg = f"raw_result {self.raw_result} exceeds {self.die_type} faces"
            raise ValueError(msg)
        if self.total != self.raw_result + self.modifier:
            msg = f"total {self.total} != {self.raw_result} + {self.modifier}"
            raise ValueError(msg)
        if self.difficulty_class is None and self.success is not None:
            raise ValueError("success requires a difficulty_class")
        return self


__all__ = ["DiceRoll"]
