"""Resource pools: typed current/max counters with a clamping invariant.

A pool never holds a value outside ``0 <= current <= max``. Rather than
rejecting out-of-range input, every construction and mutation clamps it,
so setting a pool is a total function that always yields a valid pool.

Example:
    >>> pool = ResourcePool(current=10, max=50)
    >>> pool.set_current(80).current
    50
    >>> pool.set_current(-3).current
    0
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cursebound.models.enums import ResourceName


def clamp(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


class ResourcePool(BaseModel):
    """A current/max resource counter.

    Attributes:
        current: Amount currently available, always within [0, max].
        max: Capacity of the pool.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    current: int = Field(description="Current amount (clamped to [0, max])")
    max: int = Field(ge=0, description="Pool capacity")

    @model_validator(mode="before")
    @classmethod
    def clamp_current(cls, data: Any) -> Any:
        """Clamp incoming ``current`` into range before field validation."""
        if isinstance(data, dict) and "current" in data and "max" in data:
            try:
                maximum = max(int(data["max"]), 0)
                data = {**data, "current": clamp(int(data["current"]), 0, maximum)}
            except (TypeError, ValueError):
                # Leave malformed input for field validation to report
                return data
        return data

    @classmethod
    def full(cls, maximum: int) -> "ResourcePool":
        """Create a pool filled to capacity."""
        return cls(current=maximum, max=maximum)

    def set_current(self, value: int) -> "ResourcePool":
        """Return a copy with ``current`` clamped to ``[0, max]``.

        Args:
            value: Desired amount; may be negative or above max.

        Returns:
            New pool satisfying the invariant.
        """
        return ResourcePool(current=value, max=self.max)

    def restore(self, amount: int) -> "ResourcePool":
        """Return a copy with ``amount`` added, clamped to max."""
        return self.set_current(self.current + amount)

    @property
    def ratio(self) -> float:
        """Fill ratio in [0, 1]; an empty-capacity pool reports 0."""
        if self.max == 0:
            return 0.0
        return self.current / self.max


class ResourceSet(BaseModel):
    """The four independent pools owned by a character."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    health: ResourcePool
    pe: ResourcePool
    ether: ResourcePool
    vigor: ResourcePool

    def get(self, name: ResourceName | str) -> ResourcePool:
        """Return the pool called ``name``."""
        return getattr(self, ResourceName(name).value)

    def with_pool(self, name: ResourceName | str, pool: ResourcePool) -> "ResourceSet":
        """Return a copy with ``name`` replaced by ``pool``."""
        return self.model_copy(update={ResourceName(name).value: pool})

    def set_current(self, name: ResourceName | str, value: int) -> "ResourceSet":
        """Return a copy with the named pool's current value set (clamped)."""
        return self.with_pool(name, self.get(name).set_current(value))


__all__ = [
    "clamp",
    "ResourcePool",
    "ResourceSet",
]
