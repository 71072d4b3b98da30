"""Rules constants for the Cursebound engine.

This module defines the numbers the rules are built on: point-buy bounds,
the Black Flash trigger, and the coefficients used to derive a new
character's resource pools from its attributes.
"""

from __future__ import annotations

# =============================================================================
# Point Buy
# =============================================================================

POINT_BUY_BUDGET = 27
"""Total points available for point buy character creation."""

POINT_BUY_MIN = 8
"""Minimum attribute value during point buy."""

POINT_BUY_MAX = 15
"""Maximum attribute value during point buy."""

POINT_BUY_THRESHOLD = 13
"""Values above this cost two points per step instead of one."""

DEFAULT_ATTRIBUTE_VALUE = 10
"""Starting value of every attribute on a fresh sheet."""

# =============================================================================
# Black Flash
# =============================================================================

BLACK_FLASH_MARGIN = 5
"""A natural 20 must beat the DC by at least this much."""

BLACK_FLASH_RESTORE_RATIO = 0.5
"""Fraction of each pool's max restored to pe, ether and vigor."""

# =============================================================================
# Derived Resources
# =============================================================================

# (base, per-point coefficient, source attribute) for each pool
RESOURCE_FORMULAS: dict[str, tuple[int, int, str]] = {
    "health": (80, 4, "constitution"),
    "pe": (30, 3, "innate"),
    "ether": (20, 2, "spiritual"),
    "vigor": (25, 2, "magic"),
}

# =============================================================================
# History
# =============================================================================

RECENT_ROLL_LIMIT = 5
"""Number of rolls shown in the recent roll history."""


__all__ = [
    "POINT_BUY_BUDGET",
    "POINT_BUY_MIN",
    "POINT_BUY_MAX",
    "POINT_BUY_THRESHOLD",
    "DEFAULT_ATTRIBUTE_VALUE",
    "BLACK_FLASH_MARGIN",
    "BLACK_FLASH_RESTORE_RATIO",
    "RESOURCE_FORMULAS",
    "RECENT_ROLL_LIMIT",
]
