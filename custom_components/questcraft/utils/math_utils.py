# File: utils/math_utils.py
"""Math and calculation utilities for QuestCraft.

Pure Python math functions with ZERO Home Assistant dependencies.
All quantities in the game are non-negative integers; these helpers keep them
that way.

Functions:
    - clamp: Bound a value to an inclusive range
    - apply_multiplier: Integer multiplier arithmetic (floored)
    - non_negative_int: Coerce loosely typed input to an int >= 0
"""

from __future__ import annotations

import logging
import math

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)


def clamp(value: int, min_val: int, max_val: int) -> int:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
        clamp(50, 0, 100) → 50
    """
    return max(min_val, min(value, max_val))


def apply_multiplier(base: int, multiplier: float) -> int:
    """Apply a multiplier to an integer base, flooring the result at zero.

    Examples:
        apply_multiplier(10, 1.5) → 15
        apply_multiplier(10, 1.25) → 12
        apply_multiplier(10, -1) → 0
    """
    return max(0, math.floor(base * multiplier))


def non_negative_int(value: object, default: int = 0) -> int:
    """Coerce a stored value to a non-negative int.

    Stored snapshots may come from older or hand-edited files; anything that
    cannot be read as a number falls back to `default`.
    """
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        _LOGGER.debug("Non-numeric value %r replaced with %s", value, default)
        return default
    return max(0, number)


