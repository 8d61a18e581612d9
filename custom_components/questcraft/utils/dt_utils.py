# File: utils/dt_utils.py
"""Date and time utilities for QuestCraft.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Functions:
    - dt_today_iso: Local calendar day of a datetime as ISO string
    - dt_epoch_ms: Milliseconds since the epoch for a datetime
    - dt_previous_day_iso: The calendar day before an ISO date
    - period_elapsed: Whether a period has fully elapsed at a given hour
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

PERIOD_MORNING = "morning"
PERIOD_AFTERNOON = "afternoon"

MORNING_END_HOUR = 12
AFTERNOON_END_HOUR = 18


# ==============================================================================
# Calendar Days
# ==============================================================================


def dt_today_iso(now: datetime) -> str:
    """Return the calendar day of `now` as ISO string (YYYY-MM-DD).

    The caller is responsible for passing a local datetime; the date is taken
    as-is without timezone conversion.

    Example:
        dt_today_iso(datetime(2025, 4, 7, 14, 30)) → "2025-04-07"
    """
    return now.date().isoformat()


def dt_previous_day_iso(day_iso: str) -> str | None:
    """Return the ISO date of the day before `day_iso`, or None if unparsable."""
    try:
        parsed = date.fromisoformat(day_iso)
    except (TypeError, ValueError):
        _LOGGER.debug("Unparsable ISO date '%s'", day_iso)
        return None
    return (parsed - timedelta(days=1)).isoformat()


def dt_epoch_ms(now: datetime) -> int:
    """Return `now` as integer milliseconds since the Unix epoch.

    Naive datetimes are treated as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return int(now.timestamp() * 1000)


# ==============================================================================
# Time-of-Day Windows
# ==============================================================================


def period_elapsed(
    period: str,
    hour: int,
    morning_end: int = MORNING_END_HOUR,
    afternoon_end: int = AFTERNOON_END_HOUR,
) -> bool:
    """Return True when `period` has fully elapsed at local `hour`.

    Examples:
        period_elapsed("morning", 11) → False
        period_elapsed("morning", 12) → True
        period_elapsed("afternoon", 17) → False
        period_elapsed("night", 23) → False
    """
    if period == PERIOD_MORNING:
        return hour >= morning_end
    if period == PERIOD_AFTERNOON:
        return hour >= afternoon_end
    return False
