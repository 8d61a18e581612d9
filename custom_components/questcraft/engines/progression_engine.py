"""Progression Engine - Pure logic for experience, levels, ranks and streaks.

This engine provides stateless, pure Python functions for:
- Experience thresholds per level
- Rank tier lookup
- Applying an approved task's rewards to the hero profile
- Re-normalizing experience after manual adjustments
- Daily approval streak tracking

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and return new
profiles; inputs are never mutated. State management belongs in the managers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_previous_day_iso
from ..utils.math_utils import apply_multiplier, clamp

if TYPE_CHECKING:
    from ..type_defs import ProfileData, TaskData


# =============================================================================
# RESULT DATA STRUCTURES
# =============================================================================


@dataclass(frozen=True)
class RankInfo:
    """A rank tier resolved for a level."""

    min_level: int
    label: str
    display_asset: str


@dataclass
class RewardOutcome:
    """Result of applying a task reward to a profile.

    Attributes:
        profile: New profile with rewards, level-ups and rank applied
        xp_gained: Experience actually credited (after multiplier)
        levels_gained: Number of level thresholds crossed
        bonus_diamonds: Diamonds granted for level-ups
    """

    profile: ProfileData
    xp_gained: int = 0
    levels_gained: int = 0
    bonus_diamonds: int = 0


# =============================================================================
# PROGRESSION ENGINE
# =============================================================================


class ProgressionEngine:
    """Pure logic engine for hero progression.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.
    """

    # =========================================================================
    # THRESHOLDS AND RANKS
    # =========================================================================

    @staticmethod
    def required_xp(level: int) -> int:
        """Return experience needed to advance from `level` to the next one.

        Strictly positive and strictly increasing for level >= 1.
        """
        return const.XP_PER_LEVEL * max(level, const.DEFAULT_LEVEL)

    @staticmethod
    def rank_for_level(level: int) -> RankInfo:
        """Return the highest rank tier whose minimum level is <= `level`.

        Levels below every tier resolve to the lowest tier.
        """
        selected = const.RANK_TIERS[0]
        for tier in const.RANK_TIERS:
            if tier[0] <= level:
                selected = tier
            else:
                break
        return RankInfo(*selected)

    @staticmethod
    def scaled_xp(points: int, multiplier: float = 1.0) -> int:
        """Return task points scaled by the XP multiplier (floored, >= 0)."""
        return apply_multiplier(int(points), multiplier)

    # =========================================================================
    # PROFILE UPDATES
    # =========================================================================

    @staticmethod
    def apply_task_reward(
        profile: ProfileData | dict[str, Any],
        task: TaskData | dict[str, Any],
        xp_multiplier: float = 1.0,
        bonus_diamonds_per_level: int = const.LEVEL_UP_BONUS_DIAMONDS,
        hp_regen: int = const.HP_REGEN_PER_TASK,
    ) -> RewardOutcome:
        """Credit an approved task to the hero.

        Experience comes only from the task's points; currencies are credited
        independently. Each level gained grants bonus diamonds and a full heal,
        otherwise the approval regenerates a little health.

        Args:
            profile: Current hero profile (not modified)
            task: The approved task
            xp_multiplier: Rules multiplier applied to points
            bonus_diamonds_per_level: Diamonds granted per level-up
            hp_regen: Health restored on an approval without level-up

        Returns:
            RewardOutcome with the new profile and what was granted
        """
        new_profile: dict[str, Any] = dict(profile)
        xp_gained = ProgressionEngine.scaled_xp(
            task.get(const.DATA_TASK_POINTS, const.DEFAULT_ZERO), xp_multiplier
        )

        new_profile[const.DATA_PROFILE_EMERALDS] = max(
            0,
            int(new_profile.get(const.DATA_PROFILE_EMERALDS, 0))
            + int(task.get(const.DATA_TASK_EMERALDS, 0)),
        )
        new_profile[const.DATA_PROFILE_DIAMONDS] = max(
            0,
            int(new_profile.get(const.DATA_PROFILE_DIAMONDS, 0))
            + int(task.get(const.DATA_TASK_DIAMONDS, 0)),
        )
        new_profile[const.DATA_PROFILE_EXPERIENCE] = (
            int(new_profile.get(const.DATA_PROFILE_EXPERIENCE, 0)) + xp_gained
        )

        levels_gained = ProgressionEngine._apply_level_ups(
            new_profile, bonus_diamonds_per_level
        )
        if not levels_gained:
            max_hp = int(new_profile.get(const.DATA_PROFILE_MAX_HP, const.DEFAULT_MAX_HP))
            new_profile[const.DATA_PROFILE_HP] = clamp(
                int(new_profile.get(const.DATA_PROFILE_HP, max_hp)) + hp_regen,
                0,
                max_hp,
            )

        return RewardOutcome(
            profile=new_profile,  # type: ignore[arg-type]
            xp_gained=xp_gained,
            levels_gained=levels_gained,
            bonus_diamonds=levels_gained * bonus_diamonds_per_level,
        )

    @staticmethod
    def normalize_experience(
        profile: ProfileData | dict[str, Any],
        bonus_diamonds_per_level: int = const.LEVEL_UP_BONUS_DIAMONDS,
    ) -> RewardOutcome:
        """Run the level-up loop on a profile whose experience was edited.

        Used after manual XP adjustments so 0 <= experience < required_xp
        always holds.
        """
        new_profile: dict[str, Any] = dict(profile)
        new_profile[const.DATA_PROFILE_EXPERIENCE] = max(
            0, int(new_profile.get(const.DATA_PROFILE_EXPERIENCE, 0))
        )
        levels_gained = ProgressionEngine._apply_level_ups(
            new_profile, bonus_diamonds_per_level
        )
        return RewardOutcome(
            profile=new_profile,  # type: ignore[arg-type]
            levels_gained=levels_gained,
            bonus_diamonds=levels_gained * bonus_diamonds_per_level,
        )

    @staticmethod
    def advance_streak(
        profile: ProfileData | dict[str, Any], today_iso: str
    ) -> dict[str, Any]:
        """Return a profile with the daily approval streak advanced.

        Streak grows by one when the previous approval day was yesterday,
        stays put for repeat approvals on the same day and restarts at 1
        after a gap.
        """
        new_profile: dict[str, Any] = dict(profile)
        last_day = new_profile.get(const.DATA_PROFILE_LAST_STREAK_DATE)
        streak = int(new_profile.get(const.DATA_PROFILE_STREAK, 0))

        if last_day == today_iso:
            return new_profile
        if last_day and last_day == dt_previous_day_iso(today_iso):
            streak += 1
        else:
            streak = 1

        new_profile[const.DATA_PROFILE_STREAK] = streak
        new_profile[const.DATA_PROFILE_LAST_STREAK_DATE] = today_iso
        return new_profile

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    @staticmethod
    def _apply_level_ups(profile: dict[str, Any], bonus_diamonds_per_level: int) -> int:
        """Consume experience across as many levels as it covers (in place).

        Works on a profile copy owned by the caller. Returns levels gained.
        """
        level = max(int(profile.get(const.DATA_PROFILE_LEVEL, 1)), const.DEFAULT_LEVEL)
        experience = int(profile.get(const.DATA_PROFILE_EXPERIENCE, 0))
        levels_gained = 0

        while experience >= ProgressionEngine.required_xp(level):
            experience -= ProgressionEngine.required_xp(level)
            level += 1
            levels_gained += 1

        profile[const.DATA_PROFILE_LEVEL] = level
        profile[const.DATA_PROFILE_EXPERIENCE] = experience
        profile[const.DATA_PROFILE_RANK] = ProgressionEngine.rank_for_level(level).label

        if levels_gained:
            profile[const.DATA_PROFILE_DIAMONDS] = (
                int(profile.get(const.DATA_PROFILE_DIAMONDS, 0))
                + levels_gained * bonus_diamonds_per_level
            )
            profile[const.DATA_PROFILE_HP] = int(
                profile.get(const.DATA_PROFILE_MAX_HP, const.DEFAULT_MAX_HP)
            )
        return levels_gained
