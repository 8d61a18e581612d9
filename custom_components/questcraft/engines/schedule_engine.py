"""Schedule Engine - Pure rules for the daily reset and the penalty sweep.

Both checks are idempotent and safe to re-run on every timer tick:
- daily_reset is a no-op once it ran for today's date
- penalty_sweep never fails or damages a task already in the penalty set

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
The clock is passed in (today's ISO date, current local hour); SystemManager
owns the timer and the clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import clamp
from .task_engine import TaskEngine

if TYPE_CHECKING:
    from ..type_defs import ProfileData, SettingsData


@dataclass
class DailyResetResult:
    """Outcome of a daily reset check.

    When `changed` is False every other field holds the inputs unchanged.
    """

    changed: bool
    tasks: dict[str, Any]
    settings: SettingsData | dict[str, Any]
    penalized: list[str]
    reset_task_ids: list[str] = field(default_factory=list)


@dataclass
class PenaltySweepResult:
    """Outcome of one penalty sweep pass."""

    tasks: dict[str, Any]
    profile: ProfileData | dict[str, Any]
    penalized: list[str]
    failed_task_ids: list[str] = field(default_factory=list)
    damage: int = 0

    @property
    def changed(self) -> bool:
        """True when at least one task failed in this pass."""
        return bool(self.failed_task_ids)


class ScheduleEngine:
    """Pure logic engine for time-driven task maintenance."""

    @staticmethod
    def damage_per_task(
        damage_multiplier: float, penalty_damage: int = const.PENALTY_DAMAGE
    ) -> int:
        """HP lost for one failed task (rounded, never negative)."""
        return max(0, int(round(penalty_damage * damage_multiplier)))

    @staticmethod
    def daily_reset(
        tasks: dict[str, Any],
        settings: SettingsData | dict[str, Any],
        penalized: list[str],
        today_iso: str,
    ) -> DailyResetResult:
        """Roll the task board over to a new calendar day.

        Recurring tasks (daily or unset recurrence) return to PENDING with
        evidence, completion stamp, feedback and step flags cleared; one-off
        tasks are untouched. The penalty set is cleared and last_reset stamped.
        """
        if settings.get(const.DATA_SETTINGS_LAST_RESET) == today_iso:
            return DailyResetResult(
                changed=False, tasks=tasks, settings=settings, penalized=penalized
            )

        new_tasks: dict[str, Any] = {}
        reset_ids: list[str] = []
        for task_id, task in tasks.items():
            if TaskEngine.is_recurring(task):
                new_tasks[task_id] = TaskEngine.reset(task).task
                reset_ids.append(task_id)
            else:
                new_tasks[task_id] = task

        new_settings: dict[str, Any] = dict(settings)
        new_settings[const.DATA_SETTINGS_LAST_RESET] = today_iso
        return DailyResetResult(
            changed=True,
            tasks=new_tasks,
            settings=new_settings,
            penalized=[],
            reset_task_ids=reset_ids,
        )

    @staticmethod
    def penalty_sweep(
        tasks: dict[str, Any],
        profile: ProfileData | dict[str, Any],
        penalized: list[str],
        current_hour: int,
        damage_multiplier: float = 1.0,
        penalty_damage: int = const.PENALTY_DAMAGE,
    ) -> PenaltySweepResult:
        """Fail unresolved tasks whose window elapsed and apply one HP delta.

        Damage for every newly failed task is summed and applied to the
        profile once, floored at 0. Ids already in `penalized` are skipped.
        """
        already = set(penalized)
        new_tasks: dict[str, Any] = dict(tasks)
        failed: list[str] = []

        for task_id, task in tasks.items():
            if task_id in already:
                continue
            result = TaskEngine.expire(task, current_hour)
            if result.ok:
                new_tasks[task_id] = result.task
                failed.append(task_id)

        if not failed:
            return PenaltySweepResult(tasks=tasks, profile=profile, penalized=penalized)

        damage = len(failed) * ScheduleEngine.damage_per_task(
            damage_multiplier, penalty_damage
        )
        new_profile: dict[str, Any] = dict(profile)
        max_hp = int(new_profile.get(const.DATA_PROFILE_MAX_HP, const.DEFAULT_MAX_HP))
        new_profile[const.DATA_PROFILE_HP] = clamp(
            int(new_profile.get(const.DATA_PROFILE_HP, 0)) - damage, 0, max_hp
        )
        return PenaltySweepResult(
            tasks=new_tasks,
            profile=new_profile,
            penalized=[*penalized, *failed],
            failed_task_ids=failed,
            damage=damage,
        )
