# File: managers/system_manager.py
"""System Manager for QuestCraft integration.

The timer owner: the only place that registers a time listener. On every
tick (and once at startup) it runs the daily reset followed by the penalty
sweep against the latest snapshot and writes the combined result once.

Also owns the family-wide settings: parent PIN and rules, the hero's
editable profile fields and the savings goal.

The clock is injectable (``SystemManager.clock``) so the scheduler can be
driven to any simulated time.

Signals Emitted:
- SIGNAL_SUFFIX_DAILY_RESET
- SIGNAL_SUFFIX_TASKS_FAILED
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.util import dt as dt_util

from .. import const
from ..engines.schedule_engine import ScheduleEngine
from ..utils.dt_utils import dt_today_iso
from ..utils.math_utils import clamp, non_negative_int
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestCraftCoordinator


class SystemManager(BaseManager):
    """System Manager - scheduler heartbeat and family settings."""

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: QuestCraftCoordinator,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize system manager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator
            clock: Returns the current local datetime (default dt_util.now)
        """
        super().__init__(hass, coordinator)
        self.clock: Callable[[], datetime] = clock or dt_util.now

    async def async_setup(self) -> None:
        """Register the sweep timer and catch up once at startup."""
        interval = int(
            self.coordinator.config_entry.options.get(
                const.CONF_SWEEP_INTERVAL, const.DEFAULT_SWEEP_INTERVAL
            )
        )
        unsub = async_track_time_interval(
            self.hass, self._on_tick, timedelta(seconds=interval)
        )
        self.coordinator.config_entry.async_on_unload(unsub)

        # Startup catch-up: a reset or expiry missed while HA was down
        await self._on_tick(self.clock())

        const.LOGGER.debug(
            "SystemManager initialized: sweep every %ss for entry %s",
            interval,
            self.entry_id,
        )

    async def _on_tick(self, _: datetime) -> None:
        """Handle the periodic timer tick."""
        try:
            await self.coordinator.async_run_scheduler()
        except HomeAssistantError as err:
            const.LOGGER.warning(
                "SystemManager: Scheduler run failed, retrying next tick: %s", err
            )

    # =========================================================================
    # SCHEDULER
    # =========================================================================

    async def run_scheduler(self) -> bool:
        """Run daily reset then penalty sweep and persist once.

        Returns:
            True when anything changed (and was written).
        """
        now = self.clock()
        today = dt_today_iso(now)
        rules = self.coordinator.rules

        reset = ScheduleEngine.daily_reset(
            self.coordinator.tasks,
            self.coordinator.settings,
            self.coordinator.penalized_today,
            today,
        )
        sweep = ScheduleEngine.penalty_sweep(
            reset.tasks,
            self.coordinator.profile,
            reset.penalized,
            now.hour,
            damage_multiplier=float(rules.get(const.DATA_RULE_DAMAGE_MULTIPLIER, 1.0)),
        )
        if not reset.changed and not sweep.changed:
            return False

        meta = {
            **self.coordinator.data.get(const.DATA_META, {}),
            const.DATA_META_LAST_SWEEP: now.isoformat(),
        }
        await self._async_commit(
            f"scheduler run for {today} at hour {now.hour}",
            {
                const.DATA_TASKS: sweep.tasks,
                const.DATA_SETTINGS: reset.settings,
                const.DATA_PROFILE: sweep.profile,
                const.DATA_PENALIZED_TODAY: sweep.penalized,
                const.DATA_META: meta,
            },
        )

        if reset.changed:
            const.LOGGER.info(
                "SystemManager: Daily reset for %s, %s recurring tasks reset",
                today,
                len(reset.reset_task_ids),
            )
            self.emit(
                const.SIGNAL_SUFFIX_DAILY_RESET,
                day=today,
                task_ids=reset.reset_task_ids,
            )
        if sweep.changed:
            const.LOGGER.info(
                "SystemManager: %s tasks failed at hour %s, hero lost %s HP",
                len(sweep.failed_task_ids),
                now.hour,
                sweep.damage,
            )
            self.emit(
                const.SIGNAL_SUFFIX_TASKS_FAILED,
                task_ids=sweep.failed_task_ids,
                titles=[
                    sweep.tasks[task_id].get(const.DATA_TASK_TITLE, "")
                    for task_id in sweep.failed_task_ids
                ],
                damage=sweep.damage,
            )
        return True

    # =========================================================================
    # SETTINGS / PROFILE / GOAL
    # =========================================================================

    async def update_settings(
        self,
        parent_pin: str | None = None,
        family_name: str | None = None,
        rules: dict[str, Any] | None = None,
    ) -> bool:
        """Update the PIN, family name and/or rules (partial rules merge)."""
        settings: dict[str, Any] = dict(self.coordinator.settings)
        if parent_pin is not None:
            settings[const.DATA_SETTINGS_PARENT_PIN] = parent_pin
        if family_name is not None:
            settings[const.DATA_SETTINGS_FAMILY_NAME] = family_name
        if rules:
            settings[const.DATA_SETTINGS_RULES] = {
                **settings.get(const.DATA_SETTINGS_RULES, {}),
                **rules,
            }
        return await self._async_commit(
            f"update settings (rules: {sorted(rules or {})})",
            {const.DATA_SETTINGS: settings},
        )

    def verify_parent_pin(self, pin: str) -> bool:
        """Return True when `pin` matches the stored parent PIN."""
        stored = str(self.coordinator.settings.get(const.DATA_SETTINGS_PARENT_PIN, ""))
        return stored == str(pin)

    async def update_profile(self, changes: dict[str, Any]) -> bool:
        """Overwrite editable hero fields (name, max_hp, sensory_mode).

        Progression fields are owned by the engines and cannot be set here.
        Lowering max_hp clamps the current HP.
        """
        ignored = set(changes) - const.PROFILE_EDITABLE_FIELDS
        if ignored:
            const.LOGGER.warning(
                "SystemManager: Ignoring non-editable profile fields: %s", sorted(ignored)
            )
        allowed = {k: v for k, v in changes.items() if k in const.PROFILE_EDITABLE_FIELDS}
        if not allowed:
            return False

        profile: dict[str, Any] = {**self.coordinator.profile, **allowed}
        if const.DATA_PROFILE_MAX_HP in allowed:
            max_hp = max(1, non_negative_int(allowed[const.DATA_PROFILE_MAX_HP], 1))
            profile[const.DATA_PROFILE_MAX_HP] = max_hp
            profile[const.DATA_PROFILE_HP] = clamp(
                int(profile.get(const.DATA_PROFILE_HP, max_hp)), 0, max_hp
            )
        return await self._async_commit(
            f"update profile {sorted(allowed)}", {const.DATA_PROFILE: profile}
        )

    async def update_goal(self, changes: dict[str, Any]) -> bool:
        """Edit the family savings goal (partial update)."""
        goal: dict[str, Any] = {**self.coordinator.goal}
        if const.DATA_GOAL_TITLE in changes:
            goal[const.DATA_GOAL_TITLE] = str(changes[const.DATA_GOAL_TITLE])
        for key in (const.DATA_GOAL_TARGET_EMERALDS, const.DATA_GOAL_CURRENT_EMERALDS):
            if key in changes:
                goal[key] = non_negative_int(changes[key])
        return await self._async_commit("update goal", {const.DATA_GOAL: goal})
