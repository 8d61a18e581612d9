# File: coordinator.py
"""Coordinator for the QuestCraft integration.

Holds one family's snapshot and exposes the action surface used by services
and entities. Every action runs as a single read-compute-write cycle under
one asyncio.Lock: managers read the latest snapshot, the pure engines compute
new sections, and _async_persist() writes the whole snapshot once before
listeners are notified. A failed write leaves the previous snapshot in place.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Any
import uuid

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const, data_builders as db
from .managers import ActivityManager, EconomyManager, SystemManager, TaskManager
from .store import QuestCraftStore
from .utils.dt_utils import dt_epoch_ms

if TYPE_CHECKING:
    from collections.abc import Callable

    from .type_defs import GoalData, ProfileData, RulesData, SettingsData

# Retention per append-only section
_LIST_LIMITS = {
    const.DATA_ACTIVITIES: const.MAX_ACTIVITY_ENTRIES,
    const.DATA_MESSAGES: const.MAX_MESSAGE_ENTRIES,
}


class QuestCraftCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for one QuestCraft family.

    Push based: there is no polling interval. Data changes only through the
    actions below or the SystemManager timer.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: QuestCraftStore,
    ) -> None:
        """Initialize the QuestCraftCoordinator."""
        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=None,
        )
        self.store = store
        self._lock = asyncio.Lock()

        self.task_manager = TaskManager(hass, self)
        self.economy_manager = EconomyManager(hass, self)
        self.activity_manager = ActivityManager(hass, self)
        self.system_manager = SystemManager(hass, self)

    async def _async_update_data(self) -> dict[str, Any]:
        """Return the stored snapshot (first refresh only)."""
        return self.store.data

    async def async_setup_managers(self) -> None:
        """Start managers; listeners first so startup events are recorded."""
        await self.activity_manager.async_setup()
        await self.task_manager.async_setup()
        await self.economy_manager.async_setup()
        await self.system_manager.async_setup()

    # -------------------------------------------------------------------------------------
    # Snapshot accessors
    # -------------------------------------------------------------------------------------

    @property
    def profile(self) -> ProfileData:
        """Return the hero profile."""
        return self.data[const.DATA_PROFILE]

    @property
    def tasks(self) -> dict[str, Any]:
        """Return tasks keyed by internal id."""
        return self.data[const.DATA_TASKS]

    @property
    def rewards(self) -> dict[str, Any]:
        """Return the shop catalog keyed by internal id."""
        return self.data[const.DATA_REWARDS]

    @property
    def settings(self) -> SettingsData:
        """Return family settings."""
        return self.data[const.DATA_SETTINGS]

    @property
    def rules(self) -> RulesData:
        """Return game rules."""
        return self.settings.get(const.DATA_SETTINGS_RULES, {})  # type: ignore[return-value]

    @property
    def activities(self) -> list[dict[str, Any]]:
        """Return the audit log, oldest first."""
        return self.data[const.DATA_ACTIVITIES]

    @property
    def messages(self) -> list[dict[str, Any]]:
        """Return messages, oldest first."""
        return self.data[const.DATA_MESSAGES]

    @property
    def goal(self) -> GoalData:
        """Return the family savings goal."""
        return self.data[const.DATA_GOAL]

    @property
    def penalized_today(self) -> list[str]:
        """Return ids of tasks penalized since the last daily reset."""
        return self.data.get(const.DATA_PENALIZED_TODAY, [])

    def now(self) -> datetime:
        """Return the current local time from the scheduler clock."""
        return self.system_manager.clock()

    def now_ms(self) -> int:
        """Return the current time as epoch milliseconds."""
        return dt_epoch_ms(self.now())

    # -------------------------------------------------------------------------------------
    # Store contract
    # -------------------------------------------------------------------------------------

    async def _async_persist(self, updates: dict[str, Any]) -> None:
        """Write a new snapshot with `updates` applied, then notify listeners.

        Must be called with the lock held. On a failed write the previous
        snapshot stays current and HomeAssistantError is raised.
        """
        previous = self.data
        new_data = {**previous, **updates}
        self.store.set_data(new_data)
        if not await self.store.async_save():
            self.store.set_data(previous)
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_STORAGE_WRITE_FAILED,
            )
        self.async_set_updated_data(new_data)

    @callback
    def async_subscribe(
        self, section: str, update_callback: Callable[[Any], None]
    ) -> CALLBACK_TYPE:
        """Subscribe to one snapshot section.

        The callback fires immediately with the current value, then every
        time the section changes. Returns the unsubscribe callable.
        """
        last_seen = self.data.get(section)
        update_callback(last_seen)

        @callback
        def _on_update() -> None:
            nonlocal last_seen
            value = self.data.get(section)
            if value is last_seen:
                return
            last_seen = value
            update_callback(value)

        return self.async_add_listener(_on_update)

    async def async_save_section(self, section: str, value: Any) -> bool:
        """Replace a whole snapshot section."""
        if section not in self.data:
            const.LOGGER.warning(
                "Attempted to update unknown data section '%s'. Valid sections: %s",
                section,
                ", ".join(self.data.keys()),
            )
            return False
        async with self._lock:
            await self._async_persist({section: value})
        return True

    async def async_append_to_list(self, section: str, item: dict[str, Any]) -> str | None:
        """Append an entry to a list section, assigning it a generated id.

        The list is pruned to its retention limit (oldest entries dropped).
        """
        if section not in const.LIST_SECTIONS:
            const.LOGGER.warning("Section '%s' is not an append-only list", section)
            return None
        item_id = uuid.uuid4().hex
        async with self._lock:
            entries = [*self.data.get(section, []), {**item, "id": item_id}]
            limit = _LIST_LIMITS[section]
            if len(entries) > limit:
                entries = entries[-limit:]
            await self._async_persist({section: entries})
        return item_id

    # -------------------------------------------------------------------------------------
    # Task actions
    # -------------------------------------------------------------------------------------

    async def add_task(self, task_input: dict[str, Any]) -> str:
        """Create a task; returns its internal id."""
        async with self._lock:
            return await self.task_manager.add_task(task_input)

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task."""
        async with self._lock:
            return await self.task_manager.delete_task(task_id)

    async def update_tasks(self, task_inputs: list[dict[str, Any]]) -> bool:
        """Replace the task board."""
        async with self._lock:
            return await self.task_manager.update_tasks(task_inputs)

    async def start_task(self, task_id: str) -> bool:
        """Start a task."""
        async with self._lock:
            return await self.task_manager.start_task(task_id)

    async def toggle_step(self, task_id: str, step_id: str) -> bool:
        """Tick or untick a task step."""
        async with self._lock:
            return await self.task_manager.toggle_step(task_id, step_id)

    async def submit_evidence(
        self,
        task_id: str,
        evidence_url: str | None = None,
        evidence_type: str | None = None,
    ) -> bool:
        """Submit a task with its evidence for review."""
        async with self._lock:
            return await self.task_manager.submit_evidence(
                task_id, evidence_url, evidence_type
            )

    complete_task = submit_evidence

    async def approve_task(self, task_id: str, feedback: str | None = None) -> bool:
        """Approve a submitted task."""
        async with self._lock:
            return await self.task_manager.approve_task(task_id, feedback)

    async def reject_task(self, task_id: str, feedback: str | None = None) -> bool:
        """Reject a submitted task."""
        async with self._lock:
            return await self.task_manager.reject_task(task_id, feedback)

    # -------------------------------------------------------------------------------------
    # Economy actions
    # -------------------------------------------------------------------------------------

    async def buy_reward(self, reward_id: str) -> bool:
        """Buy one unit of a reward."""
        async with self._lock:
            return await self.economy_manager.buy_reward(reward_id)

    async def adjust_currency(self, amount: int, kind: str) -> bool:
        """Apply a manual adjustment to XP, a currency or HP."""
        async with self._lock:
            return await self.economy_manager.adjust_currency(amount, kind)

    async def add_reward(self, reward_input: dict[str, Any]) -> str:
        """Create a catalog entry; returns its internal id."""
        async with self._lock:
            return await self.economy_manager.add_reward(reward_input)

    async def delete_reward(self, reward_id: str) -> bool:
        """Delete a catalog entry."""
        async with self._lock:
            return await self.economy_manager.delete_reward(reward_id)

    async def place_block(self, x: int, y: int, reward_id: str) -> bool:
        """Paint or erase one canvas cell."""
        async with self._lock:
            return await self.economy_manager.place_block(x, y, reward_id)

    async def fill_blocks(self, x: int, y: int, reward_id: str) -> bool:
        """Flood-fill a canvas region."""
        async with self._lock:
            return await self.economy_manager.fill_blocks(x, y, reward_id)

    async def clear_world(self) -> bool:
        """Refund every placed block."""
        async with self._lock:
            return await self.economy_manager.clear_world()

    # -------------------------------------------------------------------------------------
    # Settings, profile, messages, goal
    # -------------------------------------------------------------------------------------

    async def update_profile(self, changes: dict[str, Any]) -> bool:
        """Edit the hero's editable profile fields."""
        async with self._lock:
            return await self.system_manager.update_profile(changes)

    async def update_settings(
        self,
        parent_pin: str | None = None,
        family_name: str | None = None,
        rules: dict[str, Any] | None = None,
    ) -> bool:
        """Edit the PIN, family name and/or rules."""
        async with self._lock:
            return await self.system_manager.update_settings(parent_pin, family_name, rules)

    def verify_parent_pin(self, pin: str) -> bool:
        """Check a PIN against the stored parent PIN."""
        return self.system_manager.verify_parent_pin(pin)

    async def update_goal(self, changes: dict[str, Any]) -> bool:
        """Edit the family savings goal."""
        async with self._lock:
            return await self.system_manager.update_goal(changes)

    async def send_message(
        self, text: str, sender: str = const.MessageSender.PLAYER
    ) -> str | None:
        """Post a message between the hero and the master."""
        entry = db.build_message(text, sender, self.now_ms())
        return await self.async_append_to_list(const.DATA_MESSAGES, dict(entry))

    async def mark_messages_read(self, sender: str | None = None) -> int:
        """Mark unread messages (optionally from one sender) as read.

        Returns the number of messages marked.
        """
        async with self._lock:
            marked = 0
            messages = []
            for message in self.messages:
                if not message.get(const.DATA_MESSAGE_READ) and (
                    sender is None or message.get(const.DATA_MESSAGE_SENDER) == sender
                ):
                    message = {**message, const.DATA_MESSAGE_READ: True}
                    marked += 1
                messages.append(message)
            if marked:
                await self._async_persist({const.DATA_MESSAGES: messages})
            return marked

    # -------------------------------------------------------------------------------------
    # Scheduler
    # -------------------------------------------------------------------------------------

    async def async_run_scheduler(self) -> bool:
        """Run the daily reset and penalty sweep against the latest snapshot."""
        async with self._lock:
            return await self.system_manager.run_scheduler()
