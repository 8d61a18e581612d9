"""Activity Manager - Audit log and master messages.

Reactive manager: it is never called by the other managers. It listens to
their signals and appends WorldActivity entries (and, for parent reviews,
a message from the master) through the coordinator's list store.

Signals Consumed:
- SIGNAL_SUFFIX_TASK_SUBMITTED → task_done
- SIGNAL_SUFFIX_TASK_APPROVED → task_approved + master message
- SIGNAL_SUFFIX_TASK_REJECTED → task_rejected + master message
- SIGNAL_SUFFIX_TASKS_FAILED → task_failed
- SIGNAL_SUFFIX_LEVEL_UP → level_up
- SIGNAL_SUFFIX_ITEM_BOUGHT → item_bought
- SIGNAL_SUFFIX_MANUAL_ADJUST → manual_adjust
- SIGNAL_SUFFIX_DAILY_RESET → system_reset
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..const import ActivityType, Currency, MessageSender
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestCraftCoordinator

MESSAGE_APPROVED = "Master approved: {title}! Reward delivered."
MESSAGE_REJECTED = "Your evidence was not accepted. Try again!"


class ActivityManager(BaseManager):
    """Turns domain events into audit log entries and messages."""

    def __init__(self, hass: HomeAssistant, coordinator: QuestCraftCoordinator) -> None:
        """Initialize the activity manager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Subscribe to every event that leaves a trace in the audit log."""
        self.listen(const.SIGNAL_SUFFIX_TASK_SUBMITTED, self._on_task_submitted)
        self.listen(const.SIGNAL_SUFFIX_TASK_APPROVED, self._on_task_approved)
        self.listen(const.SIGNAL_SUFFIX_TASK_REJECTED, self._on_task_rejected)
        self.listen(const.SIGNAL_SUFFIX_TASKS_FAILED, self._on_tasks_failed)
        self.listen(const.SIGNAL_SUFFIX_LEVEL_UP, self._on_level_up)
        self.listen(const.SIGNAL_SUFFIX_ITEM_BOUGHT, self._on_item_bought)
        self.listen(const.SIGNAL_SUFFIX_MANUAL_ADJUST, self._on_manual_adjust)
        self.listen(const.SIGNAL_SUFFIX_DAILY_RESET, self._on_daily_reset)

    # =========================================================================
    # SIGNAL HANDLERS
    # =========================================================================

    async def _on_task_submitted(self, payload: dict[str, Any]) -> None:
        await self._log(
            ActivityType.TASK_DONE,
            f"Quest completed, awaiting approval: {payload.get('title', '')}",
        )

    async def _on_task_approved(self, payload: dict[str, Any]) -> None:
        title = payload.get("title", "")
        await self._log(
            ActivityType.TASK_APPROVED,
            f"Approved: {title}",
            amount=payload.get("emeralds", 0),
            currency=Currency.EMERALD,
        )
        text = MESSAGE_APPROVED.format(title=title)
        if payload.get("feedback"):
            text = f"{text} {payload['feedback']}"
        await self._message(text)

    async def _on_task_rejected(self, payload: dict[str, Any]) -> None:
        await self._log(
            ActivityType.TASK_REJECTED, f"Rejected: {payload.get('title', '')}"
        )
        text = MESSAGE_REJECTED
        if payload.get("feedback"):
            text = f"{text} {payload['feedback']}"
        await self._message(text)

    async def _on_tasks_failed(self, payload: dict[str, Any]) -> None:
        titles = ", ".join(payload.get("titles", []))
        await self._log(
            ActivityType.TASK_FAILED,
            f"Failed: {titles}",
            amount=-int(payload.get("damage", 0)),
            currency=const.AdjustKind.HP,
        )

    async def _on_level_up(self, payload: dict[str, Any]) -> None:
        await self._log(
            ActivityType.LEVEL_UP,
            f"Reached level {payload.get('level')} ({payload.get('rank', '')})",
            amount=payload.get("bonus_diamonds", 0),
            currency=Currency.DIAMOND,
        )

    async def _on_item_bought(self, payload: dict[str, Any]) -> None:
        await self._log(
            ActivityType.ITEM_BOUGHT,
            f"Bought: {payload.get('title', '')}",
            amount=payload.get("cost", 0),
            currency=payload.get("currency"),
        )

    async def _on_manual_adjust(self, payload: dict[str, Any]) -> None:
        kind = payload.get("kind", "")
        await self._log(
            ActivityType.MANUAL_ADJUST,
            f"Master adjusted {kind}",
            amount=payload.get("amount", 0),
            currency=kind,
        )

    async def _on_daily_reset(self, payload: dict[str, Any]) -> None:
        await self._log(
            ActivityType.SYSTEM_RESET,
            f"New day {payload.get('day', '')}: "
            f"{len(payload.get('task_ids', []))} quests reset",
        )

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    async def _log(
        self,
        activity_type: ActivityType,
        detail: str,
        amount: int | None = None,
        currency: str | None = None,
    ) -> None:
        entry = db.build_activity(
            activity_type,
            self.coordinator.profile.get(const.DATA_PROFILE_NAME, ""),
            detail,
            self.coordinator.now_ms(),
            amount=amount,
            currency=str(currency) if currency is not None else None,
        )
        await self.coordinator.async_append_to_list(const.DATA_ACTIVITIES, dict(entry))

    async def _message(self, text: str) -> None:
        entry = db.build_message(text, MessageSender.MASTER, self.coordinator.now_ms())
        await self.coordinator.async_append_to_list(const.DATA_MESSAGES, dict(entry))
