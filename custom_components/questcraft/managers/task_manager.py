"""Task Manager - Quest catalog and lifecycle workflows.

This manager handles:
- Task CRUD (add, delete, bulk update)
- Hero workflow: start, tick steps, submit evidence
- Parent workflow: approve (with progression rewards) and reject

ARCHITECTURE:
- TaskManager = STATEFUL workflow (reads snapshot, persists, emits)
- TaskEngine / ProgressionEngine = pure transitions and reward math

Signals Emitted:
- SIGNAL_SUFFIX_TASK_SUBMITTED
- SIGNAL_SUFFIX_TASK_APPROVED
- SIGNAL_SUFFIX_TASK_REJECTED
- SIGNAL_SUFFIX_LEVEL_UP
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import ServiceValidationError

from .. import const, data_builders as db
from ..engines.progression_engine import ProgressionEngine
from ..engines.task_engine import TaskEngine, TransitionResult
from ..helpers.entity_helpers import get_item_or_raise
from ..utils.dt_utils import dt_today_iso
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestCraftCoordinator


class TaskManager(BaseManager):
    """Manager for task definitions and the task lifecycle.

    Responsibilities:
    - Build and store task definitions
    - Apply TaskEngine transitions and persist the result
    - Credit approved tasks through ProgressionEngine

    NOT responsible for:
    - Daily reset and expiry (SystemManager)
    - Audit log and messages (ActivityManager, via signals)
    """

    def __init__(self, hass: HomeAssistant, coordinator: QuestCraftCoordinator) -> None:
        """Initialize the task manager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the task manager (no subscriptions needed)."""
        const.LOGGER.debug("TaskManager: setup complete for entry %s", self.entry_id)

    # =========================================================================
    # CRUD
    # =========================================================================

    async def add_task(self, task_input: dict[str, Any]) -> str:
        """Create a PENDING task and return its internal id."""
        task = self._build_or_raise(task_input)
        task_id = task[const.DATA_INTERNAL_ID]
        await self._async_commit(
            f"add task '{task[const.DATA_TASK_TITLE]}'",
            {const.DATA_TASKS: {**self.coordinator.tasks, task_id: task}},
        )
        return task_id

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task by id."""
        get_item_or_raise(self.coordinator.tasks, const.LABEL_TASK, task_id)
        tasks = {k: v for k, v in self.coordinator.tasks.items() if k != task_id}
        penalized = [
            pid for pid in self.coordinator.penalized_today if pid != task_id
        ]
        return await self._async_commit(
            f"delete task {task_id}",
            {const.DATA_TASKS: tasks, const.DATA_PENALIZED_TODAY: penalized},
        )

    async def update_tasks(self, task_inputs: list[dict[str, Any]]) -> bool:
        """Replace the whole task board.

        Entries carrying a known internal_id update that task (keeping any
        field they omit); the others are created. Tasks missing from the list
        are removed.
        """
        existing = self.coordinator.tasks
        tasks: dict[str, Any] = {}
        for task_input in task_inputs:
            current = existing.get(task_input.get(const.DATA_INTERNAL_ID, ""))
            task = self._build_or_raise(task_input, current)
            tasks[task[const.DATA_INTERNAL_ID]] = task
        return await self._async_commit(
            f"replace board with {len(tasks)} tasks", {const.DATA_TASKS: tasks}
        )

    # =========================================================================
    # HERO WORKFLOW
    # =========================================================================

    async def start_task(self, task_id: str) -> bool:
        """Start a task; a hero with no health left cannot start quests."""
        task = get_item_or_raise(self.coordinator.tasks, const.LABEL_TASK, task_id)
        if int(self.coordinator.profile.get(const.DATA_PROFILE_HP, 0)) <= 0:
            self._log_rejection(f"start on task {task_id}", const.REASON_HERO_INCAPACITATED)
            return False
        return await self._async_store_transition(
            task_id, TaskEngine.start(task), "start"
        )

    async def toggle_step(self, task_id: str, step_id: str) -> bool:
        """Tick or untick one checklist step."""
        task = get_item_or_raise(self.coordinator.tasks, const.LABEL_TASK, task_id)
        return await self._async_store_transition(
            task_id, TaskEngine.toggle_step(task, step_id), "toggle_step"
        )

    async def submit_evidence(
        self,
        task_id: str,
        evidence_url: str | None,
        evidence_type: str | None,
    ) -> bool:
        """Submit a finished task for parent review."""
        task = get_item_or_raise(self.coordinator.tasks, const.LABEL_TASK, task_id)
        now = self.coordinator.now()
        window_closed = TaskEngine.window_elapsed(
            task.get(const.DATA_TASK_TIME_OF_DAY, const.TimeOfDay.NIGHT), now.hour
        )
        result = TaskEngine.submit_evidence(
            task,
            evidence_url,
            evidence_type,
            self.coordinator.now_ms(),
            require_evidence=bool(
                self.coordinator.rules.get(const.DATA_RULE_REQUIRE_EVIDENCE, True)
            ),
            window_closed=window_closed,
        )
        if not await self._async_store_transition(task_id, result, "submit_evidence"):
            return False

        self.emit(
            const.SIGNAL_SUFFIX_TASK_SUBMITTED,
            task_id=task_id,
            title=task.get(const.DATA_TASK_TITLE, ""),
        )
        return True

    # =========================================================================
    # PARENT WORKFLOW
    # =========================================================================

    async def approve_task(self, task_id: str, feedback: str | None = None) -> bool:
        """Approve a submitted task and credit its rewards to the hero.

        Persist order: task status and the new profile in one write, then
        TASK_APPROVED (and LEVEL_UP when thresholds were crossed).
        """
        task = get_item_or_raise(self.coordinator.tasks, const.LABEL_TASK, task_id)
        result = TaskEngine.approve(task, feedback)
        if not result.ok:
            self._log_rejection(f"approve on task {task_id}", result.reason)
            return False

        outcome = ProgressionEngine.apply_task_reward(
            self.coordinator.profile,
            task,
            xp_multiplier=float(
                self.coordinator.rules.get(const.DATA_RULE_XP_MULTIPLIER, 1.0)
            ),
        )
        profile = ProgressionEngine.advance_streak(
            outcome.profile, dt_today_iso(self.coordinator.now())
        )
        tasks = {**self.coordinator.tasks, task_id: result.task}
        await self._async_commit(
            f"approve on task {task_id}",
            {const.DATA_TASKS: tasks, const.DATA_PROFILE: profile},
        )

        const.LOGGER.debug(
            "TaskManager: Approved task %s: +%s XP, +%s emeralds, +%s diamonds",
            task_id,
            outcome.xp_gained,
            task.get(const.DATA_TASK_EMERALDS, 0),
            task.get(const.DATA_TASK_DIAMONDS, 0),
        )
        self.emit(
            const.SIGNAL_SUFFIX_TASK_APPROVED,
            task_id=task_id,
            title=task.get(const.DATA_TASK_TITLE, ""),
            emeralds=int(task.get(const.DATA_TASK_EMERALDS, 0)),
            diamonds=int(task.get(const.DATA_TASK_DIAMONDS, 0)),
            xp_gained=outcome.xp_gained,
            feedback=feedback,
        )
        self.emit_level_up(profile, outcome.levels_gained, outcome.bonus_diamonds)
        return True

    async def reject_task(self, task_id: str, feedback: str | None = None) -> bool:
        """Send a submitted task back to the hero."""
        task = get_item_or_raise(self.coordinator.tasks, const.LABEL_TASK, task_id)
        if not await self._async_store_transition(
            task_id, TaskEngine.reject(task, feedback), "reject"
        ):
            return False

        self.emit(
            const.SIGNAL_SUFFIX_TASK_REJECTED,
            task_id=task_id,
            title=task.get(const.DATA_TASK_TITLE, ""),
            feedback=feedback,
        )
        return True

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    async def _async_store_transition(
        self, task_id: str, result: TransitionResult, action: str
    ) -> bool:
        return await self._async_commit(
            f"{action} on task {task_id} ({result.task.get(const.DATA_TASK_STATUS)})",
            {const.DATA_TASKS: {**self.coordinator.tasks, task_id: result.task}},
            ok=result.ok,
            reason=result.reason,
        )

    @staticmethod
    def _build_or_raise(
        task_input: dict[str, Any], existing: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        try:
            return dict(db.build_task(task_input, existing))
        except db.EntityValidationError as err:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_INPUT,
                translation_placeholders={"field": err.field, "detail": str(err)},
            ) from err
