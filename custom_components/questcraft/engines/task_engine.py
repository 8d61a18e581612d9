"""Task Engine - Pure logic for the quest lifecycle state machine.

This engine provides stateless, pure Python functions for:
- State transition validation
- Checklist (step) toggling and derived progress state
- Evidence submission, parent review, expiry and daily reset
- Time-of-day window checks

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and return a
TransitionResult holding a NEW task; the input task is never mutated. A
rejected transition returns the input task unchanged together with a reason.
State management belongs in TaskManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const
from ..const import TaskStatus
from ..utils.dt_utils import period_elapsed

if TYPE_CHECKING:
    from ..type_defs import TaskData


# =============================================================================
# TRANSITION RESULT DATA STRUCTURE
# =============================================================================


@dataclass
class TransitionResult:
    """Outcome of a task transition.

    Attributes:
        ok: Whether the transition was applied
        task: The new task (or the untouched input when rejected)
        reason: Rejection reason (const.REASON_*) when ok is False
    """

    ok: bool
    task: TaskData | dict[str, Any]
    reason: str | None = None


def _rejected(task: TaskData | dict[str, Any], reason: str | None) -> TransitionResult:
    return TransitionResult(ok=False, task=task, reason=reason)


def _copy_task(task: TaskData | dict[str, Any]) -> dict[str, Any]:
    """Copy a task deep enough that step flags can be edited safely."""
    new_task: dict[str, Any] = dict(task)
    new_task[const.DATA_TASK_STEPS] = [
        dict(step) for step in task.get(const.DATA_TASK_STEPS) or []
    ]
    return new_task


# =============================================================================
# TASK ENGINE
# =============================================================================


class TaskEngine:
    """Pure logic engine for task state transitions.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.
    """

    # States a hero can still work on
    OPEN_STATES: frozenset[TaskStatus] = frozenset(
        {
            TaskStatus.PENDING,
            TaskStatus.STARTED,
            TaskStatus.DOING,
            TaskStatus.REJECTED,
        }
    )

    # States the penalty sweep may fail (resolved states are never re-evaluated)
    EXPIRABLE_STATES: frozenset[TaskStatus] = OPEN_STATES

    # =========================================================================
    # QUERIES
    # =========================================================================

    @staticmethod
    def status_of(task: TaskData | dict[str, Any]) -> TaskStatus:
        """Return the task status, treating unknown values as PENDING."""
        try:
            return TaskStatus(task.get(const.DATA_TASK_STATUS, TaskStatus.PENDING))
        except ValueError:
            const.LOGGER.warning(
                "Task '%s' has unknown status '%s', treating as pending",
                task.get(const.DATA_INTERNAL_ID),
                task.get(const.DATA_TASK_STATUS),
            )
            return TaskStatus.PENDING

    @staticmethod
    def is_open(task: TaskData | dict[str, Any]) -> bool:
        """Return True if the hero can still work on the task."""
        return TaskEngine.status_of(task) in TaskEngine.OPEN_STATES

    @staticmethod
    def is_expirable(task: TaskData | dict[str, Any]) -> bool:
        """Return True if the penalty sweep may fail the task."""
        return TaskEngine.status_of(task) in TaskEngine.EXPIRABLE_STATES

    @staticmethod
    def is_recurring(task: TaskData | dict[str, Any]) -> bool:
        """Return True unless the task is explicitly one-off."""
        return task.get(const.DATA_TASK_RECURRENCE) != const.RECURRENCE_NONE

    @staticmethod
    def all_steps_complete(task: TaskData | dict[str, Any]) -> bool:
        """Return True when every step is ticked (vacuously true without steps)."""
        return all(
            step.get(const.DATA_STEP_COMPLETED, False)
            for step in task.get(const.DATA_TASK_STEPS) or []
        )

    @staticmethod
    def window_elapsed(time_of_day: str, hour: int) -> bool:
        """Return True once the task's time-of-day window has closed.

        Morning closes at MORNING_END_HOUR, afternoon at AFTERNOON_END_HOUR;
        night never closes on the same day.
        """
        return period_elapsed(
            time_of_day,
            hour,
            morning_end=const.MORNING_END_HOUR,
            afternoon_end=const.AFTERNOON_END_HOUR,
        )

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    @staticmethod
    def start(task: TaskData | dict[str, Any]) -> TransitionResult:
        """Mark a PENDING or REJECTED task as STARTED."""
        match TaskEngine.status_of(task):
            case TaskStatus.PENDING | TaskStatus.REJECTED:
                new_task = _copy_task(task)
                new_task[const.DATA_TASK_STATUS] = TaskStatus.STARTED
                return TransitionResult(ok=True, task=new_task)
            case _:
                return _rejected(task, const.REASON_INVALID_TRANSITION)

    @staticmethod
    def toggle_step(task: TaskData | dict[str, Any], step_id: str) -> TransitionResult:
        """Flip one checklist step and derive the progress state.

        All steps ticked → DOING, some → STARTED, none → PENDING.
        """
        if not TaskEngine.is_open(task):
            return _rejected(task, const.REASON_INVALID_TRANSITION)

        new_task = _copy_task(task)
        steps = new_task[const.DATA_TASK_STEPS]
        step = next((s for s in steps if s.get(const.DATA_STEP_ID) == step_id), None)
        if step is None:
            return _rejected(task, const.REASON_STEP_NOT_FOUND)

        step[const.DATA_STEP_COMPLETED] = not step.get(const.DATA_STEP_COMPLETED, False)

        done = sum(1 for s in steps if s.get(const.DATA_STEP_COMPLETED, False))
        if done == len(steps):
            new_task[const.DATA_TASK_STATUS] = TaskStatus.DOING
        elif done:
            new_task[const.DATA_TASK_STATUS] = TaskStatus.STARTED
        else:
            new_task[const.DATA_TASK_STATUS] = TaskStatus.PENDING
        return TransitionResult(ok=True, task=new_task)

    @staticmethod
    def submit_evidence(
        task: TaskData | dict[str, Any],
        evidence_url: str | None,
        evidence_type: str | None,
        now_ms: int,
        require_evidence: bool = True,
        window_closed: bool = False,
    ) -> TransitionResult:
        """Submit a task for parent review.

        Args:
            task: Task being submitted
            evidence_url: Photo/drawing reference (may be None if not required)
            evidence_type: photo | drawing
            now_ms: Completion stamp (epoch milliseconds)
            require_evidence: Whether the rules demand evidence
            window_closed: Whether the task's window has already elapsed

        Returns:
            TransitionResult; COMPLETED with completed_at stamped on success
        """
        if not TaskEngine.is_open(task):
            return _rejected(task, const.REASON_INVALID_TRANSITION)
        if window_closed:
            return _rejected(task, const.REASON_WINDOW_CLOSED)
        if not TaskEngine.all_steps_complete(task):
            return _rejected(task, const.REASON_OBJECTIVES_INCOMPLETE)
        if require_evidence and not evidence_url:
            return _rejected(task, const.REASON_EVIDENCE_REQUIRED)

        new_task = _copy_task(task)
        new_task[const.DATA_TASK_STATUS] = TaskStatus.COMPLETED
        new_task[const.DATA_TASK_EVIDENCE_URL] = evidence_url or None
        new_task[const.DATA_TASK_EVIDENCE_TYPE] = (
            (evidence_type or const.EVIDENCE_TYPE_PHOTO) if evidence_url else None
        )
        new_task[const.DATA_TASK_COMPLETED_AT] = now_ms
        new_task[const.DATA_TASK_PARENT_FEEDBACK] = None
        return TransitionResult(ok=True, task=new_task)

    @staticmethod
    def approve(
        task: TaskData | dict[str, Any], feedback: str | None = None
    ) -> TransitionResult:
        """Approve a COMPLETED task, storing optional parent feedback."""
        match TaskEngine.status_of(task):
            case TaskStatus.COMPLETED:
                new_task = _copy_task(task)
                new_task[const.DATA_TASK_STATUS] = TaskStatus.APPROVED
                new_task[const.DATA_TASK_PARENT_FEEDBACK] = feedback or None
                return TransitionResult(ok=True, task=new_task)
            case _:
                return _rejected(task, const.REASON_INVALID_TRANSITION)

    @staticmethod
    def reject(
        task: TaskData | dict[str, Any], feedback: str | None = None
    ) -> TransitionResult:
        """Send a COMPLETED task back to the hero, clearing its evidence."""
        match TaskEngine.status_of(task):
            case TaskStatus.COMPLETED:
                new_task = _copy_task(task)
                new_task[const.DATA_TASK_STATUS] = TaskStatus.REJECTED
                new_task[const.DATA_TASK_EVIDENCE_URL] = None
                new_task[const.DATA_TASK_EVIDENCE_TYPE] = None
                new_task[const.DATA_TASK_COMPLETED_AT] = None
                new_task[const.DATA_TASK_PARENT_FEEDBACK] = feedback or None
                return TransitionResult(ok=True, task=new_task)
            case _:
                return _rejected(task, const.REASON_INVALID_TRANSITION)

    @staticmethod
    def expire(task: TaskData | dict[str, Any], current_hour: int) -> TransitionResult:
        """Fail an unresolved task whose window has elapsed.

        FAILED, APPROVED and COMPLETED tasks are never re-evaluated. An open
        task whose window is still open is returned unchanged with no reason.
        """
        if not TaskEngine.is_expirable(task):
            return _rejected(task, const.REASON_INVALID_TRANSITION)
        time_of_day = task.get(const.DATA_TASK_TIME_OF_DAY, const.TimeOfDay.NIGHT)
        if not TaskEngine.window_elapsed(time_of_day, current_hour):
            return _rejected(task, None)

        new_task = _copy_task(task)
        new_task[const.DATA_TASK_STATUS] = TaskStatus.FAILED
        return TransitionResult(ok=True, task=new_task)

    @staticmethod
    def reset(task: TaskData | dict[str, Any]) -> TransitionResult:
        """Return a task to PENDING for a new day.

        Clears evidence, completion stamp, parent feedback and step flags.
        """
        new_task = _copy_task(task)
        new_task[const.DATA_TASK_STATUS] = TaskStatus.PENDING
        new_task[const.DATA_TASK_EVIDENCE_URL] = None
        new_task[const.DATA_TASK_EVIDENCE_TYPE] = None
        new_task[const.DATA_TASK_COMPLETED_AT] = None
        new_task[const.DATA_TASK_PARENT_FEEDBACK] = None
        for step in new_task[const.DATA_TASK_STEPS]:
            step[const.DATA_STEP_COMPLETED] = False
        return TransitionResult(ok=True, task=new_task)
