"""Unit tests for TaskEngine - the task lifecycle state machine.

Pure logic, no Home Assistant fixtures.
"""

from __future__ import annotations

import pytest

from conftest import make_task
from custom_components.questcraft import const
from custom_components.questcraft.const import TaskStatus
from custom_components.questcraft.engines.task_engine import TaskEngine

NOW_MS = 1_744_000_000_000


def _steps(*flags: bool) -> list[dict]:
    return [
        {const.DATA_STEP_ID: f"s{index}", const.DATA_STEP_TEXT: f"Step {index}", const.DATA_STEP_COMPLETED: flag}
        for index, flag in enumerate(flags)
    ]


class TestTransitionsMatrix:
    """Tests for which lifecycle actions each state accepts."""

    @pytest.mark.parametrize(
        ("status", "accepted"),
        [
            (TaskStatus.PENDING, {"start", "expire"}),
            (TaskStatus.STARTED, {"expire"}),
            (TaskStatus.DOING, {"expire"}),
            (TaskStatus.COMPLETED, {"approve", "reject"}),
            (TaskStatus.REJECTED, {"start", "expire"}),
            (TaskStatus.APPROVED, set()),
            (TaskStatus.FAILED, set()),
        ],
    )
    def test_actions_accepted_per_state(
        self, status: TaskStatus, accepted: set[str]
    ) -> None:
        """Each state accepts exactly its lifecycle transitions."""
        task = make_task(status=status)
        results = {
            "start": TaskEngine.start(task),
            "approve": TaskEngine.approve(task),
            "reject": TaskEngine.reject(task),
            "expire": TaskEngine.expire(task, 23),
        }

        assert {name for name, result in results.items() if result.ok} == accepted
        for name, result in results.items():
            if name not in accepted:
                assert result.task == task

    def test_unknown_status_is_pending(self) -> None:
        """Corrupt statuses are treated as PENDING."""
        assert TaskEngine.status_of(make_task(status="bogus")) == TaskStatus.PENDING

    def test_recurrence_defaults_to_daily(self) -> None:
        """Only an explicit 'none' makes a task one-off."""
        assert TaskEngine.is_recurring(make_task())
        assert TaskEngine.is_recurring(make_task(recurrence="daily"))
        assert not TaskEngine.is_recurring(make_task(recurrence="none"))


class TestStart:
    """Tests for starting a task."""

    @pytest.mark.parametrize("status", [TaskStatus.PENDING, TaskStatus.REJECTED])
    def test_start_from_open_state(self, status: TaskStatus) -> None:
        """PENDING and REJECTED tasks can be started."""
        result = TaskEngine.start(make_task(status=status))
        assert result.ok
        assert result.task[const.DATA_TASK_STATUS] == TaskStatus.STARTED

    @pytest.mark.parametrize(
        "status", [TaskStatus.COMPLETED, TaskStatus.APPROVED, TaskStatus.FAILED]
    )
    def test_start_from_resolved_state_is_rejected(self, status: TaskStatus) -> None:
        """Resolved or submitted tasks cannot be restarted."""
        task = make_task(status=status)
        result = TaskEngine.start(task)
        assert not result.ok
        assert result.reason == const.REASON_INVALID_TRANSITION
        assert result.task is task


class TestToggleStep:
    """Tests for checklist progress."""

    def test_progress_states_follow_step_count(self) -> None:
        """None ticked → PENDING, some → STARTED, all → DOING."""
        task = make_task(steps=_steps(False, False))

        first = TaskEngine.toggle_step(task, "s0")
        assert first.task[const.DATA_TASK_STATUS] == TaskStatus.STARTED

        second = TaskEngine.toggle_step(first.task, "s1")
        assert second.task[const.DATA_TASK_STATUS] == TaskStatus.DOING

        back = TaskEngine.toggle_step(
            TaskEngine.toggle_step(second.task, "s0").task, "s1"
        )
        assert back.task[const.DATA_TASK_STATUS] == TaskStatus.PENDING

    def test_original_steps_untouched(self) -> None:
        """Toggling works on a copy of the step list."""
        task = make_task(steps=_steps(False))
        TaskEngine.toggle_step(task, "s0")
        assert task[const.DATA_TASK_STEPS][0][const.DATA_STEP_COMPLETED] is False

    def test_unknown_step(self) -> None:
        """An unknown step id is rejected."""
        result = TaskEngine.toggle_step(make_task(steps=_steps(False)), "nope")
        assert result.reason == const.REASON_STEP_NOT_FOUND

    def test_toggle_on_submitted_task_rejected(self) -> None:
        """Steps are frozen once submitted."""
        task = make_task(status=TaskStatus.COMPLETED, steps=_steps(True))
        assert TaskEngine.toggle_step(task, "s0").reason == const.REASON_INVALID_TRANSITION


class TestSubmitEvidence:
    """Tests for submitting a task for review."""

    def test_submit_with_evidence(self) -> None:
        """A task with all steps done and evidence becomes COMPLETED."""
        task = make_task(status=TaskStatus.DOING, steps=_steps(True, True))
        result = TaskEngine.submit_evidence(task, "/local/photo.jpg", None, NOW_MS)

        assert result.ok
        assert result.task[const.DATA_TASK_STATUS] == TaskStatus.COMPLETED
        assert result.task[const.DATA_TASK_EVIDENCE_URL] == "/local/photo.jpg"
        assert result.task[const.DATA_TASK_EVIDENCE_TYPE] == const.EVIDENCE_TYPE_PHOTO
        assert result.task[const.DATA_TASK_COMPLETED_AT] == NOW_MS

    def test_scenario_incomplete_objectives(self) -> None:
        """One unticked step blocks submission and keeps the status."""
        task = make_task(status=TaskStatus.STARTED, steps=_steps(True, False))
        result = TaskEngine.submit_evidence(task, "/local/photo.jpg", "photo", NOW_MS)

        assert not result.ok
        assert result.reason == const.REASON_OBJECTIVES_INCOMPLETE
        assert result.task[const.DATA_TASK_STATUS] == TaskStatus.STARTED

    def test_evidence_required_by_rules(self) -> None:
        """Missing evidence is rejected unless the rules waive it."""
        task = make_task()
        rejected = TaskEngine.submit_evidence(task, None, None, NOW_MS)
        assert rejected.reason == const.REASON_EVIDENCE_REQUIRED

        waived = TaskEngine.submit_evidence(task, None, None, NOW_MS, require_evidence=False)
        assert waived.ok
        assert waived.task[const.DATA_TASK_EVIDENCE_URL] is None

    def test_closed_window_rejects_submission(self) -> None:
        """A task whose window elapsed can no longer be submitted."""
        result = TaskEngine.submit_evidence(
            make_task(), "/local/p.jpg", None, NOW_MS, window_closed=True
        )
        assert result.reason == const.REASON_WINDOW_CLOSED

    def test_resubmission_after_reject(self) -> None:
        """REJECTED tasks can be submitted again."""
        task = make_task(status=TaskStatus.REJECTED)
        assert TaskEngine.submit_evidence(task, "/local/p.jpg", "drawing", NOW_MS).ok


class TestReview:
    """Tests for approve and reject."""

    def test_approve_stores_feedback(self) -> None:
        """Approval keeps evidence and stores feedback."""
        task = make_task(status=TaskStatus.COMPLETED, evidence_url="/local/p.jpg")
        result = TaskEngine.approve(task, "Great job")
        assert result.task[const.DATA_TASK_STATUS] == TaskStatus.APPROVED
        assert result.task[const.DATA_TASK_PARENT_FEEDBACK] == "Great job"
        assert result.task[const.DATA_TASK_EVIDENCE_URL] == "/local/p.jpg"

    def test_approve_requires_completed(self) -> None:
        """Only submitted tasks can be approved."""
        assert not TaskEngine.approve(make_task()).ok

    def test_reject_clears_evidence(self) -> None:
        """Rejection clears evidence and completion stamp."""
        task = make_task(
            status=TaskStatus.COMPLETED,
            evidence_url="/local/p.jpg",
            evidence_type="photo",
            completed_at=NOW_MS,
        )
        result = TaskEngine.reject(task, "Blurry photo")
        assert result.task[const.DATA_TASK_STATUS] == TaskStatus.REJECTED
        assert result.task[const.DATA_TASK_EVIDENCE_URL] is None
        assert result.task[const.DATA_TASK_COMPLETED_AT] is None
        assert result.task[const.DATA_TASK_PARENT_FEEDBACK] == "Blurry photo"


class TestExpireAndReset:
    """Tests for the time-driven transitions."""

    @pytest.mark.parametrize(
        ("time_of_day", "hour", "expired"),
        [
            (const.TimeOfDay.MORNING, 11, False),
            (const.TimeOfDay.MORNING, 12, True),
            (const.TimeOfDay.AFTERNOON, 17, False),
            (const.TimeOfDay.AFTERNOON, 18, True),
            (const.TimeOfDay.NIGHT, 23, False),
        ],
    )
    def test_window_boundaries(self, time_of_day: str, hour: int, expired: bool) -> None:
        """Morning closes at noon, afternoon at 18:00, night never."""
        result = TaskEngine.expire(make_task(time_of_day=time_of_day), hour)
        assert result.ok is expired

    @pytest.mark.parametrize(
        "status", [TaskStatus.COMPLETED, TaskStatus.APPROVED, TaskStatus.FAILED]
    )
    def test_resolved_tasks_never_expire(self, status: TaskStatus) -> None:
        """Submitted and resolved tasks are not re-evaluated."""
        assert not TaskEngine.expire(make_task(status=status), 23).ok

    def test_rejected_task_expires(self) -> None:
        """A rejected task not redone in time fails."""
        result = TaskEngine.expire(make_task(status=TaskStatus.REJECTED), 12)
        assert result.task[const.DATA_TASK_STATUS] == TaskStatus.FAILED

    def test_reset_clears_day_state(self) -> None:
        """Reset returns to PENDING with steps unticked."""
        task = make_task(
            status=TaskStatus.APPROVED,
            steps=_steps(True, True),
            evidence_url="/local/p.jpg",
            parent_feedback="ok",
        )
        result = TaskEngine.reset(task)
        assert result.task[const.DATA_TASK_STATUS] == TaskStatus.PENDING
        assert result.task[const.DATA_TASK_EVIDENCE_URL] is None
        assert result.task[const.DATA_TASK_PARENT_FEEDBACK] is None
        assert not any(
            step[const.DATA_STEP_COMPLETED] for step in result.task[const.DATA_TASK_STEPS]
        )
        assert task[const.DATA_TASK_STEPS][0][const.DATA_STEP_COMPLETED] is True
