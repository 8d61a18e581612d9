"""Integration tests for QuestCraftCoordinator.

The family is set up through its config entry (see conftest.init_integration);
the managers write through the coordinator and the activity log is filled by
dispatcher handlers, so tests wait for the event loop before reading it.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.util.file import WriteError

from conftest import TEST_PIN
from custom_components.questcraft import const
from custom_components.questcraft.const import ActivityType, AdjustKind, TaskStatus
from custom_components.questcraft.coordinator import QuestCraftCoordinator


async def _add_simple_task(coordinator: QuestCraftCoordinator, **fields: Any) -> str:
    task_input = {const.DATA_TASK_TITLE: "Brush teeth", **fields}
    return await coordinator.add_task(task_input)


def _activity_types(coordinator: QuestCraftCoordinator) -> list[str]:
    return [entry[const.DATA_ACTIVITY_TYPE] for entry in coordinator.activities]


# =============================================================================
# Store contract
# =============================================================================


class TestStoreContract:
    """Tests for subscribe, save_section and append_to_list."""

    async def test_subscribe_fires_now_and_on_change(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """Callback gets the current value, then each changed value."""
        seen: list[Any] = []
        unsubscribe = coordinator.async_subscribe(const.DATA_TASKS, seen.append)
        assert seen == [{}]

        task_id = await _add_simple_task(coordinator)
        assert len(seen) == 2
        assert task_id in seen[1]

        # Other sections changing does not re-fire
        await coordinator.update_goal({const.DATA_GOAL_TITLE: "Lego set"})
        assert len(seen) == 2

        unsubscribe()
        await _add_simple_task(coordinator, title="Read")
        assert len(seen) == 2

    async def test_save_section(
        self, coordinator: QuestCraftCoordinator, hass_storage: dict[str, Any]
    ) -> None:
        """Known sections are replaced and written; unknown ones are refused."""
        goal = {
            const.DATA_GOAL_TITLE: "Bike",
            const.DATA_GOAL_TARGET_EMERALDS: 500,
            const.DATA_GOAL_CURRENT_EMERALDS: 0,
        }
        assert await coordinator.async_save_section(const.DATA_GOAL, goal)
        assert coordinator.goal == goal

        storage_key = f"{const.STORAGE_KEY}_{coordinator.config_entry.entry_id}"
        assert hass_storage[storage_key]["data"][const.DATA_GOAL] == goal

        assert not await coordinator.async_save_section("bogus", {})
        assert "bogus" not in coordinator.data

    async def test_append_assigns_ids_and_prunes(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """Appended entries get unique ids; the oldest are dropped past the limit."""
        ids = [
            await coordinator.async_append_to_list(
                const.DATA_MESSAGES, {const.DATA_MESSAGE_TEXT: f"msg {index}"}
            )
            for index in range(const.MAX_MESSAGE_ENTRIES + 5)
        ]

        assert len(set(ids)) == len(ids)
        assert len(coordinator.messages) == const.MAX_MESSAGE_ENTRIES
        assert coordinator.messages[0][const.DATA_MESSAGE_TEXT] == "msg 5"
        assert coordinator.messages[-1][const.DATA_MESSAGE_ID] == ids[-1]

    async def test_append_to_non_list_section(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """Only append-only sections accept entries."""
        assert await coordinator.async_append_to_list(const.DATA_TASKS, {}) is None

    async def test_storage_failure_keeps_previous_snapshot(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """A failed write raises and leaves memory and store unchanged."""
        before = coordinator.data
        with (
            patch(
                "homeassistant.helpers.storage.Store._async_write_data",
                side_effect=WriteError("disk full"),
            ),
            pytest.raises(HomeAssistantError) as err,
        ):
            await _add_simple_task(coordinator)

        assert err.value.translation_key == const.TRANS_KEY_ERROR_STORAGE_WRITE_FAILED
        assert coordinator.data is before
        assert coordinator.store.data is before
        assert coordinator.tasks == {}


# =============================================================================
# Task lifecycle
# =============================================================================


class TestTaskLifecycle:
    """End-to-end task flows through the coordinator."""

    async def test_scenario_approval_levels_up(
        self, hass: HomeAssistant, coordinator: QuestCraftCoordinator
    ) -> None:
        """150 points: level 2, 50 XP, bonus diamond; log and master message."""
        task_id = await _add_simple_task(
            coordinator, points=150, emeralds=10, time_of_day=const.TimeOfDay.NIGHT
        )
        assert await coordinator.start_task(task_id)
        assert await coordinator.complete_task(task_id, "/local/teeth.jpg", "photo")
        assert coordinator.tasks[task_id][const.DATA_TASK_STATUS] == TaskStatus.COMPLETED

        assert await coordinator.approve_task(task_id, "Sparkling!")
        await hass.async_block_till_done()

        profile = coordinator.profile
        assert coordinator.tasks[task_id][const.DATA_TASK_STATUS] == TaskStatus.APPROVED
        assert profile[const.DATA_PROFILE_LEVEL] == 2
        assert profile[const.DATA_PROFILE_EXPERIENCE] == 50
        assert profile[const.DATA_PROFILE_EMERALDS] == 10
        assert profile[const.DATA_PROFILE_DIAMONDS] == const.LEVEL_UP_BONUS_DIAMONDS
        assert profile[const.DATA_PROFILE_STREAK] == 1

        types = _activity_types(coordinator)
        assert ActivityType.TASK_DONE in types
        assert ActivityType.TASK_APPROVED in types
        assert ActivityType.LEVEL_UP in types

        master = [
            message
            for message in coordinator.messages
            if message[const.DATA_MESSAGE_SENDER] == const.MessageSender.MASTER
        ]
        assert len(master) == 1
        assert "Brush teeth" in master[0][const.DATA_MESSAGE_TEXT]
        assert "Sparkling!" in master[0][const.DATA_MESSAGE_TEXT]

    async def test_reject_then_resubmit(
        self, hass: HomeAssistant, coordinator: QuestCraftCoordinator
    ) -> None:
        """Rejected tasks lose their evidence and can be submitted again."""
        task_id = await _add_simple_task(coordinator, time_of_day=const.TimeOfDay.NIGHT)
        assert await coordinator.submit_evidence(task_id, "/local/a.jpg")
        assert await coordinator.reject_task(task_id, "Too blurry")
        await hass.async_block_till_done()

        task = coordinator.tasks[task_id]
        assert task[const.DATA_TASK_STATUS] == TaskStatus.REJECTED
        assert task.get(const.DATA_TASK_EVIDENCE_URL) is None
        assert ActivityType.TASK_REJECTED in _activity_types(coordinator)
        assert "Too blurry" in coordinator.messages[-1][const.DATA_MESSAGE_TEXT]

        assert await coordinator.submit_evidence(task_id, "/local/b.jpg")

    async def test_scenario_incomplete_steps_block_submission(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """One unticked step keeps the task where it was."""
        task_id = await _add_simple_task(coordinator, steps=["Wet brush", "Brush"])
        step_ids = [
            step[const.DATA_STEP_ID] for step in coordinator.tasks[task_id][const.DATA_TASK_STEPS]
        ]
        assert await coordinator.toggle_step(task_id, step_ids[0])
        assert coordinator.tasks[task_id][const.DATA_TASK_STATUS] == TaskStatus.STARTED

        assert not await coordinator.submit_evidence(task_id, "/local/a.jpg")
        assert coordinator.tasks[task_id][const.DATA_TASK_STATUS] == TaskStatus.STARTED

        assert await coordinator.toggle_step(task_id, step_ids[1])
        assert coordinator.tasks[task_id][const.DATA_TASK_STATUS] == TaskStatus.DOING
        assert await coordinator.submit_evidence(task_id, "/local/a.jpg")

    async def test_incapacitated_hero_cannot_start(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """At 0 HP quests cannot be started."""
        task_id = await _add_simple_task(coordinator)
        await coordinator.adjust_currency(-100, AdjustKind.HP)

        assert not await coordinator.start_task(task_id)
        assert coordinator.tasks[task_id][const.DATA_TASK_STATUS] == TaskStatus.PENDING

    async def test_unknown_task_raises(self, coordinator: QuestCraftCoordinator) -> None:
        """Unknown ids are lookup errors, not rejections."""
        with pytest.raises(HomeAssistantError):
            await coordinator.approve_task("missing")

    async def test_update_tasks_replaces_board(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """Known ids are updated, new entries created, missing ones removed."""
        keep = await _add_simple_task(coordinator, points=5)
        drop = await _add_simple_task(coordinator, title="Old chore")

        assert await coordinator.update_tasks(
            [
                {const.DATA_INTERNAL_ID: keep, const.DATA_TASK_POINTS: 20},
                {const.DATA_TASK_TITLE: "New chore"},
            ]
        )

        tasks = coordinator.tasks
        assert drop not in tasks
        assert tasks[keep][const.DATA_TASK_POINTS] == 20
        assert tasks[keep][const.DATA_TASK_TITLE] == "Brush teeth"
        assert len(tasks) == 2

    async def test_delete_task(self, coordinator: QuestCraftCoordinator) -> None:
        """Deleted tasks are gone."""
        task_id = await _add_simple_task(coordinator)
        assert await coordinator.delete_task(task_id)
        assert task_id not in coordinator.tasks


# =============================================================================
# Economy
# =============================================================================


class TestEconomy:
    """Shop, adjustments and building through the coordinator."""

    async def test_scenario_purchase_rejected_then_allowed(
        self, hass: HomeAssistant, coordinator: QuestCraftCoordinator
    ) -> None:
        """A short balance leaves the profile equal; after topping up it works."""
        before = coordinator.profile
        assert not await coordinator.buy_reward("grass_block")
        assert coordinator.profile == before

        assert await coordinator.adjust_currency(25, AdjustKind.EMERALD)
        assert await coordinator.buy_reward("grass_block")
        await hass.async_block_till_done()

        profile = coordinator.profile
        assert profile[const.DATA_PROFILE_EMERALDS] == 15
        assert profile[const.DATA_PROFILE_INVENTORY] == {"grass_block": 1}
        assert ActivityType.ITEM_BOUGHT in _activity_types(coordinator)
        assert ActivityType.MANUAL_ADJUST in _activity_types(coordinator)

    async def test_building_conserves_blocks(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """Inventory plus placed blocks stays constant while building."""
        await coordinator.adjust_currency(100, AdjustKind.EMERALD)
        for _ in range(3):
            assert await coordinator.buy_reward("grass_block")

        def total() -> int:
            profile = coordinator.profile
            placed = sum(
                1
                for block in profile[const.DATA_PROFILE_WORLD_BLOCKS]
                if block[const.DATA_BLOCK_REWARD_ID] == "grass_block"
            )
            return profile[const.DATA_PROFILE_INVENTORY].get("grass_block", 0) + placed

        assert await coordinator.place_block(0, 0, "grass_block")
        assert await coordinator.fill_blocks(5, 5, "grass_block")
        assert total() == 3
        assert coordinator.profile[const.DATA_PROFILE_INVENTORY]["grass_block"] == 0

        assert not await coordinator.place_block(1, 1, "grass_block")
        assert await coordinator.place_block(0, 0, const.BLOCK_ERASE)
        assert await coordinator.clear_world()
        assert total() == 3
        assert coordinator.profile[const.DATA_PROFILE_WORLD_BLOCKS] == []

    async def test_builder_disabled(self, coordinator: QuestCraftCoordinator) -> None:
        """The builder rule gates every canvas mutation."""
        await coordinator.update_settings(rules={const.DATA_RULE_ALLOW_BUILDER: False})
        assert not await coordinator.place_block(0, 0, const.BLOCK_ERASE)

    async def test_rejected_actions_write_nothing(
        self, hass: HomeAssistant, coordinator: QuestCraftCoordinator
    ) -> None:
        """Only accepted engine results reach the store and the activity log."""
        await hass.async_block_till_done()
        logged = len(coordinator.activities)

        with patch.object(
            coordinator, "_async_persist", wraps=coordinator._async_persist
        ) as persist:
            assert not await coordinator.buy_reward("grass_block")
            assert not await coordinator.place_block(99, 0, const.BLOCK_ERASE)
            assert persist.await_count == 0

            assert await coordinator.adjust_currency(10, AdjustKind.EMERALD)
            assert persist.await_count == 1
        await hass.async_block_till_done()

        assert [
            entry[const.DATA_ACTIVITY_TYPE] for entry in coordinator.activities[logged:]
        ] == [ActivityType.MANUAL_ADJUST]

    async def test_manual_xp_levels_up(
        self, hass: HomeAssistant, coordinator: QuestCraftCoordinator
    ) -> None:
        """XP adjustments run the level-up loop and are logged."""
        assert await coordinator.adjust_currency(120, AdjustKind.XP)
        await hass.async_block_till_done()

        assert coordinator.profile[const.DATA_PROFILE_LEVEL] == 2
        assert coordinator.profile[const.DATA_PROFILE_EXPERIENCE] == 20
        assert ActivityType.LEVEL_UP in _activity_types(coordinator)

    async def test_reward_crud(self, coordinator: QuestCraftCoordinator) -> None:
        """Deleting a reward keeps the units already owned."""
        reward_id = await coordinator.add_reward(
            {
                const.DATA_REWARD_TITLE: "Gold Block",
                const.DATA_REWARD_COST: 1,
                const.DATA_REWARD_TYPE: const.RewardType.BLOCK,
                const.DATA_REWARD_BLOCK_COLOR: "#ffd700",
            }
        )
        await coordinator.adjust_currency(1, AdjustKind.EMERALD)
        assert await coordinator.buy_reward(reward_id)

        assert await coordinator.delete_reward(reward_id)
        assert reward_id not in coordinator.rewards
        assert coordinator.profile[const.DATA_PROFILE_INVENTORY][reward_id] == 1


# =============================================================================
# Settings, profile, messages, goal
# =============================================================================


class TestSettingsAndMessages:
    """Family-wide settings and the message board."""

    async def test_verify_parent_pin(self, coordinator: QuestCraftCoordinator) -> None:
        """The PIN from the config flow is stored in settings."""
        assert coordinator.verify_parent_pin(TEST_PIN)
        assert not coordinator.verify_parent_pin("0000")

        await coordinator.update_settings(parent_pin="9999")
        assert coordinator.verify_parent_pin("9999")

    async def test_rules_merge(self, coordinator: QuestCraftCoordinator) -> None:
        """Partial rule updates keep the other rules."""
        await coordinator.update_settings(rules={const.DATA_RULE_XP_MULTIPLIER: 2.0})
        assert coordinator.rules[const.DATA_RULE_XP_MULTIPLIER] == 2.0
        assert coordinator.rules[const.DATA_RULE_ALLOW_SHOP] is True

    async def test_update_profile_editable_fields_only(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """Progression fields cannot be edited; lowering max_hp clamps HP."""
        assert not await coordinator.update_profile({const.DATA_PROFILE_LEVEL: 99})
        assert coordinator.profile[const.DATA_PROFILE_LEVEL] == 1

        assert await coordinator.update_profile(
            {const.DATA_PROFILE_NAME: "Steve", const.DATA_PROFILE_MAX_HP: 60}
        )
        assert coordinator.profile[const.DATA_PROFILE_NAME] == "Steve"
        assert coordinator.profile[const.DATA_PROFILE_HP] == 60

    async def test_messages_read_by_sender(
        self, coordinator: QuestCraftCoordinator
    ) -> None:
        """Only unread messages from the chosen sender are marked."""
        await coordinator.send_message("Can I have a reward?")
        await coordinator.send_message("Good job", const.MessageSender.MASTER)

        assert await coordinator.mark_messages_read(const.MessageSender.PLAYER) == 1
        assert await coordinator.mark_messages_read(const.MessageSender.PLAYER) == 0
        assert await coordinator.mark_messages_read() == 1
        assert all(message[const.DATA_MESSAGE_READ] for message in coordinator.messages)

    async def test_update_goal(self, coordinator: QuestCraftCoordinator) -> None:
        """Goal edits are partial and floored at zero."""
        await coordinator.update_goal(
            {const.DATA_GOAL_TITLE: "Bike", const.DATA_GOAL_TARGET_EMERALDS: -3}
        )
        assert coordinator.goal[const.DATA_GOAL_TITLE] == "Bike"
        assert coordinator.goal[const.DATA_GOAL_TARGET_EMERALDS] == 0
