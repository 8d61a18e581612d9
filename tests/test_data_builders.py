"""Tests for data_builders - entity construction and defaults."""

from __future__ import annotations

import random
import re

import pytest

from custom_components.questcraft import const, data_builders as db
from custom_components.questcraft.const import RewardType, TaskStatus


class TestBuildTask:
    """Tests for build_task."""

    def test_create_applies_defaults(self) -> None:
        """A title alone yields a complete PENDING morning task."""
        task = db.build_task({const.DATA_TASK_TITLE: "  Feed the cat  "})

        assert task[const.DATA_TASK_TITLE] == "Feed the cat"
        assert task[const.DATA_TASK_STATUS] == TaskStatus.PENDING
        assert task[const.DATA_TASK_TIME_OF_DAY] == const.TimeOfDay.MORNING
        assert task[const.DATA_TASK_POINTS] == 0
        assert task[const.DATA_TASK_DURATION_MINUTES] == const.DEFAULT_TASK_DURATION_MINUTES
        assert task[const.DATA_INTERNAL_ID]
        assert const.DATA_TASK_RECURRENCE not in task

    def test_update_keeps_existing_fields(self) -> None:
        """Update mode only overwrites the named fields."""
        existing = db.build_task(
            {
                const.DATA_TASK_TITLE: "Homework",
                const.DATA_TASK_POINTS: 30,
                const.DATA_TASK_RECURRENCE: const.RECURRENCE_NONE,
            }
        )
        updated = db.build_task({const.DATA_TASK_POINTS: 45}, existing=existing)

        assert updated[const.DATA_INTERNAL_ID] == existing[const.DATA_INTERNAL_ID]
        assert updated[const.DATA_TASK_TITLE] == "Homework"
        assert updated[const.DATA_TASK_POINTS] == 45
        assert updated[const.DATA_TASK_RECURRENCE] == const.RECURRENCE_NONE

    def test_negative_numbers_are_floored(self) -> None:
        """Rewards can never be negative."""
        task = db.build_task({const.DATA_TASK_TITLE: "x", const.DATA_TASK_EMERALDS: -5})
        assert task[const.DATA_TASK_EMERALDS] == 0

    @pytest.mark.parametrize(
        ("user_input", "field"),
        [
            ({const.DATA_TASK_TITLE: "   "}, const.DATA_TASK_TITLE),
            (
                {const.DATA_TASK_TITLE: "x", const.DATA_TASK_TIME_OF_DAY: "dusk"},
                const.DATA_TASK_TIME_OF_DAY,
            ),
        ],
    )
    def test_invalid_input(self, user_input: dict, field: str) -> None:
        """Validation errors name the failing field."""
        with pytest.raises(db.EntityValidationError) as err:
            db.build_task(user_input)
        assert err.value.field == field

    def test_steps_normalized(self) -> None:
        """Strings become steps, blanks are dropped, ids are kept or generated."""
        steps = db.build_steps(
            ["Wet brush", "  ", {const.DATA_STEP_ID: "s2", const.DATA_STEP_TEXT: "Rinse"}]
        )
        assert [step[const.DATA_STEP_TEXT] for step in steps] == ["Wet brush", "Rinse"]
        assert steps[1][const.DATA_STEP_ID] == "s2"
        assert steps[0][const.DATA_STEP_ID]
        assert not any(step[const.DATA_STEP_COMPLETED] for step in steps)


class TestBuildReward:
    """Tests for build_reward and the starter catalog."""

    def test_block_gets_default_colour(self) -> None:
        """Block rewards always carry a colour."""
        reward = db.build_reward(
            {const.DATA_REWARD_TITLE: "Dirt", const.DATA_REWARD_TYPE: RewardType.BLOCK}
        )
        assert reward[const.DATA_REWARD_BLOCK_COLOR] == const.DEFAULT_BLOCK_COLOR

    def test_non_block_has_no_colour(self) -> None:
        """Only blocks are paintable."""
        reward = db.build_reward({const.DATA_REWARD_TITLE: "Movie night"})
        assert reward[const.DATA_REWARD_TYPE] == RewardType.REAL_LIFE
        assert const.DATA_REWARD_BLOCK_COLOR not in reward

    def test_unknown_currency(self) -> None:
        """Only emeralds and diamonds exist."""
        with pytest.raises(db.EntityValidationError) as err:
            db.build_reward(
                {const.DATA_REWARD_TITLE: "x", const.DATA_REWARD_CURRENCY: "gold"}
            )
        assert err.value.field == const.DATA_REWARD_CURRENCY

    def test_starter_catalog_keyed_by_id(self) -> None:
        """The starter catalog has two blocks and one real-life reward."""
        rewards = db.build_default_rewards()
        assert set(rewards) == {"grass_block", "stone_block", "extra_time"}
        assert all(
            reward_id == reward[const.DATA_INTERNAL_ID]
            for reward_id, reward in rewards.items()
        )


class TestDefaults:
    """Tests for family defaults, log entries and seeds."""

    def test_default_profile(self) -> None:
        """New heroes start at level 1 with full health."""
        profile = db.build_default_profile("Alex")
        assert profile[const.DATA_PROFILE_NAME] == "Alex"
        assert profile[const.DATA_PROFILE_LEVEL] == 1
        assert profile[const.DATA_PROFILE_HP] == profile[const.DATA_PROFILE_MAX_HP]
        assert profile[const.DATA_PROFILE_RANK] == "Steve (Novice)"

    def test_default_rules_enabled(self) -> None:
        """Every rule starts enabled with neutral multipliers."""
        rules = db.build_default_settings()[const.DATA_SETTINGS_RULES]
        assert rules[const.DATA_RULE_ALLOW_SHOP]
        assert rules[const.DATA_RULE_REQUIRE_EVIDENCE]
        assert rules[const.DATA_RULE_XP_MULTIPLIER] == 1.0

    def test_activity_optional_fields(self) -> None:
        """Amount and currency are only stored when given."""
        plain = db.build_activity("task_done", "Alex", "Brush teeth", 1)
        paid = db.build_activity("item_bought", "Alex", "Stone", 2, amount=20, currency="emerald")
        assert const.DATA_ACTIVITY_AMOUNT not in plain
        assert paid[const.DATA_ACTIVITY_AMOUNT] == 20
        assert paid[const.DATA_ACTIVITY_CURRENCY] == "emerald"

    def test_message_starts_unread(self) -> None:
        """New messages are unread."""
        message = db.build_message("hi", const.MessageSender.MASTER, 5)
        assert message[const.DATA_MESSAGE_READ] is False
        assert message[const.DATA_MESSAGE_SENDER] == "master"

    def test_world_seed_format(self) -> None:
        """Seeds look like ADJECTIVE-MOB-NNN and are reproducible with a seeded rng."""
        seed = db.generate_world_seed(random.Random(7))
        assert re.fullmatch(r"[A-Z]+-[A-Z]+-\d{3}", seed)
        assert seed == db.generate_world_seed(random.Random(7))
