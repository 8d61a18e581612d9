"""Entity building helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults
- Complete entity structure building (tasks, steps, rewards)
- Default family content (profile, settings, starter catalog, goal)
- Audit log and message entry building
- World seed generation

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes user_input (DATA_* keys, may have missing fields)
- Generates internal_id (UUID) for new entities
- Applies field defaults, or keeps existing values in update mode
- Returns complete entity dict ready for storage

Consumers:
- store.py (default structure for new families)
- managers (programmatic entity management)
- config_flow.py (world seed)
"""

from __future__ import annotations

import random
from typing import Any
import uuid

from . import const
from .const import Currency, RewardType, TaskStatus, TimeOfDay
from .engines.progression_engine import ProgressionEngine
from .type_defs import (
    ActivityEntry,
    GoalData,
    MessageEntry,
    ProfileData,
    RewardData,
    SettingsData,
    TaskData,
    TaskStep,
)
from .utils.math_utils import non_negative_int


class EntityValidationError(ValueError):
    """Raised when user input cannot form a valid entity.

    Attributes:
        field: The DATA_* key that failed validation
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize with the failing field name and a message."""
        self.field = field
        super().__init__(message)


def _get_field(
    user_input: dict[str, Any],
    existing: dict[str, Any] | None,
    data_key: str,
    default: Any,
) -> Any:
    """Get field value: user_input > existing > default."""
    if data_key in user_input:
        return user_input[data_key]
    if existing is not None:
        return existing.get(data_key, default)
    return default


# ==============================================================================
# TASKS
# ==============================================================================


def build_steps(raw_steps: list[Any] | None) -> list[TaskStep]:
    """Normalize a checklist.

    Accepts plain strings or dicts with ``text`` (and optionally ``id`` and
    ``completed``). Missing ids are generated.
    """
    steps: list[TaskStep] = []
    for raw in raw_steps or []:
        if isinstance(raw, str):
            text, step_id, completed = raw, None, False
        else:
            text = raw.get(const.DATA_STEP_TEXT, "")
            step_id = raw.get(const.DATA_STEP_ID)
            completed = bool(raw.get(const.DATA_STEP_COMPLETED, False))
        text = str(text).strip()
        if not text:
            continue
        steps.append(
            TaskStep(
                id=str(step_id) if step_id else uuid.uuid4().hex[:8],
                text=text,
                completed=completed,
            )
        )
    return steps


def build_task(
    user_input: dict[str, Any],
    existing: TaskData | dict[str, Any] | None = None,
) -> TaskData:
    """Build task data for create or update operations.

    Create mode (existing=None) generates an internal_id and starts the task
    in PENDING. Update mode keeps the existing id and lifecycle fields unless
    user_input names them.

    Raises:
        EntityValidationError: If the title is empty on create
    """
    title = str(_get_field(user_input, existing, const.DATA_TASK_TITLE, "")).strip()
    if not title:
        raise EntityValidationError(const.DATA_TASK_TITLE, "Task title is required")

    time_of_day = _get_field(
        user_input, existing, const.DATA_TASK_TIME_OF_DAY, TimeOfDay.MORNING
    )
    if time_of_day not in TimeOfDay:
        raise EntityValidationError(
            const.DATA_TASK_TIME_OF_DAY, f"Unknown time of day '{time_of_day}'"
        )

    internal_id = (
        existing.get(const.DATA_INTERNAL_ID)
        if existing is not None
        else user_input.get(const.DATA_INTERNAL_ID)
    ) or str(uuid.uuid4())

    task = TaskData(
        internal_id=internal_id,
        title=title,
        description=str(
            _get_field(user_input, existing, const.DATA_TASK_DESCRIPTION, "")
        ),
        time_of_day=str(time_of_day),
        points=non_negative_int(
            _get_field(user_input, existing, const.DATA_TASK_POINTS, 0)
        ),
        emeralds=non_negative_int(
            _get_field(user_input, existing, const.DATA_TASK_EMERALDS, 0)
        ),
        diamonds=non_negative_int(
            _get_field(user_input, existing, const.DATA_TASK_DIAMONDS, 0)
        ),
        status=str(
            _get_field(user_input, existing, const.DATA_TASK_STATUS, TaskStatus.PENDING)
        ),
        steps=build_steps(_get_field(user_input, existing, const.DATA_TASK_STEPS, [])),
        duration_minutes=non_negative_int(
            _get_field(
                user_input,
                existing,
                const.DATA_TASK_DURATION_MINUTES,
                const.DEFAULT_TASK_DURATION_MINUTES,
            )
        ),
    )

    # Optional fields only present when set
    for key in (
        const.DATA_TASK_RECURRENCE,
        const.DATA_TASK_EVIDENCE_URL,
        const.DATA_TASK_EVIDENCE_TYPE,
        const.DATA_TASK_COMPLETED_AT,
        const.DATA_TASK_PARENT_FEEDBACK,
    ):
        value = _get_field(user_input, existing, key, None)
        if value is not None:
            task[key] = value  # type: ignore[literal-required]

    return task


# ==============================================================================
# REWARDS
# ==============================================================================


def build_reward(
    user_input: dict[str, Any],
    existing: RewardData | dict[str, Any] | None = None,
) -> RewardData:
    """Build reward data for create or update operations.

    Raises:
        EntityValidationError: If title, currency or type is invalid
    """
    title = str(_get_field(user_input, existing, const.DATA_REWARD_TITLE, "")).strip()
    if not title:
        raise EntityValidationError(const.DATA_REWARD_TITLE, "Reward title is required")

    currency = _get_field(user_input, existing, const.DATA_REWARD_CURRENCY, Currency.EMERALD)
    if currency not in Currency:
        raise EntityValidationError(
            const.DATA_REWARD_CURRENCY, f"Unknown currency '{currency}'"
        )
    reward_type = _get_field(user_input, existing, const.DATA_REWARD_TYPE, RewardType.REAL_LIFE)
    if reward_type not in RewardType:
        raise EntityValidationError(
            const.DATA_REWARD_TYPE, f"Unknown reward type '{reward_type}'"
        )

    internal_id = (
        existing.get(const.DATA_INTERNAL_ID)
        if existing is not None
        else user_input.get(const.DATA_INTERNAL_ID)
    ) or str(uuid.uuid4())

    reward = RewardData(
        internal_id=internal_id,
        title=title,
        description=str(
            _get_field(user_input, existing, const.DATA_REWARD_DESCRIPTION, "")
        ),
        cost=non_negative_int(_get_field(user_input, existing, const.DATA_REWARD_COST, 0)),
        currency=str(currency),
        icon=str(_get_field(user_input, existing, const.DATA_REWARD_ICON, "")),
        type=str(reward_type),
    )
    if reward_type == RewardType.BLOCK:
        reward[const.DATA_REWARD_BLOCK_COLOR] = str(  # type: ignore[literal-required]
            _get_field(
                user_input, existing, const.DATA_REWARD_BLOCK_COLOR, const.DEFAULT_BLOCK_COLOR
            )
            or const.DEFAULT_BLOCK_COLOR
        )
    return reward


def build_default_rewards() -> dict[str, RewardData]:
    """Return the starter catalog for a new family keyed by internal id."""
    starters = [
        build_reward(
            {
                const.DATA_INTERNAL_ID: "grass_block",
                const.DATA_REWARD_TITLE: "Grass Block",
                const.DATA_REWARD_DESCRIPTION: "A block for your world",
                const.DATA_REWARD_COST: 10,
                const.DATA_REWARD_CURRENCY: Currency.EMERALD,
                const.DATA_REWARD_ICON: "🌱",
                const.DATA_REWARD_TYPE: RewardType.BLOCK,
                const.DATA_REWARD_BLOCK_COLOR: "#58a034",
            }
        ),
        build_reward(
            {
                const.DATA_INTERNAL_ID: "stone_block",
                const.DATA_REWARD_TITLE: "Stone Block",
                const.DATA_REWARD_DESCRIPTION: "Sturdy and grey",
                const.DATA_REWARD_COST: 20,
                const.DATA_REWARD_CURRENCY: Currency.EMERALD,
                const.DATA_REWARD_ICON: "🪨",
                const.DATA_REWARD_TYPE: RewardType.BLOCK,
                const.DATA_REWARD_BLOCK_COLOR: "#8b8b8b",
            }
        ),
        build_reward(
            {
                const.DATA_INTERNAL_ID: "extra_time",
                const.DATA_REWARD_TITLE: "15 Minutes Extra",
                const.DATA_REWARD_DESCRIPTION: "Extra play time",
                const.DATA_REWARD_COST: 5,
                const.DATA_REWARD_CURRENCY: Currency.DIAMOND,
                const.DATA_REWARD_ICON: "⏰",
                const.DATA_REWARD_TYPE: RewardType.REAL_LIFE,
            }
        ),
    ]
    return {reward[const.DATA_INTERNAL_ID]: reward for reward in starters}


# ==============================================================================
# PROFILE / SETTINGS / GOAL
# ==============================================================================


def build_default_profile(hero_name: str = const.DEFAULT_HERO_NAME) -> ProfileData:
    """Return a level 1 hero with zero currencies and full health."""
    return ProfileData(
        name=hero_name,
        emeralds=const.DEFAULT_ZERO,
        diamonds=const.DEFAULT_ZERO,
        hp=const.DEFAULT_MAX_HP,
        max_hp=const.DEFAULT_MAX_HP,
        level=const.DEFAULT_LEVEL,
        experience=const.DEFAULT_ZERO,
        streak=const.DEFAULT_ZERO,
        last_streak_date=None,
        inventory={},
        world_blocks=[],
        rank=ProgressionEngine.rank_for_level(const.DEFAULT_LEVEL).label,
        sensory_mode=const.SENSORY_MODE_STANDARD,
    )


def build_default_settings(
    family_name: str = const.DEFAULT_FAMILY_NAME,
    parent_pin: str = const.DEFAULT_PARENT_PIN,
) -> SettingsData:
    """Return settings with every rule enabled and neutral multipliers."""
    return SettingsData(
        parent_pin=parent_pin,
        family_name=family_name,
        rules={
            const.DATA_RULE_ALLOW_SHOP: True,
            const.DATA_RULE_ALLOW_BUILDER: True,
            const.DATA_RULE_XP_MULTIPLIER: 1.0,
            const.DATA_RULE_DAMAGE_MULTIPLIER: 1.0,
            const.DATA_RULE_REQUIRE_EVIDENCE: True,
        },
        last_reset=None,
    )


def build_default_goal() -> GoalData:
    """Return an empty family savings goal."""
    return GoalData(title="", target_emeralds=0, current_emeralds=0)


# ==============================================================================
# AUDIT LOG / MESSAGES
# ==============================================================================


def build_activity(
    activity_type: str,
    user: str,
    detail: str,
    timestamp: int,
    amount: int | None = None,
    currency: str | None = None,
) -> ActivityEntry:
    """Build an audit log entry (id assigned on append)."""
    entry = ActivityEntry(
        id="",
        type=str(activity_type),
        user=user,
        detail=detail,
        timestamp=timestamp,
    )
    if amount is not None:
        entry[const.DATA_ACTIVITY_AMOUNT] = amount  # type: ignore[literal-required]
    if currency is not None:
        entry[const.DATA_ACTIVITY_CURRENCY] = currency  # type: ignore[literal-required]
    return entry


def build_message(text: str, sender: str, timestamp: int) -> MessageEntry:
    """Build an unread message (id assigned on append)."""
    return MessageEntry(id="", text=text, sender=str(sender), timestamp=timestamp, read=False)


# ==============================================================================
# WORLD SEED
# ==============================================================================


def generate_world_seed(rng: random.Random | None = None) -> str:
    """Return a memorable family code such as ``BRAVE-CREEPER-482``."""
    rng = rng or random.Random()
    adjective = rng.choice(const.SEED_ADJECTIVES)
    mob = rng.choice(const.SEED_MOBS)
    number = rng.randint(100, 999)
    return f"{adjective}-{mob}-{number}"
