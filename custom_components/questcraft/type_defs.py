"""Type definitions for QuestCraft data structures.

Every stored entity is a plain ``dict``; the TypedDicts below describe the
keys each one carries so the engines and managers can be type checked.

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   tasks, steps, the hero profile, rewards, placed blocks, settings,
   activities, messages and the family goal.

2. **dict[str, Any] for DYNAMIC structures** (keys determined at runtime):
   the inventory (reward id → count) and the id-keyed task/reward maps.

IMPORTANT: This file must NOT import from coordinator.py or any module that
imports the coordinator. Only typing machinery is imported here.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Stored snapshots are read with
``.get()`` defaults wherever a field may be missing.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

TaskId = str  # UUID string
RewardId = str  # UUID string
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
EpochMs = int  # Milliseconds since the Unix epoch


# =============================================================================
# Tasks
# =============================================================================


class TaskStep(TypedDict):
    """A single objective inside a task checklist."""

    id: str
    text: str
    completed: bool


class TaskData(TypedDict):
    """Type definition for a task (quest).

    Status values come from const.TaskStatus. Evidence and completion fields
    are only present between submission and the next reset/rejection.
    """

    internal_id: TaskId
    title: str
    description: str
    time_of_day: str  # morning | afternoon | night
    points: int  # XP awarded on approval
    emeralds: int
    diamonds: int
    status: str
    steps: list[TaskStep]
    duration_minutes: int
    recurrence: NotRequired[str]  # daily | none; unset behaves as daily
    evidence_url: NotRequired[str | None]
    evidence_type: NotRequired[str | None]  # photo | drawing
    completed_at: NotRequired[EpochMs | None]
    parent_feedback: NotRequired[str | None]


# Collection type for the tasks section
TasksCollection = dict[TaskId, TaskData]


# =============================================================================
# Hero Profile
# =============================================================================


class PlacedBlock(TypedDict):
    """A block placed on the build canvas."""

    x: int
    y: int
    color: str
    reward_id: RewardId
    name: str


class ProfileData(TypedDict):
    """Type definition for the hero (child) profile.

    Invariants held by the engines:
        0 <= hp <= max_hp, level >= 1,
        0 <= experience < required_xp(level), currencies >= 0.
    """

    name: str
    emeralds: int
    diamonds: int
    hp: int
    max_hp: int
    level: int
    experience: int
    streak: int
    last_streak_date: NotRequired[ISODate | None]
    inventory: dict[RewardId, int]
    world_blocks: list[PlacedBlock]
    rank: str
    sensory_mode: str  # standard | low_sensory


# =============================================================================
# Catalog
# =============================================================================


class RewardData(TypedDict):
    """Type definition for a shop catalog entry."""

    internal_id: RewardId
    title: str
    description: str
    cost: int
    currency: str  # emerald | diamond
    icon: str
    type: str  # block | outfit | real_life | potion
    block_color: NotRequired[str]


# Collection type for the rewards section
RewardsCollection = dict[RewardId, RewardData]


# =============================================================================
# Settings
# =============================================================================


class RulesData(TypedDict):
    """Parent-configurable game rules."""

    allow_shop: bool
    allow_builder: bool
    xp_multiplier: float
    damage_multiplier: float
    require_evidence: bool


class SettingsData(TypedDict):
    """Family-wide settings."""

    parent_pin: str
    family_name: str
    rules: RulesData
    last_reset: NotRequired[ISODate | None]


# =============================================================================
# Audit Log / Messages / Goal
# =============================================================================


class ActivityEntry(TypedDict):
    """Append-only audit log entry."""

    id: str
    type: str  # const.ActivityType
    user: str
    detail: str
    timestamp: EpochMs
    amount: NotRequired[int]
    currency: NotRequired[str]


class MessageEntry(TypedDict):
    """Message exchanged between the parent and the hero."""

    id: str
    text: str
    sender: str  # master | player
    timestamp: EpochMs
    read: bool


class GoalData(TypedDict):
    """Family-wide savings goal."""

    title: str
    target_emeralds: int
    current_emeralds: int


# =============================================================================
# Full snapshot
# =============================================================================


class QuestCraftData(TypedDict):
    """Complete stored snapshot for one family (config entry)."""

    meta: dict[str, Any]
    profile: ProfileData
    tasks: TasksCollection
    rewards: RewardsCollection
    settings: SettingsData
    activities: list[ActivityEntry]
    messages: list[MessageEntry]
    goal: GoalData
    penalized_today: list[TaskId]
