# File: const.py
"""Constants for the QuestCraft integration.

This file centralizes storage keys, defaults, tunables, signal names and
translation keys for consistency across the integration.
"""

from enum import StrEnum
import logging

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
QUESTCRAFT_TITLE = "QuestCraft"

# Integration Domain
DOMAIN = "questcraft"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "questcraft_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_FAMILY_NAME = "family_name"
CONF_HERO_NAME = "hero_name"
CONF_PARENT_PIN = "parent_pin"
CONF_WORLD_SEED = "world_seed"
CONF_SWEEP_INTERVAL = "sweep_interval"

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

DEFAULT_FAMILY_NAME = "New World"
DEFAULT_HERO_NAME = "Hero"
DEFAULT_PARENT_PIN = "1234"
DEFAULT_SWEEP_INTERVAL = 60
MIN_SWEEP_INTERVAL = 10
MAX_SWEEP_INTERVAL = 3600
PARENT_PIN_LENGTH = 4

# ------------------------------------------------------------------------------------------------
# Storage Sections
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_SWEEP = "last_sweep"

DATA_PROFILE = "profile"
DATA_TASKS = "tasks"
DATA_REWARDS = "rewards"
DATA_SETTINGS = "settings"
DATA_ACTIVITIES = "activities"
DATA_MESSAGES = "messages"
DATA_GOAL = "goal"
DATA_PENALIZED_TODAY = "penalized_today"

# Sections that hold append-only lists (ids are generated on append)
LIST_SECTIONS = (DATA_ACTIVITIES, DATA_MESSAGES)

# Shared
DATA_INTERNAL_ID = "internal_id"

# Task
DATA_TASK_TITLE = "title"
DATA_TASK_DESCRIPTION = "description"
DATA_TASK_TIME_OF_DAY = "time_of_day"
DATA_TASK_POINTS = "points"
DATA_TASK_EMERALDS = "emeralds"
DATA_TASK_DIAMONDS = "diamonds"
DATA_TASK_STATUS = "status"
DATA_TASK_EVIDENCE_URL = "evidence_url"
DATA_TASK_EVIDENCE_TYPE = "evidence_type"
DATA_TASK_COMPLETED_AT = "completed_at"
DATA_TASK_STEPS = "steps"
DATA_TASK_DURATION_MINUTES = "duration_minutes"
DATA_TASK_RECURRENCE = "recurrence"
DATA_TASK_PARENT_FEEDBACK = "parent_feedback"

DATA_STEP_ID = "id"
DATA_STEP_TEXT = "text"
DATA_STEP_COMPLETED = "completed"

# Profile
DATA_PROFILE_NAME = "name"
DATA_PROFILE_EMERALDS = "emeralds"
DATA_PROFILE_DIAMONDS = "diamonds"
DATA_PROFILE_HP = "hp"
DATA_PROFILE_MAX_HP = "max_hp"
DATA_PROFILE_LEVEL = "level"
DATA_PROFILE_EXPERIENCE = "experience"
DATA_PROFILE_STREAK = "streak"
DATA_PROFILE_LAST_STREAK_DATE = "last_streak_date"
DATA_PROFILE_INVENTORY = "inventory"
DATA_PROFILE_WORLD_BLOCKS = "world_blocks"
DATA_PROFILE_RANK = "rank"
DATA_PROFILE_SENSORY_MODE = "sensory_mode"

# Fields the parent/child surfaces may overwrite through update_profile
PROFILE_EDITABLE_FIELDS = frozenset(
    {
        DATA_PROFILE_NAME,
        DATA_PROFILE_MAX_HP,
        DATA_PROFILE_SENSORY_MODE,
    }
)

# Placed block
DATA_BLOCK_X = "x"
DATA_BLOCK_Y = "y"
DATA_BLOCK_COLOR = "color"
DATA_BLOCK_REWARD_ID = "reward_id"
DATA_BLOCK_NAME = "name"

# Reward
DATA_REWARD_TITLE = "title"
DATA_REWARD_DESCRIPTION = "description"
DATA_REWARD_COST = "cost"
DATA_REWARD_CURRENCY = "currency"
DATA_REWARD_ICON = "icon"
DATA_REWARD_TYPE = "type"
DATA_REWARD_BLOCK_COLOR = "block_color"

# Settings
DATA_SETTINGS_PARENT_PIN = "parent_pin"
DATA_SETTINGS_FAMILY_NAME = "family_name"
DATA_SETTINGS_RULES = "rules"
DATA_SETTINGS_LAST_RESET = "last_reset"

DATA_RULE_ALLOW_SHOP = "allow_shop"
DATA_RULE_ALLOW_BUILDER = "allow_builder"
DATA_RULE_XP_MULTIPLIER = "xp_multiplier"
DATA_RULE_DAMAGE_MULTIPLIER = "damage_multiplier"
DATA_RULE_REQUIRE_EVIDENCE = "require_evidence"

# Activity
DATA_ACTIVITY_ID = "id"
DATA_ACTIVITY_TYPE = "type"
DATA_ACTIVITY_USER = "user"
DATA_ACTIVITY_DETAIL = "detail"
DATA_ACTIVITY_TIMESTAMP = "timestamp"
DATA_ACTIVITY_AMOUNT = "amount"
DATA_ACTIVITY_CURRENCY = "currency"

# Message
DATA_MESSAGE_ID = "id"
DATA_MESSAGE_TEXT = "text"
DATA_MESSAGE_SENDER = "sender"
DATA_MESSAGE_TIMESTAMP = "timestamp"
DATA_MESSAGE_READ = "read"

# Goal
DATA_GOAL_TITLE = "title"
DATA_GOAL_TARGET_EMERALDS = "target_emeralds"
DATA_GOAL_CURRENT_EMERALDS = "current_emeralds"


# ------------------------------------------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------------------------------------------
class TaskStatus(StrEnum):
    """Lifecycle states of a task."""

    PENDING = "pending"
    STARTED = "started"
    DOING = "doing"
    COMPLETED = "completed"
    APPROVED = "approved"
    REJECTED = "rejected"
    FAILED = "failed"


class TimeOfDay(StrEnum):
    """Period of the day a task belongs to."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"


class Currency(StrEnum):
    """Spendable currencies."""

    EMERALD = "emerald"
    DIAMOND = "diamond"


class AdjustKind(StrEnum):
    """Targets of a manual parent adjustment."""

    XP = "xp"
    EMERALD = "emerald"
    DIAMOND = "diamond"
    HP = "hp"


class RewardType(StrEnum):
    """Catalog entry kinds."""

    BLOCK = "block"
    OUTFIT = "outfit"
    REAL_LIFE = "real_life"
    POTION = "potion"


class ActivityType(StrEnum):
    """Audit log entry tags."""

    TASK_DONE = "task_done"
    TASK_APPROVED = "task_approved"
    TASK_REJECTED = "task_rejected"
    TASK_FAILED = "task_failed"
    ITEM_BOUGHT = "item_bought"
    LEVEL_UP = "level_up"
    MANUAL_ADJUST = "manual_adjust"
    SYSTEM_RESET = "system_reset"


class MessageSender(StrEnum):
    """Authors of a server message."""

    MASTER = "master"
    PLAYER = "player"


EVIDENCE_TYPE_PHOTO = "photo"
EVIDENCE_TYPE_DRAWING = "drawing"
EVIDENCE_TYPES = [EVIDENCE_TYPE_PHOTO, EVIDENCE_TYPE_DRAWING]

RECURRENCE_DAILY = "daily"
RECURRENCE_NONE = "none"
RECURRENCES = [RECURRENCE_DAILY, RECURRENCE_NONE]

SENSORY_MODE_STANDARD = "standard"
SENSORY_MODE_LOW = "low_sensory"
SENSORY_MODES = [SENSORY_MODE_STANDARD, SENSORY_MODE_LOW]

# Pseudo reward id selecting erase mode on the build canvas
BLOCK_ERASE = "erase"

# ------------------------------------------------------------------------------------------------
# Tunables
# ------------------------------------------------------------------------------------------------
XP_PER_LEVEL = 100
LEVEL_UP_BONUS_DIAMONDS = 1
HP_REGEN_PER_TASK = 5
POTION_HEAL_AMOUNT = 25
PENALTY_DAMAGE = 20
DEFAULT_MAX_HP = 100
DEFAULT_LEVEL = 1
DEFAULT_ZERO = 0
DEFAULT_GRID_SIZE = 12
DEFAULT_BLOCK_COLOR = "#8b8b8b"
DEFAULT_TASK_DURATION_MINUTES = 15
MAX_ACTIVITY_ENTRIES = 100
MAX_MESSAGE_ENTRIES = 100

# Hour boundaries (local time) after which a period counts as elapsed
MORNING_END_HOUR = 12
AFTERNOON_END_HOUR = 18

# (min_level, label, display_asset) ordered by min_level
RANK_TIERS: tuple[tuple[int, str, str], ...] = (
    (1, "Steve (Novice)", "👕"),
    (3, "Leather (Explorer)", "🟤"),
    (5, "Iron (Warrior)", "⚪"),
    (10, "Gold (Veteran)", "🟡"),
    (20, "Diamond (Master)", "💎"),
    (50, "Netherite (Legend)", "🟣"),
)

# World seed vocabulary
SEED_ADJECTIVES = (
    "BRAVE",
    "GOLDEN",
    "MINER",
    "CRAFTY",
    "BLOCKY",
    "DIAMOND",
    "ANCIENT",
    "HIDDEN",
    "ENDER",
)
SEED_MOBS = (
    "STEVE",
    "CREEPER",
    "ZOMBIE",
    "PIGLIN",
    "ENDERMAN",
    "SKELETON",
    "GHAST",
    "AXOLOTL",
    "WARDEN",
)

# ------------------------------------------------------------------------------------------------
# Rejection Reasons (engine results)
# ------------------------------------------------------------------------------------------------
REASON_INVALID_TRANSITION = "invalid_transition"
REASON_STEP_NOT_FOUND = "step_not_found"
REASON_OBJECTIVES_INCOMPLETE = "objectives_incomplete"
REASON_EVIDENCE_REQUIRED = "evidence_required"
REASON_WINDOW_CLOSED = "window_closed"
REASON_HERO_INCAPACITATED = "hero_incapacitated"
REASON_SHOP_CLOSED = "shop_closed"
REASON_INSUFFICIENT_FUNDS = "insufficient_funds"
REASON_BUILDER_DISABLED = "builder_disabled"
REASON_OUT_OF_BOUNDS = "out_of_bounds"
REASON_NOT_A_BLOCK = "not_a_block"
REASON_NO_INVENTORY = "no_inventory"

# ------------------------------------------------------------------------------------------------
# Dispatcher Signals (suffixes, scoped per config entry)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_TASK_SUBMITTED = "task_submitted"
SIGNAL_SUFFIX_TASK_APPROVED = "task_approved"
SIGNAL_SUFFIX_TASK_REJECTED = "task_rejected"
SIGNAL_SUFFIX_TASKS_FAILED = "tasks_failed"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"
SIGNAL_SUFFIX_ITEM_BOUGHT = "item_bought"
SIGNAL_SUFFIX_MANUAL_ADJUST = "manual_adjust"
SIGNAL_SUFFIX_DAILY_RESET = "daily_reset"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADD_TASK = "add_task"
SERVICE_DELETE_TASK = "delete_task"
SERVICE_UPDATE_TASKS = "update_tasks"
SERVICE_START_TASK = "start_task"
SERVICE_TOGGLE_STEP = "toggle_step"
SERVICE_COMPLETE_TASK = "complete_task"
SERVICE_APPROVE_TASK = "approve_task"
SERVICE_REJECT_TASK = "reject_task"
SERVICE_BUY_REWARD = "buy_reward"
SERVICE_ADJUST_CURRENCY = "adjust_currency"
SERVICE_UPDATE_PROFILE = "update_profile"
SERVICE_ADD_REWARD = "add_reward"
SERVICE_DELETE_REWARD = "delete_reward"
SERVICE_UPDATE_SETTINGS = "update_settings"
SERVICE_PLACE_BLOCK = "place_block"
SERVICE_FILL_BLOCKS = "fill_blocks"
SERVICE_CLEAR_WORLD = "clear_world"
SERVICE_SEND_MESSAGE = "send_message"
SERVICE_MARK_MESSAGES_READ = "mark_messages_read"
SERVICE_UPDATE_GOAL = "update_goal"
SERVICE_VERIFY_PARENT_PIN = "verify_parent_pin"
SERVICE_RUN_SCHEDULER = "run_scheduler"

FIELD_TASK_ID = "task_id"
FIELD_TASKS = "tasks"
FIELD_STEP_ID = "step_id"
FIELD_STEPS = "steps"
FIELD_TITLE = "title"
FIELD_DESCRIPTION = "description"
FIELD_TIME_OF_DAY = "time_of_day"
FIELD_POINTS = "points"
FIELD_EMERALDS = "emeralds"
FIELD_DIAMONDS = "diamonds"
FIELD_DURATION_MINUTES = "duration_minutes"
FIELD_RECURRENCE = "recurrence"
FIELD_EVIDENCE_URL = "evidence_url"
FIELD_EVIDENCE_TYPE = "evidence_type"
FIELD_FEEDBACK = "feedback"
FIELD_REWARD_ID = "reward_id"
FIELD_COST = "cost"
FIELD_CURRENCY = "currency"
FIELD_ICON = "icon"
FIELD_REWARD_TYPE = "reward_type"
FIELD_BLOCK_COLOR = "block_color"
FIELD_AMOUNT = "amount"
FIELD_KIND = "kind"
FIELD_NAME = "name"
FIELD_MAX_HP = "max_hp"
FIELD_SENSORY_MODE = "sensory_mode"
FIELD_PARENT_PIN = "parent_pin"
FIELD_FAMILY_NAME = "family_name"
FIELD_ALLOW_SHOP = "allow_shop"
FIELD_ALLOW_BUILDER = "allow_builder"
FIELD_XP_MULTIPLIER = "xp_multiplier"
FIELD_DAMAGE_MULTIPLIER = "damage_multiplier"
FIELD_REQUIRE_EVIDENCE = "require_evidence"
FIELD_X = "x"
FIELD_Y = "y"
FIELD_TEXT = "text"
FIELD_SENDER = "sender"
FIELD_TARGET_EMERALDS = "target_emeralds"
FIELD_CURRENT_EMERALDS = "current_emeralds"
FIELD_PIN = "pin"
FIELD_CONFIG_ENTRY_ID = "config_entry_id"

ATTR_VALID = "valid"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_NOT_FOUND = "not_found"
TRANS_KEY_ERROR_ACTION_REJECTED = "action_rejected"
TRANS_KEY_ERROR_STORAGE_WRITE_FAILED = "storage_write_failed"
TRANS_KEY_ERROR_INVALID_PIN = "invalid_pin"
TRANS_KEY_ERROR_INVALID_INPUT = "invalid_input"
TRANS_KEY_ERROR_NO_ENTRY = "no_entry"

LABEL_TASK = "task"
LABEL_REWARD = "reward"

TRANS_KEY_SENSOR_LEVEL = "level"
TRANS_KEY_SENSOR_EXPERIENCE = "experience"
TRANS_KEY_SENSOR_EMERALDS = "emeralds"
TRANS_KEY_SENSOR_DIAMONDS = "diamonds"
TRANS_KEY_SENSOR_HEALTH = "health"
TRANS_KEY_SENSOR_RANK = "rank"
TRANS_KEY_SENSOR_STREAK = "streak"
TRANS_KEY_SENSOR_AWAITING_REVIEW = "awaiting_review"

# Entity attributes
ATTR_REQUIRED_XP = "required_xp"
ATTR_MAX_HP = "max_hp"
ATTR_DISPLAY_ASSET = "display_asset"
ATTR_INCAPACITATED = "incapacitated"
ATTR_TASK_IDS = "task_ids"
ATTR_INVENTORY = "inventory"
