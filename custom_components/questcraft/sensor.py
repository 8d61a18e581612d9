# File: sensor.py
"""Sensors for the QuestCraft integration.

One hero per family, so every sensor reads the family snapshot directly.

Sensors Defined in This File (8):
01. HeroLevelSensor
02. HeroExperienceSensor
03. HeroEmeraldsSensor
04. HeroDiamondsSensor
05. HeroHealthSensor
06. HeroRankSensor
07. HeroStreakSensor
08. AwaitingReviewSensor
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import QuestCraftCoordinator
from .engines.progression_engine import ProgressionEngine
from .engines.task_engine import TaskEngine
from .entity import QuestCraftCoordinatorEntity


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for a QuestCraft family."""
    coordinator: QuestCraftCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities(
        [
            HeroLevelSensor(coordinator, entry),
            HeroExperienceSensor(coordinator, entry),
            HeroEmeraldsSensor(coordinator, entry),
            HeroDiamondsSensor(coordinator, entry),
            HeroHealthSensor(coordinator, entry),
            HeroRankSensor(coordinator, entry),
            HeroStreakSensor(coordinator, entry),
            AwaitingReviewSensor(coordinator, entry),
        ]
    )


class _ProfileValueSensor(QuestCraftCoordinatorEntity, SensorEntity):
    """Sensor exposing one integer field of the hero profile."""

    _profile_key: str
    _translation_key: str
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, coordinator: QuestCraftCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry, self._translation_key)

    @property
    def native_value(self) -> Any:
        """Return the profile field."""
        return self.coordinator.profile.get(self._profile_key, const.DEFAULT_ZERO)


# ------------------------------------------------------------------------------------------
class HeroLevelSensor(_ProfileValueSensor):
    """Hero level, with the XP needed for the next one."""

    _profile_key = const.DATA_PROFILE_LEVEL
    _translation_key = const.TRANS_KEY_SENSOR_LEVEL
    _attr_icon = "mdi:sword"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the XP required to leave the current level."""
        level = int(self.coordinator.profile.get(const.DATA_PROFILE_LEVEL, 1))
        return {const.ATTR_REQUIRED_XP: ProgressionEngine.required_xp(level)}


# ------------------------------------------------------------------------------------------
class HeroExperienceSensor(_ProfileValueSensor):
    """XP collected within the current level."""

    _profile_key = const.DATA_PROFILE_EXPERIENCE
    _translation_key = const.TRANS_KEY_SENSOR_EXPERIENCE
    _attr_icon = "mdi:star-four-points"
    _attr_native_unit_of_measurement = "XP"


# ------------------------------------------------------------------------------------------
class HeroEmeraldsSensor(_ProfileValueSensor):
    """Emerald balance (common currency)."""

    _profile_key = const.DATA_PROFILE_EMERALDS
    _translation_key = const.TRANS_KEY_SENSOR_EMERALDS
    _attr_icon = "mdi:diamond-stone"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the owned units per reward."""
        return {
            const.ATTR_INVENTORY: dict(
                self.coordinator.profile.get(const.DATA_PROFILE_INVENTORY, {})
            )
        }


# ------------------------------------------------------------------------------------------
class HeroDiamondsSensor(_ProfileValueSensor):
    """Diamond balance (premium currency)."""

    _profile_key = const.DATA_PROFILE_DIAMONDS
    _translation_key = const.TRANS_KEY_SENSOR_DIAMONDS
    _attr_icon = "mdi:diamond"


# ------------------------------------------------------------------------------------------
class HeroHealthSensor(_ProfileValueSensor):
    """Current HP; a hero at 0 HP cannot start quests."""

    _profile_key = const.DATA_PROFILE_HP
    _translation_key = const.TRANS_KEY_SENSOR_HEALTH
    _attr_native_unit_of_measurement = "HP"

    @property
    def icon(self) -> str:
        """Return a heart reflecting how hurt the hero is."""
        hp = int(self.native_value or 0)
        if hp <= 0:
            return "mdi:heart-broken"
        max_hp = int(self.coordinator.profile.get(const.DATA_PROFILE_MAX_HP, 1)) or 1
        return "mdi:heart" if hp * 2 >= max_hp else "mdi:heart-half-full"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the HP ceiling and whether the hero is incapacitated."""
        profile = self.coordinator.profile
        return {
            const.ATTR_MAX_HP: profile.get(const.DATA_PROFILE_MAX_HP, const.DEFAULT_MAX_HP),
            const.ATTR_INCAPACITATED: int(profile.get(const.DATA_PROFILE_HP, 0)) <= 0,
        }


# ------------------------------------------------------------------------------------------
class HeroRankSensor(QuestCraftCoordinatorEntity, SensorEntity):
    """Rank label derived from the hero level."""

    _attr_icon = "mdi:shield-crown"

    def __init__(self, coordinator: QuestCraftCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry, const.TRANS_KEY_SENSOR_RANK)

    @property
    def native_value(self) -> str:
        """Return the stored rank label."""
        return self.coordinator.profile.get(const.DATA_PROFILE_RANK, "")

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the display asset of the rank tier."""
        level = int(self.coordinator.profile.get(const.DATA_PROFILE_LEVEL, 1))
        return {
            const.ATTR_DISPLAY_ASSET: ProgressionEngine.rank_for_level(level).display_asset
        }


# ------------------------------------------------------------------------------------------
class HeroStreakSensor(_ProfileValueSensor):
    """Consecutive days with at least one approved task."""

    _profile_key = const.DATA_PROFILE_STREAK
    _translation_key = const.TRANS_KEY_SENSOR_STREAK
    _attr_icon = "mdi:fire"
    _attr_native_unit_of_measurement = "d"


# ------------------------------------------------------------------------------------------
class AwaitingReviewSensor(QuestCraftCoordinatorEntity, SensorEntity):
    """Number of tasks submitted and waiting for a parent."""

    _attr_icon = "mdi:clipboard-check-outline"
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, coordinator: QuestCraftCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry, const.TRANS_KEY_SENSOR_AWAITING_REVIEW)

    def _task_ids(self) -> list[str]:
        return [
            task_id
            for task_id, task in self.coordinator.tasks.items()
            if TaskEngine.status_of(task) == const.TaskStatus.COMPLETED
        ]

    @property
    def native_value(self) -> int:
        """Return how many tasks await review."""
        return len(self._task_ids())

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the ids of the tasks awaiting review."""
        return {const.ATTR_TASK_IDS: self._task_ids()}
