"""Base entity classes for QuestCraft integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import const
from .coordinator import QuestCraftCoordinator
from .helpers.device_helpers import create_hero_device_info


class QuestCraftCoordinatorEntity(CoordinatorEntity[QuestCraftCoordinator]):
    """Base entity for QuestCraft sensors with typed coordinator access.

    Every entity belongs to the family's single hero device.
    """

    _attr_has_entity_name = True

    def __init__(
        self, coordinator: QuestCraftCoordinator, entry: ConfigEntry, key: str
    ) -> None:
        """Initialize the entity.

        Args:
            coordinator: Coordinator of the family.
            entry: Config entry of the family.
            key: Translation key, also used as the unique id suffix.
        """
        super().__init__(coordinator)
        self._attr_translation_key = key
        self._attr_unique_id = f"{entry.entry_id}_{key}"
        self._attr_device_info = create_hero_device_info(
            coordinator.profile.get(const.DATA_PROFILE_NAME, const.DEFAULT_HERO_NAME),
            entry,
        )

    @property
    def coordinator(self) -> QuestCraftCoordinator:
        """Return typed coordinator."""
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: QuestCraftCoordinator) -> None:
        object.__setattr__(self, "_coordinator", value)
