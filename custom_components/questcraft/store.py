# File: store.py
"""Handles persistent data storage for the QuestCraft integration.

Uses Home Assistant's Storage helper to save and load the family snapshot,
ensuring the state is preserved across restarts. One storage file is kept per
family (config entry): hero profile, tasks, catalog, settings, audit log,
messages, goal and the daily penalty markers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store
from homeassistant.util.file import WriteError
from homeassistant.util.json import SerializationError

from . import const, data_builders as db

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class FamilyStore(Store):
    """Store that keeps the error of its last write.

    Store.async_save logs WriteError and SerializationError instead of
    raising them; the error is recorded here so the caller can see it.
    """

    def __init__(self, hass: HomeAssistant, version: int, key: str) -> None:
        """Initialize the store with no recorded write error."""
        super().__init__(hass, version, key)
        self.last_write_error: WriteError | SerializationError | None = None

    async def _async_write_data(self, path: str, data: dict) -> None:
        try:
            await super()._async_write_data(path, data)
        except (WriteError, SerializationError) as err:
            self.last_write_error = err
            raise


class QuestCraftStore:
    """Handles persistent storage operations for QuestCraft data.

    Thin wrapper around Home Assistant's Store API for loading, saving, and
    accessing one family's snapshot. Tasks and rewards are keyed by internal_id.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (per config entry).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store = FamilyStore(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}  # In-memory data cache for quick access.

    @staticmethod
    def get_default_structure(
        family_name: str = const.DEFAULT_FAMILY_NAME,
        hero_name: str = const.DEFAULT_HERO_NAME,
        parent_pin: str = const.DEFAULT_PARENT_PIN,
    ) -> dict[str, Any]:
        """Return canonical data structure for a new family.

        This is the SINGLE SOURCE OF TRUTH for QuestCraft storage schema.
        """
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_LAST_SWEEP: None,
            },
            const.DATA_PROFILE: db.build_default_profile(hero_name),
            const.DATA_TASKS: {},
            const.DATA_REWARDS: db.build_default_rewards(),
            const.DATA_SETTINGS: db.build_default_settings(family_name, parent_pin),
            const.DATA_ACTIVITIES: [],
            const.DATA_MESSAGES: [],
            const.DATA_GOAL: db.build_default_goal(),
            const.DATA_PENALIZED_TODAY: [],
        }

    async def async_initialize(self, **defaults: str) -> None:
        """Load data from storage during startup.

        If no data exists, initializes the default structure built from
        `defaults` (family_name, hero_name, parent_pin). Sections missing from
        an older file are filled from the default structure.
        """
        const.LOGGER.debug("QuestCraftStore: Loading data from %s", self._storage_key)
        existing_data = await self._store.async_load()
        default_data = QuestCraftStore.get_default_structure(**defaults)

        if existing_data is None:
            const.LOGGER.info("No existing storage found. Initializing new family data")
            self._data = default_data
            return

        self._data = existing_data
        for section, value in default_data.items():
            if section not in self._data:
                const.LOGGER.debug("QuestCraftStore: Adding missing section '%s'", section)
                self._data[section] = value
        const.LOGGER.debug(
            "QuestCraftStore: Loaded existing data: %s",
            {
                "tasks": len(self._data.get(const.DATA_TASKS, {})),
                "rewards": len(self._data.get(const.DATA_REWARDS, {})),
                "activities": len(self._data.get(const.DATA_ACTIVITIES, [])),
                "messages": len(self._data.get(const.DATA_MESSAGES, [])),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    async def async_save(self) -> bool:
        """Save the current data structure to storage asynchronously.

        Returns:
            True when the write succeeded. Failures are logged, not raised:
            write and serialization errors recorded by FamilyStore, OSError
            (file system), TypeError (non-serializable data) and ValueError
            (invalid data format).
        """
        self._store.last_write_error = None
        try:
            await self._store.async_save(self._data)
        except OSError as err:
            const.LOGGER.error(
                "Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
            return False
        except TypeError as err:
            const.LOGGER.error(
                "Failed to save storage due to non-serializable data: %s", err
            )
            return False
        except ValueError as err:
            const.LOGGER.error(
                "Failed to save storage due to invalid data format: %s", err
            )
            return False
        if self._store.last_write_error is not None:
            const.LOGGER.error(
                "Failed to write storage file %s: %s",
                self._store.path,
                self._store.last_write_error,
            )
            return False
        const.LOGGER.debug("QuestCraftStore: Data saved successfully")
        return True

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        self._data = {}
        try:
            await self._store.async_remove()
            const.LOGGER.info("Storage file removed: %s", self._store.path)
        except OSError as err:
            const.LOGGER.error(
                "Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
