# File: __init__.py
"""Initialization file for the QuestCraft integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and preparing the coordinator for data handling.

Key Features:
- Config entry setup and unload support.
- One storage file and coordinator per family (config entry).
- Scheduler heartbeat started once the managers are wired.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .coordinator import QuestCraftCoordinator
from .services import async_setup_services, async_unload_services
from .store import QuestCraftStore


def _storage_key(entry: ConfigEntry) -> str:
    return f"{const.STORAGE_KEY}_{entry.entry_id}"


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("Starting setup for QuestCraft entry: %s", entry.entry_id)

    # Initialize the store; a new family is seeded from the config flow answers.
    store = QuestCraftStore(hass, _storage_key(entry))
    await store.async_initialize(
        family_name=entry.data.get(const.CONF_FAMILY_NAME, const.DEFAULT_FAMILY_NAME),
        hero_name=entry.data.get(const.CONF_HERO_NAME, const.DEFAULT_HERO_NAME),
        parent_pin=entry.data.get(const.CONF_PARENT_PIN, const.DEFAULT_PARENT_PIN),
    )

    coordinator = QuestCraftCoordinator(hass, entry, store)

    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("Failed to refresh coordinator data: %s", e)
        raise ConfigEntryNotReady from e

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORE: store,
    }

    # Managers subscribe to each other's signals, then the scheduler catches up.
    await coordinator.async_setup_managers()

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    # Sweep interval changes take effect through a reload
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    const.LOGGER.info("QuestCraft setup complete for entry: %s", entry.entry_id)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options changed."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("Unloading QuestCraft entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)

        # Services are shared; remove them with the last family
        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("Removing QuestCraft entry: %s", entry.entry_id)

    store = QuestCraftStore(hass, _storage_key(entry))
    await store.async_delete_storage()

    const.LOGGER.info("QuestCraft entry data cleared: %s", entry.entry_id)
