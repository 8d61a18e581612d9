"""Diagnostics support for QuestCraft integration.

The config entry diagnostics return the raw stored snapshot, identical to
the family's storage file. The parent PIN is redacted.
"""

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import QuestCraftCoordinator

TO_REDACT = {const.DATA_SETTINGS_PARENT_PIN, const.CONF_PARENT_PIN}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: QuestCraftCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    return {
        "entry": async_redact_data(dict(entry.data), TO_REDACT),
        "options": dict(entry.options),
        "data": async_redact_data(coordinator.store.data, TO_REDACT),
    }
