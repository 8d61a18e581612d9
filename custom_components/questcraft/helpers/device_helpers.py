# File: helpers/device_helpers.py
"""Device registry helper functions for QuestCraft.

Functions that construct DeviceInfo objects for Home Assistant's device registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_hero_device_info(hero_name: str, config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info for the family's hero profile.

    One hero per config entry, so the entry id identifies the device.
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=f"{hero_name} ({config_entry.title})",
        manufacturer=const.QUESTCRAFT_TITLE,
        model="Hero Profile",
        entry_type=DeviceEntryType.SERVICE,
    )
