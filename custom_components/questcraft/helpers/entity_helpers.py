# File: helpers/entity_helpers.py
"""Signal and item lookup helper functions for QuestCraft.

Functions here raise Home Assistant exceptions or build dispatcher signal
names, so they live under helpers/ rather than utils/.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const

if TYPE_CHECKING:
    from collections.abc import Mapping


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Each family (config entry) gets its own signal namespace so managers can
    emit/listen without cross-talk between instances.

    Format: 'questcraft_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_LEVEL_UP)
        'questcraft_abc123_level_up'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Item Lookups
# ==============================================================================


def get_item_or_raise(
    items: Mapping[str, Any], item_type: str, item_id: str
) -> dict[str, Any]:
    """Return a stored item by internal id, or raise if it does not exist.

    Args:
        items: Section of the snapshot keyed by internal id (tasks, rewards)
        item_type: Label used in the error (const.LABEL_TASK, const.LABEL_REWARD)
        item_id: Internal id requested by the caller

    Raises:
        HomeAssistantError: translation key "not_found"
    """
    item = items.get(item_id)
    if item is None:
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
            translation_placeholders={
                "entity_type": item_type,
                "name": item_id,
            },
        )
    return item
