"""Base class for QuestCraft managers.

Every manager action runs the same cycle while the coordinator holds its
lock: read the latest snapshot, let an engine compute the next one, commit
the changed sections in a single write, then announce the change on a
family-scoped dispatcher signal. BaseManager owns the commit and the
announcement; subclasses only decide what changed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestCraftCoordinator


class BaseManager(ABC):
    """Commit and signal plumbing shared by one family's managers."""

    def __init__(self, hass: HomeAssistant, coordinator: QuestCraftCoordinator) -> None:
        """Bind the manager to the family's coordinator."""
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    @abstractmethod
    async def async_setup(self) -> None:
        """Subscribe to signals; called once the snapshot is loaded."""

    # =========================================================================
    # COMMIT
    # =========================================================================

    async def _async_commit(
        self,
        action: str,
        updates: dict[str, Any],
        *,
        ok: bool = True,
        reason: str | None = None,
    ) -> bool:
        """Write `updates` as one snapshot change.

        A rejected engine result (`ok` False) writes nothing and returns
        False. A failed write raises HomeAssistantError from the coordinator
        and nothing is announced.
        """
        if not ok:
            self._log_rejection(action, reason)
            return False
        await self.coordinator._async_persist(updates)
        const.LOGGER.debug(
            "%s: %s committed (%s)",
            self.__class__.__name__,
            action,
            ", ".join(sorted(updates)),
        )
        return True

    def _log_rejection(self, action: str, reason: str | None) -> None:
        const.LOGGER.debug(
            "%s: %s rejected: %s", self.__class__.__name__, action, reason
        )

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def emit(self, suffix: str, **payload: Any) -> None:
        """Announce a committed change to the family's other managers.

        The payload travels as a single dict argument.
        """
        const.LOGGER.debug(
            "%s: emitting '%s' (%s)",
            self.__class__.__name__,
            suffix,
            ", ".join(payload),
        )
        async_dispatcher_send(self.hass, get_event_signal(self.entry_id, suffix), payload)

    def emit_level_up(
        self, profile: dict[str, Any], levels_gained: int, bonus_diamonds: int
    ) -> None:
        """Announce that the hero crossed one or more level thresholds."""
        if not levels_gained:
            return
        const.LOGGER.info(
            "%s: Hero reached level %s (%s)",
            self.__class__.__name__,
            profile[const.DATA_PROFILE_LEVEL],
            profile[const.DATA_PROFILE_RANK],
        )
        self.emit(
            const.SIGNAL_SUFFIX_LEVEL_UP,
            level=profile[const.DATA_PROFILE_LEVEL],
            levels_gained=levels_gained,
            bonus_diamonds=bonus_diamonds,
            rank=profile[const.DATA_PROFILE_RANK],
        )

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Handle a family signal until the config entry unloads."""
        self.coordinator.config_entry.async_on_unload(
            async_dispatcher_connect(
                self.hass, get_event_signal(self.entry_id, suffix), callback
            )
        )
