"""Economy Manager - Shop, manual adjustments and the build canvas.

This manager handles all currency and inventory operations:
- Reward catalog CRUD
- Purchases (debit + inventory credit or potion heal)
- Manual parent adjustments (XP, emeralds, diamonds, HP)
- Block building: paint/erase, flood-fill, clear

ARCHITECTURE:
- EconomyManager = "The Bank" (STATEFUL, persists and emits)
- EconomyEngine = pure math over profile snapshots (STATELESS)

Signals Emitted:
- SIGNAL_SUFFIX_ITEM_BOUGHT
- SIGNAL_SUFFIX_MANUAL_ADJUST
- SIGNAL_SUFFIX_LEVEL_UP
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import ServiceValidationError

from .. import const, data_builders as db
from ..engines.economy_engine import EconomyEngine, EconomyResult
from ..helpers.entity_helpers import get_item_or_raise
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestCraftCoordinator


class EconomyManager(BaseManager):
    """Manager for currencies, the shop catalog and the hero's inventory.

    Responsibilities:
    - Execute purchases and adjustments through EconomyEngine
    - Keep inventory and canvas consistent while building
    - Emit ITEM_BOUGHT / MANUAL_ADJUST events for the audit log

    NOT responsible for:
    - Task rewards (TaskManager via ProgressionEngine)
    """

    def __init__(self, hass: HomeAssistant, coordinator: QuestCraftCoordinator) -> None:
        """Initialize the economy manager."""
        super().__init__(hass, coordinator)
        self.grid_size = const.DEFAULT_GRID_SIZE

    async def async_setup(self) -> None:
        """Set up the economy manager (no subscriptions needed)."""
        const.LOGGER.debug("EconomyManager: setup complete for entry %s", self.entry_id)

    # =========================================================================
    # CATALOG
    # =========================================================================

    async def add_reward(self, reward_input: dict[str, Any]) -> str:
        """Create a catalog entry and return its internal id."""
        try:
            reward = dict(db.build_reward(reward_input))
        except db.EntityValidationError as err:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_INPUT,
                translation_placeholders={"field": err.field, "detail": str(err)},
            ) from err
        reward_id = reward[const.DATA_INTERNAL_ID]
        await self._async_commit(
            f"add reward '{reward[const.DATA_REWARD_TITLE]}'",
            {const.DATA_REWARDS: {**self.coordinator.rewards, reward_id: reward}},
        )
        return reward_id

    async def delete_reward(self, reward_id: str) -> bool:
        """Remove a catalog entry. Owned units and placed blocks stay."""
        get_item_or_raise(self.coordinator.rewards, const.LABEL_REWARD, reward_id)
        rewards = {k: v for k, v in self.coordinator.rewards.items() if k != reward_id}
        return await self._async_commit(
            f"delete reward {reward_id}", {const.DATA_REWARDS: rewards}
        )

    # =========================================================================
    # SHOP
    # =========================================================================

    async def buy_reward(self, reward_id: str) -> bool:
        """Purchase one unit of a reward for the hero."""
        reward = get_item_or_raise(self.coordinator.rewards, const.LABEL_REWARD, reward_id)
        result = EconomyEngine.purchase(
            self.coordinator.profile, reward, self.coordinator.rules
        )
        if not await self._async_store_result(result, "buy_reward"):
            return False

        self.emit(
            const.SIGNAL_SUFFIX_ITEM_BOUGHT,
            reward_id=reward_id,
            title=reward.get(const.DATA_REWARD_TITLE, ""),
            cost=int(reward.get(const.DATA_REWARD_COST, 0)),
            currency=reward.get(const.DATA_REWARD_CURRENCY, const.Currency.EMERALD),
            healed=result.healed,
        )
        return True

    # =========================================================================
    # MANUAL ADJUSTMENTS
    # =========================================================================

    async def adjust_currency(self, amount: int, kind: str) -> bool:
        """Apply a signed parent adjustment to XP, a currency or HP."""
        result = EconomyEngine.adjust(self.coordinator.profile, amount, kind)
        await self._async_store_result(result, "adjust_currency")

        self.emit(const.SIGNAL_SUFFIX_MANUAL_ADJUST, kind=str(kind), amount=amount)
        self.emit_level_up(
            result.profile,
            result.levels_gained,
            result.levels_gained * const.LEVEL_UP_BONUS_DIAMONDS,
        )
        return True

    # =========================================================================
    # BUILD CANVAS
    # =========================================================================

    async def place_block(self, x: int, y: int, reward_id: str) -> bool:
        """Paint a block (or erase with const.BLOCK_ERASE) at (x, y)."""
        result = EconomyEngine.place_block(
            self.coordinator.profile,
            self.coordinator.rewards,
            x,
            y,
            reward_id,
            self.coordinator.rules,
            self.grid_size,
        )
        return await self._async_store_result(result, "place_block")

    async def fill_blocks(self, x: int, y: int, reward_id: str) -> bool:
        """Flood-fill the region around (x, y) with a block reward."""
        result = EconomyEngine.flood_fill(
            self.coordinator.profile,
            self.coordinator.rewards,
            x,
            y,
            reward_id,
            self.coordinator.rules,
            self.grid_size,
        )
        return await self._async_store_result(result, "fill_blocks")

    async def clear_world(self) -> bool:
        """Return every placed block to the inventory."""
        result = EconomyEngine.clear_world(self.coordinator.profile)
        return await self._async_store_result(result, "clear_world")

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    async def _async_store_result(self, result: EconomyResult, action: str) -> bool:
        return await self._async_commit(
            f"{action} (cells changed: {result.cells_changed})",
            {const.DATA_PROFILE: result.profile},
            ok=result.ok,
            reason=result.reason,
        )
