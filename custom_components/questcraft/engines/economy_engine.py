"""Economy Engine - Pure logic for purchases, adjustments and block building.

This engine provides stateless, pure Python functions for:
- Currency balance lookups and sufficient funds checks
- Reward purchase (debit + inventory credit or consumable effect)
- Manual parent adjustments with clamping
- Build canvas mutation: paint, erase, flood-fill and clear

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and return an
EconomyResult holding a NEW profile. Rejected operations return the input
profile object itself, untouched. State management belongs in EconomyManager.

Building preserves, for every reward id:
    inventory[id] + count(world_blocks with id) == constant
Blocks only move between the canvas and the inventory.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const
from ..const import AdjustKind, Currency, RewardType
from ..utils.math_utils import clamp
from .progression_engine import ProgressionEngine

if TYPE_CHECKING:
    from ..type_defs import ProfileData, RewardData, RulesData


# =============================================================================
# RESULT DATA STRUCTURE
# =============================================================================


@dataclass
class EconomyResult:
    """Outcome of an economy or building operation.

    Attributes:
        ok: Whether the operation was applied
        profile: The new profile (or the untouched input when rejected)
        reason: Rejection reason (const.REASON_*) when ok is False
        cells_changed: Canvas cells painted or erased
        healed: Health restored by a consumable
        levels_gained: Levels crossed by a manual XP adjustment
    """

    ok: bool
    profile: ProfileData | dict[str, Any]
    reason: str | None = None
    cells_changed: int = 0
    healed: int = 0
    levels_gained: int = 0


def _rejected(profile: ProfileData | dict[str, Any], reason: str) -> EconomyResult:
    return EconomyResult(ok=False, profile=profile, reason=reason)


def _copy_profile(profile: ProfileData | dict[str, Any]) -> dict[str, Any]:
    """Copy a profile including its inventory map and block list."""
    new_profile: dict[str, Any] = dict(profile)
    new_profile[const.DATA_PROFILE_INVENTORY] = dict(
        profile.get(const.DATA_PROFILE_INVENTORY) or {}
    )
    new_profile[const.DATA_PROFILE_WORLD_BLOCKS] = [
        dict(block) for block in profile.get(const.DATA_PROFILE_WORLD_BLOCKS) or []
    ]
    return new_profile


def _currency_key(currency: str) -> str:
    if currency == Currency.DIAMOND:
        return const.DATA_PROFILE_DIAMONDS
    return const.DATA_PROFILE_EMERALDS


# =============================================================================
# ECONOMY ENGINE
# =============================================================================


class EconomyEngine:
    """Pure logic engine for currencies, inventory and the build canvas.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.
    """

    # =========================================================================
    # BALANCES
    # =========================================================================

    @staticmethod
    def balance(profile: ProfileData | dict[str, Any], currency: str) -> int:
        """Return the hero's balance in `currency`."""
        return int(profile.get(_currency_key(currency), 0))

    @staticmethod
    def validate_sufficient_funds(balance: int, cost: int) -> bool:
        """Return True if balance covers cost."""
        return balance >= cost

    # =========================================================================
    # SHOP
    # =========================================================================

    @staticmethod
    def purchase(
        profile: ProfileData | dict[str, Any],
        reward: RewardData | dict[str, Any],
        rules: RulesData | dict[str, Any],
        potion_heal: int = const.POTION_HEAL_AMOUNT,
    ) -> EconomyResult:
        """Buy a catalog entry.

        Rejected with shop_closed when the shop is disabled (regardless of
        balance) or insufficient_funds when the balance is short; in both
        cases the returned profile is the input object.

        Potions heal immediately (capped at max_hp) instead of entering the
        inventory. Every other reward type adds one unit to the inventory.
        """
        if not rules.get(const.DATA_RULE_ALLOW_SHOP, True):
            return _rejected(profile, const.REASON_SHOP_CLOSED)

        currency = reward.get(const.DATA_REWARD_CURRENCY, Currency.EMERALD)
        cost = max(0, int(reward.get(const.DATA_REWARD_COST, 0)))
        if not EconomyEngine.validate_sufficient_funds(
            EconomyEngine.balance(profile, currency), cost
        ):
            return _rejected(profile, const.REASON_INSUFFICIENT_FUNDS)

        new_profile = _copy_profile(profile)
        key = _currency_key(currency)
        new_profile[key] = int(new_profile.get(key, 0)) - cost

        healed = 0
        if reward.get(const.DATA_REWARD_TYPE) == RewardType.POTION:
            max_hp = int(new_profile.get(const.DATA_PROFILE_MAX_HP, const.DEFAULT_MAX_HP))
            old_hp = int(new_profile.get(const.DATA_PROFILE_HP, 0))
            new_hp = clamp(old_hp + potion_heal, 0, max_hp)
            new_profile[const.DATA_PROFILE_HP] = new_hp
            healed = new_hp - old_hp
        else:
            reward_id = reward[const.DATA_INTERNAL_ID]
            inventory = new_profile[const.DATA_PROFILE_INVENTORY]
            inventory[reward_id] = int(inventory.get(reward_id, 0)) + 1

        return EconomyResult(ok=True, profile=new_profile, healed=healed)

    # =========================================================================
    # MANUAL ADJUSTMENTS
    # =========================================================================

    @staticmethod
    def adjust(
        profile: ProfileData | dict[str, Any], amount: int, kind: str
    ) -> EconomyResult:
        """Apply a signed parent adjustment.

        Currencies and experience are floored at 0, health is clamped to
        [0, max_hp]. XP adjustments run through the level-up loop so the
        experience invariant still holds (levels are never taken away).
        """
        new_profile = _copy_profile(profile)
        levels_gained = 0

        match AdjustKind(kind):
            case AdjustKind.XP:
                new_profile[const.DATA_PROFILE_EXPERIENCE] = max(
                    0, int(new_profile.get(const.DATA_PROFILE_EXPERIENCE, 0)) + amount
                )
                outcome = ProgressionEngine.normalize_experience(new_profile)
                new_profile = dict(outcome.profile)
                levels_gained = outcome.levels_gained
            case AdjustKind.EMERALD | AdjustKind.DIAMOND:
                key = _currency_key(kind)
                new_profile[key] = max(0, int(new_profile.get(key, 0)) + amount)
            case AdjustKind.HP:
                max_hp = int(new_profile.get(const.DATA_PROFILE_MAX_HP, const.DEFAULT_MAX_HP))
                new_profile[const.DATA_PROFILE_HP] = clamp(
                    int(new_profile.get(const.DATA_PROFILE_HP, 0)) + amount, 0, max_hp
                )

        return EconomyResult(ok=True, profile=new_profile, levels_gained=levels_gained)

    # =========================================================================
    # BUILD CANVAS
    # =========================================================================

    @staticmethod
    def place_block(
        profile: ProfileData | dict[str, Any],
        rewards: dict[str, Any],
        x: int,
        y: int,
        reward_id: str,
        rules: RulesData | dict[str, Any],
        grid_size: int = const.DEFAULT_GRID_SIZE,
    ) -> EconomyResult:
        """Paint or erase a single canvas cell.

        Args:
            profile: Current hero profile (not modified)
            rewards: Catalog keyed by reward id
            x: Column in [0, grid_size)
            y: Row in [0, grid_size)
            reward_id: Block reward to paint, or const.BLOCK_ERASE
            rules: Game rules (allow_builder)
            grid_size: Canvas edge length

        Returns:
            EconomyResult with cells_changed set to 0 or 1
        """
        rejection = EconomyEngine._check_canvas(profile, rules, x, y, grid_size)
        if rejection:
            return rejection

        if reward_id == const.BLOCK_ERASE:
            new_profile = _copy_profile(profile)
            changed = EconomyEngine._refund_cell(new_profile, x, y)
            return EconomyResult(ok=True, profile=new_profile, cells_changed=changed)

        reward = rewards.get(reward_id)
        if not reward or reward.get(const.DATA_REWARD_TYPE) != RewardType.BLOCK:
            return _rejected(profile, const.REASON_NOT_A_BLOCK)
        inventory = profile.get(const.DATA_PROFILE_INVENTORY) or {}
        if int(inventory.get(reward_id, 0)) <= 0:
            return _rejected(profile, const.REASON_NO_INVENTORY)

        new_profile = _copy_profile(profile)
        EconomyEngine._refund_cell(new_profile, x, y)
        EconomyEngine._paint_cell(new_profile, x, y, reward)
        return EconomyResult(ok=True, profile=new_profile, cells_changed=1)

    @staticmethod
    def flood_fill(
        profile: ProfileData | dict[str, Any],
        rewards: dict[str, Any],
        x: int,
        y: int,
        reward_id: str,
        rules: RulesData | dict[str, Any],
        grid_size: int = const.DEFAULT_GRID_SIZE,
    ) -> EconomyResult:
        """Bucket-fill the 4-connected region sharing the origin cell's colour.

        Empty cells share the colour None. Each repainted cell refunds its
        occupant and consumes one inventory unit; the fill stops early when
        the inventory runs out. Filling a region with its own colour is a
        no-op. A visited set bounds the walk to one visit per cell.
        """
        rejection = EconomyEngine._check_canvas(profile, rules, x, y, grid_size)
        if rejection:
            return rejection

        reward = rewards.get(reward_id)
        if not reward or reward.get(const.DATA_REWARD_TYPE) != RewardType.BLOCK:
            return _rejected(profile, const.REASON_NOT_A_BLOCK)
        inventory = profile.get(const.DATA_PROFILE_INVENTORY) or {}
        if int(inventory.get(reward_id, 0)) <= 0:
            return _rejected(profile, const.REASON_NO_INVENTORY)

        new_profile = _copy_profile(profile)
        grid = EconomyEngine._grid(new_profile)
        new_color = reward.get(const.DATA_REWARD_BLOCK_COLOR) or const.DEFAULT_BLOCK_COLOR
        origin = grid.get((x, y))
        origin_color = origin.get(const.DATA_BLOCK_COLOR) if origin else None
        if origin_color == new_color:
            return EconomyResult(ok=True, profile=new_profile, cells_changed=0)

        new_inventory = new_profile[const.DATA_PROFILE_INVENTORY]
        visited: set[tuple[int, int]] = {(x, y)}
        queue: deque[tuple[int, int]] = deque([(x, y)])
        changed = 0

        while queue and int(new_inventory.get(reward_id, 0)) > 0:
            cx, cy = queue.popleft()
            EconomyEngine._refund_cell(new_profile, cx, cy)
            EconomyEngine._paint_cell(new_profile, cx, cy, reward)
            changed += 1

            for nx, ny in ((cx + 1, cy), (cx - 1, cy), (cx, cy + 1), (cx, cy - 1)):
                if not (0 <= nx < grid_size and 0 <= ny < grid_size):
                    continue
                if (nx, ny) in visited:
                    continue
                neighbour = grid.get((nx, ny))
                neighbour_color = (
                    neighbour.get(const.DATA_BLOCK_COLOR) if neighbour else None
                )
                if neighbour_color != origin_color:
                    continue
                visited.add((nx, ny))
                queue.append((nx, ny))

        return EconomyResult(ok=True, profile=new_profile, cells_changed=changed)

    @staticmethod
    def clear_world(profile: ProfileData | dict[str, Any]) -> EconomyResult:
        """Refund every placed block and empty the canvas."""
        new_profile = _copy_profile(profile)
        inventory = new_profile[const.DATA_PROFILE_INVENTORY]
        blocks = new_profile[const.DATA_PROFILE_WORLD_BLOCKS]
        for block in blocks:
            block_id = block[const.DATA_BLOCK_REWARD_ID]
            inventory[block_id] = int(inventory.get(block_id, 0)) + 1
        new_profile[const.DATA_PROFILE_WORLD_BLOCKS] = []
        return EconomyResult(ok=True, profile=new_profile, cells_changed=len(blocks))

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    @staticmethod
    def _check_canvas(
        profile: ProfileData | dict[str, Any],
        rules: RulesData | dict[str, Any],
        x: int,
        y: int,
        grid_size: int,
    ) -> EconomyResult | None:
        if not rules.get(const.DATA_RULE_ALLOW_BUILDER, True):
            return _rejected(profile, const.REASON_BUILDER_DISABLED)
        if not (0 <= x < grid_size and 0 <= y < grid_size):
            return _rejected(profile, const.REASON_OUT_OF_BOUNDS)
        return None

    @staticmethod
    def _grid(profile: dict[str, Any]) -> dict[tuple[int, int], dict[str, Any]]:
        """Snapshot of the canvas keyed by coordinate."""
        return {
            (block[const.DATA_BLOCK_X], block[const.DATA_BLOCK_Y]): block
            for block in profile[const.DATA_PROFILE_WORLD_BLOCKS]
        }

    @staticmethod
    def _refund_cell(profile: dict[str, Any], x: int, y: int) -> int:
        """Remove the block at (x, y) back into the inventory (in place).

        Returns 1 if a block was removed, 0 for an empty cell.
        """
        blocks = profile[const.DATA_PROFILE_WORLD_BLOCKS]
        for index, block in enumerate(blocks):
            if block[const.DATA_BLOCK_X] == x and block[const.DATA_BLOCK_Y] == y:
                inventory = profile[const.DATA_PROFILE_INVENTORY]
                block_id = block[const.DATA_BLOCK_REWARD_ID]
                inventory[block_id] = int(inventory.get(block_id, 0)) + 1
                del blocks[index]
                return 1
        return 0

    @staticmethod
    def _paint_cell(
        profile: dict[str, Any], x: int, y: int, reward: RewardData | dict[str, Any]
    ) -> None:
        """Place one unit of `reward` at an empty (x, y) (in place)."""
        reward_id = reward[const.DATA_INTERNAL_ID]
        inventory = profile[const.DATA_PROFILE_INVENTORY]
        inventory[reward_id] = int(inventory.get(reward_id, 0)) - 1
        profile[const.DATA_PROFILE_WORLD_BLOCKS].append(
            {
                const.DATA_BLOCK_X: x,
                const.DATA_BLOCK_Y: y,
                const.DATA_BLOCK_COLOR: reward.get(const.DATA_REWARD_BLOCK_COLOR)
                or const.DEFAULT_BLOCK_COLOR,
                const.DATA_BLOCK_REWARD_ID: reward_id,
                const.DATA_BLOCK_NAME: reward.get(const.DATA_REWARD_TITLE, ""),
            }
        )
