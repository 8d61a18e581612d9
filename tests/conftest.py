"""Shared fixtures for QuestCraft tests."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.questcraft import const
from custom_components.questcraft.coordinator import QuestCraftCoordinator

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

TEST_ENTRY_ID = "test_entry_id"
TEST_SEED = "BRAVE-CREEPER-123"
TEST_HERO = "Alex"
TEST_PIN = "4321"


class MockClock:
    """Settable clock injected into SystemManager."""

    def __init__(self, start: datetime) -> None:
        """Start the clock at `start`."""
        self.current = start

    def __call__(self) -> datetime:
        """Return the simulated local time."""
        return self.current

    def set_hour(self, hour: int) -> None:
        """Move to `hour` on the current day."""
        self.current = self.current.replace(hour=hour, minute=0)

    def next_day(self, hour: int = 8) -> None:
        """Move to `hour` on the following day."""
        self.current = (self.current + timedelta(days=1)).replace(hour=hour, minute=0)


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry for one family."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title="Test World",
        data={
            const.CONF_FAMILY_NAME: "Test World",
            const.CONF_HERO_NAME: TEST_HERO,
            const.CONF_PARENT_PIN: TEST_PIN,
            const.CONF_WORLD_SEED: TEST_SEED,
        },
        options={const.CONF_SWEEP_INTERVAL: const.DEFAULT_SWEEP_INTERVAL},
        entry_id=TEST_ENTRY_ID,
        unique_id="test_world",
    )


@pytest.fixture
def mock_clock(hass: HomeAssistant) -> MockClock:
    """Return a clock frozen on a Monday morning in the configured time zone."""
    return MockClock(
        datetime(2025, 4, 7, 8, 0, tzinfo=dt_util.get_default_time_zone())
    )


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    mock_clock: MockClock,
) -> AsyncGenerator[MockConfigEntry, None]:
    """Set up the integration with a fresh family and the simulated clock."""
    mock_config_entry.add_to_hass(hass)
    with patch(
        "custom_components.questcraft.managers.system_manager.dt_util",
        SimpleNamespace(now=mock_clock),
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()
        yield mock_config_entry


@pytest.fixture
def coordinator(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> QuestCraftCoordinator:
    """Return the coordinator of the set-up family."""
    return hass.data[const.DOMAIN][init_integration.entry_id][const.COORDINATOR]


def make_task(**overrides: Any) -> dict[str, Any]:
    """Return a stored-shape task dict for engine tests."""
    task: dict[str, Any] = {
        const.DATA_INTERNAL_ID: "task-1",
        const.DATA_TASK_TITLE: "Brush teeth",
        const.DATA_TASK_DESCRIPTION: "",
        const.DATA_TASK_TIME_OF_DAY: const.TimeOfDay.MORNING,
        const.DATA_TASK_POINTS: 10,
        const.DATA_TASK_EMERALDS: 5,
        const.DATA_TASK_DIAMONDS: 0,
        const.DATA_TASK_STATUS: const.TaskStatus.PENDING,
        const.DATA_TASK_STEPS: [],
        const.DATA_TASK_DURATION_MINUTES: 5,
    }
    task.update(overrides)
    return task


def make_profile(**overrides: Any) -> dict[str, Any]:
    """Return a level 1 hero profile for engine tests."""
    profile: dict[str, Any] = {
        const.DATA_PROFILE_NAME: TEST_HERO,
        const.DATA_PROFILE_EMERALDS: 0,
        const.DATA_PROFILE_DIAMONDS: 0,
        const.DATA_PROFILE_HP: 100,
        const.DATA_PROFILE_MAX_HP: 100,
        const.DATA_PROFILE_LEVEL: 1,
        const.DATA_PROFILE_EXPERIENCE: 0,
        const.DATA_PROFILE_STREAK: 0,
        const.DATA_PROFILE_INVENTORY: {},
        const.DATA_PROFILE_WORLD_BLOCKS: [],
        const.DATA_PROFILE_RANK: "Steve (Novice)",
        const.DATA_PROFILE_SENSORY_MODE: const.SENSORY_MODE_STANDARD,
    }
    profile.update(overrides)
    return profile
