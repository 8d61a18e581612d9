"""Tests for QuestCraftStore - loading, defaults and save failures."""

from typing import Any
from unittest.mock import patch

from homeassistant.core import HomeAssistant
from homeassistant.util.file import WriteError
from homeassistant.util.json import SerializationError

from custom_components.questcraft import const
from custom_components.questcraft.store import QuestCraftStore

STORAGE_KEY = "questcraft_data_store_test"
WRITE_DATA = "homeassistant.helpers.storage.Store._async_write_data"


async def test_new_family_gets_default_structure(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    """No file yet: every section is created from the config answers."""
    store = QuestCraftStore(hass, STORAGE_KEY)
    await store.async_initialize(family_name="Smiths", hero_name="Sam", parent_pin="0000")

    data = store.data
    assert set(data) == {
        const.DATA_META,
        const.DATA_PROFILE,
        const.DATA_TASKS,
        const.DATA_REWARDS,
        const.DATA_SETTINGS,
        const.DATA_ACTIVITIES,
        const.DATA_MESSAGES,
        const.DATA_GOAL,
        const.DATA_PENALIZED_TODAY,
    }
    assert data[const.DATA_PROFILE][const.DATA_PROFILE_NAME] == "Sam"
    assert data[const.DATA_SETTINGS][const.DATA_SETTINGS_PARENT_PIN] == "0000"
    assert data[const.DATA_SETTINGS][const.DATA_SETTINGS_FAMILY_NAME] == "Smiths"
    assert data[const.DATA_META][const.DATA_META_SCHEMA_VERSION] == const.SCHEMA_VERSION


async def test_existing_file_is_loaded_and_completed(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    """Stored sections win; sections missing from an older file are added."""
    hass_storage[STORAGE_KEY] = {
        "version": const.STORAGE_VERSION,
        "minor_version": 1,
        "key": STORAGE_KEY,
        "data": {
            const.DATA_PROFILE: {const.DATA_PROFILE_NAME: "Stored", const.DATA_PROFILE_LEVEL: 7},
            const.DATA_TASKS: {},
        },
    }
    store = QuestCraftStore(hass, STORAGE_KEY)
    await store.async_initialize(hero_name="Ignored")

    assert store.data[const.DATA_PROFILE][const.DATA_PROFILE_LEVEL] == 7
    assert store.data[const.DATA_PROFILE][const.DATA_PROFILE_NAME] == "Stored"
    assert store.data[const.DATA_MESSAGES] == []
    assert const.DATA_GOAL in store.data


async def test_save_writes_snapshot(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    """A successful save reaches the storage backend."""
    store = QuestCraftStore(hass, STORAGE_KEY)
    await store.async_initialize()
    store.data[const.DATA_TASKS] = {"t1": {const.DATA_TASK_TITLE: "Read"}}

    assert await store.async_save()
    assert hass_storage[STORAGE_KEY]["data"][const.DATA_TASKS] == {
        "t1": {const.DATA_TASK_TITLE: "Read"}
    }


async def test_save_failure_returns_false(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    """A write error logged by the Store is reported through the return value."""
    store = QuestCraftStore(hass, STORAGE_KEY)
    await store.async_initialize()

    with patch(WRITE_DATA, side_effect=WriteError("disk full")):
        assert await store.async_save() is False
    assert STORAGE_KEY not in hass_storage

    assert await store.async_save() is True
    assert STORAGE_KEY in hass_storage


async def test_serialization_failure_returns_false(hass: HomeAssistant) -> None:
    """A snapshot the Store cannot encode is not reported as saved."""
    store = QuestCraftStore(hass, STORAGE_KEY)
    await store.async_initialize()

    with patch(WRITE_DATA, side_effect=SerializationError("bad value")):
        assert await store.async_save() is False


async def test_delete_storage_clears_cache(hass: HomeAssistant) -> None:
    """Deleting the file empties the in-memory snapshot."""
    store = QuestCraftStore(hass, STORAGE_KEY)
    await store.async_initialize()
    assert await store.async_save()

    await store.async_delete_storage()
    assert store.data == {}
