# File: services.py
"""Defines custom services for the QuestCraft integration.

These services are the action surface of a family: scripts, automations and
dashboards call them to drive the task lifecycle, the shop and the build
canvas. Every service accepts an optional config_entry_id selecting the
family; without it the first loaded family is used.

Business rejections (wrong state, insufficient funds, shop closed...) leave
the data untouched and surface as ServiceValidationError.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import QuestCraftCoordinator
from .helpers import flow_helpers as fh

_NON_NEGATIVE_INT = vol.All(vol.Coerce(int), vol.Range(min=0))
_NON_NEGATIVE_FLOAT = vol.All(vol.Coerce(float), vol.Range(min=0))


def _parent_pin(value: Any) -> str:
    """Validate a new parent PIN the same way the config flow does."""
    pin = cv.string(value)
    if not fh.is_valid_pin(pin):
        raise vol.Invalid(f"parent_pin must be {const.PARENT_PIN_LENGTH} digits")
    return pin


def _schema(fields: dict[Any, Any]) -> vol.Schema:
    """Service schema with the optional family selector."""
    return vol.Schema({vol.Optional(const.FIELD_CONFIG_ENTRY_ID): cv.string, **fields})


# --- Service Schemas ---
TASK_FIELDS = {
    vol.Optional(const.FIELD_DESCRIPTION): cv.string,
    vol.Optional(const.FIELD_TIME_OF_DAY): vol.In([str(t) for t in const.TimeOfDay]),
    vol.Optional(const.FIELD_POINTS): _NON_NEGATIVE_INT,
    vol.Optional(const.FIELD_EMERALDS): _NON_NEGATIVE_INT,
    vol.Optional(const.FIELD_DIAMONDS): _NON_NEGATIVE_INT,
    vol.Optional(const.FIELD_DURATION_MINUTES): _NON_NEGATIVE_INT,
    vol.Optional(const.FIELD_RECURRENCE): vol.In(const.RECURRENCES),
    vol.Optional(const.FIELD_STEPS): vol.All(cv.ensure_list, [cv.string]),
}

ADD_TASK_SCHEMA = _schema({vol.Required(const.FIELD_TITLE): cv.string, **TASK_FIELDS})

UPDATE_TASKS_SCHEMA = _schema(
    {vol.Required(const.FIELD_TASKS): vol.All(cv.ensure_list, [dict])}
)

TASK_ID_SCHEMA = _schema({vol.Required(const.FIELD_TASK_ID): cv.string})

TOGGLE_STEP_SCHEMA = _schema(
    {
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Required(const.FIELD_STEP_ID): cv.string,
    }
)

COMPLETE_TASK_SCHEMA = _schema(
    {
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Optional(const.FIELD_EVIDENCE_URL): cv.string,
        vol.Optional(const.FIELD_EVIDENCE_TYPE): vol.In(const.EVIDENCE_TYPES),
    }
)

REVIEW_TASK_SCHEMA = _schema(
    {
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Optional(const.FIELD_FEEDBACK): cv.string,
    }
)

REWARD_ID_SCHEMA = _schema({vol.Required(const.FIELD_REWARD_ID): cv.string})

ADD_REWARD_SCHEMA = _schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Required(const.FIELD_COST): _NON_NEGATIVE_INT,
        vol.Optional(const.FIELD_CURRENCY): vol.In([str(c) for c in const.Currency]),
        vol.Optional(const.FIELD_ICON): cv.string,
        vol.Optional(const.FIELD_REWARD_TYPE): vol.In([str(t) for t in const.RewardType]),
        vol.Optional(const.FIELD_BLOCK_COLOR): cv.string,
    }
)

ADJUST_CURRENCY_SCHEMA = _schema(
    {
        vol.Required(const.FIELD_AMOUNT): vol.Coerce(int),
        vol.Required(const.FIELD_KIND): vol.In([str(k) for k in const.AdjustKind]),
    }
)

UPDATE_PROFILE_SCHEMA = _schema(
    {
        vol.Optional(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_MAX_HP): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(const.FIELD_SENSORY_MODE): vol.In(const.SENSORY_MODES),
    }
)

UPDATE_SETTINGS_SCHEMA = _schema(
    {
        vol.Optional(const.FIELD_PARENT_PIN): _parent_pin,
        vol.Optional(const.FIELD_FAMILY_NAME): cv.string,
        vol.Optional(const.FIELD_ALLOW_SHOP): cv.boolean,
        vol.Optional(const.FIELD_ALLOW_BUILDER): cv.boolean,
        vol.Optional(const.FIELD_XP_MULTIPLIER): _NON_NEGATIVE_FLOAT,
        vol.Optional(const.FIELD_DAMAGE_MULTIPLIER): _NON_NEGATIVE_FLOAT,
        vol.Optional(const.FIELD_REQUIRE_EVIDENCE): cv.boolean,
    }
)

BLOCK_SCHEMA = _schema(
    {
        vol.Required(const.FIELD_X): vol.Coerce(int),
        vol.Required(const.FIELD_Y): vol.Coerce(int),
        vol.Required(const.FIELD_REWARD_ID): cv.string,
    }
)

SEND_MESSAGE_SCHEMA = _schema(
    {
        vol.Required(const.FIELD_TEXT): cv.string,
        vol.Optional(const.FIELD_SENDER, default=str(const.MessageSender.PLAYER)): vol.In(
            [str(s) for s in const.MessageSender]
        ),
    }
)

MARK_MESSAGES_READ_SCHEMA = _schema(
    {vol.Optional(const.FIELD_SENDER): vol.In([str(s) for s in const.MessageSender])}
)

UPDATE_GOAL_SCHEMA = _schema(
    {
        vol.Optional(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_TARGET_EMERALDS): _NON_NEGATIVE_INT,
        vol.Optional(const.FIELD_CURRENT_EMERALDS): _NON_NEGATIVE_INT,
    }
)

VERIFY_PARENT_PIN_SCHEMA = _schema({vol.Required(const.FIELD_PIN): cv.string})

EMPTY_SCHEMA = _schema({})

# Service field -> stored field
_TASK_FIELD_MAP = (
    (const.FIELD_TITLE, const.DATA_TASK_TITLE),
    (const.FIELD_DESCRIPTION, const.DATA_TASK_DESCRIPTION),
    (const.FIELD_TIME_OF_DAY, const.DATA_TASK_TIME_OF_DAY),
    (const.FIELD_POINTS, const.DATA_TASK_POINTS),
    (const.FIELD_EMERALDS, const.DATA_TASK_EMERALDS),
    (const.FIELD_DIAMONDS, const.DATA_TASK_DIAMONDS),
    (const.FIELD_DURATION_MINUTES, const.DATA_TASK_DURATION_MINUTES),
    (const.FIELD_RECURRENCE, const.DATA_TASK_RECURRENCE),
    (const.FIELD_STEPS, const.DATA_TASK_STEPS),
)
_REWARD_FIELD_MAP = (
    (const.FIELD_TITLE, const.DATA_REWARD_TITLE),
    (const.FIELD_DESCRIPTION, const.DATA_REWARD_DESCRIPTION),
    (const.FIELD_COST, const.DATA_REWARD_COST),
    (const.FIELD_CURRENCY, const.DATA_REWARD_CURRENCY),
    (const.FIELD_ICON, const.DATA_REWARD_ICON),
    (const.FIELD_REWARD_TYPE, const.DATA_REWARD_TYPE),
    (const.FIELD_BLOCK_COLOR, const.DATA_REWARD_BLOCK_COLOR),
)
_RULE_FIELD_MAP = (
    (const.FIELD_ALLOW_SHOP, const.DATA_RULE_ALLOW_SHOP),
    (const.FIELD_ALLOW_BUILDER, const.DATA_RULE_ALLOW_BUILDER),
    (const.FIELD_XP_MULTIPLIER, const.DATA_RULE_XP_MULTIPLIER),
    (const.FIELD_DAMAGE_MULTIPLIER, const.DATA_RULE_DAMAGE_MULTIPLIER),
    (const.FIELD_REQUIRE_EVIDENCE, const.DATA_RULE_REQUIRE_EVIDENCE),
)
_PROFILE_FIELD_MAP = (
    (const.FIELD_NAME, const.DATA_PROFILE_NAME),
    (const.FIELD_MAX_HP, const.DATA_PROFILE_MAX_HP),
    (const.FIELD_SENSORY_MODE, const.DATA_PROFILE_SENSORY_MODE),
)
_GOAL_FIELD_MAP = (
    (const.FIELD_TITLE, const.DATA_GOAL_TITLE),
    (const.FIELD_TARGET_EMERALDS, const.DATA_GOAL_TARGET_EMERALDS),
    (const.FIELD_CURRENT_EMERALDS, const.DATA_GOAL_CURRENT_EMERALDS),
)


def _map_fields(
    data: dict[str, Any], field_map: tuple[tuple[str, str], ...]
) -> dict[str, Any]:
    return {data_key: data[field] for field, data_key in field_map if field in data}


def get_coordinator(hass: HomeAssistant, call: ServiceCall) -> QuestCraftCoordinator:
    """Return the coordinator of the family a service call targets.

    Raises:
        HomeAssistantError: translation key "no_entry" when no family is loaded
            or the requested config_entry_id is unknown
    """
    entries: dict[str, Any] = hass.data.get(const.DOMAIN, {})
    entry_id = call.data.get(const.FIELD_CONFIG_ENTRY_ID) or next(iter(entries), None)
    if entry_id is None or entry_id not in entries:
        const.LOGGER.warning(
            "Service %s: no loaded QuestCraft family (entry: %s)", call.service, entry_id
        )
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NO_ENTRY,
        )
    return entries[entry_id][const.COORDINATOR]


def _raise_if_rejected(ok: bool, action: str) -> None:
    if not ok:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_ACTION_REJECTED,
            translation_placeholders={"action": action},
        )


def async_setup_services(hass: HomeAssistant) -> None:
    """Register QuestCraft services (once for all families)."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_ADD_TASK):
        return

    # --- Tasks ---

    async def handle_add_task(call: ServiceCall) -> ServiceResponse:
        """Handle creating a task."""
        coordinator = get_coordinator(hass, call)
        task_id = await coordinator.add_task(_map_fields(call.data, _TASK_FIELD_MAP))
        const.LOGGER.info("Task '%s' added (%s)", call.data[const.FIELD_TITLE], task_id)
        return {const.FIELD_TASK_ID: task_id}

    async def handle_delete_task(call: ServiceCall) -> None:
        """Handle deleting a task."""
        coordinator = get_coordinator(hass, call)
        await coordinator.delete_task(call.data[const.FIELD_TASK_ID])

    async def handle_update_tasks(call: ServiceCall) -> None:
        """Handle replacing the task board."""
        coordinator = get_coordinator(hass, call)
        await coordinator.update_tasks(list(call.data[const.FIELD_TASKS]))

    async def handle_start_task(call: ServiceCall) -> None:
        """Handle the hero starting a task."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.start_task(call.data[const.FIELD_TASK_ID])
        _raise_if_rejected(ok, const.SERVICE_START_TASK)

    async def handle_toggle_step(call: ServiceCall) -> None:
        """Handle ticking a checklist step."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.toggle_step(
            call.data[const.FIELD_TASK_ID], call.data[const.FIELD_STEP_ID]
        )
        _raise_if_rejected(ok, const.SERVICE_TOGGLE_STEP)

    async def handle_complete_task(call: ServiceCall) -> None:
        """Handle the hero submitting a task with evidence."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.submit_evidence(
            call.data[const.FIELD_TASK_ID],
            call.data.get(const.FIELD_EVIDENCE_URL),
            call.data.get(const.FIELD_EVIDENCE_TYPE),
        )
        _raise_if_rejected(ok, const.SERVICE_COMPLETE_TASK)

    async def handle_approve_task(call: ServiceCall) -> None:
        """Handle the parent approving a submitted task."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.approve_task(
            call.data[const.FIELD_TASK_ID], call.data.get(const.FIELD_FEEDBACK)
        )
        _raise_if_rejected(ok, const.SERVICE_APPROVE_TASK)

    async def handle_reject_task(call: ServiceCall) -> None:
        """Handle the parent rejecting a submitted task."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.reject_task(
            call.data[const.FIELD_TASK_ID], call.data.get(const.FIELD_FEEDBACK)
        )
        _raise_if_rejected(ok, const.SERVICE_REJECT_TASK)

    # --- Economy ---

    async def handle_buy_reward(call: ServiceCall) -> None:
        """Handle the hero buying a reward."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.buy_reward(call.data[const.FIELD_REWARD_ID])
        _raise_if_rejected(ok, const.SERVICE_BUY_REWARD)

    async def handle_adjust_currency(call: ServiceCall) -> None:
        """Handle a manual parent adjustment."""
        coordinator = get_coordinator(hass, call)
        await coordinator.adjust_currency(
            call.data[const.FIELD_AMOUNT], call.data[const.FIELD_KIND]
        )

    async def handle_add_reward(call: ServiceCall) -> ServiceResponse:
        """Handle creating a shop reward."""
        coordinator = get_coordinator(hass, call)
        reward_id = await coordinator.add_reward(
            _map_fields(call.data, _REWARD_FIELD_MAP)
        )
        return {const.FIELD_REWARD_ID: reward_id}

    async def handle_delete_reward(call: ServiceCall) -> None:
        """Handle deleting a shop reward."""
        coordinator = get_coordinator(hass, call)
        await coordinator.delete_reward(call.data[const.FIELD_REWARD_ID])

    async def handle_place_block(call: ServiceCall) -> None:
        """Handle painting or erasing one canvas cell."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.place_block(
            call.data[const.FIELD_X],
            call.data[const.FIELD_Y],
            call.data[const.FIELD_REWARD_ID],
        )
        _raise_if_rejected(ok, const.SERVICE_PLACE_BLOCK)

    async def handle_fill_blocks(call: ServiceCall) -> None:
        """Handle flood-filling a canvas region."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.fill_blocks(
            call.data[const.FIELD_X],
            call.data[const.FIELD_Y],
            call.data[const.FIELD_REWARD_ID],
        )
        _raise_if_rejected(ok, const.SERVICE_FILL_BLOCKS)

    async def handle_clear_world(call: ServiceCall) -> None:
        """Handle clearing the canvas."""
        coordinator = get_coordinator(hass, call)
        await coordinator.clear_world()

    # --- Profile, settings, messages, goal ---

    async def handle_update_profile(call: ServiceCall) -> None:
        """Handle editing the hero profile."""
        coordinator = get_coordinator(hass, call)
        ok = await coordinator.update_profile(_map_fields(call.data, _PROFILE_FIELD_MAP))
        _raise_if_rejected(ok, const.SERVICE_UPDATE_PROFILE)

    async def handle_update_settings(call: ServiceCall) -> None:
        """Handle editing the PIN, family name and rules."""
        coordinator = get_coordinator(hass, call)
        await coordinator.update_settings(
            parent_pin=call.data.get(const.FIELD_PARENT_PIN),
            family_name=call.data.get(const.FIELD_FAMILY_NAME),
            rules=_map_fields(call.data, _RULE_FIELD_MAP),
        )

    async def handle_verify_parent_pin(call: ServiceCall) -> ServiceResponse:
        """Handle checking a PIN against the stored parent PIN."""
        coordinator = get_coordinator(hass, call)
        return {const.ATTR_VALID: coordinator.verify_parent_pin(call.data[const.FIELD_PIN])}

    async def handle_send_message(call: ServiceCall) -> None:
        """Handle posting a message."""
        coordinator = get_coordinator(hass, call)
        await coordinator.send_message(
            call.data[const.FIELD_TEXT], call.data[const.FIELD_SENDER]
        )

    async def handle_mark_messages_read(call: ServiceCall) -> None:
        """Handle marking messages read."""
        coordinator = get_coordinator(hass, call)
        await coordinator.mark_messages_read(call.data.get(const.FIELD_SENDER))

    async def handle_update_goal(call: ServiceCall) -> None:
        """Handle editing the family savings goal."""
        coordinator = get_coordinator(hass, call)
        await coordinator.update_goal(_map_fields(call.data, _GOAL_FIELD_MAP))

    async def handle_run_scheduler(call: ServiceCall) -> None:
        """Handle running the daily reset and penalty sweep now."""
        coordinator = get_coordinator(hass, call)
        await coordinator.async_run_scheduler()

    # --- Registration ---

    services: list[tuple[str, Any, vol.Schema, SupportsResponse]] = [
        (const.SERVICE_ADD_TASK, handle_add_task, ADD_TASK_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_DELETE_TASK, handle_delete_task, TASK_ID_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_UPDATE_TASKS, handle_update_tasks, UPDATE_TASKS_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_START_TASK, handle_start_task, TASK_ID_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_TOGGLE_STEP, handle_toggle_step, TOGGLE_STEP_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_COMPLETE_TASK, handle_complete_task, COMPLETE_TASK_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_APPROVE_TASK, handle_approve_task, REVIEW_TASK_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_REJECT_TASK, handle_reject_task, REVIEW_TASK_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_BUY_REWARD, handle_buy_reward, REWARD_ID_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_ADJUST_CURRENCY, handle_adjust_currency, ADJUST_CURRENCY_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_ADD_REWARD, handle_add_reward, ADD_REWARD_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_DELETE_REWARD, handle_delete_reward, REWARD_ID_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_PLACE_BLOCK, handle_place_block, BLOCK_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_FILL_BLOCKS, handle_fill_blocks, BLOCK_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_CLEAR_WORLD, handle_clear_world, EMPTY_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_UPDATE_PROFILE, handle_update_profile, UPDATE_PROFILE_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_UPDATE_SETTINGS, handle_update_settings, UPDATE_SETTINGS_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_VERIFY_PARENT_PIN, handle_verify_parent_pin, VERIFY_PARENT_PIN_SCHEMA, SupportsResponse.ONLY),
        (const.SERVICE_SEND_MESSAGE, handle_send_message, SEND_MESSAGE_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_MARK_MESSAGES_READ, handle_mark_messages_read, MARK_MESSAGES_READ_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_UPDATE_GOAL, handle_update_goal, UPDATE_GOAL_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_RUN_SCHEDULER, handle_run_scheduler, EMPTY_SCHEMA, SupportsResponse.NONE),
    ]
    for service, handler, schema, supports_response in services:
        hass.services.async_register(
            const.DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=supports_response,
        )

    const.LOGGER.info("QuestCraft services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister QuestCraft services when unloading the integration."""
    services = [
        const.SERVICE_ADD_TASK,
        const.SERVICE_DELETE_TASK,
        const.SERVICE_UPDATE_TASKS,
        const.SERVICE_START_TASK,
        const.SERVICE_TOGGLE_STEP,
        const.SERVICE_COMPLETE_TASK,
        const.SERVICE_APPROVE_TASK,
        const.SERVICE_REJECT_TASK,
        const.SERVICE_BUY_REWARD,
        const.SERVICE_ADJUST_CURRENCY,
        const.SERVICE_ADD_REWARD,
        const.SERVICE_DELETE_REWARD,
        const.SERVICE_PLACE_BLOCK,
        const.SERVICE_FILL_BLOCKS,
        const.SERVICE_CLEAR_WORLD,
        const.SERVICE_UPDATE_PROFILE,
        const.SERVICE_UPDATE_SETTINGS,
        const.SERVICE_VERIFY_PARENT_PIN,
        const.SERVICE_SEND_MESSAGE,
        const.SERVICE_MARK_MESSAGES_READ,
        const.SERVICE_UPDATE_GOAL,
        const.SERVICE_RUN_SCHEDULER,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("QuestCraft services have been unregistered")
