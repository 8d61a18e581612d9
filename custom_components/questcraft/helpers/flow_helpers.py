# File: helpers/flow_helpers.py
"""Helpers for the QuestCraft Config and Options flow.

Provides schema builders and UI validation for creating a family and for
tuning the scheduler.

### Layer 1: Schema Building
**Function:** `build_<step>_schema(default) -> vol.Schema`

### Layer 2: UI Validation
**Function:** `validate_<step>_inputs(user_input) -> errors_dict`
**Returns:** Error dict (empty = no errors)
"""

from __future__ import annotations

from typing import Any

from homeassistant.helpers import selector
import voluptuous as vol

from .. import const

# ----------------------------------------------------------------------------------
# FAMILY SCHEMA (config flow user step)
# ----------------------------------------------------------------------------------


def build_family_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build the schema for creating a family."""
    default = default or {}
    return vol.Schema(
        {
            vol.Required(
                const.CONF_FAMILY_NAME,
                default=default.get(const.CONF_FAMILY_NAME, const.DEFAULT_FAMILY_NAME),
            ): str,
            vol.Required(
                const.CONF_HERO_NAME,
                default=default.get(const.CONF_HERO_NAME, const.DEFAULT_HERO_NAME),
            ): str,
            vol.Required(
                const.CONF_PARENT_PIN,
                default=default.get(const.CONF_PARENT_PIN, const.DEFAULT_PARENT_PIN),
            ): str,
        }
    )


def validate_family_inputs(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate the family creation form.

    Returns:
        Dictionary of errors keyed by field (empty if validation passes).
    """
    errors: dict[str, str] = {}
    if not str(user_input.get(const.CONF_FAMILY_NAME, "")).strip():
        errors[const.CONF_FAMILY_NAME] = "invalid_family_name"
    if not str(user_input.get(const.CONF_HERO_NAME, "")).strip():
        errors[const.CONF_HERO_NAME] = "invalid_hero_name"
    if not is_valid_pin(str(user_input.get(const.CONF_PARENT_PIN, ""))):
        errors[const.CONF_PARENT_PIN] = const.TRANS_KEY_ERROR_INVALID_PIN
    return errors


def is_valid_pin(pin: str) -> bool:
    """Return True for a PIN of exactly PARENT_PIN_LENGTH digits."""
    return len(pin) == const.PARENT_PIN_LENGTH and pin.isdigit()


# ----------------------------------------------------------------------------------
# SCHEDULER SCHEMA (options flow init step)
# ----------------------------------------------------------------------------------


def build_scheduler_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build the options schema for the penalty sweep interval."""
    default = default or {}
    return vol.Schema(
        {
            vol.Required(
                const.CONF_SWEEP_INTERVAL,
                default=default.get(
                    const.CONF_SWEEP_INTERVAL, const.DEFAULT_SWEEP_INTERVAL
                ),
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=const.MIN_SWEEP_INTERVAL,
                    max=const.MAX_SWEEP_INTERVAL,
                    step=1,
                    unit_of_measurement="s",
                )
            ),
        }
    )
