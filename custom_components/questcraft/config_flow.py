# File: config_flow.py
"""Config flow for the QuestCraft integration.

Each config entry is one family: a hero, a parent PIN and a world seed. The
slugified family name is the entry's unique id, so a family name can be
added only once.
The options flow tunes the scheduler heartbeat.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.util import slugify

from . import const, data_builders as db
from .helpers import flow_helpers as fh


class QuestCraftConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config flow creating one QuestCraft family per entry."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Ask for the family name, the hero's name and the parent PIN."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_family_inputs(user_input)
            if not errors:
                family_name = user_input[const.CONF_FAMILY_NAME].strip()
                await self.async_set_unique_id(slugify(family_name))
                self._abort_if_unique_id_configured()

                world_seed = db.generate_world_seed()
                const.LOGGER.info(
                    "Creating QuestCraft family '%s' with seed %s",
                    family_name,
                    world_seed,
                )
                return self.async_create_entry(
                    title=family_name,
                    data={
                        const.CONF_FAMILY_NAME: family_name,
                        const.CONF_HERO_NAME: user_input[const.CONF_HERO_NAME].strip(),
                        const.CONF_PARENT_PIN: user_input[const.CONF_PARENT_PIN],
                        const.CONF_WORLD_SEED: world_seed,
                    },
                    options={const.CONF_SWEEP_INTERVAL: const.DEFAULT_SWEEP_INTERVAL},
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_family_schema(user_input),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> QuestCraftOptionsFlowHandler:
        """Return the options flow handler for this integration."""
        return QuestCraftOptionsFlowHandler()


class QuestCraftOptionsFlowHandler(config_entries.OptionsFlow):
    """Options flow for the scheduler heartbeat."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Edit the penalty sweep interval (seconds)."""
        if user_input is not None:
            return self.async_create_entry(
                data={
                    const.CONF_SWEEP_INTERVAL: int(user_input[const.CONF_SWEEP_INTERVAL])
                }
            )

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_scheduler_schema(dict(self.config_entry.options)),
        )
