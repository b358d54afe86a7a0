"""Config flow for Workout Days."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
    CONF_MAX_ACTIVE_DAYS,
    CONF_NAME,
    CONF_TRAINER_A,
    CONF_TRAINER_B,
    CONF_VARIANT,
    DEFAULT_MAX_ACTIVE_DAYS,
    DEFAULT_NAME,
    DEFAULT_TRAINER_A,
    DEFAULT_TRAINER_B,
    DEFAULT_VARIANT,
    DOMAIN,
    VARIANT_CHOICES,
)

_MAX_ACTIVE_DAYS = vol.All(vol.Coerce(int), vol.Range(min=1, max=60))


def _clean(user_input: dict[str, Any]) -> tuple[dict[str, Any], dict[str, str]]:
    """Normalize submitted values; return (data, errors)."""
    errors: dict[str, str] = {}
    trainer_a = str(user_input.get(CONF_TRAINER_A, DEFAULT_TRAINER_A)).strip() or DEFAULT_TRAINER_A
    trainer_b = str(user_input.get(CONF_TRAINER_B, DEFAULT_TRAINER_B)).strip() or DEFAULT_TRAINER_B
    if trainer_a.lower() == trainer_b.lower():
        errors[CONF_TRAINER_B] = "duplicate_trainer"
    data = {
        CONF_NAME: str(user_input.get(CONF_NAME, DEFAULT_NAME)).strip() or DEFAULT_NAME,
        CONF_VARIANT: user_input.get(CONF_VARIANT, DEFAULT_VARIANT),
        CONF_TRAINER_A: trainer_a,
        CONF_TRAINER_B: trainer_b,
        CONF_MAX_ACTIVE_DAYS: int(user_input.get(CONF_MAX_ACTIVE_DAYS, DEFAULT_MAX_ACTIVE_DAYS)),
    }
    return data, errors


class WorkoutDaysConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Workout Days."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        errors: dict[str, str] = {}
        if user_input is not None:
            data, errors = _clean(user_input)
            if not errors:
                await self.async_set_unique_id(data[CONF_NAME].lower())
                self._abort_if_unique_id_configured()
                return self.async_create_entry(title=data[CONF_NAME], data=data)

        schema = vol.Schema(
            {
                vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
                vol.Required(CONF_VARIANT, default=DEFAULT_VARIANT): vol.In(VARIANT_CHOICES),
                vol.Optional(CONF_TRAINER_A, default=DEFAULT_TRAINER_A): str,
                vol.Optional(CONF_TRAINER_B, default=DEFAULT_TRAINER_B): str,
                vol.Optional(CONF_MAX_ACTIVE_DAYS, default=DEFAULT_MAX_ACTIVE_DAYS): _MAX_ACTIVE_DAYS,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return WorkoutDaysOptionsFlow(config_entry)


class WorkoutDaysOptionsFlow(config_entries.OptionsFlow):
    """Handle options for Workout Days."""

    def __init__(self, config_entry) -> None:
        self._entry = config_entry

    def _current(self, key: str, default: Any) -> Any:
        return self._entry.options.get(key, self._entry.data.get(key, default))

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        errors: dict[str, str] = {}
        if user_input is not None:
            data, errors = _clean(user_input)
            if not errors:
                return self.async_create_entry(title="", data=data)

        schema = vol.Schema(
            {
                vol.Required(CONF_NAME, default=str(self._current(CONF_NAME, DEFAULT_NAME))): str,
                vol.Required(CONF_VARIANT, default=self._current(CONF_VARIANT, DEFAULT_VARIANT)): vol.In(
                    VARIANT_CHOICES
                ),
                vol.Optional(CONF_TRAINER_A, default=str(self._current(CONF_TRAINER_A, DEFAULT_TRAINER_A))): str,
                vol.Optional(CONF_TRAINER_B, default=str(self._current(CONF_TRAINER_B, DEFAULT_TRAINER_B))): str,
                vol.Optional(
                    CONF_MAX_ACTIVE_DAYS,
                    default=int(self._current(CONF_MAX_ACTIVE_DAYS, DEFAULT_MAX_ACTIVE_DAYS)),
                ): _MAX_ACTIVE_DAYS,
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema, errors=errors)
