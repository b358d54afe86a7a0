"""Services for Workout Days."""

from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse

from .const import DOMAIN
from .errors import WorkoutDaysError

_LOGGER = logging.getLogger(__name__)

SERVICE_ADD_DAY = "add_day"
SERVICE_LOG_WEIGHT = "log_weight"
SERVICE_GET_DAYS = "get_days"

_TRAINER_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Required("trainer"): str})
_LOG_WEIGHT_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("trainer"): str,
        vol.Required("weight"): vol.Coerce(float),
        vol.Optional("date"): str,
        vol.Optional("notes"): str,
    }
)


async def async_register(hass: HomeAssistant) -> None:
    async def _coordinator_for_entry(entry_id: str):
        return hass.data.get(DOMAIN, {}).get(entry_id)

    async def _async_add_day(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = await _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        try:
            manager = await coordinator.async_trainer_manager(call.data["trainer"])
            day = await manager.async_add_next_day()
        except WorkoutDaysError as err:
            _LOGGER.warning("add_day failed for entry_id=%s: %s", entry_id, err)
            return {"ok": False, "error": err.code, "message": str(err)}
        return {"ok": True, "entry_id": entry_id, "day": day.as_dict(), "state": manager.state()}

    async def _async_log_weight(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = await _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        try:
            manager = await coordinator.async_trainer_manager(call.data["trainer"])
            tracker = await coordinator.async_weight_tracker(await manager.async_resolve_owner())
            entry = await tracker.async_log(call.data["weight"], call.data.get("date"), call.data.get("notes"))
        except WorkoutDaysError as err:
            _LOGGER.warning("log_weight failed for entry_id=%s: %s", entry_id, err)
            return {"ok": False, "error": err.code, "message": str(err)}
        return {"ok": True, "entry_id": entry_id, "entry": entry.as_dict(), "weight": tracker.state()}

    async def _async_get_days(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = await _coordinator_for_entry(entry_id)
        if coordinator is None:
            return {"ok": False, "error": "entry_not_found"}
        try:
            manager = await coordinator.async_trainer_manager(call.data["trainer"])
        except WorkoutDaysError as err:
            return {"ok": False, "error": err.code, "message": str(err)}
        return {"ok": True, "entry_id": entry_id, "state": manager.state()}

    if not hass.services.has_service(DOMAIN, SERVICE_ADD_DAY):
        hass.services.async_register(
            DOMAIN,
            SERVICE_ADD_DAY,
            _async_add_day,
            schema=_TRAINER_SCHEMA,
            supports_response=SupportsResponse.ONLY,
        )
    if not hass.services.has_service(DOMAIN, SERVICE_LOG_WEIGHT):
        hass.services.async_register(
            DOMAIN,
            SERVICE_LOG_WEIGHT,
            _async_log_weight,
            schema=_LOG_WEIGHT_SCHEMA,
            supports_response=SupportsResponse.ONLY,
        )
    if not hass.services.has_service(DOMAIN, SERVICE_GET_DAYS):
        hass.services.async_register(
            DOMAIN,
            SERVICE_GET_DAYS,
            _async_get_days,
            schema=_TRAINER_SCHEMA,
            supports_response=SupportsResponse.ONLY,
        )
