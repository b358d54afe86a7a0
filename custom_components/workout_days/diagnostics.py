"""Diagnostics support for Workout Days."""

from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN


def _redact_id(value: Any) -> Any:
    if value is None:
        return None
    raw = str(value)
    if len(raw) <= 4:
        return "***"
    return f"{raw[:2]}***{raw[-2:]}"


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant,
    entry: ConfigEntry,
) -> dict[str, Any]:
    """Return diagnostics for a config entry, with user ids redacted."""
    coordinator = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    payload: dict[str, Any] = {
        "entry": {
            "entry_id": entry.entry_id,
            "title": entry.title,
            "version": entry.version,
            "data": dict(entry.data),
            "options": dict(entry.options),
        },
    }

    if coordinator is not None:
        data = coordinator.data or {}
        users = data.get("users", {}) if isinstance(data.get("users"), dict) else {}
        trainers = data.get("trainers", {}) if isinstance(data.get("trainers"), dict) else {}
        payload["coordinator"] = {
            "last_update_success": bool(getattr(coordinator, "last_update_success", False)),
            "last_exception": repr(getattr(coordinator, "last_exception", None)),
            "variant": data.get("variant"),
            "users": {
                _redact_id(uid): {
                    "loaded": state.get("total_loaded"),
                    "completed_workouts": state.get("completed_workouts"),
                    "error": state.get("error"),
                }
                for uid, state in users.items()
            },
            "trainers": {
                name: {
                    "loaded": state.get("total_loaded"),
                    "completed_workouts": state.get("completed_workouts"),
                    "max_active_days": state.get("max_active_days"),
                    "error": state.get("error"),
                }
                for name, state in trainers.items()
            },
            "competition": data.get("competition"),
        }

    return payload
