"""Websocket state helpers."""

from __future__ import annotations

from typing import Any

from .const import DURATION_PRESETS, EXERCISE_SUGGESTIONS
from .date_utils import format_date, format_date_long, get_today, is_today, parse_date


def runtime_payload() -> dict[str, Any]:
    today = get_today()
    return {
        "today": today.isoformat(),
        "today_label": format_date(today),
        "today_label_long": format_date_long(today),
        "duration_presets": list(DURATION_PRESETS),
        "exercise_suggestions": list(EXERCISE_SUGGESTIONS),
    }


def public_state(state: dict[str, Any], *, runtime: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a stable public payload for the UI."""
    if not isinstance(state, dict):
        return {}
    payload = dict(state)
    days = []
    for day in payload.get("days") or []:
        if not isinstance(day, dict):
            continue
        day_date = parse_date(day.get("date"))
        days.append({**day, "label": format_date(day_date), "is_today": is_today(day_date)})
    payload["days"] = days
    payload["runtime"] = runtime or {}
    return payload
