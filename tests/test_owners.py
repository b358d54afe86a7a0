from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from custom_components.workout_days.errors import NotFoundError
from custom_components.workout_days.owners import OwnerManagers
from custom_components.workout_days.row_store import RowStore


def _today(value: date):
    return lambda: value


async def _fill(rows: RowStore, owner: str, start: date, count: int) -> None:
    await rows.async_insert(
        "days",
        [
            {
                "owner_id": owner,
                "date": (start + timedelta(days=i)).isoformat(),
                "type": "workout",
                "exercises": ["Rows"],
                "completed": False,
                "missed": False,
                "archived": False,
            }
            for i in range(count)
        ],
    )


def _refresh_on_change(rows: RowStore, owners: OwnerManagers) -> list[asyncio.Future]:
    """Mirror the coordinator: every change to days schedules a full refresh."""
    scheduled: list[asyncio.Future] = []
    rows.async_subscribe("days", lambda _change: scheduled.append(asyncio.ensure_future(owners.async_refresh())))
    return scheduled


async def test_change_driven_refresh_keeps_the_loaded_window() -> None:
    rows = RowStore()
    owners = OwnerManagers(rows, trainer_names=[], max_active_days=7, today=_today(date(2024, 1, 1)))
    manager = await owners.async_user_manager("u1")
    await _fill(rows, "u1", date(2023, 12, 20), 12)
    scheduled = _refresh_on_change(rows, owners)

    await manager.async_load_previous_week()
    await manager.async_load_previous_week()
    for _ in range(9):
        await manager.async_add_next_day()
        await asyncio.gather(*scheduled)
    first = manager.days[0]
    await manager.async_toggle_complete(first.id)
    results = await asyncio.gather(*scheduled)

    assert len(scheduled) == 10
    assert manager.window.earliest_date == date(2023, 12, 20)
    assert manager.window.latest_date == date(2024, 1, 16)
    assert manager.days[0].completed
    state = results[-1]["users"]["u1"]
    assert state["total_loaded"] == 28
    assert state["display_limit"] == manager.window.display_limit


async def test_refresh_creates_trainers_weights_and_competition() -> None:
    rows = RowStore()
    owners = OwnerManagers(rows, trainer_names=["Anna", "Ben"], max_active_days=7, today=_today(date(2024, 1, 1)))

    payload = await owners.async_refresh()

    assert set(payload["trainers"]) == {"Anna", "Ben"}
    assert len(payload["weights"]) == 2
    assert payload["competition"]["leader"] == owners.competition().leader
    assert payload["users"] == {}


async def test_refresh_after_trainer_write_reflects_it() -> None:
    rows = RowStore()
    owners = OwnerManagers(rows, trainer_names=["Anna", "Ben"], max_active_days=10, today=_today(date(2024, 1, 1)))
    await owners.async_refresh()
    anna = await owners.async_trainer_manager("anna")
    scheduled = _refresh_on_change(rows, owners)

    await anna.async_add_next_day()
    results = await asyncio.gather(*scheduled)

    assert results[-1]["trainers"]["Anna"]["total_loaded"] == 8


async def test_trainer_lookup_is_case_insensitive_and_rejects_unknown() -> None:
    rows = RowStore()
    owners = OwnerManagers(rows, trainer_names=["Anna", "Ben"], max_active_days=7, today=_today(date(2024, 1, 1)))

    assert await owners.async_trainer_manager(" ANNA ") is await owners.async_trainer_manager("anna")
    with pytest.raises(NotFoundError):
        await owners.async_trainer_manager("Carl")
