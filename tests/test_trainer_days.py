from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from custom_components.workout_days.archive import ArchivalPolicy, ArchiveView
from custom_components.workout_days.day_manager import TrainerDayManager
from custom_components.workout_days.errors import NotFoundError
from custom_components.workout_days.models import DayKind
from custom_components.workout_days.row_store import RowStore
from custom_components.workout_days.stats import compare_progress


class ArchiveFailingRowStore(RowStore):
    async def async_update(self, table, patch, *, eq):
        if patch.get("archived") is True:
            raise OSError("network down")
        return await super().async_update(table, patch, eq=eq)


def _today():
    return date(2024, 1, 1)


async def test_trainer_is_created_once_by_name() -> None:
    rows = RowStore()
    first = TrainerDayManager(rows, "Alex", today=_today)
    second = TrainerDayManager(rows, " alex ", today=_today)

    assert await first.async_resolve_owner() == await second.async_resolve_owner()
    assert await rows.async_count("trainers") == 1


async def test_add_at_ceiling_archives_oldest() -> None:
    rows = RowStore()
    manager = TrainerDayManager(rows, "Alex", today=_today)
    await manager.async_load_initial()
    assert len(manager.days) == 7

    day = await manager.async_add_next_day()

    assert day.date == date(2024, 1, 8)
    assert [d.date for d in manager.days][0] == date(2024, 1, 2)
    assert len(manager.days) == 7
    assert await rows.async_count("days", eq={"owner_id": manager.owner_id, "archived": False}) == 7

    archived = await ArchiveView(rows, manager.owner_id).async_fetch()
    assert [d.date for d in archived] == [date(2024, 1, 1)]


async def test_configured_ceiling_is_respected() -> None:
    rows = RowStore()
    manager = TrainerDayManager(rows, "Alex", policy=ArchivalPolicy(max_active_days=10), today=_today)
    await manager.async_load_initial()

    await manager.async_add_next_day()

    assert len(manager.days) == 8
    assert manager.state()["max_active_days"] == 10
    assert manager.state()["has_more_weeks"] is False


async def test_archival_failure_still_adds_day() -> None:
    rows = ArchiveFailingRowStore()
    manager = TrainerDayManager(rows, "Alex", today=_today)
    await manager.async_load_initial()

    day = await manager.async_add_next_day()

    assert day.date == date(2024, 1, 8)
    assert len(manager.days) == 8
    assert await rows.async_count("days", eq={"archived": False}) == 8


async def test_archive_delete_only_touches_archived_days() -> None:
    rows = RowStore()
    manager = TrainerDayManager(rows, "Alex", today=_today)
    await manager.async_load_initial()
    await manager.async_add_next_day()
    view = ArchiveView(rows, manager.owner_id)
    archived = await view.async_fetch()

    with pytest.raises(NotFoundError):
        await view.async_delete(manager.days[0].id)

    await view.async_delete(archived[0].id)
    assert await view.async_fetch() == []


async def test_completed_count_follows_toggles() -> None:
    rows = RowStore()
    manager = TrainerDayManager(rows, "Alex", today=_today)
    await manager.async_load_initial()
    planned = await manager.async_save_day(replace(manager.days[0], kind=DayKind.WORKOUT, exercises=("Squats",)))

    await manager.async_toggle_complete(planned.id)
    assert manager.completed_workout_count == 1

    await manager.async_toggle_complete(planned.id)
    assert manager.completed_workout_count == 0

    empty = manager.days[1]
    assert await manager.async_toggle_complete(empty.id) is empty
    assert manager.completed_workout_count == 0


async def test_two_trainers_compare() -> None:
    rows = RowStore()
    alex = TrainerDayManager(rows, "Alex", today=_today)
    sam = TrainerDayManager(rows, "Sam", today=_today)
    for manager, workouts in ((alex, 1), (sam, 2)):
        await manager.async_load_initial()
        for day in manager.days[:workouts]:
            saved = await manager.async_save_day(replace(day, kind=DayKind.WORKOUT))
            await manager.async_toggle_complete(saved.id)

    result = compare_progress(alex.completed_workout_count, sam.completed_workout_count)
    assert result.leader == "b"
    assert result.ratio_a == pytest.approx(0.5)
