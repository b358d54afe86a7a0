from __future__ import annotations

from datetime import date

import pytest

from custom_components.workout_days.errors import InvalidInputError, NotFoundError
from custom_components.workout_days.row_store import RowStore
from custom_components.workout_days.weight import WeightTracker, validate_weight


@pytest.mark.parametrize("value", [0, -1, "abc", None, float("nan")])
def test_validate_weight_rejects(value) -> None:
    with pytest.raises(InvalidInputError):
        validate_weight(value)


def test_validate_weight_rounds() -> None:
    assert validate_weight("80.456") == 80.46


async def test_logging_same_date_replaces_entry() -> None:
    rows = RowStore()
    tracker = WeightTracker(rows, "u1", today=lambda: date(2024, 1, 10))

    await tracker.async_log(80, "2024-01-09")
    await tracker.async_log(81.5, "2024-01-09", notes="after dinner")

    assert len(tracker.entries) == 1
    assert tracker.latest.weight == 81.5
    assert await rows.async_count("weight_entries") == 1


async def test_change_between_latest_entries() -> None:
    rows = RowStore()
    tracker = WeightTracker(rows, "u1", today=lambda: date(2024, 1, 10))
    await tracker.async_log(80, "2024-01-01")
    await tracker.async_log(78, "2024-01-08")

    assert await tracker.async_fetch()
    assert tracker.latest.date == date(2024, 1, 8)
    assert tracker.change == {"amount": -2.0, "percentage": -2.5}


async def test_future_dates_are_rejected_before_writing() -> None:
    rows = RowStore()
    tracker = WeightTracker(rows, "u1", today=lambda: date(2024, 1, 10))

    with pytest.raises(InvalidInputError):
        await tracker.async_log(80, "2024-01-11")
    assert await rows.async_count("weight_entries") == 0


async def test_delete_entry() -> None:
    rows = RowStore()
    tracker = WeightTracker(rows, "u1", today=lambda: date(2024, 1, 10))
    entry = await tracker.async_log(80)

    await tracker.async_delete(entry.id)
    assert tracker.entries == []
    with pytest.raises(NotFoundError):
        await tracker.async_delete(entry.id)
