from __future__ import annotations

import pytest

from custom_components.workout_days.errors import ConflictError
from custom_components.workout_days.row_store import EVENT_DELETE, EVENT_INSERT, RowChange, RowStore


async def test_insert_is_atomic_on_unique_conflict() -> None:
    rows = RowStore()
    await rows.async_insert("days", [{"owner_id": "u1", "date": "2024-01-01"}])
    with pytest.raises(ConflictError):
        await rows.async_insert(
            "days",
            [
                {"owner_id": "u1", "date": "2024-01-02"},
                {"owner_id": "u1", "date": "2024-01-01"},
            ],
        )
    assert await rows.async_count("days") == 1


async def test_upsert_merges_on_conflict_columns() -> None:
    rows = RowStore()
    first = await rows.async_upsert("days", {"owner_id": "u1", "date": "2024-01-01", "type": "rest"}, on_conflict=("owner_id", "date"))
    second = await rows.async_upsert("days", {"owner_id": "u1", "date": "2024-01-01", "type": "workout"}, on_conflict=("owner_id", "date"))
    assert first["id"] == second["id"]
    assert second["type"] == "workout"

    kept = await rows.async_upsert(
        "days",
        {"owner_id": "u1", "date": "2024-01-01", "type": "empty"},
        on_conflict=("owner_id", "date"),
        ignore_duplicates=True,
    )
    assert kept["type"] == "workout"


async def test_select_filters_and_orders() -> None:
    rows = RowStore()
    await rows.async_insert(
        "days",
        [{"owner_id": "u1", "date": f"2024-01-0{i}"} for i in (3, 1, 2)] + [{"owner_id": "u2", "date": "2024-01-01"}],
    )
    found = await rows.async_select(
        "days",
        eq={"owner_id": "u1"},
        gte={"date": "2024-01-02"},
        order_by="date",
        descending=True,
        columns=("date",),
    )
    assert found == [{"date": "2024-01-03"}, {"date": "2024-01-02"}]


async def test_subscriptions_filter_and_unsubscribe() -> None:
    rows = RowStore()
    seen: list[RowChange] = []
    unsub = rows.async_subscribe("days", seen.append, eq={"owner_id": "u1"})

    await rows.async_insert("days", [{"owner_id": "u1", "date": "2024-01-01"}])
    await rows.async_insert("days", [{"owner_id": "u2", "date": "2024-01-01"}])
    await rows.async_delete("days", eq={"owner_id": "u1"})
    assert [c.event for c in seen] == [EVENT_INSERT, EVENT_DELETE]
    assert seen[1].old is not None and seen[1].new is None

    unsub()
    await rows.async_insert("days", [{"owner_id": "u1", "date": "2024-01-02"}])
    assert len(seen) == 2


async def test_failing_listener_does_not_break_writes() -> None:
    rows = RowStore()

    def _boom(_change: RowChange) -> None:
        raise RuntimeError("listener failed")

    rows.async_subscribe("weight_entries", _boom)
    inserted = await rows.async_insert("weight_entries", [{"owner_id": "u1", "date": "2024-01-01", "weight": 80}])
    assert inserted[0]["id"]
