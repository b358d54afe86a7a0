from __future__ import annotations

from datetime import date

from custom_components.workout_days.models import DayKind, DayPlan, DayStatus
from custom_components.workout_days.status import can_change_status, toggle_complete, toggle_missed


def _workout(status: DayStatus = DayStatus.UNSET) -> DayPlan:
    return DayPlan(id="d1", date=date(2024, 1, 1), kind=DayKind.WORKOUT, status=status)


def test_toggle_complete_cycles_between_unset_and_completed() -> None:
    day = toggle_complete(_workout())
    assert day.status is DayStatus.COMPLETED
    assert day.completed and not day.missed
    assert toggle_complete(day).status is DayStatus.UNSET


def test_toggle_missed_clears_completed() -> None:
    day = toggle_missed(_workout(DayStatus.COMPLETED))
    assert day.status is DayStatus.MISSED
    assert day.missed and not day.completed


def test_completed_missed_completed_sequence_keeps_flags_exclusive() -> None:
    day = _workout()
    day = toggle_complete(day)
    day = toggle_missed(day)
    day = toggle_complete(day)
    assert day.status is DayStatus.COMPLETED
    row = day.to_row(owner_id="u1")
    assert row["completed"] is True
    assert row["missed"] is False


def test_rest_days_can_be_marked() -> None:
    rest = DayPlan(id="r1", date=date(2024, 1, 2), kind=DayKind.REST)
    assert can_change_status(rest)
    assert toggle_missed(rest).missed


def test_empty_day_toggles_are_noops() -> None:
    empty = DayPlan(id="e1", date=date(2024, 1, 3))
    assert not can_change_status(empty)
    assert toggle_complete(empty) is empty
    assert toggle_missed(empty) is empty


def test_empty_day_never_carries_a_status() -> None:
    day = DayPlan(id="e2", date=date(2024, 1, 4), status=DayStatus.COMPLETED)
    assert day.status is DayStatus.UNSET


def test_row_with_both_flags_reads_as_completed() -> None:
    day = DayPlan.from_row(
        {"id": "x", "date": "2024-01-05", "type": "workout", "completed": True, "missed": True}
    )
    assert day.status is DayStatus.COMPLETED
