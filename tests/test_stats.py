from __future__ import annotations

from datetime import date

import pytest

from custom_components.workout_days.models import DayKind, DayPlan, DayStatus
from custom_components.workout_days.stats import compare_progress, completed_workout_count


def test_completed_count_ignores_rest_and_archived() -> None:
    days = [
        DayPlan(id="a", date=date(2024, 1, 1), kind=DayKind.WORKOUT, status=DayStatus.COMPLETED),
        DayPlan(id="b", date=date(2024, 1, 2), kind=DayKind.REST, status=DayStatus.COMPLETED),
        DayPlan(id="c", date=date(2024, 1, 3), kind=DayKind.WORKOUT, status=DayStatus.COMPLETED, archived=True),
        DayPlan(id="d", date=date(2024, 1, 4), kind=DayKind.WORKOUT, status=DayStatus.MISSED),
    ]
    assert completed_workout_count(days) == 1


def test_compare_progress_ratios() -> None:
    result = compare_progress(3, 5)
    assert result.ratio_a == pytest.approx(0.6)
    assert result.ratio_b == pytest.approx(1.0)
    assert result.leader == "b"


def test_compare_progress_with_no_workouts() -> None:
    result = compare_progress(0, 0)
    assert result.ratio_a == 0
    assert result.ratio_b == 0
    assert result.leader == "tie"
    assert result.as_dict()["leader"] == "tie"
