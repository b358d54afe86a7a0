"""Workout statistics over loaded day windows."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import DayKind, DayPlan

LEADER_A = "a"
LEADER_B = "b"
LEADER_TIE = "tie"


def completed_workout_count(days: Iterable[DayPlan]) -> int:
    """Completed workouts among active days. Rest days never count."""
    return sum(1 for d in days if d.kind is DayKind.WORKOUT and d.completed and not d.archived)


@dataclass(frozen=True)
class ProgressComparison:
    a: int
    b: int

    @property
    def ratio_a(self) -> float:
        return self.a / max(self.a, self.b, 1)

    @property
    def ratio_b(self) -> float:
        return self.b / max(self.a, self.b, 1)

    @property
    def leader(self) -> str:
        if self.a > self.b:
            return LEADER_A
        if self.b > self.a:
            return LEADER_B
        return LEADER_TIE

    def as_dict(self) -> dict[str, object]:
        return {
            "a": self.a,
            "b": self.b,
            "ratio_a": round(self.ratio_a, 4),
            "ratio_b": round(self.ratio_b, 4),
            "leader": self.leader,
        }


def compare_progress(count_a: int, count_b: int) -> ProgressComparison:
    return ProgressComparison(a=max(0, int(count_a)), b=max(0, int(count_b)))
