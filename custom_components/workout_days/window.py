"""Pure transitions over a loaded window of day plans.

Nothing here performs I/O; the managers fetch rows and then push the results
through these helpers so the ordering rules stay testable on their own.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta

from .const import DISPLAY_PAGE, HISTORY_LIMIT_DAYS
from .models import DayPlan


def sort_by_date(days: Iterable[DayPlan]) -> list[DayPlan]:
    return sorted(days, key=lambda d: d.date)


def rotate(days: Sequence[DayPlan], pivot_id: str) -> list[DayPlan]:
    """Start the list at pivot_id, followed by the later entries, then the earlier ones.

    The input is expected in ascending date order. An unknown pivot returns the
    list unchanged.
    """
    index = next((i for i, d in enumerate(days) if d.id == pivot_id), None)
    if index is None:
        return list(days)
    return [*days[index:], *days[:index]]


def find_by_date(days: Iterable[DayPlan], day: date) -> DayPlan | None:
    return next((d for d in days if d.date == day), None)


def find_by_id(days: Iterable[DayPlan], day_id: str) -> DayPlan | None:
    return next((d for d in days if d.id == day_id), None)


def merge_unique(existing: Iterable[DayPlan], fetched: Iterable[DayPlan]) -> list[DayPlan]:
    """Merge a fetch into the loaded set, de-duplicated by id, ascending by date.

    Fetched entries win over loaded ones with the same id.
    """
    seen: set[str] = set()
    merged: list[DayPlan] = []
    for day in [*fetched, *existing]:
        if day.id in seen:
            continue
        seen.add(day.id)
        merged.append(day)
    return sort_by_date(merged)


def upsert_by_date(days: Iterable[DayPlan], day: DayPlan) -> tuple[list[DayPlan], int]:
    """Insert or replace the entry for day.date; return the new list and its index.

    An existing entry for the date is replaced in place. A new date goes right
    after the closest earlier date (or before the closest later one), so a
    rotated window keeps its rotation and an ascending one stays ascending.
    """
    updated = list(days)
    for i, cur in enumerate(updated):
        if cur.date == day.date:
            updated[i] = day
            return updated, i

    earlier = [(d.date, i) for i, d in enumerate(updated) if d.date < day.date]
    later = [(d.date, i) for i, d in enumerate(updated) if d.date > day.date]
    if earlier:
        index = max(earlier)[1] + 1
    elif later:
        index = min(later)[1]
    else:
        index = len(updated)
    updated.insert(index, day)
    return updated, index


def replace_by_id(days: Iterable[DayPlan], day_id: str, day: DayPlan) -> list[DayPlan]:
    """Swap the entry with day_id for day, keeping its position; append when missing."""
    updated = list(days)
    for i, cur in enumerate(updated):
        if cur.id == day_id:
            updated[i] = day
            return updated
    updated.append(day)
    return updated


def remove_by_id(days: Iterable[DayPlan], day_id: str) -> list[DayPlan]:
    return [d for d in days if d.id != day_id]


@dataclass(frozen=True)
class DayWindow:
    """Snapshot of one owner's loaded days and what the UI may show of them."""

    days: tuple[DayPlan, ...] = ()
    display_limit: int = DISPLAY_PAGE
    selected_date: date | None = None
    dates_with_data: tuple[date, ...] = ()

    @property
    def displayed(self) -> list[DayPlan]:
        return list(self.days[: self.display_limit])

    @property
    def earliest_date(self) -> date | None:
        return min((d.date for d in self.days), default=None)

    @property
    def latest_date(self) -> date | None:
        return max((d.date for d in self.days), default=None)

    @property
    def has_more_days(self) -> bool:
        return len(self.days) > self.display_limit

    @property
    def can_add_day(self) -> bool:
        if not self.days:
            return True
        displayed = self.displayed
        if not displayed:
            return False
        return displayed[-1].id == self.days[-1].id

    def has_more_weeks(self, today: date) -> bool:
        """Older history may be loaded while the earliest day is within the history limit."""
        earliest = self.earliest_date
        if earliest is None:
            return False
        return earliest > today - timedelta(days=HISTORY_LIMIT_DAYS)

    def with_days(self, days: Iterable[DayPlan]) -> DayWindow:
        return replace(self, days=tuple(days))

    def with_display_limit(self, limit: int) -> DayWindow:
        return replace(self, display_limit=max(1, int(limit)))
