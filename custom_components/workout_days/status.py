"""Completion/miss state machine for planned days.

States are DayStatus.UNSET, COMPLETED and MISSED. Both toggles are no-ops on
empty days: the UI never offers them there, but a stale request must not
mark an unplanned day.
"""

from __future__ import annotations

from .models import DayKind, DayPlan, DayStatus


def can_change_status(day: DayPlan) -> bool:
    return day.kind is not DayKind.EMPTY


def toggle_complete(day: DayPlan) -> DayPlan:
    """UNSET -> COMPLETED, COMPLETED -> UNSET, MISSED -> COMPLETED."""
    if not can_change_status(day):
        return day
    if day.status is DayStatus.COMPLETED:
        return day.with_status(DayStatus.UNSET)
    return day.with_status(DayStatus.COMPLETED)


def toggle_missed(day: DayPlan) -> DayPlan:
    """UNSET -> MISSED, MISSED -> UNSET, COMPLETED -> MISSED."""
    if not can_change_status(day):
        return day
    if day.status is DayStatus.MISSED:
        return day.with_status(DayStatus.UNSET)
    return day.with_status(DayStatus.MISSED)
