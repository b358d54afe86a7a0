"""Body-weight tracking per owner."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from .const import TABLE_WEIGHT
from .date_utils import get_today, parse_date
from .errors import InvalidInputError, NotFoundError, WorkoutDaysError, classify_storage_error
from .models import WeightEntry
from .row_store import RowStore

_LOGGER = logging.getLogger(__name__)


def validate_weight(value: Any) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError) as err:
        raise InvalidInputError(f"Invalid weight: {value!r}") from err
    if weight != weight or weight <= 0:  # NaN check
        raise InvalidInputError("Weight must be a positive number")
    return round(weight, 2)


class WeightTracker:
    """Weight entries for one owner, newest first."""

    def __init__(self, rows: RowStore, owner_id: str, *, today: Callable[[], date] | None = None) -> None:
        self._rows = rows
        self.owner_id = owner_id
        self._today = today or get_today
        self.entries: list[WeightEntry] = []
        self.error: WorkoutDaysError | None = None

    async def async_fetch(self) -> bool:
        try:
            rows = await self._rows.async_select(
                TABLE_WEIGHT,
                eq={"owner_id": self.owner_id},
                order_by="date",
                descending=True,
            )
        except Exception as err:  # noqa: BLE001
            self.error = classify_storage_error(err)
            _LOGGER.error("Fetching weight entries failed for owner_id=%s: %s", self.owner_id, self.error)
            return False
        self.error = None
        self.entries = [WeightEntry.from_row(r) for r in rows]
        return True

    async def async_log(self, weight: Any, day: date | str | None = None, notes: str | None = None) -> WeightEntry:
        """Record a weight; logging the same date again replaces that entry."""
        value = validate_weight(weight)
        entry_date = parse_date(day) if day is not None else self._today()
        if entry_date > self._today():
            raise InvalidInputError("Weight cannot be logged for a future date")
        try:
            row = await self._rows.async_upsert(
                TABLE_WEIGHT,
                {
                    "owner_id": self.owner_id,
                    "date": entry_date.isoformat(),
                    "weight": value,
                    "notes": (notes or "").strip() or None,
                },
                on_conflict=("owner_id", "date"),
            )
        except Exception as err:
            self.error = classify_storage_error(err)
            _LOGGER.error("Logging weight failed for owner_id=%s: %s", self.owner_id, self.error)
            if self.error is err:
                raise
            raise self.error from err
        entry = WeightEntry.from_row(row)
        self.entries = sorted(
            [e for e in self.entries if e.id != entry.id and e.date != entry.date] + [entry],
            key=lambda e: e.date,
            reverse=True,
        )
        return entry

    async def async_delete(self, entry_id: str) -> None:
        removed = await self._rows.async_delete(TABLE_WEIGHT, eq={"id": str(entry_id), "owner_id": self.owner_id})
        if not removed:
            raise NotFoundError(f"No weight entry {entry_id}")
        self.entries = [e for e in self.entries if e.id != entry_id]

    @property
    def latest(self) -> WeightEntry | None:
        return self.entries[0] if self.entries else None

    @property
    def change(self) -> dict[str, float] | None:
        """Difference between the two newest entries."""
        if len(self.entries) < 2:
            return None
        latest, previous = self.entries[0], self.entries[1]
        amount = latest.weight - previous.weight
        return {
            "amount": round(amount, 2),
            "percentage": round(amount / previous.weight * 100, 2),
        }

    def state(self) -> dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "entries": [e.as_dict() for e in self.entries],
            "latest": self.latest.as_dict() if self.latest else None,
            "change": self.change,
            "error": str(self.error) if self.error else None,
        }
