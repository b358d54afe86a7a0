"""Archival of trainer days and the archive view."""

from __future__ import annotations

import logging

from .const import DEFAULT_MAX_ACTIVE_DAYS, TABLE_DAYS
from .errors import NotFoundError, classify_storage_error
from .models import DayPlan
from .row_store import RowStore

_LOGGER = logging.getLogger(__name__)


class ArchivalPolicy:
    """Keeps at most max_active_days non-archived days per trainer."""

    def __init__(self, max_active_days: int = DEFAULT_MAX_ACTIVE_DAYS) -> None:
        self.max_active_days = max(1, int(max_active_days))

    def needs_archive(self, active_count: int) -> bool:
        return active_count >= self.max_active_days

    async def async_archive_oldest(self, rows: RowStore, owner_id: str) -> str | None:
        """Flag the oldest active day as archived. Best effort: failures are logged.

        Returns the archived day id, or None when nothing was archived.
        """
        try:
            oldest = await rows.async_select(
                TABLE_DAYS,
                eq={"owner_id": owner_id, "archived": False},
                order_by="date",
                limit=1,
                columns=("id", "date"),
            )
            if not oldest:
                return None
            day_id = str(oldest[0]["id"])
            await rows.async_update(TABLE_DAYS, {"archived": True}, eq={"id": day_id})
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning(
                "Archiving oldest day failed for owner_id=%s: %s",
                owner_id,
                classify_storage_error(err),
            )
            return None
        _LOGGER.debug("Archived day %s (%s) for owner_id=%s", day_id, oldest[0]["date"], owner_id)
        return day_id


class ArchiveView:
    """Read-only listing of archived days, plus the one hard delete."""

    def __init__(self, rows: RowStore, owner_id: str) -> None:
        self._rows = rows
        self.owner_id = owner_id

    async def async_fetch(self) -> list[DayPlan]:
        rows = await self._rows.async_select(
            TABLE_DAYS,
            eq={"owner_id": self.owner_id, "archived": True},
            order_by="date",
            descending=True,
        )
        return [DayPlan.from_row(r) for r in rows]

    async def async_delete(self, day_id: str) -> None:
        removed = await self._rows.async_delete(
            TABLE_DAYS,
            eq={"id": str(day_id), "owner_id": self.owner_id, "archived": True},
        )
        if not removed:
            raise NotFoundError(f"No archived day {day_id} for owner {self.owner_id}")
        _LOGGER.debug("Deleted archived day %s for owner_id=%s", day_id, self.owner_id)
