"""Day-window managers.

A manager owns one owner's window of day plans: it fetches rows from the row
store, turns them into DayPlan objects, and applies every user action to the
local window before the write is confirmed.

- UserDayManager: personal schedule. Loads a date range around a center date,
  pages older weeks in, and limits how much of the loaded set is displayed.
- TrainerDayManager: trainer schedule. Loads every active day and keeps the
  active count under the archival ceiling.

Fetch failures are recorded on `error` and leave the previous window in place.
Mutations record the error as well and re-raise it so callers can notify the
user. Optimistic updates are not rolled back automatically; pass
`on_write_error` to compensate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date, timedelta
from typing import Any

from .archive import ArchivalPolicy
from .const import (
    DAYS_AFTER_CENTER,
    DAYS_BEFORE_CENTER,
    DISPLAY_PAGE,
    SEED_DAYS,
    TABLE_DAYS,
    TABLE_TRAINERS,
)
from .date_utils import get_today, parse_date
from .errors import ConflictError, InvalidInputError, WorkoutDaysError, classify_storage_error
from .models import DayPlan
from .row_store import RowStore
from .stats import completed_workout_count
from .status import toggle_complete, toggle_missed
from .window import (
    DayWindow,
    find_by_date,
    find_by_id,
    merge_unique,
    remove_by_id,
    replace_by_id,
    rotate,
    sort_by_date,
    upsert_by_date,
)

_LOGGER = logging.getLogger(__name__)

_DAY_CONFLICT = ("owner_id", "date")

# (previous day or None, attempted day, error)
OnWriteError = Callable[[DayPlan | None, DayPlan, WorkoutDaysError], None]


class _DayManagerBase:
    """State, persistence and status toggles shared by both schedules."""

    def __init__(
        self,
        rows: RowStore,
        owner_id: str,
        *,
        today: Callable[[], date] | None = None,
        on_write_error: OnWriteError | None = None,
        display_limit: int = DISPLAY_PAGE,
    ) -> None:
        self._rows = rows
        self.owner_id = owner_id
        self._today = today or get_today
        self._on_write_error = on_write_error
        self.window = DayWindow(display_limit=display_limit)
        self.loading = False
        self.error: WorkoutDaysError | None = None
        self._closed = False

    @property
    def days(self) -> list[DayPlan]:
        return list(self.window.days)

    @property
    def displayed(self) -> list[DayPlan]:
        return self.window.displayed

    @property
    def completed_workout_count(self) -> int:
        return completed_workout_count(self.window.days)

    @property
    def closed(self) -> bool:
        return self._closed

    def today(self) -> date:
        return self._today()

    async def async_close(self) -> None:
        """Stop applying results; in-flight fetches finish into the void."""
        self._closed = True

    def _apply(self, window: DayWindow) -> bool:
        if self._closed:
            _LOGGER.debug("Discarding window update for closed owner_id=%s", self.owner_id)
            return False
        self.window = window
        return True

    def _record(self, err: BaseException, operation: str) -> WorkoutDaysError:
        error = classify_storage_error(err)
        self.error = error
        _LOGGER.error("%s failed for owner_id=%s: %s", operation, self.owner_id, error)
        return error

    async def _async_fetch_days(
        self,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[DayPlan]:
        rows = await self._rows.async_select(
            TABLE_DAYS,
            eq={"owner_id": self.owner_id, "archived": False},
            gte={"date": start.isoformat()} if start else None,
            lte={"date": end.isoformat()} if end else None,
            order_by="date",
        )
        return [DayPlan.from_row(r) for r in rows]

    async def _async_seed(self, start: date) -> list[DayPlan]:
        """Create SEED_DAYS empty days from start in one batch."""
        rows = [
            DayPlan.empty(start + timedelta(days=i)).to_row(owner_id=self.owner_id)
            for i in range(SEED_DAYS)
        ]
        inserted = await self._rows.async_insert(TABLE_DAYS, rows)
        _LOGGER.debug("Seeded %s empty days from %s for owner_id=%s", len(inserted), start, self.owner_id)
        return [DayPlan.from_row(r) for r in inserted]

    async def _async_upsert_empty(self, day: date) -> DayPlan:
        """Create an empty day, or return the row already stored for that date."""
        row = await self._rows.async_upsert(
            TABLE_DAYS,
            DayPlan.empty(day).to_row(owner_id=self.owner_id),
            on_conflict=_DAY_CONFLICT,
            ignore_duplicates=True,
        )
        if row.get("archived"):
            # An archived row occupies the date; bring it back rather than collide.
            restored = await self._rows.async_update(TABLE_DAYS, {"archived": False}, eq={"id": row["id"]})
            row = restored[0] if restored else {**row, "archived": False}
        return DayPlan.from_row(row)

    async def _async_after_write(self) -> None:
        """Hook for bookkeeping after a confirmed write."""

    def _place(self, days: list[DayPlan], day: DayPlan) -> DayWindow:
        """Put a new day into the window, widening the display limit to reveal it."""
        updated, index = upsert_by_date(days, day)
        window = self.window.with_days(updated)
        if index >= window.display_limit:
            window = window.with_display_limit(index + 1)
        return window

    async def async_save_day(self, day: DayPlan) -> DayPlan:
        """Persist a full day. The window shows the change before the write confirms."""
        previous = find_by_id(self.window.days, day.id)
        day = replace(day, owner_id=self.owner_id, archived=False)

        if previous is not None:
            self._apply(self.window.with_days(replace_by_id(self.window.days, day.id, day)))
        else:
            self._apply(self.window.with_days(upsert_by_date(self.window.days, day)[0]))

        try:
            row = await self._rows.async_upsert(
                TABLE_DAYS,
                day.to_row(owner_id=self.owner_id),
                on_conflict=_DAY_CONFLICT,
            )
        except Exception as err:
            error = self._record(err, "save_day")
            if self._on_write_error is not None:
                self._on_write_error(previous, day, error)
            if error is err:
                raise
            raise error from err

        saved = replace(day, id=str(row["id"]))
        self._apply(self.window.with_days(replace_by_id(self.window.days, day.id, saved)))
        await self._async_after_write()
        return saved

    async def _async_toggle(self, day_id: str, transition: Callable[[DayPlan], DayPlan]) -> DayPlan | None:
        day = find_by_id(self.window.days, day_id)
        if day is None:
            return None
        updated = transition(day)
        if updated is day:
            return day
        return await self.async_save_day(updated)

    async def async_toggle_complete(self, day_id: str) -> DayPlan | None:
        return await self._async_toggle(day_id, toggle_complete)

    async def async_toggle_missed(self, day_id: str) -> DayPlan | None:
        return await self._async_toggle(day_id, toggle_missed)

    async def async_load_more_display(self) -> None:
        """Reveal another page of already-loaded days."""
        self._apply(self.window.with_display_limit(self.window.display_limit + DISPLAY_PAGE))

    def state(self) -> dict[str, Any]:
        today = self._today()
        window = self.window
        return {
            "owner_id": self.owner_id,
            "days": [d.as_dict() for d in window.displayed],
            "total_loaded": len(window.days),
            "display_limit": window.display_limit,
            "selected_date": window.selected_date.isoformat() if window.selected_date else None,
            "has_more_weeks": window.has_more_weeks(today),
            "has_more_days": window.has_more_days,
            "can_add_day": window.can_add_day,
            "completed_workouts": self.completed_workout_count,
            "loading": self.loading,
            "error": str(self.error) if self.error else None,
        }


class UserDayManager(_DayManagerBase):
    """Sliding window over a personal schedule."""

    async def _async_fetch_dates_with_data(self) -> tuple[date, ...]:
        try:
            rows = await self._rows.async_select(
                TABLE_DAYS,
                eq={"owner_id": self.owner_id},
                order_by="date",
                columns=("date",),
            )
        except Exception as err:  # noqa: BLE001
            _LOGGER.error("Fetching dates failed for owner_id=%s: %s", self.owner_id, classify_storage_error(err))
            return self.window.dates_with_data
        return tuple(parse_date(r["date"]) for r in rows)

    async def async_refresh_dates_with_data(self) -> None:
        dates = await self._async_fetch_dates_with_data()
        self._apply(replace(self.window, dates_with_data=dates))

    async def _async_after_write(self) -> None:
        await self.async_refresh_dates_with_data()

    async def _async_load_range(
        self,
        *,
        operation: str,
        center: date,
        pivot: date | None,
        display_limit: int,
        seed: bool,
        keep_loaded: bool = False,
    ) -> bool:
        start = center - timedelta(days=DAYS_BEFORE_CENTER)
        end = center + timedelta(days=DAYS_AFTER_CENTER)
        if keep_loaded and self.window.days:
            # Never shrink: paged-in history and added days stay loaded.
            start = min(start, self.window.earliest_date)
            end = max(end, self.window.latest_date)
        self.loading = True
        self.error = None
        try:
            days = await self._async_fetch_days(start=start, end=end)
            if not days and seed:
                days = await self._async_seed(self._today())
        except Exception as err:  # noqa: BLE001
            self._record(err, operation)
            return False
        finally:
            self.loading = False

        days = sort_by_date(days)
        if pivot is not None:
            target = find_by_date(days, pivot)
            if target is not None:
                days = rotate(days, target.id)
        _LOGGER.debug(
            "%s loaded %s days in %s..%s for owner_id=%s", operation, len(days), start, end, self.owner_id
        )
        dates = await self._async_fetch_dates_with_data()
        return self._apply(
            DayWindow(
                days=tuple(days),
                display_limit=display_limit,
                selected_date=pivot,
                dates_with_data=dates,
            )
        )

    async def async_load_initial(self) -> bool:
        """Load the default range around today, seeding a first week when empty."""
        return await self._async_load_range(
            operation="load_initial",
            center=self._today(),
            pivot=None,
            display_limit=DISPLAY_PAGE,
            seed=True,
        )

    async def async_jump_to(self, value: date | str) -> bool:
        """Re-center on a date; the window starts at that date when it holds a day."""
        target = parse_date(value)
        return await self._async_load_range(
            operation="jump_to",
            center=target,
            pivot=target,
            display_limit=DISPLAY_PAGE,
            seed=False,
        )

    async def async_refetch(self) -> bool:
        """Reload everything currently loaded, keeping rotation and display limit."""
        selected = self.window.selected_date
        return await self._async_load_range(
            operation="refetch",
            center=selected or self._today(),
            pivot=selected,
            display_limit=self.window.display_limit,
            seed=False,
            keep_loaded=True,
        )

    async def async_load_previous_week(self) -> bool:
        """Extend the window a week further back, merged and sorted by date."""
        today = self._today()
        earliest = self.window.earliest_date
        if earliest is None or not self.window.has_more_weeks(today):
            _LOGGER.debug("No older weeks to load for owner_id=%s (earliest=%s)", self.owner_id, earliest)
            return False

        start = earliest - timedelta(days=DAYS_BEFORE_CENTER)
        end = (self.window.selected_date or today) + timedelta(days=DAYS_AFTER_CENTER)
        self.loading = True
        self.error = None
        try:
            fetched = await self._async_fetch_days(start=start, end=end)
        except Exception as err:  # noqa: BLE001
            self._record(err, "load_previous_week")
            return False
        finally:
            self.loading = False
        return self._apply(self.window.with_days(merge_unique(self.window.days, fetched)))

    async def async_add_next_day(self) -> DayPlan:
        """Add an empty day after the latest loaded one (idempotent per date)."""
        latest = self.window.latest_date
        if latest is None:
            raise self._record(InvalidInputError("No days loaded to add a day after"), "add_next_day")
        next_date = latest + timedelta(days=1)
        try:
            day = await self._async_upsert_empty(next_date)
        except Exception as err:
            error = self._record(err, "add_next_day")
            if error is err:
                raise
            raise error from err
        self._apply(self._place(list(self.window.days), day))
        await self._async_after_write()
        return day

    def state(self) -> dict[str, Any]:
        payload = super().state()
        payload["dates_with_data"] = [d.isoformat() for d in self.window.dates_with_data]
        return payload


class TrainerDayManager(_DayManagerBase):
    """Trainer schedule with a ceiling on active days."""

    def __init__(
        self,
        rows: RowStore,
        trainer_name: str,
        *,
        policy: ArchivalPolicy | None = None,
        today: Callable[[], date] | None = None,
        on_write_error: OnWriteError | None = None,
    ) -> None:
        self.policy = policy or ArchivalPolicy()
        super().__init__(
            rows,
            "",
            today=today,
            on_write_error=on_write_error,
            display_limit=max(DISPLAY_PAGE, self.policy.max_active_days),
        )
        self.trainer_name = str(trainer_name).strip()

    @property
    def trainer_key(self) -> str:
        return self.trainer_name.lower()

    async def async_resolve_owner(self) -> str:
        """Look up the trainer row by name, creating it on first use."""
        if self.owner_id:
            return self.owner_id
        found = await self._rows.async_select(TABLE_TRAINERS, eq={"name": self.trainer_key}, limit=1)
        if not found:
            try:
                found = await self._rows.async_insert(TABLE_TRAINERS, [{"name": self.trainer_key}])
            except ConflictError:
                # Created concurrently; the row exists now.
                found = await self._rows.async_select(TABLE_TRAINERS, eq={"name": self.trainer_key}, limit=1)
        self.owner_id = str(found[0]["id"])
        return self.owner_id

    async def _async_load(self, *, operation: str, seed: bool) -> bool:
        self.loading = True
        self.error = None
        try:
            await self.async_resolve_owner()
            days = await self._async_fetch_days()
            if not days and seed:
                days = await self._async_seed(self._today())
        except Exception as err:  # noqa: BLE001
            self._record(err, operation)
            return False
        finally:
            self.loading = False
        _LOGGER.debug("%s loaded %s active days for trainer=%s", operation, len(days), self.trainer_name)
        return self._apply(self.window.with_days(sort_by_date(days)))

    async def async_load_initial(self) -> bool:
        return await self._async_load(operation="load_initial", seed=True)

    async def async_refetch(self) -> bool:
        return await self._async_load(operation="refetch", seed=False)

    async def async_add_next_day(self) -> DayPlan:
        """Add the next day, archiving the oldest active day first at the ceiling."""
        latest = self.window.latest_date
        if latest is None:
            raise self._record(InvalidInputError("No days loaded to add a day after"), "add_next_day")
        next_date = latest + timedelta(days=1)
        try:
            owner_id = await self.async_resolve_owner()
        except Exception as err:
            error = self._record(err, "add_next_day")
            if error is err:
                raise
            raise error from err

        if self.policy.needs_archive(len(self.window.days)):
            archived_id = await self.policy.async_archive_oldest(self._rows, owner_id)
            if archived_id is not None:
                self._apply(self.window.with_days(remove_by_id(self.window.days, archived_id)))

        try:
            day = await self._async_upsert_empty(next_date)
        except Exception as err:
            error = self._record(err, "add_next_day")
            if error is err:
                raise
            raise error from err
        self._apply(self._place(list(self.window.days), day))
        return day

    def state(self) -> dict[str, Any]:
        payload = super().state()
        payload["trainer"] = self.trainer_name
        payload["has_more_weeks"] = False
        payload["max_active_days"] = self.policy.max_active_days
        return payload
