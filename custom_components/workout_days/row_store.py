"""Row store for Workout Days (.storage).

Tables are lists of JSON rows keyed by name. The store offers the handful of
operations the day managers need from a hosted row backend: filtered select,
insert, upsert on a conflict key, update, delete and change subscriptions.

State model (schema v1):
- tables: mapping table name -> list of rows
- every row carries id, created_at and updated_at
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from .const import (
    DOMAIN,
    TABLE_ACTIVITY_COMMENTS,
    TABLE_ACTIVITY_LIKES,
    TABLE_COMMENT_LIKES,
    TABLE_DAYS,
    TABLE_FRIEND_REQUESTS,
    TABLE_FRIENDS,
    TABLE_PROFILES,
    TABLE_TRAINERS,
    TABLE_WEIGHT,
)
from .errors import ConflictError, StorageUnavailableError

_LOGGER = logging.getLogger(__name__)

_STORAGE_VERSION = 1
_SAVE_DELAY = 1

EVENT_INSERT = "INSERT"
EVENT_UPDATE = "UPDATE"
EVENT_DELETE = "DELETE"
ALL_EVENTS = frozenset({EVENT_INSERT, EVENT_UPDATE, EVENT_DELETE})

UNIQUE_KEYS: dict[str, tuple[str, ...]] = {
    TABLE_DAYS: ("owner_id", "date"),
    TABLE_WEIGHT: ("owner_id", "date"),
    TABLE_TRAINERS: ("name",),
    TABLE_PROFILES: ("username",),
    TABLE_FRIENDS: ("user_id", "friend_id"),
    TABLE_FRIEND_REQUESTS: ("sender_id", "receiver_id"),
    TABLE_ACTIVITY_LIKES: ("activity_id", "user_id"),
    TABLE_ACTIVITY_COMMENTS: ("activity_id", "user_id"),
    TABLE_COMMENT_LIKES: ("comment_id", "user_id"),
}

Row = dict[str, Any]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class RowChange:
    """A single change notification."""

    event: str
    table: str
    new: Row | None
    old: Row | None


@dataclass
class _Subscription:
    table: str
    listener: Callable[[RowChange], None]
    eq: dict[str, Any]
    events: frozenset[str]

    def matches(self, change: RowChange) -> bool:
        if change.table != self.table or change.event not in self.events:
            return False
        if not self.eq:
            return True
        # DELETE only has the old row; UPDATE matches on either side.
        return any(
            row is not None and all(row.get(k) == v for k, v in self.eq.items())
            for row in (change.new, change.old)
        )


def _matches(
    row: Row,
    *,
    eq: dict[str, Any] | None,
    gte: dict[str, Any] | None,
    lte: dict[str, Any] | None,
    in_: dict[str, Iterable[Any]] | None,
) -> bool:
    for key, value in (eq or {}).items():
        if row.get(key) != value:
            return False
    for key, value in (gte or {}).items():
        cur = row.get(key)
        if cur is None or cur < value:
            return False
    for key, value in (lte or {}).items():
        cur = row.get(key)
        if cur is None or cur > value:
            return False
    for key, values in (in_ or {}).items():
        if row.get(key) not in set(values):
            return False
    return True


def _sort_key(column: str) -> Callable[[Row], tuple[bool, Any]]:
    # None sorts last in ascending order.
    def _key(row: Row) -> tuple[bool, Any]:
        value = row.get(column)
        return (value is None, value if value is not None else "")

    return _key


class RowStore:
    """In-memory tables with row-backend semantics."""

    def __init__(self) -> None:
        self._tables: dict[str, list[Row]] | None = None
        self._subscriptions: list[_Subscription] = []

    async def _async_load_tables(self) -> dict[str, list[Row]]:
        return {}

    def _schedule_save(self) -> None:
        """Persist tables after a write. Memory-only stores keep nothing."""

    async def _async_tables(self) -> dict[str, list[Row]]:
        if self._tables is None:
            self._tables = await self._async_load_tables()
        return self._tables

    async def _async_table(self, table: str) -> list[Row]:
        tables = await self._async_tables()
        return tables.setdefault(table, [])

    async def async_select(
        self,
        table: str,
        *,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        lte: dict[str, Any] | None = None,
        in_: dict[str, Iterable[Any]] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        columns: Iterable[str] | None = None,
    ) -> list[Row]:
        rows = [r for r in await self._async_table(table) if _matches(r, eq=eq, gte=gte, lte=lte, in_=in_)]
        if order_by:
            rows.sort(key=_sort_key(order_by), reverse=descending)
        if limit is not None:
            rows = rows[: max(0, int(limit))]
        if columns is not None:
            cols = list(columns)
            return [{c: r.get(c) for c in cols} for r in rows]
        return [dict(r) for r in rows]

    async def async_count(self, table: str, *, eq: dict[str, Any] | None = None) -> int:
        return len([r for r in await self._async_table(table) if _matches(r, eq=eq, gte=None, lte=None, in_=None)])

    def _find_conflict(self, rows: list[Row], table: str, candidate: Row, *, keys: tuple[str, ...] | None = None) -> Row | None:
        keys = keys or UNIQUE_KEYS.get(table)
        if not keys:
            return None
        values = tuple(candidate.get(k) for k in keys)
        if any(v is None for v in values):
            return None
        for row in rows:
            if tuple(row.get(k) for k in keys) == values:
                return row
        return None

    async def async_insert(self, table: str, rows: Iterable[Row]) -> list[Row]:
        """Insert rows atomically; a unique-key violation inserts nothing."""
        existing = await self._async_table(table)
        keys = UNIQUE_KEYS.get(table, ())
        staged: list[Row] = []
        for raw in rows:
            now = _now_iso()
            row = {**raw, "id": str(raw.get("id") or uuid4().hex), "created_at": now, "updated_at": now}
            if self._find_conflict(existing + staged, table, row) is not None:
                raise ConflictError(table=table, keys=keys, values=tuple(row.get(k) for k in keys))
            staged.append(row)
        existing.extend(staged)
        self._schedule_save()
        for row in staged:
            self._notify(RowChange(EVENT_INSERT, table, dict(row), None))
        return [dict(r) for r in staged]

    async def async_upsert(
        self,
        table: str,
        row: Row,
        *,
        on_conflict: tuple[str, ...],
        ignore_duplicates: bool = False,
    ) -> Row:
        """Insert a row or merge it into the row sharing the conflict columns."""
        existing = await self._async_table(table)
        current = self._find_conflict(existing, table, row, keys=on_conflict)
        if current is None and row.get("id"):
            current = next((r for r in existing if r.get("id") == row["id"]), None)
        if current is None:
            inserted = await self.async_insert(table, [row])
            return inserted[0]
        if ignore_duplicates:
            return dict(current)

        old = dict(current)
        patch = {k: v for k, v in row.items() if k not in ("id", "created_at")}
        current.update(patch)
        current["updated_at"] = _now_iso()
        self._schedule_save()
        self._notify(RowChange(EVENT_UPDATE, table, dict(current), old))
        return dict(current)

    async def async_update(self, table: str, patch: Row, *, eq: dict[str, Any]) -> list[Row]:
        if not eq:
            raise ValueError("async_update requires a filter")
        updated: list[Row] = []
        for row in await self._async_table(table):
            if not _matches(row, eq=eq, gte=None, lte=None, in_=None):
                continue
            old = dict(row)
            row.update({k: v for k, v in patch.items() if k not in ("id", "created_at")})
            row["updated_at"] = _now_iso()
            updated.append(dict(row))
            self._notify(RowChange(EVENT_UPDATE, table, dict(row), old))
        if updated:
            self._schedule_save()
        return updated

    async def async_delete(self, table: str, *, eq: dict[str, Any]) -> list[Row]:
        if not eq:
            raise ValueError("async_delete requires a filter")
        rows = await self._async_table(table)
        removed = [r for r in rows if _matches(r, eq=eq, gte=None, lte=None, in_=None)]
        if not removed:
            return []
        rows[:] = [r for r in rows if r not in removed]
        self._schedule_save()
        for row in removed:
            self._notify(RowChange(EVENT_DELETE, table, None, dict(row)))
        return [dict(r) for r in removed]

    @callback
    def async_subscribe(
        self,
        table: str,
        listener: Callable[[RowChange], None],
        *,
        eq: dict[str, Any] | None = None,
        events: Iterable[str] | None = None,
    ) -> CALLBACK_TYPE:
        """Subscribe to changes on a table. Returns an unsubscribe callback."""
        sub = _Subscription(
            table=table,
            listener=listener,
            eq=dict(eq or {}),
            events=frozenset(events) if events is not None else ALL_EVENTS,
        )
        self._subscriptions.append(sub)

        @callback
        def _unsubscribe() -> None:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

        return _unsubscribe

    def _notify(self, change: RowChange) -> None:
        for sub in list(self._subscriptions):
            if not sub.matches(change):
                continue
            try:
                sub.listener(change)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Change listener failed for table=%s event=%s", change.table, change.event)


class HassRowStore(RowStore):
    """Row store persisted per config entry in Home Assistant storage."""

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        super().__init__()
        self._store: Store[dict[str, Any]] = Store(hass, _STORAGE_VERSION, f"{DOMAIN}_{entry_id}")

    async def _async_load_tables(self) -> dict[str, list[Row]]:
        try:
            loaded = await self._store.async_load()
        except HomeAssistantError as err:
            raise StorageUnavailableError(f"Could not load {self._store.key}: {err}") from err
        tables = loaded.get("tables") if isinstance(loaded, dict) else None
        if not isinstance(tables, dict):
            tables = {}
        clean: dict[str, list[Row]] = {}
        for name, rows in tables.items():
            if isinstance(rows, list):
                clean[str(name)] = [r for r in rows if isinstance(r, dict)]
        _LOGGER.debug("Loaded %s tables from %s", len(clean), self._store.key)
        return clean

    @callback
    def _data_to_save(self) -> dict[str, Any]:
        return {"schema": 1, "tables": self._tables or {}, "updated_at": _now_iso()}

    def _schedule_save(self) -> None:
        self._store.async_delay_save(self._data_to_save, _SAVE_DELAY)

    async def async_flush(self) -> None:
        """Write pending changes immediately (used on unload)."""
        if self._tables is not None:
            await self._store.async_save(self._data_to_save())
