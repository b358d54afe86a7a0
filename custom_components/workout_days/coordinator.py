"""Coordinator for Workout Days."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .archive import ArchiveView
from .const import (
    CONF_MAX_ACTIVE_DAYS,
    CONF_TRAINER_A,
    CONF_TRAINER_B,
    CONF_VARIANT,
    DEFAULT_MAX_ACTIVE_DAYS,
    DEFAULT_TRAINER_A,
    DEFAULT_TRAINER_B,
    DEFAULT_VARIANT,
    DOMAIN,
    TABLE_DAYS,
    TABLE_FRIEND_REQUESTS,
    TABLE_FRIENDS,
    TABLE_WEIGHT,
    VARIANT_TRAINERS,
)
from .day_manager import TrainerDayManager, UserDayManager
from .errors import WorkoutDaysError
from .feed import ActivityFeed, ActivityRecorder
from .owners import OwnerManagers
from .row_store import HassRowStore, RowChange
from .social import SocialService
from .stats import ProgressComparison
from .weight import WeightTracker

_LOGGER = logging.getLogger(__name__)

_WATCHED_TABLES = (TABLE_DAYS, TABLE_WEIGHT, TABLE_FRIENDS, TABLE_FRIEND_REQUESTS)
_RECORDED_TABLES = (TABLE_DAYS, TABLE_WEIGHT)


class WorkoutDaysCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Owns the row store and one day manager per owner."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        self.entry = entry
        self.rows = HassRowStore(hass, entry.entry_id)
        self.owners = OwnerManagers(
            self.rows,
            trainer_names=self.trainer_names,
            max_active_days=self.max_active_days,
        )
        self.recorder = ActivityRecorder(self.rows)
        self._unsubs: list[CALLBACK_TYPE] = []

        super().__init__(
            hass,
            logger=_LOGGER,
            name=f"{DOMAIN}_{entry.entry_id}",
            update_interval=timedelta(hours=6),
        )

    def _option(self, key: str, default: Any) -> Any:
        opts = self.entry.options or {}
        data = self.entry.data or {}
        return opts.get(key, data.get(key, default))

    @property
    def variant(self) -> str:
        return str(self._option(CONF_VARIANT, DEFAULT_VARIANT))

    @property
    def max_active_days(self) -> int:
        try:
            return max(1, int(self._option(CONF_MAX_ACTIVE_DAYS, DEFAULT_MAX_ACTIVE_DAYS)))
        except (TypeError, ValueError):
            return DEFAULT_MAX_ACTIVE_DAYS

    @property
    def trainer_names(self) -> list[str]:
        if self.variant != VARIANT_TRAINERS:
            return []
        return [
            str(self._option(CONF_TRAINER_A, DEFAULT_TRAINER_A)).strip() or DEFAULT_TRAINER_A,
            str(self._option(CONF_TRAINER_B, DEFAULT_TRAINER_B)).strip() or DEFAULT_TRAINER_B,
        ]

    @callback
    def async_start_listeners(self) -> None:
        """Record activities and refetch whenever a watched table changes."""
        for table in _RECORDED_TABLES:
            self._unsubs.append(self.rows.async_subscribe(table, self._handle_recorded_change))
        for table in _WATCHED_TABLES:
            self._unsubs.append(self.rows.async_subscribe(table, self._handle_row_change))

    @callback
    def _handle_recorded_change(self, change: RowChange) -> None:
        self.hass.async_create_task(self._async_record(change))

    async def _async_record(self, change: RowChange) -> None:
        try:
            await self.recorder.async_handle_change(change)
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Recording activity failed for table=%s event=%s", change.table, change.event)

    @callback
    def _handle_row_change(self, change: RowChange) -> None:
        _LOGGER.debug("Row change %s on %s; scheduling refresh", change.event, change.table)
        self.hass.async_create_task(self.async_request_refresh())

    async def async_user_manager(self, user_id: str) -> UserDayManager:
        return await self.owners.async_user_manager(user_id)

    async def async_trainer_manager(self, name: str) -> TrainerDayManager:
        return await self.owners.async_trainer_manager(name)

    async def async_owner_manager(self, *, user_id: str, trainer: str | None) -> UserDayManager | TrainerDayManager:
        return await self.owners.async_owner_manager(user_id=user_id, trainer=trainer)

    async def async_weight_tracker(self, owner_id: str) -> WeightTracker:
        return await self.owners.async_weight_tracker(owner_id)

    async def async_archive_view(self, trainer: str) -> ArchiveView:
        return await self.owners.async_archive_view(trainer)

    def social(self, user_id: str) -> SocialService:
        return SocialService(self.rows, user_id)

    def feed(self, user_id: str) -> ActivityFeed:
        return ActivityFeed(self.rows, user_id)

    def competition(self) -> ProgressComparison | None:
        return self.owners.competition()

    async def _async_update_data(self) -> dict[str, Any]:
        try:
            await self.rows.async_count(TABLE_DAYS)
        except WorkoutDaysError as err:
            raise UpdateFailed(str(err)) from err
        return {"variant": self.variant, **await self.owners.async_refresh()}

    async def async_shutdown(self) -> None:
        while self._unsubs:
            self._unsubs.pop()()
        await self.owners.async_close()
        await self.rows.async_flush()
        await super().async_shutdown()
