"""Live managers per owner and the refresh that follows row changes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from .archive import ArchivalPolicy, ArchiveView
from .day_manager import TrainerDayManager, UserDayManager
from .errors import NotFoundError
from .row_store import RowStore
from .stats import ProgressComparison, compare_progress
from .weight import WeightTracker

_LOGGER = logging.getLogger(__name__)


class OwnerManagers:
    """One day manager per user or trainer, and one weight tracker per owner."""

    def __init__(
        self,
        rows: RowStore,
        *,
        trainer_names: list[str],
        max_active_days: int,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._rows = rows
        self.trainer_names = list(trainer_names)
        self.max_active_days = max_active_days
        self._today = today
        self.users: dict[str, UserDayManager] = {}
        self.trainers: dict[str, TrainerDayManager] = {}
        self.weights: dict[str, WeightTracker] = {}

    async def async_user_manager(self, user_id: str) -> UserDayManager:
        manager = self.users.get(user_id)
        if manager is None:
            manager = UserDayManager(self._rows, user_id, today=self._today)
            self.users[user_id] = manager
            await manager.async_load_initial()
        return manager

    def _trainer_name(self, name: str) -> str:
        wanted = str(name or "").strip().lower()
        for configured in self.trainer_names:
            if configured.lower() == wanted:
                return configured
        raise NotFoundError(f"Unknown trainer: {name!r}")

    async def async_trainer_manager(self, name: str) -> TrainerDayManager:
        trainer = self._trainer_name(name)
        manager = self.trainers.get(trainer)
        if manager is None:
            manager = TrainerDayManager(
                self._rows,
                trainer,
                policy=ArchivalPolicy(self.max_active_days),
                today=self._today,
            )
            self.trainers[trainer] = manager
            await manager.async_load_initial()
        return manager

    async def async_owner_manager(self, *, user_id: str, trainer: str | None) -> UserDayManager | TrainerDayManager:
        """Trainer schedule when a trainer is named, else the user's own."""
        if trainer:
            return await self.async_trainer_manager(trainer)
        return await self.async_user_manager(user_id)

    async def async_weight_tracker(self, owner_id: str) -> WeightTracker:
        tracker = self.weights.get(owner_id)
        if tracker is None:
            tracker = WeightTracker(self._rows, owner_id, today=self._today)
            self.weights[owner_id] = tracker
            await tracker.async_fetch()
        return tracker

    async def async_archive_view(self, trainer: str) -> ArchiveView:
        manager = await self.async_trainer_manager(trainer)
        owner_id = await manager.async_resolve_owner()
        return ArchiveView(self._rows, owner_id)

    def competition(self) -> ProgressComparison | None:
        names = self.trainer_names
        if len(names) != 2 or not all(n in self.trainers for n in names):
            return None
        first, second = (self.trainers[n] for n in names)
        return compare_progress(first.completed_workout_count, second.completed_workout_count)

    async def async_refresh(self) -> dict[str, Any]:
        """Refetch every live manager and tracker; return the public payload."""
        for name in self.trainer_names:
            if name not in self.trainers:
                manager = await self.async_trainer_manager(name)
            else:
                manager = self.trainers[name]
                await manager.async_refetch()
            if manager.owner_id and manager.owner_id not in self.weights:
                await self.async_weight_tracker(manager.owner_id)
        for manager in self.users.values():
            await manager.async_refetch()
        for tracker in self.weights.values():
            await tracker.async_fetch()
        _LOGGER.debug(
            "Refreshed %s user windows, %s trainer windows, %s weight trackers",
            len(self.users),
            len(self.trainers),
            len(self.weights),
        )

        competition = self.competition()
        return {
            "users": {uid: m.state() for uid, m in self.users.items()},
            "trainers": {name: m.state() for name, m in self.trainers.items()},
            "weights": {oid: t.state() for oid, t in self.weights.items()},
            "competition": competition.as_dict() if competition else None,
        }

    async def async_close(self) -> None:
        for manager in [*self.users.values(), *self.trainers.values()]:
            await manager.async_close()
