"""Sensor platform for Workout Days."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import WorkoutDaysCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutDaysCoordinator = hass.data[DOMAIN][entry.entry_id]
    names = coordinator.trainer_names
    if not names:
        return
    entities: list[SensorEntity] = []
    for name in names:
        entities.append(CompletedWorkoutsSensor(entry, coordinator, name))
        entities.append(LatestWeightSensor(entry, coordinator, name))
    entities.append(CompetitionLeaderSensor(entry, coordinator))
    async_add_entities(entities)


def _slug(name: str) -> str:
    return "".join(c if c.isalnum() else "_" for c in name.strip().lower())


class _TrainerSensor(CoordinatorEntity[WorkoutDaysCoordinator], SensorEntity):
    _attr_has_entity_name = True

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutDaysCoordinator, trainer: str) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._trainer = trainer
        self._attr_device_info = device_info_from_entry(entry)

    def _trainer_state(self) -> dict[str, Any]:
        data = self.coordinator.data or {}
        trainers = data.get("trainers", {}) if isinstance(data.get("trainers"), dict) else {}
        state = trainers.get(self._trainer)
        return state if isinstance(state, dict) else {}


class CompletedWorkoutsSensor(_TrainerSensor):
    """Completed, non-archived workout days for one trainer."""

    _attr_icon = "mdi:dumbbell"
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_translation_key = "completed_workouts"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutDaysCoordinator, trainer: str) -> None:
        super().__init__(entry, coordinator, trainer)
        self._attr_name = f"{trainer} completed workouts"
        self._attr_unique_id = f"{entry.entry_id}_{_slug(trainer)}_completed_workouts"

    @property
    def native_value(self) -> int:
        return int(self._trainer_state().get("completed_workouts") or 0)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        state = self._trainer_state()
        return {
            "trainer": self._trainer,
            "active_days": state.get("total_loaded", 0),
            "max_active_days": state.get("max_active_days"),
        }


class LatestWeightSensor(_TrainerSensor):
    """Most recent weight entry for one trainer."""

    _attr_icon = "mdi:scale-bathroom"
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_translation_key = "latest_weight"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutDaysCoordinator, trainer: str) -> None:
        super().__init__(entry, coordinator, trainer)
        self._attr_name = f"{trainer} weight"
        self._attr_unique_id = f"{entry.entry_id}_{_slug(trainer)}_latest_weight"

    def _weight_state(self) -> dict[str, Any]:
        owner_id = self._trainer_state().get("owner_id")
        data = self.coordinator.data or {}
        weights = data.get("weights", {}) if isinstance(data.get("weights"), dict) else {}
        state = weights.get(owner_id) if owner_id else None
        return state if isinstance(state, dict) else {}

    @property
    def native_value(self) -> float | None:
        latest = self._weight_state().get("latest")
        if isinstance(latest, dict):
            return latest.get("weight")
        return None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        state = self._weight_state()
        latest = state.get("latest") if isinstance(state.get("latest"), dict) else {}
        return {
            "trainer": self._trainer,
            "date": latest.get("date"),
            "change": state.get("change"),
        }


class CompetitionLeaderSensor(CoordinatorEntity[WorkoutDaysCoordinator], SensorEntity):
    """Which trainer has completed more workouts."""

    _attr_has_entity_name = True
    _attr_name = "Competition leader"
    _attr_icon = "mdi:trophy"
    _attr_translation_key = "competition_leader"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutDaysCoordinator) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_competition_leader"
        self._attr_device_info = device_info_from_entry(entry)

    def _competition(self) -> dict[str, Any]:
        data = self.coordinator.data or {}
        competition = data.get("competition")
        return competition if isinstance(competition, dict) else {}

    @property
    def native_value(self) -> str | None:
        leader = self._competition().get("leader")
        if leader is None:
            return None
        names = self.coordinator.trainer_names
        if leader == "a" and names:
            return names[0]
        if leader == "b" and len(names) > 1:
            return names[1]
        return "tie"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        competition = self._competition()
        names = self.coordinator.trainer_names
        attrs: dict[str, Any] = {"entry_id": self._entry.entry_id}
        if competition and len(names) == 2:
            attrs[names[0]] = {"completed": competition.get("a"), "ratio": competition.get("ratio_a")}
            attrs[names[1]] = {"completed": competition.get("b"), "ratio": competition.get("ratio_b")}
        return attrs
