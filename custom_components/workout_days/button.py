"""Button platform for Workout Days."""

from __future__ import annotations

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import WorkoutDaysCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutDaysCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([AddNextDayButton(entry, coordinator, name) for name in coordinator.trainer_names])


class AddNextDayButton(ButtonEntity):
    """Button that appends the next empty day to a trainer's schedule."""

    _attr_has_entity_name = True
    _attr_icon = "mdi:calendar-plus"
    _attr_translation_key = "add_next_day"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutDaysCoordinator, trainer: str) -> None:
        self._entry = entry
        self._coordinator = coordinator
        self._trainer = trainer
        slug = "".join(c if c.isalnum() else "_" for c in trainer.strip().lower())
        self._attr_name = f"{trainer} add next day"
        self._attr_unique_id = f"{entry.entry_id}_{slug}_add_next_day"
        self._attr_device_info = device_info_from_entry(entry)

    async def async_press(self) -> None:
        manager = await self._coordinator.async_trainer_manager(self._trainer)
        await manager.async_add_next_day()
        await self._coordinator.async_request_refresh()
