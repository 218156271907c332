"""Entity definitions for Hydration Reminder."""
from __future__ import annotations

from typing import Any, Dict

from homeassistant.components.sensor import SensorEntity
from homeassistant.core import callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import async_generate_entity_id

from .const import DOMAIN, SIGNAL_STATE_UPDATED
from .manager import HydrationManager


class HydrationEntity(SensorEntity):
    """Base sensor that re-renders whenever the hydration state changes."""

    _attr_should_poll = False

    def __init__(self, manager: HydrationManager, key: str, name: str) -> None:
        self.hass = manager.hass
        self._manager = manager
        self._attr_name = name
        self._attr_unique_id = f"{DOMAIN}_{key}"
        self.entity_id = async_generate_entity_id("sensor.{}", f"hydration_{key}", hass=manager.hass)
        self._attr_device_info = {
            "identifiers": {(DOMAIN, DOMAIN)},
            "name": "Hydration Reminder",
        }

    @property
    def hydration_state(self) -> Dict[str, Any]:
        return self._manager.store.snapshot()

    async def async_added_to_hass(self) -> None:
        @callback
        def _updated() -> None:
            self.async_write_ha_state()

        self.async_on_remove(async_dispatcher_connect(self.hass, SIGNAL_STATE_UPDATED, _updated))
