"""Sensor platform for Hydration Reminder."""
from __future__ import annotations

from datetime import datetime

from homeassistant.components.sensor import SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.util import dt as dt_util

from .const import (
    ATTR_CUP_SIZE_ML,
    ATTR_CUPS_TODAY,
    ATTR_END_HOUR,
    ATTR_INTERVAL_MIN,
    ATTR_NOTIFICATIONS_ENABLED,
    ATTR_SNOOZE_UNTIL,
    ATTR_START_HOUR,
    ATTR_TARGET_CUPS,
    DOMAIN,
)
from .entity import HydrationEntity


def badge_text(cups_today: int, target_cups: int) -> str:
    return f"{min(cups_today, 99)}/{min(target_cups, 99)}"


def _fmt_hour(hour: int) -> str:
    ampm = "PM" if hour >= 12 else "AM"
    h12 = 12 if hour % 12 == 0 else hour % 12
    return f"{h12}:00 {ampm}"


def schedule_summary(state) -> str:
    if not state[ATTR_NOTIFICATIONS_ENABLED]:
        return "Notifications off"
    return (
        f"Reminding every {state[ATTR_INTERVAL_MIN]} min · "
        f"{_fmt_hour(state[ATTR_START_HOUR])}–{_fmt_hour(state[ATTR_END_HOUR])}"
    )


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    manager = hass.data[DOMAIN]["manager"]
    async_add_entities([CupsTodaySensor(manager), ProgressSensor(manager)])


class CupsTodaySensor(HydrationEntity):
    """Cups drunk today, with the badge and schedule as attributes."""

    _attr_icon = "mdi:cup-water"
    _attr_native_unit_of_measurement = "cups"
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, manager) -> None:
        super().__init__(manager, "cups_today", "Cups Today")

    @property
    def native_value(self):
        return self.hydration_state[ATTR_CUPS_TODAY]

    @property
    def extra_state_attributes(self):
        state = self.hydration_state
        cups, target = state[ATTR_CUPS_TODAY], state[ATTR_TARGET_CUPS]
        snooze_until = state[ATTR_SNOOZE_UNTIL] or 0
        snoozed = None
        if snooze_until > dt_util.utcnow().timestamp() * 1000:
            snoozed = datetime.fromtimestamp(snooze_until / 1000, tz=dt_util.UTC).isoformat()
        return {
            ATTR_TARGET_CUPS: target,
            ATTR_CUP_SIZE_ML: state[ATTR_CUP_SIZE_ML],
            "consumed_ml": cups * state[ATTR_CUP_SIZE_ML],
            "remaining": max(0, target - cups),
            "badge": badge_text(cups, target),
            "goal_reached": cups >= target,
            "snoozed_until": snoozed,
            "schedule": schedule_summary(state),
        }


class ProgressSensor(HydrationEntity):
    """Share of the daily goal reached, in percent."""

    _attr_icon = "mdi:water-percent"
    _attr_native_unit_of_measurement = "%"
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, manager) -> None:
        super().__init__(manager, "progress", "Hydration Progress")

    @property
    def native_value(self):
        state = self.hydration_state
        target = state[ATTR_TARGET_CUPS]
        if not target:
            return 0
        ratio = max(0.0, min(1.0, state[ATTR_CUPS_TODAY] / target))
        return round(ratio * 100)
