"""Timer wiring for the periodic tick, rollover check and snooze expiry."""
from __future__ import annotations

from datetime import datetime, timedelta
import logging
from typing import Any, Callable, Dict, List

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.event import async_track_point_in_time, async_track_time_interval

from .const import ALARM_ROLLOVER, ALARM_SNOOZE_DONE, ALARM_TICK, ROLLOVER_CHECK_MINUTES

_LOGGER = logging.getLogger(__name__)

Handler = Callable[[datetime], Any]


class AlarmScheduler:
    """Named wake-ups on top of Home Assistant's event helpers.

    Scheduling under a name that is already pending replaces it.
    """

    def __init__(self, hass: HomeAssistant, on_tick: Handler, on_rollover: Handler, on_snooze_done: Handler) -> None:
        self.hass = hass
        self._handlers: Dict[str, Handler] = {
            ALARM_TICK: on_tick,
            ALARM_ROLLOVER: on_rollover,
            ALARM_SNOOZE_DONE: on_snooze_done,
        }
        self._unsubs: Dict[str, Callable[[], None]] = {}

    @property
    def scheduled(self) -> List[str]:
        return sorted(self._unsubs)

    @callback
    def async_schedule(self, interval_min: int) -> None:
        """Drop every pending wake-up, then start the two periodic ones."""
        self.async_clear()
        period = max(1, int(interval_min or 1))
        self._track_interval(ALARM_TICK, timedelta(minutes=period))
        self._track_interval(ALARM_ROLLOVER, timedelta(minutes=ROLLOVER_CHECK_MINUTES))
        _LOGGER.debug("Scheduled tick every %s min, rollover every %s min", period, ROLLOVER_CHECK_MINUTES)

    @callback
    def async_schedule_snooze(self, when: datetime) -> None:
        self._cancel(ALARM_SNOOZE_DONE)
        handler = self._handlers[ALARM_SNOOZE_DONE]

        @callback
        def _fire(now: datetime) -> None:
            self._unsubs.pop(ALARM_SNOOZE_DONE, None)
            self.hass.async_create_task(handler(now))

        self._unsubs[ALARM_SNOOZE_DONE] = async_track_point_in_time(self.hass, _fire, when)
        _LOGGER.debug("Snooze expiry scheduled at %s", when.isoformat())

    @callback
    def async_clear(self) -> None:
        for name in list(self._unsubs):
            self._cancel(name)

    def _cancel(self, name: str) -> None:
        unsub = self._unsubs.pop(name, None)
        if unsub:
            unsub()

    def _track_interval(self, name: str, period: timedelta) -> None:
        handler = self._handlers[name]

        @callback
        def _fire(now: datetime) -> None:
            self.hass.async_create_task(handler(now))

        self._unsubs[name] = async_track_time_interval(
            self.hass, _fire, period, name=name, cancel_on_shutdown=True
        )
