"""Runtime wiring of the hydration store, engine and scheduler."""
from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.util import dt as dt_util

from .actions import async_drink_one, async_reset_today, async_snooze, async_undo_one
from .const import (
    ATTR_CUPS_TODAY,
    ATTR_INTERVAL_MIN,
    ATTR_LAST_DATE,
    ATTR_SNOOZE_UNTIL,
    ATTR_TARGET_CUPS,
    DOMAIN,
    ERROR_UNKNOWN_MESSAGE,
    MSG_DRINK_ONE,
    MSG_GET_STATE,
    MSG_RESET_TODAY,
    MSG_SETTINGS_CHANGED,
    MSG_UNDO_ONE,
    RESPONSE_DRINK,
    RESPONSE_SNOOZE,
    SIGNAL_STATE_UPDATED,
)
from .engine import Reminder, ReminderEngine
from .scheduler import AlarmScheduler
from .store import HydrationStore
from .validation import sanitize_settings

_LOGGER = logging.getLogger(__name__)


class HydrationManager:
    """Entry point for timers, user actions and messages.

    All reads and writes go through the store; nothing here caches state.
    """

    def __init__(self, hass: HomeAssistant, store: HydrationStore, notify_services: Optional[List[str]] = None) -> None:
        self.hass = hass
        self.store = store
        self.engine = ReminderEngine(hass, store, notify_services)
        self.scheduler = AlarmScheduler(
            hass,
            on_tick=self._async_on_tick,
            on_rollover=self._async_on_rollover,
            on_snooze_done=self._async_on_snooze_done,
        )

    @property
    def notify_services(self) -> List[str]:
        return self.engine.notify_services

    @notify_services.setter
    def notify_services(self, services: List[str]) -> None:
        self.engine.notify_services = list(services)

    async def async_start(self, initial_settings: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the record on first run, refresh the display and schedule."""
        now = dt_util.now()
        state = await self.store.async_get()
        if state.get(ATTR_LAST_DATE) is None and initial_settings:
            settings = sanitize_settings(initial_settings)
            if settings:
                await self.store.async_set(settings)
        await self.engine.async_ensure_initialized(now)
        self.async_refresh_display()
        state = await self.store.async_get()
        self.scheduler.async_schedule(state[ATTR_INTERVAL_MIN])
        _LOGGER.debug("%s: manager started", DOMAIN)

    @callback
    def async_stop(self) -> None:
        self.scheduler.async_clear()

    @callback
    def async_refresh_display(self) -> None:
        async_dispatcher_send(self.hass, SIGNAL_STATE_UPDATED)

    async def async_handle_message(self, message: Any) -> Dict[str, Any]:
        msg_type = message.get("type") if isinstance(message, dict) else None
        if msg_type == MSG_GET_STATE:
            return await self.store.async_get()
        if msg_type == MSG_DRINK_ONE:
            await self.async_drink_one()
        elif msg_type == MSG_UNDO_ONE:
            await async_undo_one(self.store)
            self.async_refresh_display()
        elif msg_type == MSG_RESET_TODAY:
            await async_reset_today(self.store)
            self.async_refresh_display()
        elif msg_type == MSG_SETTINGS_CHANGED:
            patch = {k: v for k, v in message.items() if k != "type"}
            await self.async_update_settings(patch)
        else:
            _LOGGER.debug("Unknown message: %r", msg_type)
            return {"ok": False, "error": ERROR_UNKNOWN_MESSAGE}
        return {"ok": True}

    async def async_drink_one(self) -> Dict[str, Any]:
        state = await async_drink_one(self.store)
        self.async_refresh_display()
        return state

    async def async_snooze(self, now: Optional[datetime] = None) -> datetime:
        when = await async_snooze(self.store, now or dt_util.now())
        self.scheduler.async_schedule_snooze(when)
        self.async_refresh_display()
        return when

    async def async_update_settings(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        settings = sanitize_settings(patch)

        def _merge(state):
            if not settings:
                return None
            merged = dict(settings)
            target = settings.get(ATTR_TARGET_CUPS, state[ATTR_TARGET_CUPS])
            # Lowering the goal must not leave the counter above it
            if state[ATTR_CUPS_TODAY] > target:
                merged[ATTR_CUPS_TODAY] = target
            return merged

        state = await self.store.async_update(_merge)
        self.scheduler.async_schedule(state[ATTR_INTERVAL_MIN])
        self.async_refresh_display()
        _LOGGER.debug("Settings applied: %s", settings)
        return state

    async def async_handle_notification_response(self, index: Optional[int]) -> None:
        """Map a reminder button (or a plain click when ``index`` is None)."""
        if index is None or index == RESPONSE_DRINK:
            await self.async_drink_one()
        elif index == RESPONSE_SNOOZE:
            await self.async_snooze()
        else:
            _LOGGER.debug("Ignoring notification response %s", index)
            return
        await self.engine.async_dismiss()

    async def async_check(self, now: Optional[datetime] = None) -> Optional[Reminder]:
        return await self.engine.async_maybe_notify(now or dt_util.now())

    async def _async_on_tick(self, now: datetime) -> None:
        await self.async_check()
        self.async_refresh_display()

    async def _async_on_rollover(self, now: datetime) -> None:
        if await self.engine.async_ensure_new_day(dt_util.now()):
            self.async_refresh_display()

    async def _async_on_snooze_done(self, now: datetime) -> None:
        await self.store.async_set({ATTR_SNOOZE_UNTIL: 0})
        self.async_refresh_display()
        await self.async_check()
