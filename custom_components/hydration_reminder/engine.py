"""Reminder decision logic: day rollover, gating and reminder content."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Tuple

from homeassistant.core import HomeAssistant

from .const import (
    ACTION_DRINK,
    ACTION_SNOOZE,
    ATTR_CUPS_TODAY,
    ATTR_END_HOUR,
    ATTR_LAST_DATE,
    ATTR_NOTIFICATIONS_ENABLED,
    ATTR_SNOOZE_MIN,
    ATTR_SNOOZE_UNTIL,
    ATTR_START_HOUR,
    ATTR_TARGET_CUPS,
    DOMAIN,
    EVENT_REMINDER,
    NOTIFICATION_ID,
    NOTIFICATION_TAG,
)
from .store import HydrationStore

_LOGGER = logging.getLogger(__name__)


@dataclass
class Reminder:
    title: str
    message: str
    remaining: int
    actions: List[Tuple[str, str]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "message": self.message,
            "remaining": self.remaining,
            "actions": [{"action": a, "title": t} for a, t in self.actions],
        }


def today_iso(now: datetime) -> str:
    return now.date().isoformat()


def epoch_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def within_active_hours(hour: int, start_hour: int, end_hour: int) -> bool:
    """Inclusive on both ends; ``start_hour > end_hour`` wraps past midnight."""
    if start_hour <= end_hour:
        return start_hour <= hour <= end_hour
    return hour >= start_hour or hour <= end_hour


def rollover_patch(state: Dict[str, Any], today: str) -> Optional[Dict[str, Any]]:
    if state.get(ATTR_LAST_DATE) == today:
        return None
    return {ATTR_LAST_DATE: today, ATTR_CUPS_TODAY: 0, ATTR_SNOOZE_UNTIL: 0}


def build_reminder(state: Dict[str, Any]) -> Reminder:
    left = int(state[ATTR_TARGET_CUPS]) - int(state[ATTR_CUPS_TODAY])
    if left == 1:
        message = "Just 1 cup left to hit your daily goal!"
    else:
        message = f"{left} cups to go. Small sips add up."
    return Reminder(
        title="Time to hydrate 💧",
        message=message,
        remaining=left,
        actions=[
            (ACTION_DRINK, "I drank a cup"),
            (ACTION_SNOOZE, f"Snooze {state[ATTR_SNOOZE_MIN]} min"),
        ],
    )


class ReminderEngine:
    """Stateless over the store: every call re-reads the record."""

    def __init__(self, hass: HomeAssistant, store: HydrationStore, notify_services: Optional[List[str]] = None) -> None:
        self.hass = hass
        self._store = store
        self.notify_services: List[str] = list(notify_services or [])

    async def async_ensure_initialized(self, now: datetime) -> bool:
        """Stamp today's date on a record that has never been initialized."""
        initialized = False

        def _patch(state):
            nonlocal initialized
            if state.get(ATTR_LAST_DATE) is not None:
                return None
            initialized = True
            return {ATTR_LAST_DATE: today_iso(now)}

        await self._store.async_update(_patch)
        if initialized:
            _LOGGER.debug("%s: state initialized for %s", DOMAIN, today_iso(now))
        return initialized

    async def async_ensure_new_day(self, now: datetime) -> bool:
        """Reset the daily counters when the stored date is not today."""
        today = today_iso(now)
        rolled = False

        def _patch(state):
            nonlocal rolled
            patch = rollover_patch(state, today)
            rolled = patch is not None
            return patch

        await self._store.async_update(_patch)
        if rolled:
            _LOGGER.debug("%s: rolled over to %s", DOMAIN, today)
        return rolled

    async def async_maybe_notify(self, now: datetime) -> Optional[Reminder]:
        state = await self._store.async_get()
        if not state[ATTR_NOTIFICATIONS_ENABLED]:
            _LOGGER.debug("Reminder suppressed: notifications disabled")
            return None
        if not within_active_hours(now.hour, state[ATTR_START_HOUR], state[ATTR_END_HOUR]):
            _LOGGER.debug("Reminder suppressed: hour %s outside active window", now.hour)
            return None

        await self.async_ensure_new_day(now)
        fresh = await self._store.async_get()
        if fresh[ATTR_CUPS_TODAY] >= fresh[ATTR_TARGET_CUPS]:
            _LOGGER.debug("Reminder suppressed: goal reached")
            return None
        if epoch_ms(now) < (fresh[ATTR_SNOOZE_UNTIL] or 0):
            _LOGGER.debug("Reminder suppressed: snoozed until %s", fresh[ATTR_SNOOZE_UNTIL])
            return None

        reminder = build_reminder(fresh)
        await self._async_emit(reminder)
        return reminder

    async def _async_emit(self, reminder: Reminder) -> None:
        # Fixed id and tag: a new reminder replaces the outstanding one
        await self.hass.services.async_call(
            "persistent_notification",
            "create",
            {"title": reminder.title, "message": reminder.message, "notification_id": NOTIFICATION_ID},
            blocking=False,
        )
        self.hass.bus.async_fire(EVENT_REMINDER, reminder.as_dict())
        if self.notify_services:
            data = {
                "tag": NOTIFICATION_TAG,
                "actions": [{"action": a, "title": t} for a, t in reminder.actions],
            }
            for service in self.notify_services:
                await self.hass.services.async_call(
                    "notify",
                    service,
                    {"title": reminder.title, "message": reminder.message, "data": data},
                    blocking=False,
                )
        _LOGGER.debug("Reminder sent: %s cups left", reminder.remaining)

    async def async_dismiss(self) -> None:
        await self.hass.services.async_call(
            "persistent_notification",
            "dismiss",
            {"notification_id": NOTIFICATION_ID},
            blocking=False,
        )
        for service in self.notify_services:
            await self.hass.services.async_call(
                "notify",
                service,
                {"message": "clear_notification", "data": {"tag": NOTIFICATION_TAG}},
                blocking=False,
            )
