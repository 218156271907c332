"""Counter and snooze mutations triggered by the user."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict

from .const import ATTR_CUPS_TODAY, ATTR_SNOOZE_MIN, ATTR_SNOOZE_UNTIL, ATTR_TARGET_CUPS
from .engine import epoch_ms
from .store import HydrationStore


def drink_patch(state: Dict[str, Any]) -> Dict[str, Any]:
    return {ATTR_CUPS_TODAY: min(int(state[ATTR_CUPS_TODAY]) + 1, int(state[ATTR_TARGET_CUPS]))}


def undo_patch(state: Dict[str, Any]) -> Dict[str, Any]:
    return {ATTR_CUPS_TODAY: max(0, int(state[ATTR_CUPS_TODAY]) - 1)}


def reset_patch(state: Dict[str, Any]) -> Dict[str, Any]:
    return {ATTR_CUPS_TODAY: 0}


def snooze_expiry(state: Dict[str, Any], now: datetime) -> datetime:
    return now + timedelta(minutes=int(state[ATTR_SNOOZE_MIN]))


async def async_drink_one(store: HydrationStore) -> Dict[str, Any]:
    return await store.async_update(drink_patch)


async def async_undo_one(store: HydrationStore) -> Dict[str, Any]:
    return await store.async_update(undo_patch)


async def async_reset_today(store: HydrationStore) -> Dict[str, Any]:
    return await store.async_update(reset_patch)


async def async_snooze(store: HydrationStore, now: datetime) -> datetime:
    """Store the snooze expiry and return it so a wake-up can be scheduled."""
    when: datetime = now

    def _patch(state):
        nonlocal when
        when = snooze_expiry(state, now)
        return {ATTR_SNOOZE_UNTIL: epoch_ms(when)}

    await store.async_update(_patch)
    return when
