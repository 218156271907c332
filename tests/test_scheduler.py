from datetime import timedelta

import pytest

from pytest_homeassistant_custom_component.common import async_capture_events, async_fire_time_changed

from homeassistant.util import dt as dt_util

from custom_components.hydration_reminder.const import (
    ALARM_ROLLOVER,
    ALARM_SNOOZE_DONE,
    ALARM_TICK,
    EVENT_REMINDER,
)


@pytest.mark.asyncio
async def test_startup_schedules_two_periodic_wakeups(manager):
    assert manager.scheduler.scheduled == sorted([ALARM_TICK, ALARM_ROLLOVER])


@pytest.mark.asyncio
async def test_reschedule_clears_pending_snooze(manager):
    await manager.async_snooze()
    assert ALARM_SNOOZE_DONE in manager.scheduler.scheduled

    await manager.async_update_settings({"interval_min": 45})
    assert manager.scheduler.scheduled == sorted([ALARM_TICK, ALARM_ROLLOVER])

    manager.async_stop()
    assert manager.scheduler.scheduled == []


@pytest.mark.asyncio
async def test_tick_fires_reminder(hass, freezer, manager):
    start = dt_util.now()
    await manager.async_update_settings({"start_hour": 0, "end_hour": 23, "interval_min": 5})
    events = async_capture_events(hass, EVENT_REMINDER)

    freezer.move_to(start + timedelta(minutes=5, seconds=1))
    async_fire_time_changed(hass, start + timedelta(minutes=5, seconds=1))
    await hass.async_block_till_done()

    assert len(events) == 1
    assert events[0].data["remaining"] == 8


@pytest.mark.asyncio
async def test_snooze_expiry_reopens_gate(hass, freezer, manager):
    start = dt_util.now()
    await manager.async_update_settings(
        {"start_hour": 0, "end_hour": 23, "snooze_min": 15, "interval_min": 120}
    )
    events = async_capture_events(hass, EVENT_REMINDER)

    await manager.async_snooze(start)
    assert await manager.async_check(start + timedelta(minutes=10)) is None
    assert events == []

    later = start + timedelta(minutes=16)
    freezer.move_to(later)
    async_fire_time_changed(hass, later)
    await hass.async_block_till_done()

    assert (await manager.store.async_get())["snooze_until"] == 0
    assert ALARM_SNOOZE_DONE not in manager.scheduler.scheduled
    assert len(events) == 1


@pytest.mark.asyncio
async def test_rollover_wakeup_resets_counters(hass, freezer, manager):
    start = dt_util.now()
    await manager.store.async_set({"cups_today": 5, "last_date": "2000-01-01"})

    later = start + timedelta(minutes=30, seconds=1)
    freezer.move_to(later)
    async_fire_time_changed(hass, later)
    await hass.async_block_till_done()

    state = await manager.store.async_get()
    assert state["cups_today"] == 0
    assert state["last_date"] == dt_util.now().date().isoformat()
    assert hass.states.get("sensor.hydration_cups_today").state == "0"
