import asyncio
from unittest.mock import patch

import pytest

from pytest_homeassistant_custom_component.common import async_mock_service

from homeassistant.exceptions import HomeAssistantError

from custom_components.hydration_reminder.const import DOMAIN, EVENT_MOBILE_ACTION, NOTIFICATION_TAG


@pytest.mark.asyncio
async def test_entities_and_services(hass, manager):
    cups = hass.states.get("sensor.hydration_cups_today")
    assert cups is not None
    assert cups.state == "0"
    assert cups.attributes.get("badge") == "0/8"

    await hass.services.async_call(DOMAIN, "drink_one", {}, blocking=True)
    await hass.services.async_call(DOMAIN, "drink_one", {}, blocking=True)
    await hass.async_block_till_done()
    cups = hass.states.get("sensor.hydration_cups_today")
    assert cups.state == "2"
    assert cups.attributes.get("consumed_ml") == 500
    assert cups.attributes.get("remaining") == 6
    assert hass.states.get("sensor.hydration_progress").state == "25"

    await hass.services.async_call(DOMAIN, "undo_one", {}, blocking=True)
    await hass.async_block_till_done()
    assert hass.states.get("sensor.hydration_cups_today").state == "1"

    await hass.services.async_call(DOMAIN, "reset_today", {}, blocking=True)
    await hass.async_block_till_done()
    assert hass.states.get("sensor.hydration_cups_today").state == "0"

    state = await hass.services.async_call(DOMAIN, "get_state", {}, blocking=True, return_response=True)
    assert state["cups_today"] == 0
    assert state["target_cups"] == 8
    assert state["last_date"] is not None


@pytest.mark.asyncio
async def test_message_contract(hass, manager):
    assert await manager.async_handle_message({"type": "DRINK_ONE"}) == {"ok": True}
    assert await manager.async_handle_message({"type": "UNDO_ONE"}) == {"ok": True}
    assert await manager.async_handle_message({"type": "RESET_TODAY"}) == {"ok": True}
    assert await manager.async_handle_message({"type": "SETTINGS_CHANGED", "snooze_min": 30}) == {"ok": True}
    state = await manager.async_handle_message({"type": "GET_STATE"})
    assert state["snooze_min"] == 30

    before = await manager.store.async_get()
    assert await manager.async_handle_message({"type": "DRINK_TWO"}) == {"ok": False, "error": "unknown_message"}
    assert await manager.async_handle_message("GET_STATE") == {"ok": False, "error": "unknown_message"}
    assert await manager.store.async_get() == before


@pytest.mark.asyncio
async def test_send_message_service(hass, manager):
    response = await hass.services.async_call(
        DOMAIN, "send_message", {"type": "NOPE"}, blocking=True, return_response=True
    )
    assert response == {"ok": False, "error": "unknown_message"}

    response = await hass.services.async_call(
        DOMAIN,
        "send_message",
        {"type": "SETTINGS_CHANGED", "target_cups": 150, "cup_size_ml": 300},
        blocking=True,
        return_response=True,
    )
    assert response == {"ok": True}
    state = await manager.store.async_get()
    assert state["target_cups"] == 8
    assert state["cup_size_ml"] == 300


@pytest.mark.asyncio
async def test_lowering_goal_clamps_counter(hass, manager):
    await manager.store.async_set({"cups_today": 9, "target_cups": 10})
    await hass.services.async_call(DOMAIN, "update_settings", {"target_cups": 8}, blocking=True)
    await hass.async_block_till_done()
    state = await manager.store.async_get()
    assert state["target_cups"] == 8
    assert state["cups_today"] == 8
    assert hass.states.get("sensor.hydration_cups_today").attributes.get("badge") == "8/8"


@pytest.mark.asyncio
async def test_store_failure_surfaces_as_service_error(hass, manager):
    with patch.object(manager.store._store, "async_save", side_effect=OSError("disk gone")):
        with pytest.raises(HomeAssistantError):
            await hass.services.async_call(DOMAIN, "drink_one", {}, blocking=True)
    await hass.async_block_till_done()
    assert (await manager.store.async_get())["cups_today"] == 0


@pytest.mark.asyncio
async def test_notification_responses(hass, manager, notifications):
    await manager.async_handle_notification_response(0)
    await manager.async_handle_notification_response(None)
    assert (await manager.store.async_get())["cups_today"] == 2

    await manager.async_handle_notification_response(1)
    assert (await manager.store.async_get())["snooze_until"] > 0

    await manager.async_handle_notification_response(5)
    await hass.async_block_till_done()
    assert len(notifications["dismiss"]) == 3


@pytest.mark.asyncio
async def test_mobile_action_event(hass, setup_entry):
    phone = async_mock_service(hass, "notify", "mobile_app_phone")
    await setup_entry(options={"notify_services": "notify.mobile_app_phone"})
    manager = hass.data[DOMAIN]["manager"]

    hass.bus.async_fire(EVENT_MOBILE_ACTION, {"action": "HYDRATE_DRINK", "tag": NOTIFICATION_TAG})
    await hass.async_block_till_done()
    assert hass.states.get("sensor.hydration_cups_today").state == "1"

    # A body tap carries no action and is not a response
    hass.bus.async_fire(EVENT_MOBILE_ACTION, {"tag": NOTIFICATION_TAG})
    await hass.async_block_till_done()
    assert hass.states.get("sensor.hydration_cups_today").state == "1"

    hass.bus.async_fire(EVENT_MOBILE_ACTION, {"action": "HYDRATE_SNOOZE"})
    await hass.async_block_till_done()
    assert (await manager.store.async_get())["snooze_until"] > 0

    hass.bus.async_fire(EVENT_MOBILE_ACTION, {"action": "MED_TAKEN", "tag": "other"})
    await hass.async_block_till_done()
    assert hass.states.get("sensor.hydration_cups_today").state == "1"
    # One clear per handled response
    assert len(phone) == 2


@pytest.mark.asyncio
async def test_unload_removes_services(hass, setup_entry):
    entry = await setup_entry()
    assert await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()
    assert not hass.services.has_service(DOMAIN, "drink_one")
    assert "manager" not in hass.data[DOMAIN]


@pytest.mark.asyncio
async def test_send_message_without_type(hass, manager):
    for data in ({}, {"type": 5}, {"target_cups": 3}):
        response = await hass.services.async_call(
            DOMAIN, "send_message", data, blocking=True, return_response=True
        )
        assert response == {"ok": False, "error": "unknown_message"}
    assert (await manager.store.async_get())["target_cups"] == 8


@pytest.mark.asyncio
async def test_simultaneous_drinks_are_all_counted(hass, manager):
    await asyncio.gather(*(manager.async_handle_message({"type": "DRINK_ONE"}) for _ in range(3)))
    assert (await manager.store.async_get())["cups_today"] == 3

    await asyncio.gather(
        manager.async_handle_message({"type": "DRINK_ONE"}),
        manager.async_handle_message({"type": "UNDO_ONE"}),
        manager.async_handle_message({"type": "DRINK_ONE"}),
    )
    assert (await manager.store.async_get())["cups_today"] == 4
