"""Hydration Reminder integration for Home Assistant."""
from __future__ import annotations

import logging
from typing import Any, Awaitable

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError

from .const import (
    ACTION_DRINK,
    ACTION_SNOOZE,
    CONF_NOTIFY_SERVICES,
    DOMAIN,
    EVENT_MOBILE_ACTION,
    MSG_DRINK_ONE,
    MSG_GET_STATE,
    MSG_RESET_TODAY,
    MSG_UNDO_ONE,
    RESPONSE_DRINK,
    RESPONSE_SNOOZE,
)
from .manager import HydrationManager
from .store import HydrationStore
from .validation import parse_notify_services

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["sensor"]
SERVICES = ("drink_one", "undo_one", "reset_today", "snooze", "update_settings", "get_state", "send_message")

SETTINGS_SCHEMA = vol.Schema({}, extra=vol.ALLOW_EXTRA)
MESSAGE_SCHEMA = vol.Schema({}, extra=vol.ALLOW_EXTRA)


def _get_manager(hass: HomeAssistant) -> HydrationManager:
    manager = hass.data.get(DOMAIN, {}).get("manager")
    if manager is None:
        raise HomeAssistantError("Hydration Reminder is not set up")
    return manager


async def _async_guard(coro: Awaitable[Any]) -> Any:
    try:
        return await coro
    except OSError as err:
        raise HomeAssistantError(f"Hydration state unavailable: {err}") from err


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Hydration Reminder from a config entry."""
    data = hass.data.setdefault(DOMAIN, {})

    store = HydrationStore(hass)
    await store.async_load()
    manager = HydrationManager(
        hass,
        store,
        notify_services=parse_notify_services(entry.options.get(CONF_NOTIFY_SERVICES, "")),
    )
    data["manager"] = manager
    await manager.async_start(dict(entry.data))

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.debug("%s: sensor platform forwarded for entry %s", DOMAIN, entry.entry_id)

    async def _options_updated(hass: HomeAssistant, updated_entry: ConfigEntry) -> None:
        mgr = _get_manager(hass)
        # Settings are applied by the options flow itself
        mgr.notify_services = parse_notify_services(updated_entry.options.get(CONF_NOTIFY_SERVICES, ""))

    entry.async_on_unload(entry.add_update_listener(_options_updated))

    if not data.get("services_registered"):
        _async_register_services(hass)
        data["services_registered"] = True
        _LOGGER.debug("%s: services registered", DOMAIN)

    if not data.get("mobile_unsub"):
        async def _handle_mobile_action(event):
            payload = event.data or {}
            action = str(payload.get("action", "")).upper()
            if action == ACTION_DRINK:
                index = RESPONSE_DRINK
            elif action == ACTION_SNOOZE:
                index = RESPONSE_SNOOZE
            else:
                return
            mgr = hass.data.get(DOMAIN, {}).get("manager")
            if not mgr:
                return
            await mgr.async_handle_notification_response(index)

        data["mobile_unsub"] = hass.bus.async_listen(EVENT_MOBILE_ACTION, _handle_mobile_action)
        _LOGGER.debug("%s: listening for %s", DOMAIN, EVENT_MOBILE_ACTION)

    return True


def _async_register_services(hass: HomeAssistant) -> None:
    async def _message(msg_type: str) -> None:
        await _async_guard(_get_manager(hass).async_handle_message({"type": msg_type}))

    async def drink_one(call: ServiceCall) -> None:
        await _message(MSG_DRINK_ONE)

    async def undo_one(call: ServiceCall) -> None:
        await _message(MSG_UNDO_ONE)

    async def reset_today(call: ServiceCall) -> None:
        await _message(MSG_RESET_TODAY)

    async def snooze(call: ServiceCall) -> None:
        await _async_guard(_get_manager(hass).async_snooze())

    async def update_settings(call: ServiceCall) -> None:
        await _async_guard(_get_manager(hass).async_update_settings(dict(call.data)))

    async def get_state(call: ServiceCall) -> ServiceResponse:
        return await _get_manager(hass).async_handle_message({"type": MSG_GET_STATE})

    async def send_message(call: ServiceCall) -> ServiceResponse:
        return await _async_guard(_get_manager(hass).async_handle_message(dict(call.data)))

    hass.services.async_register(DOMAIN, "drink_one", drink_one)
    hass.services.async_register(DOMAIN, "undo_one", undo_one)
    hass.services.async_register(DOMAIN, "reset_today", reset_today)
    hass.services.async_register(DOMAIN, "snooze", snooze)
    hass.services.async_register(DOMAIN, "update_settings", update_settings, schema=SETTINGS_SCHEMA)
    hass.services.async_register(DOMAIN, "get_state", get_state, supports_response=SupportsResponse.ONLY)
    hass.services.async_register(
        DOMAIN, "send_message", send_message, schema=MESSAGE_SCHEMA, supports_response=SupportsResponse.OPTIONAL
    )


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not ok:
        return False

    data = hass.data.get(DOMAIN, {})
    manager = data.pop("manager", None)
    if manager:
        manager.async_stop()
    for svc in SERVICES:
        if hass.services.has_service(DOMAIN, svc):
            hass.services.async_remove(DOMAIN, svc)
    unsub = data.pop("mobile_unsub", None)
    if unsub:
        unsub()
    data["services_registered"] = False
    return True
