"""Config flow for Hydration Reminder integration."""
from __future__ import annotations

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
    ATTR_CUP_SIZE_ML,
    ATTR_END_HOUR,
    ATTR_INTERVAL_MIN,
    ATTR_NOTIFICATIONS_ENABLED,
    ATTR_SNOOZE_MIN,
    ATTR_START_HOUR,
    ATTR_TARGET_CUPS,
    CONF_NOTIFY_SERVICES,
    DEFAULTS,
    DOMAIN,
    MSG_SETTINGS_CHANGED,
)
from .validation import SETTINGS_KEYS, parse_notify_services, sanitize_settings


class HydrationReminderConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        errors = {}
        if user_input is not None:
            data = sanitize_settings(user_input)
            if ATTR_TARGET_CUPS not in data:
                errors[ATTR_TARGET_CUPS] = "out_of_range"
            elif ATTR_CUP_SIZE_ML not in data:
                errors[ATTR_CUP_SIZE_ML] = "out_of_range"
            else:
                return self.async_create_entry(title="Hydration Reminder", data=data)

        schema = vol.Schema(
            {
                vol.Required(ATTR_TARGET_CUPS, default=DEFAULTS[ATTR_TARGET_CUPS]): int,
                vol.Required(ATTR_CUP_SIZE_ML, default=DEFAULTS[ATTR_CUP_SIZE_ML]): int,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: config_entries.ConfigEntry):
        return HydrationReminderOptionsFlow()


class HydrationReminderOptionsFlow(config_entries.OptionsFlow):
    async def async_step_init(self, user_input=None):
        if user_input is not None:
            notify_services = (user_input.get(CONF_NOTIFY_SERVICES) or "").strip()
            manager = self.hass.data.get(DOMAIN, {}).get("manager")
            if manager:
                # Applied on every submit; the entry only keeps the notify targets
                manager.notify_services = parse_notify_services(notify_services)
                await manager.async_handle_message({**user_input, "type": MSG_SETTINGS_CHANGED})
            return self.async_create_entry(title="", data={CONF_NOTIFY_SERVICES: notify_services})

        manager = self.hass.data.get(DOMAIN, {}).get("manager")
        state = manager.store.snapshot() if manager else dict(DEFAULTS)
        current = {key: state[key] for key in SETTINGS_KEYS}

        schema = vol.Schema(
            {
                vol.Optional(ATTR_TARGET_CUPS, default=current[ATTR_TARGET_CUPS]): int,
                vol.Optional(ATTR_CUP_SIZE_ML, default=current[ATTR_CUP_SIZE_ML]): int,
                vol.Optional(ATTR_INTERVAL_MIN, default=current[ATTR_INTERVAL_MIN]): int,
                vol.Optional(ATTR_START_HOUR, default=current[ATTR_START_HOUR]): int,
                vol.Optional(ATTR_END_HOUR, default=current[ATTR_END_HOUR]): int,
                vol.Optional(ATTR_SNOOZE_MIN, default=current[ATTR_SNOOZE_MIN]): int,
                vol.Optional(ATTR_NOTIFICATIONS_ENABLED, default=current[ATTR_NOTIFICATIONS_ENABLED]): bool,
                vol.Optional(
                    CONF_NOTIFY_SERVICES,
                    default=self.config_entry.options.get(CONF_NOTIFY_SERVICES, ""),
                    description={
                        "suggested_value": "notify.mobile_app_my_phone",
                    },
                ): str,
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema)
