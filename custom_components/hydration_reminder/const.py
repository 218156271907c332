"""Constants for Hydration Reminder."""

# Integration domain must match the folder name under custom_components
DOMAIN = "hydration_reminder"

# Storage
STORAGE_KEY = "hydration_reminder"
STORAGE_VERSION = 1

# State record keys
ATTR_TARGET_CUPS = "target_cups"
ATTR_CUP_SIZE_ML = "cup_size_ml"
ATTR_INTERVAL_MIN = "interval_min"
ATTR_START_HOUR = "start_hour"
ATTR_END_HOUR = "end_hour"
ATTR_NOTIFICATIONS_ENABLED = "notifications_enabled"
ATTR_SNOOZE_MIN = "snooze_min"
ATTR_CUPS_TODAY = "cups_today"
ATTR_LAST_DATE = "last_date"
ATTR_SNOOZE_UNTIL = "snooze_until"

# Entry options that are not part of the state record
CONF_NOTIFY_SERVICES = "notify_services"

DEFAULTS = {
    ATTR_TARGET_CUPS: 8,
    ATTR_CUP_SIZE_ML: 250,
    ATTR_INTERVAL_MIN: 60,
    ATTR_START_HOUR: 9,
    ATTR_END_HOUR: 21,
    ATTR_NOTIFICATIONS_ENABLED: True,
    ATTR_SNOOZE_MIN: 15,
    ATTR_CUPS_TODAY: 0,
    ATTR_LAST_DATE: None,
    ATTR_SNOOZE_UNTIL: 0,
}

# Inclusive bounds for numeric settings
SETTINGS_BOUNDS = {
    ATTR_TARGET_CUPS: (1, 99),
    ATTR_CUP_SIZE_ML: (1, 1999),
    ATTR_INTERVAL_MIN: (1, 360),
    ATTR_START_HOUR: (0, 23),
    ATTR_END_HOUR: (0, 23),
    ATTR_SNOOZE_MIN: (5, 120),
}

# Alarms
ALARM_TICK = f"{DOMAIN}:tick"
ALARM_ROLLOVER = f"{DOMAIN}:rollover"
ALARM_SNOOZE_DONE = f"{DOMAIN}:snooze_done"
ROLLOVER_CHECK_MINUTES = 30

# Notifications
NOTIFICATION_ID = f"{DOMAIN}_reminder"
NOTIFICATION_TAG = DOMAIN
EVENT_REMINDER = f"{DOMAIN}_reminder"
EVENT_MOBILE_ACTION = "mobile_app_notification_action"
ACTION_DRINK = "HYDRATE_DRINK"
ACTION_SNOOZE = "HYDRATE_SNOOZE"
RESPONSE_DRINK = 0
RESPONSE_SNOOZE = 1

# Messages
MSG_GET_STATE = "GET_STATE"
MSG_DRINK_ONE = "DRINK_ONE"
MSG_UNDO_ONE = "UNDO_ONE"
MSG_RESET_TODAY = "RESET_TODAY"
MSG_SETTINGS_CHANGED = "SETTINGS_CHANGED"
ERROR_UNKNOWN_MESSAGE = "unknown_message"

# Dispatcher signal for display refresh
SIGNAL_STATE_UPDATED = f"{DOMAIN}_state_updated"
