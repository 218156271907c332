"""Sanitizing of incoming settings patches."""
from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List

import voluptuous as vol

from .const import ATTR_NOTIFICATIONS_ENABLED, SETTINGS_BOUNDS

_LOGGER = logging.getLogger(__name__)


def _number(value: Any) -> float:
    # bool is an int subclass; a checkbox value is never a count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise vol.Invalid(f"Expected a number, got {type(value).__name__}")
    return value


def _boolean(value: Any) -> bool:
    if not isinstance(value, bool):
        raise vol.Invalid(f"Expected a boolean, got {type(value).__name__}")
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _bounded(minimum: int, maximum: int):
    return vol.All(_number, vol.Range(min=minimum, max=maximum), _round_half_up)


SETTINGS_VALIDATORS = {
    key: _bounded(minimum, maximum) for key, (minimum, maximum) in SETTINGS_BOUNDS.items()
}
SETTINGS_VALIDATORS[ATTR_NOTIFICATIONS_ENABLED] = vol.All(_boolean)

SETTINGS_KEYS = tuple(SETTINGS_VALIDATORS)

_SERVICE_PATTERN = re.compile(r"^(?:notify\.)?[a-z0-9_]+$")


def sanitize_settings(patch: Any) -> Dict[str, Any]:
    """Return only the settings in ``patch`` that pass type and range checks.

    Invalid or unknown fields are dropped, never reported, so a patch can
    succeed partially. Numbers are rounded half-up after the range check.
    """
    if not isinstance(patch, dict):
        return {}
    out: Dict[str, Any] = {}
    for key, validator in SETTINGS_VALIDATORS.items():
        if key not in patch:
            continue
        try:
            out[key] = validator(patch[key])
        except vol.Invalid as err:
            _LOGGER.debug("Dropping setting %s=%r: %s", key, patch[key], err)
    return out


def parse_notify_services(value: Any) -> List[str]:
    """Allow 'notify.xxx' or 'xxx'; return normalized unique list of 'xxx'."""
    if isinstance(value, str):
        items = [s.strip() for s in value.split(",")]
    else:
        items = [str(s).strip() for s in value or []]
    out: list[str] = []
    seen: set[str] = set()
    for svc in items:
        if not svc or not _SERVICE_PATTERN.fullmatch(svc):
            continue
        name = svc.split(".", 1)[1] if svc.startswith("notify.") else svc
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out
