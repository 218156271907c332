"""Durable hydration state record."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from .const import DEFAULTS, STORAGE_KEY, STORAGE_VERSION

_LOGGER = logging.getLogger(__name__)

Patcher = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]


class HydrationStore:
    """Owns the persisted HydrationState record.

    Reads always return a full record (absent keys fall back to DEFAULTS).
    Writes merge a patch into the stored map. A patch is only visible to
    readers once it has been saved, so a failed save leaves the record as
    it was. Callers that read, compute and write must go through
    ``async_update`` which serializes them on one lock.
    """

    def __init__(self, hass: HomeAssistant) -> None:
        self.hass = hass
        self._store: Store = Store(hass, STORAGE_VERSION, STORAGE_KEY)
        self._data: Dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def async_load(self) -> None:
        data = await self._store.async_load() or {}
        if not isinstance(data, dict):
            _LOGGER.warning("Ignoring malformed hydration state: %r", data)
            data = {}
        # Unknown keys are not carried forward
        self._data = {k: v for k, v in data.items() if k in DEFAULTS}

    def snapshot(self) -> Dict[str, Any]:
        return {**DEFAULTS, **self._data}

    async def async_get(self) -> Dict[str, Any]:
        return self.snapshot()

    async def async_set(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            return await self._async_write(patch)

    async def async_update(self, patcher: Patcher) -> Dict[str, Any]:
        """Run a read-modify-write under the state lock.

        ``patcher`` receives the current record and returns a patch, or
        ``None`` when nothing needs to change.
        """
        async with self._lock:
            patch = patcher(self.snapshot())
            if not patch:
                return self.snapshot()
            return await self._async_write(patch)

    async def _async_write(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        new = {**self._data, **{k: v for k, v in patch.items() if k in DEFAULTS}}
        await self._store.async_save(new)
        self._data = new
        return self.snapshot()
