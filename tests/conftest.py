import pytest

from pytest_homeassistant_custom_component.common import MockConfigEntry, async_mock_service

from custom_components.hydration_reminder.const import (
    ATTR_CUP_SIZE_ML,
    ATTR_TARGET_CUPS,
    DOMAIN,
)


@pytest.fixture
def expected_lingering_timers() -> bool:
    # Snooze expiry timers may outlive a test
    return True


@pytest.fixture
def notifications(hass, enable_custom_integrations):
    """Capture persistent notification calls made by the engine."""
    return {
        "create": async_mock_service(hass, "persistent_notification", "create"),
        "dismiss": async_mock_service(hass, "persistent_notification", "dismiss"),
    }


@pytest.fixture
def setup_entry(hass, notifications):
    async def _setup(data=None, options=None):
        entry = MockConfigEntry(
            domain=DOMAIN,
            data=data or {ATTR_TARGET_CUPS: 8, ATTR_CUP_SIZE_ML: 250},
            options=options or {},
            title="Hydration Reminder",
            unique_id=DOMAIN,
        )
        entry.add_to_hass(hass)
        await hass.config_entries.async_setup(entry.entry_id)
        await hass.async_block_till_done()
        return entry

    return _setup


@pytest.fixture
async def manager(hass, setup_entry):
    await setup_entry()
    return hass.data[DOMAIN]["manager"]
