"""Global fixtures for Media Orchestrator tests."""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

# Add repository root to path for custom_components imports
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from custom_components.media_orchestrator.const import DOMAIN, NAME  # noqa: E402
from custom_components.media_orchestrator.models import DeviceEntity  # noqa: E402

from tests.const import (  # noqa: E402
    KITCHEN,
    KITCHEN_IDLE,
    LIVING_ROOM,
    LIVING_ROOM_PLAYING,
    MASS_KITCHEN,
    MASS_LIVING_ROOM,
    MOCK_CONFIG,
    MOCK_OPTIONS,
)

pytest_plugins = "pytest_homeassistant_custom_component"


# ============================================================================
# Autouse Fixtures (applied to all tests automatically)
# ============================================================================


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations for all tests."""
    yield


@pytest.fixture(name="skip_notifications", autouse=True)
def skip_notifications_fixture():
    """Skip notification calls to prevent test failures."""
    with (
        patch("homeassistant.components.persistent_notification.async_create"),
        patch("homeassistant.components.persistent_notification.async_dismiss"),
    ):
        yield


@pytest.fixture(autouse=True)
def allow_unwatched_threads() -> bool:
    """Tell pytest-homeassistant that background threads are expected."""
    return True


# ============================================================================
# Core fixtures
# ============================================================================


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def _make_device(entity_id: str, state: str = "idle", kind: str = "speaker", **attributes) -> DeviceEntity:
    return DeviceEntity(entity_id=entity_id, state=state, attributes=attributes, kind=kind)


@pytest.fixture
def make_device():
    """Factory for snapshots built without going through the state machine."""
    return _make_device


@pytest.fixture
def mock_hass() -> MagicMock:
    """Bare hass mock for unit tests that never reach the state machine."""
    hass = MagicMock()
    hass.is_running = True
    hass.data = {}
    return hass


@pytest.fixture(name="mock_config_entry")
def mock_config_entry_fixture() -> MockConfigEntry:
    """Config entry with two players and zero delays."""
    return MockConfigEntry(
        domain=DOMAIN,
        title=NAME,
        data=MOCK_CONFIG,
        options=MOCK_OPTIONS,
        unique_id=DOMAIN,
    )


@pytest.fixture(name="players")
async def players_fixture(hass: HomeAssistant) -> None:
    """Living room group playing, kitchen idle, both with routing counterparts."""
    hass.states.async_set(LIVING_ROOM, "playing", LIVING_ROOM_PLAYING)
    hass.states.async_set(KITCHEN, "idle", KITCHEN_IDLE)
    hass.states.async_set(MASS_LIVING_ROOM, "playing", {"friendly_name": "Living Room", "mass_player_type": "group"})
    hass.states.async_set(MASS_KITCHEN, "idle", {"friendly_name": "Kitchen", "mass_player_type": "player"})


@pytest.fixture(name="setup_integration")
async def setup_integration_fixture(hass: HomeAssistant, players, mock_config_entry: MockConfigEntry):
    """Set up the orchestrator entry and return its coordinator."""
    mock_config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()
    yield hass.data[DOMAIN][mock_config_entry.entry_id]["coordinator"]

    # Unload so the position ticker does not outlive the test
    await hass.config_entries.async_unload(mock_config_entry.entry_id)
    await hass.async_block_till_done()
