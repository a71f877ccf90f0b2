"""Tests for the orchestrator actions, including sync with YAML/strings.json."""

import json
from pathlib import Path

import pytest
import voluptuous as vol
import yaml
from homeassistant.core import HomeAssistant, SupportsResponse
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from pytest_homeassistant_custom_component.common import async_mock_service

from custom_components.media_orchestrator.const import (
    DOMAIN,
    SERVICE_BROWSE,
    SERVICE_CANCEL_SLEEP_TIMER,
    SERVICE_PLAY_CONTENT,
    SERVICE_RESOLVE_TARGET,
    SERVICE_SELECT_PLAYER,
    SERVICE_SEND_COMMAND,
    SERVICE_START_SLEEP_TIMER,
    SERVICE_TRANSFER_SESSION,
)
from custom_components.media_orchestrator.services import get_coordinator
from tests.const import KITCHEN, LIVING_ROOM, MASS_KITCHEN, MASS_LIVING_ROOM, PLAYLIST_URI

COMPONENT_DIR = Path(__file__).resolve().parents[2] / "custom_components" / DOMAIN
SENSOR = "sensor.media_orchestrator_active_player"
ALL_SERVICES = {
    SERVICE_PLAY_CONTENT,
    SERVICE_TRANSFER_SESSION,
    SERVICE_SEND_COMMAND,
    SERVICE_SELECT_PLAYER,
    SERVICE_RESOLVE_TARGET,
    SERVICE_BROWSE,
    SERVICE_START_SLEEP_TIMER,
    SERVICE_CANCEL_SLEEP_TIMER,
}


class TestServiceDefinitions:
    """services.yaml and strings.json describe every registered action."""

    def test_services_yaml(self):
        services = yaml.safe_load((COMPONENT_DIR / "services.yaml").read_text())
        assert set(services) == ALL_SERVICES

    def test_strings_json(self):
        strings = json.loads((COMPONENT_DIR / "strings.json").read_text())
        assert set(strings["services"]) == ALL_SERVICES

    def test_translations_match_strings(self):
        strings = json.loads((COMPONENT_DIR / "strings.json").read_text())
        english = json.loads((COMPONENT_DIR / "translations" / "en.json").read_text())
        assert strings == english


async def test_no_orchestrator_configured(hass: HomeAssistant) -> None:
    with pytest.raises(HomeAssistantError, match="No media orchestrator"):
        get_coordinator(hass)


async def test_services_registered(hass: HomeAssistant, setup_integration) -> None:
    for service in ALL_SERVICES:
        assert hass.services.has_service(DOMAIN, service)


async def test_resolve_target(hass: HomeAssistant, setup_integration) -> None:
    response = await hass.services.async_call(
        DOMAIN, SERVICE_RESOLVE_TARGET, {"entity_id": KITCHEN}, blocking=True, return_response=True
    )
    assert response == {"entity_id": KITCHEN, "resolved": MASS_KITCHEN, "effective": MASS_KITCHEN}


async def test_resolve_target_without_alternate(hass: HomeAssistant, setup_integration) -> None:
    response = await hass.services.async_call(
        DOMAIN, SERVICE_RESOLVE_TARGET, {"entity_id": "media_player.porch"}, blocking=True, return_response=True
    )
    assert response == {"entity_id": "media_player.porch", "resolved": None, "effective": "media_player.porch"}


async def test_play_content_response(hass: HomeAssistant, setup_integration) -> None:
    async_mock_service(hass, "media_player", "turn_on")
    ma_calls = async_mock_service(hass, "music_assistant", "play_media")

    response = await hass.services.async_call(
        DOMAIN,
        SERVICE_PLAY_CONTENT,
        {"entity_id": KITCHEN, "content_id": "4aawyAB9vmqN3uQ7FjRGTy", "content_type": "album"},
        blocking=True,
        return_response=True,
    )

    assert response["success"] is True
    assert response["strategy"] == "music_assistant"
    assert response["uri"] == "spotify:album:4aawyAB9vmqN3uQ7FjRGTy"
    assert ma_calls[0].data["media_type"] == "album"
    assert setup_integration.last_outcome.strategy == "music_assistant"


async def test_play_content_defaults_to_active_player(hass: HomeAssistant, setup_integration) -> None:
    play_calls = async_mock_service(hass, "media_player", "play_media")

    await hass.services.async_call(DOMAIN, SERVICE_PLAY_CONTENT, {"content_id": PLAYLIST_URI}, blocking=True)

    assert play_calls[0].data["entity_id"] == MASS_LIVING_ROOM
    assert setup_integration.last_outcome.intent.entity_id == LIVING_ROOM


async def test_play_content_rejects_unknown_type(hass: HomeAssistant, setup_integration) -> None:
    with pytest.raises((vol.Invalid, ServiceValidationError)):
        await hass.services.async_call(
            DOMAIN, SERVICE_PLAY_CONTENT, {"content_id": PLAYLIST_URI, "content_type": "podcast"}, blocking=True
        )


async def test_select_player(hass: HomeAssistant, setup_integration) -> None:
    await hass.services.async_call(DOMAIN, SERVICE_SELECT_PLAYER, {"entity_id": KITCHEN}, blocking=True)
    await hass.async_block_till_done()
    assert setup_integration.active_player == KITCHEN
    assert hass.states.get("select.media_orchestrator_player").state == KITCHEN

    await hass.services.async_call(DOMAIN, SERVICE_SELECT_PLAYER, {}, blocking=True)
    await hass.async_block_till_done()
    assert setup_integration.active_player == LIVING_ROOM
    assert hass.states.get("select.media_orchestrator_player").state == "auto"


async def test_select_player_not_configured(hass: HomeAssistant, setup_integration) -> None:
    with pytest.raises(ServiceValidationError):
        await hass.services.async_call(
            DOMAIN, SERVICE_SELECT_PLAYER, {"entity_id": "media_player.porch"}, blocking=True
        )


async def test_send_command_to_active_player(hass: HomeAssistant, setup_integration) -> None:
    pause_calls = async_mock_service(hass, "media_player", "media_pause")

    await hass.services.async_call(DOMAIN, SERVICE_SEND_COMMAND, {"action": "media_pause"}, blocking=True)

    assert pause_calls[0].data["entity_id"] == MASS_LIVING_ROOM


async def test_send_command_with_data(hass: HomeAssistant, setup_integration) -> None:
    seek_calls = async_mock_service(hass, "media_player", "media_seek")

    await hass.services.async_call(
        DOMAIN,
        SERVICE_SEND_COMMAND,
        {"action": "media_seek", "entity_id": KITCHEN, "data": {"seek_position": 42}},
        blocking=True,
    )

    assert seek_calls[0].data == {"seek_position": 42, "entity_id": MASS_KITCHEN}


async def test_send_command_unknown_action(hass: HomeAssistant, setup_integration) -> None:
    with pytest.raises(ServiceValidationError):
        await hass.services.async_call(DOMAIN, SERVICE_SEND_COMMAND, {"action": "self_destruct"}, blocking=True)


async def test_transfer_session_to_itself(hass: HomeAssistant, setup_integration) -> None:
    with pytest.raises(ServiceValidationError):
        await hass.services.async_call(DOMAIN, SERVICE_TRANSFER_SESSION, {"target": LIVING_ROOM}, blocking=True)


async def test_transfer_session_switches_selection(hass: HomeAssistant, setup_integration) -> None:
    async_mock_service(hass, "media_player", "turn_on")
    async_mock_service(hass, "music_assistant", "play_media")
    async_mock_service(hass, "media_player", "media_pause")

    await hass.services.async_call(DOMAIN, SERVICE_TRANSFER_SESSION, {"target": KITCHEN}, blocking=True)

    assert setup_integration.active_player == KITCHEN


BROWSE_ROOT = {
    "title": "Library",
    "media_class": "directory",
    "media_content_id": "root",
    "media_content_type": "library",
    "can_play": False,
    "can_expand": True,
    "children": [
        {"title": "Morning Coffee", "media_content_id": PLAYLIST_URI, "media_content_type": "playlist"},
    ],
}


async def test_browse_unwraps_entity_response(hass: HomeAssistant, setup_integration) -> None:
    browse_calls = async_mock_service(
        hass, "media_player", "browse_media", response={KITCHEN: BROWSE_ROOT}, supports_response=SupportsResponse.ONLY
    )

    response = await hass.services.async_call(
        DOMAIN,
        SERVICE_BROWSE,
        {"entity_id": KITCHEN, "media_content_id": "root", "media_content_type": "library"},
        blocking=True,
        return_response=True,
    )

    assert response == BROWSE_ROOT
    assert browse_calls[0].data == {
        "entity_id": KITCHEN,
        "media_content_id": "root",
        "media_content_type": "library",
    }


async def test_browse_defaults_to_active_player(hass: HomeAssistant, setup_integration) -> None:
    browse_calls = async_mock_service(
        hass,
        "media_player",
        "browse_media",
        response={"response": {LIVING_ROOM: BROWSE_ROOT}},
        supports_response=SupportsResponse.ONLY,
    )

    response = await hass.services.async_call(DOMAIN, SERVICE_BROWSE, {}, blocking=True, return_response=True)

    assert response["children"][0]["media_content_id"] == PLAYLIST_URI
    assert browse_calls[0].data == {"entity_id": LIVING_ROOM}


async def test_sleep_timer_start_and_cancel(hass: HomeAssistant, setup_integration) -> None:
    script_calls = async_mock_service(hass, "script", "turn_on")

    await hass.services.async_call(DOMAIN, SERVICE_START_SLEEP_TIMER, {"duration": 30}, blocking=True)
    await hass.async_block_till_done()

    assert script_calls[0].data == {
        "entity_id": "script.sleep_timer",
        "variables": {"duration": 30, "entity_id": LIVING_ROOM},
    }
    attributes = hass.states.get(SENSOR).attributes
    assert attributes["sleep_timer_remaining"] == 30
    assert attributes["sleep_timer_duration"] == 30

    await hass.services.async_call(DOMAIN, SERVICE_CANCEL_SLEEP_TIMER, {}, blocking=True)
    await hass.async_block_till_done()

    assert script_calls[1].data == {
        "entity_id": "script.sleep_timer_cancel",
        "variables": {"entity_id": LIVING_ROOM},
    }
    assert hass.states.get(SENSOR).attributes["sleep_timer_remaining"] is None


async def test_sleep_timer_cleared_when_script_stops(hass: HomeAssistant, setup_integration) -> None:
    async_mock_service(hass, "script", "turn_on")
    await hass.services.async_call(
        DOMAIN, SERVICE_START_SLEEP_TIMER, {"duration": 10, "entity_id": KITCHEN}, blocking=True
    )
    hass.states.async_set("script.sleep_timer", "on")
    await hass.async_block_till_done()
    assert setup_integration.sleep_timer.entity_id == KITCHEN

    hass.states.async_set("script.sleep_timer", "off")
    await hass.async_block_till_done()

    assert not setup_integration.sleep_timer.running
    assert hass.states.get(SENSOR).attributes["sleep_timer_remaining"] is None


async def test_sleep_timer_rejects_zero_duration(hass: HomeAssistant, setup_integration) -> None:
    with pytest.raises((vol.Invalid, ServiceValidationError)):
        await hass.services.async_call(DOMAIN, SERVICE_START_SLEEP_TIMER, {"duration": 0}, blocking=True)
