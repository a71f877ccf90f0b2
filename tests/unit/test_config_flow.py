"""Test Media Orchestrator config and options flows."""

from unittest.mock import patch

import pytest
from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.media_orchestrator.const import (
    CONF_GROUP_PLAYERS,
    CONF_PLAYERS,
    CONF_SETTLE_DELAY,
    CONF_SLEEP_TIMER_CANCEL_SCRIPT,
    CONF_SLEEP_TIMER_SCRIPT,
    CONF_SPOTIFY_ENTITY,
    CONF_TARGET_OVERRIDES,
    CONF_VOLUME_LOCK,
    CONF_WARMUP_DELAY,
    DOMAIN,
    NAME,
)
from tests.const import KITCHEN, LIVING_ROOM, MASS_LIVING_ROOM


@pytest.fixture(autouse=True)
def bypass_setup():
    """Keep created entries from being set up."""
    with patch("custom_components.media_orchestrator.async_setup_entry", return_value=True):
        yield


async def test_form(hass: HomeAssistant) -> None:
    """Test we get the initial form."""
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": config_entries.SOURCE_USER})
    assert result["type"] is FlowResultType.FORM
    assert result["step_id"] == "user"
    assert result["errors"] == {}


async def test_create_entry(hass: HomeAssistant) -> None:
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": config_entries.SOURCE_USER})
    result = await hass.config_entries.flow.async_configure(
        result["flow_id"],
        {
            CONF_PLAYERS: [LIVING_ROOM, KITCHEN],
            CONF_GROUP_PLAYERS: [LIVING_ROOM],
            CONF_SPOTIFY_ENTITY: "media_player.spotify_family",
            CONF_TARGET_OVERRIDES: f"{LIVING_ROOM}: {MASS_LIVING_ROOM}",
        },
    )
    await hass.async_block_till_done()

    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert result["title"] == NAME
    assert result["data"] == {
        CONF_PLAYERS: [LIVING_ROOM, KITCHEN],
        CONF_GROUP_PLAYERS: [LIVING_ROOM],
        CONF_SPOTIFY_ENTITY: "media_player.spotify_family",
        CONF_TARGET_OVERRIDES: {LIVING_ROOM: MASS_LIVING_ROOM},
    }


async def test_no_players(hass: HomeAssistant) -> None:
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": config_entries.SOURCE_USER})
    result = await hass.config_entries.flow.async_configure(result["flow_id"], {CONF_PLAYERS: []})
    assert result["type"] is FlowResultType.FORM
    assert result["errors"] == {CONF_PLAYERS: "no_players"}


async def test_group_must_be_player(hass: HomeAssistant) -> None:
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": config_entries.SOURCE_USER})
    result = await hass.config_entries.flow.async_configure(
        result["flow_id"], {CONF_PLAYERS: [KITCHEN], CONF_GROUP_PLAYERS: [LIVING_ROOM]}
    )
    assert result["errors"] == {CONF_GROUP_PLAYERS: "group_not_player"}


async def test_invalid_overrides(hass: HomeAssistant) -> None:
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": config_entries.SOURCE_USER})
    result = await hass.config_entries.flow.async_configure(
        result["flow_id"], {CONF_PLAYERS: [KITCHEN], CONF_TARGET_OVERRIDES: "media_player.kitchen"}
    )
    assert result["errors"] == {CONF_TARGET_OVERRIDES: "invalid_overrides"}


async def test_single_instance(hass: HomeAssistant, mock_config_entry: MockConfigEntry) -> None:
    mock_config_entry.add_to_hass(hass)
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": config_entries.SOURCE_USER})
    assert result["type"] is FlowResultType.ABORT
    assert result["reason"] in {"single_instance_allowed", "already_configured"}


async def test_options_flow(hass: HomeAssistant, mock_config_entry: MockConfigEntry) -> None:
    mock_config_entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(mock_config_entry.entry_id)
    assert result["type"] is FlowResultType.FORM
    assert result["step_id"] == "init"

    result = await hass.config_entries.options.async_configure(
        result["flow_id"],
        {
            CONF_WARMUP_DELAY: 2.5,
            CONF_SETTLE_DELAY: 1,
            CONF_VOLUME_LOCK: 10,
            CONF_SLEEP_TIMER_SCRIPT: "script.bedtime",
            CONF_TARGET_OVERRIDES: f"{KITCHEN} -> media_player.ma_kitchen",
        },
    )

    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert mock_config_entry.options[CONF_WARMUP_DELAY] == 2.5
    assert mock_config_entry.options[CONF_SETTLE_DELAY] == 1.0
    assert mock_config_entry.options[CONF_VOLUME_LOCK] == 10.0
    assert mock_config_entry.options[CONF_TARGET_OVERRIDES] == {KITCHEN: "media_player.ma_kitchen"}
    assert mock_config_entry.options[CONF_SLEEP_TIMER_SCRIPT] == "script.bedtime"
    assert mock_config_entry.options[CONF_SLEEP_TIMER_CANCEL_SCRIPT] == "script.sleep_timer_cancel"


async def test_options_flow_invalid_overrides(hass: HomeAssistant, mock_config_entry: MockConfigEntry) -> None:
    mock_config_entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(mock_config_entry.entry_id)
    result = await hass.config_entries.options.async_configure(
        result["flow_id"], {CONF_TARGET_OVERRIDES: "no separator here"}
    )

    assert result["type"] is FlowResultType.FORM
    assert result["errors"] == {CONF_TARGET_OVERRIDES: "invalid_overrides"}
