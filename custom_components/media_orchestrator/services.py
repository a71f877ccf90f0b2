"""Media Orchestrator actions.

Schemas and handlers for the integration-wide services.  They are
registered once per Home Assistant instance when the first entry is set
up and operate on the (single) orchestrator coordinator.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant.components.media_player import (
    ATTR_MEDIA_CONTENT_ID,
    ATTR_MEDIA_CONTENT_TYPE,
    DOMAIN as MEDIA_PLAYER_DOMAIN,
)
from homeassistant.const import ATTR_ENTITY_ID
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from .const import (
    CONTENT_KINDS,
    DEFAULT_CONTENT_KIND,
    DOMAIN,
    MAX_SLEEP_TIMER,
    SERVICE_BROWSE,
    SERVICE_CANCEL_SLEEP_TIMER,
    SERVICE_PLAY_CONTENT,
    SERVICE_RESOLVE_TARGET,
    SERVICE_SELECT_PLAYER,
    SERVICE_SEND_COMMAND,
    SERVICE_START_SLEEP_TIMER,
    SERVICE_TRANSFER_SESSION,
)
from .models import PlaybackIntent

if TYPE_CHECKING:
    from .coordinator import OrchestratorCoordinator

_LOGGER = logging.getLogger(__name__)

# Attribute names
ATTR_CONTENT_ID = "content_id"
ATTR_CONTENT_TYPE = "content_type"
ATTR_SOURCE = "source"
ATTR_TARGET = "target"
ATTR_ACTION = "action"
ATTR_DOMAIN = "domain"
ATTR_DATA = "data"
ATTR_DURATION = "duration"

# Service schemas
SCHEMA_PLAY_CONTENT = vol.Schema(
    {
        vol.Optional(ATTR_ENTITY_ID): cv.entity_domain(MEDIA_PLAYER_DOMAIN),
        vol.Required(ATTR_CONTENT_ID): cv.string,
        vol.Optional(ATTR_CONTENT_TYPE, default=DEFAULT_CONTENT_KIND): vol.In(CONTENT_KINDS),
    }
)

SCHEMA_TRANSFER_SESSION = vol.Schema(
    {
        vol.Required(ATTR_TARGET): cv.entity_domain(MEDIA_PLAYER_DOMAIN),
        vol.Optional(ATTR_SOURCE): cv.entity_domain(MEDIA_PLAYER_DOMAIN),
    }
)

SCHEMA_SEND_COMMAND = vol.Schema(
    {
        vol.Required(ATTR_ACTION): cv.slug,
        vol.Optional(ATTR_ENTITY_ID): cv.entity_id,
        vol.Optional(ATTR_DOMAIN, default=MEDIA_PLAYER_DOMAIN): cv.slug,
        vol.Optional(ATTR_DATA, default=dict): dict,
    }
)

SCHEMA_SELECT_PLAYER = vol.Schema({vol.Optional(ATTR_ENTITY_ID): vol.Any(None, cv.entity_domain(MEDIA_PLAYER_DOMAIN))})

SCHEMA_RESOLVE_TARGET = vol.Schema({vol.Required(ATTR_ENTITY_ID): cv.entity_domain(MEDIA_PLAYER_DOMAIN)})

SCHEMA_BROWSE = vol.Schema(
    {
        vol.Optional(ATTR_ENTITY_ID): cv.entity_domain(MEDIA_PLAYER_DOMAIN),
        vol.Optional(ATTR_MEDIA_CONTENT_ID): cv.string,
        vol.Optional(ATTR_MEDIA_CONTENT_TYPE): cv.string,
    }
)

SCHEMA_START_SLEEP_TIMER = vol.Schema(
    {
        vol.Required(ATTR_DURATION): vol.All(vol.Coerce(int), vol.Range(min=1, max=MAX_SLEEP_TIMER)),
        vol.Optional(ATTR_ENTITY_ID): cv.entity_domain(MEDIA_PLAYER_DOMAIN),
    }
)

SCHEMA_CANCEL_SLEEP_TIMER = vol.Schema({vol.Optional(ATTR_ENTITY_ID): cv.entity_domain(MEDIA_PLAYER_DOMAIN)})


def get_coordinator(hass: HomeAssistant) -> OrchestratorCoordinator:
    """Coordinator of the loaded orchestrator entry.

    Raises:
        HomeAssistantError: no orchestrator is configured
    """
    for entry_data in hass.data.get(DOMAIN, {}).values():
        if isinstance(entry_data, dict) and "coordinator" in entry_data:
            return entry_data["coordinator"]
    raise HomeAssistantError("No media orchestrator is configured")


def _active_or_raise(coordinator: OrchestratorCoordinator) -> str:
    if (active := coordinator.active_player) is None:
        raise ServiceValidationError("No active player")
    return active


async def _async_play_content(call: ServiceCall) -> ServiceResponse:
    coordinator = get_coordinator(call.hass)
    entity_id = call.data.get(ATTR_ENTITY_ID) or _active_or_raise(coordinator)
    intent = PlaybackIntent(
        entity_id=entity_id,
        content_id=call.data[ATTR_CONTENT_ID],
        content_kind=call.data[ATTR_CONTENT_TYPE],
    )
    outcome = await coordinator.async_play(intent)
    if call.return_response:
        return outcome.as_dict()
    return None


async def _async_transfer_session(call: ServiceCall) -> None:
    coordinator = get_coordinator(call.hass)
    target = call.data[ATTR_TARGET]
    source = call.data.get(ATTR_SOURCE) or _active_or_raise(coordinator)
    if source == target:
        raise ServiceValidationError(f"{target} is already the source")
    await coordinator.async_transfer(source, target)


async def _async_send_command(call: ServiceCall) -> None:
    coordinator = get_coordinator(call.hass)
    entity_id = call.data.get(ATTR_ENTITY_ID) or _active_or_raise(coordinator)
    domain = call.data[ATTR_DOMAIN]
    action = call.data[ATTR_ACTION]
    if not call.hass.services.has_service(domain, action):
        raise ServiceValidationError(f"Unknown action {domain}.{action}")
    _LOGGER.debug("Forwarding %s.%s to %s", domain, action, entity_id)
    await coordinator.async_dispatch(domain, action, entity_id, call.data[ATTR_DATA])


async def _async_select_player(call: ServiceCall) -> None:
    coordinator = get_coordinator(call.hass)
    entity_id = call.data.get(ATTR_ENTITY_ID)
    if entity_id is not None and entity_id not in coordinator.players:
        raise ServiceValidationError(f"{entity_id} is not a configured player")
    coordinator.async_select_player(entity_id)


async def _async_resolve_target(call: ServiceCall) -> ServiceResponse:
    coordinator = get_coordinator(call.hass)
    entity_id = call.data[ATTR_ENTITY_ID]
    resolved = coordinator.resolve_target(entity_id)
    return {
        ATTR_ENTITY_ID: entity_id,
        "resolved": resolved,
        "effective": resolved or entity_id,
    }


async def _async_browse(call: ServiceCall) -> ServiceResponse:
    coordinator = get_coordinator(call.hass)
    entity_id = call.data.get(ATTR_ENTITY_ID) or _active_or_raise(coordinator)
    result = await coordinator.async_browse(
        entity_id, call.data.get(ATTR_MEDIA_CONTENT_ID), call.data.get(ATTR_MEDIA_CONTENT_TYPE)
    )
    if result is None:
        raise HomeAssistantError(f"{entity_id} returned nothing to browse")
    return result


async def _async_start_sleep_timer(call: ServiceCall) -> None:
    coordinator = get_coordinator(call.hass)
    entity_id = call.data.get(ATTR_ENTITY_ID) or _active_or_raise(coordinator)
    await coordinator.async_start_sleep_timer(call.data[ATTR_DURATION], entity_id)


async def _async_cancel_sleep_timer(call: ServiceCall) -> None:
    coordinator = get_coordinator(call.hass)
    entity_id = call.data.get(ATTR_ENTITY_ID) or coordinator.sleep_timer.entity_id or _active_or_raise(coordinator)
    await coordinator.async_cancel_sleep_timer(entity_id)


def async_setup_services(hass: HomeAssistant) -> None:
    """Register the orchestrator actions."""
    hass.services.async_register(
        DOMAIN,
        SERVICE_PLAY_CONTENT,
        _async_play_content,
        schema=SCHEMA_PLAY_CONTENT,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        DOMAIN, SERVICE_TRANSFER_SESSION, _async_transfer_session, schema=SCHEMA_TRANSFER_SESSION
    )
    hass.services.async_register(DOMAIN, SERVICE_SEND_COMMAND, _async_send_command, schema=SCHEMA_SEND_COMMAND)
    hass.services.async_register(DOMAIN, SERVICE_SELECT_PLAYER, _async_select_player, schema=SCHEMA_SELECT_PLAYER)
    hass.services.async_register(
        DOMAIN,
        SERVICE_RESOLVE_TARGET,
        _async_resolve_target,
        schema=SCHEMA_RESOLVE_TARGET,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_BROWSE,
        _async_browse,
        schema=SCHEMA_BROWSE,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        DOMAIN, SERVICE_START_SLEEP_TIMER, _async_start_sleep_timer, schema=SCHEMA_START_SLEEP_TIMER
    )
    hass.services.async_register(
        DOMAIN, SERVICE_CANCEL_SLEEP_TIMER, _async_cancel_sleep_timer, schema=SCHEMA_CANCEL_SLEEP_TIMER
    )
    _LOGGER.debug("Registered %s actions", DOMAIN)


def async_unload_services(hass: HomeAssistant) -> None:
    for service in (
        SERVICE_PLAY_CONTENT,
        SERVICE_TRANSFER_SESSION,
        SERVICE_SEND_COMMAND,
        SERVICE_SELECT_PLAYER,
        SERVICE_RESOLVE_TARGET,
        SERVICE_BROWSE,
        SERVICE_START_SLEEP_TIMER,
        SERVICE_CANCEL_SLEEP_TIMER,
    ):
        hass.services.async_remove(DOMAIN, service)
