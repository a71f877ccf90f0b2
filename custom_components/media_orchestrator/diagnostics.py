"""Provide diagnostics for Media Orchestrator."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN

_LOGGER = logging.getLogger(__name__)

# Attributes that can identify the household or account
TO_REDACT = [
    "entity_picture",
    "media_image_url",
    "account",
    "user",
    "username",
    "token",
    "access_token",
]


async def async_get_config_entry_diagnostics(hass: HomeAssistant, entry: ConfigEntry) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    entry_data = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if not entry_data:
        return {
            "error": "Coordinator not found for config entry",
            "entry_data": async_redact_data(entry.data, TO_REDACT),
            "entry_options": async_redact_data(entry.options, TO_REDACT),
        }

    coordinator = entry_data["coordinator"]
    data = coordinator.data
    devices = data.devices if data else []

    return {
        "entry_data": async_redact_data(entry.data, TO_REDACT),
        "entry_options": async_redact_data(entry.options, TO_REDACT),
        "hub_ready": coordinator.dispatcher.hub_ready,
        "timings": coordinator.timings.model_dump(),
        "devices": [
            {
                "entity_id": device.entity_id,
                "state": device.state,
                "kind": device.kind,
                "attributes": async_redact_data(device.attributes, TO_REDACT),
            }
            for device in devices
        ],
        "selection": {
            "active_player": coordinator.active_player,
            "manual_override": coordinator.selection.manual_override,
        },
        "resolver": {entity_id: coordinator.resolve_target(entity_id) for entity_id in coordinator.players},
        "reconcilable_values": [
            {
                "entity_id": value.entity_id,
                "key": value.key,
                "render_value": value.render_value,
                "remote_value": value.lock.remote_value,
                "locked": value.lock.is_locked,
            }
            for value in coordinator.values.values()
        ],
        "transfer_phase": coordinator.transfers.phase,
        "sleep_timer": {
            "start_script": coordinator.sleep_timer.start_script,
            "cancel_script": coordinator.sleep_timer.cancel_script,
            "entity_id": coordinator.sleep_timer.entity_id,
            "duration": coordinator.sleep_timer.duration,
            "remaining": coordinator.sleep_timer.remaining(),
        },
        "last_outcome": coordinator.last_outcome.as_dict() if coordinator.last_outcome else None,
    }
