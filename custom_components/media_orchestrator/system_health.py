"""Provide info to system health."""

from __future__ import annotations

from typing import Any

from homeassistant.components import system_health
from homeassistant.core import HomeAssistant, callback

from .const import DOMAIN, VERSION


@callback
def async_register(hass: HomeAssistant, register: system_health.SystemHealthRegistration) -> None:
    """Register system health callbacks."""
    register.async_register_info(system_health_info)


async def system_health_info(hass: HomeAssistant) -> dict[str, Any]:
    """Return info for system health."""
    coordinators = [
        entry_data["coordinator"]
        for entry_data in hass.data.get(DOMAIN, {}).values()
        if isinstance(entry_data, dict) and "coordinator" in entry_data
    ]
    players = [player for coordinator in coordinators for player in coordinator.players]
    available = sum(
        1
        for coordinator in coordinators
        for device in (coordinator.data.devices if coordinator.data else [])
        if device.state != "unavailable"
    )

    return {
        "configured_players": len(players),
        "available_players": f"{available}/{len(players)}",
        "active_player": next((c.active_player for c in coordinators if c.active_player), None),
        "integration_version": VERSION,
    }
