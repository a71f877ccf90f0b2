"""Media Orchestrator integration for Home Assistant."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EVENT_HOMEASSISTANT_STOP, Platform
from homeassistant.core import Event, HomeAssistant, callback

from .const import CONF_PLAYERS, DOMAIN
from .coordinator import OrchestratorCoordinator
from .services import async_setup_services, async_unload_services

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.SENSOR,  # active player
    Platform.SELECT,  # manual override + repeat
    Platform.NUMBER,  # active player volume
    Platform.SWITCH,  # active player shuffle
]


async def _update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options updates by reloading the entry."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Media Orchestrator from a config entry."""

    # Register global services if this is the first entry
    if DOMAIN not in hass.data:
        hass.data[DOMAIN] = {}
        async_setup_services(hass)

    coordinator = OrchestratorCoordinator(hass, entry)
    hass.data[DOMAIN][entry.entry_id] = {
        "coordinator": coordinator,
        "entry": entry,
    }

    # Listen for config entry updates (e.g. options flow) so we can reload
    entry.async_on_unload(entry.add_update_listener(_update_listener))

    await coordinator.async_config_entry_first_refresh()
    coordinator.async_start()
    entry.async_on_unload(coordinator.async_stop)

    @callback
    def _async_hass_stopping(_event: Event) -> None:
        coordinator.async_stop()

    entry.async_on_unload(hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_hass_stopping))

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    _LOGGER.info(
        "Media Orchestrator set up for %d players (active: %s)",
        len(entry.data.get(CONF_PLAYERS, [])),
        coordinator.active_player,
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    if unload_ok := await hass.config_entries.async_unload_platforms(entry, PLATFORMS):
        hass.data[DOMAIN].pop(entry.entry_id, None)
        if not hass.data[DOMAIN]:
            hass.data.pop(DOMAIN)
            async_unload_services(hass)
        _LOGGER.info("Unloaded Media Orchestrator %s", entry.title)
    return unload_ok
