"""Active player sensor for Media Orchestrator."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.sensor import SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import (
    ATTR_ACTIVE_PLAYER,
    ATTR_MANUAL_OVERRIDE,
    ATTR_PLAYER_NAME,
    ATTR_PLAYER_STATE,
    ATTR_RESOLVED_TARGET,
    ATTR_SLEEP_TIMER_DURATION,
    ATTR_SLEEP_TIMER_REMAINING,
    DOMAIN,
)
from .coordinator import OrchestratorCoordinator
from .entity import OrchestratorEntity

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the active player sensor."""
    coordinator = hass.data[DOMAIN][config_entry.entry_id]["coordinator"]
    async_add_entities([ActivePlayerSensor(coordinator, config_entry)])
    _LOGGER.debug("Created active player sensor for %s", config_entry.title)


class ActivePlayerSensor(OrchestratorEntity, SensorEntity):
    """Which player transport controls target, plus what it is playing.

    While the sensor is registered the coordinator keeps the position
    ticker running for a playing active player, so ``media_position``
    advances between hub pushes.  The sleep timer countdown is exposed here
    too, in whole minutes.
    """

    _attr_icon = "mdi:speaker-play"
    _attr_translation_key = "active_player"

    def __init__(self, coordinator: OrchestratorCoordinator, config_entry: ConfigEntry) -> None:
        super().__init__(coordinator, config_entry, ATTR_ACTIVE_PLAYER)

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.coordinator.async_set_ticker_wanted(True)

    async def async_will_remove_from_hass(self) -> None:
        self.coordinator.async_set_ticker_wanted(False)
        await super().async_will_remove_from_hass()

    @property
    def native_value(self) -> str | None:
        return self.coordinator.active_player

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        active = self.active
        sleep_timer = self.coordinator.sleep_timer
        attrs: dict[str, Any] = {
            ATTR_MANUAL_OVERRIDE: self.coordinator.selection.manual_override,
            ATTR_SLEEP_TIMER_REMAINING: sleep_timer.remaining(),
            ATTR_SLEEP_TIMER_DURATION: sleep_timer.duration,
        }
        if active is None:
            return attrs
        attrs.update(
            {
                ATTR_PLAYER_NAME: active.name,
                ATTR_RESOLVED_TARGET: self.coordinator.dispatcher.resolve(active.entity_id),
                ATTR_PLAYER_STATE: active.state,
                "media_title": active.media_title,
                "media_artist": active.media_artist,
                "media_duration": active.media_duration,
                "media_position": self.coordinator.ticker.position
                if self.coordinator.ticker.running
                else active.media_position,
            }
        )
        return attrs
