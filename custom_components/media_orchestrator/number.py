"""Media Orchestrator number platform.

Volume of the active player.  The slider value is owned locally for the
volume lock window after each change so late hub echoes do not make it
jump back.
"""

from __future__ import annotations

import logging

from homeassistant.components.media_player import ATTR_MEDIA_VOLUME_LEVEL, DOMAIN as MEDIA_PLAYER_DOMAIN
from homeassistant.components.number import NumberEntity, NumberMode
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import SERVICE_VOLUME_SET
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import KEY_VOLUME, OrchestratorCoordinator
from .entity import ActivePlayerEntity
from .utils import entity_command

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the active player volume entity."""
    coordinator = hass.data[DOMAIN][config_entry.entry_id]["coordinator"]
    async_add_entities([ActivePlayerVolume(coordinator, config_entry)])


class ActivePlayerVolume(ActivePlayerEntity, NumberEntity):
    """Volume (0.0 - 1.0) of whichever player is active."""

    _attr_mode = NumberMode.SLIDER
    _attr_native_min_value = 0.0
    _attr_native_max_value = 1.0
    _attr_native_step = 0.01
    _attr_icon = "mdi:volume-high"
    _attr_translation_key = "volume"
    value_key = KEY_VOLUME

    def __init__(self, coordinator: OrchestratorCoordinator, config_entry: ConfigEntry) -> None:
        super().__init__(coordinator, config_entry, "volume")

    @property
    def native_value(self) -> float | None:
        value = self.render_value
        return float(value) if value is not None else None

    async def async_set_native_value(self, value: float) -> None:
        """Render the new volume now, then send it to the player."""
        if (active := self.active) is None:
            raise ServiceValidationError("No active player")
        binding = self.coordinator.reconcilable(active.entity_id, self.value_key)
        binding.on_interaction_start()
        volume = binding.on_interaction_commit(value)
        self.async_write_ha_state()
        async with entity_command(active.name, "set volume"):
            _LOGGER.debug("Setting volume of %s to %.2f", active.entity_id, volume)
            await self.coordinator.async_dispatch(
                MEDIA_PLAYER_DOMAIN, SERVICE_VOLUME_SET, active.entity_id, {ATTR_MEDIA_VOLUME_LEVEL: volume}
            )
