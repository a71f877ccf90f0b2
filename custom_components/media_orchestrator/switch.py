"""Media Orchestrator switch platform."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.media_player import ATTR_MEDIA_SHUFFLE, DOMAIN as MEDIA_PLAYER_DOMAIN
from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import SERVICE_SHUFFLE_SET
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import KEY_SHUFFLE, OrchestratorCoordinator
from .entity import ActivePlayerEntity
from .utils import entity_command

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the active player shuffle switch."""
    coordinator = hass.data[DOMAIN][config_entry.entry_id]["coordinator"]
    async_add_entities([ActivePlayerShuffle(coordinator, config_entry)])


class ActivePlayerShuffle(ActivePlayerEntity, SwitchEntity):
    """Shuffle toggle of the active player."""

    _attr_icon = "mdi:shuffle-variant"
    _attr_translation_key = "shuffle"
    value_key = KEY_SHUFFLE

    def __init__(self, coordinator: OrchestratorCoordinator, config_entry: ConfigEntry) -> None:
        super().__init__(coordinator, config_entry, "shuffle")

    @property
    def is_on(self) -> bool | None:
        value = self.render_value
        return bool(value) if value is not None else None

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._async_set_shuffle(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._async_set_shuffle(False)

    async def _async_set_shuffle(self, shuffle: bool) -> None:
        if (active := self.active) is None:
            raise ServiceValidationError("No active player")
        binding = self.coordinator.reconcilable(active.entity_id, self.value_key)
        binding.on_interaction_start()
        binding.on_interaction_commit(shuffle)
        self.async_write_ha_state()
        async with entity_command(active.name, "set shuffle"):
            await self.coordinator.async_dispatch(
                MEDIA_PLAYER_DOMAIN, SERVICE_SHUFFLE_SET, active.entity_id, {ATTR_MEDIA_SHUFFLE: shuffle}
            )
