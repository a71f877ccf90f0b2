"""Select entities for Media Orchestrator."""

from __future__ import annotations

import logging

from homeassistant.components.media_player import ATTR_MEDIA_REPEAT, DOMAIN as MEDIA_PLAYER_DOMAIN
from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import SERVICE_REPEAT_SET
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.restore_state import RestoreEntity

from .const import DOMAIN, OPTION_AUTO, REPEAT_MODES
from .coordinator import KEY_REPEAT, OrchestratorCoordinator
from .entity import ActivePlayerEntity, OrchestratorEntity
from .utils import entity_command

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Media Orchestrator select entities."""
    coordinator = hass.data[DOMAIN][config_entry.entry_id]["coordinator"]
    entities = [
        PlayerOverrideSelect(coordinator, config_entry),
        RepeatModeSelect(coordinator, config_entry),
    ]
    async_add_entities(entities)
    _LOGGER.info("Created %d select entities for %s", len(entities), config_entry.title)


class PlayerOverrideSelect(OrchestratorEntity, SelectEntity, RestoreEntity):
    """Manual override of the active player; ``auto`` follows playback."""

    _attr_icon = "mdi:speaker-multiple"
    _attr_translation_key = "player"

    def __init__(self, coordinator: OrchestratorCoordinator, config_entry: ConfigEntry) -> None:
        super().__init__(coordinator, config_entry, "player")
        self._attr_options = [OPTION_AUTO, *coordinator.players]

    async def async_added_to_hass(self) -> None:
        """Restore the override picked before the last restart."""
        await super().async_added_to_hass()
        if (last := await self.async_get_last_state()) is None:
            return
        if last.state in self.coordinator.players and self.coordinator.selection.manual_override is None:
            _LOGGER.debug("Restoring manual override %s", last.state)
            self.coordinator.async_select_player(last.state)

    @property
    def current_option(self) -> str:
        return self.coordinator.selection.manual_override or OPTION_AUTO

    async def async_select_option(self, option: str) -> None:
        if option not in self.options:
            raise ServiceValidationError(f"Unknown player '{option}'")
        self.coordinator.async_select_player(None if option == OPTION_AUTO else option)


class RepeatModeSelect(ActivePlayerEntity, SelectEntity):
    """Repeat mode of the active player, reconciled against hub pushes."""

    _attr_icon = "mdi:repeat"
    _attr_translation_key = "repeat"
    _attr_options = REPEAT_MODES
    value_key = KEY_REPEAT

    def __init__(self, coordinator: OrchestratorCoordinator, config_entry: ConfigEntry) -> None:
        super().__init__(coordinator, config_entry, "repeat")

    @property
    def current_option(self) -> str | None:
        value = self.render_value
        return value if value in REPEAT_MODES else None

    async def async_select_option(self, option: str) -> None:
        if (active := self.active) is None:
            raise ServiceValidationError("No active player")
        binding = self.coordinator.reconcilable(active.entity_id, self.value_key)
        binding.on_interaction_start()
        mode = binding.on_interaction_commit(option)
        self.async_write_ha_state()
        async with entity_command(active.name, "set repeat"):
            await self.coordinator.async_dispatch(
                MEDIA_PLAYER_DOMAIN, SERVICE_REPEAT_SET, active.entity_id, {ATTR_MEDIA_REPEAT: mode}
            )
