"""Base entity class for Media Orchestrator - minimal HA glue only."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import STATE_UNAVAILABLE
from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN, NAME, VERSION
from .coordinator import OrchestratorCoordinator
from .models import DeviceEntity


class OrchestratorEntity(CoordinatorEntity[OrchestratorCoordinator]):
    """Base class for all orchestrator entities - minimal glue to coordinator."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: OrchestratorCoordinator, config_entry: ConfigEntry, key: str) -> None:
        """Initialize with coordinator and config entry."""
        super().__init__(coordinator)
        self._config_entry = config_entry
        self._attr_unique_id = f"{config_entry.entry_id}_{key}"

    @property
    def active(self) -> DeviceEntity | None:
        """Snapshot of the player transport controls currently target."""
        data = self.coordinator.data
        return data.active if data else None

    @property
    def device_info(self) -> DeviceInfo:
        """One virtual device per orchestrator entry."""
        return DeviceInfo(
            identifiers={(DOMAIN, self._config_entry.entry_id)},
            manufacturer=NAME,
            name=self._config_entry.title or NAME,
            model="Media Orchestrator",
            sw_version=VERSION,
            entry_type=DeviceEntryType.SERVICE,
        )

    @property
    def available(self) -> bool:
        """Return if entity is available."""
        return self.coordinator.last_update_success


class ActivePlayerEntity(OrchestratorEntity):
    """Entity whose value lives on the active player under an optimistic lock."""

    value_key: str

    @property
    def available(self) -> bool:
        active = self.active
        return super().available and active is not None and active.state != STATE_UNAVAILABLE

    @property
    def render_value(self):
        """Locally reconciled value of ``value_key`` on the active player."""
        if (active := self.active) is None:
            return None
        return self.coordinator.reconcilable(active.entity_id, self.value_key).render_value
