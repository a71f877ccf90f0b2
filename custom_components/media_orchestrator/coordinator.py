"""Media Orchestrator coordinator - the explicit store shared by all entities.

Owns the resolver, dispatcher, strategy chain, transfer controller, the
active selection and the reconcilable values.  It does not poll: hub state
pushes for the configured players rebuild the snapshot directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from homeassistant.components.media_player import (
    ATTR_MEDIA_CONTENT_ID,
    ATTR_MEDIA_CONTENT_TYPE,
    DOMAIN as MEDIA_PLAYER_DOMAIN,
    MediaPlayerDeviceClass,
)
from homeassistant.components.media_player.const import SERVICE_BROWSE_MEDIA
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_DEVICE_CLASS, ATTR_ENTITY_ID
from homeassistant.core import Event, EventStateChangedData, HomeAssistant, callback
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import (
    ATTR_MASS_PLAYER_TYPE,
    CONF_GROUP_PLAYERS,
    CONF_GROUP_WARMUP_DELAY,
    CONF_PLAYERS,
    CONF_SETTLE_DELAY,
    CONF_SLEEP_TIMER_CANCEL_SCRIPT,
    CONF_SLEEP_TIMER_SCRIPT,
    CONF_SPOTIFY_ENTITY,
    CONF_TARGET_OVERRIDES,
    CONF_TOGGLE_LOCK,
    CONF_VOLUME_LOCK,
    CONF_WARMUP_DELAY,
    DEFAULT_GROUP_WARMUP_DELAY,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_SLEEP_TIMER_CANCEL_SCRIPT,
    DEFAULT_SLEEP_TIMER_SCRIPT,
    DEFAULT_TOGGLE_LOCK,
    DEFAULT_VOLUME_LOCK,
    DEFAULT_WARMUP_DELAY,
    NAME,
    VOLUME_EPSILON,
)
from .dispatcher import CommandDispatcher
from .models import DeviceEntity, PlaybackIntent, PlaybackOutcome, PlayerKind, Timings
from .progress import PositionTicker
from .resolver import HeuristicTargetResolver
from .selector import ActiveSelection
from .sleep_timer import SleepTimer
from .state_lock import ReconcilableValue
from .strategy_chain import StrategyChainExecutor
from .transfer import SessionTransferController, TransferPhase
from .utils import unwrap_entity_response

_LOGGER = logging.getLogger(__name__)

KEY_VOLUME = "volume_level"
KEY_SHUFFLE = "shuffle"
KEY_REPEAT = "repeat"


@dataclass
class OrchestratorData:
    """Snapshot pushed to entities."""

    devices: list[DeviceEntity] = field(default_factory=list)
    active: DeviceEntity | None = None


def timings_from_entry(entry: ConfigEntry) -> Timings:
    """Read delay and lock options, falling back to defaults."""
    options = entry.options
    return Timings(
        warmup_delay=options.get(CONF_WARMUP_DELAY, DEFAULT_WARMUP_DELAY),
        group_warmup_delay=options.get(CONF_GROUP_WARMUP_DELAY, DEFAULT_GROUP_WARMUP_DELAY),
        settle_delay=options.get(CONF_SETTLE_DELAY, DEFAULT_SETTLE_DELAY),
        volume_lock=options.get(CONF_VOLUME_LOCK, DEFAULT_VOLUME_LOCK),
        toggle_lock=options.get(CONF_TOGGLE_LOCK, DEFAULT_TOGGLE_LOCK),
    )


class OrchestratorCoordinator(DataUpdateCoordinator[OrchestratorData]):
    """Push-driven coordinator for the configured media players."""

    config_entry: ConfigEntry

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize the coordinator and the orchestration components."""
        super().__init__(hass, _LOGGER, config_entry=entry, name=NAME)
        self.players: list[str] = list(entry.data.get(CONF_PLAYERS, []))
        self.group_players: set[str] = set(entry.data.get(CONF_GROUP_PLAYERS, []))
        self.timings = timings_from_entry(entry)

        overrides = entry.options.get(CONF_TARGET_OVERRIDES, entry.data.get(CONF_TARGET_OVERRIDES, {}))
        self.resolver = HeuristicTargetResolver(overrides)
        self.dispatcher = CommandDispatcher(hass, self.resolver, self._known_ids)
        self.chain = StrategyChainExecutor(
            hass,
            self.dispatcher,
            self.get_device,
            group_ids=self.group_players,
            spotify_entity=entry.data.get(CONF_SPOTIFY_ENTITY) or None,
            timings=self.timings,
        )
        self.selection = ActiveSelection()
        self.transfers = SessionTransferController(
            self.dispatcher,
            self.chain,
            self.selection,
            self.get_device,
            on_selection_changed=self.async_refresh_selection,
            timings=self.timings,
        )
        self.ticker = PositionTicker(hass, self._active_device, self.async_update_listeners)
        self.sleep_timer = SleepTimer(
            hass,
            self.dispatcher,
            self.async_update_listeners,
            start_script=entry.options.get(CONF_SLEEP_TIMER_SCRIPT, DEFAULT_SLEEP_TIMER_SCRIPT),
            cancel_script=entry.options.get(CONF_SLEEP_TIMER_CANCEL_SCRIPT, DEFAULT_SLEEP_TIMER_CANCEL_SCRIPT),
        )
        self.ticker_wanted = False
        self.last_outcome: PlaybackOutcome | None = None
        self._values: dict[tuple[str, str], ReconcilableValue] = {}
        self._unsub_state: Any = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @callback
    def async_start(self) -> None:
        """Subscribe to state pushes of the players, their routing entities and the sleep timer script."""
        if self._unsub_state is not None or not self.players:
            return
        tracked = [*self.players, self.sleep_timer.start_script]
        for entity_id in self.players:
            if (resolved := self.resolve_target(entity_id)) and resolved not in tracked:
                tracked.append(resolved)
        _LOGGER.debug("Tracking %s", tracked)
        self._unsub_state = async_track_state_change_event(self.hass, tracked, self._handle_state_change)

    @callback
    def async_stop(self) -> None:
        if self._unsub_state is not None:
            self._unsub_state()
            self._unsub_state = None
        self.ticker.suspend()
        self.sleep_timer.async_shutdown()

    async def _async_update_data(self) -> OrchestratorData:
        """Build the first snapshot; later ones arrive through state pushes."""
        return self._build_data()

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def _known_ids(self) -> list[str]:
        return self.hass.states.async_entity_ids(MEDIA_PLAYER_DOMAIN)

    def _kind(self, entity_id: str, attributes: dict[str, Any]) -> PlayerKind:
        if entity_id in self.group_players or attributes.get(ATTR_MASS_PLAYER_TYPE) == "group":
            return "group"
        if attributes.get(ATTR_DEVICE_CLASS) == MediaPlayerDeviceClass.TV:
            return "tv"
        return "speaker"

    def get_device(self, entity_id: str) -> DeviceEntity | None:
        """Snapshot of any media player the hub knows, configured or not."""
        state = self.hass.states.get(entity_id)
        if state is None:
            return None
        return DeviceEntity.from_state(state, self._kind(entity_id, dict(state.attributes)))

    def _active_device(self) -> DeviceEntity | None:
        return self.data.active if self.data else None

    def _build_data(self) -> OrchestratorData:
        devices = [device for entity_id in self.players if (device := self.get_device(entity_id)) is not None]
        self.selection.reconcile(devices)
        for device in devices:
            self._observe(device)
        return OrchestratorData(devices=devices, active=self.selection.active(devices))

    def _observe(self, device: DeviceEntity) -> None:
        for key in (KEY_VOLUME, KEY_SHUFFLE, KEY_REPEAT):
            if (value := self._values.get((device.entity_id, key))) is not None:
                value.observe(device.attributes.get(key))

    @callback
    def _handle_state_change(self, event: Event[EventStateChangedData]) -> None:
        entity_id = event.data["entity_id"]
        if entity_id == self.sleep_timer.start_script:
            self.sleep_timer.handle_script_state(event.data["new_state"])
            return
        _LOGGER.debug("State push for %s", entity_id)
        self._publish()

    @callback
    def _publish(self) -> None:
        data = self._build_data()
        # The ticker reads the new active player before listeners render
        self.data = data
        self._update_ticker()
        self.async_set_updated_data(data)

    @callback
    def async_refresh_selection(self) -> None:
        """Re-evaluate the active player after the override changed."""
        self._publish()

    # ------------------------------------------------------------------
    # Position ticker
    # ------------------------------------------------------------------

    @callback
    def async_set_ticker_wanted(self, wanted: bool) -> None:
        """Foreground/background switch for the position simulator."""
        self.ticker_wanted = wanted
        self._update_ticker()

    @callback
    def _update_ticker(self) -> None:
        active = self._active_device()
        if self.ticker_wanted and active is not None and active.is_playing:
            self.ticker.resume()
        else:
            self.ticker.suspend()

    # ------------------------------------------------------------------
    # Reconcilable values
    # ------------------------------------------------------------------

    def reconcilable(self, entity_id: str, key: str) -> ReconcilableValue:
        """Binding for ``key`` of ``entity_id``, created on first use."""
        if (value := self._values.get((entity_id, key))) is None:
            device = self.get_device(entity_id)
            initial = device.attributes.get(key) if device else None
            if key == KEY_VOLUME:
                value = ReconcilableValue(
                    entity_id, key, initial=initial, lock_duration=self.timings.volume_lock, epsilon=VOLUME_EPSILON
                )
            else:
                value = ReconcilableValue(entity_id, key, initial=initial, lock_duration=self.timings.toggle_lock)
            self._values[(entity_id, key)] = value
        return value

    @property
    def values(self) -> dict[tuple[str, str], ReconcilableValue]:
        return self._values

    # ------------------------------------------------------------------
    # Operations exposed to services and entities
    # ------------------------------------------------------------------

    @property
    def active_player(self) -> str | None:
        active = self._active_device()
        return active.entity_id if active else None

    @callback
    def async_select_player(self, entity_id: str | None) -> None:
        """Set (or clear with None) the manual override."""
        self.selection.set(entity_id)
        self.async_refresh_selection()

    async def async_play(self, intent: PlaybackIntent) -> PlaybackOutcome:
        outcome = await self.chain.play(intent)
        self.last_outcome = outcome
        return outcome

    async def async_transfer(self, source_id: str, target_id: str) -> TransferPhase:
        return await self.transfers.transfer(source_id, target_id)

    async def async_dispatch(
        self, domain: str, action: str, target_id: str, payload: dict[str, Any] | None = None
    ) -> None:
        await self.dispatcher.dispatch(domain, action, target_id, payload)

    def resolve_target(self, entity_id: str) -> str | None:
        return self.resolver.resolve(entity_id, self._known_ids())

    async def async_browse(
        self, entity_id: str, content_id: str | None = None, content_type: str | None = None
    ) -> dict[str, Any] | None:
        """Browse the catalog of ``entity_id``; returns the unwrapped browse result."""
        data: dict[str, Any] = {ATTR_ENTITY_ID: entity_id}
        if content_id:
            data[ATTR_MEDIA_CONTENT_ID] = content_id
        if content_type:
            data[ATTR_MEDIA_CONTENT_TYPE] = content_type
        response = await self.dispatcher.async_query(MEDIA_PLAYER_DOMAIN, SERVICE_BROWSE_MEDIA, data)
        return unwrap_entity_response(response, entity_id)

    async def async_start_sleep_timer(self, minutes: int, entity_id: str) -> None:
        await self.sleep_timer.start(minutes, entity_id)

    async def async_cancel_sleep_timer(self, entity_id: str) -> None:
        await self.sleep_timer.cancel(entity_id)
