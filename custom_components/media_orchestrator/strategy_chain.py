"""Playback intent fulfilment through an ordered chain of backend strategies.

No single backend reliably controls every device class, so a "play this
playlist on that speaker" request is tried against each backend in turn,
highest empirical reliability first, until one accepts it:

a. generic ``play_media`` on a music-routing group entity
b. ``music_assistant.play_media`` on the resolved target
c. ``spotcast.start`` by display name (cast-style devices only)
d. switch the streaming bridge's source to the device, then ``play_media``
e. ``play_media`` with an https deep link on the original target, then once
   more with the raw URI

Cold devices silently drop commands issued within the first seconds of
waking, so a powered-down target is turned on and given a fixed warm-up
delay first.  Individual failures are logged and recorded in the returned
``PlaybackOutcome``; only exhaustion is shown to the user.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from homeassistant.components import persistent_notification
from homeassistant.components.media_player import (
    ATTR_INPUT_SOURCE,
    ATTR_MEDIA_CONTENT_ID,
    ATTR_MEDIA_CONTENT_TYPE,
    DOMAIN as MEDIA_PLAYER_DOMAIN,
    SERVICE_PLAY_MEDIA,
    SERVICE_SELECT_SOURCE,
    MediaType,
)
from homeassistant.const import ATTR_ENTITY_ID, SERVICE_TURN_ON
from homeassistant.core import HomeAssistant

from .const import (
    ATTR_MASS_PLAYER_TYPE,
    CAST_HINTS,
    COLD_STATES,
    MUSIC_ASSISTANT_DOMAIN,
    NAME,
    NOTIFICATION_ID,
    SPOTCAST_DOMAIN,
    SPOTIFY_ENTITY_PREFIX,
)
from .content import deep_link_url, normalize_uri
from .dispatcher import CommandDispatcher
from .models import DeviceEntity, PlaybackIntent, PlaybackOutcome, StrategyAttempt, Timings

_LOGGER = logging.getLogger(__name__)

__all__ = ["StrategyChainExecutor", "PlaybackContext"]


@dataclass(frozen=True)
class PlaybackContext:
    """Everything a strategy needs for one playback attempt."""

    intent: PlaybackIntent
    uri: str
    resolved: str | None
    device: DeviceEntity | None

    @property
    def target(self) -> str:
        return self.intent.entity_id

    @property
    def effective(self) -> str:
        return self.resolved or self.intent.entity_id

    @property
    def display_name(self) -> str:
        if self.device is not None:
            return self.device.name
        return self.intent.entity_id.split(".", 1)[-1]


Strategy = Callable[[PlaybackContext], Awaitable[str]]


class StrategyChainExecutor:
    """Runs playback intents through the strategy chain."""

    def __init__(
        self,
        hass: HomeAssistant,
        dispatcher: CommandDispatcher,
        get_device: Callable[[str], DeviceEntity | None],
        *,
        group_ids: Iterable[str] = (),
        spotify_entity: str | None = None,
        timings: Timings | None = None,
    ) -> None:
        self.hass = hass
        self.dispatcher = dispatcher
        self._get_device = get_device
        self.group_ids = set(group_ids)
        self.spotify_entity = spotify_entity
        self.timings = timings or Timings()

    # ------------------------------------------------------------------
    # Classification helpers
    # ------------------------------------------------------------------

    def is_group_target(self, entity_id: str) -> bool:
        """Configured group, or a routing entity that reports itself as a group."""
        if entity_id in self.group_ids:
            return True
        device = self._get_device(entity_id)
        if device is None:
            return False
        return device.is_group or device.attributes.get(ATTR_MASS_PLAYER_TYPE) == "group"

    @staticmethod
    def is_cast_style(entity_id: str) -> bool:
        return any(hint in entity_id for hint in CAST_HINTS)

    def find_bridge(self) -> str | None:
        """Configured streaming bridge, else the first ``media_player.spotify*``."""
        if self.spotify_entity:
            return self.spotify_entity if self.hass.states.get(self.spotify_entity) else None
        for entity_id in self.hass.states.async_entity_ids(MEDIA_PLAYER_DOMAIN):
            if entity_id.startswith(SPOTIFY_ENTITY_PREFIX):
                return entity_id
        return None

    # ------------------------------------------------------------------
    # Wake-up
    # ------------------------------------------------------------------

    def needs_wake(self, entity_id: str) -> bool:
        device = self._get_device(entity_id)
        return device is None or device.state in COLD_STATES

    async def async_wake(self, entity_id: str) -> None:
        """Power on a cold device and wait for it to accept commands.

        Raises whatever the power-on command raises; callers decide whether
        that is fatal.
        """
        if not self.needs_wake(entity_id):
            return
        slow = self.is_group_target(entity_id) or self.is_cast_style(entity_id)
        delay = self.timings.group_warmup_delay if slow else self.timings.warmup_delay
        _LOGGER.debug("Waking %s, waiting %.1fs", entity_id, delay)
        await self.dispatcher.dispatch(MEDIA_PLAYER_DOMAIN, SERVICE_TURN_ON, entity_id)
        await asyncio.sleep(delay)

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------

    def strategies(self, context: PlaybackContext) -> list[tuple[str, Strategy]]:
        """Applicable strategies for ``context`` in execution order."""
        chain: list[tuple[str, Strategy]] = []
        if context.resolved and self.dispatcher.resolver.is_alternate(context.resolved):
            if self.is_group_target(context.resolved) or context.target in self.group_ids:
                chain.append(("group_play_media", self._play_group))
        chain.append(("music_assistant", self._play_music_assistant))
        if self.is_cast_style(context.target):
            chain.append(("spotcast", self._play_spotcast))
        if self.find_bridge():
            chain.append(("spotify_bridge", self._play_spotify_bridge))
        chain.append(("deep_link", self._play_deep_link))
        return chain

    async def play(self, intent: PlaybackIntent) -> PlaybackOutcome:
        """Fulfil ``intent``; never raises."""
        uri = normalize_uri(intent.content_id, intent.content_kind)
        outcome = PlaybackOutcome(intent=intent, uri=uri)
        _LOGGER.info("Playing %s on %s", uri, intent.entity_id)

        try:
            await self.async_wake(intent.entity_id)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Could not wake %s: %s", intent.entity_id, err)
            outcome.attempts.append(StrategyAttempt(strategy="wake", target=intent.entity_id, error=str(err)))

        context = PlaybackContext(
            intent=intent,
            uri=uri,
            resolved=self.dispatcher.resolver.resolve(
                intent.entity_id, self.hass.states.async_entity_ids(MEDIA_PLAYER_DOMAIN)
            ),
            device=self._get_device(intent.entity_id),
        )

        for name, strategy in self.strategies(context):
            try:
                target = await strategy(context)
            except Exception as err:  # noqa: BLE001
                _LOGGER.warning("Strategy %s failed for %s: %s", name, intent.entity_id, err)
                outcome.attempts.append(StrategyAttempt(strategy=name, target=context.effective, error=str(err)))
                continue
            outcome.attempts.append(StrategyAttempt(strategy=name, target=target))
            outcome.strategy = name
            _LOGGER.info("Playback started on %s via %s", target, name)
            return outcome

        _LOGGER.error(
            "All playback strategies failed for %s: %s",
            intent.entity_id,
            [(attempt.strategy, attempt.error) for attempt in outcome.failures],
        )
        persistent_notification.async_create(
            self.hass,
            f"Could not start playback on {context.display_name}.",
            title=NAME,
            notification_id=NOTIFICATION_ID,
        )
        return outcome

    # ------------------------------------------------------------------
    # Strategies: each returns the entity it played on, or raises
    # ------------------------------------------------------------------

    async def _play_group(self, context: PlaybackContext) -> str:
        target = context.effective
        await self.dispatcher.async_send(
            MEDIA_PLAYER_DOMAIN,
            SERVICE_PLAY_MEDIA,
            {
                ATTR_ENTITY_ID: target,
                ATTR_MEDIA_CONTENT_ID: context.uri,
                ATTR_MEDIA_CONTENT_TYPE: context.intent.content_kind,
            },
        )
        return target

    async def _play_music_assistant(self, context: PlaybackContext) -> str:
        target = context.effective
        await self.dispatcher.async_send(
            MUSIC_ASSISTANT_DOMAIN,
            SERVICE_PLAY_MEDIA,
            {
                ATTR_ENTITY_ID: target,
                "media_id": context.uri,
                "media_type": context.intent.content_kind,
                "enqueue": "replace",
            },
        )
        return target

    async def _play_spotcast(self, context: PlaybackContext) -> str:
        await self.dispatcher.async_send(
            SPOTCAST_DOMAIN,
            "start",
            {
                "uri": context.uri,
                "device_name": context.display_name,
                "random_song": False,
                "shuffle": False,
            },
        )
        return context.target

    async def _play_spotify_bridge(self, context: PlaybackContext) -> str:
        bridge = self.find_bridge()
        if bridge is None:
            raise LookupError("Streaming bridge disappeared")
        bridge_device = self._get_device(bridge)
        sources = bridge_device.source_list if bridge_device else []
        wanted = context.display_name.lower()
        source = next(
            (candidate for candidate in sources if candidate.lower() in wanted or wanted in candidate.lower()),
            None,
        )
        if source is None:
            raise LookupError(f"No bridge source matches '{context.display_name}'")

        await self.dispatcher.async_send(
            MEDIA_PLAYER_DOMAIN,
            SERVICE_SELECT_SOURCE,
            {ATTR_ENTITY_ID: bridge, ATTR_INPUT_SOURCE: source},
        )
        await self.dispatcher.async_send(
            MEDIA_PLAYER_DOMAIN,
            SERVICE_PLAY_MEDIA,
            {
                ATTR_ENTITY_ID: bridge,
                ATTR_MEDIA_CONTENT_ID: context.uri,
                ATTR_MEDIA_CONTENT_TYPE: context.intent.content_kind,
            },
        )
        return bridge

    async def _play_deep_link(self, context: PlaybackContext) -> str:
        target = context.target
        if url := deep_link_url(context.uri):
            try:
                await self.dispatcher.async_send(
                    MEDIA_PLAYER_DOMAIN,
                    SERVICE_PLAY_MEDIA,
                    {
                        ATTR_ENTITY_ID: target,
                        ATTR_MEDIA_CONTENT_ID: url,
                        ATTR_MEDIA_CONTENT_TYPE: MediaType.URL,
                    },
                )
                return target
            except Exception as err:  # noqa: BLE001
                _LOGGER.debug("Deep link failed on %s, retrying with raw URI: %s", target, err)

        await self.dispatcher.async_send(
            MEDIA_PLAYER_DOMAIN,
            SERVICE_PLAY_MEDIA,
            {
                ATTR_ENTITY_ID: target,
                ATTR_MEDIA_CONTENT_ID: context.uri,
                ATTR_MEDIA_CONTENT_TYPE: context.intent.content_kind,
            },
        )
        return target
