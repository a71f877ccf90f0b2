"""Session transfer between two logical players.

``IDLE -> SWITCHING_SELECTION -> WAKING_TARGET -> REPLAYING -> STOPPING_SOURCE -> IDLE``

The selection switch happens first and is never rolled back: UI
responsiveness wins over transfer completion.  Everything after it is best
effort, so the worst visible result is "new player selected, old player may
keep playing".
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum

from homeassistant.components.media_player import (
    ATTR_MEDIA_CONTENT_ID,
    ATTR_MEDIA_CONTENT_TYPE,
    DOMAIN as MEDIA_PLAYER_DOMAIN,
    SERVICE_PLAY_MEDIA,
)
from homeassistant.const import ATTR_ENTITY_ID, SERVICE_MEDIA_PAUSE

from .const import DEFAULT_CONTENT_KIND, MUSIC_ASSISTANT_DOMAIN
from .dispatcher import CommandDispatcher
from .models import DeviceEntity, Timings
from .selector import ActiveSelection
from .strategy_chain import StrategyChainExecutor

_LOGGER = logging.getLogger(__name__)

__all__ = ["SessionTransferController", "TransferPhase"]


class TransferPhase(StrEnum):
    """Where a transfer currently is."""

    IDLE = "idle"
    SWITCHING_SELECTION = "switching_selection"
    WAKING_TARGET = "waking_target"
    REPLAYING = "replaying"
    STOPPING_SOURCE = "stopping_source"


class SessionTransferController:
    """Moves an active playback session from one player to another."""

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        chain: StrategyChainExecutor,
        selection: ActiveSelection,
        get_device: Callable[[str], DeviceEntity | None],
        *,
        on_selection_changed: Callable[[], None] | None = None,
        timings: Timings | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.chain = chain
        self.selection = selection
        self._get_device = get_device
        self._on_selection_changed = on_selection_changed
        self.timings = timings or Timings()
        self.phase = TransferPhase.IDLE
        self.phases: list[TransferPhase] = []

    def _enter(self, phase: TransferPhase) -> None:
        self.phase = phase
        self.phases.append(phase)

    async def transfer(self, source_id: str, target_id: str) -> TransferPhase:
        """Select ``target_id`` and move whatever ``source_id`` plays onto it.

        Returns the last phase reached before going back to idle.
        """
        self.phases = []
        self._enter(TransferPhase.SWITCHING_SELECTION)
        source = self._get_device(source_id)
        self.selection.set(target_id)
        if self._on_selection_changed is not None:
            self._on_selection_changed()

        try:
            await self._move(source, source_id, target_id)
            return self.phase
        finally:
            self._enter(TransferPhase.IDLE)

    async def _move(self, source: DeviceEntity | None, source_id: str, target_id: str) -> None:
        if source is None or not source.is_active or not source.media_content_id:
            _LOGGER.info("Selected %s; %s has no media to move", target_id, source_id)
            return

        content_id = source.media_content_id
        content_type = source.media_content_type or DEFAULT_CONTENT_KIND
        _LOGGER.info("Transferring %s from %s to %s", content_id, source_id, target_id)

        self._enter(TransferPhase.WAKING_TARGET)
        try:
            await self.chain.async_wake(target_id)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Could not wake %s for transfer: %s", target_id, err)

        self._enter(TransferPhase.REPLAYING)
        await self._replay(target_id, content_id, content_type)

        self._enter(TransferPhase.STOPPING_SOURCE)
        await asyncio.sleep(self.timings.settle_delay)
        try:
            await self.dispatcher.dispatch(MEDIA_PLAYER_DOMAIN, SERVICE_MEDIA_PAUSE, source_id)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Could not pause %s after transfer: %s", source_id, err)

    async def _replay(self, target_id: str, content_id: str, content_type: str) -> bool:
        """Music routing backend first, then generic play_media.  True on success."""
        resolved = self.dispatcher.resolve(target_id)
        try:
            await self.dispatcher.async_send(
                MUSIC_ASSISTANT_DOMAIN,
                SERVICE_PLAY_MEDIA,
                {
                    ATTR_ENTITY_ID: resolved,
                    "media_id": content_id,
                    "media_type": content_type,
                    "enqueue": "replace",
                },
            )
            return True
        except Exception as err:  # noqa: BLE001
            _LOGGER.debug("Routing replay on %s failed: %s", resolved, err)

        try:
            await self.dispatcher.async_send(
                MEDIA_PLAYER_DOMAIN,
                SERVICE_PLAY_MEDIA,
                {
                    ATTR_ENTITY_ID: target_id,
                    ATTR_MEDIA_CONTENT_ID: content_id,
                    ATTR_MEDIA_CONTENT_TYPE: content_type,
                },
            )
            return True
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Could not replay %s on %s: %s", content_id, target_id, err)
        return False
