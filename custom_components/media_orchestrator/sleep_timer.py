"""Sleep timer driven by two hub scripts.

The start script receives ``duration`` (minutes) and ``entity_id`` as
variables and is expected to stop playback when it finishes; the cancel
script aborts it.  The countdown shown to users is tracked locally and
cleared when the start script stops running, when the end time passes or
on cancel.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta

from homeassistant.const import ATTR_ENTITY_ID, SERVICE_TURN_ON, STATE_OFF
from homeassistant.core import CALLBACK_TYPE, HomeAssistant, State, callback
from homeassistant.helpers.event import async_track_point_in_utc_time, async_track_time_interval
from homeassistant.util import dt as dt_util

from .const import DEFAULT_SLEEP_TIMER_CANCEL_SCRIPT, DEFAULT_SLEEP_TIMER_SCRIPT, SLEEP_TIMER_REFRESH
from .dispatcher import CommandDispatcher

_LOGGER = logging.getLogger(__name__)

SCRIPT_DOMAIN = "script"

__all__ = ["SleepTimer"]


class SleepTimer:
    """Start/cancel the sleep timer scripts and track the remaining minutes."""

    def __init__(
        self,
        hass: HomeAssistant,
        dispatcher: CommandDispatcher,
        on_change: Callable[[], None],
        *,
        start_script: str = DEFAULT_SLEEP_TIMER_SCRIPT,
        cancel_script: str = DEFAULT_SLEEP_TIMER_CANCEL_SCRIPT,
    ) -> None:
        self.hass = hass
        self.dispatcher = dispatcher
        self._on_change = on_change
        self.start_script = start_script
        self.cancel_script = cancel_script
        self.end: datetime | None = None
        self.duration: int | None = None
        self.entity_id: str | None = None
        self._unsub_end: CALLBACK_TYPE | None = None
        self._unsub_refresh: CALLBACK_TYPE | None = None

    @property
    def running(self) -> bool:
        return self.end is not None

    def remaining(self, now: datetime | None = None) -> int | None:
        """Whole minutes left, rounded up; None when no timer runs."""
        if self.end is None:
            return None
        seconds = (self.end - (now or dt_util.utcnow())).total_seconds()
        return max(math.ceil(seconds / 60), 0)

    async def start(self, minutes: int, entity_id: str) -> None:
        """Run the start script for ``entity_id`` and begin the countdown."""
        await self.dispatcher.async_send(
            SCRIPT_DOMAIN,
            SERVICE_TURN_ON,
            {
                ATTR_ENTITY_ID: self.start_script,
                "variables": {"duration": minutes, ATTR_ENTITY_ID: entity_id},
            },
        )
        self._clear()
        self.end = dt_util.utcnow() + timedelta(minutes=minutes)
        self.duration = minutes
        self.entity_id = entity_id
        self._unsub_end = async_track_point_in_utc_time(self.hass, self._handle_end, self.end)
        self._unsub_refresh = async_track_time_interval(
            self.hass, self._handle_refresh, timedelta(seconds=SLEEP_TIMER_REFRESH)
        )
        _LOGGER.info("Sleep timer started: %d min on %s", minutes, entity_id)
        self._on_change()

    async def cancel(self, entity_id: str) -> None:
        """Run the cancel script for ``entity_id`` and drop the countdown."""
        await self.dispatcher.async_send(
            SCRIPT_DOMAIN,
            SERVICE_TURN_ON,
            {ATTR_ENTITY_ID: self.cancel_script, "variables": {ATTR_ENTITY_ID: entity_id}},
        )
        _LOGGER.info("Sleep timer cancelled on %s", entity_id)
        self._clear()
        self._on_change()

    @callback
    def handle_script_state(self, state: State | None) -> None:
        """The start script stopped running: the timer is over."""
        if self.running and state is not None and state.state == STATE_OFF:
            _LOGGER.debug("%s stopped, clearing sleep timer", self.start_script)
            self._clear()
            self._on_change()

    @callback
    def async_shutdown(self) -> None:
        self._clear()

    @callback
    def _handle_end(self, _now: datetime) -> None:
        self._unsub_end = None
        self._clear()
        self._on_change()

    @callback
    def _handle_refresh(self, _now: datetime) -> None:
        self._on_change()

    @callback
    def _clear(self) -> None:
        for unsub in (self._unsub_end, self._unsub_refresh):
            if unsub is not None:
                unsub()
        self._unsub_end = self._unsub_refresh = None
        self.end = self.duration = self.entity_id = None
