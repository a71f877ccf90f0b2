"""Local playback position simulation.

Hubs only push ``media_position`` when something changes, so the displayed
position is advanced locally once per second from the last reported
position and its timestamp.  The ticker is suspended while nothing is
playing or nobody is watching, and resynchronises immediately on resume.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.util import dt as dt_util

from .const import POSITION_TICK
from .models import DeviceEntity

_LOGGER = logging.getLogger(__name__)

__all__ = ["PositionTicker", "estimate_position"]


def estimate_position(device: DeviceEntity | None, now: datetime | None = None) -> float | None:
    """Reported position plus time elapsed since it was reported, capped at duration."""
    if device is None or device.media_position is None:
        return None
    position = float(device.media_position)
    updated_at = device.media_position_updated_at
    if device.is_playing and isinstance(updated_at, datetime):
        position += max(((now or dt_util.utcnow()) - updated_at).total_seconds(), 0.0)
    if device.media_duration:
        position = min(position, float(device.media_duration))
    return position


class PositionTicker:
    """1-second tick that recomputes the displayed position."""

    def __init__(
        self,
        hass: HomeAssistant,
        get_device: Callable[[], DeviceEntity | None],
        on_tick: Callable[[], None],
    ) -> None:
        self.hass = hass
        self._get_device = get_device
        self._on_tick = on_tick
        self._unsub: CALLBACK_TYPE | None = None
        self.position: float | None = None

    @property
    def running(self) -> bool:
        return self._unsub is not None

    @callback
    def resume(self) -> None:
        """Resynchronise the position now and keep ticking.

        Does not notify; the caller publishes the fresh position with its
        own update.
        """
        self.position = estimate_position(self._get_device())
        if self._unsub is None:
            self._unsub = async_track_time_interval(
                self.hass, self._handle_interval, timedelta(seconds=POSITION_TICK)
            )
            _LOGGER.debug("Position ticker resumed")

    @callback
    def suspend(self) -> None:
        if self._unsub is not None:
            self._unsub()
            self._unsub = None
            _LOGGER.debug("Position ticker suspended")

    @callback
    def _handle_interval(self, _now: datetime) -> None:
        self._tick()

    @callback
    def _tick(self) -> None:
        self.position = estimate_position(self._get_device())
        self._on_tick()
