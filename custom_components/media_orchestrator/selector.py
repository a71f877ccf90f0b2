"""Active player selection.

These helpers are HA-agnostic: they operate purely on ``DeviceEntity``
snapshots so they can be recomputed on every state push.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .models import DeviceEntity

_LOGGER = logging.getLogger(__name__)

__all__ = ["select_active", "ActiveSelection"]


def select_active(devices: Sequence[DeviceEntity], override: str | None = None) -> DeviceEntity | None:
    """Return the player transport controls should target.

    1. the manual override, if it still refers to a known device;
    2. the first playing group (a group's play state supersedes its members');
    3. the first playing device;
    4. the first device.
    """
    if not devices:
        return None

    if override is not None:
        for device in devices:
            if device.entity_id == override:
                return device

    for device in devices:
        if device.is_playing and device.is_group:
            return device

    for device in devices:
        if device.is_playing:
            return device

    return devices[0]


class ActiveSelection:
    """Manual override of the active player; the only state the selector keeps."""

    def __init__(self, manual_override: str | None = None) -> None:
        self.manual_override = manual_override
        # Players seen playing at the previous evaluation
        self._seen_playing: set[str] = set()

    def set(self, entity_id: str | None) -> None:
        _LOGGER.debug("Manual override %s -> %s", self.manual_override, entity_id)
        self.manual_override = entity_id

    def clear(self) -> None:
        self.set(None)

    def reconcile(self, devices: Sequence[DeviceEntity]) -> bool:
        """Drop the override when some other player started playing.

        "Started" means playing now but not at the previous evaluation, so a
        player that was already playing when the user picked another one does
        not steal the selection back.  The user is assumed to want to follow
        whatever just started.  Rapid simultaneous state changes can race;
        this is a heuristic.  Returns True when the override was cleared.
        """
        playing = {d.entity_id for d in devices if d.is_playing}
        started = playing - self._seen_playing
        self._seen_playing = playing

        if self.manual_override is None or self.manual_override in playing:
            return False
        if started - {self.manual_override}:
            _LOGGER.info(
                "%s started playing, releasing manual override %s",
                ", ".join(sorted(started)),
                self.manual_override,
            )
            self.manual_override = None
            return True
        return False

    def active(self, devices: Sequence[DeviceEntity]) -> DeviceEntity | None:
        return select_active(devices, self.manual_override)
