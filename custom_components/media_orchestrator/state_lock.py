"""Optimistic reconciliation between local input and pushed hub state.

The hub echoes attribute changes asynchronously and may report the
pre-command value for several seconds after a command was sent.  A
``StateLock`` gives a value a temporary "owned by local input" window so a
slow echo cannot snap a slider or toggle back:

* while the user is interacting, pushes are ignored;
* after a commit, pushes are ignored until ``lock_expiry``;
* otherwise a push replaces the rendered value, but only when it differs by
  more than ``epsilon`` (numeric values) or at all (bool / enum values).

If a command never reaches the device the rendered value stays wrong until
the lock expires and the next push arrives.  That window is bounded and
accepted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

_LOGGER = logging.getLogger(__name__)

__all__ = ["StateLock", "ReconcilableValue"]


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class StateLock:
    """Arbitrates one externally-fed value against local interaction."""

    def __init__(
        self,
        initial: Any = None,
        *,
        epsilon: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize with the last known remote value."""
        self._clock = clock
        self._epsilon = epsilon
        self._current = initial
        self._remote = initial
        self._interacting = False
        self._lock_expiry = 0.0

    @property
    def current_value(self) -> Any:
        """Value to render."""
        return self._current

    @property
    def remote_value(self) -> Any:
        """Latest value pushed by the hub, even if it was dropped."""
        return self._remote

    @property
    def lock_expiry(self) -> float:
        return self._lock_expiry

    @property
    def interacting(self) -> bool:
        return self._interacting

    @property
    def is_locked(self) -> bool:
        """True while remote pushes are being dropped."""
        return self._interacting or self._clock() < self._lock_expiry

    def begin_interaction(self) -> None:
        """Local input started; ignore pushes until commit."""
        self._interacting = True

    def update_interaction(self, value: Any) -> None:
        """Track the in-progress local value (slider drag)."""
        self._interacting = True
        self._current = value

    def commit(self, value: Any, lock_duration: float) -> None:
        """Finish local input and own the value for ``lock_duration`` seconds."""
        self._interacting = False
        self._current = value
        self._lock_expiry = self._clock() + max(lock_duration, 0.0)

    def observe(self, remote: Any) -> bool:
        """Feed a pushed value.  Returns True when the rendered value changed."""
        if remote is None:
            return False
        self._remote = remote
        if self.is_locked:
            _LOGGER.debug("Dropping remote value %s while locked", remote)
            return False
        if not self._differs(remote, self._current):
            return False
        self._current = remote
        return True

    def _differs(self, remote: Any, current: Any) -> bool:
        if current is None:
            return True
        if _is_numeric(remote) and _is_numeric(current):
            return abs(remote - current) > self._epsilon
        return remote != current


class ReconcilableValue:
    """Binding exposed to the presentation layer for sliders and toggles."""

    def __init__(
        self,
        entity_id: str,
        key: str,
        *,
        initial: Any = None,
        lock_duration: float,
        epsilon: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.entity_id = entity_id
        self.key = key
        self.lock_duration = lock_duration
        self.lock = StateLock(initial, epsilon=epsilon, clock=clock)

    @property
    def render_value(self) -> Any:
        return self.lock.current_value

    def on_interaction_start(self) -> None:
        self.lock.begin_interaction()

    def on_interaction_change(self, value: Any) -> None:
        self.lock.update_interaction(value)

    def on_interaction_commit(self, value: Any) -> Any:
        """Commit ``value`` under this binding's lock; returns the value to send."""
        self.lock.commit(value, self.lock_duration)
        _LOGGER.debug(
            "Committed %s=%s for %s (locked %.0fs)",
            self.key,
            value,
            self.entity_id,
            self.lock_duration,
        )
        return value

    def observe(self, remote: Any) -> bool:
        return self.lock.observe(remote)
