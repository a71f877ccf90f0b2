"""Command dispatch through the logical player resolver."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from homeassistant.const import ATTR_ENTITY_ID
from homeassistant.core import HomeAssistant, ServiceResponse
from homeassistant.exceptions import HomeAssistantError, ServiceNotSupported

from .resolver import TargetResolver

_LOGGER = logging.getLogger(__name__)

__all__ = ["CommandDispatcher", "HubNotReadyError"]


class HubNotReadyError(HomeAssistantError):
    """The hub is not running; commands cannot be delivered."""


class CommandDispatcher:
    """Issues ``(domain, action, target, payload)`` commands to the hub.

    Every call goes through the resolver first and the resolved id replaces
    the original target.  Exactly one service call is made per dispatch and
    nothing is queued or retried.  Commands sent while the hub is not running
    are dropped.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        resolver: TargetResolver,
        known_ids: Callable[[], Iterable[str]],
    ) -> None:
        self.hass = hass
        self.resolver = resolver
        self._known_ids = known_ids

    @property
    def hub_ready(self) -> bool:
        return self.hass.is_running

    def resolve(self, entity_id: str) -> str:
        """Return the id a command for ``entity_id`` is actually sent to."""
        return self.resolver.resolve(entity_id, self._known_ids()) or entity_id

    async def dispatch(
        self,
        domain: str,
        action: str,
        target_id: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Send one command, tolerating targets that do not support it."""
        if not self.hub_ready:
            _LOGGER.debug("Hub not running, dropping %s.%s for %s", domain, action, target_id)
            return

        target = self.resolve(target_id)
        data = {**(payload or {}), ATTR_ENTITY_ID: target}
        _LOGGER.debug("Dispatching %s.%s to %s (requested %s)", domain, action, target, target_id)
        try:
            await self.hass.services.async_call(domain, action, data, blocking=True)
        except ServiceNotSupported as err:
            _LOGGER.debug("%s does not support %s.%s: %s", target, domain, action, err)

    async def async_send(self, domain: str, action: str, data: dict[str, Any]) -> None:
        """Send one raw service call; every failure propagates.

        Used by strategy steps, which treat any error, unsupported actions
        included, as "try the next strategy".
        """
        if not self.hub_ready:
            raise HubNotReadyError(f"Hub not running, cannot call {domain}.{action}")
        _LOGGER.debug("Calling %s.%s with %s", domain, action, data)
        await self.hass.services.async_call(domain, action, data, blocking=True)

    async def async_query(self, domain: str, action: str, data: dict[str, Any]) -> ServiceResponse:
        """Like :meth:`async_send`, but return the action's response."""
        if not self.hub_ready:
            raise HubNotReadyError(f"Hub not running, cannot call {domain}.{action}")
        _LOGGER.debug("Querying %s.%s with %s", domain, action, data)
        return await self.hass.services.async_call(domain, action, data, blocking=True, return_response=True)
