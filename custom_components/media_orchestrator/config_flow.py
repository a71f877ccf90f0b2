"""Config flow to configure Media Orchestrator.

A single entry lists the players to orchestrate.  Delays, lock windows and
the resolver override table can be tuned later from the options flow.
"""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.components.media_player import DOMAIN as MEDIA_PLAYER_DOMAIN
from homeassistant.config_entries import ConfigFlowResult
from homeassistant.core import callback
from homeassistant.helpers.selector import (
    EntitySelector,
    EntitySelectorConfig,
    TextSelector,
    TextSelectorConfig,
)

from .const import (
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
    DOMAIN,
    NAME,
)
from .utils import format_overrides, parse_overrides

_LOGGER = logging.getLogger(__name__)

_PLAYERS_SELECTOR = EntitySelector(EntitySelectorConfig(domain=MEDIA_PLAYER_DOMAIN, multiple=True))
_OVERRIDES_SELECTOR = TextSelector(TextSelectorConfig(multiline=True))
_SCRIPT_SELECTOR = EntitySelector(EntitySelectorConfig(domain="script"))


def _delay(maximum: float) -> vol.All:
    return vol.All(vol.Coerce(float), vol.Range(min=0, max=maximum))


class MediaOrchestratorConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle Media Orchestrator config flow."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> MediaOrchestratorOptionsFlow:
        """Return the options flow."""
        return MediaOrchestratorOptionsFlow(config_entry)

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> ConfigFlowResult:
        """Pick the players and optional bridges."""
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        errors: dict[str, str] = {}
        if user_input is not None:
            players = user_input.get(CONF_PLAYERS) or []
            groups = user_input.get(CONF_GROUP_PLAYERS) or []
            try:
                overrides = parse_overrides(user_input.get(CONF_TARGET_OVERRIDES))
            except ValueError as err:
                _LOGGER.debug("Rejecting override table: %s", err)
                errors[CONF_TARGET_OVERRIDES] = "invalid_overrides"
                overrides = {}

            if not players:
                errors[CONF_PLAYERS] = "no_players"
            elif not set(groups) <= set(players):
                errors[CONF_GROUP_PLAYERS] = "group_not_player"

            if not errors:
                data: dict[str, Any] = {
                    CONF_PLAYERS: players,
                    CONF_GROUP_PLAYERS: groups,
                    CONF_TARGET_OVERRIDES: overrides,
                }
                if spotify := user_input.get(CONF_SPOTIFY_ENTITY):
                    data[CONF_SPOTIFY_ENTITY] = spotify
                return self.async_create_entry(title=NAME, data=data)

        schema = vol.Schema(
            {
                vol.Required(CONF_PLAYERS): _PLAYERS_SELECTOR,
                vol.Optional(CONF_GROUP_PLAYERS): _PLAYERS_SELECTOR,
                vol.Optional(CONF_SPOTIFY_ENTITY): EntitySelector(EntitySelectorConfig(domain=MEDIA_PLAYER_DOMAIN)),
                vol.Optional(CONF_TARGET_OVERRIDES): _OVERRIDES_SELECTOR,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)


class MediaOrchestratorOptionsFlow(config_entries.OptionsFlow):
    """Handle Media Orchestrator options."""

    def __init__(self, entry: config_entries.ConfigEntry) -> None:
        """Initialize options flow."""
        self.entry = entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> ConfigFlowResult:
        """Tune delays, lock windows, sleep timer scripts and target overrides."""
        errors: dict[str, str] = {}
        if user_input is not None:
            options_data = dict(user_input)
            try:
                options_data[CONF_TARGET_OVERRIDES] = parse_overrides(user_input.get(CONF_TARGET_OVERRIDES))
            except ValueError as err:
                _LOGGER.debug("Rejecting override table: %s", err)
                errors[CONF_TARGET_OVERRIDES] = "invalid_overrides"
            else:
                return self.async_create_entry(title="", data=options_data)

        options = self.entry.options
        overrides = options.get(CONF_TARGET_OVERRIDES, self.entry.data.get(CONF_TARGET_OVERRIDES, {}))

        schema = vol.Schema(
            {
                vol.Optional(CONF_WARMUP_DELAY, default=options.get(CONF_WARMUP_DELAY, DEFAULT_WARMUP_DELAY)): _delay(
                    30
                ),
                vol.Optional(
                    CONF_GROUP_WARMUP_DELAY,
                    default=options.get(CONF_GROUP_WARMUP_DELAY, DEFAULT_GROUP_WARMUP_DELAY),
                ): _delay(30),
                vol.Optional(CONF_SETTLE_DELAY, default=options.get(CONF_SETTLE_DELAY, DEFAULT_SETTLE_DELAY)): _delay(
                    30
                ),
                vol.Optional(CONF_VOLUME_LOCK, default=options.get(CONF_VOLUME_LOCK, DEFAULT_VOLUME_LOCK)): _delay(
                    300
                ),
                vol.Optional(CONF_TOGGLE_LOCK, default=options.get(CONF_TOGGLE_LOCK, DEFAULT_TOGGLE_LOCK)): _delay(60),
                vol.Optional(
                    CONF_SLEEP_TIMER_SCRIPT,
                    default=options.get(CONF_SLEEP_TIMER_SCRIPT, DEFAULT_SLEEP_TIMER_SCRIPT),
                ): _SCRIPT_SELECTOR,
                vol.Optional(
                    CONF_SLEEP_TIMER_CANCEL_SCRIPT,
                    default=options.get(CONF_SLEEP_TIMER_CANCEL_SCRIPT, DEFAULT_SLEEP_TIMER_CANCEL_SCRIPT),
                ): _SCRIPT_SELECTOR,
                vol.Optional(CONF_TARGET_OVERRIDES, default=format_overrides(overrides)): _OVERRIDES_SELECTOR,
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema, errors=errors)
