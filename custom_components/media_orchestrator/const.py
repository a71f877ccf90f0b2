"""Constants for the Media Orchestrator integration.

Configuration:
    - Which media players the orchestrator controls and which are groups
    - Explicit target overrides and the streaming bridge entity
    - Warm-up / settle delays and optimistic lock durations

Naming conventions:
    - Alternate (music-routing) entity prefixes used by the resolver
    - Vendor/location prefixes stripped before fuzzy matching
    - Substrings that mark cast-style devices
"""

from __future__ import annotations

from typing import Final

DOMAIN = "media_orchestrator"

# Integration metadata
NAME = "Media Orchestrator"
VERSION = "0.3.0"

# Config keys
CONF_PLAYERS = "players"
CONF_GROUP_PLAYERS = "group_players"
CONF_SPOTIFY_ENTITY = "spotify_entity"
CONF_TARGET_OVERRIDES = "target_overrides"

# Option keys
CONF_WARMUP_DELAY = "warmup_delay"
CONF_GROUP_WARMUP_DELAY = "group_warmup_delay"
CONF_SETTLE_DELAY = "settle_delay"
CONF_VOLUME_LOCK = "volume_lock"
CONF_TOGGLE_LOCK = "toggle_lock"
CONF_SLEEP_TIMER_SCRIPT = "sleep_timer_script"
CONF_SLEEP_TIMER_CANCEL_SCRIPT = "sleep_timer_cancel_script"

# Defaults (seconds)
DEFAULT_WARMUP_DELAY = 1.5
DEFAULT_GROUP_WARMUP_DELAY = 3.0
DEFAULT_SETTLE_DELAY = 2.0
DEFAULT_VOLUME_LOCK = 30.0
DEFAULT_TOGGLE_LOCK = 2.0

# Hub scripts that run and abort the sleep timer
DEFAULT_SLEEP_TIMER_SCRIPT = "script.sleep_timer"
DEFAULT_SLEEP_TIMER_CANCEL_SCRIPT = "script.sleep_timer_cancel"

# Sleep timer countdown refresh (seconds) and longest accepted duration (minutes)
SLEEP_TIMER_REFRESH = 30
MAX_SLEEP_TIMER = 720

# Remote volume pushes closer than this to the rendered value are jitter
VOLUME_EPSILON = 0.02

# Position simulator tick (seconds)
POSITION_TICK = 1

# Entity id conventions
PRIMARY_PREFIX: Final = "media_player."
ALTERNATE_PREFIXES: Final[tuple[str, ...]] = ("media_player.mass_", "media_player.ma_")
STRIP_PREFIXES: Final[tuple[str, ...]] = ("nest_", "hub_", "google_", "shield_", "chromecast_", "echo_")
CAST_HINTS: Final[tuple[str, ...]] = ("nest", "hub", "google", "chromecast", "cast", "home_mini", "shield")
SPOTIFY_ENTITY_PREFIX: Final = "media_player.spotify"

# Device states that reject playback until powered on
COLD_STATES: Final = frozenset({"off", "idle", "standby", "unavailable", "unknown"})
ACTIVE_STATES: Final = frozenset({"playing", "paused"})

# Attributes
ATTR_MASS_PLAYER_TYPE = "mass_player_type"
ATTR_ACTIVE_PLAYER = "active_player"
ATTR_RESOLVED_TARGET = "resolved_target"
ATTR_MANUAL_OVERRIDE = "manual_override"
ATTR_PLAYER_NAME = "player_name"
ATTR_PLAYER_STATE = "player_state"
ATTR_SLEEP_TIMER_REMAINING = "sleep_timer_remaining"
ATTR_SLEEP_TIMER_DURATION = "sleep_timer_duration"

# Content kinds accepted by the strategy chain
CONTENT_KINDS: Final[tuple[str, ...]] = ("playlist", "album", "track", "artist")
DEFAULT_CONTENT_KIND = "playlist"

# Repeat modes
REPEAT_MODES: Final[list[str]] = ["off", "all", "one"]

# Select option meaning "follow the selector"
OPTION_AUTO = "auto"

# Services
SERVICE_PLAY_CONTENT = "play_content"
SERVICE_TRANSFER_SESSION = "transfer_session"
SERVICE_SEND_COMMAND = "send_command"
SERVICE_SELECT_PLAYER = "select_player"
SERVICE_RESOLVE_TARGET = "resolve_target"
SERVICE_BROWSE = "browse"
SERVICE_START_SLEEP_TIMER = "start_sleep_timer"
SERVICE_CANCEL_SLEEP_TIMER = "cancel_sleep_timer"

# Backend service domains
MUSIC_ASSISTANT_DOMAIN = "music_assistant"
SPOTCAST_DOMAIN = "spotcast"

NOTIFICATION_ID = "media_orchestrator_playback_failed"
