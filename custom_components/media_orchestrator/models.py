"""Typed Pydantic models for the orchestrator.

- ``DeviceEntity`` is a read-only snapshot of one hub-reported media player.
- ``PlaybackIntent`` is what a caller picked from a catalog.
- ``StrategyAttempt`` / ``PlaybackOutcome`` accumulate the per-step result of
  a strategy chain run so diagnostic detail survives as a value, not only as
  log lines.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .const import (
    ACTIVE_STATES,
    DEFAULT_CONTENT_KIND,
    DEFAULT_GROUP_WARMUP_DELAY,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_TOGGLE_LOCK,
    DEFAULT_VOLUME_LOCK,
    DEFAULT_WARMUP_DELAY,
)

if TYPE_CHECKING:
    from homeassistant.core import State

__all__ = [
    "DeviceEntity",
    "PlayerKind",
    "Timings",
    "PlaybackIntent",
    "StrategyAttempt",
    "PlaybackOutcome",
]

PlayerKind = Literal["speaker", "tv", "group"]


class _OrchestratorBase(BaseModel):
    """Immutable base: snapshots are replaced, never edited in place."""

    model_config = ConfigDict(frozen=True)


class DeviceEntity(_OrchestratorBase):
    """Snapshot of a hub media player entity."""

    entity_id: str
    state: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    kind: PlayerKind = "speaker"

    @classmethod
    def from_state(cls, state: State, kind: PlayerKind = "speaker") -> DeviceEntity:
        """Build a snapshot from a Home Assistant ``State``."""
        return cls(
            entity_id=state.entity_id,
            state=state.state,
            attributes=dict(state.attributes),
            kind=kind,
        )

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", 1)[0]

    @property
    def name(self) -> str:
        """Display name: friendly name, falling back to the object id."""
        return self.attributes.get("friendly_name") or self.entity_id.split(".", 1)[-1]

    @property
    def is_playing(self) -> bool:
        return self.state == "playing"

    @property
    def is_active(self) -> bool:
        """Playing or paused."""
        return self.state in ACTIVE_STATES

    @property
    def is_group(self) -> bool:
        return self.kind == "group"

    @property
    def volume_level(self) -> float | None:
        return self.attributes.get("volume_level")

    @property
    def shuffle(self) -> bool | None:
        return self.attributes.get("shuffle")

    @property
    def repeat(self) -> str | None:
        return self.attributes.get("repeat")

    @property
    def media_content_id(self) -> str | None:
        return self.attributes.get("media_content_id")

    @property
    def media_content_type(self) -> str | None:
        return self.attributes.get("media_content_type")

    @property
    def media_title(self) -> str | None:
        return self.attributes.get("media_title")

    @property
    def media_artist(self) -> str | None:
        return self.attributes.get("media_artist")

    @property
    def media_duration(self) -> float | None:
        return self.attributes.get("media_duration")

    @property
    def media_position(self) -> float | None:
        return self.attributes.get("media_position")

    @property
    def media_position_updated_at(self) -> datetime | None:
        return self.attributes.get("media_position_updated_at")

    @property
    def source_list(self) -> list[str]:
        return list(self.attributes.get("source_list") or [])


class Timings(_OrchestratorBase):
    """Fixed delays and lock durations, in seconds."""

    warmup_delay: float = DEFAULT_WARMUP_DELAY
    group_warmup_delay: float = DEFAULT_GROUP_WARMUP_DELAY
    settle_delay: float = DEFAULT_SETTLE_DELAY
    volume_lock: float = DEFAULT_VOLUME_LOCK
    toggle_lock: float = DEFAULT_TOGGLE_LOCK


class PlaybackIntent(_OrchestratorBase):
    """User request: play ``content_id`` of ``content_kind`` on ``entity_id``."""

    entity_id: str
    content_id: str
    content_kind: str = DEFAULT_CONTENT_KIND


class StrategyAttempt(_OrchestratorBase):
    """One step of a strategy chain and how it ended."""

    strategy: str
    target: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class PlaybackOutcome(BaseModel):
    """Result accumulator for one strategy chain invocation."""

    intent: PlaybackIntent
    uri: str
    attempts: list[StrategyAttempt] = Field(default_factory=list)
    strategy: str | None = None

    @property
    def success(self) -> bool:
        return self.strategy is not None

    @property
    def failures(self) -> list[StrategyAttempt]:
        return [attempt for attempt in self.attempts if not attempt.succeeded]

    def as_dict(self) -> dict[str, Any]:
        """Serialisable form used for service responses and diagnostics."""
        return {
            "entity_id": self.intent.entity_id,
            "uri": self.uri,
            "success": self.success,
            "strategy": self.strategy,
            "attempts": [attempt.model_dump() for attempt in self.attempts],
        }
