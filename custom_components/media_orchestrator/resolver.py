"""Logical player resolution.

Maps the entity a user picked to the entity that should actually receive
commands.  When a player has a higher-fidelity music-routing counterpart
(``media_player.mass_*``) commands go there instead.

The heuristic lives behind ``TargetResolver`` so it can be swapped for an
explicit mapping without touching the dispatcher or the strategy chain.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Protocol

from .const import ALTERNATE_PREFIXES, PRIMARY_PREFIX, STRIP_PREFIXES

_LOGGER = logging.getLogger(__name__)

__all__ = ["TargetResolver", "HeuristicTargetResolver"]


class TargetResolver(Protocol):
    """Anything that can pick an alternate command target."""

    def resolve(self, entity_id: str, known_ids: Iterable[str]) -> str | None:
        """Return the alternate id, or None to use ``entity_id`` as-is."""

    def is_alternate(self, entity_id: str) -> bool:
        """True when ``entity_id`` already belongs to the routing backend."""


class HeuristicTargetResolver:
    """Override table, then prefix rules, then fuzzy containment.

    Each step is total and the first match wins:

    1. explicit override (trusted even if the target is not known yet, the
       routing backend may still be loading after a hub restart);
    2. ids that already carry an alternate prefix are returned unchanged;
    3. ``media_player.X`` -> ``media_player.mass_X`` when that entity exists;
    4. strip a vendor/location prefix and return the first alternate id that
       contains the remaining core name;
    5. no match.

    Matching is case-sensitive and substring based.  When several alternates
    contain the core name the first one in iteration order wins; this is a
    known ambiguity and is not reported.
    """

    def __init__(
        self,
        overrides: Mapping[str, str] | None = None,
        *,
        alternate_prefixes: tuple[str, ...] = ALTERNATE_PREFIXES,
        primary_prefix: str = PRIMARY_PREFIX,
        strip_prefixes: tuple[str, ...] = STRIP_PREFIXES,
    ) -> None:
        self.overrides = dict(overrides or {})
        self.alternate_prefixes = alternate_prefixes
        self.primary_prefix = primary_prefix
        self.strip_prefixes = strip_prefixes

    def is_alternate(self, entity_id: str) -> bool:
        return entity_id.startswith(self.alternate_prefixes)

    def core_name(self, entity_id: str) -> str:
        """Object id with the first vendor/location prefix removed."""
        name = entity_id.removeprefix(self.primary_prefix)
        for prefix in self.strip_prefixes:
            if name.startswith(prefix):
                return name[len(prefix) :]
        return name

    def resolve(self, entity_id: str, known_ids: Iterable[str]) -> str | None:
        """Return the alternate target for ``entity_id`` or None."""
        if override := self.overrides.get(entity_id):
            _LOGGER.debug("Resolved %s -> %s (override)", entity_id, override)
            return override

        if self.is_alternate(entity_id):
            return entity_id

        known = list(known_ids)
        if entity_id.startswith(self.primary_prefix):
            object_id = entity_id[len(self.primary_prefix) :]
            for prefix in self.alternate_prefixes:
                candidate = f"{prefix}{object_id}"
                if candidate in known:
                    _LOGGER.debug("Resolved %s -> %s (prefix)", entity_id, candidate)
                    return candidate

        core = self.core_name(entity_id)
        if core:
            for candidate in known:
                if self.is_alternate(candidate) and core in candidate:
                    _LOGGER.debug("Resolved %s -> %s (fuzzy '%s')", entity_id, candidate, core)
                    return candidate

        return None

    def resolve_effective(self, entity_id: str, known_ids: Iterable[str]) -> str:
        """Resolved id, or ``entity_id`` when there is no alternate."""
        return self.resolve(entity_id, known_ids) or entity_id
