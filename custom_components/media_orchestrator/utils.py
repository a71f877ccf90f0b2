"""Shared utility functions for the Media Orchestrator integration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from homeassistant.exceptions import HomeAssistantError

_LOGGER = logging.getLogger(__name__)


def parse_overrides(text: str | None) -> dict[str, str]:
    """Parse ``source: target`` lines into an override table.

    Blank lines and ``#`` comments are skipped; ``->`` and ``=`` are accepted
    as separators too.

    Raises:
        ValueError: a non-empty line has no separator or an empty side
    """
    overrides: dict[str, str] = {}
    for raw in (text or "").splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        for separator in ("->", ":", "="):
            if separator in line:
                source, target = (part.strip() for part in line.split(separator, 1))
                break
        else:
            raise ValueError(f"Missing separator in '{line}'")
        if not source or not target:
            raise ValueError(f"Incomplete override '{line}'")
        overrides[source] = target
    return overrides


def format_overrides(overrides: dict[str, str]) -> str:
    """Inverse of :func:`parse_overrides`."""
    return "\n".join(f"{source} -> {target}" for source, target in overrides.items())


def is_connection_error(err: Exception) -> bool:
    """Check if error means the target did not answer in time."""
    if isinstance(err, TimeoutError):
        return True
    return isinstance(getattr(err, "__cause__", None), TimeoutError)


def unwrap_entity_response(response: Any, entity_id: str) -> dict[str, Any] | None:
    """Pick the result for ``entity_id`` out of an entity action response.

    Entity actions answer ``{entity_id: result}``, sometimes nested once more
    under ``response``.  When the exact id is missing (the target was
    rewritten) the first entity result is used; an already unwrapped result
    is returned as is.
    """
    if not isinstance(response, dict) or not response:
        return None
    if isinstance(response.get("response"), dict):
        response = response["response"]
    if isinstance(result := response.get(entity_id), dict):
        return result
    first_key = next(iter(response), None)
    if isinstance(first_key, str) and "." in first_key and isinstance(response[first_key], dict):
        return response[first_key]
    return response or None


@asynccontextmanager
async def entity_command(entity_name: str, operation: str):
    """Context manager for consistent command error handling in entities.

    Raises:
        HomeAssistantError: wrapped failure with a readable message
    """
    try:
        yield
    except Exception as err:
        if is_connection_error(err):
            _LOGGER.warning("%s: %s timed out: %s", entity_name, operation, err)
            raise HomeAssistantError(f"{operation} on {entity_name}: no answer") from err
        if isinstance(err, HomeAssistantError):
            raise
        _LOGGER.error("%s: %s failed: %s", entity_name, operation, err, exc_info=True)
        raise HomeAssistantError(f"Failed to {operation}: {err}") from err
