"""Content reference normalisation for the streaming backend."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from .const import CONTENT_KINDS, DEFAULT_CONTENT_KIND

__all__ = ["normalize_uri", "deep_link_url", "split_uri"]

_URI_RE = re.compile(r"spotify:(track|album|artist|playlist|show|episode):([A-Za-z0-9]+)")
_DEEP_LINK_HOST = "open.spotify.com"


def normalize_uri(content_id: str, content_kind: str = DEFAULT_CONTENT_KIND) -> str:
    """Return ``content_id`` as a short ``spotify:<kind>:<id>`` URI.

    Accepts short URIs, browse ids that embed one (``spotify://user/spotify:playlist:x``),
    ``https://open.spotify.com/<kind>/<id>`` links and bare ids.  References in
    other schemes (``library://``, ``media-source://``) pass through unchanged.
    """
    content_id = content_id.strip()
    if match := _URI_RE.search(content_id):
        return match.group(0)

    if content_id.startswith(("http://", "https://")):
        parsed = urlparse(content_id)
        if parsed.hostname == _DEEP_LINK_HOST:
            parts = [part for part in parsed.path.split("/") if part]
            # /intl-de/playlist/<id> style links carry a locale segment first
            if len(parts) >= 2 and parts[-2] in CONTENT_KINDS:
                return f"spotify:{parts[-2]}:{parts[-1]}"
        return content_id

    if "://" in content_id or ":" in content_id:
        return content_id

    kind = content_kind if content_kind in CONTENT_KINDS else DEFAULT_CONTENT_KIND
    return f"spotify:{kind}:{content_id}"


def split_uri(uri: str) -> tuple[str, str] | None:
    """Return ``(kind, id)`` for a short URI, None for anything else."""
    if match := _URI_RE.fullmatch(uri):
        return match.group(1), match.group(2)
    return None


def deep_link_url(uri: str) -> str | None:
    """https form of a short URI, None when ``uri`` is not one."""
    if parts := split_uri(uri):
        kind, item_id = parts
        return f"https://{_DEEP_LINK_HOST}/{kind}/{item_id}"
    return None
