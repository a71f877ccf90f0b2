"""Unit tests for content reference normalisation."""

import pytest

from custom_components.media_orchestrator.content import deep_link_url, normalize_uri, split_uri


@pytest.mark.parametrize(
    ("content_id", "kind", "expected"),
    [
        ("spotify:playlist:37i9dQZF1DX", "playlist", "spotify:playlist:37i9dQZF1DX"),
        ("37i9dQZF1DX", "playlist", "spotify:playlist:37i9dQZF1DX"),
        ("4aawyAB9vmqN3uQ7FjRGTy", "album", "spotify:album:4aawyAB9vmqN3uQ7FjRGTy"),
        ("abc", "podcast", "spotify:playlist:abc"),
        ("spotify://user/spotify:playlist:xyz123", "album", "spotify:playlist:xyz123"),
        ("https://open.spotify.com/track/11dFghVXANMlKmJXsNCbNl?si=x", "playlist", "spotify:track:11dFghVXANMlKmJXsNCbNl"),
        ("https://open.spotify.com/intl-de/album/4aawyAB9vmqN3uQ7FjRGTy", "playlist", "spotify:album:4aawyAB9vmqN3uQ7FjRGTy"),
        ("library://playlist/12", "playlist", "library://playlist/12"),
        ("https://example.com/stream.mp3", "track", "https://example.com/stream.mp3"),
        ("  spotify:artist:0OdUWJ0sBjDrqHygGUXeCF ", "track", "spotify:artist:0OdUWJ0sBjDrqHygGUXeCF"),
    ],
)
def test_normalize_uri(content_id, kind, expected):
    assert normalize_uri(content_id, kind) == expected


def test_split_uri():
    assert split_uri("spotify:album:abc") == ("album", "abc")
    assert split_uri("library://album/1") is None


def test_deep_link_url():
    assert deep_link_url("spotify:playlist:abc") == "https://open.spotify.com/playlist/abc"
    assert deep_link_url("library://playlist/1") is None
