"""Resolve a YouTube URL or bare ID into a validated video ID."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from ..errors import InvalidVideoId

_VIDEO_ID_RE = re.compile(r"[A-Za-z0-9_-]{11}")
_YOUTUBE_HOSTS = {
    "youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtube-nocookie.com",
}
_SHORT_HOSTS = {"youtu.be"}
_PATH_PREFIXES = {"embed", "shorts", "live", "v", "e"}


def is_valid_video_id(value: str) -> bool:
    return _VIDEO_ID_RE.fullmatch(value) is not None


def _host(netloc: str) -> str:
    host = netloc.lower().rsplit("@", 1)[-1].split(":", 1)[0]
    if host.startswith("www."):
        host = host[len("www.") :]
    return host


def parse_video_id(url_or_id: str) -> str:
    """
    Extract a YouTube video ID from a URL or return the ID if already provided.

    Supports:
    - Raw 11-character video ID
    - https://www.youtube.com/watch?v=VIDEO_ID (any extra params or fragment)
    - https://m.youtube.com/watch?v=VIDEO_ID, music.youtube.com
    - https://youtu.be/VIDEO_ID
    - https://www.youtube.com/embed/VIDEO_ID, /shorts/, /live/, /v/
    - Any of the above without a scheme

    Args:
        url_or_id: YouTube URL or video ID

    Returns:
        str: YouTube video ID

    Raises:
        InvalidVideoId: If no valid video ID can be extracted
    """
    candidate = url_or_id.strip()
    if is_valid_video_id(candidate):
        return candidate

    if not candidate.lower().startswith(("http://", "https://")):
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)
    host = _host(parsed.netloc)
    segments = [part for part in parsed.path.split("/") if part]

    if host in _YOUTUBE_HOSTS:
        for value in parse_qs(parsed.query).get("v", []):
            if is_valid_video_id(value):
                return value
        if len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
            if is_valid_video_id(segments[1]):
                return segments[1]
    elif host in _SHORT_HOSTS and segments and is_valid_video_id(segments[0]):
        return segments[0]

    raise InvalidVideoId(url_or_id)


__all__ = ["is_valid_video_id", "parse_video_id"]
