"""Transcript acquisition and rendering building blocks."""

from .client import PlatformClient, YouTubeSessionClient
from .formatters import render
from .parser import TranscriptParser, parse_timed_text
from .selector import Selection, find_transcript, select_track
from .video_id import parse_video_id

__all__ = [
    "PlatformClient",
    "Selection",
    "TranscriptParser",
    "YouTubeSessionClient",
    "find_transcript",
    "parse_timed_text",
    "parse_video_id",
    "render",
    "select_track",
]
