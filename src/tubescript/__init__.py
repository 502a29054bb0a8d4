"""Fetch, select and render YouTube video transcripts."""

from .cli import main
from .errors import TranscriptError
from .services.transcripts import fetch, fetch_many, list_transcripts
from .transcripts.formatters import render
from .transcripts.video_id import parse_video_id
from .types import (
    Cue,
    OutputFormat,
    Transcript,
    TranscriptKind,
    TranscriptList,
    TranscriptMeta,
)

__version__ = "0.1.0"

__all__ = [
    "Cue",
    "OutputFormat",
    "Transcript",
    "TranscriptError",
    "TranscriptKind",
    "TranscriptList",
    "TranscriptMeta",
    "fetch",
    "fetch_many",
    "list_transcripts",
    "main",
    "parse_video_id",
    "render",
]
