"""Render a :class:`~tubescript.types.Transcript` into its output encodings.

Every renderer is a pure function of the transcript: the same input always
produces byte-identical output, independent of locale.
"""

from __future__ import annotations

import json
from collections.abc import Callable

from ..types import OutputFormat, Transcript

Renderer = Callable[[Transcript, bool], str]


def _split_milliseconds(seconds: float) -> tuple[int, int, int, int]:
    total_ms = max(0, round(seconds * 1000))
    total_seconds, milliseconds = divmod(total_ms, 1000)
    minutes, secs = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return hours, minutes, secs, milliseconds


def srt_timestamp(seconds: float) -> str:
    """
    Convert seconds to SRT timestamp format (HH:MM:SS,mmm).

    Args:
        seconds: Time in seconds

    Returns:
        str: Formatted timestamp in SRT format
    """
    hours, minutes, secs, milliseconds = _split_milliseconds(seconds)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{milliseconds:03d}"


def vtt_timestamp(seconds: float) -> str:
    """
    Convert seconds to WebVTT timestamp format (HH:MM:SS.mmm).

    Args:
        seconds: Time in seconds

    Returns:
        str: Formatted timestamp in WebVTT format
    """
    hours, minutes, secs, milliseconds = _split_milliseconds(seconds)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{milliseconds:03d}"


def seconds_label(seconds: float) -> str:
    """Fixed two-decimal seconds, e.g. ``12.50``."""
    return f"{seconds:.2f}"


def format_as_json(transcript: Transcript, include_timestamps: bool = False) -> str:  # noqa: ARG001
    """
    Format transcript as a JSON array of ``{text, start, duration}`` objects.

    Args:
        transcript: Transcript to render
        include_timestamps: Ignored; timing is always part of the JSON payload

    Returns:
        str: JSON formatted string
    """
    return json.dumps(transcript.segments(), indent=2, ensure_ascii=False)


def format_as_txt(transcript: Transcript, include_timestamps: bool = False) -> str:
    """
    Format transcript as plain text, one line per cue.

    Args:
        transcript: Transcript to render
        include_timestamps: Whether to prefix each line with ``[start]``

    Returns:
        str: Formatted text
    """
    lines = []
    for cue in transcript.cues:
        if include_timestamps:
            lines.append(f"[{seconds_label(cue.start)}] {cue.text}")
        else:
            lines.append(cue.text)
    return "\n".join(lines)


def format_as_srt(transcript: Transcript, include_timestamps: bool = False) -> str:  # noqa: ARG001
    """
    Format transcript as SRT.

    Args:
        transcript: Transcript to render
        include_timestamps: Ignored; SRT blocks always carry timecodes

    Returns:
        str: SRT formatted string
    """
    blocks = []
    for i, cue in enumerate(transcript.cues, 1):
        start_time = srt_timestamp(cue.start)
        end_time = srt_timestamp(cue.end)
        blocks.append(f"{i}\n{start_time} --> {end_time}\n{cue.text}\n\n")
    return "".join(blocks)


def format_as_vtt(transcript: Transcript, include_timestamps: bool = False) -> str:  # noqa: ARG001
    """
    Format transcript as WebVTT.

    Args:
        transcript: Transcript to render
        include_timestamps: Ignored; WebVTT cues always carry timecodes

    Returns:
        str: WebVTT formatted string
    """
    blocks = ["WEBVTT\n\n"]
    for cue in transcript.cues:
        start_time = vtt_timestamp(cue.start)
        end_time = vtt_timestamp(cue.end)
        blocks.append(f"{start_time} --> {end_time}\n{cue.text}\n\n")
    return "".join(blocks)


def format_as_markdown(transcript: Transcript, include_timestamps: bool = False) -> str:
    """
    Format transcript as a Markdown document with one paragraph per cue.

    Args:
        transcript: Transcript to render
        include_timestamps: Whether to prefix each paragraph with a bold start time

    Returns:
        str: Markdown formatted string
    """
    if not transcript.cues:
        return "# Transcript\n"

    paragraphs = []
    for cue in transcript.cues:
        if include_timestamps:
            paragraphs.append(f"**[{seconds_label(cue.start)}]** {cue.text}")
        else:
            paragraphs.append(cue.text)
    return "# Transcript\n\n" + "\n\n".join(paragraphs) + "\n"


FORMATTERS: dict[OutputFormat, Renderer] = {
    OutputFormat.JSON: format_as_json,
    OutputFormat.TEXT: format_as_txt,
    OutputFormat.SRT: format_as_srt,
    OutputFormat.MARKDOWN: format_as_markdown,
    OutputFormat.VTT: format_as_vtt,
}


def render(
    transcript: Transcript,
    fmt: OutputFormat | str = OutputFormat.TEXT,
    with_timestamps: bool = False,
) -> str:
    """Render ``transcript`` in ``fmt`` (an :class:`OutputFormat` or its name)."""

    output_format = fmt if isinstance(fmt, OutputFormat) else OutputFormat.parse(fmt)
    return FORMATTERS[output_format](transcript, with_timestamps)


__all__ = [
    "FORMATTERS",
    "format_as_json",
    "format_as_markdown",
    "format_as_srt",
    "format_as_txt",
    "format_as_vtt",
    "render",
    "seconds_label",
    "srt_timestamp",
    "vtt_timestamp",
]
