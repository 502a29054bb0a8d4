"""Command-line interface for fetching and rendering YouTube transcripts."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import anthropic

from .config import Settings, ensure_env_loaded
from .errors import (
    AgeRestricted,
    ConsentCookieError,
    InvalidVideoId,
    IpBlocked,
    NoTranscriptFound,
    PlatformDataError,
    RequestBlocked,
    TranscriptError,
    TranscriptsDisabled,
    TranslationNotSupported,
    VideoUnavailable,
    XmlParseError,
)
from .services.cleanup import AnthropicTextCleaner, CleanupError, TextCleaner
from .services.transcripts import (
    FetchOutcome,
    RequestThrottle,
    fetch_many,
    list_transcripts,
)
from .transcripts.formatters import render
from .types import OutputFormat, Transcript, TranscriptList

EXIT_OK = 0
EXIT_INPUT = 1
EXIT_NO_TRANSCRIPT = 2
EXIT_AGE_RESTRICTED = 3
EXIT_UNAVAILABLE = 4
EXIT_BLOCKED = 5
EXIT_DATA = 6
EXIT_OTHER = 7

# Checked in order; subclasses must precede their bases.
_EXIT_CODES: tuple[tuple[type[TranscriptError], int], ...] = (
    (InvalidVideoId, EXIT_INPUT),
    (NoTranscriptFound, EXIT_NO_TRANSCRIPT),
    (TranscriptsDisabled, EXIT_NO_TRANSCRIPT),
    (TranslationNotSupported, EXIT_NO_TRANSCRIPT),
    (AgeRestricted, EXIT_AGE_RESTRICTED),
    (VideoUnavailable, EXIT_UNAVAILABLE),
    (IpBlocked, EXIT_BLOCKED),
    (RequestBlocked, EXIT_BLOCKED),
    (ConsentCookieError, EXIT_BLOCKED),
    (XmlParseError, EXIT_DATA),
    (PlatformDataError, EXIT_DATA),
)

_FORMAT_CHOICES = ["json", "text", "txt", "srt", "markdown", "md", "vtt"]

_logger = logging.getLogger("tubescript")


def exit_code_for(exc: TranscriptError) -> int:
    for error_type, code in _EXIT_CODES:
        if isinstance(exc, error_type):
            return code
    return EXIT_OTHER


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tubescript",
        description="Fetch YouTube video transcripts in multiple formats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s https://www.youtube.com/watch?v=VIDEO_ID
  %(prog)s VIDEO_ID --format json --out transcript.json
  %(prog)s https://youtu.be/VIDEO_ID --format srt
  %(prog)s VIDEO_ID --languages de,en --translate-to en --timestamps
  %(prog)s VIDEO_ID OTHER_ID --output-dir transcripts --delay 5 --random-delay
  %(prog)s VIDEO_ID --list

Environment Variables:
  TUBESCRIPT_LANGUAGES        Default comma-separated language priority list
  TUBESCRIPT_TIMEOUT          Per-request timeout in seconds (default: 10)
  TUBESCRIPT_DELAY            Delay between videos in seconds (default: 0)
  ANTHROPIC_API_KEY           Required for --cleanup
  TUBESCRIPT_CLEANUP_MODEL    Model used by --cleanup
        """,
    )

    parser.add_argument(
        "videos", nargs="+", metavar="VIDEO", help="YouTube video URL or ID"
    )

    # Language options
    parser.add_argument(
        "--languages",
        default=None,
        help="Comma-separated language codes in priority order "
        "(default: first manual track, else first auto-generated)",
    )
    parser.add_argument(
        "--translate-to",
        default=None,
        help="Machine-translate the selected track into this language code",
    )

    # Output format options
    parser.add_argument(
        "--format",
        choices=_FORMAT_CHOICES,
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--timestamps",
        "--include-timestamps",
        dest="timestamps",
        action="store_true",
        help="Prefix text and markdown output with cue start times",
    )
    parser.add_argument(
        "--preserve-formatting",
        action="store_true",
        help="Keep simple inline formatting tags such as <i> and <b> in cue text",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available caption tracks instead of fetching a transcript",
    )

    destination = parser.add_mutually_exclusive_group()
    destination.add_argument("--out", type=Path, help="Output file path (default: stdout)")
    destination.add_argument(
        "--output-dir",
        type=Path,
        help="Write one file per video into this directory",
    )

    # Rate limiting and transport
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Delay between videos in seconds (recommended: 5-20 for batches)",
    )
    parser.add_argument(
        "--random-delay",
        action="store_true",
        default=None,
        help="Add random jitter (±25%%) to delays",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout per request in seconds (default: 10.0)",
    )

    parser.add_argument(
        "--cleanup",
        metavar="STYLE",
        help="Post-process the rendered text with Claude "
        "(readable, paragraphs, minimal, or a free-form instruction)",
    )

    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    log_level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level, format="%(levelname)s: %(message)s", stream=sys.stderr
    )
    logging.getLogger().setLevel(log_level)


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides: dict[str, object] = {}
    if args.languages is not None:
        overrides["languages"] = tuple(
            code.strip() for code in args.languages.split(",") if code.strip()
        )
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ValueError("--timeout must be positive")
        overrides["timeout"] = args.timeout
    if args.delay is not None:
        if args.delay < 0:
            raise ValueError("--delay must not be negative")
        overrides["delay"] = args.delay
    if args.random_delay is not None:
        overrides["random_delay"] = args.random_delay
    return dataclasses.replace(settings, **overrides)


def _describe_tracks(track_list: TranscriptList) -> str:
    def _section(title: str, items: Sequence[object]) -> list[str]:
        lines = [f"({title})"]
        lines.extend(f" - {item}" for item in items)
        if not items:
            lines.append("None")
        return lines

    lines = [f"For this video ({track_list.video_id}) transcripts are available in:", ""]
    lines += _section("MANUALLY CREATED", track_list.manually_created)
    lines.append("")
    lines += _section("GENERATED", track_list.generated)
    lines.append("")
    lines += _section(
        "TRANSLATION LANGUAGES",
        [
            f'{lang.language_code} ("{lang.language}")'
            for lang in track_list.translation_languages
        ],
    )
    return "\n".join(lines) + "\n"


def _write_output(text: str, destination: Path | None) -> None:
    if destination is None:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text, encoding="utf-8")
    _logger.info("Output written to: %s", destination)


def _destination_for(
    args: argparse.Namespace, transcript: Transcript, output_format: OutputFormat
) -> Path | None:
    if args.out is not None:
        return Path(args.out)
    if args.output_dir is not None:
        name = f"{transcript.video_id}.{transcript.language_code}.{output_format.extension}"
        return Path(args.output_dir) / name
    return None


def _emit(
    outcome: FetchOutcome,
    args: argparse.Namespace,
    output_format: OutputFormat,
    cleaner: TextCleaner | None,
) -> int:
    if outcome.error is not None:
        _logger.error("%s", outcome.error)
        return exit_code_for(outcome.error)
    transcript = outcome.transcript
    if transcript is None:  # pragma: no cover - FetchOutcome always has one side
        return EXIT_OTHER

    if transcript.translated:
        _logger.info("Transcript translated to %s", transcript.language_code)
    else:
        _logger.info("Transcript retrieved in %s", transcript.language_code)

    output = render(transcript, output_format, args.timestamps)
    if cleaner is not None:
        try:
            output = cleaner.clean(output, args.cleanup)
        except (CleanupError, anthropic.APIError) as exc:
            _logger.error("Cleanup failed for %s: %s", transcript.video_id, exc)
            return EXIT_OTHER

    _write_output(output, _destination_for(args, transcript, output_format))
    return EXIT_OK


def _run_list(args: argparse.Namespace, settings: Settings) -> int:
    throttle = RequestThrottle(settings.delay, settings.random_delay)
    status = EXIT_OK
    for index, video in enumerate(args.videos):
        if index > 0:
            throttle(index)
        try:
            track_list = list_transcripts(video, settings=settings)
        except TranscriptError as exc:
            _logger.error("%s", exc)
            if status == EXIT_OK:
                status = exit_code_for(exc)
            continue
        _write_output(_describe_tracks(track_list), None)
    return status


def _run_fetch(args: argparse.Namespace, settings: Settings) -> int:
    if args.out is not None and len(args.videos) > 1:
        _logger.error("--out accepts a single video; use --output-dir for several")
        return EXIT_INPUT

    output_format = OutputFormat.parse(args.format)
    cleaner: TextCleaner | None = None
    if args.cleanup:
        try:
            cleaner = AnthropicTextCleaner.from_settings(settings)
        except ValueError as exc:
            _logger.error("Input error: %s", exc)
            return EXIT_INPUT

    _logger.info("Language preference: %s", list(settings.languages) or "default")
    outcomes = fetch_many(
        args.videos,
        settings.languages,
        args.translate_to,
        settings=settings,
        preserve_formatting=args.preserve_formatting,
    )

    status = EXIT_OK
    for outcome in outcomes:
        code = _emit(outcome, args, output_format, cleaner)
        if status == EXIT_OK:
            status = code
    return status


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    ensure_env_loaded()

    try:
        settings = _resolve_settings(args)
    except ValueError as exc:
        _logger.error("Input error: %s", exc)
        return EXIT_INPUT

    if args.list:
        return _run_list(args, settings)
    return _run_fetch(args, settings)


if __name__ == "__main__":  # pragma: no cover - entry point
    raise SystemExit(main())
