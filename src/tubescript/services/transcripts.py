"""Transcript retrieval pipeline.

``fetch`` runs the per-video stages strictly in order (resolve, playability,
track discovery, selection, document fetch, parse) and surfaces the first
failure as a :class:`~tubescript.errors.TranscriptError`. ``fetch_many`` runs
independent pipelines for several videos with a throttle hook between them.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

from ..config import Settings
from ..errors import TranscriptError, XmlParseError
from ..transcripts.client import PlatformClient, YouTubeSessionClient
from ..transcripts.formatters import render
from ..transcripts.parser import TranscriptParser
from ..transcripts.selector import Selection, select_track
from ..transcripts.video_id import parse_video_id
from ..types import Cue, Transcript, TranscriptList

_logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], PlatformClient]
Throttle = Callable[[int], None]


class RequestThrottle:
    """Sleep between consecutive pipeline runs to avoid platform rate limits."""

    def __init__(
        self,
        delay: float = 0.0,
        random_delay: bool = False,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the throttle.

        Args:
            delay: Base delay between runs in seconds
            random_delay: Add random jitter to delays (±25%)
            sleep: Function used to wait; injectable for tests
        """
        self.delay = delay
        self.random_delay = random_delay
        self._sleep = sleep

    def __call__(self, index: int) -> None:
        if self.delay <= 0:
            return

        delay = self.delay
        if self.random_delay:
            jitter = random.uniform(-0.25, 0.25)
            delay = delay * (1 + jitter)

        _logger.info("Applying delay before run %d: %.2fs", index + 1, delay)
        self._sleep(delay)


@dataclass(slots=True)
class FetchOutcome:
    """Result of one pipeline run inside :func:`fetch_many`."""

    video_ref: str
    transcript: Transcript | None = None
    error: TranscriptError | None = None

    @property
    def ok(self) -> bool:
        return self.transcript is not None


@contextmanager
def _client_scope(
    client: PlatformClient | None, settings: Settings
) -> Iterator[PlatformClient]:
    if client is not None:
        yield client
        return
    with YouTubeSessionClient.from_settings(settings) as owned:
        yield owned


def _build_transcript(
    video_id: str, selection: Selection, cues: Sequence[Cue]
) -> Transcript:
    track = selection.track
    if selection.translate_to is None:
        return Transcript(
            video_id=video_id,
            language_code=track.language_code,
            cues=tuple(cues),
            language=track.language,
            is_generated=track.is_generated,
        )

    language = next(
        (
            lang.language
            for lang in track.translation_languages
            if lang.language_code == selection.translate_to
        ),
        selection.translate_to,
    )
    return Transcript(
        video_id=video_id,
        language_code=selection.translate_to,
        cues=tuple(cues),
        language=language,
        is_generated=True,
        translated=True,
    )


def list_transcripts(
    video_ref: str,
    *,
    client: PlatformClient | None = None,
    settings: Settings | None = None,
) -> TranscriptList:
    """Return every caption track ``video_ref`` exposes."""

    video_id = parse_video_id(video_ref)
    with _client_scope(client, settings or Settings()) as active:
        player_response = active.fetch_playability(video_id)
        return active.fetch_track_list(video_id, player_response)


def fetch(
    video_ref: str,
    languages: Sequence[str] = (),
    translate_to: str | None = None,
    *,
    client: PlatformClient | None = None,
    settings: Settings | None = None,
    preserve_formatting: bool = False,
) -> Transcript:
    """Fetch the best transcript for ``video_ref``.

    Args:
        video_ref: Video ID or any supported YouTube URL
        languages: Language codes in priority order; empty accepts the
            default track (first manual, else first auto-generated)
        translate_to: Optional target language for machine translation
        client: Platform client to use; a fresh session is created and closed
            for this run when omitted
        settings: Timeout and header configuration for a created client
        preserve_formatting: Keep simple inline formatting tags in cue text

    Returns:
        The parsed transcript

    Raises:
        TranscriptError: The first failure of any pipeline stage
    """
    video_id = parse_video_id(video_ref)
    _logger.info("Fetching transcript for video %s", video_id)

    with _client_scope(client, settings or Settings()) as active:
        player_response = active.fetch_playability(video_id)
        track_list = active.fetch_track_list(video_id, player_response)
        selection = select_track(track_list, languages, translate_to)
        document = active.fetch_document(selection.track, selection.translate_to)

    try:
        cues = TranscriptParser(preserve_formatting).parse(document)
    except XmlParseError as exc:
        raise XmlParseError(exc.detail, video_id=video_id) from exc

    transcript = _build_transcript(video_id, selection, cues)
    _logger.info(
        "Retrieved %d cues in %s for video %s",
        len(transcript),
        transcript.language_code,
        video_id,
    )
    return transcript


def _close(client: PlatformClient) -> None:
    close = getattr(client, "close", None)
    if callable(close):
        close()


def fetch_many(
    video_refs: Iterable[str],
    languages: Sequence[str] = (),
    translate_to: str | None = None,
    *,
    throttle: Throttle | None = None,
    client_factory: ClientFactory | None = None,
    settings: Settings | None = None,
    preserve_formatting: bool = False,
) -> list[FetchOutcome]:
    """Run one independent pipeline per reference.

    ``throttle`` is called with the run index before every run except the
    first. A failing run is recorded in its :class:`FetchOutcome` and does not
    stop the remaining runs.
    """
    active_settings = settings or Settings()
    if throttle is None:
        throttle = RequestThrottle(active_settings.delay, active_settings.random_delay)
    factory = client_factory or YouTubeSessionClient.from_settings

    outcomes: list[FetchOutcome] = []
    for index, video_ref in enumerate(video_refs):
        if index > 0:
            throttle(index)
        client = factory(active_settings)
        try:
            transcript = fetch(
                video_ref,
                languages,
                translate_to,
                client=client,
                preserve_formatting=preserve_formatting,
            )
        except TranscriptError as exc:
            _logger.warning("Failed to fetch transcript for %s: %s", video_ref, exc)
            outcomes.append(FetchOutcome(video_ref, error=exc))
        else:
            outcomes.append(FetchOutcome(video_ref, transcript=transcript))
        finally:
            _close(client)
    return outcomes


__all__ = [
    "FetchOutcome",
    "RequestThrottle",
    "fetch",
    "fetch_many",
    "list_transcripts",
    "render",
]
