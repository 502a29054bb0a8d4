"""Pick one caption track from a :class:`TranscriptList`.

Requested language codes are tried in the caller's priority order. Within a
single code a manually created track beats an auto-generated one; across codes
the priority order always wins. Codes are compared exactly (``en`` does not
match ``en-US``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from urllib.parse import quote

from ..errors import (
    NoTranscriptFound,
    TranslationLanguageNotAvailable,
    TranslationNotSupported,
)
from ..types import TranscriptKind, TranscriptList, TranscriptMeta

_logger = logging.getLogger(__name__)

_KIND_PREFERENCE = (TranscriptKind.MANUAL, TranscriptKind.AUTO_GENERATED)


@dataclass(frozen=True, slots=True)
class Selection:
    """The chosen track plus the optional translation target."""

    track: TranscriptMeta
    translate_to: str | None = None


def _normalise(languages: Iterable[str]) -> list[str]:
    return [code.strip() for code in languages if code and code.strip()]


def _find(
    track_list: TranscriptList,
    languages: Sequence[str],
    kinds: Sequence[TranscriptKind],
) -> TranscriptMeta:
    requested = _normalise(languages)
    if requested:
        for code in requested:
            for kind in kinds:
                for track in track_list:
                    if track.kind is kind and track.language_code == code:
                        return track
    else:
        for kind in kinds:
            for track in track_list:
                if track.kind is kind:
                    return track

    raise NoTranscriptFound(
        track_list.video_id, requested, track_list.language_codes()
    )


def find_transcript(
    track_list: TranscriptList, languages: Sequence[str] = ()
) -> TranscriptMeta:
    """Return the best track for ``languages``.

    An empty ``languages`` accepts the first manually created track, falling
    back to the first auto-generated one.

    Raises:
        NoTranscriptFound: If no track matches any requested code.
    """
    return _find(track_list, languages, _KIND_PREFERENCE)


def find_manually_created(
    track_list: TranscriptList, languages: Sequence[str] = ()
) -> TranscriptMeta:
    return _find(track_list, languages, (TranscriptKind.MANUAL,))


def find_generated(
    track_list: TranscriptList, languages: Sequence[str] = ()
) -> TranscriptMeta:
    return _find(track_list, languages, (TranscriptKind.AUTO_GENERATED,))


def check_translation(track: TranscriptMeta, target_language: str) -> None:
    """Fail unless ``track`` can be machine-translated to ``target_language``.

    Raises:
        TranslationNotSupported: If the track cannot be translated.
        TranslationLanguageNotAvailable: If the platform lists translation
            targets and ``target_language`` is not one of them.
    """
    if not track.is_translatable:
        raise TranslationNotSupported(track.video_id, track.language_code)

    targets = [lang.language_code for lang in track.translation_languages]
    if targets and target_language not in targets:
        raise TranslationLanguageNotAvailable(
            track.video_id, target_language, targets
        )


def build_translation_url(track: TranscriptMeta, target_language: str) -> str:
    """Return the document URL for ``track`` machine-translated to ``target_language``.

    The base locator is kept byte-for-byte apart from any previous ``tlang``
    pair, since its query carries signed parameters.

    Raises:
        TranslationNotSupported: See :func:`check_translation`.
    """
    check_translation(track, target_language)

    base, _, fragment = track.base_url.partition("#")
    path, _, query = base.partition("?")
    pairs = [pair for pair in query.split("&") if pair and not pair.startswith("tlang=")]
    pairs.append(f"tlang={quote(target_language, safe='')}")
    url = f"{path}?{'&'.join(pairs)}"
    return f"{url}#{fragment}" if fragment else url


def select_track(
    track_list: TranscriptList,
    languages: Sequence[str] = (),
    translate_to: str | None = None,
) -> Selection:
    """Choose a track and validate the translation target, if any."""
    track = find_transcript(track_list, languages)
    _logger.info("Selected transcript track %s", track)
    if not translate_to:
        return Selection(track=track)

    check_translation(track, translate_to)
    _logger.info("Requesting translation %s -> %s", track.language_code, translate_to)
    return Selection(track=track, translate_to=translate_to)


__all__ = [
    "Selection",
    "build_translation_url",
    "check_translation",
    "find_generated",
    "find_manually_created",
    "find_transcript",
    "select_track",
]
