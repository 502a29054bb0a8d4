"""Interpret the platform's player response.

The InnerTube player payload is an undocumented contract, so the fields this
module relies on are described by permissive pydantic models: unknown keys are
ignored, and caption tracks that fail validation are skipped rather than
failing the whole video.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import (
    AgeRestricted,
    IpBlocked,
    PlatformDataError,
    RequestBlocked,
    TranscriptsDisabled,
    VideoUnavailable,
    VideoUnplayable,
)
from ..types import TranscriptKind, TranscriptList, TranscriptMeta, TranslationLanguage

_logger = logging.getLogger(__name__)

_API_KEY_RE = re.compile(r'"INNERTUBE_API_KEY":\s*"([a-zA-Z0-9_-]+)"')
_RECAPTCHA_MARKER = 'class="g-recaptcha"'

_BOT_REASON = "not a bot"
_AGE_REASONS = ("inappropriate for some users", "confirm your age")
_AGE_STATUSES = {"AGE_CHECK_REQUIRED", "AGE_VERIFICATION_REQUIRED"}


class _Run(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class _Text(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    simple_text: str | None = Field(default=None, alias="simpleText")
    runs: list[_Run] = Field(default_factory=list)

    def plain(self) -> str | None:
        if self.runs and self.runs[0].text:
            return self.runs[0].text
        return self.simple_text or None


class _CaptionTrack(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    base_url: str = Field(alias="baseUrl", min_length=1)
    language_code: str = Field(alias="languageCode", min_length=1)
    name: _Text | None = None
    kind: str | None = None
    is_translatable: bool = Field(default=False, alias="isTranslatable")


class _TranslationLanguage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    language_code: str = Field(alias="languageCode", min_length=1)
    language_name: _Text | None = Field(default=None, alias="languageName")


class _ErrorScreen(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    subreason: _Text | None = None


class _PlayabilityStatus(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: str = ""
    reason: str | None = None
    error_screen: Any = Field(default=None, alias="errorScreen")

    def sub_reasons(self) -> list[str]:
        if not isinstance(self.error_screen, Mapping):
            return []
        renderer = self.error_screen.get("playerErrorMessageRenderer")
        if not isinstance(renderer, Mapping):
            return []
        try:
            screen = _ErrorScreen.model_validate(renderer)
        except ValidationError:
            return []
        if screen.subreason is None:
            return []
        texts = [run.text for run in screen.subreason.runs if run.text]
        if not texts and screen.subreason.simple_text:
            texts = [screen.subreason.simple_text]
        return texts


def extract_innertube_api_key(html: str, video_id: str) -> str:
    """Find the InnerTube API key embedded in the watch page.

    Raises:
        IpBlocked: If the page is a reCAPTCHA interstitial.
        PlatformDataError: If no key is present.
    """
    if _RECAPTCHA_MARKER in html:
        raise IpBlocked(video_id)
    match = _API_KEY_RE.search(html)
    if match is None:
        raise PlatformDataError(video_id, "INNERTUBE_API_KEY not found in watch page")
    return match.group(1)


def assert_playability(video_id: str, player_response: Mapping[str, Any]) -> None:
    """Raise the typed failure matching a non-OK playability status."""

    raw_status = player_response.get("playabilityStatus")
    if raw_status is None:
        return
    if not isinstance(raw_status, Mapping):
        raise PlatformDataError(video_id, "playabilityStatus is not an object")
    try:
        playability = _PlayabilityStatus.model_validate(raw_status)
    except ValidationError as exc:
        raise PlatformDataError(video_id, f"invalid playabilityStatus: {exc}") from exc

    status = playability.status
    if status in {"", "OK"}:
        return

    reason = playability.reason or ""
    lowered = reason.lower()
    _logger.info("Playability status for %s: %s (%s)", video_id, status, reason)

    if status == "LOGIN_REQUIRED":
        if _BOT_REASON in lowered:
            raise RequestBlocked(video_id, reason)
        if any(marker in lowered for marker in _AGE_REASONS):
            raise AgeRestricted(video_id)
        raise VideoUnavailable(video_id, reason or "sign-in required")
    if status in _AGE_STATUSES:
        raise AgeRestricted(video_id)
    if status == "ERROR" and "unavailable" in lowered:
        raise VideoUnavailable(video_id)

    raise VideoUnplayable(video_id, playability.reason, playability.sub_reasons())


def _entries(video_id: str, renderer: Mapping[str, Any], key: str) -> list[Any]:
    value = renderer.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        _logger.warning(
            "Ignoring %s for %s: expected a list, got %s",
            key,
            video_id,
            type(value).__name__,
        )
        return []
    return value


def _track_name(track: _CaptionTrack) -> str:
    if track.name is not None:
        name = track.name.plain()
        if name:
            return name
    return track.language_code


def extract_track_list(
    video_id: str, player_response: Mapping[str, Any]
) -> TranscriptList:
    """Build the :class:`TranscriptList` embedded in a player response.

    Raises:
        TranscriptsDisabled: If the video exposes no usable caption tracks.
    """
    captions = player_response.get("captions")
    renderer = (
        captions.get("playerCaptionsTracklistRenderer")
        if isinstance(captions, Mapping)
        else None
    )
    if not isinstance(renderer, Mapping):
        raise TranscriptsDisabled(video_id)

    translation_languages: list[TranslationLanguage] = []
    for raw in _entries(video_id, renderer, "translationLanguages"):
        try:
            parsed = _TranslationLanguage.model_validate(raw)
        except ValidationError:
            _logger.debug("Skipping malformed translation language: %r", raw)
            continue
        name = parsed.language_name.plain() if parsed.language_name else None
        translation_languages.append(
            TranslationLanguage(parsed.language_code, name or parsed.language_code)
        )
    available_targets = tuple(translation_languages)

    tracks: list[TranscriptMeta] = []
    for raw in _entries(video_id, renderer, "captionTracks"):
        try:
            track = _CaptionTrack.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Skipping malformed caption track for %s: %s", video_id, exc)
            continue
        tracks.append(
            TranscriptMeta(
                video_id=video_id,
                language_code=track.language_code,
                language=_track_name(track),
                kind=TranscriptKind.from_caption_kind(track.kind),
                is_translatable=track.is_translatable,
                base_url=track.base_url.replace("&fmt=srv3", ""),
                translation_languages=available_targets if track.is_translatable else (),
            )
        )

    if not tracks:
        raise TranscriptsDisabled(video_id)

    _logger.info(
        "Found %d caption tracks for %s: %s",
        len(tracks),
        video_id,
        ", ".join(str(track) for track in tracks),
    )
    return TranscriptList(video_id, tuple(tracks), available_targets)


__all__ = [
    "assert_playability",
    "extract_innertube_api_key",
    "extract_track_list",
]
