"""Typed failures raised by the transcript pipeline.

Every exception carries the context a caller needs to build a precise message
(which video, which languages were requested or available) as attributes, and
renders a readable summary through ``str()``.
"""

from __future__ import annotations

from collections.abc import Sequence

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class TranscriptError(RuntimeError):
    """Base class for every failure surfaced by the pipeline."""

    def __init__(self, message: str, *, video_id: str | None = None) -> None:
        super().__init__(message)
        self.video_id = video_id


class _VideoError(TranscriptError):
    """Failure tied to a specific video; prefixes the message with its URL."""

    cause = "An unknown error occurred"

    def __init__(self, video_id: str, detail: str | None = None) -> None:
        url = WATCH_URL.format(video_id=video_id)
        body = self.cause if detail is None else f"{self.cause}: {detail}"
        super().__init__(
            f"Could not retrieve a transcript for {url}. {body}", video_id=video_id
        )


class InvalidVideoId(TranscriptError):
    """Input is neither a video ID nor a recognised video URL."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Could not extract a valid YouTube video ID from: {value!r} "
            "(video IDs are 11 characters, or pass a youtube.com / youtu.be URL)"
        )
        self.value = value


class VideoUnavailable(_VideoError):
    cause = "The video is no longer available"


class VideoUnplayable(VideoUnavailable):
    """Playability status was not OK and matched no more specific failure."""

    cause = "The video is unplayable"

    def __init__(
        self, video_id: str, reason: str | None, sub_reasons: Sequence[str] = ()
    ) -> None:
        self.reason = reason
        self.sub_reasons = tuple(sub_reasons)
        detail = reason or "No reason specified"
        if self.sub_reasons:
            detail += " (" + "; ".join(self.sub_reasons) + ")"
        _VideoError.__init__(self, video_id, detail)


class AgeRestricted(_VideoError):
    cause = "The video is age-restricted and cannot be accessed without signing in"


class TranscriptsDisabled(_VideoError):
    cause = "Subtitles are disabled for this video"


class NoTranscriptFound(_VideoError):
    """Tracks exist, but none in the requested languages."""

    cause = "No transcript was found for any of the requested language codes"

    def __init__(
        self,
        video_id: str,
        requested_languages: Sequence[str],
        available_languages: Sequence[str],
    ) -> None:
        self.requested_languages = list(requested_languages)
        self.available_languages = list(available_languages)
        requested = ", ".join(self.requested_languages) or "(any)"
        available = ", ".join(self.available_languages) or "(none)"
        super().__init__(video_id, f"requested {requested}; available {available}")


class TranslationNotSupported(_VideoError):
    cause = "The requested transcript cannot be translated"

    def __init__(self, video_id: str, language_code: str) -> None:
        self.language_code = language_code
        super().__init__(video_id, f"track '{language_code}' is not translatable")


class TranslationLanguageNotAvailable(TranslationNotSupported):
    """The track is translatable, but not into the requested language."""

    cause = "The requested translation language is not available"

    def __init__(
        self,
        video_id: str,
        target_language: str,
        available_targets: Sequence[str],
    ) -> None:
        self.target_language = target_language
        self.available_targets = list(available_targets)
        self.language_code = target_language
        _VideoError.__init__(
            self,
            video_id,
            f"translation into '{target_language}' is not offered",
        )


class IpBlocked(_VideoError):
    cause = (
        "YouTube is blocking requests from your IP. This usually happens after "
        "too many requests; wait, or retry from a different network"
    )


class RequestBlocked(_VideoError):
    cause = "YouTube flagged the request as automated traffic"

    def __init__(self, video_id: str, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__(video_id, reason)


class PoTokenRequired(RequestBlocked):
    cause = "The caption track requires a proof-of-origin token"

    def __init__(self, video_id: str) -> None:
        super().__init__(video_id, None)


class ConsentCookieError(_VideoError):
    cause = "Failed to automatically give consent to saving cookies"


class PlatformDataError(_VideoError):
    cause = "The data required to fetch the transcript is not parsable"


class XmlParseError(TranscriptError):
    """The caption document is not well-formed timed-text XML."""

    def __init__(self, detail: str, *, video_id: str | None = None) -> None:
        super().__init__(f"Failed to parse caption document: {detail}", video_id=video_id)
        self.detail = detail


class NetworkError(TranscriptError):
    """Connectivity failure, timeout, or an unexpected HTTP status."""

    def __init__(
        self,
        detail: str,
        *,
        video_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(detail, video_id=video_id)
        self.status_code = status_code


__all__ = [
    "AgeRestricted",
    "ConsentCookieError",
    "InvalidVideoId",
    "IpBlocked",
    "NetworkError",
    "NoTranscriptFound",
    "PlatformDataError",
    "PoTokenRequired",
    "RequestBlocked",
    "TranscriptError",
    "TranscriptsDisabled",
    "TranslationLanguageNotAvailable",
    "TranslationNotSupported",
    "VideoUnavailable",
    "VideoUnplayable",
    "XmlParseError",
]
