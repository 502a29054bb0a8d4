"""HTTP session client for the YouTube watch page and InnerTube player API.

The platform surface used here is undocumented. Callers depend only on the
:class:`PlatformClient` protocol so the concrete exchange can change without
touching selection, parsing or rendering.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Any, Protocol

import requests

from ..config import DEFAULT_USER_AGENT
from ..errors import (
    ConsentCookieError,
    IpBlocked,
    NetworkError,
    PlatformDataError,
    PoTokenRequired,
)
from .player import assert_playability, extract_innertube_api_key, extract_track_list
from .selector import build_translation_url

if TYPE_CHECKING:
    from ..config import Settings
    from ..types import TranscriptList, TranscriptMeta

_logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
INNERTUBE_API_URL = "https://www.youtube.com/youtubei/v1/player?key={api_key}"
INNERTUBE_CONTEXT = {"client": {"clientName": "ANDROID", "clientVersion": "20.10.38"}}

CONSENT_FORM_MARKER = 'action="https://consent.youtube.com/s"'
_CONSENT_VALUE_RE = re.compile(r'name="v" value="(.*?)"')
_PO_TOKEN_MARKER = "&exp=xpe"
_BLOCKED_STATUSES = {403, 429}


class PlatformClient(Protocol):
    """Capabilities the pipeline needs from the video platform."""

    def fetch_playability(self, video_id: str) -> dict[str, Any]:
        """Return the player response after checking the video is playable."""

    def fetch_track_list(
        self, video_id: str, player_response: Mapping[str, Any]
    ) -> TranscriptList:
        """Return the caption tracks advertised in ``player_response``."""

    def fetch_document(
        self, track: TranscriptMeta, translate_to: str | None = None
    ) -> str:
        """Return the raw timed-text document for ``track``."""


class YouTubeSessionClient:
    """`PlatformClient` backed by a :class:`requests.Session`.

    One instance holds the cookie state of one pipeline run; close it (or use
    it as a context manager) when the run ends.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = 10.0,
        accept_language: str = "en-US",
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout
        self._session.headers.update(
            {"Accept-Language": accept_language, "User-Agent": user_agent}
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, session: requests.Session | None = None
    ) -> YouTubeSessionClient:
        return cls(
            session,
            timeout=settings.timeout,
            accept_language=settings.accept_language,
            user_agent=settings.user_agent,
        )

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> YouTubeSessionClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def fetch_playability(self, video_id: str) -> dict[str, Any]:
        html = self._fetch_video_html(video_id)
        api_key = extract_innertube_api_key(html, video_id)
        player_response = self._fetch_innertube_data(video_id, api_key)
        assert_playability(video_id, player_response)
        return player_response

    def fetch_track_list(
        self, video_id: str, player_response: Mapping[str, Any]
    ) -> TranscriptList:
        return extract_track_list(video_id, player_response)

    def fetch_document(
        self, track: TranscriptMeta, translate_to: str | None = None
    ) -> str:
        url = build_translation_url(track, translate_to) if translate_to else track.base_url
        if _PO_TOKEN_MARKER in url:
            raise PoTokenRequired(track.video_id)

        _logger.info(
            "Fetching %s transcript document for %s", track.language_code, track.video_id
        )
        response = self._request("GET", url, track.video_id)
        return response.text

    def _fetch_video_html(self, video_id: str) -> str:
        url = WATCH_URL.format(video_id=video_id)
        _logger.debug("Fetching watch page %s", url)
        html = self._request("GET", url, video_id).text
        if CONSENT_FORM_MARKER not in html:
            return html

        _logger.info("Consent interstitial detected for %s; retrying with cookie", video_id)
        self._create_consent_cookie(html, video_id)
        html = self._request("GET", url, video_id).text
        if CONSENT_FORM_MARKER in html:
            raise ConsentCookieError(video_id)
        return html

    def _create_consent_cookie(self, html: str, video_id: str) -> None:
        match = _CONSENT_VALUE_RE.search(html)
        if match is None:
            raise ConsentCookieError(video_id)
        self._session.cookies.set(
            "CONSENT", f"YES+{match.group(1)}", domain=".youtube.com"
        )

    def _fetch_innertube_data(self, video_id: str, api_key: str) -> dict[str, Any]:
        url = INNERTUBE_API_URL.format(api_key=api_key)
        payload = {"context": INNERTUBE_CONTEXT, "videoId": video_id}
        _logger.debug("Requesting player response for %s", video_id)
        response = self._request("POST", url, video_id, json=payload)
        try:
            data = response.json()
        except ValueError as exc:
            raise PlatformDataError(video_id, f"invalid player JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise PlatformDataError(video_id, "player response is not an object")
        return data

    def _request(
        self, method: str, url: str, video_id: str, **kwargs: Any
    ) -> requests.Response:
        try:
            response = self._session.request(
                method, url, timeout=self._timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise NetworkError(
                f"{method} request for video {video_id} failed: {exc}",
                video_id=video_id,
            ) from exc
        self._check_http_errors(response, video_id)
        return response

    @staticmethod
    def _check_http_errors(response: requests.Response, video_id: str) -> None:
        status = response.status_code
        if status in _BLOCKED_STATUSES:
            raise IpBlocked(video_id)
        if not 200 <= status < 300:
            reason = getattr(response, "reason", None) or "Unknown error"
            raise NetworkError(
                f"HTTP {status} ({reason}) while fetching data for video {video_id}",
                video_id=video_id,
                status_code=status,
            )


__all__ = [
    "CONSENT_FORM_MARKER",
    "INNERTUBE_API_URL",
    "PlatformClient",
    "WATCH_URL",
    "YouTubeSessionClient",
]
