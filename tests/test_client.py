"""Unit tests for the requests-backed YouTube session client."""

from __future__ import annotations

from typing import Any

import pytest
import requests
from requests.cookies import RequestsCookieJar

from tubescript.config import Settings
from tubescript.errors import (
    ConsentCookieError,
    IpBlocked,
    NetworkError,
    PlatformDataError,
    PoTokenRequired,
    TranscriptsDisabled,
    TranslationNotSupported,
    VideoUnavailable,
)
from tubescript.transcripts.client import YouTubeSessionClient
from tubescript.types import TranscriptKind, TranscriptMeta

VIDEO_ID = "dQw4w9WgXcQ"
WATCH_HTML = '<script>ytcfg.set({"INNERTUBE_API_KEY": "test-key"});</script>'
CONSENT_HTML = (
    '<form action="https://consent.youtube.com/s" method="POST">'
    '<input type="hidden" name="v" value="cb.20210328-17-p0.en+FX+123"></form>'
)
PLAYER_RESPONSE = {
    "playabilityStatus": {"status": "OK"},
    "captions": {
        "playerCaptionsTracklistRenderer": {
            "captionTracks": [
                {
                    "baseUrl": "https://www.youtube.com/api/timedtext?v=x&lang=en",
                    "languageCode": "en",
                    "name": {"simpleText": "English"},
                    "isTranslatable": True,
                }
            ],
            "translationLanguages": [
                {"languageCode": "de", "languageName": {"simpleText": "German"}}
            ],
        }
    },
}


class _FakeResponse:
    def __init__(
        self,
        text: str = "",
        *,
        payload: object = None,
        status_code: int = 200,
        reason: str = "OK",
    ) -> None:
        self.text = text
        self._payload = payload
        self.status_code = status_code
        self.reason = reason

    def json(self) -> object:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class _FakeSession:
    def __init__(self, responses: list[_FakeResponse | Exception]) -> None:
        self._responses = responses
        self.headers: dict[str, str] = {}
        self.cookies = RequestsCookieJar()
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.closed = False

    def request(
        self, method: str, url: str, timeout: float, **kwargs: Any
    ) -> _FakeResponse:
        self.calls.append((method, url, {"timeout": timeout, **kwargs}))
        if not self._responses:
            raise AssertionError("No more fake responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def _track(base_url: str, *, translatable: bool = True) -> TranscriptMeta:
    return TranscriptMeta(
        video_id=VIDEO_ID,
        language_code="en",
        language="English",
        kind=TranscriptKind.MANUAL,
        is_translatable=translatable,
        base_url=base_url,
    )


def test_fetch_playability_posts_innertube_request() -> None:
    session = _FakeSession(
        [_FakeResponse(WATCH_HTML), _FakeResponse(payload=PLAYER_RESPONSE)]
    )
    client = YouTubeSessionClient(session, timeout=3.0, accept_language="de-DE")

    player_response = client.fetch_playability(VIDEO_ID)

    assert player_response == PLAYER_RESPONSE
    assert session.headers["Accept-Language"] == "de-DE"
    watch_call, api_call = session.calls
    assert watch_call[0] == "GET"
    assert watch_call[1] == f"https://www.youtube.com/watch?v={VIDEO_ID}"
    assert api_call[0] == "POST"
    assert api_call[1].endswith("/youtubei/v1/player?key=test-key")
    assert api_call[2]["json"]["videoId"] == VIDEO_ID
    assert api_call[2]["json"]["context"]["client"]["clientName"] == "ANDROID"
    assert api_call[2]["timeout"] == 3.0


def test_fetch_track_list_from_player_response() -> None:
    client = YouTubeSessionClient(_FakeSession([]))

    track_list = client.fetch_track_list(VIDEO_ID, PLAYER_RESPONSE)

    assert track_list.language_codes() == ["en"]
    with pytest.raises(TranscriptsDisabled):
        client.fetch_track_list(VIDEO_ID, {"playabilityStatus": {"status": "OK"}})


def test_consent_interstitial_sets_cookie_and_retries() -> None:
    session = _FakeSession(
        [
            _FakeResponse(CONSENT_HTML),
            _FakeResponse(WATCH_HTML),
            _FakeResponse(payload=PLAYER_RESPONSE),
        ]
    )
    client = YouTubeSessionClient(session)

    client.fetch_playability(VIDEO_ID)

    assert session.cookies.get("CONSENT", domain=".youtube.com") == (
        "YES+cb.20210328-17-p0.en+FX+123"
    )
    assert len(session.calls) == 3


def test_consent_interstitial_that_persists_raises() -> None:
    session = _FakeSession([_FakeResponse(CONSENT_HTML), _FakeResponse(CONSENT_HTML)])
    client = YouTubeSessionClient(session)

    with pytest.raises(ConsentCookieError):
        client.fetch_playability(VIDEO_ID)


def test_consent_form_without_value_raises() -> None:
    html = '<form action="https://consent.youtube.com/s"></form>'
    client = YouTubeSessionClient(_FakeSession([_FakeResponse(html)]))

    with pytest.raises(ConsentCookieError):
        client.fetch_playability(VIDEO_ID)


@pytest.mark.parametrize("status_code", [403, 429])
def test_blocking_statuses_raise_ip_blocked(status_code: int) -> None:
    session = _FakeSession([_FakeResponse(status_code=status_code, reason="Blocked")])
    client = YouTubeSessionClient(session)

    with pytest.raises(IpBlocked):
        client.fetch_playability(VIDEO_ID)


def test_other_http_errors_raise_network_error() -> None:
    session = _FakeSession([_FakeResponse(status_code=500, reason="Server Error")])
    client = YouTubeSessionClient(session)

    with pytest.raises(NetworkError) as excinfo:
        client.fetch_playability(VIDEO_ID)
    assert excinfo.value.status_code == 500
    assert excinfo.value.video_id == VIDEO_ID


def test_transport_failures_raise_network_error() -> None:
    session = _FakeSession([requests.ConnectionError("connection reset")])
    client = YouTubeSessionClient(session)

    with pytest.raises(NetworkError, match="connection reset"):
        client.fetch_playability(VIDEO_ID)


def test_invalid_player_json_raises_platform_data_error() -> None:
    session = _FakeSession([_FakeResponse(WATCH_HTML), _FakeResponse("<html>")])
    client = YouTubeSessionClient(session)

    with pytest.raises(PlatformDataError):
        client.fetch_playability(VIDEO_ID)


def test_unplayable_player_response_raises() -> None:
    payload = {"playabilityStatus": {"status": "ERROR", "reason": "Video unavailable"}}
    session = _FakeSession([_FakeResponse(WATCH_HTML), _FakeResponse(payload=payload)])
    client = YouTubeSessionClient(session)

    with pytest.raises(VideoUnavailable):
        client.fetch_playability(VIDEO_ID)


def test_fetch_document_returns_body() -> None:
    session = _FakeSession([_FakeResponse("<transcript></transcript>")])
    client = YouTubeSessionClient(session)
    track = _track("https://www.youtube.com/api/timedtext?v=x&lang=en")

    assert client.fetch_document(track) == "<transcript></transcript>"
    assert session.calls[0][1] == track.base_url


def test_fetch_document_with_translation_appends_tlang() -> None:
    session = _FakeSession([_FakeResponse("<transcript></transcript>")])
    client = YouTubeSessionClient(session)

    client.fetch_document(_track("https://www.youtube.com/api/timedtext?lang=en"), "de")

    assert session.calls[0][1].endswith("lang=en&tlang=de")


def test_fetch_document_requiring_po_token_raises() -> None:
    session = _FakeSession([])
    client = YouTubeSessionClient(session)

    with pytest.raises(PoTokenRequired):
        client.fetch_document(
            _track("https://www.youtube.com/api/timedtext?lang=en&exp=xpe")
        )
    assert session.calls == []


def test_close_leaves_injected_session_open() -> None:
    session = _FakeSession([])

    with YouTubeSessionClient(session):
        pass

    assert session.closed is False


def test_from_settings_applies_headers() -> None:
    session = _FakeSession([])
    settings = Settings(timeout=2.5, accept_language="fr-FR", user_agent="agent/1.0")

    YouTubeSessionClient.from_settings(settings, session)

    assert session.headers == {"Accept-Language": "fr-FR", "User-Agent": "agent/1.0"}


def test_translation_of_untranslatable_track_fails_before_request() -> None:
    session = _FakeSession([])
    client = YouTubeSessionClient(session)

    with pytest.raises(TranslationNotSupported):
        client.fetch_document(
            _track("https://www.youtube.com/api/timedtext?lang=en", translatable=False),
            "de",
        )
    assert session.calls == []
