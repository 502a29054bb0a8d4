"""Tests for resolving video references into IDs."""

from __future__ import annotations

import pytest

from tubescript.errors import InvalidVideoId, TranscriptError
from tubescript.transcripts.video_id import is_valid_video_id, parse_video_id

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "reference",
    [
        VIDEO_ID,
        f"  {VIDEO_ID}\n",
        f"https://www.youtube.com/watch?v={VIDEO_ID}",
        f"https://www.youtube.com/watch?v={VIDEO_ID}&t=42s#comments",
        f"https://www.youtube.com/watch?feature=share&v={VIDEO_ID}",
        f"https://m.youtube.com/watch?v={VIDEO_ID}",
        f"https://music.youtube.com/watch?v={VIDEO_ID}&list=RD",
        f"https://youtu.be/{VIDEO_ID}",
        f"https://youtu.be/{VIDEO_ID}?si=abc",
        f"https://www.youtube.com/embed/{VIDEO_ID}",
        f"https://www.youtube.com/shorts/{VIDEO_ID}",
        f"https://www.youtube.com/live/{VIDEO_ID}?feature=share",
        f"https://www.youtube-nocookie.com/embed/{VIDEO_ID}",
        f"youtube.com/watch?v={VIDEO_ID}",
        f"youtu.be/{VIDEO_ID}",
        f"http://YouTube.com/watch?v={VIDEO_ID}",
    ],
)
def test_parse_video_id_accepts_supported_references(reference: str) -> None:
    assert parse_video_id(reference) == VIDEO_ID


@pytest.mark.parametrize(
    "reference",
    [
        "",
        "   ",
        "short",
        "dQw4w9WgXcQQ",
        "dQw4w9WgX!Q",
        "https://example.com/watch?v=dQw4w9WgXcQ",
        "https://www.youtube.com/watch?v=tooShort",
        "https://www.youtube.com/channel/UCabcdefghij",
        "https://youtu.be/",
        "not a url at all",
    ],
)
def test_parse_video_id_rejects_invalid_references(reference: str) -> None:
    with pytest.raises(InvalidVideoId) as excinfo:
        parse_video_id(reference)
    assert excinfo.value.value == reference
    assert isinstance(excinfo.value, TranscriptError)


def test_is_valid_video_id_rejects_trailing_newline() -> None:
    assert is_valid_video_id(VIDEO_ID)
    assert not is_valid_video_id(f"{VIDEO_ID}\n")
