"""Shared type definitions for the transcript pipeline."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TypedDict


class TranscriptKind(Enum):
    """How a caption track was produced."""

    MANUAL = "manual"
    AUTO_GENERATED = "auto-generated"

    @classmethod
    def from_caption_kind(cls, kind: str | None) -> TranscriptKind:
        """Map the platform's ``kind`` field (``"asr"`` for speech recognition)."""

        if kind == "asr":
            return cls.AUTO_GENERATED
        return cls.MANUAL


class OutputFormat(Enum):
    """Closed set of output encodings understood by the renderer."""

    JSON = "json"
    TEXT = "text"
    SRT = "srt"
    MARKDOWN = "markdown"
    VTT = "vtt"

    @classmethod
    def parse(cls, name: str) -> OutputFormat:
        key = name.strip().lower()
        key = _FORMAT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(sorted({*(f.value for f in cls), *_FORMAT_ALIASES}))
            raise ValueError(
                f"Unknown output format '{name}' (expected one of: {choices})"
            ) from None

    @property
    def extension(self) -> str:
        return _FORMAT_EXTENSIONS[self]


_FORMAT_ALIASES = {"txt": "text", "md": "markdown"}
_FORMAT_EXTENSIONS = {
    OutputFormat.JSON: "json",
    OutputFormat.TEXT: "txt",
    OutputFormat.SRT: "srt",
    OutputFormat.MARKDOWN: "md",
    OutputFormat.VTT: "vtt",
}


class TranscriptSegment(TypedDict):
    """Single transcript segment preserving timing metadata."""

    text: str
    start: float
    duration: float


@dataclass(frozen=True, slots=True)
class TranslationLanguage:
    """A target language the platform can machine-translate a track into."""

    language_code: str
    language: str


@dataclass(frozen=True, slots=True)
class TranscriptMeta:
    """One discoverable caption track for a video."""

    video_id: str
    language_code: str
    language: str
    kind: TranscriptKind
    is_translatable: bool
    base_url: str
    translation_languages: tuple[TranslationLanguage, ...] = ()

    @property
    def is_generated(self) -> bool:
        return self.kind is TranscriptKind.AUTO_GENERATED

    def __str__(self) -> str:
        suffix = " (auto-generated)" if self.is_generated else ""
        translatable = "[translatable]" if self.is_translatable else ""
        return f'{self.language_code} ("{self.language}"){suffix}{translatable}'


@dataclass(frozen=True, slots=True)
class TranscriptList:
    """Every caption track a video exposes, in the order the platform lists them."""

    video_id: str
    tracks: tuple[TranscriptMeta, ...]
    translation_languages: tuple[TranslationLanguage, ...] = ()

    def __iter__(self) -> Iterator[TranscriptMeta]:
        return iter(self.tracks)

    def __len__(self) -> int:
        return len(self.tracks)

    @property
    def manually_created(self) -> tuple[TranscriptMeta, ...]:
        return tuple(t for t in self.tracks if t.kind is TranscriptKind.MANUAL)

    @property
    def generated(self) -> tuple[TranscriptMeta, ...]:
        return tuple(t for t in self.tracks if t.kind is TranscriptKind.AUTO_GENERATED)

    def language_codes(self) -> list[str]:
        """Distinct language codes in listing order."""

        seen: dict[str, None] = {}
        for track in self.tracks:
            seen.setdefault(track.language_code, None)
        return list(seen)


@dataclass(frozen=True, slots=True)
class Cue:
    """One timed caption unit. Times are in seconds."""

    text: str
    start: float
    duration: float = 0.0

    @property
    def end(self) -> float:
        return self.start + self.duration

    def to_segment(self) -> TranscriptSegment:
        return {"text": self.text, "start": self.start, "duration": self.duration}


@dataclass(frozen=True, slots=True)
class Transcript:
    """Terminal artifact of a pipeline run and sole input to the renderer."""

    video_id: str
    language_code: str
    cues: tuple[Cue, ...] = field(default_factory=tuple)
    language: str = ""
    is_generated: bool = False
    translated: bool = False

    def __len__(self) -> int:
        return len(self.cues)

    def segments(self) -> list[TranscriptSegment]:
        return [cue.to_segment() for cue in self.cues]


__all__ = [
    "Cue",
    "OutputFormat",
    "Transcript",
    "TranscriptKind",
    "TranscriptList",
    "TranscriptMeta",
    "TranscriptSegment",
    "TranslationLanguage",
]
