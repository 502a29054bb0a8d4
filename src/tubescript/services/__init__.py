"""Service layer wiring the transcript pipeline to its collaborators."""

from . import cleanup, transcripts

__all__ = [
    "cleanup",
    "transcripts",
]
