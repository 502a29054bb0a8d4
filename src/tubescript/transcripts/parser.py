"""Parse timed-text caption documents into :class:`~tubescript.types.Cue` lists.

Two layouts are served by the platform depending on the requested ``fmt``:

* format 1 (default)::

    <transcript><text start="1.2" dur="2.5">Hello</text></transcript>

* format 3 (``srv3``), times in milliseconds::

    <timedtext format="3"><body><p t="1200" d="2500"><s>Hello</s></p></body></timedtext>
"""

from __future__ import annotations

import html
import logging
import math
import re
from xml.etree import ElementTree

from ..errors import XmlParseError
from ..types import Cue

_logger = logging.getLogger(__name__)

FORMATTING_TAGS = (
    "strong",
    "em",
    "b",
    "i",
    "u",
    "mark",
    "small",
    "del",
    "ins",
    "sub",
    "sup",
)

_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_ANY_TAG_RE = re.compile(r"<[^>]*>")


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


class TranscriptParser:
    """Turn a caption document into cues, stripping or keeping inline markup."""

    def __init__(self, preserve_formatting: bool = False) -> None:
        self.preserve_formatting = preserve_formatting
        if preserve_formatting:
            kept = "|".join(FORMATTING_TAGS)
            self._markup_re = re.compile(rf"<(?!/?(?:{kept})\b)[^>]*>", re.IGNORECASE)
        else:
            self._markup_re = _ANY_TAG_RE

    def parse(self, document: str | bytes) -> list[Cue]:
        """Return cues in document order.

        Raises:
            XmlParseError: If the document is not well-formed or a timing
                attribute is not a non-negative number.
        """
        if isinstance(document, bytes):
            payload: str | bytes = document.lstrip()
        else:
            payload = document.lstrip("\ufeff").strip()

        try:
            root = ElementTree.fromstring(payload)
        except ElementTree.ParseError as exc:
            raise XmlParseError(str(exc)) from exc

        cues: list[Cue] = []
        for element in root.iter():
            tag = _local_name(element.tag)
            if tag == "text":
                start = self._seconds(element, "start", scale=1.0)
                duration = self._seconds(element, "dur", scale=1.0)
            elif tag == "p" and "t" in element.attrib:
                start = self._seconds(element, "t", scale=1000.0)
                duration = self._seconds(element, "d", scale=1000.0)
            else:
                continue
            cues.append(Cue(self._clean(self._inner_text(element)), start, duration))

        _logger.debug("Parsed %d cues from caption document", len(cues))
        return cues

    @staticmethod
    def _seconds(element: ElementTree.Element, name: str, *, scale: float) -> float:
        raw = element.get(name)
        if raw is None or not raw.strip():
            return 0.0
        try:
            value = float(raw) / scale
        except ValueError:
            raise XmlParseError(f"invalid {name}={raw!r}") from None
        if value < 0 or not math.isfinite(value):
            raise XmlParseError(f"invalid {name}={raw!r}")
        return value

    def _inner_text(self, element: ElementTree.Element) -> str:
        parts = [element.text or ""]
        for child in element:
            tag = _local_name(child.tag)
            if tag == "br":
                parts.append("\n")
            elif self.preserve_formatting and tag in FORMATTING_TAGS:
                parts.append(f"<{tag}>{self._inner_text(child)}</{tag}>")
            else:
                parts.append(self._inner_text(child))
            parts.append(child.tail or "")
        return "".join(parts)

    def _clean(self, raw: str) -> str:
        # Cue bodies are entity-escaped twice by the platform, so markup can
        # still be present as text after the XML layer decoded it once.
        text = html.unescape(raw)
        text = _BR_RE.sub("\n", text)
        return self._markup_re.sub("", text)


def parse_timed_text(
    document: str | bytes, preserve_formatting: bool = False
) -> list[Cue]:
    return TranscriptParser(preserve_formatting).parse(document)


__all__ = ["FORMATTING_TAGS", "TranscriptParser", "parse_timed_text"]
