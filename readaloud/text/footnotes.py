"""Footnote detection, excision, and inline re-insertion.

Responsibilities:
- Separate a trailing footnote section from body text.
- Detect footnote markers embedded in prose.
- Re-insert footnote content at marker positions when footnote reading is enabled.

The trailing-section test is a length heuristic, not an exact classifier:
content lines count as footnotes only when the first one starts past
`threshold_ratio` of the document.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Callable, Iterator

from ..models.datatypes import FootnoteExtraction, FootnoteTable


_SUPERSCRIPT_DIGITS = "⁰¹²³⁴⁵⁶⁷⁸⁹"
_SUPERSCRIPT_TO_ASCII = str.maketrans(_SUPERSCRIPT_DIGITS, "0123456789")
FOOTNOTE_SYMBOLS = "*†‡§"

_CONTENT_LINE_RE = re.compile(
    rf"(?m)^[ \t]*(?P<marker>\d+|[{_SUPERSCRIPT_DIGITS}]+|[{re.escape(FOOTNOTE_SYMBOLS)}])\.[ \t]+"
)
_MARKER_RE = re.compile(
    rf"\[(?P<bracketed>\d+|[{re.escape(FOOTNOTE_SYMBOLS)}])\]"
    rf"|\((?P<parenthesized>\d+|[{re.escape(FOOTNOTE_SYMBOLS)}])\)"
    rf"|(?P<superscript>[{_SUPERSCRIPT_DIGITS}]+)"
    rf"|(?P<symbol>[{re.escape(FOOTNOTE_SYMBOLS)}])(?!\w)"
)
_DOUBLED_PERIOD_RE = re.compile(r"\.(?:[ \t]+\.)+(?!\.)")


def fold_marker(token: str) -> str:
    """Fold superscript digits to ASCII so markers and table keys compare equal."""

    return token.strip().translate(_SUPERSCRIPT_TO_ASCII)


@dataclass(frozen=True, slots=True)
class FootnoteMarker:
    """One footnote marker occurrence in prose.

    Attributes:
        start: Inclusive character offset of the raw marker text.
        end: Exclusive character offset of the raw marker text.
        raw: Marker text as written, for example `[1]` or `²`.
        token: Folded marker token used for table lookup.
    """

    start: int
    end: int
    raw: str
    token: str


class FootnoteExtractor:
    """Split raw text into body text and a footnote table."""

    def __init__(self, threshold_ratio: float = 0.6) -> None:
        """Initialize with the minimum document position of a footnote section."""

        if not 0.0 <= threshold_ratio <= 1.0:
            raise ValueError("`threshold_ratio` must be between 0 and 1.")
        self.threshold_ratio = threshold_ratio

    def extract(self, text: str) -> FootnoteExtraction:
        """Excise a trailing footnote section and build its lookup table.

        Args:
            text: Raw extracted document text.

        Returns:
            Body text with the footnote section removed, and the folded
            marker-to-content table. When no trailing section is detected, the
            full text is returned unchanged with an empty table.
        """

        content_lines = list(_CONTENT_LINE_RE.finditer(text))
        if not content_lines:
            return FootnoteExtraction(body_text=text)

        section_start = content_lines[0].start()
        if section_start <= len(text) * self.threshold_ratio:
            return FootnoteExtraction(body_text=text)

        table: dict[str, str] = {}
        boundaries = [match.start() for match in content_lines[1:]] + [len(text)]
        for match, content_end in zip(content_lines, boundaries):
            token = fold_marker(match.group("marker"))
            content = text[match.end() : content_end].strip()
            if content and token not in table:
                table[token] = content

        return FootnoteExtraction(body_text=text[:section_start].rstrip(), table=table)

    def find_markers(self, text: str) -> list[FootnoteMarker]:
        """Return every marker occurrence in reading order."""

        return list(self._iter_markers(text))

    def inline(self, text: str, table: FootnoteTable) -> str:
        """Replace known markers with spoken footnote content.

        Markers missing from the table keep their original text. Content that
        already ends with a period is not given a second one.
        """

        if not table:
            return text

        def _replace(marker: FootnoteMarker) -> str:
            content = table.get(marker.token)
            if content is None:
                return marker.raw
            return f". Footnote {marker.token}: {content.rstrip(' .')}. "

        inlined = self._substitute(text, _replace)
        return _DOUBLED_PERIOD_RE.sub(".", inlined)

    def strip(self, text: str, table: FootnoteTable) -> str:
        """Remove markers that reference known footnotes, leaving others intact."""

        if not table:
            return text
        return self._substitute(
            text,
            lambda marker: "" if marker.token in table else marker.raw,
        )

    def _substitute(
        self, text: str, replacement: Callable[[FootnoteMarker], str]
    ) -> str:
        """Rebuild text with each marker replaced by `replacement(marker)`."""

        pieces: list[str] = []
        cursor = 0
        for marker in self._iter_markers(text):
            pieces.append(text[cursor : marker.start])
            pieces.append(replacement(marker))
            cursor = marker.end
        pieces.append(text[cursor:])
        return "".join(pieces)

    def _iter_markers(self, text: str) -> Iterator[FootnoteMarker]:
        """Yield marker occurrences matched by any supported marker form."""

        for match in _MARKER_RE.finditer(text):
            raw_token = next(group for group in match.groups() if group is not None)
            yield FootnoteMarker(
                start=match.start(),
                end=match.end(),
                raw=match.group(0),
                token=fold_marker(raw_token),
            )
