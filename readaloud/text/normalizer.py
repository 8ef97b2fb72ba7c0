"""Pronunciation-oriented text normalization.

Responsibilities:
- Rewrite abbreviations, ordinals, currency, and acronyms into speakable words.
- Strip noise characters that speech engines read literally.
- Insert natural pause punctuation before chunking.

Rules are applied in a fixed order; later rules assume earlier ones ran.
"""

from __future__ import annotations

import re
from typing import Mapping, Protocol


ABBREVIATIONS: Mapping[str, str] = {
    "Dr.": "Doctor",
    "Mr.": "Mister",
    "Mrs.": "Missus",
    "Ms.": "Miss",
    "Prof.": "Professor",
    "Sr.": "Senior",
    "Jr.": "Junior",
    "St.": "Street",
    "Ave.": "Avenue",
    "Blvd.": "Boulevard",
    "Rd.": "Road",
    "etc.": "et cetera",
    "e.g.": "for example",
    "i.e.": "that is",
    "vs.": "versus",
    "Inc.": "Incorporated",
    "Ltd.": "Limited",
    "Corp.": "Corporation",
    "Co.": "Company",
    "Fig.": "Figure",
}

ORDINAL_WORDS: Mapping[int, str] = {
    1: "first",
    2: "second",
    3: "third",
    4: "fourth",
    5: "fifth",
    6: "sixth",
    7: "seventh",
    8: "eighth",
    9: "ninth",
    10: "tenth",
    11: "eleventh",
    12: "twelfth",
    13: "thirteenth",
    14: "fourteenth",
    15: "fifteenth",
    16: "sixteenth",
    17: "seventeenth",
    18: "eighteenth",
    19: "nineteenth",
    20: "twentieth",
    21: "twenty-first",
    22: "twenty-second",
    23: "twenty-third",
    24: "twenty-fourth",
    25: "twenty-fifth",
    26: "twenty-sixth",
    27: "twenty-seventh",
    28: "twenty-eighth",
    29: "twenty-ninth",
    30: "thirtieth",
    31: "thirty-first",
}

CURRENCY_NAMES: Mapping[str, tuple[str, str]] = {
    "$": ("dollar", "dollars"),
    "£": ("pound", "pounds"),
    "€": ("euro", "euros"),
    "¥": ("yen", "yen"),
}

ACRONYMS: frozenset[str] = frozenset(
    {
        "AI",
        "API",
        "BBC",
        "CEO",
        "CIA",
        "CPU",
        "DNA",
        "EU",
        "FAQ",
        "FBI",
        "GPS",
        "HTML",
        "HTTP",
        "NASA",
        "NATO",
        "PDF",
        "UK",
        "UN",
        "URL",
        "USA",
        "US",
        "USB",
    }
)

TRANSITIONAL_PHRASES: tuple[str, ...] = (
    "On the other hand",
    "In conclusion",
    "In addition",
    "For example",
    "For instance",
    "In fact",
    "However",
    "Therefore",
    "Moreover",
    "Furthermore",
    "Meanwhile",
    "Nevertheless",
    "Consequently",
    "Additionally",
    "Finally",
)

_STREET_WORDS = ("Street", "Avenue", "Road", "Boulevard")


class NormalizationRule(Protocol):
    """Protocol for pronunciation normalization rules."""

    def apply(self, text: str) -> str:
        """Apply a single normalization transformation."""


class ExpandAbbreviations:
    """Expand whole-word abbreviations anchored on their trailing period."""

    def __init__(self, mapping: Mapping[str, str] | None = None) -> None:
        """Compile one alternation, longest keys first."""

        self.mapping = dict(mapping if mapping is not None else ABBREVIATIONS)
        keys = sorted(self.mapping, key=len, reverse=True)
        alternation = "|".join(re.escape(key) for key in keys)
        self._pattern = re.compile(rf"(?<![\w.])(?:{alternation})(?P<end>[ \t]*(?:\n|$))?")

    def apply(self, text: str) -> str:
        """Expand abbreviations, keeping a sentence period at line end."""

        def _replace(match: re.Match[str]) -> str:
            token = match.group(0)
            tail = match.group("end")
            if tail is None:
                return self.mapping[token]
            key = token[: len(token) - len(tail)]
            return f"{self.mapping[key]}.{tail}"

        return self._pattern.sub(_replace, text)


class ExpandOrdinals:
    """Spell out ordinal numbers between 1 and 31."""

    _SUFFIXED_RE = re.compile(r"\b(\d+)(?:st|nd|rd|th)\b", re.IGNORECASE)
    _STREET_RE = re.compile(rf"\b(\d+)(?=[ \t]+(?:{'|'.join(_STREET_WORDS)})\b)")

    def apply(self, text: str) -> str:
        """Rewrite `21st` style tokens and numbered street names."""

        text = self._SUFFIXED_RE.sub(self._replace, text)
        return self._STREET_RE.sub(self._replace, text)

    def _replace(self, match: re.Match[str]) -> str:
        """Return the ordinal word, or the original token outside the table."""

        word = ORDINAL_WORDS.get(int(match.group(1)))
        return word if word is not None else match.group(0)


class ExpandCurrency:
    """Rewrite currency symbol amounts as `<amount> <currency-name>`."""

    def __init__(self, names: Mapping[str, tuple[str, str]] | None = None) -> None:
        """Compile the symbol-prefixed amount pattern."""

        self.names = dict(names if names is not None else CURRENCY_NAMES)
        symbols = "".join(re.escape(symbol) for symbol in self.names)
        self._pattern = re.compile(
            rf"(?P<symbol>[{symbols}])[ \t]?(?P<amount>\d{{1,3}}(?:,\d{{3}})+|\d+)"
            r"(?P<fraction>\.\d+)?\b"
        )

    def apply(self, text: str) -> str:
        """Apply currency rewriting."""

        def _replace(match: re.Match[str]) -> str:
            amount = match.group("amount") + (match.group("fraction") or "")
            singular, plural = self.names[match.group("symbol")]
            name = singular if amount == "1" else plural
            return f"{amount} {name}"

        return self._pattern.sub(_replace, text)


class SpellOutAcronyms:
    """Rewrite known acronyms as space-separated letters."""

    def __init__(self, acronyms: frozenset[str] | None = None) -> None:
        """Compile a whole-word, case-sensitive acronym pattern."""

        self.acronyms = acronyms if acronyms is not None else ACRONYMS
        keys = sorted(self.acronyms, key=len, reverse=True)
        self._pattern = re.compile(rf"\b(?:{'|'.join(re.escape(key) for key in keys)})\b")

    def apply(self, text: str) -> str:
        """Apply acronym spelling."""

        return self._pattern.sub(lambda match: " ".join(match.group(0)), text)


class StripNoiseCharacters:
    """Remove characters that speech engines read aloud literally."""

    def apply(self, text: str) -> str:
        """Drop tildes/carets and collapse runs of repeated punctuation."""

        text = re.sub(r"[~^]", "", text)
        text = re.sub(r"\.{4,}", "...", text)
        text = re.sub(r"([!?])[!?]+", r"\1", text)
        return text.replace("_", " ")


class CollapseWhitespace:
    """Collapse every whitespace run into a single space."""

    def apply(self, text: str) -> str:
        """Collapse and trim whitespace."""

        return re.sub(r"\s+", " ", text).strip()


class TextNormalizer:
    """Rewrite raw text into a form speech engines pronounce correctly."""

    def __init__(self, rules: list[NormalizationRule] | None = None) -> None:
        """Initialize with custom rules or the default ordered rule sequence."""

        self.rules = rules or [
            ExpandAbbreviations(),
            ExpandOrdinals(),
            ExpandCurrency(),
            SpellOutAcronyms(),
            StripNoiseCharacters(),
            CollapseWhitespace(),
        ]

    def normalize(self, text: str) -> str:
        """Apply all configured rules in order."""

        current = text
        for rule in self.rules:
            current = rule.apply(current)
        return current


_TRANSITION_RE = re.compile(
    r"(?P<lead>^|[.!?][\"')\]]*\s+)"
    rf"(?P<phrase>{'|'.join(re.escape(phrase) for phrase in TRANSITIONAL_PHRASES)})"
    r"(?=[ \t]+\w)"
)
_SPACE_BEFORE_PUNCTUATION_RE = re.compile(r"[ \t]+([.!?,:;])")
_CLAUSE_PUNCTUATION_RE = re.compile(r"([,:;])(?=[A-Za-z])")
_SENTENCE_PUNCTUATION_RE = re.compile(r"([.!?])(?=[A-Z])")
_SPACE_RUN_AFTER_PUNCTUATION_RE = re.compile(r"([.!?,:;])[ \t]{2,}")


def add_natural_pauses(text: str) -> str:
    """Insert commas after sentence-initial transitions and tidy punctuation spacing.

    Examples:
        `"However the plan failed."` becomes `"However, the plan failed."`.
    """

    text = _TRANSITION_RE.sub(r"\g<lead>\g<phrase>,", text)
    text = _SPACE_BEFORE_PUNCTUATION_RE.sub(r"\1", text)
    text = _CLAUSE_PUNCTUATION_RE.sub(r"\1 ", text)
    text = _SENTENCE_PUNCTUATION_RE.sub(r"\1 ", text)
    return _SPACE_RUN_AFTER_PUNCTUATION_RE.sub(r"\1 ", text)
