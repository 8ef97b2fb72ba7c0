"""Text preparation components.

This package provides footnote extraction, pronunciation normalization, and
sentence-safe chunking used before playback.
"""

from .chunking import ChunkSplitter
from .footnotes import FootnoteExtractor, FootnoteMarker
from .normalizer import (
    CollapseWhitespace,
    ExpandAbbreviations,
    ExpandCurrency,
    ExpandOrdinals,
    SpellOutAcronyms,
    StripNoiseCharacters,
    TextNormalizer,
    add_natural_pauses,
)

__all__ = [
    "ChunkSplitter",
    "FootnoteExtractor",
    "FootnoteMarker",
    "TextNormalizer",
    "ExpandAbbreviations",
    "ExpandOrdinals",
    "ExpandCurrency",
    "SpellOutAcronyms",
    "StripNoiseCharacters",
    "CollapseWhitespace",
    "add_natural_pauses",
]
