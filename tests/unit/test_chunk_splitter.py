"""Unit tests for sentence-safe chunk splitting policies."""

from __future__ import annotations

import pytest

from readaloud.models.datatypes import ChunkPolicy
from readaloud.text.chunking import ChunkSplitter


def test_split_by_sentence_count_groups_whole_sentences() -> None:
    """Two-sentence policy should pair sentences in reading order."""

    chunks = ChunkSplitter().split("A. B. C. D.", ChunkPolicy.by_sentences(2))

    assert chunks == ("A. B.", "C. D.")


def test_split_by_sentence_count_keeps_short_final_chunk() -> None:
    """A remainder smaller than the bound should become the last chunk."""

    chunks = ChunkSplitter().split("One! Two? Three.", ChunkPolicy.by_sentences(2))

    assert chunks == ("One! Two?", "Three.")


def test_split_by_length_accumulates_until_bound() -> None:
    """Character policy should flush before the next sentence would overflow."""

    chunks = ChunkSplitter().split("One two. Three four. Five.", ChunkPolicy.by_chars(20))

    assert chunks == ("One two. Three four.", "Five.")


def test_split_by_length_keeps_oversized_sentence_intact() -> None:
    """A sentence longer than the bound should never be split mid-sentence."""

    chunks = ChunkSplitter().split("This sentence is long. Ok.", ChunkPolicy.by_chars(5))

    assert chunks == ("This sentence is long.", "Ok.")


def test_split_empty_and_unterminated_text() -> None:
    """Empty input yields one empty chunk; unterminated text is one chunk."""

    splitter = ChunkSplitter()

    assert splitter.split("", ChunkPolicy.by_sentences()) == ("",)
    assert splitter.split("  just words  ", ChunkPolicy.by_sentences()) == ("just words",)


def test_split_keeps_trailing_fragment_without_terminator() -> None:
    """Text after the last terminator should not be dropped."""

    chunks = ChunkSplitter().split("First. tail words", ChunkPolicy.by_sentences(3))

    assert chunks == ("First. tail words",)


def test_split_covers_all_non_whitespace_text_in_order() -> None:
    """Concatenated chunks should reproduce the input apart from whitespace."""

    text = "Alpha beta. Gamma!  Delta epsilon? Zeta eta theta. Iota."

    chunks = ChunkSplitter().split(text, ChunkPolicy.by_chars(18))

    assert "".join(chunks).replace(" ", "") == text.replace(" ", "")


def test_split_keeps_leading_terminators_on_first_sentence() -> None:
    """Punctuation before the first sentence should not be dropped."""

    text = "...and so it began. The end."

    chunks = ChunkSplitter().split(text, ChunkPolicy.by_sentences(1))

    assert chunks == ("...and so it began.", "The end.")
    assert "".join(chunks).replace(" ", "") == text.replace(" ", "")


def test_prepare_adds_natural_pauses_before_splitting() -> None:
    """Prepared chunks should carry transition commas."""

    chunks = ChunkSplitter().prepare("However it rained. We stayed.", ChunkPolicy.by_sentences(1))

    assert chunks == ("However, it rained.", "We stayed.")


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"max_sentences_per_chunk": 2, "max_chars_per_chunk": 100},
        {"max_sentences_per_chunk": 0},
        {"max_chars_per_chunk": -5},
    ],
)
def test_chunk_policy_requires_exactly_one_positive_bound(kwargs: dict[str, int]) -> None:
    """Chunk policies with zero, two, or non-positive bounds should be rejected."""

    with pytest.raises(ValueError):
        ChunkPolicy(**kwargs)


def test_chunk_policy_defaults() -> None:
    """Factory defaults should match the documented bounds."""

    assert ChunkPolicy.by_sentences().max_sentences_per_chunk == 3
    assert ChunkPolicy.by_chars().max_chars_per_chunk == 200
