"""Sentence-safe chunk splitting for bounded-length utterances.

Responsibilities:
- Segment normalized text into sentences without splitting mid-sentence.
- Group sentences into chunks under a sentence-count or character-length policy.
- Preserve reading order so chunk indices map to document position.
"""

from __future__ import annotations

import re

from ..models.datatypes import ChunkPolicy, ChunkSequence
from .normalizer import add_natural_pauses


class ChunkSplitter:
    """Split normalized text into an ordered, immutable chunk sequence."""

    _SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")

    def split(self, text: str, policy: ChunkPolicy) -> ChunkSequence:
        """Split text into chunks bounded by the given policy.

        Args:
            text: Normalized text.
            policy: Sentence-count or character-length bound.

        Returns:
            Chunks in reading order. Empty input yields a single empty chunk,
            and text without any sentence terminator yields itself as one chunk.
        """

        sentences = self.sentences(text)
        if not sentences:
            return (text.strip(),)

        if policy.max_sentences_per_chunk is not None:
            return self._group_by_sentence_count(sentences, policy.max_sentences_per_chunk)
        return self._group_by_length(sentences, policy.max_chars_per_chunk or 0)

    def prepare(self, text: str, policy: ChunkPolicy) -> ChunkSequence:
        """Insert natural pauses, then split."""

        return self.split(add_natural_pauses(text), policy)

    def sentences(self, text: str) -> list[str]:
        """Return trimmed sentences, or an empty list when no terminator exists.

        Terminators before the first sentence stay attached to it, and a
        trailing fragment without a terminator is kept as the last sentence.
        """

        matches = list(self._SENTENCE_RE.finditer(text))
        if not matches:
            return []
        sentences = [match.group(0).strip() for match in matches]
        sentences[0] = (text[: matches[0].start()] + matches[0].group(0)).strip()
        tail = text[matches[-1].end() :].strip()
        if tail:
            sentences.append(tail)
        return [sentence for sentence in sentences if sentence]

    def _group_by_sentence_count(self, sentences: list[str], max_sentences: int) -> ChunkSequence:
        """Flush a chunk every `max_sentences` sentences."""

        chunks: list[str] = []
        for start in range(0, len(sentences), max_sentences):
            group = sentences[start : start + max_sentences]
            chunks.append(" ".join(group).strip())
        return tuple(chunks)

    def _group_by_length(self, sentences: list[str], max_chars: int) -> ChunkSequence:
        """Accumulate whole sentences until the next one would exceed `max_chars`.

        A single sentence longer than `max_chars` is kept intact.
        """

        chunks: list[str] = []
        running = ""
        for sentence in sentences:
            candidate = f"{running} {sentence}" if running else sentence
            if running and len(candidate) > max_chars:
                chunks.append(running)
                running = sentence
            else:
                running = candidate
        if running.strip():
            chunks.append(running.strip())
        return tuple(chunks)
