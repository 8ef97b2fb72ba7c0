"""Core datatypes shared across Readaloud modules.

Responsibilities:
- Represent immutable records exchanged between text and playback stages.
- Hold the single mutable playback state owned by a sequencer.

Key types:
- `VoiceRef`, `SpeechOptions`, `ChunkPolicy`, `FootnoteExtraction`,
  `PlaybackState`, `PlaybackPosition`, `Session`, and `EngineStatus`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping


ChunkSequence = tuple[str, ...]
FootnoteTable = Mapping[str, str]

_EMPTY_TABLE: FootnoteTable = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class VoiceRef:
    """Reference to one voice exposed by a synthesis engine.

    Attributes:
        name: Engine-native voice name.
        language: BCP-47 language tag, for example `en-US`.
        is_default: Whether the engine flags this voice as its default.
        local_service: Whether synthesis runs locally rather than online.
        voice_id: Optional engine-specific identifier, when distinct from `name`.
    """

    name: str
    language: str
    is_default: bool = False
    local_service: bool = True
    voice_id: str | None = None


@dataclass(frozen=True, slots=True)
class SpeechOptions:
    """Per-utterance synthesis options with documented defaults.

    Attributes:
        voice: Voice to speak with, or `None` for the engine default.
        rate: Relative speaking rate multiplier.
        pitch: Relative pitch multiplier.
        volume: Output volume in `[0, 1]`.
    """

    voice: VoiceRef | None = None
    rate: float = 1.0
    pitch: float = 1.0
    volume: float = 1.0

    def merged(self, **overrides: Any) -> SpeechOptions:
        """Return a copy with non-`None` caller overrides layered over these values."""

        effective = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **effective)


@dataclass(frozen=True, slots=True)
class ChunkPolicy:
    """Chunk size policy; exactly one bounding strategy is set."""

    max_sentences_per_chunk: int | None = None
    max_chars_per_chunk: int | None = None

    def __post_init__(self) -> None:
        """Reject policies without exactly one positive bound."""

        bounds = [
            bound
            for bound in (self.max_sentences_per_chunk, self.max_chars_per_chunk)
            if bound is not None
        ]
        if len(bounds) != 1:
            raise ValueError(
                "Chunk policy needs exactly one of `max_sentences_per_chunk` "
                "or `max_chars_per_chunk`."
            )
        if bounds[0] <= 0:
            raise ValueError("Chunk policy bound must be a positive integer.")

    @classmethod
    def by_sentences(cls, max_sentences: int = 3) -> ChunkPolicy:
        """Create a sentence-count policy."""

        return cls(max_sentences_per_chunk=max_sentences)

    @classmethod
    def by_chars(cls, max_chars: int = 200) -> ChunkPolicy:
        """Create a character-length policy."""

        return cls(max_chars_per_chunk=max_chars)


@dataclass(frozen=True, slots=True)
class FootnoteExtraction:
    """Body text separated from its trailing footnote section.

    Attributes:
        body_text: Text before the footnote section, or the full input.
        table: Read-only mapping from folded marker token to footnote text.
    """

    body_text: str
    table: FootnoteTable = field(default_factory=lambda: _EMPTY_TABLE)

    def __post_init__(self) -> None:
        """Freeze the footnote table so it stays read-only for the session."""

        if not isinstance(self.table, MappingProxyType):
            object.__setattr__(self, "table", MappingProxyType(dict(self.table)))


@dataclass(slots=True)
class PlaybackState:
    """Mutable playback state for one session.

    Only `PlaybackSequencer` mutates these fields.

    Attributes:
        chunks: Loaded chunk sequence, replaced wholesale on load or stop.
        current_index: Position in `[0, len(chunks)]`; `len(chunks)` means finished.
        is_paused: Whether playback is suspended.
        active_utterance: Handle of the in-flight speak request, or `None`.
    """

    chunks: ChunkSequence = ()
    current_index: int = 0
    is_paused: bool = False
    active_utterance: object | None = None


@dataclass(frozen=True, slots=True)
class PlaybackPosition:
    """Snapshot of playback progress over the chunk sequence."""

    current_index: int = 0
    total: int = 0
    percentage: int = 0
    remaining: int = 0


@dataclass(frozen=True, slots=True)
class Session:
    """Handle returned to the host for one `convert` call."""

    session_id: int
    chunks: ChunkSequence
    footnotes: FootnoteTable
    options: SpeechOptions
    footnotes_inlined: bool = False

    @property
    def is_empty(self) -> bool:
        """Return whether the session holds nothing to speak."""

        return not any(chunk.strip() for chunk in self.chunks)


@dataclass(frozen=True, slots=True)
class EngineStatus:
    """Coarse engine status for host UIs."""

    available: bool
    speaking: bool
    paused: bool
    pending: bool
