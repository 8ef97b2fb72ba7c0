"""Caller-facing read-aloud engine.

Responsibilities:
- Run footnote extraction, normalization, and chunking for each conversion.
- Load the resulting chunks into the sequencer and start playback.
- Expose playback controls, position queries, and the footnote-reading toggle.

Key types:
- `ReadAloudEngine`: one instance per host, owning one playback session at a time.
- `PreparedText`: chunked output of the text stages, before playback.
"""

from __future__ import annotations

from dataclasses import dataclass
import itertools

from .config import ReadAloudConfig
from .errors import PreconditionError, SynthesisFailure
from .models.datatypes import (
    ChunkSequence,
    EngineStatus,
    FootnoteTable,
    PlaybackPosition,
    Session,
    SpeechOptions,
    VoiceRef,
)
from .playback.scheduling import Scheduler
from .playback.sequencer import PlaybackEvents, PlaybackSequencer
from .telemetry.logger import PlaybackLogger
from .text.chunking import ChunkSplitter
from .text.footnotes import FootnoteExtractor
from .text.normalizer import TextNormalizer
from .tts.gateway import SynthesisGateway
from .tts.voices import VoiceCatalog


@dataclass(frozen=True, slots=True)
class PreparedText:
    """Output of the text stages for one document."""

    chunks: ChunkSequence
    footnotes: FootnoteTable
    footnotes_inlined: bool


class ReadAloudEngine:
    """Convert document text into sequenced utterances with seekable playback."""

    def __init__(
        self,
        gateway: SynthesisGateway,
        config: ReadAloudConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        events: PlaybackEvents | None = None,
        logger: PlaybackLogger | None = None,
        normalizer: TextNormalizer | None = None,
        footnote_extractor: FootnoteExtractor | None = None,
        splitter: ChunkSplitter | None = None,
    ) -> None:
        """Initialize text stages and an idle sequencer over `gateway`."""

        self.config = config if config is not None else ReadAloudConfig()
        self.config.validate()
        self._gateway = gateway
        self._logger = logger or PlaybackLogger()
        self.normalizer = normalizer or TextNormalizer()
        self.footnote_extractor = footnote_extractor or FootnoteExtractor(
            threshold_ratio=self.config.footnote_threshold_ratio
        )
        self.splitter = splitter or ChunkSplitter()
        self.voices = VoiceCatalog(gateway)
        self.sequencer = PlaybackSequencer(
            gateway,
            scheduler,
            inter_chunk_delay_seconds=self.config.inter_chunk_delay_seconds,
            events=events,
            logger=self._logger,
        )
        self._footnote_reading = self.config.footnote_reading
        self._session_ids = itertools.count(1)
        self._session: Session | None = None

    @property
    def session(self) -> Session | None:
        """Return the active session, or `None` after `stop`."""

        return self._session

    @property
    def last_error(self) -> SynthesisFailure | None:
        """Return the most recent synthesis failure of the active session."""

        return self.sequencer.last_error

    def set_footnote_reading_enabled(self, enabled: bool) -> None:
        """Toggle footnote reading for subsequent `convert` calls."""

        self._footnote_reading = bool(enabled)
        self._logger.info("footnotes", "toggle", enabled=self._footnote_reading)

    def get_footnote_reading_enabled(self) -> bool:
        """Return whether `convert` reads footnotes at marker positions."""

        return self._footnote_reading

    def prepare(self, text: str) -> PreparedText:
        """Run footnote extraction, normalization, and chunking without playback."""

        extraction = self.footnote_extractor.extract(text)
        body = extraction.body_text
        inlined = self._footnote_reading and bool(extraction.table)
        if inlined:
            body = self.footnote_extractor.inline(body, extraction.table)
        else:
            body = self.footnote_extractor.strip(body, extraction.table)
        normalized = self.normalizer.normalize(body)
        chunks = self.splitter.prepare(normalized, self.config.chunk_policy())
        return PreparedText(chunks=chunks, footnotes=extraction.table, footnotes_inlined=inlined)

    def convert(self, text: str, options: SpeechOptions | None = None) -> Session:
        """Prepare `text`, replace the current session, and start playback.

        Args:
            text: Raw extracted document text.
            options: Speech options; configured defaults are used when omitted.

        Returns:
            Handle describing the new session.

        Raises:
            PreconditionError: If the synthesis engine is unavailable.
            SynthesisFailure: If the engine rejects the first speak request.
        """

        if not self._gateway.is_available():
            self._logger.failure("convert", "PreconditionError", reason="unavailable")
            raise PreconditionError(
                operation="convert",
                detail="Speech synthesis is not available.",
                hint="Check that a speech engine is installed and initialized.",
            )

        self.stop()
        prepared = self.prepare(text)
        resolved_options = options if options is not None else self.default_options()
        session = Session(
            session_id=next(self._session_ids),
            chunks=prepared.chunks,
            footnotes=prepared.footnotes,
            options=resolved_options,
            footnotes_inlined=prepared.footnotes_inlined,
        )
        self._session = session
        self.sequencer.load(session.chunks)
        self._logger.info(
            "convert",
            "complete",
            session=session.session_id,
            chunks=len(session.chunks),
            footnotes=len(session.footnotes),
            inlined=session.footnotes_inlined,
        )
        self.sequencer.play_from(resolved_options)
        return session

    def default_options(self) -> SpeechOptions:
        """Return configured options with the preferred voice resolved."""

        voice = self.voices.resolve(self.config.voice_name, self.config.language)
        return self.config.speech_options(voice)

    def play(self) -> None:
        """Speak from the current chunk, for example after a synthesis failure."""

        self.sequencer.play_from()

    def pause(self) -> bool:
        """Pause playback; returns `False` when nothing is speaking."""

        return self.sequencer.pause()

    def resume(self) -> bool:
        """Resume playback; returns `False` when nothing is paused."""

        return self.sequencer.resume()

    def stop(self) -> None:
        """Stop playback and discard the session."""

        self.sequencer.stop()
        self._session = None

    def seek_to_percentage(self, percentage: float) -> int:
        """Restart playback at `percentage` of the document."""

        return self.sequencer.seek_to_percentage(percentage)

    def seek_next_chunk(self) -> int:
        """Restart playback at the next chunk."""

        return self.sequencer.seek_next_chunk()

    def seek_previous_chunk(self) -> int:
        """Restart playback at the previous chunk."""

        return self.sequencer.seek_previous_chunk()

    def seek_relative(self, delta_percent: float) -> int:
        """Shift playback by `delta_percent` of the document."""

        return self.sequencer.seek_relative(delta_percent)

    def seek_forward(self, percent: float = 10.0) -> int:
        """Skip ahead by `percent` of the document."""

        return self.sequencer.seek_forward(percent)

    def seek_backward(self, percent: float = 10.0) -> int:
        """Skip back by `percent` of the document."""

        return self.sequencer.seek_backward(percent)

    def get_position(self) -> PlaybackPosition:
        """Return playback progress over the current session."""

        return self.sequencer.get_position()

    def is_speaking(self) -> bool:
        """Return whether playback is actively progressing."""

        return self.sequencer.is_speaking()

    def is_paused_state(self) -> bool:
        """Return whether playback is paused."""

        return self.sequencer.is_paused()

    def list_voices(self) -> list[VoiceRef]:
        """Re-query engine voices, keeping the last non-empty list."""

        return list(self.voices.refresh())

    def status(self) -> EngineStatus:
        """Return coarse engine status for host displays."""

        return EngineStatus(
            available=self._gateway.is_available(),
            speaking=self.sequencer.is_speaking(),
            paused=self.sequencer.is_paused(),
            pending=self.sequencer.has_pending_advance,
        )
