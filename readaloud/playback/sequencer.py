"""Chunk-by-chunk playback sequencing over a single-utterance speech engine.

Responsibilities:
- Own the playback state of one session: chunks, position, and pause flag.
- Issue exactly one speak request at a time and advance on completion.
- Provide pause, resume, stop, and seek operations that reconcile the engine
  before mutating state.

All methods and engine callbacks are expected on one event thread. Callbacks
from utterances that were cancelled or superseded are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial
import math
from typing import Callable, Sequence

from ..errors import PreconditionError, SynthesisFailure
from ..models.datatypes import (
    ChunkSequence,
    PlaybackPosition,
    PlaybackState,
    SpeechOptions,
)
from ..telemetry.logger import PlaybackLogger
from ..tts.gateway import SynthesisGateway, UtteranceCallbacks, UtteranceHandle
from .scheduling import ImmediateScheduler, ScheduledCall, Scheduler


DEFAULT_INTER_CHUNK_DELAY_SECONDS = 0.1
DEFAULT_SEEK_STEP_PERCENT = 10.0


class SequencerState(str, Enum):
    """Observable sequencer states.

    `READY` means chunks are loaded but nothing is in flight: before the first
    `play_from`, after a cancel, or after a synthesis failure.
    """

    IDLE = "idle"
    READY = "ready"
    SPEAKING = "speaking"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(slots=True)
class PlaybackEvents:
    """Optional host hooks notified by the sequencer."""

    on_chunk_start: Callable[[int, int], None] | None = None
    on_finished: Callable[[], None] | None = None
    on_error: Callable[[SynthesisFailure], None] | None = None


class PlaybackSequencer:
    """Drive sequential chunk playback against a `SynthesisGateway`."""

    def __init__(
        self,
        gateway: SynthesisGateway,
        scheduler: Scheduler | None = None,
        *,
        inter_chunk_delay_seconds: float = DEFAULT_INTER_CHUNK_DELAY_SECONDS,
        events: PlaybackEvents | None = None,
        logger: PlaybackLogger | None = None,
    ) -> None:
        """Initialize an idle sequencer.

        Args:
            gateway: Speech engine capability.
            scheduler: Defers the next chunk after a completed one; an
                `ImmediateScheduler`, which skips the delay, when omitted.
            inter_chunk_delay_seconds: Settling delay between consecutive utterances.
            events: Host notification hooks.
            logger: Structured event logger.
        """

        self._gateway = gateway
        self._scheduler = scheduler or ImmediateScheduler()
        self.inter_chunk_delay_seconds = max(0.0, inter_chunk_delay_seconds)
        self.events = events or PlaybackEvents()
        self._logger = logger or PlaybackLogger()
        self._state = PlaybackState()
        self._options = SpeechOptions()
        self._generation = 0
        self._in_flight: int | None = None
        self._advance_sequence = 0
        self._pending_token: int | None = None
        self._pending_call: ScheduledCall | None = None
        self.last_error: SynthesisFailure | None = None
        if scheduler is None and self.inter_chunk_delay_seconds > 0:
            self._logger.debug(
                "schedule", "delay_ignored", delay=self.inter_chunk_delay_seconds
            )

    @property
    def chunks(self) -> ChunkSequence:
        """Return the loaded chunk sequence."""

        return self._state.chunks

    @property
    def current_index(self) -> int:
        """Return the index of the chunk being or about to be spoken."""

        return self._state.current_index

    @property
    def options(self) -> SpeechOptions:
        """Return the speech options used for automatic advances."""

        return self._options

    @property
    def active_utterance(self) -> UtteranceHandle | None:
        """Return the in-flight utterance handle, if any."""

        return self._state.active_utterance

    @property
    def has_pending_advance(self) -> bool:
        """Return whether the next chunk is waiting out the settling delay."""

        return self._pending_token is not None

    @property
    def state(self) -> SequencerState:
        """Derive the observable state from playback bookkeeping."""

        if not self._state.chunks:
            return SequencerState.IDLE
        if self._state.is_paused:
            return SequencerState.PAUSED
        if self._in_flight is not None or self._pending_token is not None:
            return SequencerState.SPEAKING
        if self._state.current_index >= len(self._state.chunks):
            return SequencerState.FINISHED
        return SequencerState.READY

    def load(self, chunks: Sequence[str]) -> None:
        """Replace the session wholesale without starting playback."""

        self.cancel()
        self._state = PlaybackState(chunks=tuple(chunks))
        self.last_error = None
        self._logger.info("load", "complete", total=len(self._state.chunks))

    def play_from(self, options: SpeechOptions | None = None) -> UtteranceHandle | None:
        """Speak the chunk at the current index.

        Returns immediately after issuing one speak request; the advance to the
        next chunk happens in the engine's end callback.

        Args:
            options: Speech options for this and subsequent automatic advances.

        Returns:
            The issued utterance handle, or `None` when nothing was spoken.

        Raises:
            SynthesisFailure: If the gateway rejects the speak request outright.
        """

        if options is not None:
            self._options = options
        self._clear_pending_advance()
        if self._in_flight is not None or self._state.active_utterance is not None:
            self._cancel_in_flight()

        state = self._state
        total = len(state.chunks)
        if total == 0:
            return None
        if state.current_index >= total:
            self._complete()
            return None

        index = state.current_index
        text = state.chunks[index]
        if not text.strip():
            self._logger.info("speak", "skip_empty", chunk=index + 1, total=total)
            return None

        self._generation += 1
        generation = self._generation
        self._in_flight = generation
        state.is_paused = False
        callbacks = UtteranceCallbacks(
            on_start=partial(self._handle_start, generation),
            on_end=partial(self._handle_end, generation),
            on_error=partial(self._handle_error, generation),
        )
        self._logger.info("speak", "issue", chunk=index + 1, total=total)
        if self.events.on_chunk_start is not None:
            self.events.on_chunk_start(index, total)
        try:
            handle = self._gateway.speak(text, self._options, callbacks)
        except Exception as exc:
            if self._in_flight == generation:
                self._in_flight = None
            failure = SynthesisFailure(reason=str(exc) or type(exc).__name__, chunk_index=index)
            self.last_error = failure
            self._logger.failure("speak", type(exc).__name__, chunk=index + 1)
            raise failure from exc

        if self._in_flight == generation:
            state.active_utterance = handle
        return handle

    def pause(self) -> bool:
        """Suspend playback; returns `False` when not speaking."""

        if self.state is not SequencerState.SPEAKING:
            self._logger.debug("pause", "ignored", state=self.state.value)
            return False
        if self._in_flight is not None:
            self._gateway.pause()
        else:
            self._clear_pending_advance()
        self._state.is_paused = True
        self._logger.info("pause", "complete", chunk=self._state.current_index + 1)
        return True

    def resume(self) -> bool:
        """Continue suspended playback; returns `False` when not paused."""

        if self.state is not SequencerState.PAUSED:
            self._logger.debug("resume", "ignored", state=self.state.value)
            return False
        if self._in_flight is not None:
            self._gateway.resume()
            self._state.is_paused = False
        else:
            self._state.is_paused = False
            self.play_from()
        self._logger.info("resume", "complete", chunk=self._state.current_index + 1)
        return True

    def cancel(self) -> None:
        """Terminate the in-flight utterance, keeping chunks and position.

        Safe to call repeatedly and when nothing is speaking.
        """

        self._clear_pending_advance()
        if self._in_flight is not None or self._state.active_utterance is not None:
            self._cancel_in_flight()
            self._logger.info("cancel", "complete", chunk=self._state.current_index + 1)
        self._state.is_paused = False

    def stop(self) -> None:
        """Cancel playback and discard the loaded chunks."""

        self.cancel()
        had_chunks = bool(self._state.chunks)
        self._state = PlaybackState()
        if had_chunks:
            self._logger.info("stop", "complete")

    def seek_to_percentage(self, percentage: float) -> int:
        """Restart playback at the chunk covering `percentage` of the document.

        Values above 100 clamp to 100.

        Returns:
            The chunk index playback restarted from.

        Raises:
            PreconditionError: If nothing is loaded or `percentage` is negative.
        """

        total = self._require_chunks("seek")
        if not math.isfinite(percentage) or percentage < 0:
            self._logger.warning("seek", "rejected", percentage=percentage)
            raise PreconditionError(
                operation="seek",
                detail=f"Seek percentage must be between 0 and 100, got {percentage}.",
            )
        clamped = min(float(percentage), 100.0)
        target = min(max(math.floor(clamped / 100.0 * total), 0), total - 1)
        return self._jump_to(target, "seek")

    def seek_next_chunk(self) -> int:
        """Restart playback at the following chunk.

        Raises:
            PreconditionError: If nothing is loaded or already at the last chunk.
        """

        total = self._require_chunks("seek_next")
        if self._state.current_index >= total - 1:
            self._logger.warning("seek_next", "rejected", reason="last_chunk")
            raise PreconditionError(operation="seek_next", detail="Already at last chunk.")
        return self._jump_to(self._state.current_index + 1, "seek_next")

    def seek_previous_chunk(self) -> int:
        """Restart playback at the preceding chunk.

        Raises:
            PreconditionError: If nothing is loaded or already at the first chunk.
        """

        total = self._require_chunks("seek_previous")
        if self._state.current_index <= 0:
            self._logger.warning("seek_previous", "rejected", reason="first_chunk")
            raise PreconditionError(operation="seek_previous", detail="Already at first chunk.")
        target = min(self._state.current_index - 1, total - 1)
        return self._jump_to(target, "seek_previous")

    def seek_relative(self, delta_percent: float) -> int:
        """Shift the position by `delta_percent`, clamped to `[0, 100]`."""

        total = self._require_chunks("seek")
        if not math.isfinite(delta_percent):
            raise PreconditionError(
                operation="seek",
                detail=f"Seek delta must be a finite number, got {delta_percent}.",
            )
        current = self._state.current_index / total * 100.0
        return self.seek_to_percentage(min(max(current + delta_percent, 0.0), 100.0))

    def seek_forward(self, percent: float = DEFAULT_SEEK_STEP_PERCENT) -> int:
        """Skip ahead by `percent` of the document."""

        return self.seek_relative(abs(percent))

    def seek_backward(self, percent: float = DEFAULT_SEEK_STEP_PERCENT) -> int:
        """Skip back by `percent` of the document."""

        return self.seek_relative(-abs(percent))

    def get_position(self) -> PlaybackPosition:
        """Return current progress; all zeros when nothing is loaded."""

        total = len(self._state.chunks)
        if total == 0:
            return PlaybackPosition()
        index = self._state.current_index
        return PlaybackPosition(
            current_index=index,
            total=total,
            percentage=math.floor(index / total * 100),
            remaining=total - index,
        )

    def is_speaking(self) -> bool:
        """Return whether playback is actively progressing."""

        return self.state is SequencerState.SPEAKING

    def is_paused(self) -> bool:
        """Return whether playback is suspended."""

        return self.state is SequencerState.PAUSED

    def _require_chunks(self, operation: str) -> int:
        """Return the chunk count or reject the operation on an empty session."""

        total = len(self._state.chunks)
        if total == 0:
            self._logger.warning(operation, "rejected", reason="no_chunks")
            raise PreconditionError(
                operation=operation,
                detail="No chunks loaded.",
                hint="Convert a document before seeking.",
            )
        return total

    def _jump_to(self, target: int, operation: str) -> int:
        """Cancel the current utterance, move to `target`, and play from there."""

        self.cancel()
        self._state.current_index = target
        self._logger.info(
            operation, "complete", chunk=target + 1, total=len(self._state.chunks)
        )
        self.play_from()
        return target

    def _cancel_in_flight(self) -> None:
        """Invalidate the in-flight utterance and tell the engine to drop it."""

        self._in_flight = None
        self._gateway.cancel_all()
        self._state.active_utterance = None

    def _clear_pending_advance(self) -> None:
        """Cancel a scheduled advance to the next chunk."""

        call = self._pending_call
        self._pending_token = None
        self._pending_call = None
        if call is not None:
            call.cancel()

    def _schedule_advance(self) -> None:
        """Defer the next `play_from` by the settling delay."""

        self._advance_sequence += 1
        token = self._advance_sequence
        self._pending_token = token
        call = self._scheduler.call_later(
            self.inter_chunk_delay_seconds, partial(self._advance, token)
        )
        if self._pending_token == token:
            self._pending_call = call

    def _advance(self, token: int) -> None:
        if token != self._pending_token:
            return
        self._pending_token = None
        self._pending_call = None
        self.play_from()

    def _complete(self) -> None:
        self._logger.info("playback", "finished", total=len(self._state.chunks))
        if self.events.on_finished is not None:
            self.events.on_finished()

    def _handle_start(self, generation: int) -> None:
        if generation != self._in_flight:
            self._logger.debug("speak", "stale_start")
            return
        self._logger.debug("speak", "start", chunk=self._state.current_index + 1)

    def _handle_end(self, generation: int) -> None:
        if generation != self._in_flight:
            self._logger.debug("speak", "stale_end")
            return
        state = self._state
        self._in_flight = None
        state.active_utterance = None
        state.is_paused = False
        state.current_index += 1
        self._logger.info("speak", "end", chunk=state.current_index, total=len(state.chunks))
        if state.current_index < len(state.chunks):
            self._schedule_advance()
        else:
            self._complete()

    def _handle_error(self, generation: int, reason: str) -> None:
        if generation != self._in_flight:
            self._logger.debug("speak", "stale_error")
            return
        state = self._state
        self._in_flight = None
        state.active_utterance = None
        state.is_paused = False
        failure = SynthesisFailure(reason=reason, chunk_index=state.current_index)
        self.last_error = failure
        self._logger.failure("speak", "SynthesisFailure", chunk=state.current_index + 1)
        if self.events.on_error is not None:
            self.events.on_error(failure)
