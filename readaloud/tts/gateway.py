"""Synthesis gateway contract and a console-backed adapter.

Responsibilities:
- Define the narrow capability the playback sequencer drives.
- Provide an event-loop adapter that "speaks" by writing utterances to a text sink.

The gateway accepts one utterance at a time and reports completion through
callbacks; it has no notion of documents, positions, or chunks.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import itertools
import sys
from typing import Callable, Protocol, Sequence, TextIO

from ..models.datatypes import SpeechOptions, VoiceRef


def _noop(*_: object) -> None:
    """Ignore an engine notification."""


@dataclass(frozen=True, slots=True)
class UtteranceCallbacks:
    """Notifications registered for exactly one speak request."""

    on_start: Callable[[], None] = _noop
    on_end: Callable[[], None] = _noop
    on_error: Callable[[str], None] = _noop


@dataclass(frozen=True, slots=True)
class UtteranceHandle:
    """Opaque reference to one issued speak request."""

    utterance_id: int
    text: str = field(repr=False)


class SynthesisGateway(Protocol):
    """Protocol for speech engines driven by the playback sequencer."""

    def is_available(self) -> bool:
        """Return whether the engine can be used for this session."""

    def speak(
        self,
        text: str,
        options: SpeechOptions,
        callbacks: UtteranceCallbacks,
    ) -> UtteranceHandle:
        """Start one utterance and return immediately."""

    def pause(self) -> None:
        """Suspend the in-flight utterance."""

    def resume(self) -> None:
        """Continue a suspended utterance."""

    def cancel_all(self) -> None:
        """Discard the in-flight utterance and anything queued behind it."""

    def list_voices(self) -> list[VoiceRef]:
        """Return known voices; may be empty until the engine initializes."""


@dataclass(slots=True)
class _ConsoleUtterance:
    handle: UtteranceHandle
    callbacks: UtteranceCallbacks
    options: SpeechOptions
    started: bool = False
    timer: asyncio.Handle | None = None


class ConsoleSynthesisGateway:
    """Gateway that writes each utterance to a text sink on an asyncio loop.

    Start and end notifications are delivered from the loop, never from inside
    `speak`, matching engines that report events asynchronously.
    """

    _DEFAULT_VOICES = (
        VoiceRef(name="Console", language="en-US", is_default=True, local_service=True),
    )

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        sink: TextIO | None = None,
        voices: Sequence[VoiceRef] | None = None,
        seconds_per_utterance: float = 0.0,
    ) -> None:
        """Initialize the adapter on an event loop."""

        self._loop = loop
        self._sink = sink or sys.stdout
        self._voices = tuple(voices) if voices is not None else self._DEFAULT_VOICES
        self.seconds_per_utterance = max(0.0, seconds_per_utterance)
        self._ids = itertools.count(1)
        self._current: _ConsoleUtterance | None = None
        self._paused = False

    def is_available(self) -> bool:
        """Return whether the backing loop can still deliver events."""

        return not self._loop.is_closed()

    def speak(
        self,
        text: str,
        options: SpeechOptions,
        callbacks: UtteranceCallbacks,
    ) -> UtteranceHandle:
        """Queue one utterance; start and end arrive later from the loop."""

        handle = UtteranceHandle(utterance_id=next(self._ids), text=text)
        self._current = _ConsoleUtterance(handle=handle, callbacks=callbacks, options=options)
        self._paused = False
        self._loop.call_soon(self._start, handle)
        return handle

    def pause(self) -> None:
        """Hold back the end notification of the current utterance."""

        self._paused = True
        current = self._current
        if current is not None and current.timer is not None:
            current.timer.cancel()
            current.timer = None

    def resume(self) -> None:
        """Release a held utterance."""

        self._paused = False
        current = self._current
        if current is not None and current.started and current.timer is None:
            self._schedule_end(current)

    def cancel_all(self) -> None:
        """Drop the current utterance without notifying its callbacks."""

        current = self._current
        self._current = None
        self._paused = False
        if current is not None and current.timer is not None:
            current.timer.cancel()

    def list_voices(self) -> list[VoiceRef]:
        """Return the configured console voices."""

        return list(self._voices)

    def _start(self, handle: UtteranceHandle) -> None:
        """Write the utterance and schedule its completion."""

        current = self._current
        if current is None or current.handle is not handle:
            return
        current.started = True
        current.callbacks.on_start()
        voice = current.options.voice.name if current.options.voice is not None else "default"
        print(f"[speak] voice={voice} {handle.text}", file=self._sink, flush=True)
        if not self._paused:
            self._schedule_end(current)

    def _schedule_end(self, current: _ConsoleUtterance) -> None:
        current.timer = self._loop.call_later(self.seconds_per_utterance, self._end, current.handle)

    def _end(self, handle: UtteranceHandle) -> None:
        current = self._current
        if current is None or current.handle is not handle:
            return
        self._current = None
        current.callbacks.on_end()
