"""Unit tests for chunk-by-chunk playback sequencing and seek semantics."""

from __future__ import annotations

import math

import pytest

from readaloud.errors import PreconditionError, SynthesisFailure
from readaloud.models.datatypes import PlaybackPosition, SpeechOptions
from readaloud.playback.scheduling import ManualScheduler
from readaloud.playback.sequencer import PlaybackEvents, PlaybackSequencer, SequencerState
from tests.fakes import FakeSynthesisGateway, SynchronousGateway


def _loaded_sequencer(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
    total: int = 3,
    events: PlaybackEvents | None = None,
) -> PlaybackSequencer:
    """Create a sequencer loaded with `total` numbered chunks."""

    sequencer = PlaybackSequencer(gateway, scheduler, events=events)
    sequencer.load([f"chunk {index}." for index in range(total)])
    return sequencer


def test_play_from_issues_one_request_and_waits_for_completion(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Playback should speak the current chunk and advance only after it ends."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    assert sequencer.state is SequencerState.READY

    handle = sequencer.play_from()

    assert handle is not None
    assert gateway.texts == ["chunk 0."]
    assert sequencer.active_utterance == handle
    assert sequencer.is_speaking()
    assert sequencer.current_index == 0


def test_completion_advances_after_settling_delay(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """The next chunk should be spoken only once the scheduled delay runs."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.play_from()

    gateway.finish_current()

    assert sequencer.current_index == 1
    assert sequencer.has_pending_advance
    assert sequencer.is_speaking()
    assert gateway.texts == ["chunk 0."]
    assert [call.delay_seconds for call in scheduler.calls] == [0.1]

    assert scheduler.run_pending() == 1
    assert gateway.texts == ["chunk 0.", "chunk 1."]
    assert not sequencer.has_pending_advance


def test_full_playback_finishes_once_and_reports_complete_position(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Completing the last chunk should fire `on_finished` exactly once."""

    finished: list[bool] = []
    started: list[tuple[int, int]] = []
    events = PlaybackEvents(
        on_chunk_start=lambda index, total: started.append((index, total)),
        on_finished=lambda: finished.append(True),
    )
    sequencer = _loaded_sequencer(gateway, scheduler, events=events)
    sequencer.play_from()

    for _ in range(3):
        gateway.finish_current()
        scheduler.run_pending()

    assert finished == [True]
    assert started == [(0, 3), (1, 3), (2, 3)]
    assert sequencer.state is SequencerState.FINISHED
    assert not sequencer.is_speaking()
    assert sequencer.get_position() == PlaybackPosition(
        current_index=3, total=3, percentage=100, remaining=0
    )


def test_at_most_one_utterance_is_ever_in_flight(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Seeks and replays should cancel before issuing a new request."""

    sequencer = _loaded_sequencer(gateway, scheduler, total=5)
    sequencer.play_from()
    sequencer.seek_next_chunk()
    sequencer.seek_to_percentage(80)
    sequencer.play_from()
    sequencer.seek_previous_chunk()

    assert gateway.max_in_flight == 1
    assert len(gateway.in_flight) == 1


def test_options_persist_across_automatic_advances(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Options passed to `play_from` should apply to later chunks too."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.play_from(SpeechOptions(rate=2.0))

    gateway.finish_current()
    scheduler.run_pending()

    assert [utterance.options.rate for utterance in gateway.spoken] == [2.0, 2.0]


def test_seek_next_at_last_chunk_is_rejected_without_state_change(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Seeking past the last chunk should raise and leave playback untouched."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.seek_to_percentage(100)
    spoken_before = list(gateway.texts)

    with pytest.raises(PreconditionError, match="Already at last chunk"):
        sequencer.seek_next_chunk()

    assert sequencer.current_index == 2
    assert gateway.texts == spoken_before
    assert sequencer.is_speaking()


def test_seek_previous_at_first_chunk_is_rejected(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Seeking before the first chunk should raise a precondition error."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.play_from()

    with pytest.raises(PreconditionError, match="Already at first chunk"):
        sequencer.seek_previous_chunk()

    assert sequencer.current_index == 0


def test_get_position_on_unloaded_sequencer_is_all_zeros(
    gateway: FakeSynthesisGateway,
) -> None:
    """An empty sequencer should report a zeroed position."""

    assert PlaybackSequencer(gateway).get_position() == PlaybackPosition(
        current_index=0, total=0, percentage=0, remaining=0
    )


def test_stop_while_speaking_discards_session(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Stopping should cancel the engine and clear all chunks."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.play_from()

    sequencer.stop()

    assert not sequencer.is_speaking()
    assert sequencer.get_position().total == 0
    assert sequencer.state is SequencerState.IDLE
    assert gateway.cancel_calls >= 1
    assert gateway.in_flight == []


def test_seek_to_percentage_maps_and_clamps_targets(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Percentages should floor onto chunk indices and clamp above 100."""

    sequencer = _loaded_sequencer(gateway, scheduler, total=4)

    assert sequencer.seek_to_percentage(50) == 2
    assert sequencer.seek_to_percentage(0) == 0
    assert sequencer.seek_to_percentage(99.9) == 3
    assert sequencer.seek_to_percentage(150) == 3
    assert gateway.texts[-1] == "chunk 3."


@pytest.mark.parametrize("percentage", [-1.0, math.nan, math.inf])
def test_seek_to_percentage_rejects_negative_and_non_finite_values(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
    percentage: float,
) -> None:
    """Invalid seek targets should raise before touching playback."""

    sequencer = _loaded_sequencer(gateway, scheduler)

    with pytest.raises(PreconditionError):
        sequencer.seek_to_percentage(percentage)

    assert gateway.texts == []


def test_seek_without_chunks_is_rejected(gateway: FakeSynthesisGateway) -> None:
    """Every seek operation needs a loaded session."""

    sequencer = PlaybackSequencer(gateway)

    with pytest.raises(PreconditionError, match="No chunks loaded") as exc_info:
        sequencer.seek_to_percentage(10)
    assert exc_info.value.hint == "Convert a document before seeking."
    with pytest.raises(PreconditionError):
        sequencer.seek_next_chunk()
    with pytest.raises(PreconditionError):
        sequencer.seek_forward()


def test_seek_forward_and_backward_step_by_document_percentage(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Relative seeks should move by percent of the document and clamp at the ends."""

    sequencer = _loaded_sequencer(gateway, scheduler, total=10)
    sequencer.play_from()

    assert sequencer.seek_forward() == 1
    assert sequencer.seek_forward(25) == 3
    assert sequencer.seek_backward(50) == 0
    assert sequencer.seek_forward(500) == 9


def test_pause_and_resume_in_flight_utterance(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Pause and resume should be forwarded to the engine while speaking."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.play_from()

    assert sequencer.pause() is True
    assert sequencer.is_paused()
    assert not sequencer.is_speaking()
    assert gateway.pause_calls == 1
    assert sequencer.pause() is False

    assert sequencer.resume() is True
    assert sequencer.is_speaking()
    assert gateway.resume_calls == 1
    assert sequencer.resume() is False


def test_pause_when_not_speaking_is_a_no_op(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Pausing a ready sequencer should not reach the engine."""

    sequencer = _loaded_sequencer(gateway, scheduler)

    assert sequencer.pause() is False
    assert gateway.pause_calls == 0


def test_pause_during_settling_delay_cancels_pending_advance(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Pausing between chunks should hold the next chunk until resume."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.play_from()
    gateway.finish_current()

    assert sequencer.pause() is True
    assert scheduler.pending == 0
    assert scheduler.run_pending() == 0
    assert gateway.texts == ["chunk 0."]

    assert sequencer.resume() is True
    assert gateway.texts == ["chunk 0.", "chunk 1."]


def test_callbacks_from_cancelled_utterances_are_ignored(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """A late end notification for a superseded utterance must not advance playback."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.play_from()
    stale = gateway.spoken[0]
    sequencer.seek_next_chunk()

    stale.callbacks.on_end()
    stale.callbacks.on_error("late")

    assert sequencer.current_index == 1
    assert scheduler.pending == 0
    assert sequencer.last_error is None


def test_cancel_is_idempotent_and_keeps_position(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Cancel should stop the utterance but keep chunks and index."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.seek_next_chunk()

    sequencer.cancel()
    sequencer.cancel()

    assert sequencer.current_index == 1
    assert sequencer.state is SequencerState.READY
    assert sequencer.active_utterance is None


def test_engine_error_reports_failure_without_advancing(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Synthesis errors should surface through events and keep the failed chunk current."""

    failures: list[SynthesisFailure] = []
    sequencer = _loaded_sequencer(
        gateway, scheduler, events=PlaybackEvents(on_error=failures.append)
    )
    sequencer.play_from()

    gateway.fail_current("boom")

    assert len(failures) == 1
    assert failures[0] is sequencer.last_error
    assert failures[0].reason == "boom"
    assert failures[0].chunk_index == 0
    assert sequencer.current_index == 0
    assert sequencer.state is SequencerState.READY

    sequencer.play_from()
    assert gateway.texts == ["chunk 0.", "chunk 0."]


def test_gateway_exception_on_speak_becomes_synthesis_failure(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Outright speak rejections should raise a domain failure."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    gateway.fail_on_speak = RuntimeError("no engine")

    with pytest.raises(SynthesisFailure, match="no engine") as exc_info:
        sequencer.play_from()

    assert exc_info.value.chunk_index == 0
    assert sequencer.last_error is exc_info.value
    assert sequencer.state is SequencerState.READY


def test_immediate_scheduler_advances_without_pumping(
    gateway: FakeSynthesisGateway,
) -> None:
    """The default scheduler should issue the next chunk right after completion."""

    sequencer = PlaybackSequencer(gateway)
    sequencer.load(["one.", "two."])
    sequencer.play_from()

    gateway.finish_current()

    assert gateway.texts == ["one.", "two."]
    assert not sequencer.has_pending_advance


def test_load_replaces_session_and_resets_position(
    gateway: FakeSynthesisGateway,
    scheduler: ManualScheduler,
) -> None:
    """Loading new chunks should cancel playback and restart at index zero."""

    sequencer = _loaded_sequencer(gateway, scheduler)
    sequencer.seek_next_chunk()

    sequencer.load(["fresh."])

    assert sequencer.chunks == ("fresh.",)
    assert sequencer.current_index == 0
    assert gateway.in_flight == []


def test_default_scheduler_plays_long_sessions_on_synchronous_engines() -> None:
    """Engines that finish inside `speak` should not deepen the stack per chunk."""

    gateway = SynchronousGateway()
    finished: list[bool] = []
    sequencer = PlaybackSequencer(
        gateway, events=PlaybackEvents(on_finished=lambda: finished.append(True))
    )
    chunks = [f"chunk {index}." for index in range(3000)]
    sequencer.load(chunks)

    sequencer.play_from()

    assert gateway.spoken == chunks
    assert finished == [True]
    assert sequencer.last_error is None
    assert sequencer.state is SequencerState.FINISHED
