"""Playback sequencing components.

This package contains the stateful chunk sequencer and the schedulers used
for the settling delay between consecutive utterances.
"""

from .scheduling import AsyncioScheduler, ImmediateScheduler, ManualScheduler, Scheduler
from .sequencer import PlaybackEvents, PlaybackSequencer, SequencerState

__all__ = [
    "PlaybackSequencer",
    "PlaybackEvents",
    "SequencerState",
    "Scheduler",
    "AsyncioScheduler",
    "ImmediateScheduler",
    "ManualScheduler",
]
