"""Telemetry and observability helpers.

This package emits deterministic playback events for auditing sessions.
"""

from .logger import PlaybackLogger

__all__ = ["PlaybackLogger"]
