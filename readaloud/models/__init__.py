"""Shared typed data models for Readaloud.

This package contains dataclasses used across text and playback modules to
avoid cross-module coupling and circular imports.
"""

from .datatypes import (
    ChunkPolicy,
    ChunkSequence,
    EngineStatus,
    FootnoteExtraction,
    FootnoteTable,
    PlaybackPosition,
    PlaybackState,
    Session,
    SpeechOptions,
    VoiceRef,
)

__all__ = [
    "ChunkPolicy",
    "ChunkSequence",
    "EngineStatus",
    "FootnoteExtraction",
    "FootnoteTable",
    "PlaybackPosition",
    "PlaybackState",
    "Session",
    "SpeechOptions",
    "VoiceRef",
]
