"""Speech synthesis capability and voice helpers.

This package contains the gateway protocol driven by the playback sequencer,
a console adapter, and voice selection helpers.
"""

from .gateway import (
    ConsoleSynthesisGateway,
    SynthesisGateway,
    UtteranceCallbacks,
    UtteranceHandle,
)
from .voices import (
    VoiceCatalog,
    default_voice,
    find_voice_by_name,
    format_voice_name,
    voices_for_language,
)

__all__ = [
    "SynthesisGateway",
    "ConsoleSynthesisGateway",
    "UtteranceCallbacks",
    "UtteranceHandle",
    "VoiceCatalog",
    "default_voice",
    "find_voice_by_name",
    "format_voice_name",
    "voices_for_language",
]
