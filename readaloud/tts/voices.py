"""Voice lookup helpers over engine-reported voice lists.

Responsibilities:
- Select voices by language, name, or engine default.
- Tolerate engines that populate their voice list late.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ..models.datatypes import VoiceRef

if TYPE_CHECKING:
    from .gateway import SynthesisGateway


def voices_for_language(voices: Sequence[VoiceRef], language: str = "en") -> list[VoiceRef]:
    """Return voices whose language tag starts with `language`."""

    prefix = language.lower()
    return [voice for voice in voices if voice.language.lower().startswith(prefix)]


def find_voice_by_name(voices: Sequence[VoiceRef], name: str) -> VoiceRef | None:
    """Return the voice with an exact name match, if any."""

    return next((voice for voice in voices if voice.name == name), None)


def default_voice(voices: Sequence[VoiceRef], language: str = "en") -> VoiceRef | None:
    """Return the engine default voice for a language, else its first voice."""

    candidates = voices_for_language(voices, language)
    flagged = next((voice for voice in candidates if voice.is_default), None)
    if flagged is not None:
        return flagged
    return candidates[0] if candidates else None


def format_voice_name(voice: VoiceRef | None) -> str:
    """Format a voice for display as `<name> [<lang>] (Local)` or `(Online)`."""

    if voice is None:
        return "Unknown Voice"
    service = "(Local)" if voice.local_service else "(Online)"
    return f"{voice.name} [{voice.language}] {service}"


class VoiceCatalog:
    """Cache of gateway voices that can be re-queried until populated."""

    def __init__(self, gateway: SynthesisGateway) -> None:
        """Initialize an empty catalog bound to a gateway."""

        self._gateway = gateway
        self._voices: tuple[VoiceRef, ...] = ()

    @property
    def voices(self) -> tuple[VoiceRef, ...]:
        """Return the last non-empty voice list, querying once if still empty."""

        if not self._voices:
            self.refresh()
        return self._voices

    def refresh(self) -> tuple[VoiceRef, ...]:
        """Re-query the gateway; an empty answer keeps the previous list."""

        latest = tuple(self._gateway.list_voices())
        if latest:
            self._voices = latest
        return self._voices

    def resolve(self, name: str | None, language: str = "en") -> VoiceRef | None:
        """Resolve a named voice, falling back to the language default."""

        voices = self.voices
        if name is not None:
            named = find_voice_by_name(voices, name)
            if named is not None:
                return named
        return default_voice(voices, language)
