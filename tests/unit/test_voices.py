"""Unit tests for voice selection helpers and the voice catalog."""

from __future__ import annotations

from readaloud.models.datatypes import VoiceRef
from readaloud.tts.voices import (
    VoiceCatalog,
    default_voice,
    find_voice_by_name,
    format_voice_name,
    voices_for_language,
)
from tests.fakes import FakeSynthesisGateway


def test_voices_for_language_matches_tag_prefix_case_insensitively(
    fake_voices: list[VoiceRef],
) -> None:
    """Language filtering should accept prefixes such as `en`."""

    assert [voice.name for voice in voices_for_language(fake_voices, "EN")] == ["Alice", "Bob"]
    assert [voice.name for voice in voices_for_language(fake_voices, "fr-fr")] == ["Claire"]
    assert voices_for_language(fake_voices, "de") == []


def test_find_voice_by_name_requires_exact_match(fake_voices: list[VoiceRef]) -> None:
    """Name lookup should not guess at partial names."""

    assert find_voice_by_name(fake_voices, "Bob") == fake_voices[1]
    assert find_voice_by_name(fake_voices, "bob") is None


def test_default_voice_prefers_flagged_default_then_first_match(
    fake_voices: list[VoiceRef],
) -> None:
    """The engine-flagged default wins; otherwise the first language match."""

    assert default_voice(fake_voices, "en") == fake_voices[1]
    assert default_voice(fake_voices, "fr") == fake_voices[2]
    assert default_voice(fake_voices, "ja") is None


def test_format_voice_name_marks_local_and_online_voices(
    fake_voices: list[VoiceRef],
) -> None:
    """Display names should include language and service location."""

    assert format_voice_name(fake_voices[0]) == "Alice [en-GB] (Local)"
    assert format_voice_name(fake_voices[1]) == "Bob [en-US] (Online)"
    assert format_voice_name(None) == "Unknown Voice"


def test_voice_catalog_requeries_until_voices_arrive() -> None:
    """Catalog should tolerate engines that populate voices late."""

    gateway = FakeSynthesisGateway()
    catalog = VoiceCatalog(gateway)

    assert catalog.voices == ()
    gateway.voices = [VoiceRef(name="Late", language="en-US")]

    assert [voice.name for voice in catalog.voices] == ["Late"]
    gateway.voices = []
    assert [voice.name for voice in catalog.refresh()] == ["Late"]


def test_voice_catalog_resolve_falls_back_to_language_default(
    gateway: FakeSynthesisGateway,
) -> None:
    """Unknown names should resolve to the language default voice."""

    catalog = VoiceCatalog(gateway)

    assert catalog.resolve("Alice").name == "Alice"
    assert catalog.resolve("Nobody", "en").name == "Bob"
    assert catalog.resolve(None, "fr").name == "Claire"
    assert catalog.resolve(None, "ja") is None
