"""Shared pytest fixtures for the full Readaloud test suite."""

from __future__ import annotations

import pytest

from readaloud.models.datatypes import VoiceRef
from readaloud.playback.scheduling import ManualScheduler
from tests.fakes import FakeSynthesisGateway


@pytest.fixture
def fake_voices() -> list[VoiceRef]:
    """Provide a small mixed-language voice list with one flagged default."""

    return [
        VoiceRef(name="Alice", language="en-GB", local_service=True),
        VoiceRef(name="Bob", language="en-US", is_default=True, local_service=False),
        VoiceRef(name="Claire", language="fr-FR", local_service=True),
    ]


@pytest.fixture
def gateway(fake_voices: list[VoiceRef]) -> FakeSynthesisGateway:
    """Provide an available recording gateway."""

    return FakeSynthesisGateway(voices=list(fake_voices))


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Provide a scheduler that holds inter-chunk advances until pumped."""

    return ManualScheduler()
