"""Configuration model and loaders for Readaloud.

Responsibilities:
- Define engine configuration as a typed dataclass with documented defaults.
- Derive chunk policy and speech option records from configuration.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `ReadAloudConfig`: normalized settings for one engine instance.
- `ConfigLoader`: static construction helpers for `ReadAloudConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models.datatypes import ChunkPolicy, SpeechOptions, VoiceRef
from .parsing import (
    normalize_optional_string,
    parse_bounded_float,
    parse_positive_int,
    parse_required_boolean,
)


_RATE_RANGE = (0.1, 10.0)
_PITCH_RANGE = (0.0, 2.0)
_VOLUME_RANGE = (0.0, 1.0)
_DEFAULT_MAX_SENTENCES = 3


@dataclass(slots=True)
class ReadAloudConfig:
    """Runtime configuration for one engine instance.

    Attributes:
        voice_name: Preferred voice name; the language default is used when absent.
        language: Language prefix used for default voice selection.
        rate: Speaking rate multiplier in `[0.1, 10]`.
        pitch: Pitch multiplier in `[0, 2]`.
        volume: Volume in `[0, 1]`.
        max_sentences_per_chunk: Sentence-count chunk bound.
        max_chars_per_chunk: Character-length chunk bound; exclusive with the above.
        footnote_reading: Whether footnote content is read at marker positions.
        footnote_threshold_ratio: Minimum document position of a footnote section.
        inter_chunk_delay_seconds: Settling delay between consecutive utterances.
        extra: Additional metadata for host integrations.
    """

    voice_name: str | None = None
    language: str = "en"
    rate: float = 1.0
    pitch: float = 1.0
    volume: float = 1.0
    max_sentences_per_chunk: int | None = _DEFAULT_MAX_SENTENCES
    max_chars_per_chunk: int | None = None
    footnote_reading: bool = False
    footnote_threshold_ratio: float = 0.6
    inter_chunk_delay_seconds: float = 0.1
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate configuration values before an engine uses them."""

        self._require_range(self.rate, "rate", _RATE_RANGE)
        self._require_range(self.pitch, "pitch", _PITCH_RANGE)
        self._require_range(self.volume, "volume", _VOLUME_RANGE)
        self._require_range(self.footnote_threshold_ratio, "footnote_threshold_ratio", (0.0, 1.0))
        if self.inter_chunk_delay_seconds < 0:
            raise ValueError("`inter_chunk_delay_seconds` must not be negative.")
        if normalize_optional_string(self.language) is None:
            raise ValueError("`language` must be a non-empty string.")
        self.chunk_policy()

    def chunk_policy(self) -> ChunkPolicy:
        """Return the active chunk size policy."""

        return ChunkPolicy(
            max_sentences_per_chunk=self.max_sentences_per_chunk,
            max_chars_per_chunk=self.max_chars_per_chunk,
        )

    def speech_options(self, voice: VoiceRef | None = None) -> SpeechOptions:
        """Return speech options built from configured defaults."""

        return SpeechOptions(voice=voice, rate=self.rate, pitch=self.pitch, volume=self.volume)

    def with_overrides(self, **overrides: Any) -> ReadAloudConfig:
        """Return a copy with non-`None` overrides applied.

        Setting one chunk bound clears the other so the policy stays exclusive.
        """

        effective = {key: value for key, value in overrides.items() if value is not None}
        if "max_chars_per_chunk" in effective and "max_sentences_per_chunk" not in effective:
            effective["max_sentences_per_chunk"] = None
        if "max_sentences_per_chunk" in effective and "max_chars_per_chunk" not in effective:
            effective["max_chars_per_chunk"] = None
        effective.setdefault("extra", dict(self.extra))
        updated = replace(self, **effective)
        updated.validate()
        return updated

    @staticmethod
    def _require_range(value: float, field_name: str, bounds: tuple[float, float]) -> None:
        minimum, maximum = bounds
        if not minimum <= value <= maximum:
            raise ValueError(f"`{field_name}` must be between {minimum:g} and {maximum:g}.")


class ConfigLoader:
    """Factory methods for creating `ReadAloudConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "voice_name",
            "language",
            "rate",
            "pitch",
            "volume",
            "max_sentences_per_chunk",
            "max_chars_per_chunk",
            "footnote_reading",
            "footnote_threshold_ratio",
            "inter_chunk_delay_seconds",
            "extra",
        }
    )
    _ENV_KEYS: Mapping[str, str] = {
        "READALOUD_VOICE": "voice_name",
        "READALOUD_LANGUAGE": "language",
        "READALOUD_RATE": "rate",
        "READALOUD_PITCH": "pitch",
        "READALOUD_VOLUME": "volume",
        "READALOUD_MAX_SENTENCES_PER_CHUNK": "max_sentences_per_chunk",
        "READALOUD_MAX_CHARS_PER_CHUNK": "max_chars_per_chunk",
        "READALOUD_FOOTNOTE_READING": "footnote_reading",
        "READALOUD_FOOTNOTE_THRESHOLD_RATIO": "footnote_threshold_ratio",
        "READALOUD_INTER_CHUNK_DELAY_SECONDS": "inter_chunk_delay_seconds",
    }

    @staticmethod
    def from_yaml(path: Path) -> ReadAloudConfig:
        """Create a validated config from a YAML file."""

        raw_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        unknown = sorted(str(key) for key in payload if key not in ConfigLoader._SUPPORTED_YAML_KEYS)
        if unknown:
            raise ValueError(
                f"YAML config `{path}` contains unsupported key(s): {', '.join(unknown)}."
            )
        return ConfigLoader._build_config(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> ReadAloudConfig:
        """Create a validated config from `READALOUD_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            field_name: env_map[env_key]
            for env_key, field_name in ConfigLoader._ENV_KEYS.items()
            if normalize_optional_string(env_map.get(env_key)) is not None
        }
        return ConfigLoader._build_config(payload, source_label="environment")

    @staticmethod
    def _build_config(payload: Mapping[str, Any], source_label: str) -> ReadAloudConfig:
        """Build a validated config from a loosely typed mapping."""

        values: dict[str, Any] = {}
        try:
            if "voice_name" in payload:
                values["voice_name"] = normalize_optional_string(payload["voice_name"])
            if "language" in payload:
                language = normalize_optional_string(payload["language"])
                if language is None:
                    raise ValueError("`language` must be a non-empty string.")
                values["language"] = language
            for key, bounds in (
                ("rate", _RATE_RANGE),
                ("pitch", _PITCH_RANGE),
                ("volume", _VOLUME_RANGE),
                ("footnote_threshold_ratio", (0.0, 1.0)),
                ("inter_chunk_delay_seconds", (0.0, 60.0)),
            ):
                if key in payload:
                    values[key] = parse_bounded_float(
                        payload[key], key, minimum=bounds[0], maximum=bounds[1]
                    )
            for key in ("max_sentences_per_chunk", "max_chars_per_chunk"):
                if normalize_optional_string(payload.get(key)) is not None:
                    values[key] = parse_positive_int(payload[key], key)
            if "footnote_reading" in payload:
                values["footnote_reading"] = parse_required_boolean(
                    payload["footnote_reading"], "footnote_reading"
                )
            if "extra" in payload:
                values["extra"] = ConfigLoader._string_map(payload["extra"])
        except ValueError as exc:
            raise ValueError(f"Invalid {source_label} config: {exc}") from exc

        if "max_chars_per_chunk" in values and "max_sentences_per_chunk" not in values:
            values["max_sentences_per_chunk"] = None

        config = ReadAloudConfig(**values)
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"Invalid {source_label} config: {exc}") from exc
        return config

    @staticmethod
    def _string_map(value: object) -> dict[str, str]:
        """Normalize an `extra` mapping into stripped string keys and values."""

        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("`extra` must be a mapping of string keys to string values.")
        normalized: dict[str, str] = {}
        for key, item in value.items():
            key_text = normalize_optional_string(key)
            if key_text is None:
                raise ValueError("`extra` keys must be non-empty strings.")
            normalized[key_text] = normalize_optional_string(item) or ""
        return normalized
