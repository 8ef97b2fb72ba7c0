"""Structured playback logging utilities.

Responsibilities:
- Emit concise, deterministic operation-level logs for engine activity.
- Never log document text; only positions, counts, and failure reasons.
"""

from __future__ import annotations

from typing import TextIO

from loguru import logger as _loguru_logger


_COMPONENT = "readaloud"


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class PlaybackLogger:
    """Emit deterministic event lines for engine and sequencer operations."""

    def __init__(
        self,
        sink: TextIO | None = None,
        level: str = "INFO",
        exclusive: bool = False,
    ) -> None:
        """Bind a component logger and optionally route it to a dedicated sink.

        Args:
            sink: Text stream receiving playback events; loguru defaults apply when `None`.
            level: Minimum level written to `sink`.
            exclusive: Remove every other loguru handler first, as CLI runs do.
        """

        self._logger = _loguru_logger.bind(component=_COMPONENT)
        self._handler_id: int | None = None
        if exclusive:
            _loguru_logger.remove()
        if sink is not None:
            self._handler_id = _loguru_logger.add(
                sink,
                format="{message}",
                level=level,
                colorize=False,
                filter=lambda record: record["extra"].get("component") == _COMPONENT,
            )

    def close(self) -> None:
        """Detach the dedicated sink, if one was added."""

        if self._handler_id is not None:
            _loguru_logger.remove(self._handler_id)
            self._handler_id = None

    def _emit(self, level: str, operation: str, event: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[playback] level={level} op={operation} event={event}{_format_context(context)}"
        self._logger.log(level, line)

    def info(self, operation: str, event: str, **context: object) -> None:
        """Emit an informational event."""

        self._emit("INFO", operation, event, **context)

    def debug(self, operation: str, event: str, **context: object) -> None:
        """Emit a low-level event such as an ignored stale callback."""

        self._emit("DEBUG", operation, event, **context)

    def warning(self, operation: str, event: str, **context: object) -> None:
        """Emit a rejected-operation event."""

        self._emit("WARNING", operation, event, **context)

    def failure(self, operation: str, error_type: str, **context: object) -> None:
        """Emit a failure event without sensitive payload details."""

        self._emit("ERROR", operation, "failure", error_type=error_type, **context)
