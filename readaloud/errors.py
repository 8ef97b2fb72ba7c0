"""Domain exceptions for engine operations and CLI diagnostics."""

from __future__ import annotations


class ReadAloudError(RuntimeError):
    """Raised when an engine operation cannot be completed."""

    def __init__(
        self,
        *,
        operation: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize an operation-scoped engine error."""

        super().__init__(detail)
        self.operation = operation
        self.detail = detail
        self.hint = hint


class PreconditionError(ReadAloudError):
    """Raised when an operation is rejected before any state is mutated.

    Covers an unavailable synthesis capability, an empty session, and seek
    targets outside the loaded chunk sequence.
    """


class SynthesisFailure(ReadAloudError):
    """Raised or reported when the speech engine fails mid-utterance."""

    def __init__(
        self,
        *,
        reason: str,
        chunk_index: int,
        hint: str | None = None,
    ) -> None:
        """Initialize a failure for the chunk that was being spoken."""

        super().__init__(
            operation="speak",
            detail=f"Speech synthesis failed on chunk {chunk_index + 1}: {reason}",
            hint=hint
            or "Retry from the current chunk or pick another voice; playback was not advanced.",
        )
        self.reason = reason
        self.chunk_index = chunk_index


class DocumentSourceError(ReadAloudError):
    """Raised when raw document text cannot be read for a session."""
