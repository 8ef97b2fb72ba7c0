"""Top-level package for Readaloud.

This package turns long-form extracted document text into a sequence of
sentence-safe utterances and drives them through a single-utterance speech
engine with pause, resume, stop, and seek controls. The main entry point is
`ReadAloudEngine`.
"""

from .engine import ReadAloudEngine

__all__ = ["ReadAloudEngine", "__version__"]

__version__ = "0.1.0"
