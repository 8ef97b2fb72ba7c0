"""Input components for command-line sessions.

This package reads raw document text; the engine itself performs no file I/O.
"""

from .text_source import TextSource

__all__ = ["TextSource"]
