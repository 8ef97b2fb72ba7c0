"""Module entrypoint for running Readaloud as ``python -m readaloud``."""

from __future__ import annotations

from readaloud.cli import main


if __name__ == "__main__":
    main()
