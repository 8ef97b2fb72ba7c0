"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
chunk listings, footnote tables, voice rows, and playback positions.
"""

from __future__ import annotations

from typing import NoReturn, Sequence

import typer

from .errors import ReadAloudError
from .models.datatypes import FootnoteTable, PlaybackPosition, VoiceRef
from .tts.voices import format_voice_name


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, ReadAloudError):
        typer.secho(
            f"{command_name} failed at `{exc.operation}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_chunks(chunks: Sequence[str]) -> None:
    """Print numbered chunk rows in reading order."""

    total = len(chunks)
    for index, chunk in enumerate(chunks, start=1):
        typer.echo(f"[{index}/{total}] {chunk}")


def echo_footnote_table(table: FootnoteTable, marker_count: int) -> None:
    """Print detected footnotes sorted by marker, then the in-prose marker count."""

    if not table:
        typer.echo("Footnotes: none detected")
    else:
        typer.echo(f"Footnotes: {len(table)}")
        for marker in sorted(table, key=lambda token: (not token.isdigit(), token.zfill(8))):
            typer.echo(f"  {marker}: {table[marker]}")
    typer.echo(f"Markers in body: {marker_count}")


def echo_voice_list(voices: Sequence[VoiceRef]) -> None:
    """Print one formatted row per voice, flagging the engine default."""

    if not voices:
        typer.echo("No voices reported by the speech engine.")
        return
    for voice in voices:
        suffix = " *default*" if voice.is_default else ""
        typer.echo(f"{format_voice_name(voice)}{suffix}")


def echo_position(position: PlaybackPosition) -> None:
    """Print a one-line playback position summary."""

    typer.echo(
        f"Position: chunk {position.current_index}/{position.total} "
        f"({position.percentage}%), remaining {position.remaining}"
    )
