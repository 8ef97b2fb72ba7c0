"""Command-line interface for Readaloud.

Responsibilities:
- Expose the text stages (normalize, footnotes, chunks) for inspection.
- Run a full read-aloud session through the console speech gateway.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys
from typing import Annotated

import typer

from .cli_rendering import (
    echo_chunks,
    echo_footnote_table,
    echo_position,
    echo_voice_list,
    exit_with_command_error,
)
from .config import ConfigLoader, ReadAloudConfig
from .engine import ReadAloudEngine
from .errors import ReadAloudError, SynthesisFailure
from .io.text_source import TextSource
from .models.datatypes import PlaybackPosition
from .playback.scheduling import AsyncioScheduler
from .playback.sequencer import PlaybackEvents
from .telemetry.logger import PlaybackLogger
from .text.footnotes import FootnoteExtractor
from .text.normalizer import TextNormalizer
from .tts.gateway import ConsoleSynthesisGateway

app = typer.Typer(
    name="readaloud",
    no_args_is_help=True,
    help="Readaloud CLI.",
)

DocumentArgument = Annotated[
    Path,
    typer.Argument(help="Path to a `.txt`, `.md`, or text-based `.pdf` document."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with engine defaults."),
]
MaxSentencesOption = Annotated[
    int | None,
    typer.Option("--max-sentences", min=1, help="Sentences per chunk (overrides config)."),
]
MaxCharsOption = Annotated[
    int | None,
    typer.Option("--max-chars", min=1, help="Characters per chunk; replaces the sentence bound."),
]
FootnotesOption = Annotated[
    bool | None,
    typer.Option(
        "--footnotes/--no-footnotes",
        help="Read footnote content at marker positions (overrides config).",
    ),
]


def _load_config(config_file: Path | None) -> ReadAloudConfig:
    """Load YAML config when requested and map failures to engine errors."""

    if config_file is None:
        return ReadAloudConfig()

    try:
        return ConfigLoader.from_yaml(config_file)
    except FileNotFoundError as exc:
        raise ReadAloudError(
            operation="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ReadAloudError(
            operation="config",
            detail=f"Invalid config file `{config_file}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_config(
    config_file: Path | None,
    **overrides: object,
) -> ReadAloudConfig:
    """Resolve effective config from YAML defaults and explicit CLI overrides."""

    base = _load_config(config_file)
    try:
        return base.with_overrides(**overrides)
    except ValueError as exc:
        raise ReadAloudError(
            operation="config",
            detail=str(exc),
            hint="Check option values with `readaloud <command> --help`.",
        ) from exc


@app.command("normalize")
def normalize_command(document: DocumentArgument) -> None:
    """Print the pronunciation-normalized text of a document."""

    try:
        text = TextSource().read(document)
    except Exception as exc:
        exit_with_command_error("normalize", exc)

    typer.echo(TextNormalizer().normalize(text))


@app.command("footnotes")
def footnotes_command(
    document: DocumentArgument,
    config_file: ConfigOption = None,
) -> None:
    """Print the detected footnote table and body marker count."""

    try:
        config = _load_config(config_file)
        text = TextSource().read(document)
        extractor = FootnoteExtractor(threshold_ratio=config.footnote_threshold_ratio)
        extraction = extractor.extract(text)
        markers = extractor.find_markers(extraction.body_text)
    except Exception as exc:
        exit_with_command_error("footnotes", exc)

    echo_footnote_table(extraction.table, len(markers))


@app.command("chunks")
def chunks_command(
    document: DocumentArgument,
    config_file: ConfigOption = None,
    max_sentences: MaxSentencesOption = None,
    max_chars: MaxCharsOption = None,
    footnotes: FootnotesOption = None,
) -> None:
    """Print the chunk sequence a read-aloud session would speak."""

    try:
        config = _resolve_config(
            config_file,
            max_sentences_per_chunk=max_sentences,
            max_chars_per_chunk=max_chars,
            footnote_reading=footnotes,
        )
        text = TextSource().read(document)
        loop = asyncio.new_event_loop()
        try:
            engine = ReadAloudEngine(ConsoleSynthesisGateway(loop), config)
            prepared = engine.prepare(text)
        finally:
            loop.close()
    except Exception as exc:
        exit_with_command_error("chunks", exc)

    echo_chunks(prepared.chunks)


@app.command("voices")
def voices_command() -> None:
    """List voices reported by the console speech gateway."""

    loop = asyncio.new_event_loop()
    try:
        voices = ConsoleSynthesisGateway(loop).list_voices()
    finally:
        loop.close()
    echo_voice_list(voices)


@app.command("read")
def read_command(
    document: DocumentArgument,
    config_file: ConfigOption = None,
    voice: Annotated[
        str | None,
        typer.Option("--voice", help="Voice name (overrides config)."),
    ] = None,
    rate: Annotated[
        float | None,
        typer.Option("--rate", help="Speaking rate multiplier between 0.1 and 10."),
    ] = None,
    pitch: Annotated[
        float | None,
        typer.Option("--pitch", help="Pitch multiplier between 0 and 2."),
    ] = None,
    volume: Annotated[
        float | None,
        typer.Option("--volume", help="Volume between 0 and 1."),
    ] = None,
    max_sentences: MaxSentencesOption = None,
    max_chars: MaxCharsOption = None,
    footnotes: FootnotesOption = None,
    start_percent: Annotated[
        float | None,
        typer.Option("--start-percent", help="Start playback at this percentage."),
    ] = None,
    delay: Annotated[
        float | None,
        typer.Option("--delay", min=0.0, help="Settling delay between chunks, in seconds."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Print playback events."),
    ] = False,
) -> None:
    """Read a document aloud through the console speech gateway."""

    logger = PlaybackLogger(
        sink=sys.stdout,
        level="INFO" if verbose else "WARNING",
        exclusive=True,
    )
    try:
        config = _resolve_config(
            config_file,
            voice_name=voice,
            rate=rate,
            pitch=pitch,
            volume=volume,
            max_sentences_per_chunk=max_sentences,
            max_chars_per_chunk=max_chars,
            footnote_reading=footnotes,
            inter_chunk_delay_seconds=delay,
        )
        text = TextSource().read(document)
        position = _run_session(text, config, start_percent, logger)
    except Exception as exc:
        exit_with_command_error("read", exc)
    finally:
        logger.close()

    if position is None:
        typer.echo("Nothing to read.")
        return
    echo_position(position)


def _run_session(
    text: str,
    config: ReadAloudConfig,
    start_percent: float | None,
    logger: PlaybackLogger,
) -> PlaybackPosition | None:
    """Drive one session on a private event loop until it finishes or fails."""

    loop = asyncio.new_event_loop()
    try:
        done: asyncio.Future[None] = loop.create_future()

        def _on_finished() -> None:
            if not done.done():
                done.set_result(None)

        def _on_error(failure: SynthesisFailure) -> None:
            if not done.done():
                done.set_exception(failure)

        events = PlaybackEvents(
            on_chunk_start=lambda index, total: typer.echo(f"[progress] chunk {index + 1}/{total}"),
            on_finished=_on_finished,
            on_error=_on_error,
        )
        engine = ReadAloudEngine(
            ConsoleSynthesisGateway(loop, sink=sys.stdout),
            config,
            scheduler=AsyncioScheduler(loop),
            events=events,
            logger=logger,
        )
        session = engine.convert(text)
        if session.is_empty:
            engine.stop()
            return None
        if start_percent is not None:
            engine.seek_to_percentage(start_percent)
        loop.run_until_complete(done)
        return engine.get_position()
    finally:
        loop.close()


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
