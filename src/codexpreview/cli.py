from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
from rich import console as rich_console
from rich import table as rich_table

from codexpreview.diffview import RichDiffPresenter
from codexpreview.errors import SettingsError
from codexpreview.files import FileSystemFileReader
from codexpreview.logger import configure_logging, init_log_manager
from codexpreview.monitor import PreviewMonitor, PreviewOutcome
from codexpreview.preview import LineKind, PreviewBlock, apply_edits, parse_preview
from codexpreview.settings import LogLevel, MonitorSettings, load_settings
from codexpreview.sources import FileBufferSource

EXIT_NO_BLOCK = 1
EXIT_UNAPPLICABLE = 2
EXIT_UNREADABLE = 3

_KIND_STYLES = {
    LineKind.ADD: "green",
    LineKind.DELETE: "red",
    LineKind.CONTEXT: "",
}

_transcript_arg = click.argument(
    "transcript", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


def _load_block(transcript: Path) -> Optional[PreviewBlock]:
    text = transcript.read_text(encoding="utf-8", errors="replace")
    return parse_preview(text)


def _load_settings(config: Optional[Path]) -> MonitorSettings:
    try:
        return load_settings(config)
    except SettingsError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc


def _apply_log_level(config: Optional[Path], settings: MonitorSettings) -> None:
    if config is not None:
        configure_logging(settings.log_level.value)


def _edits_table(block: PreviewBlock) -> rich_table.Table:
    table = rich_table.Table(title=block.file_path, show_edge=False)
    table.add_column("Line", justify="right")
    table.add_column("Kind")
    table.add_column("Text", overflow="fold")
    for edit in block.edits:
        style = _KIND_STYLES[edit.kind]
        table.add_row(str(edit.line_number), edit.kind.value, edit.text, style=style)
    return table


@click.group()
@click.option(
    "--log-level",
    type=click.Choice([lvl.value for lvl in LogLevel]),
    default=LogLevel.warning.value,
    show_default=True,
)
@click.option(
    "--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None
)
def main(log_level: str, log_file: Optional[Path]) -> None:
    """Detect and preview edit proposals in captured Codex terminal output."""
    configure_logging(log_level, log_file)


@main.command("parse")
@_transcript_arg
@click.option("--json", "as_json", is_flag=True, help="Print the block as JSON.")
@click.pass_context
def parse_cmd(ctx: click.Context, transcript: Path, as_json: bool) -> None:
    """Print the edits of the most recent preview block."""
    block = _load_block(transcript)
    if block is None:
        click.echo("No preview block found.", err=True)
        ctx.exit(EXIT_NO_BLOCK)

    if as_json:
        click.echo(json.dumps(block.as_dict(), ensure_ascii=False, indent=2))
        return
    rich_console.Console().print(_edits_table(block))


@main.command("apply")
@_transcript_arg
@click.argument(
    "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--strict", is_flag=True, help="Fail on context line mismatch.")
@click.option(
    "--diagnostics", is_flag=True, help="Print warnings raised while applying."
)
@click.pass_context
def apply_cmd(
    ctx: click.Context,
    transcript: Path,
    file: Path,
    strict: bool,
    diagnostics: bool,
) -> None:
    """Print FILE with the preview edits applied. FILE is not modified."""
    manager = init_log_manager() if diagnostics else None
    if manager is not None:
        manager.clear()

    block = _load_block(transcript)
    if block is None:
        click.echo("No preview block found.", err=True)
        ctx.exit(EXIT_NO_BLOCK)

    try:
        current = FileSystemFileReader().read(file)
    except UnicodeDecodeError as exc:
        click.echo(f"Cannot read {file}: {exc}", err=True)
        ctx.exit(EXIT_UNREADABLE)
    if current is None:
        click.echo(f"Cannot read {file}.", err=True)
        ctx.exit(EXIT_UNREADABLE)

    result = apply_edits(current, block, strict_context=strict)

    if manager is not None:
        for record in manager.get_records(logging.WARNING):
            click.echo(record.message, err=True)

    if result is None:
        click.echo(f"Cannot apply preview to {file}.", err=True)
        ctx.exit(EXIT_UNAPPLICABLE)
    click.echo(result, nl=False)


@main.command("show")
@_transcript_arg
@click.option(
    "--root",
    type=click.Path(
        exists=True, file_okay=False, resolve_path=True, path_type=Path
    ),
    default=None,
    help="Project root that preview paths are relative to.",
)
@click.option("--config", type=click.Path(path_type=Path), default=None)
@click.pass_context
def show_cmd(
    ctx: click.Context,
    transcript: Path,
    root: Optional[Path],
    config: Optional[Path],
) -> None:
    """Render the diff for the most recent preview block once."""
    settings = _load_settings(config)
    _apply_log_level(config, settings)
    monitor = PreviewMonitor(
        FileBufferSource(transcript),
        RichDiffPresenter(),
        project_root=root,
        settings=settings.model_copy(update={"show_diff_on_change": True}),
    )
    outcome = monitor.poll_once()
    if outcome not in (PreviewOutcome.FULL_FILE, PreviewOutcome.SNIPPET):
        click.echo("No preview block found.", err=True)
        ctx.exit(EXIT_NO_BLOCK)


@main.command("watch")
@_transcript_arg
@click.option(
    "--root",
    type=click.Path(
        exists=True, file_okay=False, resolve_path=True, path_type=Path
    ),
    default=None,
)
@click.option("--config", type=click.Path(path_type=Path), default=None)
@click.option("--interval", type=click.FloatRange(min=0, min_open=True), default=None)
def watch_cmd(
    transcript: Path,
    root: Optional[Path],
    config: Optional[Path],
    interval: Optional[float],
) -> None:
    """Keep polling TRANSCRIPT and show each new preview as it appears."""
    settings = _load_settings(config)
    if interval is not None:
        settings = settings.model_copy(update={"poll_interval": interval})
    _apply_log_level(config, settings)

    monitor = PreviewMonitor(
        FileBufferSource(transcript),
        RichDiffPresenter(),
        project_root=root,
        settings=settings,
    )
    try:
        asyncio.run(monitor.run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
