"""Entry point for easylog."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from easylog import __version__
from easylog.commands import config as config_commands
from easylog.commands import exercises as exercise_commands
from easylog.commands import history as history_commands
from easylog.commands import muscles as muscle_commands
from easylog.commands import session as session_commands
from easylog.commands import templates as template_commands
from easylog.commands.export import export_command, import_command, reset_command
from easylog.core.config import ConfigError, default_config_path, load_config, resolve_store_dir
from easylog.core.state import CLIState

app = typer.Typer(
    add_completion=False,
    help="EasyLog workout tracker",
    invoke_without_command=True,
)


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Send library log records to stderr through rich."""
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=verbose)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting/tables)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Directory holding the data files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Initialize global CLI state."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if json_output and plain_output:
        typer.echo("Options --json and --plain are mutually exclusive.")
        raise typer.Exit(code=2)

    cfg_path = (config or default_config_path()).expanduser().resolve()
    try:
        cfg = load_config(cfg_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    configure_logging(verbose=verbose, quiet=quiet)

    console = Console(
        quiet=quiet,
        no_color=plain_output,
        log_time=False,
        log_path=False,
    )
    ctx.obj = CLIState(
        json_output=(json_output and not plain_output),
        plain_output=plain_output,
        verbose=verbose,
        quiet=quiet,
        config_path=cfg_path,
        config=cfg,
        console=console,
        store_dir=resolve_store_dir(cfg, explicit=data_dir),
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


# Top-level commands
app.command("export")(export_command)
app.command("import")(import_command)
app.command("reset")(reset_command)
app.add_typer(muscle_commands.app, name="muscles")
app.add_typer(exercise_commands.app, name="exercises")
app.add_typer(template_commands.app, name="templates")
app.add_typer(session_commands.app, name="session")
app.add_typer(history_commands.app, name="history")
app.add_typer(config_commands.app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
