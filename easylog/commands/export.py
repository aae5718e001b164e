"""CSV export/import and full reset commands."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import typer

from easylog.commands.common import get_state, print_json_payload
from easylog.core.config import resolve_output_dir
from easylog.exporters.csv_codec import export_csv, export_to_file, import_csv, write_export


def export_command(
    ctx: typer.Context,
    output_dir: Optional[Path] = typer.Option(None, help="Directory for a timestamped export file"),
    output_file: Optional[Path] = typer.Option(None, help="Exact output file path"),
    stdout: bool = typer.Option(False, "--stdout", help="Print CSV to stdout instead of writing a file"),
) -> None:
    """Export completed sessions as CSV."""
    state = get_state(ctx)
    store = state.store

    if stdout:
        typer.echo(export_csv(store))
        return

    count = sum(len(session.sets) for session in store.completed_sessions())
    path: Optional[Path]
    if output_file:
        path = write_export(store, output_file.expanduser())
    else:
        path = export_to_file(store, resolve_output_dir(state.config, explicit=output_dir))

    result: Dict[str, object]
    if path is None:
        result = {"status": "error", "format": "csv", "message": "Could not write export file"}
    else:
        result = {"status": "exported", "format": "csv", "path": str(path), "rows": count}

    if state.json_output:
        print_json_payload(state, result)
        if path is None:
            raise typer.Exit(code=1)
        return

    if state.plain_output:
        for key in ("status", "format", "path", "rows", "message"):
            if key in result and result[key] is not None:
                typer.echo(f"{key}\t{result[key]}")
        if path is None:
            raise typer.Exit(code=1)
        return

    if path is None:
        state.console.print(str(result["message"]))
        raise typer.Exit(code=1)
    state.console.print(f"Exported {count} set(s) to {path}")


def import_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="CSV file produced by 'easylog export'"),
) -> None:
    """Import sessions from CSV, skipping sessions that already exist."""
    state = get_state(ctx)
    result = import_csv(file, state.store)

    if state.json_output:
        print_json_payload(state, result.to_dict())
    elif state.plain_output:
        for key, value in result.to_dict().items():
            if key == "errors":
                for error in value:
                    typer.echo(f"error\t{error}")
            else:
                typer.echo(f"{key}\t{value}")
    else:
        state.console.print(result.summary)
        for error in result.errors:
            state.console.print(f"[red]{error}[/red]")

    if result.errors and not result.sessions_imported:
        raise typer.Exit(code=1)


def reset_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", help="Confirm deleting all data"),
) -> None:
    """Delete every exercise, template and session and restore default muscle groups."""
    state = get_state(ctx)
    if not yes and not typer.confirm("Delete ALL data? This cannot be undone."):
        raise typer.Exit(code=1)

    state.store.delete_all_data()
    if state.json_output:
        print_json_payload(state, {"reset": True, "directory": str(state.store.directory)})
        return
    state.console.print("All data deleted.")
