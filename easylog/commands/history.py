"""Workout history commands."""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from easylog.commands.common import (
    get_state,
    print_json_payload,
    print_plain_rows,
    require_session,
    session_payload,
)
from easylog.utils.formatting import format_duration, format_timestamp, format_volume

app = typer.Typer(help="Review and prune workout history", invoke_without_command=True)


@app.callback()
def history_callback(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, min=1, help="Show at most N sessions"),
) -> None:
    """List completed sessions, most recent first."""
    if ctx.invoked_subcommand is not None:
        return
    state = get_state(ctx)
    store = state.store
    if limit is None:
        limit = int(state.config.get("display", {}).get("history_limit", 20))
    sessions = store.completed_sessions()[:limit]

    if state.json_output:
        print_json_payload(state, [session_payload(store, session) for session in sessions])
        return

    if state.plain_output:
        print_plain_rows(
            (
                session.id,
                format_timestamp(session.start_date),
                session.template_name,
                session.completed_sets_count,
                session.total_sets_count,
                session.total_reps,
                session.total_volume,
            )
            for session in sessions
        )
        return

    if not sessions:
        state.console.print("No workout history. Completed workouts will appear here.")
        return

    unit = state.weight_unit
    table = Table(title="History")
    table.add_column("Date")
    table.add_column("Workout")
    table.add_column("Duration")
    table.add_column("Sets", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Id", overflow="fold")
    for session in sessions:
        table.add_row(
            format_timestamp(session.start_date),
            session.template_name,
            format_duration(session.duration),
            f"{session.completed_sets_count}/{session.total_sets_count}",
            str(session.total_reps),
            format_volume(session.total_volume, unit),
            str(session.id),
        )
    state.console.print(table)


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session id or unique id prefix"),
    force: bool = typer.Option(False, "--force", help="Delete without confirmation"),
) -> None:
    """Delete a finished session and its sets."""
    state = get_state(ctx)
    store = state.store
    session = require_session(store, session_id)
    if session.is_active:
        raise typer.BadParameter("Session is still active; use 'easylog session discard' instead")

    label = f"{session.template_name} ({format_timestamp(session.start_date)})"
    if not force and not typer.confirm(f"Delete {label}?"):
        raise typer.Exit(code=1)

    store.delete_session(session.id)
    if state.json_output:
        print_json_payload(state, {"deleted": True, "id": str(session.id)})
        return
    state.console.print(f"Deleted {label}")
