"""Commands for the active logging session."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

import typer
from rich.table import Table

from easylog.commands.common import (
    get_state,
    print_json_payload,
    print_plain_rows,
    require_active_session,
    require_exercise,
    require_session,
    require_template,
    session_payload,
)
from easylog.core.history import find_set, group_sets_by_exercise, last_set
from easylog.core.models import LoggedSet, WorkoutSession
from easylog.core.state import CLIState
from easylog.utils.formatting import format_duration, format_timestamp, format_volume, format_weight

app = typer.Typer(help="Log a workout session")


def render_session(state: CLIState, session: WorkoutSession) -> None:
    """Print one session grouped by exercise."""
    store = state.store
    unit = state.weight_unit

    if state.plain_output:
        print_plain_rows(
            (store.exercise_name(exercise_id), s.set_number, s.weight, s.reps, "true" if s.is_completed else "false")
            for exercise_id, sets in group_sets_by_exercise(session)
            for s in sets
        )
        return

    state.console.print(
        f"[bold]{session.template_name}[/bold] · {format_timestamp(session.start_date)} · "
        f"{format_duration(session.duration)}"
    )
    for exercise_id, sets in group_sets_by_exercise(session):
        table = Table(title=store.exercise_name(exercise_id), title_justify="left")
        table.add_column("Set", justify="right")
        table.add_column("Weight", justify="right")
        table.add_column("Reps", justify="right")
        table.add_column("Done")
        for s in sets:
            table.add_row(str(s.set_number), format_weight(s.weight, unit), str(s.reps), "✓" if s.is_completed else "")
        state.console.print(table)
    state.console.print(
        f"{session.completed_sets_count}/{session.total_sets_count} sets completed · "
        f"{session.total_reps} reps · {format_volume(session.total_volume, unit)}"
    )


@app.command("start")
def start_command(
    ctx: typer.Context,
    template: Optional[str] = typer.Option(None, help="Template name or id"),
    name: Optional[str] = typer.Option(None, help="Name for a session without a template"),
) -> None:
    """Start a session from a template or an empty free session."""
    state = get_state(ctx)
    store = state.store

    if template and name:
        raise typer.BadParameter("Use either --template or --name, not both")

    active = store.active_session
    if active is not None:
        raise typer.BadParameter(f"Session '{active.template_name}' is still active. Finish or discard it first.")

    if template:
        source = require_template(store, template)
        session = store.start_session(source)
        removed = store.removed_exercise_count(source)
    else:
        session = store.start_free_session((name or "").strip() or "Workout")
        removed = 0

    if state.json_output:
        payload = session_payload(store, session)
        payload["removed_exercises"] = removed
        print_json_payload(state, payload)
        return
    state.console.print(f"Started {session.template_name}")
    if removed:
        state.console.print(f"{removed} exercise(s) removed from this template")


@app.command("log")
def log_command(
    ctx: typer.Context,
    exercise: str = typer.Argument(..., help="Exercise name or id"),
    weight: Optional[float] = typer.Option(None, min=0.0, help="Weight lifted (default: previous set)"),
    reps: Optional[int] = typer.Option(None, min=0, help="Repetitions (default: previous set)"),
    done: bool = typer.Option(True, "--done/--pending", help="Mark the set completed"),
    set_number: Optional[int] = typer.Option(None, min=1, help="Set number (default: next)"),
) -> None:
    """Log one set into the active session.

    Weight and reps left out are copied from the exercise's previous set in
    this session, or 0 for its first set.
    """
    state = get_state(ctx)
    store = state.store
    session = require_active_session(store)
    target = require_exercise(store, exercise)

    previous = last_set(session, target.id)
    if weight is None:
        weight = previous.weight if previous else 0.0
    if reps is None:
        reps = previous.reps if previous else 0

    number = set_number or store.next_set_number(session.id, target.id)
    logged = LoggedSet(exercise_id=target.id, set_number=number, weight=weight, reps=reps, is_completed=done)
    store.add_set(session.id, logged)

    if state.json_output:
        print_json_payload(
            state,
            {
                "session_id": str(session.id),
                "set_id": str(logged.id),
                "exercise": target.name,
                "set_number": logged.set_number,
                "weight": logged.weight,
                "reps": logged.reps,
                "completed": logged.is_completed,
            },
        )
        return
    state.console.print(
        f"{target.name} set {logged.set_number}: {format_weight(logged.weight, state.weight_unit)} x {logged.reps}"
    )


@app.command("finish")
def finish_command(ctx: typer.Context) -> None:
    """Finish the active session and move it to history."""
    state = get_state(ctx)
    store = state.store
    session = require_active_session(store)
    store.finish_session(session.id)
    finished = store.session(session.id) or session

    if state.json_output:
        print_json_payload(state, session_payload(store, finished))
        return
    state.console.print(
        f"Finished {finished.template_name}: {finished.completed_sets_count} completed set(s) saved"
    )


@app.command("discard")
def discard_command(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Discard without confirmation"),
) -> None:
    """Delete the active session and every set logged in it."""
    state = get_state(ctx)
    store = state.store
    session = require_active_session(store)

    if not force and not typer.confirm("Discard workout? All logged sets will be deleted."):
        raise typer.Exit(code=1)

    store.delete_session(session.id)
    if state.json_output:
        print_json_payload(state, {"discarded": True, "id": str(session.id)})
        return
    state.console.print(f"Discarded {session.template_name}")


@app.command("show")
def show_command(
    ctx: typer.Context,
    session_id: Optional[str] = typer.Argument(None, help="Session id (default: active session)"),
) -> None:
    """Show the active session or a past one."""
    state = get_state(ctx)
    store = state.store

    session = require_session(store, session_id) if session_id else require_active_session(store)

    if state.json_output:
        print_json_payload(state, session_payload(store, session))
        return
    render_session(state, session)


def _locate_set(ctx: typer.Context, exercise: str, set_number: int, session_id: Optional[str]):
    state = get_state(ctx)
    store = state.store
    session = require_session(store, session_id) if session_id else require_active_session(store)
    target = require_exercise(store, exercise)
    logged = find_set(session, target.id, set_number)
    if logged is None:
        raise typer.BadParameter(f"{target.name} has no set {set_number} in this session")
    return state, session, target, logged


@app.command("edit-set")
def edit_set_command(
    ctx: typer.Context,
    exercise: str = typer.Argument(..., help="Exercise name or id"),
    set_number: int = typer.Argument(..., min=1, help="Set number to change"),
    weight: Optional[float] = typer.Option(None, min=0.0, help="New weight"),
    reps: Optional[int] = typer.Option(None, min=0, help="New repetitions"),
    done: Optional[bool] = typer.Option(None, "--done/--pending", help="Mark the set completed or not"),
    session_id: Optional[str] = typer.Option(None, "--session", help="Session id (default: active session)"),
) -> None:
    """Correct the weight, reps or completion of a logged set."""
    state, session, target, logged = _locate_set(ctx, exercise, set_number, session_id)

    updated = replace(
        logged,
        weight=logged.weight if weight is None else weight,
        reps=logged.reps if reps is None else reps,
        is_completed=logged.is_completed if done is None else done,
    )
    state.store.update_set(session.id, updated)

    if state.json_output:
        print_json_payload(
            state,
            {
                "session_id": str(session.id),
                "set_id": str(updated.id),
                "exercise": target.name,
                "set_number": updated.set_number,
                "weight": updated.weight,
                "reps": updated.reps,
                "completed": updated.is_completed,
            },
        )
        return
    status = "done" if updated.is_completed else "pending"
    state.console.print(
        f"{target.name} set {updated.set_number}: "
        f"{format_weight(updated.weight, state.weight_unit)} x {updated.reps} ({status})"
    )


@app.command("delete-set")
def delete_set_command(
    ctx: typer.Context,
    exercise: str = typer.Argument(..., help="Exercise name or id"),
    set_number: int = typer.Argument(..., min=1, help="Set number to delete"),
    session_id: Optional[str] = typer.Option(None, "--session", help="Session id (default: active session)"),
) -> None:
    """Remove one logged set. Other sets keep their numbers."""
    state, session, target, logged = _locate_set(ctx, exercise, set_number, session_id)
    state.store.delete_set(session.id, logged.id)

    if state.json_output:
        print_json_payload(state, {"deleted": True, "session_id": str(session.id), "set_id": str(logged.id)})
        return
    state.console.print(f"Deleted {target.name} set {logged.set_number}")
