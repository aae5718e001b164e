"""Exercise commands."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.table import Table

from easylog.commands.common import (
    exercise_payload,
    get_state,
    print_json_payload,
    print_plain_rows,
    require_exercise,
)
from easylog.core.history import exercise_history_summary
from easylog.core.models import Exercise
from easylog.utils.formatting import format_timestamp, format_volume, format_weight
from easylog.utils.parsing import parse_category

app = typer.Typer(help="Manage exercises")


@app.command("list")
def list_command(
    ctx: typer.Context,
    muscle: Optional[str] = typer.Option(None, help="Only exercises that train this muscle group"),
) -> None:
    """List exercises grouped by primary muscle group."""
    state = get_state(ctx)
    store = state.store
    exercises = list(store.exercises)
    if muscle:
        wanted = muscle.strip().casefold()
        exercises = [
            exercise
            for exercise in exercises
            if any(name.casefold() == wanted for name in store.muscle_group_names(exercise))
        ]
    exercises.sort(key=lambda exercise: (store.primary_muscle_group_name(exercise), exercise.name.casefold()))

    if state.json_output:
        print_json_payload(state, [exercise_payload(store, exercise) for exercise in exercises])
        return

    if state.plain_output:
        print_plain_rows(
            (exercise.id, exercise.name, exercise.category.value, store.muscle_group_names_joined(exercise))
            for exercise in exercises
        )
        return

    table = Table(title=f"Exercises ({len(exercises)})")
    table.add_column("Primary")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Muscle Groups")
    for exercise in exercises:
        table.add_row(
            store.primary_muscle_group_name(exercise),
            exercise.name,
            exercise.category.value,
            store.muscle_group_names_joined(exercise),
        )
    state.console.print(table)


@app.command("add")
def add_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Exercise name"),
    category: str = typer.Option("Other", help="Barbell|Dumbbell|Machine|Bodyweight|Cable|Other"),
    muscle: List[str] = typer.Option([], "--muscle", "-m", help="Muscle group; repeat, first is primary"),
) -> None:
    """Add an exercise. Unknown muscle groups are created."""
    state = get_state(ctx)
    store = state.store
    if store.find_exercise_by_name(name) is not None:
        raise typer.BadParameter(f"Exercise {name.strip()} already exists")

    try:
        group_ids = [store.find_or_create_muscle_group(group).id for group in muscle if group.strip()]
        exercise = Exercise(name=name, muscle_group_ids=group_ids, category=parse_category(category))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    store.add_exercise(exercise)

    if state.json_output:
        print_json_payload(state, exercise_payload(store, exercise))
        return
    state.console.print(f"Added exercise {exercise.name} ({store.muscle_group_names_joined(exercise)})")


@app.command("rename")
def rename_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Current name or id"),
    new_name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename an exercise."""
    state = get_state(ctx)
    store = state.store
    exercise = require_exercise(store, name)
    clash = store.find_exercise_by_name(new_name)
    if clash is not None and clash.id != exercise.id:
        raise typer.BadParameter(f"Exercise {clash.name} already exists")

    old_name = exercise.name
    try:
        renamed = Exercise(
            id=exercise.id,
            name=new_name,
            muscle_group_ids=list(exercise.muscle_group_ids),
            category=exercise.category,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    store.update_exercise(renamed)

    if state.json_output:
        print_json_payload(state, {"id": str(renamed.id), "old_name": old_name, "name": renamed.name})
        return
    state.console.print(f"Renamed {old_name} to {renamed.name}")


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name or id"),
    force: bool = typer.Option(False, "--force", help="Delete without confirmation"),
) -> None:
    """Delete an exercise. Logged sets and templates keep its id."""
    state = get_state(ctx)
    store = state.store
    exercise = require_exercise(store, name)

    if not force and not typer.confirm(f"Delete exercise {exercise.name}?"):
        raise typer.Exit(code=1)

    store.delete_exercise(exercise.id)
    if state.json_output:
        print_json_payload(state, {"deleted": True, "id": str(exercise.id), "name": exercise.name})
        return
    state.console.print(f"Deleted exercise {exercise.name}")


@app.command("history")
def history_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name or id"),
    limit: Optional[int] = typer.Option(None, help="Show only the N most recent sessions"),
) -> None:
    """Show completed sessions that include an exercise."""
    state = get_state(ctx)
    store = state.store
    exercise = require_exercise(store, name)
    entries = store.sessions_for_exercise(exercise.id)
    summary = exercise_history_summary(entries)
    if limit is not None:
        entries = entries[:limit]

    if state.json_output:
        payload = {
            "exercise": exercise_payload(store, exercise),
            "summary": {
                **summary,
                "last_performed": summary["last_performed"].isoformat() if summary["last_performed"] else None,
            },
            "sessions": [
                {
                    "id": str(session.id),
                    "template_name": session.template_name,
                    "start_date": session.start_date.isoformat(),
                    "sets": [
                        {"set_number": s.set_number, "weight": s.weight, "reps": s.reps, "completed": s.is_completed}
                        for s in sets
                    ],
                }
                for session, sets in entries
            ],
        }
        print_json_payload(state, payload)
        return

    if state.plain_output:
        print_plain_rows(
            (format_timestamp(session.start_date), session.template_name, s.set_number, s.weight, s.reps)
            for session, sets in entries
            for s in sets
        )
        return

    unit = state.weight_unit
    if not entries:
        state.console.print(f"No completed sessions include {exercise.name}.")
        return

    table = Table(title=f"{exercise.name} history")
    table.add_column("Date")
    table.add_column("Workout")
    table.add_column("Sets")
    for session, sets in entries:
        table.add_row(
            format_timestamp(session.start_date),
            session.template_name,
            ", ".join(f"{format_weight(s.weight, unit)} x {s.reps}" for s in sets),
        )
    state.console.print(table)
    state.console.print(
        f"{summary['sessions']} session(s) · {summary['sets']} set(s) · {summary['reps']} reps · "
        f"{format_volume(summary['volume'], unit)} · best {format_weight(summary['best_weight'], unit)}"
    )
