"""Workout template commands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from easylog.commands.common import (
    get_state,
    print_json_payload,
    print_plain_rows,
    require_exercise,
    require_template,
)
from easylog.core.constants import UNKNOWN_EXERCISE
from easylog.core.models import WorkoutTemplate
from easylog.core.plans import apply_plans
from easylog.utils.parsing import load_plan_input

app = typer.Typer(help="Manage workout templates")


def _removed_note(count: int) -> str:
    return f"{count} exercise(s) removed" if count else ""


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List templates with their exercise counts."""
    state = get_state(ctx)
    store = state.store
    rows = [
        (template, len(store.valid_exercise_ids(template)), store.removed_exercise_count(template))
        for template in store.templates
    ]

    if state.json_output:
        print_json_payload(
            state,
            [
                {"id": str(t.id), "name": t.name, "exercises": valid, "removed_exercises": removed}
                for t, valid, removed in rows
            ],
        )
        return

    if state.plain_output:
        print_plain_rows((t.id, t.name, valid, removed) for t, valid, removed in rows)
        return

    table = Table(title="Templates")
    table.add_column("Name")
    table.add_column("Exercises", justify="right")
    table.add_column("Notes")
    for template, valid, removed in rows:
        table.add_row(template.name, str(valid), _removed_note(removed))
    state.console.print(table)


@app.command("add")
def add_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Template name"),
    exercise: List[str] = typer.Option([], "--exercise", "-e", help="Exercise name or id; repeat in order"),
) -> None:
    """Create a template from existing exercises."""
    state = get_state(ctx)
    store = state.store
    cleaned = name.strip()
    if not cleaned:
        raise typer.BadParameter("Template name must not be empty")

    exercise_ids = [require_exercise(store, key).id for key in exercise]
    template = WorkoutTemplate(name=cleaned, exercise_ids=exercise_ids)
    store.add_template(template)

    if state.json_output:
        print_json_payload(
            state, {"id": str(template.id), "name": template.name, "exercises": len(template.exercise_ids)}
        )
        return
    state.console.print(f"Added template {template.name} with {len(template.exercise_ids)} exercise(s)")


@app.command("show")
def show_command(ctx: typer.Context, name: str = typer.Argument(..., help="Name or id")) -> None:
    """Show a template's exercises in order."""
    state = get_state(ctx)
    store = state.store
    template = require_template(store, name)
    removed = store.removed_exercise_count(template)

    entries = []
    for exercise_id in template.exercise_ids:
        exercise = store.exercise(exercise_id)
        entries.append(
            {
                "id": str(exercise_id),
                "name": exercise.name if exercise else UNKNOWN_EXERCISE,
                "muscle_groups": store.muscle_group_names_joined(exercise) if exercise else "",
                "category": exercise.category.value if exercise else "",
                "missing": exercise is None,
            }
        )

    if state.json_output:
        print_json_payload(
            state,
            {"id": str(template.id), "name": template.name, "removed_exercises": removed, "exercises": entries},
        )
        return

    if state.plain_output:
        print_plain_rows((index, e["name"], e["category"], e["muscle_groups"]) for index, e in enumerate(entries, 1))
        return

    table = Table(title=template.name)
    table.add_column("#", justify="right")
    table.add_column("Exercise")
    table.add_column("Muscle Groups")
    table.add_column("Category")
    for index, entry in enumerate(entries, 1):
        table.add_row(str(index), entry["name"], entry["muscle_groups"], entry["category"])
    state.console.print(table)
    if removed:
        state.console.print(_removed_note(removed))


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name or id"),
    force: bool = typer.Option(False, "--force", help="Delete without confirmation"),
) -> None:
    """Delete a template. Past sessions keep their copied name."""
    state = get_state(ctx)
    store = state.store
    template = require_template(store, name)

    if not force and not typer.confirm(f"Delete template {template.name}?"):
        raise typer.Exit(code=1)

    store.delete_template(template.id)
    if state.json_output:
        print_json_payload(state, {"deleted": True, "id": str(template.id), "name": template.name})
        return
    state.console.print(f"Deleted template {template.name}")


@app.command("edit")
def edit_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name or id"),
    new_name: Optional[str] = typer.Option(None, "--rename", help="New template name"),
    exercise: List[str] = typer.Option(
        [], "--exercise", "-e", help="Replace the exercise list; repeat in the new order"
    ),
    remove: List[int] = typer.Option([], "--remove", help="Remove the exercise at this 1-based position; repeatable"),
    drop_missing: bool = typer.Option(False, "--drop-missing", help="Remove exercises that no longer exist"),
) -> None:
    """Rename a template or change its exercises."""
    state = get_state(ctx)
    store = state.store
    template = require_template(store, name)

    cleaned = template.name if new_name is None else new_name.strip()
    if not cleaned:
        raise typer.BadParameter("Template name must not be empty")

    exercise_ids = [require_exercise(store, key).id for key in exercise] if exercise else list(template.exercise_ids)
    bad_positions = [position for position in remove if not 1 <= position <= len(exercise_ids)]
    if bad_positions:
        raise typer.BadParameter(f"No exercise at position(s): {', '.join(map(str, bad_positions))}")
    dropped = {position - 1 for position in remove}
    exercise_ids = [exercise_id for index, exercise_id in enumerate(exercise_ids) if index not in dropped]
    if drop_missing:
        exercise_ids = [exercise_id for exercise_id in exercise_ids if store.exercise(exercise_id) is not None]

    updated = WorkoutTemplate(id=template.id, name=cleaned, exercise_ids=exercise_ids)
    store.update_template(updated)

    if state.json_output:
        print_json_payload(
            state, {"id": str(updated.id), "name": updated.name, "exercises": len(updated.exercise_ids)}
        )
        return
    state.console.print(f"Updated template {updated.name} with {len(updated.exercise_ids)} exercise(s)")


@app.command("load")
def load_command(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(None, help="JSON/YAML file with template(s)"),
    stdin: bool = typer.Option(False, "--stdin", help="Read template data from stdin"),
    replace: bool = typer.Option(False, help="Rewrite templates that already exist"),
) -> None:
    """Create templates, exercises and muscle groups from a plan file."""
    state = get_state(ctx)

    stdin_text = sys.stdin.read() if stdin else ""
    try:
        plans = load_plan_input(file_path=file, read_stdin=stdin, stdin_text=stdin_text)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if not plans:
        raise typer.BadParameter("Provide --file or --stdin with at least one template")

    results = apply_plans(state.store, plans, replace=replace)

    if state.json_output:
        print_json_payload(state, {"results": results})
        return

    if state.plain_output:
        print_plain_rows((r["status"], r["template"], r.get("exercises", "")) for r in results)
        return

    for result in results:
        if result["status"] == "skipped":
            state.console.print(f"Skipped {result['template']}: already exists (use --replace)")
        else:
            state.console.print(
                f"{result['status'].capitalize()} {result['template']} with {result['exercises']} exercise(s), "
                f"{result['exercises_created']} new"
            )
    state.console.print(f"Processed {len(results)} template(s)")
