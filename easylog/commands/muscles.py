"""Muscle group commands."""

from __future__ import annotations

import typer
from rich.table import Table

from easylog.commands.common import get_state, print_json_payload, print_plain_rows, require_muscle_group

app = typer.Typer(help="Manage muscle groups")


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List muscle groups in their stored order."""
    state = get_state(ctx)
    store = state.store
    usage = {
        group.id: sum(1 for exercise in store.exercises if group.id in exercise.muscle_group_ids)
        for group in store.muscle_groups
    }

    if state.json_output:
        print_json_payload(
            state,
            [{"id": str(group.id), "name": group.name, "exercises": usage[group.id]} for group in store.muscle_groups],
        )
        return

    if state.plain_output:
        print_plain_rows((group.id, group.name, usage[group.id]) for group in store.muscle_groups)
        return

    table = Table(title="Muscle Groups")
    table.add_column("Name")
    table.add_column("Exercises", justify="right")
    for group in store.muscle_groups:
        table.add_row(group.name, str(usage[group.id]))
    state.console.print(table)


@app.command("add")
def add_command(ctx: typer.Context, name: str = typer.Argument(..., help="Muscle group name")) -> None:
    """Add a muscle group unless one with the same name exists."""
    state = get_state(ctx)
    store = state.store
    before = len(store.muscle_groups)
    try:
        group = store.find_or_create_muscle_group(name)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    created = len(store.muscle_groups) > before

    if state.json_output:
        print_json_payload(state, {"id": str(group.id), "name": group.name, "created": created})
        return
    message = f"Added muscle group {group.name}" if created else f"Muscle group {group.name} already exists"
    state.console.print(message)


@app.command("rename")
def rename_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Current name or id"),
    new_name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a muscle group; exercises keep pointing at it."""
    state = get_state(ctx)
    store = state.store
    group = require_muscle_group(store, name)
    cleaned = new_name.strip()
    if not cleaned:
        raise typer.BadParameter("New name must not be empty")
    clash = store.find_muscle_group_by_name(cleaned)
    if clash is not None and clash.id != group.id:
        raise typer.BadParameter(f"Muscle group {clash.name} already exists")

    old_name = group.name
    group.name = cleaned
    store.update_muscle_group(group)

    if state.json_output:
        print_json_payload(state, {"id": str(group.id), "old_name": old_name, "name": group.name})
        return
    state.console.print(f"Renamed {old_name} to {group.name}")


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name or id"),
    force: bool = typer.Option(False, "--force", help="Delete without confirmation"),
) -> None:
    """Delete a muscle group. Exercises that used it show no group instead."""
    state = get_state(ctx)
    store = state.store
    group = require_muscle_group(store, name)

    if not force and not typer.confirm(f"Delete muscle group {group.name}?"):
        raise typer.Exit(code=1)

    store.delete_muscle_group(group.id)
    if state.json_output:
        print_json_payload(state, {"deleted": True, "id": str(group.id), "name": group.name})
        return
    state.console.print(f"Deleted muscle group {group.name}")
