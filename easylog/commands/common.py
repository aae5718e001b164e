"""Shared command helpers."""

from __future__ import annotations

import json
import uuid
from typing import Any, Iterable, Optional

import typer

from easylog.core.models import Exercise, MuscleGroup, WorkoutSession, WorkoutTemplate
from easylog.core.state import CLIState
from easylog.core.store import DataStore


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)


def print_plain_rows(rows: Iterable[Iterable[Any]]) -> None:
    """Print tab-separated rows for shell pipelines."""
    for row in rows:
        typer.echo("\t".join("" if value is None else str(value) for value in row))


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def require_muscle_group(store: DataStore, key: str) -> MuscleGroup:
    """Look a muscle group up by id or case-insensitive name."""
    group_id = _parse_uuid(key)
    group = store.muscle_group(group_id) if group_id else store.find_muscle_group_by_name(key)
    if group is None:
        raise typer.BadParameter(f"Unknown muscle group: {key}")
    return group


def require_exercise(store: DataStore, key: str) -> Exercise:
    """Look an exercise up by id or case-insensitive name."""
    exercise_id = _parse_uuid(key)
    exercise = store.exercise(exercise_id) if exercise_id else store.find_exercise_by_name(key)
    if exercise is None:
        raise typer.BadParameter(f"Unknown exercise: {key}")
    return exercise


def require_template(store: DataStore, key: str) -> WorkoutTemplate:
    """Look a template up by id or case-insensitive name."""
    template_id = _parse_uuid(key)
    template = store.template(template_id) if template_id else store.find_template_by_name(key)
    if template is None:
        raise typer.BadParameter(f"Unknown template: {key}")
    return template


def require_session(store: DataStore, key: str) -> WorkoutSession:
    """Look a session up by id or by a unique id prefix."""
    session_id = _parse_uuid(key)
    if session_id:
        session = store.session(session_id)
    else:
        prefix = key.strip().lower()
        matches = [s for s in store.sessions if prefix and str(s.id).startswith(prefix)]
        session = matches[0] if len(matches) == 1 else None
    if session is None:
        raise typer.BadParameter(f"Unknown session: {key}")
    return session


def require_active_session(store: DataStore) -> WorkoutSession:
    session = store.active_session
    if session is None:
        raise typer.BadParameter("No active session. Start one with 'easylog session start'.")
    return session


def exercise_payload(store: DataStore, exercise: Exercise) -> dict:
    return {
        "id": str(exercise.id),
        "name": exercise.name,
        "category": exercise.category.value,
        "muscle_groups": store.muscle_group_names(exercise),
        "primary_muscle_group": store.primary_muscle_group_name(exercise),
    }


def session_payload(store: DataStore, session: WorkoutSession) -> dict:
    return {
        "id": str(session.id),
        "template_name": session.template_name,
        "template_id": str(session.template_id) if session.template_id else None,
        "start_date": session.start_date.isoformat(),
        "end_date": session.end_date.isoformat() if session.end_date else None,
        "active": session.is_active,
        "sets": [
            {
                "id": str(logged.id),
                "exercise": store.exercise_name(logged.exercise_id),
                "set_number": logged.set_number,
                "weight": logged.weight,
                "reps": logged.reps,
                "completed": logged.is_completed,
            }
            for logged in session.sets
        ],
        "totals": {
            "sets": session.total_sets_count,
            "completed_sets": session.completed_sets_count,
            "reps": session.total_reps,
            "volume": session.total_volume,
        },
    }
