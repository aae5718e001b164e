"""Create templates, exercises and muscle groups from parsed plan files."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from easylog.core.models import Exercise, WorkoutTemplate
from easylog.core.store import DataStore


def resolve_plan_exercise(store: DataStore, entry: Dict[str, Any]) -> Tuple[Exercise, bool]:
    """Find an exercise by name ignoring case, or create it. Returns (exercise, created)."""
    existing = store.find_exercise_by_name(entry["name"])
    if existing is not None:
        return existing, False
    group_ids = [store.find_or_create_muscle_group(name).id for name in entry["muscle_groups"]]
    exercise = Exercise(name=entry["name"], muscle_group_ids=group_ids, category=entry["category"])
    store.add_exercise(exercise)
    return exercise, True


def apply_plans(store: DataStore, plans: List[Dict[str, Any]], replace: bool = False) -> List[Dict[str, Any]]:
    """Add each plan as a template.

    A template whose name already exists is skipped unless ``replace`` is
    set, in which case its exercise list is rewritten in place.
    """
    results: List[Dict[str, Any]] = []
    for plan in plans:
        existing = store.find_template_by_name(plan["name"])
        if existing is not None and not replace:
            results.append({"status": "skipped", "template": existing.name, "reason": "exists"})
            continue

        created = 0
        exercise_ids = []
        for entry in plan["exercises"]:
            exercise, was_created = resolve_plan_exercise(store, entry)
            exercise_ids.append(exercise.id)
            created += int(was_created)

        if existing is not None:
            existing.exercise_ids = exercise_ids
            store.update_template(existing)
            status = "updated"
            template = existing
        else:
            template = WorkoutTemplate(name=plan["name"], exercise_ids=exercise_ids)
            store.add_template(template)
            status = "created"

        results.append(
            {
                "status": status,
                "template": template.name,
                "template_id": str(template.id),
                "exercises": len(exercise_ids),
                "exercises_created": created,
            }
        )
    return results
