"""Read-only projections over sessions: history views and aggregates."""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from easylog.core.models import Exercise, LoggedSet, WorkoutSession, WorkoutTemplate

SessionSets = Tuple[WorkoutSession, List[LoggedSet]]


def completed_sessions(sessions: Iterable[WorkoutSession]) -> List[WorkoutSession]:
    """Finished sessions, most recent start first."""
    finished = [session for session in sessions if not session.is_active]
    # sorted() is stable, so equal start times keep store order.
    return sorted(finished, key=lambda session: session.start_date, reverse=True)


def sets_for_exercise(session: WorkoutSession, exercise_id: uuid.UUID) -> List[LoggedSet]:
    return [logged for logged in session.sets if logged.exercise_id == exercise_id]


def sessions_for_exercise(
    sessions: Iterable[WorkoutSession],
    exercise_id: uuid.UUID,
) -> List[SessionSets]:
    """Pair each completed session with its sets for one exercise.

    Sessions without a matching set are left out.
    """
    history: List[SessionSets] = []
    for session in completed_sessions(sessions):
        matching = sets_for_exercise(session, exercise_id)
        if matching:
            history.append((session, matching))
    return history


def valid_exercise_ids(template: WorkoutTemplate, exercises: Sequence[Exercise]) -> List[uuid.UUID]:
    known = {exercise.id for exercise in exercises}
    return [exercise_id for exercise_id in template.exercise_ids if exercise_id in known]


def group_sets_by_exercise(session: WorkoutSession) -> List[Tuple[uuid.UUID, List[LoggedSet]]]:
    """Group a session's sets per exercise in first-seen order, sorted by set number."""
    grouped: Dict[uuid.UUID, List[LoggedSet]] = {}
    for logged in session.sets:
        grouped.setdefault(logged.exercise_id, []).append(logged)
    return [
        (exercise_id, sorted(sets, key=lambda logged: logged.set_number))
        for exercise_id, sets in grouped.items()
    ]


def last_set(session: WorkoutSession, exercise_id: uuid.UUID) -> Optional[LoggedSet]:
    """The highest-numbered set of an exercise in a session."""
    matching = sorted(sets_for_exercise(session, exercise_id), key=lambda logged: logged.set_number)
    return matching[-1] if matching else None


def find_set(session: WorkoutSession, exercise_id: uuid.UUID, set_number: int) -> Optional[LoggedSet]:
    return next(
        (s for s in sets_for_exercise(session, exercise_id) if s.set_number == set_number),
        None,
    )


def next_set_number(session: WorkoutSession, exercise_id: uuid.UUID) -> int:
    previous = last_set(session, exercise_id)
    return previous.set_number + 1 if previous else 1


def session_totals(sets: Sequence[LoggedSet]) -> Dict[str, Any]:
    """Set, rep and volume totals for a list of sets."""
    return {
        "sets": len(sets),
        "completed_sets": sum(1 for logged in sets if logged.is_completed),
        "reps": sum(logged.reps for logged in sets),
        "volume": sum(logged.volume for logged in sets),
    }


def exercise_history_summary(history: Sequence[SessionSets]) -> Dict[str, Any]:
    """Aggregate an exercise's history as returned by ``sessions_for_exercise``."""
    all_sets = [logged for _, sets in history for logged in sets]
    totals = session_totals(all_sets)
    totals["sessions"] = len(history)
    totals["best_weight"] = max((logged.weight for logged in all_sets), default=0.0)
    totals["last_performed"] = history[0][0].start_date if history else None
    return totals
