from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict

import pytest
from typer.testing import CliRunner

from easylog.core.models import Exercise, ExerciseCategory, LoggedSet, WorkoutSession, WorkoutTemplate
from easylog.core.store import DataStore


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def store(data_dir: Path) -> DataStore:
    return DataStore(directory=data_dir)


@pytest.fixture()
def populated_store(store: DataStore) -> DataStore:
    """Store with two exercises, one template and one finished session."""
    chest = store.find_or_create_muscle_group("Chest")
    triceps = store.find_or_create_muscle_group("Triceps")
    legs = store.find_or_create_muscle_group("Legs")

    bench = Exercise(name="Bench Press", muscle_group_ids=[chest.id, triceps.id], category=ExerciseCategory.BARBELL)
    squat = Exercise(name="Squat", muscle_group_ids=[legs.id], category=ExerciseCategory.BARBELL)
    store.add_exercise(bench)
    store.add_exercise(squat)

    template = WorkoutTemplate(name="Full Body", exercise_ids=[bench.id, squat.id])
    store.add_template(template)

    session = store.start_session(template)
    store.add_set(session.id, LoggedSet(exercise_id=bench.id, set_number=1, weight=80, reps=10, is_completed=True))
    store.add_set(session.id, LoggedSet(exercise_id=bench.id, set_number=2, weight=80, reps=8, is_completed=True))
    store.add_set(session.id, LoggedSet(exercise_id=squat.id, set_number=1, weight=100, reps=5, is_completed=False))
    store.finish_session(session.id)
    return store


@pytest.fixture()
def make_session():
    def _make(name: str, start: datetime, finished: bool = True, **kwargs) -> WorkoutSession:
        return WorkoutSession(
            template_name=name,
            start_date=start,
            end_date=start + timedelta(hours=1) if finished else None,
            **kwargs,
        )

    return _make


@pytest.fixture()
def utc():
    def _utc(*args: int) -> datetime:
        return datetime(*args, tzinfo=timezone.utc)

    return _utc


@pytest.fixture()
def write_temp_csv(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def sample_plan() -> Dict[str, object]:
    return {
        "templates": [
            {
                "name": "Push Day",
                "exercises": [
                    {"name": "Bench Press", "category": "barbell", "muscle_groups": ["Chest", "Triceps"]},
                    {"name": "Overhead Press", "category": "Barbell", "muscle_groups": "Shoulders"},
                    "Dips",
                ],
            }
        ]
    }
