from __future__ import annotations

import uuid
from pathlib import Path

import pytest

from easylog.core.constants import CSV_HEADER
from easylog.core.models import Exercise, ExerciseCategory, LoggedSet, WorkoutSession
from easylog.core.store import DataStore
from easylog.exporters.csv_codec import (
    csv_escape,
    csv_unescape,
    export_csv,
    export_filename,
    export_to_file,
    import_csv,
    import_csv_text,
    parse_csv_line,
    write_export,
)


def _row(session_id: str, exercise: str = "Squat", weight: str = "100.0", **overrides: str) -> str:
    fields = {
        "session_id": session_id,
        "session_date": "2026-02-14T08:00:00Z",
        "session_end_date": "2026-02-14T09:00:00Z",
        "template_name": "Legs",
        "exercise_name": exercise,
        "muscle_group": "Legs",
        "category": "Barbell",
        "set_number": "1",
        "weight": weight,
        "reps": "5",
        "completed": "true",
    }
    fields.update(overrides)
    return ",".join(fields.values())


def test_header_is_stable() -> None:
    assert CSV_HEADER == (
        "session_id,session_date,session_end_date,template_name,exercise_name,"
        "muscle_group,category,set_number,weight,reps,completed"
    )


def test_parse_csv_line_simple_and_quoted() -> None:
    assert parse_csv_line("a,b,c") == ["a", "b", "c"]
    quoted = parse_csv_line('"hello, world",b,c')
    assert len(quoted) == 3
    assert quoted[0] == '"hello, world"'


def test_parse_csv_line_keeps_empty_fields() -> None:
    assert parse_csv_line("a,,c,") == ["a", "", "c", ""]


def test_csv_escape_and_unescape() -> None:
    assert csv_escape("plain") == "plain"
    assert csv_escape("a,b") == '"a,b"'
    assert csv_escape('say "hi"') == '"say ""hi"""'
    assert csv_escape("two\nlines") == '"two\nlines"'
    assert csv_unescape('"say ""hi"""') == 'say "hi"'
    assert csv_unescape(' "a,b" ') == "a,b"
    assert csv_unescape("plain") == "plain"


def test_export_empty_store_is_header_only(store: DataStore) -> None:
    lines = export_csv(store).split("\n")
    assert lines == [CSV_HEADER]


def test_export_with_data(populated_store: DataStore) -> None:
    lines = export_csv(populated_store).split("\n")
    assert len(lines) == 4
    assert lines[0] == CSV_HEADER

    session = populated_store.sessions[0]
    fields = parse_csv_line(lines[1])
    assert fields[0] == str(session.id)
    assert fields[1].endswith("Z")
    assert fields[3] == "Full Body"
    assert fields[4] == "Bench Press"
    assert fields[5] == "Chest;Triceps"
    assert fields[6] == "Barbell"
    assert fields[7:] == ["1", "80.0", "10", "true"]
    assert parse_csv_line(lines[3])[10] == "false"


def test_export_skips_active_sessions(store: DataStore) -> None:
    session = store.start_free_session("Active")
    store.add_set(session.id, LoggedSet(exercise_id=uuid.uuid4(), set_number=1))
    assert export_csv(store) == CSV_HEADER


def test_export_orders_sessions_newest_first(store: DataStore, make_session, utc) -> None:
    exercise = Exercise(name="Row")
    store.add_exercise(exercise)
    for name, day in (("Older", 1), ("Newer", 2)):
        store.add_session_from_import(
            make_session(name, utc(2026, 1, day, 8), sets=[LoggedSet(exercise_id=exercise.id, set_number=1)])
        )
    rows = export_csv(store).split("\n")[1:]
    assert [parse_csv_line(row)[3] for row in rows] == ["Newer", "Older"]


def test_export_escapes_and_uses_placeholders(store: DataStore, utc) -> None:
    session = WorkoutSession(
        template_name='Push, "heavy"',
        start_date=utc(2026, 2, 14, 8),
        end_date=utc(2026, 2, 14, 9, 30),
        sets=[LoggedSet(exercise_id=uuid.uuid4(), set_number=1, weight=20.5, reps=8)],
    )
    store.add_session_from_import(session)

    row = export_csv(store).split("\n")[1]
    fields = parse_csv_line(row)
    assert fields[1] == "2026-02-14T08:00:00Z"
    assert fields[2] == "2026-02-14T09:30:00Z"
    assert fields[3] == '"Push, ""heavy"""'
    assert fields[4:7] == ["Unknown Exercise", "Unknown", "Other"]
    assert fields[8] == "20.5"


def test_export_quotes_muscle_groups_containing_commas(store: DataStore) -> None:
    group = store.find_or_create_muscle_group("Upper, Back")
    exercise = Exercise(name="Row", muscle_group_ids=[group.id, store.muscle_groups[0].id])
    store.add_exercise(exercise)
    session = store.start_free_session("Pull")
    store.add_set(session.id, LoggedSet(exercise_id=exercise.id, set_number=1))
    store.finish_session(session.id)

    fields = parse_csv_line(export_csv(store).split("\n")[1])
    assert len(fields) == 11
    assert csv_unescape(fields[5]) == "Upper, Back;Chest"


def test_export_filename_is_filesystem_safe(utc) -> None:
    name = export_filename(utc(2026, 2, 14, 8, 30, 15))
    assert name == "easylog_export_2026-02-14T08-30-15Z.csv"
    assert ":" not in name


def test_export_to_file_writes_csv(populated_store: DataStore, tmp_path: Path) -> None:
    path = export_to_file(populated_store, tmp_path / "exports")
    assert path is not None
    assert path.parent == tmp_path / "exports"
    assert "Squat" in path.read_text(encoding="utf-8")


def test_export_to_file_returns_none_on_write_error(
    populated_store: DataStore, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _boom(*args, **kwargs):
        raise OSError("no space")

    monkeypatch.setattr("easylog.exporters.csv_codec.atomic_write_text", _boom)
    assert export_to_file(populated_store, tmp_path) is None


def test_write_export_replaces_file_atomically(
    populated_store: DataStore, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "exports" / "workouts.csv"
    target.parent.mkdir()
    target.write_text("previous export")

    def _boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("easylog.core.persistence.os.replace", _boom)
    assert write_export(populated_store, target) is None
    assert target.read_text() == "previous export"
    assert [p.name for p in target.parent.iterdir()] == ["workouts.csv"]

    monkeypatch.undo()
    assert write_export(populated_store, target) == target
    assert target.read_text().startswith(CSV_HEADER)


def test_round_trip_into_fresh_store(populated_store: DataStore, tmp_path: Path, write_temp_csv) -> None:
    csv_path = write_temp_csv("export.csv", export_csv(populated_store))
    fresh = DataStore(directory=tmp_path / "fresh")

    result = import_csv(csv_path, fresh)

    assert result.sessions_imported == 1
    assert result.sets_imported == 3
    assert result.exercises_created == 2
    assert result.rows_skipped == 0
    assert result.errors == []

    original = populated_store.sessions[0]
    imported = fresh.sessions[0]
    assert imported.id == original.id
    assert imported.template_id is None
    assert imported.template_name == "Full Body"
    assert imported.start_date == original.start_date.replace(microsecond=0)
    assert imported.end_date is not None
    assert [(s.set_number, s.weight, s.reps, s.is_completed) for s in imported.sets] == [
        (1, 80.0, 10, True),
        (2, 80.0, 8, True),
        (1, 100.0, 5, False),
    ]

    bench = fresh.find_exercise_by_name("bench press")
    assert bench is not None
    assert bench.category is ExerciseCategory.BARBELL
    assert fresh.muscle_group_names(bench) == ["Chest", "Triceps"]
    assert len(fresh.muscle_groups) == 10


def test_reimport_into_original_store_skips_duplicates(populated_store: DataStore, write_temp_csv) -> None:
    csv_path = write_temp_csv("export.csv", export_csv(populated_store))

    result = import_csv(csv_path, populated_store)

    assert result.sessions_imported == 0
    assert result.rows_skipped == 3
    assert result.errors == []
    assert len(populated_store.sessions) == 1


def test_import_invalid_header(store: DataStore, write_temp_csv) -> None:
    result = import_csv(write_temp_csv("bad.csv", "bad,header,format\n1,2,3"), store)
    assert result.sessions_imported == 0
    assert len(result.errors) == 1
    assert "Invalid header" in result.errors[0]
    assert "expected 11 columns, got 3" in result.errors[0]


def test_header_check_counts_columns_only(store: DataStore) -> None:
    renamed_header = ",".join(f"col{index}" for index in range(11))
    result = import_csv_text(renamed_header + "\n" + _row(str(uuid.uuid4())), store)
    assert result.sessions_imported == 1


def test_import_missing_file(store: DataStore, tmp_path: Path) -> None:
    result = import_csv(tmp_path / "missing.csv", store)
    assert result.errors == ["Cannot read file"]


@pytest.mark.parametrize("content", ["", CSV_HEADER, CSV_HEADER + "\n\n"])
def test_import_without_data_rows(store: DataStore, content: str) -> None:
    result = import_csv_text(content, store)
    assert result.errors == ["File is empty or has no data rows"]
    assert store.sessions == []


def test_non_numeric_weight_skips_only_that_row(store: DataStore) -> None:
    session_id = str(uuid.uuid4())
    content = "\n".join(
        [
            CSV_HEADER,
            _row(session_id, weight="heavy"),
            _row(session_id, set_number="2"),
            _row(session_id, set_number="3"),
        ]
    )
    result = import_csv_text(content, store)

    assert result.sessions_imported == 1
    assert result.sets_imported == 2
    assert result.rows_skipped == 1
    assert result.errors == ["Row 2: invalid numeric values"]
    assert [s.set_number for s in store.sessions[0].sets] == [2, 3]


def test_invalid_session_id_is_reported_with_row_number(store: DataStore) -> None:
    content = "\n".join([CSV_HEADER, _row(str(uuid.uuid4())), _row("not-a-uuid")])
    result = import_csv_text(content, store)
    assert result.rows_skipped == 1
    assert result.errors == ["Row 3: invalid session ID"]
    assert result.sessions_imported == 1


def test_wrong_field_count_is_skipped_silently(store: DataStore) -> None:
    content = "\n".join([CSV_HEADER, "a,b,c", _row(str(uuid.uuid4()))])
    result = import_csv_text(content, store)
    assert result.rows_skipped == 1
    assert result.errors == []
    assert result.sessions_imported == 1


def test_session_fields_come_from_first_row(store: DataStore, utc) -> None:
    session_id = str(uuid.uuid4())
    content = "\n".join(
        [
            CSV_HEADER,
            _row(session_id, template_name='"Legs, heavy"'),
            _row(session_id, template_name="Ignored", session_date="2030-01-01T00:00:00Z", set_number="2"),
        ]
    )
    import_csv_text(content, store)
    session = store.sessions[0]
    assert session.template_name == "Legs, heavy"
    assert session.start_date == utc(2026, 2, 14, 8)
    assert session.end_date == utc(2026, 2, 14, 9)
    assert len(session.sets) == 2


def test_blank_end_date_imports_as_active_and_bad_start_falls_back(store: DataStore) -> None:
    content = "\n".join([CSV_HEADER, _row(str(uuid.uuid4()), session_date="yesterday", session_end_date="")])
    result = import_csv_text(content, store)
    assert result.sessions_imported == 1
    session = store.sessions[0]
    assert session.is_active
    assert session.start_date is not None


def test_exercises_resolve_case_insensitively_within_one_import(store: DataStore) -> None:
    store.add_exercise(Exercise(name="Bench Press", category=ExerciseCategory.BARBELL))
    first = str(uuid.uuid4())
    second = str(uuid.uuid4())
    content = "\n".join(
        [
            CSV_HEADER,
            _row(first, exercise="bench press"),
            _row(first, exercise="Goblet Squat", category="Dumbbell", muscle_group="Legs;glutes"),
            _row(second, exercise="GOBLET SQUAT", category="Kettlebell"),
        ]
    )
    result = import_csv_text(content, store)

    assert result.sessions_imported == 2
    assert result.exercises_created == 1
    assert [e.name for e in store.exercises] == ["Bench Press", "Goblet Squat"]
    goblet = store.exercises[1]
    assert goblet.category is ExerciseCategory.DUMBBELL
    assert store.muscle_group_names(goblet) == ["Legs", "Glutes"]


def test_unknown_category_and_new_muscle_groups(store: DataStore) -> None:
    content = "\n".join(
        [
            CSV_HEADER,
            _row(str(uuid.uuid4()), exercise="Farmer Carry", category="Kettlebell", muscle_group='" Forearms ; ;Grip"'),
        ]
    )
    before = len(store.muscle_groups)
    import_csv_text(content, store)

    carry = store.find_exercise_by_name("Farmer Carry")
    assert carry is not None
    assert carry.category is ExerciseCategory.OTHER
    assert store.muscle_group_names(carry) == ["Forearms", "Grip"]
    assert len(store.muscle_groups) == before + 2


def test_completed_flag_parsing(store: DataStore) -> None:
    session_id = str(uuid.uuid4())
    content = "\n".join(
        [
            CSV_HEADER,
            _row(session_id, completed=" TRUE "),
            _row(session_id, completed="yes", set_number="2"),
            _row(session_id, completed="false", set_number="3"),
        ]
    )
    result = import_csv_text(content, store)
    assert result.errors == []
    assert [s.is_completed for s in store.sessions[0].sets] == [True, False, False]


def test_missing_exercise_name_is_skipped(store: DataStore) -> None:
    content = "\n".join([CSV_HEADER, _row(str(uuid.uuid4()), exercise='""')])
    result = import_csv_text(content, store)
    assert result.rows_skipped == 1
    assert result.errors == ["Row 2: missing exercise name"]
    assert store.exercises == []


def test_import_tolerates_byte_order_mark(store: DataStore, tmp_path: Path) -> None:
    path = tmp_path / "excel.csv"
    path.write_text(CSV_HEADER + "\r\n" + _row(str(uuid.uuid4())) + "\r\n", encoding="utf-8-sig")
    result = import_csv(path, store)
    assert result.sessions_imported == 1
    assert result.errors == []


def test_row_numbers_count_blank_lines(store: DataStore) -> None:
    session_id = str(uuid.uuid4())
    content = "\n".join([CSV_HEADER, "", _row(session_id), "", _row(session_id, reps="many")])
    result = import_csv_text(content, store)
    assert result.errors == ["Row 5: invalid numeric values"]
    assert result.sets_imported == 1


def test_whitespace_only_lines_are_ignored(store: DataStore) -> None:
    content = "\n".join([CSV_HEADER, "   ", _row(str(uuid.uuid4()))])
    result = import_csv_text(content, store)
    assert result.rows_skipped == 0
    assert result.sessions_imported == 1
