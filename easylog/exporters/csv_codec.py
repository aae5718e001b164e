"""CSV export and import of completed sessions.

One row per logged set; session fields repeat on every row of the
session. Muscle groups share one column, separated by ``;``.
"""

from __future__ import annotations

import logging
import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from easylog.core.constants import (
    CSV_HEADER,
    EXPORT_FILENAME_PREFIX,
    MUSCLE_GROUP_SEPARATOR,
    OTHER_LABEL,
    UNKNOWN_EXERCISE,
    UNKNOWN_MUSCLE_GROUP,
)
from easylog.core.models import Exercise, ExerciseCategory, ImportResult, LoggedSet, WorkoutSession
from easylog.core.persistence import atomic_write_text
from easylog.core.store import DataStore
from easylog.utils.dates import format_csv_date, parse_csv_date, utc_now

logger = logging.getLogger(__name__)

Line = Tuple[int, str]
Row = Tuple[int, List[str]]


def csv_escape(value: str) -> str:
    """Quote a field when it contains a comma, quote or newline."""
    if "," in value or '"' in value or "\n" in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def csv_unescape(value: str) -> str:
    """Strip surrounding quotes and collapse doubled quotes."""
    text = value.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1].replace('""', '"')
    return text


def parse_csv_line(line: str) -> List[str]:
    """Split one CSV line on commas outside quotes.

    Quote characters are kept in the returned fields; ``csv_unescape``
    removes them.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


def _export_row(store: DataStore, session: WorkoutSession, logged: LoggedSet) -> str:
    exercise = store.exercise(logged.exercise_id)
    if exercise is not None:
        exercise_name = exercise.name
        muscle_groups = MUSCLE_GROUP_SEPARATOR.join(store.muscle_group_names(exercise))
        category = exercise.category.value
    else:
        exercise_name = UNKNOWN_EXERCISE
        muscle_groups = UNKNOWN_MUSCLE_GROUP
        category = OTHER_LABEL

    return ",".join(
        [
            str(session.id),
            format_csv_date(session.start_date),
            format_csv_date(session.end_date) if session.end_date else "",
            csv_escape(session.template_name),
            csv_escape(exercise_name),
            csv_escape(muscle_groups),
            category,
            str(logged.set_number),
            str(logged.weight),
            str(logged.reps),
            "true" if logged.is_completed else "false",
        ]
    )


def export_csv(store: DataStore) -> str:
    """Render every completed session as CSV text, newest first."""
    lines = [CSV_HEADER]
    for session in store.completed_sessions():
        for logged in session.sets:
            lines.append(_export_row(store, session, logged))
    return "\n".join(lines)


def export_filename(now: Optional[datetime] = None) -> str:
    """Timestamped export filename without characters filesystems reject."""
    stamp = format_csv_date(now or utc_now())
    return f"{EXPORT_FILENAME_PREFIX}{stamp}.csv".replace(":", "-")


def write_export(store: DataStore, path: Path) -> Optional[Path]:
    """Atomically write the CSV export to ``path``.

    Returns the path, or None when the file could not be written.
    """
    text = export_csv(store)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(path, text)
    except OSError as exc:
        logger.warning("Could not write export %s: %s", path, exc)
        return None
    return path


def export_to_file(store: DataStore, directory: Optional[Path] = None) -> Optional[Path]:
    """Write a timestamped export into ``directory`` (temp dir by default)."""
    target_dir = directory or Path(tempfile.gettempdir())
    return write_export(store, target_dir / export_filename())


def import_csv(source: Union[str, Path], store: DataStore) -> ImportResult:
    """Import a CSV file produced by ``export_csv`` into ``store``."""
    try:
        content = Path(source).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", source, exc)
        result = ImportResult()
        result.errors.append("Cannot read file")
        return result
    return import_csv_text(content, store)


def _collect_rows(lines: List[Line], store: DataStore, result: ImportResult) -> Dict[uuid.UUID, List[Row]]:
    expected_count = len(CSV_HEADER.split(","))
    existing_ids = {session.id for session in store.sessions}
    grouped: Dict[uuid.UUID, List[Row]] = {}

    for row_number, line in lines:
        fields = parse_csv_line(line)
        if len(fields) != expected_count:
            result.rows_skipped += 1
            continue

        try:
            session_id = uuid.UUID(fields[0])
        except ValueError:
            result.rows_skipped += 1
            result.errors.append(f"Row {row_number}: invalid session ID")
            continue

        if session_id in existing_ids:
            # Re-importing the same export is expected; count it quietly.
            result.rows_skipped += 1
            continue

        grouped.setdefault(session_id, []).append((row_number, fields))
    return grouped


def _resolve_exercise(fields: List[str], store: DataStore, result: ImportResult) -> Exercise:
    exercise_name = csv_unescape(fields[4])
    muscle_field = csv_unescape(fields[5])
    category = ExerciseCategory.parse(fields[6])

    group_ids = [
        store.find_or_create_muscle_group(name).id
        for name in (piece.strip() for piece in muscle_field.split(MUSCLE_GROUP_SEPARATOR))
        if name
    ]

    exercise = store.find_exercise_by_name(exercise_name)
    if exercise is None:
        exercise = Exercise(name=exercise_name, muscle_group_ids=group_ids, category=category)
        store.add_exercise_from_import(exercise)
        result.exercises_created += 1
    return exercise


def _import_session(session_id: uuid.UUID, rows: List[Row], store: DataStore, result: ImportResult) -> None:
    first = rows[0][1]
    start_date = parse_csv_date(first[1]) or utc_now()
    end_date = parse_csv_date(first[2]) if first[2] else None
    template_name = csv_unescape(first[3])

    sets: List[LoggedSet] = []
    for row_number, fields in rows:
        if not csv_unescape(fields[4]):
            result.rows_skipped += 1
            result.errors.append(f"Row {row_number}: missing exercise name")
            continue

        exercise = _resolve_exercise(fields, store, result)

        try:
            logged = LoggedSet(
                exercise_id=exercise.id,
                set_number=int(fields[7]),
                weight=float(fields[8]),
                reps=int(fields[9]),
                is_completed=fields[10].strip().lower() == "true",
            )
        except ValueError:
            result.rows_skipped += 1
            result.errors.append(f"Row {row_number}: invalid numeric values")
            continue

        sets.append(logged)
        result.sets_imported += 1

    store.add_session_from_import(
        WorkoutSession(
            id=session_id,
            template_name=template_name,
            start_date=start_date,
            end_date=end_date,
            sets=sets,
        )
    )
    result.sessions_imported += 1


def import_csv_text(content: str, store: DataStore) -> ImportResult:
    """Import CSV text into ``store`` and report what happened.

    Whole-file problems (no data rows, wrong column count) stop the import
    with a single error. Row problems skip that row and carry on.
    """
    result = ImportResult()

    # Row numbers follow the physical lines of the file, blank ones included.
    lines = [(number, line) for number, line in enumerate(content.splitlines(), start=1) if line.strip()]
    if len(lines) < 2:
        result.errors.append("File is empty or has no data rows")
        return result

    # Column count only: renamed or reordered columns still pass.
    expected = CSV_HEADER.split(",")
    actual = lines[0][1].strip().split(",")
    if len(actual) != len(expected):
        result.errors.append(
            f"Invalid header: expected {len(expected)} columns, got {len(actual)}"
        )
        return result

    for session_id, rows in _collect_rows(lines[1:], store, result).items():
        _import_session(session_id, rows, store, result)

    logger.info("CSV import finished: %s", result.summary.replace("\n", ", "))
    return result
