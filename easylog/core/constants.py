"""Static constants for the EasyLog data layer."""

from __future__ import annotations

CSV_COLUMNS = [
    "session_id",
    "session_date",
    "session_end_date",
    "template_name",
    "exercise_name",
    "muscle_group",
    "category",
    "set_number",
    "weight",
    "reps",
    "completed",
]

# Other tools read this header; keep it byte-for-byte stable.
CSV_HEADER = ",".join(CSV_COLUMNS)

CSV_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
MUSCLE_GROUP_SEPARATOR = ";"
EXPORT_FILENAME_PREFIX = "easylog_export_"

DEFAULT_MUSCLE_GROUPS = [
    "Chest",
    "Back",
    "Shoulders",
    "Biceps",
    "Triceps",
    "Legs",
    "Glutes",
    "Core",
    "Full Body",
    "Cardio",
]

UNKNOWN_EXERCISE = "Unknown Exercise"
UNKNOWN_MUSCLE_GROUP = "Unknown"
NO_MUSCLE_GROUP = "No muscle group"
OTHER_LABEL = "Other"

MUSCLE_GROUPS_FILE = "muscle_groups.json"
EXERCISES_FILE = "exercises.json"
TEMPLATES_FILE = "templates.json"
SESSIONS_FILE = "sessions.json"
BACKUP_SUFFIX = ".bak"
