"""Parsing helpers for template plan files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from easylog.core.models import ExerciseCategory


def parse_category(value: Optional[str]) -> ExerciseCategory:
    """Parse a category label case-insensitively, defaulting to Other."""
    if not value:
        return ExerciseCategory.OTHER
    for member in ExerciseCategory:
        if member.value.lower() == value.strip().lower():
            return member
    return ExerciseCategory.OTHER


def parse_muscle_groups(value: Any) -> List[str]:
    """Accept a list or a ``;``/``,`` separated string of group names."""
    if value is None:
        return []
    if isinstance(value, str):
        pieces = value.replace(",", ";").split(";")
    elif isinstance(value, list):
        pieces = [str(item) for item in value if item is not None]
    else:
        raise ValueError(f"Unsupported muscle_groups value: {value!r}")
    return [piece.strip() for piece in pieces if piece.strip()]


def normalize_exercise_entry(entry: Any) -> Dict[str, Any]:
    """Turn a string or mapping exercise entry into a uniform dict."""
    if isinstance(entry, str):
        entry = {"name": entry}
    if not isinstance(entry, dict):
        raise ValueError(f"Unsupported exercise entry: {entry!r}")
    name = str(entry.get("name") or "").strip()
    if not name:
        raise ValueError("Exercise entry is missing a name")
    return {
        "name": name,
        "category": parse_category(entry.get("category")),
        "muscle_groups": parse_muscle_groups(entry.get("muscle_groups") or entry.get("muscle_group")),
    }


def normalize_template_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    name = str(entry.get("name") or "").strip()
    if not name:
        raise ValueError("Template entry is missing a name")
    exercises = entry.get("exercises") or []
    if not isinstance(exercises, list):
        raise ValueError(f"Template {name!r}: exercises must be a list")
    return {"name": name, "exercises": [normalize_exercise_entry(item) for item in exercises]}


def load_plan_input(file_path: Optional[Path], read_stdin: bool, stdin_text: str = "") -> List[Dict[str, Any]]:
    """Load template definition(s) from file or stdin text."""
    raw_data: Any
    try:
        if file_path:
            text = file_path.read_text()
            if file_path.suffix.lower() in {".yaml", ".yml"}:
                raw_data = yaml.safe_load(text)
            else:
                raw_data = json.loads(text)
        elif read_stdin:
            text = stdin_text.strip()
            if not text:
                return []
            try:
                raw_data = json.loads(text)
            except json.JSONDecodeError:
                raw_data = yaml.safe_load(text)
        else:
            return []
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML plan: {exc}") from exc

    if isinstance(raw_data, dict):
        raw_data = raw_data.get("templates", [raw_data])
    if not isinstance(raw_data, list):
        return []
    return [normalize_template_entry(item) for item in raw_data if isinstance(item, dict)]
