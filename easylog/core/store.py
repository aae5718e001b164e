"""Persistent store for muscle groups, exercises, templates and sessions.

Every mutation updates the in-memory lists first and then rewrites the
touched collection file. Disk failures are logged and ignored: the
in-memory state stays authoritative for the running process.

The store does not stop callers from starting a second active session.
Callers that start sessions are expected to check ``active_session``
first.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional

from easylog.core import history
from easylog.core.config import default_data_dir
from easylog.core.constants import (
    DEFAULT_MUSCLE_GROUPS,
    EXERCISES_FILE,
    MUSCLE_GROUPS_FILE,
    NO_MUSCLE_GROUP,
    OTHER_LABEL,
    SESSIONS_FILE,
    TEMPLATES_FILE,
    UNKNOWN_EXERCISE,
)
from easylog.core.models import (
    Exercise,
    LoggedSet,
    MuscleGroup,
    WorkoutSession,
    WorkoutTemplate,
)
from easylog.core.persistence import CollectionFile
from easylog.utils.dates import utc_now

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]

MUSCLE_GROUPS = "muscle_groups"
EXERCISES = "exercises"
TEMPLATES = "templates"
SESSIONS = "sessions"


def default_muscle_groups() -> List[MuscleGroup]:
    """Fresh default groups, each with a new id."""
    return [MuscleGroup(name=name) for name in DEFAULT_MUSCLE_GROUPS]


def _same_name(left: str, right: str) -> bool:
    return left.casefold() == right.casefold()


class DataStore:
    """In-memory collections mirrored to JSON files in ``directory``."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = directory or default_data_dir()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not create store directory %s: %s", self.directory, exc)

        self._files: Dict[str, CollectionFile] = {
            MUSCLE_GROUPS: CollectionFile(
                self.directory / MUSCLE_GROUPS_FILE, MuscleGroup.to_dict, MuscleGroup.from_dict
            ),
            EXERCISES: CollectionFile(self.directory / EXERCISES_FILE, Exercise.to_dict, Exercise.from_dict),
            TEMPLATES: CollectionFile(
                self.directory / TEMPLATES_FILE, WorkoutTemplate.to_dict, WorkoutTemplate.from_dict
            ),
            SESSIONS: CollectionFile(
                self.directory / SESSIONS_FILE, WorkoutSession.to_dict, WorkoutSession.from_dict
            ),
        }
        self._listeners: List[Listener] = []

        self.muscle_groups: List[MuscleGroup] = self._files[MUSCLE_GROUPS].load() or []
        self.exercises: List[Exercise] = self._files[EXERCISES].load() or []
        self.templates: List[WorkoutTemplate] = self._files[TEMPLATES].load() or []
        self.sessions: List[WorkoutSession] = self._files[SESSIONS].load() or []

        if not self.muscle_groups:
            self.muscle_groups = default_muscle_groups()
            self._persist(MUSCLE_GROUPS)

    # Persistence and change notification

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(collection_name)`` after each mutation.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _persist(self, collection: str) -> None:
        self._files[collection].save(getattr(self, collection))

    def _commit(self, collection: str) -> None:
        self._persist(collection)
        for listener in list(self._listeners):
            try:
                listener(collection)
            except Exception:
                logger.exception("Store listener failed for %s", collection)

    # Muscle groups

    def add_muscle_group(self, group: MuscleGroup) -> None:
        self.muscle_groups.append(group)
        self._commit(MUSCLE_GROUPS)

    def update_muscle_group(self, group: MuscleGroup) -> None:
        for index, existing in enumerate(self.muscle_groups):
            if existing.id == group.id:
                self.muscle_groups[index] = group
                self._commit(MUSCLE_GROUPS)
                return

    def delete_muscle_group(self, group_id: uuid.UUID) -> None:
        self.muscle_groups = [group for group in self.muscle_groups if group.id != group_id]
        self._commit(MUSCLE_GROUPS)

    def muscle_group(self, group_id: uuid.UUID) -> Optional[MuscleGroup]:
        return next((group for group in self.muscle_groups if group.id == group_id), None)

    def find_muscle_group_by_name(self, name: str) -> Optional[MuscleGroup]:
        wanted = name.strip()
        return next((group for group in self.muscle_groups if _same_name(group.name, wanted)), None)

    def find_or_create_muscle_group(self, name: str) -> MuscleGroup:
        """Return the group named ``name`` ignoring case, creating it if missing."""
        existing = self.find_muscle_group_by_name(name)
        if existing is not None:
            return existing
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Muscle group name must not be empty")
        group = MuscleGroup(name=cleaned)
        self.add_muscle_group(group)
        logger.debug("Created muscle group %s", cleaned)
        return group

    def muscle_group_names(self, exercise: Exercise) -> List[str]:
        names: List[str] = []
        for group_id in exercise.muscle_group_ids:
            group = self.muscle_group(group_id)
            if group is not None:
                names.append(group.name)
        return names

    def muscle_group_names_joined(self, exercise: Exercise) -> str:
        names = self.muscle_group_names(exercise)
        return ", ".join(names) if names else NO_MUSCLE_GROUP

    def primary_muscle_group_name(self, exercise: Exercise) -> str:
        primary_id = exercise.primary_muscle_group_id
        group = self.muscle_group(primary_id) if primary_id else None
        return group.name if group else OTHER_LABEL

    # Exercises

    def add_exercise(self, exercise: Exercise) -> None:
        self.exercises.append(exercise)
        self._commit(EXERCISES)

    def update_exercise(self, exercise: Exercise) -> None:
        for index, existing in enumerate(self.exercises):
            if existing.id == exercise.id:
                self.exercises[index] = exercise
                self._commit(EXERCISES)
                return

    def delete_exercise(self, exercise_id: uuid.UUID) -> None:
        self.exercises = [exercise for exercise in self.exercises if exercise.id != exercise_id]
        self._commit(EXERCISES)

    def exercise(self, exercise_id: uuid.UUID) -> Optional[Exercise]:
        return next((exercise for exercise in self.exercises if exercise.id == exercise_id), None)

    def find_exercise_by_name(self, name: str) -> Optional[Exercise]:
        wanted = name.strip()
        return next((exercise for exercise in self.exercises if _same_name(exercise.name, wanted)), None)

    def exercise_name(self, exercise_id: uuid.UUID) -> str:
        exercise = self.exercise(exercise_id)
        return exercise.name if exercise else UNKNOWN_EXERCISE

    # Templates

    def add_template(self, template: WorkoutTemplate) -> None:
        self.templates.append(template)
        self._commit(TEMPLATES)

    def update_template(self, template: WorkoutTemplate) -> None:
        for index, existing in enumerate(self.templates):
            if existing.id == template.id:
                self.templates[index] = template
                self._commit(TEMPLATES)
                return

    def delete_template(self, template_id: uuid.UUID) -> None:
        self.templates = [template for template in self.templates if template.id != template_id]
        self._commit(TEMPLATES)

    def template(self, template_id: uuid.UUID) -> Optional[WorkoutTemplate]:
        return next((template for template in self.templates if template.id == template_id), None)

    def find_template_by_name(self, name: str) -> Optional[WorkoutTemplate]:
        wanted = name.strip()
        return next((template for template in self.templates if _same_name(template.name, wanted)), None)

    def valid_exercise_ids(self, template: WorkoutTemplate) -> List[uuid.UUID]:
        return history.valid_exercise_ids(template, self.exercises)

    def removed_exercise_count(self, template: WorkoutTemplate) -> int:
        """Number of template entries whose exercise no longer exists."""
        return len(template.exercise_ids) - len(self.valid_exercise_ids(template))

    # Sessions

    @property
    def active_session(self) -> Optional[WorkoutSession]:
        return next((session for session in self.sessions if session.is_active), None)

    def start_session(self, template: WorkoutTemplate) -> WorkoutSession:
        session = WorkoutSession(template_id=template.id, template_name=template.name)
        self.sessions.append(session)
        self._commit(SESSIONS)
        return session

    def start_free_session(self, name: str) -> WorkoutSession:
        session = WorkoutSession(template_name=name)
        self.sessions.append(session)
        self._commit(SESSIONS)
        return session

    def update_session(self, session: WorkoutSession) -> None:
        for index, existing in enumerate(self.sessions):
            if existing.id == session.id:
                self.sessions[index] = session
                self._commit(SESSIONS)
                return

    def finish_session(self, session_id: uuid.UUID) -> None:
        session = self.session(session_id)
        if session is None:
            return
        session.end_date = utc_now()
        self._commit(SESSIONS)

    def delete_session(self, session_id: uuid.UUID) -> None:
        self.sessions = [session for session in self.sessions if session.id != session_id]
        self._commit(SESSIONS)

    def session(self, session_id: uuid.UUID) -> Optional[WorkoutSession]:
        return next((session for session in self.sessions if session.id == session_id), None)

    def add_set(self, session_id: uuid.UUID, logged_set: LoggedSet) -> None:
        session = self.session(session_id)
        if session is None:
            return
        session.sets.append(logged_set)
        self._commit(SESSIONS)

    def update_set(self, session_id: uuid.UUID, logged_set: LoggedSet) -> None:
        session = self.session(session_id)
        if session is None:
            return
        for index, existing in enumerate(session.sets):
            if existing.id == logged_set.id:
                session.sets[index] = logged_set
                self._commit(SESSIONS)
                return

    def delete_set(self, session_id: uuid.UUID, set_id: uuid.UUID) -> None:
        session = self.session(session_id)
        if session is None:
            return
        session.sets = [logged for logged in session.sets if logged.id != set_id]
        self._commit(SESSIONS)

    def next_set_number(self, session_id: uuid.UUID, exercise_id: uuid.UUID) -> int:
        session = self.session(session_id)
        return history.next_set_number(session, exercise_id) if session else 1

    def completed_sessions(self) -> List[WorkoutSession]:
        return history.completed_sessions(self.sessions)

    def sessions_for_exercise(self, exercise_id: uuid.UUID) -> List[history.SessionSets]:
        return history.sessions_for_exercise(self.sessions, exercise_id)

    # Import support: the CSV codec has already decided these are new.

    def add_session_from_import(self, session: WorkoutSession) -> None:
        self.sessions.append(session)
        self._commit(SESSIONS)

    def add_exercise_from_import(self, exercise: Exercise) -> None:
        self.exercises.append(exercise)
        self._commit(EXERCISES)

    def delete_all_data(self) -> None:
        """Wipe every collection and restore the default muscle groups."""
        self.muscle_groups = default_muscle_groups()
        self.exercises = []
        self.templates = []
        self.sessions = []
        for collection in (MUSCLE_GROUPS, EXERCISES, TEMPLATES, SESSIONS):
            self._commit(collection)
        logger.info("Deleted all data in %s", self.directory)
