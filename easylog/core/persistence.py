"""Crash-tolerant JSON collection files with a rotating backup."""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from easylog.core.constants import BACKUP_SUFFIX

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Anything a damaged or hand-edited file can make the decoder raise.
_DECODE_ERRORS = (
    OSError,
    UnicodeDecodeError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
    RecursionError,
)


def backup_path(primary: Path) -> Path:
    """Return the backup file that sits next to ``primary``."""
    return primary.with_name(primary.name + BACKUP_SUFFIX)


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to a temp file next to ``path`` and swap it into place."""
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}-", suffix=".tmp", dir=path.parent)
    tmp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


class CollectionFile(Generic[T]):
    """One persisted collection: a JSON list in ``path`` plus its ``.bak`` copy.

    Loading tries the primary file, then the backup, and reports ``None``
    when neither decodes. Saving copies the current primary over the backup
    before atomically replacing the primary, so the backup always holds the
    last complete write. Neither operation raises for disk problems.
    """

    def __init__(
        self,
        path: Path,
        encode: Callable[[T], Dict[str, Any]],
        decode: Callable[[Dict[str, Any]], T],
    ) -> None:
        self.path = path
        self.backup = backup_path(path)
        self._encode = encode
        self._decode = decode

    def _read(self, path: Path) -> List[T]:
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError(f"{path.name} must contain a JSON list")
        return [self._decode(item) for item in payload]

    def load(self) -> Optional[List[T]]:
        for candidate in (self.path, self.backup):
            if not candidate.exists():
                continue
            try:
                items = self._read(candidate)
            except _DECODE_ERRORS as exc:
                logger.warning("Could not load %s: %s", candidate, exc)
                continue
            if candidate == self.backup:
                logger.warning("Recovered %s from backup", self.path.name)
            return items
        return None

    def save(self, items: List[T]) -> bool:
        """Rotate the backup, write ``items`` and return whether it succeeded."""
        text = json.dumps([self._encode(item) for item in items], indent=2) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                shutil.copyfile(self.path, self.backup)
            atomic_write_text(self.path, text)
            if not self.backup.exists():
                shutil.copyfile(self.path, self.backup)
        except OSError as exc:
            logger.warning("Could not save %s: %s", self.path, exc)
            return False
        logger.debug("Saved %d item(s) to %s", len(items), self.path)
        return True
