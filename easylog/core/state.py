"""Runtime state container for CLI context."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from easylog.core.store import DataStore


@dataclass
class CLIState:
    """CLI runtime options, loaded configuration and the lazily opened store."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console
    store_dir: Path
    _store: Optional[DataStore] = field(default=None, repr=False)

    @property
    def store(self) -> DataStore:
        if self._store is None:
            self._store = DataStore(self.store_dir)
        return self._store

    @property
    def weight_unit(self) -> str:
        return str(self.config.get("display", {}).get("weight_unit", "kg"))
