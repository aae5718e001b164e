from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pytest
import typer
from rich.console import Console

from easylog.commands.common import (
    exercise_payload,
    get_state,
    require_active_session,
    require_exercise,
    require_muscle_group,
    require_template,
    session_payload,
)
from easylog.core.state import CLIState
from easylog.core.store import DataStore


@dataclass
class FakeContext:
    obj: Any


def _state(store_dir: Path, config: Optional[Dict[str, Any]] = None) -> CLIState:
    return CLIState(
        json_output=False,
        plain_output=True,
        verbose=False,
        quiet=False,
        config_path=Path("/tmp/config.toml"),
        config=config or {"display": {"weight_unit": "lb"}},
        console=Console(record=True),
        store_dir=store_dir,
    )


def test_get_state_returns_cli_state(tmp_path: Path) -> None:
    state = _state(tmp_path)
    assert get_state(FakeContext(obj=state)) is state


def test_get_state_raises_on_invalid_obj() -> None:
    with pytest.raises(typer.Exit):
        get_state(FakeContext(obj={"not": "state"}))


def test_state_opens_store_lazily(tmp_path: Path) -> None:
    store_dir = tmp_path / "lazy"
    state = _state(store_dir)
    assert not store_dir.exists()
    assert state.store is state.store
    assert (store_dir / "muscle_groups.json").exists()
    assert state.weight_unit == "lb"


def test_require_helpers_accept_names_and_ids(populated_store: DataStore) -> None:
    bench = require_exercise(populated_store, "bench press")
    assert require_exercise(populated_store, str(bench.id)) is bench

    template = require_template(populated_store, "FULL BODY")
    assert require_template(populated_store, str(template.id)) is template

    chest = require_muscle_group(populated_store, "chest")
    assert chest.name == "Chest"


def test_require_helpers_reject_unknown_keys(populated_store: DataStore) -> None:
    with pytest.raises(typer.BadParameter):
        require_exercise(populated_store, "Deadlift")
    with pytest.raises(typer.BadParameter):
        require_template(populated_store, "00000000-0000-0000-0000-000000000000")
    with pytest.raises(typer.BadParameter):
        require_muscle_group(populated_store, "Wings")


def test_require_active_session(store: DataStore) -> None:
    with pytest.raises(typer.BadParameter):
        require_active_session(store)
    session = store.start_free_session("Now")
    assert require_active_session(store) is session


def test_payloads(populated_store: DataStore) -> None:
    bench = populated_store.find_exercise_by_name("Bench Press")
    assert bench is not None
    payload = exercise_payload(populated_store, bench)
    assert payload["muscle_groups"] == ["Chest", "Triceps"]
    assert payload["primary_muscle_group"] == "Chest"
    assert payload["category"] == "Barbell"

    session = populated_store.sessions[0]
    summary = session_payload(populated_store, session)
    assert summary["active"] is False
    assert summary["template_name"] == "Full Body"
    assert [s["exercise"] for s in summary["sets"]] == ["Bench Press", "Bench Press", "Squat"]
    assert summary["totals"] == {"sets": 3, "completed_sets": 2, "reps": 23, "volume": 1940.0}
