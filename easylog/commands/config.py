"""Config file commands."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Tuple

import typer
from rich.table import Table

from easylog.commands.common import get_state, print_json_payload, print_plain_rows
from easylog.core.config import DEFAULT_CONFIG, save_config

app = typer.Typer(help="Show or change configuration")


def _flatten(config: Dict[str, Any], prefix: str = "") -> List[Tuple[str, Any]]:
    rows: List[Tuple[str, Any]] = []
    for key, value in config.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            rows.extend(_flatten(value, prefix=f"{dotted}."))
        else:
            rows.append((dotted, value))
    return rows


def _coerce(key: str, raw: str) -> Any:
    """Convert ``raw`` to the type of the default for ``key``."""
    section, _, name = key.partition(".")
    defaults = DEFAULT_CONFIG.get(section)
    if not isinstance(defaults, dict) or name not in defaults:
        known = ", ".join(dotted for dotted, _ in _flatten(DEFAULT_CONFIG))
        raise typer.BadParameter(f"Unknown key {key}. Known keys: {known}")

    default = defaults[name]
    if isinstance(default, int):
        try:
            value = int(raw)
        except ValueError as exc:
            raise typer.BadParameter(f"{key} must be an integer") from exc
        if value < 1:
            raise typer.BadParameter(f"{key} must be at least 1")
        return value
    return raw.strip()


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Show the effective configuration and where it is read from."""
    state = get_state(ctx)

    if state.json_output:
        print_json_payload(state, {"path": str(state.config_path), "config": state.config})
        return

    if state.plain_output:
        print_plain_rows(_flatten(state.config))
        return

    table = Table(title=str(state.config_path))
    table.add_column("Key")
    table.add_column("Value")
    for key, value in _flatten(state.config):
        table.add_row(key, str(value))
    state.console.print(table)


@app.command("set")
def set_command(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Dotted key, e.g. display.weight_unit"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set one value and write the config file."""
    state = get_state(ctx)
    coerced = _coerce(key, value)
    section, _, name = key.partition(".")

    updated = copy.deepcopy(state.config)
    updated.setdefault(section, {})[name] = coerced
    path = save_config(updated, state.config_path)
    state.config = updated

    if state.json_output:
        print_json_payload(state, {"path": str(path), "key": key, "value": coerced})
        return
    state.console.print(f"Set {key} = {coerced!r} in {path}")
