"""Calculator settings read from a TOML file."""
from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

from .calculator import DEFAULT_HISTORY_LIMIT

SECTION = "fraccalc"


@dataclass(frozen=True)
class Settings:
    history_limit: int = DEFAULT_HISTORY_LIMIT
    strict_parsing: bool = False
    decimal_places: int = 6
    verbose: bool = False
    log_json: bool = False

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            # bool is an int subclass; only accept the declared kind.
            if item.type == "bool" and not isinstance(value, bool):
                raise ValueError(f"{item.name} must be a boolean, got {value!r}")
            if item.type == "int" and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError(f"{item.name} must be an integer, got {value!r}")
        if self.history_limit < 1:
            raise ValueError("history_limit must be >= 1")
        if self.decimal_places < 0:
            raise ValueError("decimal_places must be >= 0")

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-``None`` override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def settings_from_mapping(params: Dict[str, Any]) -> Settings:
    """Build :class:`Settings` from a parsed TOML document.

    Keys are read from a ``[fraccalc]`` table when present, otherwise from the
    top level. Unknown keys are ignored.
    """
    table = params.get(SECTION, params)
    if not isinstance(table, dict):
        raise ValueError(f"[{SECTION}] must be a table")
    known = {item.name for item in fields(Settings)}
    return Settings(**{k: v for k, v in table.items() if k in known})


def load_settings(path: Union[str, Path]) -> Settings:
    settings_path = Path(path).expanduser()
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    with settings_path.open("rb") as fh:
        params = tomllib.load(fh)
    return settings_from_mapping(params)


__all__ = ["Settings", "load_settings", "settings_from_mapping"]
