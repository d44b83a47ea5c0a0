"""TOML reading utilities.

Uses tomlkit, which also round-trips formatting, to read the optional
repository config file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ConfigurationError


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Raises:
        ConfigurationError: If the file is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except ParseError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def get_section(doc: tomlkit.TOMLDocument, *keys: str) -> dict[str, Any]:
    """Return a (possibly nested) table as a plain dict, or {} if absent.

    Example:
        get_section(doc, "tool", "recipe-bot") reads [tool.recipe-bot].
    """
    table: Any = doc.unwrap()
    for key in keys:
        if not isinstance(table, dict):
            return {}
        table = table.get(key, {})
    return table if isinstance(table, dict) else {}
