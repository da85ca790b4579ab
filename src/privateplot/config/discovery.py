"""Config file discovery and loading.

Looks for ``.privateplot`` (and its ``.json`` / ``.yaml`` / ``.yml``
variants) in the working directory. ``PRIVATEPLOT_CONFIG`` overrides the
lookup. JSON files are parsed as JSON; everything else as YAML, which also
accepts JSON content.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

CONFIG_FILENAMES: tuple[str, ...] = (
    ".privateplot",
    ".privateplot.json",
    ".privateplot.yaml",
    ".privateplot.yml",
)
CONFIG_ENV_VAR = "PRIVATEPLOT_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the first existing config file in *start* (default: cwd).

    Checks PRIVATEPLOT_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    directory = start or Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def default_config_path(start: Path | None = None) -> Path:
    """Where ``privateplot settings`` writes when no file exists yet."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return (start or Path.cwd()) / CONFIG_FILENAMES[0]


def load_config_file(path: Path) -> dict[str, Any]:
    """Parse *path* into a plain dict.

    Raises:
        ValueError: If the file is not valid JSON/YAML or not a mapping.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        data = json.loads(raw) if raw.strip() else {}
    else:
        data = YAML(typ="safe").load(raw) or {}
    if not isinstance(data, dict):
        msg = f"expected a mapping, got {type(data).__name__}"
        raise ValueError(msg)
    return data


def write_config_file(path: Path, data: dict[str, Any]) -> None:
    """Write *data* to *path*, as JSON for ``.json`` files and YAML otherwise."""
    if path.suffix == ".json":
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        return
    y = YAML()
    y.default_flow_style = False
    with path.open("w", encoding="utf-8") as fh:
        y.dump(data, fh)
