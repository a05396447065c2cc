from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict


def config_path() -> Path:
    """``$CLOAK_CONFIG`` when set, else ``config.toml`` in the working directory."""
    return Path(os.getenv("CLOAK_CONFIG", "config.toml"))


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Parse the bot's TOML config.

    A missing file yields ``{}`` and every setting falls back to its
    environment variable or default. Settings live under a ``[cloak]`` table;
    a ``cloak`` key that is not a table is rejected.
    """
    target = Path(path) if path is not None else config_path()
    if not target.is_file():
        return {}

    raw = tomllib.loads(target.read_text(encoding="utf-8"))
    if not isinstance(raw.get("cloak", {}), dict):
        raise ValueError(f"{target}: 'cloak' must be a table")
    return raw


__all__ = ["config_path", "load_raw_config"]
