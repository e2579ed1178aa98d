"""Locating the store a command operates on.

A store root is the nearest directory, from the working directory
upwards, that holds ``profsplit.toml`` or an initialized ``.profsplit/``
data directory. ``PROFSPLIT_CONFIG`` pins the config file, and with it
the root, regardless of the working directory.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from profsplit.config.models import ProfsplitConfig

CONFIG_FILENAME = "profsplit.toml"
CONFIG_ENV_VAR = "PROFSPLIT_CONFIG"
STORE_DIRNAME = ".profsplit"


@dataclass(frozen=True)
class StoreLocation:
    """A discovered store root and the config file that applies to it."""

    root: Path
    config: Path | None = None


def locate_store(start: Path | None = None) -> StoreLocation | None:
    """Find the store root for *start* (default: cwd).

    A config file wins over a bare data directory in the same directory.
    Returns None when ``PROFSPLIT_CONFIG`` names a missing file or when
    no ancestor looks like a store.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return StoreLocation(path.parent, path) if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        config = directory / CONFIG_FILENAME
        if config.is_file():
            return StoreLocation(directory, config)
        if (directory / STORE_DIRNAME).is_dir():
            return StoreLocation(directory)
    return None


def find_config(start: Path | None = None) -> Path | None:
    """The ``profsplit.toml`` governing *start*, if there is one."""
    location = locate_store(start)
    return location.config if location else None


def load_config(path: Path | None = None, cwd: Path | None = None) -> ProfsplitConfig:
    """Validate the TOML sections in *path*, or in the discovered config.

    With no file every section keeps its defaults.
    """
    path = path or find_config(cwd)
    if path is None:
        return ProfsplitConfig()
    return ProfsplitConfig.model_validate(tomllib.loads(path.read_text(encoding="utf-8")))
