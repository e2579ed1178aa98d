"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``PROFSPLIT_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``profsplit.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from profsplit.config.discovery import locate_store
from profsplit.config.models import (
    BackupConfig,
    MigrationConfig,
    ProfileTypesConfig,
    StoreConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``profsplit.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class ProfSettings(BaseSettings):
    """Resolved settings for one profsplit invocation.

    Attributes:
        store_root: Directory holding ``.profsplit/`` (parent of
            ``profsplit.toml``, or CWD if no config was found).
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PROFSPLIT_",
        "env_nested_delimiter": "__",
    }

    store_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_interact: bool = False

    # --- TOML sections ---
    store: StoreConfig = Field(default_factory=StoreConfig)
    migration: MigrationConfig = Field(default_factory=MigrationConfig)
    profile_types: ProfileTypesConfig = Field(default_factory=ProfileTypesConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        store_root: Path | None = None,
        **cli_flags: Any,
    ) -> ProfSettings:
        """Construct settings from a CLI invocation.

        Without an explicit *store_root* the nearest enclosing store is
        used (see :func:`~profsplit.config.discovery.locate_store`), then
        the working directory. An explicit *config_path* replaces discovery
        of ``profsplit.toml``. CLI flags override everything else.
        """
        location = locate_store(store_root)
        toml_path: Path | None = location.config if location else None
        if config_path:
            p = Path(config_path)
            toml_path = p if p.is_file() else None

        resolved_root = store_root
        if resolved_root is None:
            if config_path and toml_path:
                resolved_root = toml_path.parent
            elif location:
                resolved_root = location.root
            else:
                resolved_root = Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(store_root=resolved_root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
