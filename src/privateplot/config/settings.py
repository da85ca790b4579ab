"""Unified settings — CLI flags, env vars, and the config file in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``PRIVATEPLOT_HOST``, ``INTERNAL_AUTH_TOKEN``,
                    ``PRIVATEPLOT_*`` for the rest
  3. ``.env``     — same names, read from the working directory
  4. Config file  — ``.privateplot`` (JSON or YAML) in the working directory
  5. Code defaults

Uses Pydantic Settings v2 with a custom :class:`ConfigFileSettingsSource`
that reuses :func:`privateplot.config.discovery.find_config`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import click
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from ruamel.yaml.error import YAMLError

from privateplot.config.discovery import find_config, load_config_file

DEFAULT_HOST = "http://localhost:4321"


class ConfigFileSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``.privateplot`` file."""

    def __init__(self, settings_cls: type[BaseSettings], config_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if config_path and config_path.is_file():
            try:
                self._data = load_config_file(config_path)
            except (ValueError, YAMLError) as exc:
                msg = f"Invalid config in {config_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the file data; aliases map its camelCase keys onto fields."""
        return self._data


# Thread-local storage for the config path during construction.
_tls = threading.local()


class PlotSettings(BaseSettings):
    """Unified settings for the privateplot CLI.

    Stored on the :class:`AppContext` at the CLI root level.

    Attributes:
        instance_host: Target blog deployment; None means "not configured".
        internal_auth_token: Value for the ``X-Internal-Auth-Token`` header.
        request_timeout: Per-request timeout in seconds.
        config_path: The config file the settings were read from, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PRIVATEPLOT_",
        "extra": "ignore",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # --- Connection (alias order encodes flag > env > file priority) ---
    instance_host: str | None = Field(
        default=None,
        validation_alias=AliasChoices("instance_host", "PRIVATEPLOT_HOST", "instanceHost"),
    )
    internal_auth_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "internal_auth_token", "INTERNAL_AUTH_TOKEN", "internalAuthToken"
        ),
    )
    request_timeout: float = 30.0

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_interact: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the config file source between ``.env`` and defaults."""
        config_path = getattr(_tls, "config_path", None)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            ConfigFileSettingsSource(settings_cls, config_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        cwd: Path | None = None,
        **cli_flags: Any,
    ) -> PlotSettings:
        """Construct settings from a CLI invocation.

        Uses the explicit *config_path* when given, otherwise discovers a
        config file in *cwd*. A ``.env`` in *cwd* sits below real env vars;
        CLI flags override everything else.
        """
        resolved = Path(config_path) if config_path else find_config(cwd)
        env_file = (cwd or Path.cwd()) / ".env"

        _tls.config_path = resolved
        try:
            return cls(config_path=resolved, _env_file=env_file, **cli_flags)
        finally:
            _tls.config_path = None

    @property
    def uses_default_host(self) -> bool:
        return not self.instance_host

    @property
    def effective_host(self) -> str:
        """Configured host, or :data:`DEFAULT_HOST` when none is set."""
        return self.instance_host or DEFAULT_HOST
