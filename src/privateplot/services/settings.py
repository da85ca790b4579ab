"""SettingsService — show and persist the connection settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ruamel.yaml.error import YAMLError

from privateplot.config.discovery import default_config_path, load_config_file, write_config_file
from privateplot.domain.errors import InvalidInputError
from privateplot.domain.hosts import normalize_host
from privateplot.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from privateplot.config.settings import PlotSettings

logger = logging.getLogger(__name__)

HOST_KEY = "instanceHost"
TOKEN_KEY = "internalAuthToken"


def mask_token(token: str | None) -> str | None:
    """Show only the last four characters of *token*."""
    if not token:
        return None
    if len(token) <= 4:
        return "*" * len(token)
    return "*" * (len(token) - 4) + token[-4:]


class SettingsService:
    """Read the effective settings and write updates to the config file."""

    def __init__(self, settings: PlotSettings, *, cwd: Path | None = None) -> None:
        self._settings = settings
        self._cwd = cwd

    def show(self) -> ServiceResult:
        s = self._settings
        data: dict[str, Any] = {
            "host": s.effective_host,
            "default_host": s.uses_default_host,
            "token": mask_token(s.internal_auth_token),
            "config_path": str(s.config_path) if s.config_path else None,
        }
        warnings: list[str] = []
        if not s.internal_auth_token:
            warnings.append("No auth token configured")
        return ServiceResult(ok=True, op="settings_show", data=data, warnings=warnings)

    def update(self, *, host: str | None = None, token: str | None = None) -> ServiceResult:
        """Merge *host* and/or *token* into the config file.

        Writes to the file the settings were loaded from, or creates
        ``.privateplot`` in the working directory. Unrelated keys survive.
        """
        op = "settings_update"
        if host is None and token is None:
            exc = InvalidInputError("Nothing to update: pass --host and/or --token")
            return ServiceResult.from_error(op, exc)
        if host is not None and not normalize_host(host):
            return ServiceResult.from_error(op, InvalidInputError("Host cannot be empty"))

        path = self._settings.config_path or default_config_path(self._cwd)
        existing: dict[str, Any] = {}
        if path.is_file():
            try:
                existing = load_config_file(path)
            except (ValueError, YAMLError) as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="CONFIGURATION",
                        message=f"Invalid config in {path}: {exc}",
                        detail={"path": str(path)},
                    ),
                )

        updated: list[str] = []
        if host is not None:
            existing[HOST_KEY] = host.strip()
            updated.append("host")
        if token is not None:
            existing[TOKEN_KEY] = token
            updated.append("token")

        try:
            write_config_file(path, existing)
        except OSError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="WRITE_FAILED",
                    message=f"Cannot write {path}: {exc}",
                    detail={"path": str(path)},
                ),
            )
        logger.info("Updated %s in %s", ", ".join(updated), path)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "config_path": str(path),
                "updated": updated,
                "host": existing.get(HOST_KEY),
                "token": mask_token(existing.get(TOKEN_KEY)),
            },
        )
