"""Command: show or update connection settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from privateplot.commands._base import PlotCommand

if TYPE_CHECKING:
    from privateplot.commands._context import AppContext


@click.command(
    "settings",
    cls=PlotCommand,
    examples="""\
  privateplot settings
  privateplot settings --host blog.example.com
  privateplot settings --host blog.example.com --token s3cret""",
)
@click.option("--host", default=None, help="Instance host, e.g. blog.example.com.")
@click.option("--token", default=None, help="Internal auth token.")
@click.pass_obj
def settings_cmd(app: AppContext, host: str | None, token: str | None) -> None:
    """Show settings, or save --host / --token to the config file."""
    from privateplot.services.settings import SettingsService

    service = SettingsService(app.settings)
    if host is None and token is None:
        app.emit(service.show())
    else:
        app.emit(service.update(host=host, token=token))
