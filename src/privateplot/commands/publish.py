"""Command: publish a markdown file or directory tree."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from privateplot.commands._base import PlotCommand

if TYPE_CHECKING:
    from privateplot.commands._context import AppContext


@click.command(
    cls=PlotCommand,
    examples="""\
  privateplot publish
  privateplot publish posts/ --concurrency 4
  privateplot publish posts/hello.md --yes
  privateplot publish drafts/ --include-drafts --force
  privateplot --json publish posts/ -y""",
)
@click.argument("path", default=".", type=click.Path(path_type=Path))
@click.option(
    "-c",
    "--concurrency",
    type=click.IntRange(min=1),
    default=10,
    show_default=True,
    help="Maximum number of files published at once.",
)
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="Skip the confirmation prompt.")
@click.option("--include-drafts", is_flag=True, help="Also publish files marked draft: true.")
@click.option("--force", is_flag=True, help="Republish files even if unchanged.")
@click.pass_obj
def publish(
    app: AppContext,
    path: Path,
    concurrency: int,
    assume_yes: bool,
    include_drafts: bool,
    force: bool,
) -> None:
    """Publish markdown files to the configured instance."""
    from privateplot.services.publish import PublishService

    app.check_host()
    service = PublishService(
        app.settings,
        observer=app.reporter(),
        concurrency=concurrency,
        include_drafts=include_drafts,
        force=force,
    )
    result = service.run(
        path,
        confirm=lambda message: assume_yes or app.confirm(message),
        ask_retry=lambda message: app.confirm(message),
    )
    app.emit(result)
