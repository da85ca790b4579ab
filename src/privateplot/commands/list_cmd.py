"""Command: list articles published on the instance."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from privateplot.commands._base import PlotCommand

if TYPE_CHECKING:
    from privateplot.commands._context import AppContext


@click.command(
    "list",
    cls=PlotCommand,
    examples="""\
  privateplot list
  privateplot list --page 2
  privateplot -q list""",
)
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.pass_obj
def list_cmd(app: AppContext, page: int) -> None:
    """List articles on the instance."""
    from privateplot.services.articles import ArticleService

    app.check_host()
    app.emit(ArticleService(app.settings).list_articles(page=page))
