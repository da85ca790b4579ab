"""Command: delete a published article from the instance."""

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
  privateplot delete posts/hello.md
  privateplot delete posts/hello.md --yes""",
)
@click.argument("file", type=click.Path(path_type=Path))
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(app: AppContext, file: Path, assume_yes: bool) -> None:
    """Delete the remote article recorded in FILE's frontmatter.

    The local file is left untouched.
    """
    from privateplot.services.articles import ArticleService

    app.check_host()

    def confirm(title: str, path: Path) -> bool:
        if assume_yes:
            return True
        return app.confirm(f'Are you sure you want to delete "{title}" ({path})?')

    app.emit(ArticleService(app.settings).delete(file, confirm=confirm))
