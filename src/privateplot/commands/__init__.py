"""Subcommand modules for privateplot."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every command and command group to the root CLI group."""
    from privateplot.commands.delete import delete
    from privateplot.commands.links import links
    from privateplot.commands.list_cmd import list_cmd
    from privateplot.commands.publish import publish
    from privateplot.commands.settings_cmd import settings_cmd

    cli.add_command(publish)
    cli.add_command(delete)
    cli.add_command(list_cmd)
    cli.add_command(settings_cmd)
    cli.add_command(links)
