"""Root CLI group for privateplot with global flags and command registration."""

from __future__ import annotations

import click

from privateplot import __version__
from privateplot.commands import register_commands
from privateplot.commands._base import PlotGroup
from privateplot.commands._context import AppContext
from privateplot.config.settings import PlotSettings


@click.group(
    cls=PlotGroup,
    invoke_without_command=True,
    examples="""\
  privateplot settings --host blog.example.com --token s3cret
  privateplot publish posts/
  privateplot -v publish posts/ --concurrency 4 --yes
  privateplot --json list""",
)
@click.version_option(version=__version__, prog_name="privateplot")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--no-interact", is_flag=True, help="Never prompt; take each prompt's default.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    no_interact: bool,
    config_path: str | None,
) -> None:
    """privateplot — publish markdown articles to a PrivatePlot blog."""
    settings = PlotSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        no_interact=no_interact,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
