"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns logging setup, interactive prompts, and result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click

from privateplot.config.logging import configure_logging
from privateplot.config.settings import DEFAULT_HOST
from privateplot.output.formatters import OutputSettings, format_result
from privateplot.output.reporter import PublishReporter

if TYPE_CHECKING:
    from privateplot.config.settings import PlotSettings
    from privateplot.services.result import ServiceResult

logger = logging.getLogger("privateplot.cli")


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: PlotSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def machine_output(self) -> bool:
        """True when stdout is reserved for the final result."""
        return self.settings.json_output or self.settings.quiet

    def check_host(self) -> None:
        """Log a warning when commands will fall back to the default host."""
        if self.settings.uses_default_host:
            logger.warning(
                "No instance host configured, using default %s. "
                "Set one with `privateplot settings --host <host>`",
                DEFAULT_HOST,
            )

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask a yes/no question; ``--no-interact`` answers with *default*."""
        if self.settings.no_interact:
            return default
        return click.confirm(message, default=default, err=self.machine_output)

    def prompt(self, text: str, **kwargs: object) -> str:
        """Ask for a value; ``--no-interact`` makes a missing answer fatal."""
        if self.settings.no_interact:
            if "default" in kwargs:
                return str(kwargs["default"])
            msg = f"{text} is required in --no-interact mode"
            raise click.UsageError(msg)
        return click.prompt(text, err=self.machine_output, **kwargs)  # type: ignore[arg-type]

    def reporter(self) -> PublishReporter:
        return PublishReporter(to_stderr=self.machine_output)

    def emit(self, result: ServiceResult) -> None:
        """Format and output *result* with the right exit semantics.

        Success goes to stdout with warnings on stderr (JSON carries its own
        warnings). Failure goes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
