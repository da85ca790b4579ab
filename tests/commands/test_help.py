"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from privateplot.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["publish", "--help"], ["PATH", "--concurrency", "--yes", "--include-drafts", "--force"]),
    (["delete", "--help"], ["FILE", "--yes", "local file is left untouched"]),
    (["list", "--help"], ["--page"]),
    (["settings", "--help"], ["--host", "--token"]),
    (["links", "--help"], ["list", "add", "modify", "delete"]),
    (["links", "add", "--help"], ["--name", "--url", "--description", "--avatar", "--status"]),
    (["links", "modify", "--help"], ["LINK_ID", "--status"]),
    (["links", "delete", "--help"], ["LINK_ID", "--yes"]),
]


@pytest.mark.parametrize(
    ("args", "keywords"),
    HELP_COMMANDS,
    ids=["_".join(a for a in args if a != "--help") for args, _ in HELP_COMMANDS],
)
def test_command_help(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    for keyword in keywords:
        assert keyword in result.output, f"{keyword!r} missing from {' '.join(args)}"
