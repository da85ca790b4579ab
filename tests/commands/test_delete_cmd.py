"""Tests for the delete command."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from privateplot.cli import cli
from tests.conftest import HOST, FakeApi, write_article


def _published(directory: Path, api: FakeApi) -> Path:
    article_id = api.add_article("Hello")
    return write_article(
        directory,
        "hello.md",
        f"title: Hello\nprivateplot-id: '{article_id}'\nprivateplot-host: {HOST}\n",
    )


class TestDeleteCommand:
    def test_delete_with_yes(
        self, cli_runner: CliRunner, configured: Path, patched_api: FakeApi
    ) -> None:
        path = _published(configured, patched_api)
        before = path.read_text()
        result = cli_runner.invoke(cli, ["delete", "hello.md", "-y"])
        assert result.exit_code == 0, result.output
        assert "delete_article" in result.stdout
        assert patched_api.articles == {}
        assert path.read_text() == before

    def test_prompt_declined(
        self, cli_runner: CliRunner, configured: Path, patched_api: FakeApi
    ) -> None:
        _published(configured, patched_api)
        result = cli_runner.invoke(cli, ["delete", "hello.md"], input="n\n")
        assert result.exit_code == 0
        assert 'Are you sure you want to delete "Hello"' in result.output
        assert "cancelled" in result.stdout
        assert len(patched_api.articles) == 1

    def test_already_gone_warns(
        self, cli_runner: CliRunner, configured: Path, patched_api: FakeApi
    ) -> None:
        write_article(configured, "gone.md", f"privateplot-id: '99'\nprivateplot-host: {HOST}\n")
        result = cli_runner.invoke(cli, ["delete", "gone.md", "-y"])
        assert result.exit_code == 0
        assert "WARNING: Article not found on server" in result.stderr

    def test_unpublished_file_fails(
        self, cli_runner: CliRunner, configured: Path, patched_api: FakeApi
    ) -> None:
        write_article(configured, "draft.md", "title: Draft\n")
        result = cli_runner.invoke(cli, ["delete", "draft.md", "-y"])
        assert result.exit_code == 1
        assert "No article ID found in frontmatter" in result.stderr
        assert patched_api.requests == []

    def test_other_host_refused(
        self, cli_runner: CliRunner, configured: Path, patched_api: FakeApi
    ) -> None:
        write_article(
            configured, "x.md", "privateplot-id: '1'\nprivateplot-host: other.example.com\n"
        )
        result = cli_runner.invoke(cli, ["delete", "x.md", "-y"])
        assert result.exit_code == 1
        assert "different host" in result.stderr
