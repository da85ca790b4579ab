"""Shared pytest fixtures and test helpers for privateplot tests."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from collections.abc import Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from privateplot.config.settings import PlotSettings
from privateplot.infrastructure.api import ArticleApiClient

HOST = "blog.example.com"
TOKEN = "test-token"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own configuration out of every test."""
    for name in (
        "PRIVATEPLOT_HOST",
        "INTERNAL_AUTH_TOKEN",
        "PRIVATEPLOT_CONFIG",
        "PRIVATEPLOT_REQUEST_TIMEOUT",
        "INSTANCE_HOST",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> Generator[CliRunner]:
    """Provide a Click CLI test runner.

    Each invocation installs a log handler bound to the runner's stderr;
    the root handlers are restored afterwards.
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield CliRunner()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def configured(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Run CLI commands from *tmp_path* with host and token in the env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PRIVATEPLOT_HOST", HOST)
    monkeypatch.setenv("INTERNAL_AUTH_TOKEN", TOKEN)
    return tmp_path


@pytest.fixture
def settings(tmp_path: Path) -> PlotSettings:
    """Settings pointing at :data:`HOST` with a token, no config file."""
    return PlotSettings.from_cli(cwd=tmp_path, instance_host=HOST, internal_auth_token=TOKEN)


# ---------------------------------------------------------------------------
# Fake remote API
# ---------------------------------------------------------------------------


class FakeApi:
    """In-memory stand-in for the PrivatePlot HTTP API.

    Serves the article and friend-link endpoints through
    ``httpx.MockTransport`` and records every request it receives.

    Attributes:
        requests: ``(method, path, params, body)`` per request, in order.
        failures: Responses to return (``(status, text)``) before normal
            handling resumes, consumed one per request.
        fail_always: When set, every request gets this ``(status, text)``.
        delay: Seconds each request takes, to make overlap observable.
        peak: Highest number of requests in flight at once.
    """

    def __init__(self, token: str = TOKEN) -> None:
        self.token = token
        self.requests: list[tuple[str, str, dict[str, str], Any]] = []
        self.articles: dict[str, dict[str, Any]] = {}
        self.links: dict[str, dict[str, Any]] = {}
        self.failures: deque[tuple[int, str]] = deque()
        self.fail_always: tuple[int, str] | None = None
        self.fail_titles: dict[str, tuple[int, str]] = {}
        self.delay = 0.0
        self.in_flight = 0
        self.peak = 0
        self._next_id = 1

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client_factory(self, settings: PlotSettings) -> Any:
        return lambda: ArticleApiClient.from_settings(settings, transport=self.transport)

    def calls(self, method: str | None = None) -> list[tuple[str, str, dict[str, str], Any]]:
        return [r for r in self.requests if method is None or r[0] == method]

    def add_article(self, title: str = "Existing", **extra: Any) -> str:
        article_id = self._new_id()
        self.articles[article_id] = {"id": article_id, "title": title, "content": "", **extra}
        return article_id

    def add_link(self, **fields: Any) -> str:
        link_id = self._new_id()
        self.links[link_id] = {"id": int(link_id), **fields}
        return link_id

    def _new_id(self) -> str:
        value = str(self._next_id)
        self._next_id += 1
        return value

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        params = dict(request.url.params)
        self.requests.append((request.method, request.url.path, params, body))

        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        if self.fail_always is not None:
            return httpx.Response(self.fail_always[0], text=self.fail_always[1])
        if self.failures:
            status, text = self.failures.popleft()
            return httpx.Response(status, text=text)
        if isinstance(body, dict) and body.get("title") in self.fail_titles:
            status, text = self.fail_titles[body["title"]]
            return httpx.Response(status, text=text)

        path = request.url.path
        if path.startswith("/api/internal/"):
            if request.headers.get("X-Internal-Auth-Token") != self.token:
                return httpx.Response(401, text="Unauthorized")
        if path == "/api/internal/article":
            return self._article(request.method, params, body)
        if path == "/api/articles":
            return self._list_articles(params)
        if path.startswith("/api/internal/friend-links"):
            return self._links(request.method, path, body)
        return httpx.Response(404, text="Not found")

    def _article(self, method: str, params: dict[str, str], body: Any) -> httpx.Response:
        if method == "PUT":
            article_id = self._new_id()
            self.articles[article_id] = {"id": int(article_id), **body}
            return httpx.Response(201, json=self.articles[article_id])
        article_id = params.get("id", "")
        if article_id not in self.articles:
            return httpx.Response(404, text="Article not found")
        if method == "PATCH":
            self.articles[article_id].update(body)
            return httpx.Response(200, json=self.articles[article_id])
        if method == "DELETE":
            del self.articles[article_id]
            return httpx.Response(204)
        return httpx.Response(405, text="Method not allowed")

    def _list_articles(self, params: dict[str, str]) -> httpx.Response:
        articles = [
            {"id": a["id"], "title": a.get("title", ""), "updatedAt": "2024-01-02T03:04:05.000Z"}
            for a in self.articles.values()
        ]
        return httpx.Response(
            200,
            json={"articles": articles, "total": len(articles), "hasMore": False},
        )

    def _links(self, method: str, path: str, body: Any) -> httpx.Response:
        link_id = path.rsplit("/", 1)[-1] if path.count("/") > 3 else None
        if link_id is None:
            if method == "GET":
                return httpx.Response(200, json=list(self.links.values()))
            if method == "POST":
                new_id = self.add_link(**body)
                return httpx.Response(201, json=self.links[new_id])
        elif link_id in self.links:
            if method == "PUT":
                self.links[link_id].update(body)
                return httpx.Response(200, json=self.links[link_id])
            if method == "DELETE":
                del self.links[link_id]
                return httpx.Response(204)
        return httpx.Response(404, text="Link not found")


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def patched_api(fake_api: FakeApi, monkeypatch: pytest.MonkeyPatch) -> FakeApi:
    """Route every client the CLI builds to :class:`FakeApi`."""
    original = ArticleApiClient.from_settings.__func__  # type: ignore[attr-defined]

    def from_settings(
        cls: type[ArticleApiClient], settings: PlotSettings, *, transport: Any = None
    ) -> ArticleApiClient:
        return original(cls, settings, transport=transport or fake_api.transport)

    monkeypatch.setattr(ArticleApiClient, "from_settings", classmethod(from_settings))
    return fake_api


# ---------------------------------------------------------------------------
# Markdown helpers
# ---------------------------------------------------------------------------


def write_article(directory: Path, name: str, frontmatter: str | None, body: str = "Body") -> Path:
    """Write a markdown file; *frontmatter* is the YAML between the delimiters."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    if frontmatter is None:
        path.write_text(body, encoding="utf-8")
    else:
        path.write_text(f"---\n{frontmatter}---\n\n{body}", encoding="utf-8")
    return path


def read_record(path: Path) -> dict[str, Any]:
    from privateplot.domain.frontmatter import parse_frontmatter

    record, _ = parse_frontmatter(path.read_text(encoding="utf-8"))
    return dict(record)
