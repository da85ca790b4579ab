"""Tests for ArticleApiClient against an httpx MockTransport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from privateplot.domain.errors import ConfigurationError, RemoteRequestError
from privateplot.infrastructure.api import AUTH_HEADER, ArticleApiClient


def _client(handler: Any, host: str | None = "blog.example.com", token: str | None = "tok"):
    return ArticleApiClient(host, token, transport=httpx.MockTransport(handler))


class TestRequest:
    @pytest.mark.asyncio
    async def test_sends_auth_header_and_https(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 5, "title": "T", "content": "C"})

        async with _client(handler) as client:
            article = await client.create_article(content="C", title="T")

        assert article.id == "5"
        request = seen[0]
        assert request.method == "PUT"
        assert str(request.url) == "https://blog.example.com/api/internal/article"
        assert request.headers[AUTH_HEADER] == "tok"
        assert json.loads(request.content) == {"content": "C", "title": "T"}

    @pytest.mark.asyncio
    async def test_localhost_uses_http(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(204)

        async with _client(handler, host="localhost:4321") as client:
            await client.delete_article("9")

        assert seen == ["http://localhost:4321/api/internal/article?id=9"]

    @pytest.mark.asyncio
    async def test_missing_token_raises_before_sending(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        async with _client(handler, token=None) as client:
            with pytest.raises(ConfigurationError, match="No auth token"):
                await client.create_article(content="C", title="T")
        assert calls == []

    @pytest.mark.asyncio
    async def test_missing_host_raises(self) -> None:
        async with _client(lambda r: httpx.Response(200), host=None) as client:
            with pytest.raises(ConfigurationError, match="No instance host"):
                await client.list_articles()

    @pytest.mark.asyncio
    async def test_error_status_carries_body_and_status(self) -> None:
        async with _client(lambda r: httpx.Response(401, text="Unauthorized")) as client:
            with pytest.raises(RemoteRequestError) as excinfo:
                await client.update_article("1", content="C", title="T")
        assert excinfo.value.status == 401
        assert excinfo.value.auth_error is True
        assert str(excinfo.value) == "Unauthorized"

    @pytest.mark.asyncio
    async def test_not_found_is_not_auth_error(self) -> None:
        async with _client(lambda r: httpx.Response(404, text="Article not found")) as client:
            with pytest.raises(RemoteRequestError) as excinfo:
                await client.delete_article("1")
        assert excinfo.value.status == 404
        assert excinfo.value.auth_error is False

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(RemoteRequestError, match="Network error") as excinfo:
                await client.create_article(content="C", title="T")
        assert excinfo.value.status is None


class TestArticles:
    @pytest.mark.asyncio
    async def test_update_sends_id_param_and_drops_empty_summary(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "1", "title": "T"})

        async with _client(handler) as client:
            article = await client.update_article("1", content="C", title="T")

        assert article is not None and article.id == "1"
        assert seen[0].method == "PATCH"
        assert seen[0].url.params["id"] == "1"
        assert json.loads(seen[0].content) == {"content": "C", "title": "T"}

    @pytest.mark.asyncio
    async def test_create_includes_summary_and_slug(self) -> None:
        bodies: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": 1})

        async with _client(handler) as client:
            await client.create_article(content="C", title="T", summary="S", slug="t")

        assert bodies == [{"content": "C", "title": "T", "summary": "S", "slug": "t"}]

    @pytest.mark.asyncio
    async def test_list_sends_page_and_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"articles": [{"id": 1}], "total": 1})

        async with _client(handler) as client:
            data = await client.list_articles(page=2)

        assert data["total"] == 1
        assert seen[0].url.path == "/api/articles"
        assert seen[0].url.params["page"] == "2"
        assert seen[0].headers[AUTH_HEADER] == "tok"


class TestFriendLinks:
    @pytest.mark.asyncio
    async def test_list_links(self) -> None:
        payload = [{"id": 1, "name": "Jane", "url": "https://jane.dev", "status": "active"}]
        async with _client(lambda r: httpx.Response(200, json=payload)) as client:
            links = await client.list_links()
        assert [link.id for link in links] == ["1"]
        assert links[0].name == "Jane"

    @pytest.mark.asyncio
    async def test_update_and_delete_paths(self) -> None:
        seen: list[tuple[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path))
            if request.method == "PUT":
                return httpx.Response(200, json={"id": 3, "name": "N", "url": "https://n.dev"})
            return httpx.Response(204)

        async with _client(handler) as client:
            link = await client.update_link("3", {"name": "N", "url": "https://n.dev"})
            await client.delete_link("3")

        assert link is not None and link.id == "3"
        assert seen == [
            ("PUT", "/api/internal/friend-links/3"),
            ("DELETE", "/api/internal/friend-links/3"),
        ]
