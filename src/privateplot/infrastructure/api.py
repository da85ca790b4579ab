"""Async client for the PrivatePlot HTTP API.

All ``/api/internal/*`` endpoints require the ``X-Internal-Auth-Token``
header. Configuration is checked lazily, on the first request that needs
it, so a missing token fails the file being published rather than the
whole run.

Every non-2xx response and every transport failure is raised as
:class:`RemoteRequestError`; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, field_validator

from privateplot.domain.errors import ConfigurationError, RemoteRequestError
from privateplot.domain.hosts import base_url

if TYPE_CHECKING:
    from privateplot.config.settings import PlotSettings

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Internal-Auth-Token"
ARTICLE_PATH = "/api/internal/article"
ARTICLES_PATH = "/api/articles"
FRIEND_LINKS_PATH = "/api/internal/friend-links"

NO_HOST_MESSAGE = (
    "No instance host configured. Please set it using "
    "`privateplot settings --host <host>` or PRIVATEPLOT_HOST environment variable"
)
NO_TOKEN_MESSAGE = (
    "No auth token found. Please set it using "
    "`privateplot settings --token <token>` or INTERNAL_AUTH_TOKEN environment variable"
)


# ---------------------------------------------------------------------------
# Response payloads
# ---------------------------------------------------------------------------


class ArticleResponse(BaseModel):
    """Article as returned by the create/update endpoints."""

    model_config = {"frozen": True, "extra": "ignore"}

    id: str
    title: str = ""
    content: str = ""
    summary: str | None = None
    slug: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> str:
        return str(value)


class FriendLink(BaseModel):
    """A blogroll entry managed through the internal friend-links API."""

    model_config = {"frozen": True, "extra": "ignore"}

    id: str
    name: str
    url: str
    description: str | None = None
    avatar: str | None = None
    status: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> str:
        return str(value)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


class ArticleApiClient:
    """Thin async wrapper over ``httpx.AsyncClient``.

    Use as an async context manager; one instance belongs to one event loop.

    Args:
        host: Instance host, with or without protocol.
        token: Internal auth token.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        host: str | None,
        token: str | None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.host = host or ""
        self._token = token or ""
        self._http = httpx.AsyncClient(
            base_url=base_url(self.host) if self.host else "",
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: PlotSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ArticleApiClient:
        return cls(
            settings.effective_host,
            settings.internal_auth_token,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ArticleApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- transport ---

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        require_auth: bool = True,
    ) -> Any:
        """Send one request and return the decoded JSON body (or None).

        Raises:
            ConfigurationError: Host missing, or token missing when
                *require_auth* is set.
            RemoteRequestError: Non-2xx status or network failure.
        """
        if not self.host:
            raise ConfigurationError(NO_HOST_MESSAGE)
        headers: dict[str, str] = {}
        if require_auth:
            if not self._token:
                raise ConfigurationError(NO_TOKEN_MESSAGE)
            headers[AUTH_HEADER] = self._token

        logger.debug("API request: %s %s%s", method, self._http.base_url, path)
        try:
            response = await self._http.request(
                method,
                path,
                params=params,
                json=json if method != "GET" else None,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Network error: %s", exc)
            msg = f"Network error: {exc}"
            raise RemoteRequestError(msg) from exc

        if response.is_error:
            text = response.text or response.reason_phrase
            logger.warning("API error (%s): %s", response.status_code, text)
            raise RemoteRequestError(text, status=response.status_code)

        if "application/json" not in response.headers.get("content-type", ""):
            return None
        if not response.content:
            return None
        return response.json()

    # --- articles ---

    async def create_article(
        self,
        *,
        content: str,
        title: str,
        summary: str | None = None,
        slug: str | None = None,
    ) -> ArticleResponse:
        """``PUT /api/internal/article`` — create a new article."""
        data = await self.request(
            "PUT",
            ARTICLE_PATH,
            json=_drop_none({"content": content, "title": title, "summary": summary, "slug": slug}),
        )
        if not isinstance(data, dict):
            msg = "Create succeeded but the response carried no article"
            raise RemoteRequestError(msg)
        return ArticleResponse.model_validate(data)

    async def update_article(
        self,
        article_id: str,
        *,
        content: str,
        title: str,
        summary: str | None = None,
    ) -> ArticleResponse | None:
        """``PATCH /api/internal/article?id=`` — update an existing article."""
        data = await self.request(
            "PATCH",
            ARTICLE_PATH,
            params={"id": article_id},
            json=_drop_none({"content": content, "title": title, "summary": summary}),
        )
        return ArticleResponse.model_validate(data) if isinstance(data, dict) else None

    async def delete_article(self, article_id: str) -> None:
        """``DELETE /api/internal/article?id=``."""
        await self.request("DELETE", ARTICLE_PATH, params={"id": article_id})

    async def list_articles(self, *, page: int = 1) -> dict[str, Any]:
        """``GET /api/articles`` — one page of published articles."""
        data = await self.request("GET", ARTICLES_PATH, params={"page": str(page)})
        return data if isinstance(data, dict) else {"articles": [], "total": 0}

    # --- friend links ---

    async def list_links(self) -> list[FriendLink]:
        data = await self.request("GET", FRIEND_LINKS_PATH)
        return [FriendLink.model_validate(item) for item in data or []]

    async def create_link(self, payload: dict[str, Any]) -> FriendLink | None:
        data = await self.request("POST", FRIEND_LINKS_PATH, json=_drop_none(payload))
        return FriendLink.model_validate(data) if isinstance(data, dict) else None

    async def update_link(self, link_id: str, payload: dict[str, Any]) -> FriendLink | None:
        data = await self.request("PUT", f"{FRIEND_LINKS_PATH}/{link_id}", json=payload)
        return FriendLink.model_validate(data) if isinstance(data, dict) else None

    async def delete_link(self, link_id: str) -> None:
        await self.request("DELETE", f"{FRIEND_LINKS_PATH}/{link_id}")
