"""BaseService — shared foundation for services that talk to the API.

Every service receives the resolved :class:`PlotSettings` and a factory for
API clients. Each synchronous entry point runs its remote work in a fresh
event loop with a fresh client, so services stay callable from plain Click
commands.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from privateplot.infrastructure.api import ArticleApiClient

if TYPE_CHECKING:
    from privateplot.config.settings import PlotSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[], ArticleApiClient]


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ArticleService(BaseService):
            def list_articles(self) -> ServiceResult:
                data = self._call(lambda client: client.list_articles())
                ...
    """

    def __init__(
        self,
        settings: PlotSettings,
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory or (
            lambda: ArticleApiClient.from_settings(settings)
        )

    def _call(self, operation: Callable[[ArticleApiClient], Awaitable[T]]) -> T:
        """Run *operation* against a new client in a new event loop."""

        async def runner() -> T:
            async with self._client_factory() as client:
                return await operation(client)

        return asyncio.run(runner())
