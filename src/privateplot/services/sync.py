"""ArticleSyncer — per-file skip / create / update decision and write-back.

One call to :meth:`ArticleSyncer.publish_file` walks a single file through:

1. parse the frontmatter (a malformed block or a non-UTF-8 file fails the
   file, no retry);
2. skip drafts unless drafts are included;
3. skip files not modified since ``privateplot-last-published``;
4. route: UPDATE when the file carries an id published to this same
   instance (host compared after normalization), CREATE otherwise;
5. call the API, retrying up to ``max_retries`` times with a fixed delay;
6. on success, write the reserved keys back into the frontmatter and set
   the file's mtime to the recorded publish instant.

The engine never raises for per-file problems: every path ends in a
:class:`PublishOutcome`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Protocol

from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from privateplot.domain.article import (
    RESERVED_HOST,
    RESERVED_ID,
    RESERVED_LAST_PUBLISHED,
    ArticleMeta,
    default_title,
    format_timestamp,
    publish_timestamp,
)
from privateplot.domain.errors import (
    ConfigurationError,
    FrontmatterParseError,
    RemoteRequestError,
)
from privateplot.domain.frontmatter import FrontmatterDocument, parse_document, render_document
from privateplot.domain.hosts import normalize_host, same_instance
from privateplot.infrastructure.filesystem import (
    has_file_changed,
    mark_published,
    read_markdown,
    write_markdown,
)

if TYPE_CHECKING:
    from privateplot.infrastructure.api import ArticleApiClient, ArticleResponse

logger = logging.getLogger(__name__)

MAX_RETRIES = 2
RETRY_DELAY = 1.0

SKIP_DRAFT = "draft"
SKIP_UNCHANGED = "no changes since last publish"

PublishStatus = Literal["published", "skipped", "failed"]
PublishAction = Literal["create", "update"]


class PublishOutcome(BaseModel):
    """Terminal state of one file's publish attempt."""

    model_config = {"frozen": True}

    path: str
    title: str
    status: PublishStatus
    action: PublishAction | None = None
    article_id: str | None = None
    reason: str | None = None
    error: str | None = None
    attempts: int = 0
    auth_error: bool = False
    config_error: bool = False

    @property
    def needs_config_fix(self) -> bool:
        """Failures that retrying cannot fix without operator action."""
        return self.auth_error or self.config_error


class PublishObserver(Protocol):
    """Receives per-file progress events (implemented by the CLI reporter)."""

    def article_action(self, action: str, title: str) -> None: ...

    def skipped(self, title: str, reason: str) -> None: ...

    def retry(self, title: str, attempt: int, total: int) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def article_action(self, action: str, title: str) -> None:
        pass

    def skipped(self, title: str, reason: str) -> None:
        pass

    def retry(self, title: str, attempt: int, total: int) -> None:
        pass


class ArticleSyncer:
    """Decide and perform the remote operation for one markdown file.

    Args:
        client: Open API client.
        instance_host: Host the run publishes to.
        observer: Progress event sink.
        include_drafts: Publish files marked ``draft: true``.
        force: Ignore change detection.
        max_retries: Extra attempts after the first failure.
        retry_delay: Fixed seconds between attempts.
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        client: ArticleApiClient,
        *,
        instance_host: str,
        observer: PublishObserver | None = None,
        include_drafts: bool = False,
        force: bool = False,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.instance_host = instance_host
        self._observer = observer or NullObserver()
        self.include_drafts = include_drafts
        self.force = force
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    # --- decisions ---

    def route(self, meta: ArticleMeta) -> PublishAction:
        """UPDATE only for an article already published to this instance."""
        if meta.article_id and same_instance(meta.host, self.instance_host):
            return "update"
        return "create"

    def should_skip(self, path: Path, meta: ArticleMeta) -> str | None:
        """Return the skip reason for *path*, or None to publish it."""
        if meta.draft and not self.include_drafts:
            return SKIP_DRAFT
        if self.force or meta.last_published is None:
            return None
        if not has_file_changed(path, meta.last_published):
            return SKIP_UNCHANGED
        return None

    # --- pipeline ---

    async def publish_file(self, path: Path) -> PublishOutcome:
        """Run the full decision pipeline for *path*."""
        fallback_title = default_title(path)
        try:
            raw = await asyncio.to_thread(read_markdown, path)
            doc = parse_document(raw)
        except FrontmatterParseError as exc:
            return self._failed(path, fallback_title, str(exc))
        except UnicodeDecodeError as exc:
            return self._failed(path, fallback_title, f"Cannot read file as UTF-8: {exc}")
        except OSError as exc:
            return self._failed(path, fallback_title, f"Cannot read file: {exc}")

        meta = ArticleMeta.from_record(doc.record)
        title = meta.title or fallback_title

        reason = self.should_skip(path, meta)
        if reason is not None:
            logger.debug("Skipping %s: %s", path, reason)
            self._observer.skipped(title, reason)
            return PublishOutcome(path=str(path), title=title, status="skipped", reason=reason)

        action = self.route(meta)
        total = self.max_retries + 1
        attempts = 0
        article: ArticleResponse | None = None
        retrying = AsyncRetrying(
            stop=stop_after_attempt(total),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(RemoteRequestError),
            before_sleep=self._announce_retry(path, title, total),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    self._observer.article_action(
                        "Updating" if action == "update" else "Publishing", title
                    )
                    article = await self._call_remote(action, meta, title, doc.body)
        except ConfigurationError as exc:
            return self._failed(
                path, title, str(exc), action=action, attempts=attempts, config_error=True
            )
        except RemoteRequestError as exc:
            return self._failed(
                path,
                title,
                str(exc),
                action=action,
                attempts=attempts,
                auth_error=exc.auth_error,
            )

        article_id = article.id if article is not None else meta.article_id
        try:
            await asyncio.to_thread(self._write_back, path, doc, action, article_id)
        except OSError as exc:
            # The remote side already changed; retrying would duplicate a create.
            return self._failed(
                path,
                title,
                f"Published but could not update frontmatter: {exc}",
                action=action,
                attempts=attempts,
            )

        return PublishOutcome(
            path=str(path),
            title=title,
            status="published",
            action=action,
            article_id=article_id,
            attempts=attempts,
        )

    def _announce_retry(
        self, path: Path, title: str, total: int
    ) -> Callable[[RetryCallState], None]:
        def hook(state: RetryCallState) -> None:
            exc = state.outcome.exception() if state.outcome else None
            logger.warning(
                "Attempt %d/%d failed for %s: %s", state.attempt_number, total, path, exc
            )
            self._observer.retry(title, state.attempt_number + 1, total)

        return hook

    async def _call_remote(
        self,
        action: PublishAction,
        meta: ArticleMeta,
        title: str,
        body: str,
    ) -> ArticleResponse | None:
        if action == "update":
            assert meta.article_id is not None
            return await self._client.update_article(
                meta.article_id, content=body, title=title, summary=meta.summary
            )
        return await self._client.create_article(
            content=body, title=title, summary=meta.summary, slug=meta.slug
        )

    def _write_back(
        self,
        path: Path,
        doc: FrontmatterDocument,
        action: PublishAction,
        article_id: str | None,
    ) -> None:
        """Record the remote identity and publish time in the file."""
        if action == "create":
            doc.record[RESERVED_ID] = article_id
            doc.record[RESERVED_HOST] = normalize_host(self.instance_host)
        published_at = publish_timestamp()
        doc.record[RESERVED_LAST_PUBLISHED] = format_timestamp(published_at)
        write_markdown(path, render_document(doc))
        mark_published(path, published_at)

    def _failed(
        self,
        path: Path,
        title: str,
        error: str,
        *,
        action: PublishAction | None = None,
        attempts: int = 0,
        auth_error: bool = False,
        config_error: bool = False,
    ) -> PublishOutcome:
        logger.debug("Publishing %s failed: %s", path, error)
        return PublishOutcome(
            path=str(path),
            title=title,
            status="failed",
            action=action,
            error=error,
            attempts=attempts,
            auth_error=auth_error,
            config_error=config_error,
        )
