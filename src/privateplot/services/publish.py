"""PublishService — batch publish of a markdown file or directory tree.

Flow of :meth:`PublishService.run`:

1. resolve the path (markdown file or directory, anything else is an
   :class:`InvalidInputError`) and enumerate candidate files;
2. set drafts aside (unparseable frontmatter is *not* a draft);
3. preview the first few files and ask for confirmation — nothing touches
   the network or the files if the operator declines;
4. publish every file through one :class:`ConcurrencyController`, folding
   each outcome into :class:`PublishStats` as it completes;
5. report failures in two buckets: ones that need a config fix (401/403,
   missing host/token), and everything else, which is offered exactly one
   interactive retry wave.

Statistics and failure lists are only mutated from task completion code on
the event loop thread, so they need no locking.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel

from privateplot.domain.article import ArticleMeta, default_title
from privateplot.domain.errors import FrontmatterParseError, InvalidInputError
from privateplot.domain.frontmatter import parse_document
from privateplot.infrastructure.filesystem import (
    find_markdown_files,
    is_directory,
    is_markdown_file,
    read_markdown,
)
from privateplot.services.base import BaseService, ClientFactory
from privateplot.services.concurrency import ConcurrencyController
from privateplot.services.result import ServiceResult
from privateplot.services.sync import (
    RETRY_DELAY,
    ArticleSyncer,
    PublishObserver,
    PublishOutcome,
)

if TYPE_CHECKING:
    from privateplot.config.settings import PlotSettings

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10
PREVIEW_LIMIT = 5

AUTH_FIX_WARNING = "Please fix authentication issues before retrying these articles"

Prompt = Callable[[str], bool]


# ---------------------------------------------------------------------------
# Batch bookkeeping
# ---------------------------------------------------------------------------


@dataclass
class PublishStats:
    """Counters for one publish wave."""

    total: int = 0
    published: int = 0
    skipped: int = 0
    failed: int = 0

    def record(self, outcome: PublishOutcome) -> None:
        if outcome.status == "published":
            self.published += 1
        elif outcome.status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "published": self.published,
            "skipped": self.skipped,
            "failed": self.failed,
        }


class FailedArticle(BaseModel):
    """A file that ended in the failed state, as shown to the operator."""

    model_config = {"frozen": True}

    path: str
    title: str
    error: str
    retries: int
    auth_error: bool = False
    config_error: bool = False

    @classmethod
    def from_outcome(cls, outcome: PublishOutcome) -> FailedArticle:
        return cls(
            path=outcome.path,
            title=outcome.title,
            error=outcome.error or "Unknown error",
            retries=outcome.attempts,
            auth_error=outcome.auth_error,
            config_error=outcome.config_error,
        )


@dataclass
class BatchReport:
    """Result of one wave: counters plus the two failure buckets."""

    stats: PublishStats
    failed: list[FailedArticle] = field(default_factory=list)
    auth_failed: list[FailedArticle] = field(default_factory=list)
    outcomes: list[PublishOutcome] = field(default_factory=list)

    def record(self, outcome: PublishOutcome) -> None:
        self.stats.record(outcome)
        self.outcomes.append(outcome)
        if outcome.status != "failed":
            return
        failed = FailedArticle.from_outcome(outcome)
        if outcome.needs_config_fix:
            self.auth_failed.append(failed)
        else:
            self.failed.append(failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.stats.to_dict(),
            "failed_articles": [f.model_dump() for f in self.failed],
            "auth_failed_articles": [f.model_dump() for f in self.auth_failed],
        }


class BatchObserver(PublishObserver, Protocol):
    """Batch-level progress events on top of the per-file ones."""

    def preview(self, files: list[Path], base: Path, limit: int) -> None: ...

    def publish_start(self, total: int) -> None: ...

    def progress(self, completed: int, total: int) -> None: ...

    def publish_end(self, stats: PublishStats) -> None: ...

    def failed_articles(self, articles: list[FailedArticle]) -> None: ...

    def warning(self, message: str) -> None: ...


class NullBatchObserver:
    """Observer that ignores every event."""

    def article_action(self, action: str, title: str) -> None:
        pass

    def skipped(self, title: str, reason: str) -> None:
        pass

    def retry(self, title: str, attempt: int, total: int) -> None:
        pass

    def preview(self, files: list[Path], base: Path, limit: int) -> None:
        pass

    def publish_start(self, total: int) -> None:
        pass

    def progress(self, completed: int, total: int) -> None:
        pass

    def publish_end(self, stats: PublishStats) -> None:
        pass

    def failed_articles(self, articles: list[FailedArticle]) -> None:
        pass

    def warning(self, message: str) -> None:
        pass


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class PublishService(BaseService):
    """Drive a full publish run over a file or directory.

    Args:
        settings: Resolved CLI settings (host, token, timeout).
        client_factory: Builds a fresh API client per wave (each wave runs in
            its own event loop).
        observer: Progress sink; the CLI passes a rich reporter.
        concurrency: Maximum files in flight at once (>= 1).
        include_drafts: Publish ``draft: true`` files too.
        force: Republish files even when unchanged.
        retry_delay: Seconds between attempts for one file.
    """

    def __init__(
        self,
        settings: PlotSettings,
        *,
        client_factory: ClientFactory | None = None,
        observer: BatchObserver | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        include_drafts: bool = False,
        force: bool = False,
        retry_delay: float = RETRY_DELAY,
    ) -> None:
        super().__init__(settings, client_factory=client_factory)
        self._observer: BatchObserver = observer or NullBatchObserver()
        self.concurrency = concurrency
        self.include_drafts = include_drafts
        self.force = force
        self.retry_delay = retry_delay

    # --- discovery ---

    @staticmethod
    def discover(path: Path) -> list[Path]:
        """Return the markdown files to consider for *path*.

        Raises:
            InvalidInputError: *path* is neither a markdown file nor a directory.
        """
        if is_directory(path):
            return find_markdown_files(path)
        if is_markdown_file(path):
            return [path]
        msg = f"Invalid path: {path} - must be a markdown file or directory"
        raise InvalidInputError(msg)

    @staticmethod
    def partition_drafts(files: list[Path]) -> tuple[list[Path], list[Path]]:
        """Split *files* into ``(publishable, drafts)``.

        A file whose frontmatter cannot be read or parsed is publishable, so
        it shows up as a failure instead of silently disappearing.
        """
        publishable: list[Path] = []
        drafts: list[Path] = []
        for path in files:
            try:
                doc = parse_document(read_markdown(path))
            except (FrontmatterParseError, UnicodeDecodeError, OSError):
                publishable.append(path)
                continue
            if ArticleMeta.from_record(doc.record).draft:
                drafts.append(path)
            else:
                publishable.append(path)
        return publishable, drafts

    # --- execution ---

    async def publish_batch(self, files: list[Path]) -> BatchReport:
        """Publish *files* with at most ``concurrency`` in flight."""
        report = BatchReport(stats=PublishStats(total=len(files)))
        controller = ConcurrencyController(self.concurrency)
        completed = 0

        self._observer.publish_start(len(files))
        async with self._client_factory() as client:
            syncer = ArticleSyncer(
                client,
                instance_host=self._settings.effective_host,
                observer=self._observer,
                include_drafts=self.include_drafts,
                force=self.force,
                retry_delay=self.retry_delay,
            )

            def make_task(path: Path) -> Callable[[], Any]:
                async def task() -> None:
                    nonlocal completed
                    try:
                        outcome = await syncer.publish_file(path)
                    except Exception as exc:
                        logger.exception("Unexpected error publishing %s", path)
                        outcome = PublishOutcome(
                            path=str(path),
                            title=default_title(path),
                            status="failed",
                            error=f"Unexpected error: {exc}",
                        )
                    report.record(outcome)
                    completed += 1
                    self._observer.progress(completed, len(files))

                return task

            await asyncio.gather(*(controller.add(make_task(p)) for p in files))

        self._observer.publish_end(report.stats)
        return report

    def run(
        self,
        path: Path,
        *,
        confirm: Prompt,
        ask_retry: Prompt,
    ) -> ServiceResult:
        """Discover, confirm, publish, and offer one retry wave.

        Args:
            path: Markdown file or directory.
            confirm: Asked once before any network activity.
            ask_retry: Asked once when retryable failures remain.
        """
        op = "publish"
        try:
            files = self.discover(path)
        except InvalidInputError as exc:
            return ServiceResult.from_error(op, exc, path=str(path))

        base: dict[str, Any] = {"path": str(path), "concurrency": self.concurrency}
        if not files:
            return ServiceResult(
                ok=True,
                op=op,
                data={**base, **PublishStats().to_dict()},
                warnings=["No markdown files found"],
            )

        if self.include_drafts:
            publishable, drafts = files, []
        else:
            publishable, drafts = self.partition_drafts(files)
        base["drafts"] = len(drafts)
        if drafts:
            logger.info("Skipping %d draft files", len(drafts))
        if not publishable:
            return ServiceResult(
                ok=True,
                op=op,
                data={**base, **PublishStats().to_dict()},
                warnings=["No publishable files found (all are drafts)"],
            )

        self._observer.preview(publishable, path, PREVIEW_LIMIT)
        if not confirm(f"Do you want to publish these {len(publishable)} files?"):
            return ServiceResult(ok=True, op=op, data={**base, "cancelled": True})

        started = time.perf_counter()
        report = asyncio.run(self.publish_batch(publishable))
        data: dict[str, Any] = {**base, **report.to_dict()}
        warnings: list[str] = []

        if report.auth_failed:
            self._observer.failed_articles(report.auth_failed)
            self._observer.warning(AUTH_FIX_WARNING)
            warnings.append(AUTH_FIX_WARNING)

        if report.failed:
            self._observer.failed_articles(report.failed)
            if ask_retry("Would you like to retry publishing the failed articles?"):
                retry_files = [Path(f.path) for f in report.failed]
                retry_report = asyncio.run(self.publish_batch(retry_files))
                data["retry"] = retry_report.to_dict()
                if retry_report.failed or retry_report.auth_failed:
                    self._observer.failed_articles(
                        [*retry_report.auth_failed, *retry_report.failed]
                    )
                    warnings.append(
                        f"{retry_report.stats.failed} articles still failed after retry"
                    )
            else:
                warnings.append(f"{len(report.failed)} articles failed to publish")

        meta = {
            "host": self._settings.effective_host,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        }
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings, meta=meta)

