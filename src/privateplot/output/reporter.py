"""Live progress reporter for ``privateplot publish``.

Implements the publish observer protocol on top of a Rich console. Events
arrive from the event loop thread while tasks complete. A wave is tracked
by one :class:`rich.progress.Progress` task that lives from
``publish_start`` to ``publish_end``; per-file lines print above it.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskID, TextColumn
from rich.text import Text

from privateplot.output.console import create_stream_console

if TYPE_CHECKING:
    from rich.console import Console

    from privateplot.services.publish import FailedArticle, PublishStats

BAR_WIDTH = 30


def _relative(path: Path, base: Path) -> str:
    root = base if base.is_dir() else base.parent
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


class PublishReporter:
    """Stream publish events to the operator.

    Args:
        console: Target console. Defaults to stdout, or stderr when
            *to_stderr* is set (``--json`` / ``--quiet`` keep stdout clean).
    """

    def __init__(self, console: Console | None = None, *, to_stderr: bool = False) -> None:
        self.console = console or create_stream_console(stderr=to_stderr)
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    # --- per-file events ---

    def article_action(self, action: str, title: str) -> None:
        self.console.print(Text.assemble((f"{action} ", "plot.action"), "→ ", (title, "plot.title")))

    def skipped(self, title: str, reason: str) -> None:
        self.console.print(
            Text.assemble(("Skipping ", "plot.skip"), (title, "plot.title"), f" ({reason})")
        )

    def retry(self, title: str, attempt: int, total: int) -> None:
        self.console.print(
            Text.assemble(
                ("Retrying ", "plot.warning"),
                (title, "plot.title"),
                f" (attempt {attempt}/{total})",
            )
        )

    # --- batch events ---

    def preview(self, files: list[Path], base: Path, limit: int) -> None:
        self.console.print(f"Found {len(files)} files to publish:")
        for path in files[:limit]:
            self.console.print(Text(f"  - {_relative(path, base)}", style="plot.path"))
        if len(files) > limit:
            self.console.print(f"  ... and {len(files) - limit} more")

    def publish_start(self, total: int) -> None:
        self._stop_progress()
        self.console.print(Text(f"\nPublishing {total} articles...", style="plot.op"))
        self._progress = Progress(
            TextColumn("[plot.op]{task.description}"),
            BarColumn(bar_width=BAR_WIDTH),
            TextColumn("{task.percentage:>3.0f}%"),
            MofNCompleteColumn(),
            console=self.console,
        )
        self._task = self._progress.add_task("Publishing", total=total)
        self._progress.start()

    def progress(self, completed: int, total: int) -> None:
        if self._progress is None or self._task is None:
            return
        self._progress.update(self._task, completed=completed, total=total)

    def publish_end(self, stats: PublishStats) -> None:
        self._stop_progress()
        self.console.print(
            Text.assemble(
                ("\nPublish complete: ", "plot.ok"),
                f"{stats.published} published, {stats.skipped} skipped, "
                f"{stats.failed} failed (of {stats.total})",
            )
        )

    def failed_articles(self, articles: list[FailedArticle]) -> None:
        if not articles:
            return
        self.console.print(Text(f"\n{len(articles)} articles failed:", style="plot.error"))
        for article in articles:
            self.console.print(Text(f"  - {article.title}", style="plot.title"))
            self.console.print(Text(f"    path: {article.path}", style="plot.path"))
            self.console.print(f"    error: {article.error}")
            self.console.print(f"    retries: {article.retries}")

    def warning(self, message: str) -> None:
        self.console.print(Text(message, style="plot.warning"))

    def _stop_progress(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None
