"""Filesystem operations for publishable markdown files.

The publish pipeline only ever writes the frontmatter block of a file it
has just published. The write happens in place and keeps the original
line endings.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

MARKDOWN_SUFFIX = ".md"

# Dependency directory skipped during discovery (dot-directories are skipped too).
_SKIP_DIRS = frozenset({"node_modules"})

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Path classification
# ---------------------------------------------------------------------------


def is_markdown_file(path: Path) -> bool:
    """True for an existing regular file with a ``.md`` suffix (any case)."""
    return path.is_file() and path.suffix.lower() == MARKDOWN_SUFFIX


def is_directory(path: Path) -> bool:
    return path.is_dir()


def find_markdown_files(directory: Path) -> list[Path]:
    """Recursively collect markdown files below *directory*.

    Directories whose name starts with ``.`` and ``node_modules`` are not
    descended into. Results are sorted for a stable preview order.
    """
    results: list[Path] = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in _SKIP_DIRS]
        for name in files:
            if Path(name).suffix.lower() == MARKDOWN_SUFFIX:
                results.append(Path(root) / name)
    return sorted(results)


# ---------------------------------------------------------------------------
# Change detection
# ---------------------------------------------------------------------------


def has_file_changed(path: Path, last_published: datetime | None) -> bool:
    """Whether *path* was modified after *last_published*.

    A missing timestamp, or a file that cannot be stat'ed, counts as changed.
    *last_published* must be timezone-aware.
    """
    if last_published is None:
        return True
    try:
        mtime_ns = path.stat().st_mtime_ns
    except OSError:
        return True
    return mtime_ns > _to_ns(last_published)


def mark_published(path: Path, published_at: datetime) -> None:
    """Set the file's mtime to *published_at* so it reads as unchanged."""
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, _to_ns(published_at)))


def _to_ns(moment: datetime) -> int:
    """Exact nanoseconds since the epoch, without float rounding."""
    return (moment - _EPOCH) // timedelta(microseconds=1) * 1000


# ---------------------------------------------------------------------------
# File I/O (newline="" keeps \r\n bodies byte-for-byte)
# ---------------------------------------------------------------------------


def read_markdown(path: Path) -> str:
    """Read *path* as UTF-8; other encodings raise ``UnicodeDecodeError``."""
    with path.open(encoding="utf-8", newline="") as fh:
        return fh.read()


def write_markdown(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(text)
