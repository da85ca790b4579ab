"""Article metadata — typed view over the reserved frontmatter keys.

The frontmatter record itself stays an opaque mapping so unknown keys
round-trip untouched. :class:`ArticleMeta` reads the keys the platform
gives meaning to; the ``RESERVED_*`` constants name the keys the sync
engine writes back after a successful remote operation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

RESERVED_ID = "privateplot-id"
RESERVED_HOST = "privateplot-host"
RESERVED_LAST_PUBLISHED = "privateplot-last-published"

RESERVED_KEYS: tuple[str, ...] = (RESERVED_ID, RESERVED_HOST, RESERVED_LAST_PUBLISHED)


class ArticleMeta(BaseModel):
    """Reserved and well-known frontmatter fields of one article."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    article_id: str | None = Field(default=None, alias=RESERVED_ID)
    host: str | None = Field(default=None, alias=RESERVED_HOST)
    last_published: datetime | None = Field(default=None, alias=RESERVED_LAST_PUBLISHED)
    title: str | None = None
    summary: str | None = None
    slug: str | None = None
    draft: bool = False

    @field_validator("article_id", "host", "title", "summary", "slug", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("draft", mode="before")
    @classmethod
    def _strict_draft(cls, value: Any) -> bool:
        # Only a literal YAML ``true`` marks a draft.
        return value is True

    @field_validator("last_published", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> datetime | None:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=UTC)
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            # Unreadable timestamps mean "never published".
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ArticleMeta:
        return cls.model_validate(dict(record))

    @property
    def is_published(self) -> bool:
        return self.article_id is not None


_SEPARATOR_RE = re.compile(r"[-_]")
_WORD_START_RE = re.compile(r"\b\w")


def default_title(path: Path) -> str:
    """Human-readable title derived from a filename.

    Examples:
        >>> default_title(Path("posts/my-first_post.md"))
        'My First Post'
    """
    spaced = _SEPARATOR_RE.sub(" ", path.stem)
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), spaced)


def publish_timestamp(now: datetime | None = None) -> datetime:
    """Current UTC instant truncated to milliseconds (the precision we persist)."""
    current = now or datetime.now(UTC)
    return current.replace(microsecond=current.microsecond // 1000 * 1000)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    utc = moment.astimezone(UTC)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
