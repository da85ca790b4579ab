"""ArticleService — delete a published article and list remote articles."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from privateplot.domain.article import ArticleMeta, default_title
from privateplot.domain.errors import (
    ConfigurationError,
    FrontmatterParseError,
    InvalidInputError,
    RemoteRequestError,
)
from privateplot.domain.frontmatter import parse_document
from privateplot.domain.hosts import same_instance
from privateplot.infrastructure.filesystem import is_markdown_file, read_markdown
from privateplot.services.base import BaseService
from privateplot.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)

ConfirmDelete = Callable[[str, Path], bool]


class ArticleService(BaseService):
    """Operations on articles that already exist on the instance."""

    def delete(self, path: Path, *, confirm: ConfirmDelete) -> ServiceResult:
        """Delete the remote article recorded in *path*'s frontmatter.

        The local file is never modified. A 404 from the server succeeds with
        a warning (the article is already gone).
        """
        op = "delete_article"
        if not is_markdown_file(path):
            exc = InvalidInputError(f"Invalid file: {path} - must be a markdown file")
            return ServiceResult.from_error(op, exc, path=str(path))

        try:
            doc = parse_document(read_markdown(path))
        except FrontmatterParseError as exc:
            return ServiceResult.from_error(op, exc, path=str(path))
        except (UnicodeDecodeError, OSError) as exc:
            return self._refuse(op, "READ_FAILED", f"Cannot read {path}: {exc}", path)

        if not doc.has_block:
            return self._refuse(op, "NO_FRONTMATTER", "No frontmatter found in the file", path)

        meta = ArticleMeta.from_record(doc.record)
        if not meta.article_id:
            return self._refuse(
                op,
                "NOT_PUBLISHED",
                "No article ID found in frontmatter. The file might not have been published yet",
                path,
            )
        host = self._settings.effective_host
        if not same_instance(meta.host, host):
            return self._refuse(
                op,
                "HOST_MISMATCH",
                "Article was published to a different host. "
                "Please use the correct host to delete it",
                path,
            )

        title = meta.title or default_title(path)
        data: dict[str, Any] = {"id": meta.article_id, "title": title, "path": str(path)}
        if not confirm(title, path):
            return ServiceResult(ok=True, op=op, data={**data, "cancelled": True})

        article_id = meta.article_id
        warnings: list[str] = []
        try:
            self._call(lambda client: client.delete_article(article_id))
        except ConfigurationError as exc:
            return ServiceResult.from_error(op, exc, path=str(path))
        except RemoteRequestError as exc:
            if exc.status != 404:
                return ServiceResult.from_error(op, exc, path=str(path), status=exc.status)
            logger.info("Article %s not found on %s", article_id, host)
            warnings.append("Article not found on server. It might have been deleted already")

        return ServiceResult(ok=True, op=op, data={**data, "deleted": True}, warnings=warnings)

    def list_articles(self, *, page: int = 1) -> ServiceResult:
        """Fetch one page of articles from ``/api/articles``."""
        op = "list_articles"
        try:
            payload = self._call(lambda client: client.list_articles(page=page))
        except (ConfigurationError, RemoteRequestError) as exc:
            return ServiceResult.from_error(op, exc)

        items = [
            {
                "id": item.get("id") or "N/A",
                "title": item.get("title", ""),
                "updated": item.get("updatedAt") or item.get("createdAt") or "",
                "slug": item.get("slug"),
            }
            for item in payload.get("articles", [])
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "items": items,
                "count": len(items),
                "total": payload.get("total", len(items)),
                "page": page,
                "has_more": bool(payload.get("hasMore", False)),
            },
        )

    @staticmethod
    def _refuse(op: str, code: str, message: str, path: Path) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail={"path": str(path)}),
        )
