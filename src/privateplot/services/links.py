"""LinkService — friend-link (blogroll) management over the internal API."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from privateplot.domain.errors import ConfigurationError, RemoteRequestError
from privateplot.services.base import BaseService
from privateplot.services.result import ServiceError, ServiceResult

LINK_STATUSES: tuple[str, ...] = ("active", "inactive")


def is_valid_url(value: str) -> bool:
    """True for an absolute http(s) URL with a host."""
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def build_link_payload(
    *,
    name: str,
    url: str,
    description: str | None = None,
    avatar: str | None = None,
    status: str = "active",
) -> dict[str, Any]:
    """Request body for create/update; empty optional fields are dropped."""
    payload: dict[str, Any] = {"name": name, "url": url, "status": status}
    if description:
        payload["description"] = description
    if avatar:
        payload["avatar"] = avatar
    return payload


class LinkService(BaseService):
    """List, add, modify, and delete friend links."""

    def list_links(self) -> ServiceResult:
        op = "list_links"
        try:
            links = self._call(lambda client: client.list_links())
        except (ConfigurationError, RemoteRequestError) as exc:
            return ServiceResult.from_error(op, exc)
        items = [link.model_dump() for link in links]
        return ServiceResult(ok=True, op=op, data={"items": items, "count": len(items)})

    def get_link(self, link_id: str) -> ServiceResult:
        """Look up one link by id (the API has no single-link endpoint)."""
        op = "get_link"
        listing = self.list_links()
        if not listing.ok:
            return listing.model_copy(update={"op": op})
        for item in listing.data["items"]:
            if item["id"] == link_id:
                return ServiceResult(ok=True, op=op, data=item)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="NOT_FOUND",
                message=f"Friend link not found: {link_id}",
                detail={"id": link_id},
            ),
        )

    def add_link(self, payload: dict[str, Any]) -> ServiceResult:
        op = "add_link"
        invalid = self._validate(op, payload)
        if invalid is not None:
            return invalid
        try:
            link = self._call(lambda client: client.create_link(payload))
        except (ConfigurationError, RemoteRequestError) as exc:
            return ServiceResult.from_error(op, exc)
        data = link.model_dump() if link is not None else dict(payload)
        return ServiceResult(ok=True, op=op, data=data)

    def modify_link(self, link_id: str, payload: dict[str, Any]) -> ServiceResult:
        op = "modify_link"
        invalid = self._validate(op, payload)
        if invalid is not None:
            return invalid
        try:
            link = self._call(lambda client: client.update_link(link_id, payload))
        except (ConfigurationError, RemoteRequestError) as exc:
            return ServiceResult.from_error(op, exc, id=link_id)
        data = link.model_dump() if link is not None else {"id": link_id, **payload}
        return ServiceResult(ok=True, op=op, data=data)

    def delete_link(self, link_id: str) -> ServiceResult:
        op = "delete_link"
        try:
            self._call(lambda client: client.delete_link(link_id))
        except (ConfigurationError, RemoteRequestError) as exc:
            return ServiceResult.from_error(op, exc, id=link_id)
        return ServiceResult(ok=True, op=op, data={"id": link_id, "deleted": True})

    @staticmethod
    def _validate(op: str, payload: dict[str, Any]) -> ServiceResult | None:
        errors: list[str] = []
        if not payload.get("name"):
            errors.append("Name cannot be empty")
        if not is_valid_url(str(payload.get("url", ""))):
            errors.append("Please enter a valid URL")
        avatar = payload.get("avatar")
        if avatar and not is_valid_url(str(avatar)):
            errors.append("Please enter a valid avatar URL")
        if payload.get("status", "active") not in LINK_STATUSES:
            errors.append(f"Status must be one of: {', '.join(LINK_STATUSES)}")
        if not errors:
            return None
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code="VALIDATION", message="; ".join(errors)),
        )
