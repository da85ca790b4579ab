"""Instance host normalization and base-URL resolution."""

from __future__ import annotations

import re

_PROTOCOL_RE = re.compile(r"^https?://")


def normalize_host(host: str | None) -> str:
    """Strip the protocol prefix and trailing slashes from *host*.

    Examples:
        >>> normalize_host("https://example.com/")
        'example.com'
        >>> normalize_host("example.com")
        'example.com'
        >>> normalize_host(None)
        ''
    """
    if not host:
        return ""
    return _PROTOCOL_RE.sub("", host.strip()).rstrip("/")


def same_instance(left: str | None, right: str | None) -> bool:
    """True when both hosts name the same deployment after normalization."""
    normalized = normalize_host(left)
    return bool(normalized) and normalized == normalize_host(right)


def base_url(host: str) -> str:
    """Return the API base URL for *host*.

    ``localhost`` (with or without a port) is served over plain http,
    everything else over https.
    """
    clean = normalize_host(host)
    scheme = "http" if clean == "localhost" or clean.startswith("localhost:") else "https"
    return f"{scheme}://{clean}"
