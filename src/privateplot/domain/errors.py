"""Exception taxonomy for the publish pipeline.

Service methods translate these into :class:`ServiceResult` errors at the
boundary; per-file errors are folded into batch results and never abort
sibling files.
"""

from __future__ import annotations

AUTH_STATUSES = frozenset({401, 403})


class PlotError(Exception):
    """Base class for all privateplot errors."""

    code = "ERROR"


class InvalidInputError(PlotError):
    """The publish target is neither a markdown file nor a directory."""

    code = "INVALID_INPUT"


class FrontmatterParseError(PlotError):
    """A delimited frontmatter block is not a valid YAML mapping."""

    code = "FRONTMATTER_PARSE"


class ConfigurationError(PlotError):
    """The instance host or the internal auth token is missing."""

    code = "CONFIGURATION"


class RemoteRequestError(PlotError):
    """Non-2xx response or network-level failure talking to the API.

    Attributes:
        status: HTTP status code, or None when no response was received.
    """

    code = "REMOTE_REQUEST"

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def auth_error(self) -> bool:
        """True when the server rejected our credentials."""
        return self.status in AUTH_STATUSES
