"""ServiceResult and ServiceError — the return type of every service call.

Commands hand results to ``AppContext.emit()``, which picks the human,
quiet, or JSON rendering and maps ``ok=False`` to exit code 1.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from privateplot.domain.errors import PlotError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name, used to pick a renderer (e.g. ``"publish"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues to show the operator.
        error: Structured error when ``ok`` is False.
        meta: Run context shown with ``--verbose`` (host, timing).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def from_error(cls, op: str, exc: PlotError, **detail: Any) -> ServiceResult:
        """Failed result carrying the exception's code and message."""
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=exc.code, message=str(exc), detail=detail),
        )
