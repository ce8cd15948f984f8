"""ServiceResult and ServiceError — what every service operation returns.

The store itself answers with items, ``None`` or ``False``. Services wrap
those answers so the CLI can route success to stdout and failures to
stderr with exit status 1.

INVARIANT: All service-layer methods return ServiceResult.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Machine-readable ``ServiceError.code`` values."""

    NOT_FOUND = "NOT_FOUND"
    VETOED = "VETOED"
    DUPLICATE_ID = "DUPLICATE_ID"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_FILTER = "INVALID_FILTER"
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
    INVALID = "INVALID"


class ServiceError(BaseModel):
    """Why an operation failed; ``detail`` carries module, key, or field errors."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"add_item"``, ``"filter"``, ...); output
            renderers dispatch on it.
        data: Operation-specific payload on success (``item``, ``items``,
            ``count``, ``modules``).
        warnings: Non-fatal issues, such as plugin hook failures.
        error: Structured error if ``ok`` is False.
        meta: Pagination details for paged listings.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def failure(op: str, code: ErrorCode, message: str, **detail: Any) -> ServiceResult:
    """Shorthand for a failed ServiceResult."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=str(code), message=message, detail=detail),
    )
