"""LoadResult and LoadError: the result-value form of a load.

``load()`` raises; ``try_load()`` returns a :class:`LoadResult` so that
callers can branch on ``ok`` without catching exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from envfill.domain.errors import EnvLoadError


class LoadError(BaseModel):
    """Structured error payload within a LoadResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: EnvLoadError) -> LoadError:
        return cls(code=exc.code, message=str(exc), detail=exc.detail())


class LoadResult(BaseModel):
    """Outcome of a single load call.

    Attributes:
        ok: Whether the load succeeded.
        op: Name of the operation (always ``"load"`` today).
        record: The populated record on success, None on failure.
        warnings: Non-fatal issues such as ambiguous variable names.
        error: Structured error if ``ok`` is False.
        meta: Counts for the call (``overrides``).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str = "load"
    record: Any = None
    warnings: list[str] = Field(default_factory=list)
    error: LoadError | None = None
    meta: dict[str, Any] | None = None
