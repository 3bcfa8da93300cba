"""envfill: populate Pydantic models from prefixed environment variables.

Public API::

    from envfill import load

    config = load("app", AppConfig())   # APP_PORT, APP_DB_HOST, APP_TAGS="[a, b]"
"""

from __future__ import annotations

from envfill.config.models import LoadOptions
from envfill.domain.errors import (
    CoercionError,
    DuplicateKeyError,
    EnvLoadError,
    MalformedContainerSyntaxError,
    UnsupportedShapeError,
)
from envfill.domain.kinds import FieldDescriptor, FieldKind, Kind
from envfill.domain.shape import describe
from envfill.services.loader import EnvLoader, load, try_load
from envfill.services.result import LoadError, LoadResult

__all__ = [
    "CoercionError",
    "DuplicateKeyError",
    "EnvLoadError",
    "EnvLoader",
    "FieldDescriptor",
    "FieldKind",
    "Kind",
    "LoadError",
    "LoadOptions",
    "LoadResult",
    "MalformedContainerSyntaxError",
    "UnsupportedShapeError",
    "describe",
    "load",
    "try_load",
]
