"""Error taxonomy for environment loading.

INVARIANT: Every error aborts the whole load. The engine never logs a failure,
retries, or partially applies. Absent variables are never errors.

Each error carries a stable ``code`` and a ``detail()`` payload so that
:class:`envfill.services.result.LoadError` can be built without string
parsing.
"""

from __future__ import annotations

from typing import Any, ClassVar


class EnvLoadError(Exception):
    """Base class for all load failures."""

    code: ClassVar[str] = "ENV_LOAD_FAILED"

    def detail(self) -> dict[str, Any]:
        return {}


class UnsupportedShapeError(EnvLoadError):
    """The value is not a record, or a field has a kind we cannot classify."""

    code: ClassVar[str] = "UNSUPPORTED_SHAPE"

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Unsupported shape for {target}: {reason}")

    def detail(self) -> dict[str, Any]:
        return {"target": self.target, "reason": self.reason}


class CoercionError(EnvLoadError):
    """An environment value could not be parsed as the field's declared kind.

    Attributes:
        field: Dotted field path (``inner.x``).
        env_key: The environment variable that held the value.
        raw_value: The raw text as found in the environment.
        expected_kind: Kind label, e.g. ``int`` or ``list[int]``.
        reason: Short description of what went wrong.
    """

    code: ClassVar[str] = "COERCION_FAILED"

    def __init__(
        self,
        field: str,
        env_key: str,
        raw_value: str,
        expected_kind: str,
        reason: str = "",
    ) -> None:
        self.field = field
        self.env_key = env_key
        self.raw_value = raw_value
        self.expected_kind = expected_kind
        self.reason = reason
        msg = f"{env_key}={raw_value!r} is not a valid {expected_kind} for field {field!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)

    def detail(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "env_key": self.env_key,
            "raw_value": self.raw_value,
            "expected_kind": self.expected_kind,
            "reason": self.reason,
        }


class MalformedContainerSyntaxError(CoercionError):
    """Sequence/mapping brackets are missing or unbalanced."""

    code: ClassVar[str] = "MALFORMED_CONTAINER"


class DuplicateKeyError(EnvLoadError):
    """A flow mapping literal repeats a key."""

    code: ClassVar[str] = "DUPLICATE_KEY"

    def __init__(self, field: str, env_key: str, key: Any) -> None:
        self.field = field
        self.env_key = env_key
        self.key = key
        super().__init__(f"{env_key}: duplicate key {key!r} in mapping for field {field!r}")

    def detail(self) -> dict[str, Any]:
        return {"field": self.field, "env_key": self.env_key, "key": str(self.key)}
