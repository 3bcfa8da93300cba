"""EnvLoader: fill a record's fields from prefixed environment variables.

For each field of the template the loader derives
``PREFIX_FIELD`` (upper-cased, nested records extend it with
``_SUBFIELD``), looks it up in a one-shot environment snapshot, and
coerces the raw text by the field's kind. Absent variables keep the
template's value.

Every record that received an override is rebuilt through its own
``model_validate``, so field validators, model validators and
constraints run on the merged values exactly as they would for a
record built from scratch.

INVARIANT: The template is never mutated. The result is a deep copy
with targeted overwrites, produced only after every field coerced and
every rebuilt record validated. The first error aborts the whole load.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from envfill.config.models import LoadOptions
from envfill.domain.coerce import Coercer
from envfill.domain.errors import CoercionError, EnvLoadError, UnsupportedShapeError
from envfill.domain.kinds import FieldDescriptor, Kind
from envfill.domain.shape import describe
from envfill.infrastructure.environment import EnvironmentSnapshot
from envfill.services.result import LoadError, LoadResult

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class _Source:
    """Where an override came from, for error reports."""

    field: str
    env_key: str
    raw: str
    expected: str


@dataclass
class _Pass:
    """Per-call state: the snapshot plus bookkeeping for one load."""

    snapshot: EnvironmentSnapshot
    options: LoadOptions
    seen: set[str] = field(default_factory=set)
    warnings: list[str] = field(default_factory=list)
    overrides: int = 0

    def warn_ambiguous(self, env_key: str, reason: str) -> None:
        message = f"environment variable {env_key} is ambiguous: {reason}"
        if message in self.warnings:
            return
        logger.warning("Ambiguous environment variable %s: %s", env_key, reason)
        self.warnings.append(message)


class EnvLoader:
    """Reusable loader bound to one prefix and environment source.

    Usage::

        loader = EnvLoader("app")
        settings = loader.load(AppConfig())

    Args:
        prefix: Leading token of every derived key; upper-cased verbatim.
        environ: Environment source; defaults to ``os.environ``. Read once
            per call, never cached between calls.
        options: Separator and case/empty handling.
    """

    def __init__(
        self,
        prefix: str,
        *,
        environ: Mapping[str, str] | None = None,
        options: LoadOptions | None = None,
    ) -> None:
        if not prefix.strip():
            msg = "prefix must be a non-empty string"
            raise ValueError(msg)
        self._prefix = prefix.upper()
        self._environ = environ
        self._options = options or LoadOptions()

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def options(self) -> LoadOptions:
        return self._options

    def env_key(self, *names: str) -> str:
        """Derive the variable name for a field path, e.g. ``APP_INNER_X``."""
        return self._options.separator.join([self._prefix, *(name.upper() for name in names)])

    # -- public operations ---------------------------------------------

    def load(self, template: M) -> M:
        """Return a new record with environment overrides applied.

        Raises:
            UnsupportedShapeError: *template* is not a model instance, or a
                field cannot be classified.
            CoercionError: A present variable does not parse as its field,
                or the rebuilt record fails its own validation.
            DuplicateKeyError: A mapping literal repeats a key.
        """
        return self._apply(template, self._begin())

    def try_load(self, template: M) -> LoadResult:
        """Like :meth:`load`, but report failures in a :class:`LoadResult`."""
        run = self._begin()
        try:
            record = self._apply(template, run)
        except EnvLoadError as exc:
            return LoadResult(
                ok=False,
                error=LoadError.from_exception(exc),
                warnings=list(run.warnings),
            )
        return LoadResult(
            ok=True,
            record=record,
            warnings=list(run.warnings),
            meta={"overrides": run.overrides},
        )

    def collect(self, record_type: type[BaseModel]) -> dict[str, Any]:
        """Return only the coerced overrides for *record_type*.

        Nested records become nested dicts; fields without a variable are
        omitted. Used where another layer (pydantic-settings) builds and
        validates the final model.
        """
        run = self._begin()
        values, _ = self._walk(describe(record_type), (), run, None)
        return values

    # -- internals -------------------------------------------------------

    def _begin(self) -> _Pass:
        snapshot = EnvironmentSnapshot(
            self._environ, case_insensitive=self._options.case_insensitive
        )
        run = _Pass(snapshot=snapshot, options=self._options)
        own = self._prefix + self._options.separator
        for key in sorted(snapshot.ambiguous_keys):
            if key.startswith(own):
                run.warn_ambiguous(key, "several environment keys differ only by case")
        return run

    def _apply(self, template: M, run: _Pass) -> M:
        if isinstance(template, type):
            raise UnsupportedShapeError(
                template.__name__, "expected a record instance, not a class"
            )
        updates, sources = self._walk(describe(template), (), run, template)
        result = _rebuild(template, updates, sources)
        logger.debug("Loaded %s with %d override(s)", type(template).__name__, run.overrides)
        return result

    def _walk(
        self,
        descriptors: Iterable[FieldDescriptor],
        path: tuple[str, ...],
        run: _Pass,
        record: BaseModel | None,
    ) -> tuple[dict[str, Any], dict[str, _Source]]:
        values: dict[str, Any] = {}
        sources: dict[str, _Source] = {}
        for descriptor in descriptors:
            name = descriptor.name
            field_path = (*path, name)

            if descriptor.kind.kind is Kind.NESTED:
                child = None if record is None else getattr(record, name)
                if record is not None and not isinstance(child, BaseModel):
                    raise UnsupportedShapeError(
                        ".".join(field_path), "nested record template value is not a model"
                    )
                child_values, child_sources = self._walk(
                    descriptor.kind.fields, field_path, run, child
                )
                if not child_values:
                    continue
                sources[name] = next(iter(child_sources.values()))
                if child is None:
                    values[name] = child_values
                else:
                    values[name] = _rebuild(child, child_values, child_sources)
                continue

            env_key = self.env_key(*field_path)
            if env_key in run.seen:
                run.warn_ambiguous(env_key, "derived from more than one field")
            run.seen.add(env_key)

            raw = run.snapshot.lookup(env_key)
            if raw is None:
                continue

            dotted = ".".join(field_path)
            coercer = Coercer(dotted, env_key, raw, empty_as_none=run.options.empty_as_none)
            values[name] = coercer.coerce(descriptor.kind, descriptor.annotation)
            sources[name] = _Source(dotted, env_key, raw, descriptor.kind.label)
            run.overrides += 1
            logger.debug("Override %s from %s", dotted, env_key)
        return values, sources


def _rebuild(record: M, values: dict[str, Any], sources: dict[str, _Source]) -> M:
    """Deep-copy *record* and, when *values* is non-empty, re-validate with them merged in."""
    current = record.model_copy(deep=True)
    if not values:
        return current
    data = {name: getattr(current, name) for name in type(current).model_fields}
    data.update(current.model_extra or {})
    data.update(values)
    try:
        return type(record).model_validate(data, by_name=True)
    except ValidationError as exc:
        raise _validation_failure(exc, type(record), sources) from exc


def _validation_failure(
    exc: ValidationError, model_cls: type[BaseModel], sources: dict[str, _Source]
) -> CoercionError:
    """Attribute a record-level ``ValidationError`` to the override that caused it.

    A failure located on an overridden field names that field; anything
    else (model validators, cross-field checks) names the first override
    in the record and reports the record type as the expected kind.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    reason = str(first.get("msg", exc))
    loc = first.get("loc", ())
    name = loc[0] if loc else None
    if isinstance(name, str) and name in sources:
        source = sources[name]
        return CoercionError(source.field, source.env_key, source.raw, source.expected, reason)
    source = next(iter(sources.values()))
    return CoercionError(source.field, source.env_key, source.raw, model_cls.__name__, reason)


def load(
    prefix: str,
    template: M,
    *,
    environ: Mapping[str, str] | None = None,
    options: LoadOptions | None = None,
) -> M:
    """Populate a new copy of *template* from ``PREFIX_*`` variables."""
    return EnvLoader(prefix, environ=environ, options=options).load(template)


def try_load(
    prefix: str,
    template: BaseModel,
    *,
    environ: Mapping[str, str] | None = None,
    options: LoadOptions | None = None,
) -> LoadResult:
    """Result-value form of :func:`load`."""
    return EnvLoader(prefix, environ=environ, options=options).try_load(template)
