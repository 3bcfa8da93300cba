"""Shape introspection: walk a Pydantic model's declared fields.

``describe()`` turns a record (model instance or class) into an ordered,
lazy stream of :class:`FieldDescriptor`. The record's ``model_fields``
table is the structural description; no schema is supplied separately.
"""

from __future__ import annotations

import collections.abc
import datetime
import decimal
import enum
import ipaddress
import pathlib
import types
import typing
import uuid
from collections.abc import Iterator
from typing import Annotated, Any, Literal

from pydantic import BaseModel

from envfill.domain.errors import UnsupportedShapeError
from envfill.domain.kinds import FieldDescriptor, FieldKind, Kind

# Types pydantic parses from their text form.
TEXT_TYPES: tuple[type, ...] = (
    pathlib.PurePath,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    decimal.Decimal,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
)

_SEQUENCE_ORIGINS = frozenset(
    {
        list,
        set,
        frozenset,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
    }
)
_MAPPING_ORIGINS = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})


def record_type_of(record: Any) -> type[BaseModel]:
    """Return the model class for a model instance or class.

    Raises :class:`UnsupportedShapeError` for anything that is not a
    Pydantic model (top level must be a record).
    """
    if isinstance(record, type) and issubclass(record, BaseModel):
        return record
    if isinstance(record, BaseModel):
        return type(record)
    raise UnsupportedShapeError(type(record).__name__, "top-level value must be a pydantic model")


def describe(record: Any) -> Iterator[FieldDescriptor]:
    """Yield one descriptor per declared field, in declaration order.

    The top-level check happens eagerly; field classification is lazy.
    """
    model_cls = record_type_of(record)
    return _iter_fields(model_cls, (model_cls,))


def _iter_fields(
    model_cls: type[BaseModel], stack: tuple[type, ...]
) -> Iterator[FieldDescriptor]:
    for name, info in model_cls.model_fields.items():
        target = f"{model_cls.__name__}.{name}"
        kind = classify(info.annotation, target=target, stack=stack)
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(info.annotation, *info.metadata)]
        yield FieldDescriptor(name=name, kind=kind, annotation=annotation)


def classify(
    annotation: Any,
    *,
    target: str = "value",
    stack: tuple[type, ...] = (),
    in_container: bool = False,
) -> FieldKind:
    """Map a Python annotation onto a :class:`FieldKind`."""
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is Annotated:
        return classify(args[0], target=target, stack=stack, in_container=in_container)

    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) != 1 or len(members) == len(args):
            raise UnsupportedShapeError(target, f"union {annotation!r} is not supported")
        inner = classify(members[0], target=target, stack=stack, in_container=in_container)
        if inner.kind is Kind.NESTED:
            raise UnsupportedShapeError(target, "optional nested records are not supported")
        return FieldKind(
            kind=inner.kind,
            annotation=inner.annotation,
            optional=True,
            items=inner.items,
        )

    if origin is Literal:
        return FieldKind(kind=Kind.TEXT, annotation=annotation)

    if origin is not None:
        return _classify_container(origin, args, annotation, target=target, stack=stack)

    if annotation is Any or not isinstance(annotation, type):
        raise UnsupportedShapeError(target, f"cannot classify {annotation!r}")

    # Enum before the builtins: IntEnum/StrEnum subclass int/str.
    if issubclass(annotation, enum.Enum):
        return FieldKind(kind=Kind.TEXT, annotation=annotation)
    if annotation is bool:
        return FieldKind(kind=Kind.BOOL, annotation=bool)
    if annotation is int:
        return FieldKind(kind=Kind.INT, annotation=int)
    if annotation is float:
        return FieldKind(kind=Kind.FLOAT, annotation=float)
    if annotation is str:
        return FieldKind(kind=Kind.STR, annotation=str)
    if issubclass(annotation, TEXT_TYPES):
        return FieldKind(kind=Kind.TEXT, annotation=annotation)

    if issubclass(annotation, BaseModel):
        if in_container:
            raise UnsupportedShapeError(target, "records inside containers are not supported")
        if annotation in stack:
            raise UnsupportedShapeError(target, f"recursive record {annotation.__name__}")
        fields = tuple(_iter_fields(annotation, (*stack, annotation)))
        return FieldKind(
            kind=Kind.NESTED,
            annotation=annotation,
            fields=fields,
            record_type=annotation,
        )

    if annotation in (list, set, frozenset, tuple, dict):
        raise UnsupportedShapeError(target, f"bare {annotation.__name__} needs type parameters")
    raise UnsupportedShapeError(target, f"cannot classify {annotation.__name__}")


def _classify_container(
    origin: Any,
    args: tuple[Any, ...],
    annotation: Any,
    *,
    target: str,
    stack: tuple[type, ...],
) -> FieldKind:
    def element(arg: Any) -> FieldKind:
        return classify(arg, target=target, stack=stack, in_container=True)

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return FieldKind(kind=Kind.SEQUENCE, annotation=annotation, items=(element(args[0]),))
        if not args:
            raise UnsupportedShapeError(target, "empty tuple type")
        return FieldKind(
            kind=Kind.TUPLE,
            annotation=annotation,
            items=tuple(element(arg) for arg in args),
        )

    if origin in _SEQUENCE_ORIGINS:
        if len(args) != 1:
            raise UnsupportedShapeError(target, f"{annotation!r} needs one element type")
        return FieldKind(kind=Kind.SEQUENCE, annotation=annotation, items=(element(args[0]),))

    if origin in _MAPPING_ORIGINS:
        if len(args) != 2:
            raise UnsupportedShapeError(target, f"{annotation!r} needs key and value types")
        key = element(args[0])
        if not key.is_scalar:
            raise UnsupportedShapeError(target, "mapping keys must be scalars")
        return FieldKind(kind=Kind.MAPPING, annotation=annotation, items=(key, element(args[1])))

    raise UnsupportedShapeError(target, f"cannot classify {annotation!r}")
