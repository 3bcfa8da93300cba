"""Type-directed coercion of raw environment text into typed values.

Dispatch is a ``match`` over the closed :class:`Kind` enum. Containers
are composed by :mod:`envfill.domain.flow` and their nodes coerced
recursively against the element kinds. The assembled value is finally
validated against the field annotation with a pydantic ``TypeAdapter``,
which converts lists into sets/tuples and enforces ``Field`` constraints.
"""

from __future__ import annotations

import typing
from typing import Any, Literal

from pydantic import TypeAdapter, ValidationError

from envfill.domain.errors import CoercionError, DuplicateKeyError, MalformedContainerSyntaxError
from envfill.domain.flow import (
    FlowSyntaxError,
    MappingNode,
    Node,
    ScalarNode,
    SequenceNode,
    compose_flow,
    is_plain,
)
from envfill.domain.kinds import FieldKind, Kind
from envfill.domain.scalars import (
    is_null_token,
    parse_bool,
    parse_float,
    parse_int,
    parse_literal,
)


class Coercer:
    """Coerce one environment value for one field.

    Holds the error context (field path, env key, raw text) so every
    nested failure reports the variable it came from.
    """

    def __init__(self, field: str, env_key: str, raw: str, *, empty_as_none: bool = True) -> None:
        self.field = field
        self.env_key = env_key
        self.raw = raw
        self.empty_as_none = empty_as_none

    def coerce(self, kind: FieldKind, annotation: Any = None) -> Any:
        """Parse ``self.raw`` as *kind*, then validate against *annotation*."""
        value = self.from_text(self.raw, kind)
        return self.validate(value, annotation if annotation is not None else kind.annotation, kind)

    def from_text(self, text: str, kind: FieldKind) -> Any:
        if kind.optional and self.empty_as_none and text == "":
            return None
        # Optional non-string fields read YAML null tokens as None; str keeps them verbatim.
        if kind.optional and kind.kind is not Kind.STR and text and is_null_token(text):
            return None

        match kind.kind:
            case Kind.INT | Kind.FLOAT | Kind.BOOL | Kind.STR | Kind.TEXT:
                return self._scalar(text, kind)
            case Kind.SEQUENCE | Kind.TUPLE:
                return self._from_node(self._compose(text, kind, "sequence"), kind)
            case Kind.MAPPING:
                return self._from_node(self._compose(text, kind, "mapping"), kind)
            case Kind.NESTED:
                raise self.error(kind, "nested records are read field by field")

    def validate(self, value: Any, annotation: Any, kind: FieldKind) -> Any:
        try:
            return TypeAdapter(annotation).validate_python(value)
        except ValidationError as exc:
            raise self.error(kind, _first_error(exc)) from exc

    def error(self, kind: FieldKind, reason: str) -> CoercionError:
        return CoercionError(self.field, self.env_key, self.raw, kind.label, reason)

    # -- scalars -------------------------------------------------------

    def _scalar(self, text: str, kind: FieldKind) -> Any:
        try:
            match kind.kind:
                case Kind.INT:
                    return parse_int(text)
                case Kind.FLOAT:
                    return parse_float(text)
                case Kind.BOOL:
                    return parse_bool(text)
                case Kind.STR:
                    return text
                case Kind.TEXT if typing.get_origin(kind.annotation) is Literal:
                    return parse_literal(text, typing.get_args(kind.annotation))
                case Kind.TEXT:
                    return TypeAdapter(kind.annotation).validate_strings(text)
                case _:
                    raise self.error(kind, f"expected a {kind.label}, found a scalar")
        except ValidationError as exc:
            raise self.error(kind, _first_error(exc)) from exc
        except ValueError as exc:
            raise self.error(kind, str(exc)) from exc

    # -- containers ----------------------------------------------------

    def _compose(self, text: str, kind: FieldKind, shape: str) -> Node:
        try:
            return compose_flow(text, shape)
        except FlowSyntaxError as exc:
            raise MalformedContainerSyntaxError(
                self.field, self.env_key, self.raw, kind.label, str(exc)
            ) from exc

    def _from_node(self, node: Node, kind: FieldKind) -> Any:
        if isinstance(node, ScalarNode):
            return self._from_scalar_node(node, kind)
        if isinstance(node, SequenceNode):
            return self._from_sequence(node, kind)
        if isinstance(node, MappingNode):
            return self._from_mapping(node, kind)
        raise self.error(kind, f"unexpected YAML node {type(node).__name__}")

    def _from_scalar_node(self, node: ScalarNode, kind: FieldKind) -> Any:
        text = node.value
        plain = is_plain(node)
        if plain and is_null_token(text):
            if kind.optional:
                return None
            raise self.error(kind, f"null is not a valid {kind.label}")
        if not kind.is_scalar:
            raise self.error(kind, f"expected a {kind.label}, found {text!r}")
        if not plain and kind.kind in (Kind.INT, Kind.FLOAT, Kind.BOOL):
            raise self.error(kind, f"quoted {text!r} is a string, not {kind.kind.value}")
        return self._scalar(text, kind)

    def _from_sequence(self, node: SequenceNode, kind: FieldKind) -> list[Any]:
        if kind.kind is Kind.SEQUENCE:
            element = kind.items[0]
            return [self._from_node(child, element) for child in node.value]
        if kind.kind is Kind.TUPLE:
            if len(node.value) != len(kind.items):
                raise self.error(
                    kind, f"expected {len(kind.items)} elements, found {len(node.value)}"
                )
            return [self._from_node(child, item) for child, item in zip(node.value, kind.items)]
        raise self.error(kind, f"expected a {kind.label}, found a sequence")

    def _from_mapping(self, node: MappingNode, kind: FieldKind) -> dict[Any, Any]:
        if kind.kind is not Kind.MAPPING:
            raise self.error(kind, f"expected a {kind.label}, found a mapping")
        key_kind, value_kind = kind.items
        result: dict[Any, Any] = {}
        for key_node, value_node in node.value:
            if not isinstance(key_node, ScalarNode):
                raise self.error(kind, "mapping keys must be scalars")
            key = self._from_scalar_node(key_node, key_kind)
            if key in result:
                raise DuplicateKeyError(self.field, self.env_key, key)
            result[key] = self._from_node(value_node, value_kind)
        return result


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    return str(errors[0].get("msg", exc))
