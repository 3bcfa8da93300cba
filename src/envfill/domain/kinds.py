"""Field kinds: the closed set of shapes the coercer knows how to fill.

A field's static kind fully determines which parse branch executes, so
there is never runtime ambiguity about how to read a variable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Kind(StrEnum):
    """Closed set of field shapes."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STR = "str"
    TEXT = "text"
    SEQUENCE = "sequence"
    TUPLE = "tuple"
    MAPPING = "mapping"
    NESTED = "nested"


SCALAR_KINDS = frozenset({Kind.INT, Kind.FLOAT, Kind.BOOL, Kind.STR, Kind.TEXT})
CONTAINER_KINDS = frozenset({Kind.SEQUENCE, Kind.TUPLE, Kind.MAPPING})


@dataclass(frozen=True)
class FieldKind:
    """Type descriptor for one field or container element.

    Attributes:
        kind: Which branch of the coercer handles this value.
        annotation: Python type used for final validation (e.g. ``set[int]``).
        optional: True when the annotation was ``T | None``.
        items: Element kinds. SEQUENCE holds one, TUPLE one per position,
            MAPPING holds ``(key, value)``.
        fields: Sub-descriptors for NESTED records.
        record_type: The nested model class for NESTED.
    """

    kind: Kind
    annotation: Any = None
    optional: bool = False
    items: tuple[FieldKind, ...] = ()
    fields: tuple[FieldDescriptor, ...] = ()
    record_type: type | None = None

    @property
    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS

    @property
    def label(self) -> str:
        """Short rendering for error messages, e.g. ``dict[str, int]``."""
        if self.kind is Kind.SEQUENCE:
            base = f"list[{self.items[0].label}]"
        elif self.kind is Kind.TUPLE:
            base = "tuple[" + ", ".join(item.label for item in self.items) + "]"
        elif self.kind is Kind.MAPPING:
            base = f"dict[{self.items[0].label}, {self.items[1].label}]"
        elif self.kind is Kind.NESTED:
            base = getattr(self.record_type, "__name__", "record")
        elif self.kind is Kind.TEXT:
            base = getattr(self.annotation, "__name__", None) or repr(self.annotation)
        else:
            base = self.kind.value
        return f"{base} | None" if self.optional else base


@dataclass(frozen=True)
class FieldDescriptor:
    """Runtime-discovered metadata for one record field."""

    name: str
    kind: FieldKind
    annotation: Any = None
