"""YAML-lite parsing of flow sequences ``[a, b]`` and flow mappings ``{k: v}``.

The text is composed into a ruamel.yaml node tree instead of being
constructed into Python objects. The coercer walks the nodes itself, so
it sees plain vs quoted scalars and every mapping key before a dict
would silently collapse duplicates.
"""

from __future__ import annotations

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

__all__ = [
    "FlowSyntaxError",
    "MappingNode",
    "Node",
    "ScalarNode",
    "SequenceNode",
    "compose_flow",
    "is_plain",
    "nesting_depth",
]

_OPENERS = {"sequence": "[", "mapping": "{"}

# Deepest bracket nesting accepted in one value.
MAX_DEPTH = 64


class FlowSyntaxError(ValueError):
    """Raised when text is not a well-formed flow container."""


def _new_yaml() -> YAML:
    """Create a fresh pure-Python safe parser.

    A new instance per call keeps composer state from leaking across
    loads (ruamel.yaml's YAML object is stateful).
    """
    return YAML(typ="safe", pure=True)


def compose_flow(text: str, shape: str) -> Node:
    """Compose *text* as a single flow container of *shape*.

    Args:
        text: Raw environment value.
        shape: ``"sequence"`` or ``"mapping"``.

    Raises:
        FlowSyntaxError: Missing opener, nesting deeper than
            :data:`MAX_DEPTH`, YAML syntax error, or the document is not the
            expected container.
    """
    opener = _OPENERS[shape]
    if not text.lstrip().startswith(opener):
        msg = f"expected a flow {shape} starting with {opener!r}"
        raise FlowSyntaxError(msg)
    depth = nesting_depth(text)
    if depth > MAX_DEPTH:
        msg = f"flow {shape} nests {depth} levels deep (limit {MAX_DEPTH})"
        raise FlowSyntaxError(msg)
    try:
        node = _new_yaml().compose(text)
    except YAMLError as exc:
        msg = f"invalid flow {shape}: {_first_line(exc)}"
        raise FlowSyntaxError(msg) from exc
    except RecursionError as exc:
        msg = f"invalid flow {shape}: nested too deeply"
        raise FlowSyntaxError(msg) from exc

    expected = SequenceNode if shape == "sequence" else MappingNode
    if not isinstance(node, expected):
        msg = f"expected a flow {shape}"
        raise FlowSyntaxError(msg)
    return node


def nesting_depth(text: str) -> int:
    """Deepest bracket nesting in *text*, ignoring brackets inside quotes."""
    depth = deepest = 0
    quote = ""
    escaped = False
    for char in text:
        if quote:
            if escaped:
                escaped = False
            elif char == "\\" and quote == '"':
                escaped = True
            elif char == quote:
                quote = ""
        elif char in "\"'":
            quote = char
        elif char in "[{":
            depth += 1
            deepest = max(deepest, depth)
        elif char in "]}":
            depth = max(depth - 1, 0)
    return deepest


def is_plain(node: ScalarNode) -> bool:
    """True for unquoted scalars (only those carry int/float/bool/null meaning)."""
    return node.style is None or node.style == ""


def _first_line(exc: Exception) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__
