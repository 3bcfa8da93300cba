"""Tests for YAML-lite flow container composition."""

import pytest

from envfill.domain.flow import (
    MAX_DEPTH,
    FlowSyntaxError,
    MappingNode,
    ScalarNode,
    SequenceNode,
    compose_flow,
    is_plain,
    nesting_depth,
)


class TestComposeSequence:
    def test_plain_elements(self) -> None:
        node = compose_flow("[1, 2, 3]", "sequence")
        assert isinstance(node, SequenceNode)
        assert [child.value for child in node.value] == ["1", "2", "3"]

    def test_quoted_elements_keep_style(self) -> None:
        node = compose_flow("[8, true, '6']", "sequence")
        plain = [is_plain(child) for child in node.value]
        assert plain == [True, True, False]

    def test_nested(self) -> None:
        node = compose_flow("[[1, 2], [3]]", "sequence")
        assert all(isinstance(child, SequenceNode) for child in node.value)

    def test_leading_whitespace_allowed(self) -> None:
        assert isinstance(compose_flow("  [a]", "sequence"), SequenceNode)

    @pytest.mark.parametrize("text", ["1, 2, 3", "", "{a: 1}", "- a"])
    def test_missing_bracket(self, text: str) -> None:
        with pytest.raises(FlowSyntaxError, match="starting with"):
            compose_flow(text, "sequence")

    @pytest.mark.parametrize("text", ["[1, 2", "[1, 2]]", "[a, [b]", "[1] trailing"])
    def test_unbalanced(self, text: str) -> None:
        with pytest.raises(FlowSyntaxError):
            compose_flow(text, "sequence")


class TestComposeMapping:
    def test_entries_in_order(self) -> None:
        node = compose_flow("{a: 1, b: 2}", "mapping")
        assert isinstance(node, MappingNode)
        assert [(k.value, v.value) for k, v in node.value] == [("a", "1"), ("b", "2")]

    def test_duplicate_keys_preserved(self) -> None:
        """Composition keeps every pair; the coercer decides about duplicates."""
        node = compose_flow("{a: 1, a: 2}", "mapping")
        assert [k.value for k, _ in node.value] == ["a", "a"]

    def test_quoted_keys(self) -> None:
        node = compose_flow("{'a': 'b', 'c': 'd'}", "mapping")
        keys = [k for k, _ in node.value]
        assert all(isinstance(k, ScalarNode) and not is_plain(k) for k in keys)

    @pytest.mark.parametrize("text", ["{a: 1", "a: 1", "[a, b]"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(FlowSyntaxError):
            compose_flow(text, "mapping")


class TestNestingDepth:
    @pytest.mark.parametrize(
        ("text", "depth"),
        [("[]", 1), ("[1, 2]", 1), ("[[1], {a: [2]}]", 3), ("['[[[', \"{{\"]", 1), ("x", 0)],
    )
    def test_depth(self, text: str, depth: int) -> None:
        assert nesting_depth(text) == depth

    def test_at_limit_accepted(self) -> None:
        text = "[" * MAX_DEPTH + "]" * MAX_DEPTH
        assert isinstance(compose_flow(text, "sequence"), SequenceNode)

    def test_beyond_limit_rejected(self) -> None:
        text = "[" * (MAX_DEPTH + 1) + "]" * (MAX_DEPTH + 1)
        with pytest.raises(FlowSyntaxError, match="levels deep"):
            compose_flow(text, "sequence")

    def test_very_deep_input_is_a_syntax_error(self) -> None:
        with pytest.raises(FlowSyntaxError):
            compose_flow("[" * 5000 + "]" * 5000, "sequence")
        with pytest.raises(FlowSyntaxError):
            compose_flow("{a: " * 5000 + "}" * 5000, "mapping")
