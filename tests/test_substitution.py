"""
Tests for ${name} substitution.
Covers recursive resolution, cycle termination and declaration-order tables.
"""

import pytest

from packager.variables import VariableSubstitutor, build_name_table, resolve


class TestResolve:
    """Test resolve() against a flat name table."""

    def setup_method(self):
        self.substitutor = VariableSubstitutor()

    def test_simple_reference(self):
        """Single reference replaced by its value."""
        assert resolve("dist/${version}", {"version": "1.0"}) == "dist/1.0"

    def test_multiple_references(self):
        table = {"name": "app", "version": "2.1"}
        assert resolve("${name}-${version}.zip", table) == "app-2.1.zip"

    def test_fully_resolved_text_unchanged(self):
        """Text without references is returned unchanged."""
        text = "plain text with $dollar and {braces} and $ {spaced}"
        assert resolve(text, {"dollar": "x", "braces": "y"}) == text

    def test_resolving_resolved_output_is_idempotent(self):
        table = {"A": "1", "B": "${A}.2"}
        once = resolve("v${B}", table)
        assert resolve(once, table) == once == "v1.2"

    def test_transitive_resolution(self):
        """A=1, B=${A}.2, C=${B}.3 resolves ${C} to 1.2.3."""
        table = {"A": "1", "B": "${A}.2", "C": "${B}.3"}
        assert resolve("${C}", table) == "1.2.3"

    def test_self_reference_terminates(self):
        """A definition referencing itself leaves the literal in place."""
        assert resolve("${A}", {"A": "${A}"}) == "${A}"

    def test_self_reference_inside_value_terminates(self):
        assert resolve("x${A}", {"A": "a${A}"}) == "xa${A}"

    def test_mutual_cycle_terminates(self):
        """A -> B -> A does not recurse forever."""
        result = resolve("${A}", {"A": "${B}", "B": "${A}"})
        assert result == "${A}"

    def test_undefined_reference_left_verbatim(self):
        assert resolve("a ${missing} b", {"other": "x"}) == "a ${missing} b"

    def test_undefined_reference_stops_substitution(self):
        """Scanning stops at the first unknown name; later text stays as-is."""
        table = {"known": "K"}
        assert resolve("${known} ${missing} ${known}", table) == "K ${missing} ${known}"

    def test_non_word_identifier_ignored(self):
        """Only word characters form an identifier."""
        assert resolve("${a.b} ${a-b}", {"a": "x"}) == "${a.b} ${a-b}"

    def test_empty_value(self):
        assert resolve("pre${E}post", {"E": ""}) == "prepost"

    def test_deep_chain(self):
        table = {f"v{i}": f"${{v{i - 1}}}+" for i in range(1, 200)}
        table["v0"] = "0"
        assert resolve("${v199}", table) == "0" + "+" * 199

    def test_value_completing_following_text(self):
        """Replacement joined with following text is scanned again from the same position."""
        table = {"open": "${", "name": "done"}
        assert resolve("${open}name}", table) == "done"

    def test_find_references(self):
        assert self.substitutor.find_references("${a} x ${b} ${a}") == ["a", "b", "a"]


class TestBuildNameTable:
    """Test name table construction in declaration order."""

    def test_later_definition_references_earlier(self):
        table = build_name_table([("A", "1"), ("B", "${A}.2"), ("C", "${B}.3")])
        assert table == {"A": "1", "B": "1.2", "C": "1.2.3"}

    def test_forward_reference_stays_literal(self):
        """Definitions may only reference keys declared before them."""
        table = build_name_table([("B", "${A}.2"), ("A", "1")])
        assert table == {"B": "${A}.2", "A": "1"}

    def test_self_reference_in_table(self):
        table = build_name_table([("A", "${A}")])
        assert table == {"A": "${A}"}

    def test_empty(self):
        assert build_name_table([]) == {}


class TestToText:
    """Test scalar conversion of definition values."""

    @pytest.mark.parametrize("value,expected", [
        ("text", "text"),
        (1, "1"),
        (1.5, "1.5"),
        (True, "true"),
        (False, "false"),
        (None, ""),
    ])
    def test_scalars(self, value, expected):
        assert VariableSubstitutor.to_text(value) == expected

    def test_non_scalar(self):
        assert VariableSubstitutor.to_text(["a"]) is None
        assert VariableSubstitutor.to_text({"a": 1}) is None
