"""
Tests for condition graph construction and cycle detection.

These tests verify:
- Dangling and self-referencing conditions are rejected
- Cycles of any length are reported with every field on them
- All graph defects are reported together
- Graph helpers used to find dependent fields
"""

import pytest

from form_compiler.compiler.condition_graph import build_condition_graph, find_cycles
from form_compiler.core.errors import FormCompilationError
from form_compiler.domain.enums import CompileErrorKind
from tests.conftest import make_field, make_form, when


def _graph(*fields):
    return build_condition_graph(make_form(*fields).fields)


def _graph_errors(*fields):
    with pytest.raises(FormCompilationError) as exc_info:
        _graph(*fields)
    return exc_info.value.errors


class TestBuildConditionGraph:
    """Tests for building a valid condition graph."""

    @pytest.mark.anyio
    async def test_fields_without_conditions(self):
        """Test that every field is listed even without conditions."""
        graph = _graph(make_field("a"), make_field("b"))

        assert graph.field_ids == ("a", "b")
        assert graph.edges == []
        assert graph.condition_for("a") is None

    @pytest.mark.anyio
    async def test_chain_is_accepted(self):
        """Test that an acyclic chain of conditions compiles."""
        graph = _graph(
            make_field("a"),
            make_field("b", condition=when("a", "not_empty")),
            make_field("c", condition=when("b", "equals", "x")),
        )

        assert graph.edges == [("b", "a"), ("c", "b")]
        assert graph.depends_on("c") == "b"
        assert graph.depends_on("a") is None

    @pytest.mark.anyio
    async def test_dependents_of(self):
        """Test that dependents are the fields whose condition reads a value."""
        graph = _graph(
            make_field("country"),
            make_field("state", condition=when("country", "equals", "US")),
            make_field("province", condition=when("country", "equals", "CA")),
            make_field("zip", condition=when("state", "not_empty")),
        )

        assert graph.dependents_of("country") == ["state", "province"]
        assert graph.dependents_of("state") == ["zip"]
        assert graph.dependents_of("zip") == []

    @pytest.mark.anyio
    async def test_conditions_are_read_only(self):
        """Test that the compiled graph cannot be mutated."""
        graph = _graph(make_field("a"), make_field("b", condition=when("a", "not_empty")))

        with pytest.raises(TypeError):
            graph.conditions["a"] = graph.conditions["b"]


class TestConditionGraphErrors:
    """Tests for structural defects in conditions."""

    @pytest.mark.anyio
    async def test_dangling_condition(self):
        """Test that a condition on a missing field is rejected with its target."""
        [error] = _graph_errors(make_field("a", condition=when("ghost", "equals", 1)))

        assert error.kind == CompileErrorKind.DANGLING_CONDITION
        assert error.field_id == "a"
        assert error.target == "ghost"

    @pytest.mark.anyio
    async def test_self_reference(self):
        """Test that a condition on the field itself is rejected."""
        [error] = _graph_errors(make_field("a", condition=when("a", "equals", 1)))

        assert error.kind == CompileErrorKind.SELF_REFERENCE
        assert error.field_id == "a"
        assert error.target == "a"

    @pytest.mark.anyio
    async def test_two_field_cycle(self):
        """Test that A -> B -> A is reported naming both fields."""
        [error] = _graph_errors(
            make_field("a", condition=when("b", "equals", 1)),
            make_field("b", condition=when("a", "equals", 1)),
        )

        assert error.kind == CompileErrorKind.CIRCULAR_CONDITION
        assert error.cycle == ("a", "b")
        assert error.message == "Circular condition: a -> b -> a"

    @pytest.mark.anyio
    async def test_long_cycle_names_every_field(self):
        """Test that the full cycle is reported, not just the closing edge."""
        [error] = _graph_errors(
            make_field("a", condition=when("b", "equals", 1)),
            make_field("b", condition=when("c", "equals", 1)),
            make_field("c", condition=when("d", "equals", 1)),
            make_field("d", condition=when("a", "equals", 1)),
        )

        assert error.cycle == ("a", "b", "c", "d")

    @pytest.mark.anyio
    async def test_cycle_reached_from_outside(self):
        """Test that a field leading into a cycle is not part of the reported cycle."""
        [error] = _graph_errors(
            make_field("entry", condition=when("a", "equals", 1)),
            make_field("a", condition=when("b", "equals", 1)),
            make_field("b", condition=when("a", "equals", 1)),
        )

        assert error.cycle == ("a", "b")

    @pytest.mark.anyio
    async def test_all_defects_reported_together(self):
        """Test that dangling references and cycles are collected in one pass."""
        errors = _graph_errors(
            make_field("a", condition=when("b", "equals", 1)),
            make_field("b", condition=when("a", "equals", 1)),
            make_field("c", condition=when("d", "equals", 1)),
            make_field("d", condition=when("c", "equals", 1)),
            make_field("e", condition=when("missing", "not_empty")),
            make_field("f", condition=when("f", "not_empty")),
        )

        kinds = [error.kind for error in errors]
        assert kinds.count(CompileErrorKind.CIRCULAR_CONDITION) == 2
        assert CompileErrorKind.DANGLING_CONDITION in kinds
        assert CompileErrorKind.SELF_REFERENCE in kinds
        assert {error.cycle for error in errors if error.cycle} == {("a", "b"), ("c", "d")}


class TestFindCycles:
    """Tests for the cycle search itself."""

    @pytest.mark.anyio
    async def test_no_cycles(self):
        assert find_cycles({"b": "a", "c": "b"}, ["a", "b", "c"]) == []

    @pytest.mark.anyio
    async def test_start_order_decides_rotation(self):
        """Test that the cycle starts at the first of its nodes in exploration order."""
        edges = {"a": "b", "b": "c", "c": "a"}

        assert find_cycles(edges, ["a", "b", "c"]) == [["a", "b", "c"]]
        assert find_cycles(edges, ["b", "a", "c"]) == [["b", "c", "a"]]

    @pytest.mark.anyio
    async def test_each_cycle_reported_once(self):
        edges = {"a": "b", "b": "a", "x": "a"}

        assert find_cycles(edges, ["a", "b", "x"]) == [["a", "b"]]
