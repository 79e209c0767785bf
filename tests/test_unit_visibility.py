"""
Tests for visibility evaluation.

These tests verify:
- Semantics of every condition operator
- A missing dependency value always hides the field
- Fields without a condition are always visible
"""

import pytest

from form_compiler.compiler.condition_graph import build_condition_graph
from form_compiler.compiler.visibility import compute_visibility, evaluate_condition
from form_compiler.domain.enums import Operator
from form_compiler.domain.models import Condition
from tests.conftest import make_field, make_form, when


def _condition(operator: str, value=None) -> Condition:
    return Condition(depends_on="source", operator=operator, value=value)


def _visible(operator: str, expected, actual) -> bool:
    return evaluate_condition(_condition(operator, expected), {"source": actual})


class TestOperators:
    """Tests for operator semantics."""

    @pytest.mark.anyio
    async def test_equals_is_strict(self):
        """Test that equals compares raw values without coercion."""
        assert _visible("equals", True, True)
        assert _visible("equals", "US", "US")
        assert not _visible("equals", True, 1)
        assert not _visible("equals", 1, "1")
        assert _visible("equals", 1, 1.0)

    @pytest.mark.anyio
    async def test_not_equals(self):
        assert _visible("not_equals", "a", "b")
        assert not _visible("not_equals", "a", "a")
        assert _visible("not_equals", 1, True)

    @pytest.mark.anyio
    async def test_numeric_comparisons(self):
        """Test that both operands are coerced to numbers."""
        assert _visible("greater_than", 3, 5)
        assert _visible("greater_than", "3", "5")
        assert not _visible("greater_than", 5, 5)
        assert _visible("greater_or_equal", 5, 5)
        assert _visible("less_than", 10, 9.5)
        assert _visible("less_or_equal", 10, "10")
        assert not _visible("less_or_equal", 10, 11)

    @pytest.mark.anyio
    async def test_numeric_comparison_with_huge_int(self):
        """Test that ints beyond the float range still compare."""
        assert _visible("greater_than", 5, 10**400)
        assert not _visible("less_than", 5, 10**400)
        assert _visible("less_than", 5, -(10**400))
        assert not _visible("greater_than", 10**400, 10**401)

    @pytest.mark.anyio
    @pytest.mark.parametrize("actual", ["abc", None, True, "", [1]])
    async def test_numeric_comparison_with_non_number_is_false(self, actual):
        """Test that a non-numeric operand makes the condition false, not an error."""
        assert not _visible("greater_than", 0, actual)
        assert not _visible("less_than", 0, actual)

    @pytest.mark.anyio
    async def test_contains(self):
        """Test substring matching on string-coerced operands."""
        assert _visible("contains", "wor", "hello world")
        assert not _visible("contains", "wor", "hello")
        assert _visible("contains", "234", 12345)
        assert _visible("contains", 3, "1234")

    @pytest.mark.anyio
    async def test_not_empty(self):
        """Test that only null and the empty string count as empty."""
        assert _visible("not_empty", None, "x")
        assert _visible("not_empty", None, " ")
        assert _visible("not_empty", None, 0)
        assert _visible("not_empty", None, False)
        assert not _visible("not_empty", None, "")
        assert not _visible("not_empty", None, None)

    @pytest.mark.anyio
    async def test_explicit_null_is_defined(self):
        """Test that a present None value is compared, unlike an absent key."""
        assert _visible("equals", None, None)
        assert _visible("not_equals", "x", None)

    @pytest.mark.anyio
    @pytest.mark.parametrize("operator", list(Operator))
    async def test_undefined_dependency_hides_field(self, operator):
        """Test that an absent dependency hides the field regardless of operator."""
        assert not evaluate_condition(_condition(operator.value, "anything"), {})
        assert not evaluate_condition(_condition(operator.value, "x"), {"other": "x"})


class TestComputeVisibility:
    """Tests for whole-form visibility maps."""

    @pytest.mark.anyio
    async def test_map_covers_every_field(self):
        """Test that unconditioned fields are visible and conditioned ones follow values."""
        graph = build_condition_graph(
            make_form(
                make_field("has_bio", "checkbox"),
                make_field("bio", condition=when("has_bio", "equals", True)),
                make_field("email"),
            ).fields
        )

        assert compute_visibility(graph, {"has_bio": True}) == {
            "has_bio": True,
            "bio": True,
            "email": True,
        }
        assert compute_visibility(graph, {"has_bio": False})["bio"] is False
        assert compute_visibility(graph, {})["bio"] is False

    @pytest.mark.anyio
    async def test_chained_conditions_read_values_not_visibility(self):
        """Test that a field depends on its source's value even when the source is hidden."""
        graph = build_condition_graph(
            make_form(
                make_field("a"),
                make_field("b", condition=when("a", "equals", "show")),
                make_field("c", condition=when("b", "equals", "show")),
            ).fields
        )

        visibility = compute_visibility(graph, {"a": "hide", "b": "show"})

        assert visibility == {"a": True, "b": False, "c": True}
