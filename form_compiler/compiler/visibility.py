"""
Visibility Evaluation.

Computes which fields are shown for a snapshot of raw values keyed by field
id. A field's visibility depends only on another field's raw value, never
on that field's own visibility, and cycles are rejected at compile time, so
fields can be evaluated in any order.

Operator semantics:
- equals / not_equals: strict comparison of the raw value (True != 1)
- greater_than / less_than / greater_or_equal / less_or_equal: both
  operands coerced to numbers; a non-numeric operand makes the condition
  false
- contains: both operands coerced to strings; substring test
- not_empty: value is not None and, for strings, not "" (no trimming)

A condition whose referenced value is absent from the snapshot is false
regardless of operator: a field is never shown based on data that has not
arrived yet.
"""

import operator as op
from collections.abc import Callable, Mapping
from typing import Any

from form_compiler.compiler.condition_graph import ConditionGraph
from form_compiler.compiler.field_rules import coerce_number, same_value
from form_compiler.domain.enums import Operator
from form_compiler.domain.models import Condition


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _numeric(compare: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def evaluate(actual: Any, expected: Any) -> bool:
        left = coerce_number(actual)
        right = coerce_number(expected)
        if left is None or right is None:
            return False
        return compare(left, right)

    return evaluate


def _contains(actual: Any, expected: Any) -> bool:
    return _to_text(expected) in _to_text(actual)


def _not_empty(actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    if isinstance(actual, str):
        return actual != ""
    return True


OPERATOR_EVALUATORS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUALS: same_value,
    Operator.NOT_EQUALS: lambda actual, expected: not same_value(actual, expected),
    Operator.GREATER_THAN: _numeric(op.gt),
    Operator.LESS_THAN: _numeric(op.lt),
    Operator.GREATER_OR_EQUAL: _numeric(op.ge),
    Operator.LESS_OR_EQUAL: _numeric(op.le),
    Operator.CONTAINS: _contains,
    Operator.NOT_EMPTY: _not_empty,
}


def evaluate_condition(condition: Condition, values: Mapping[str, Any]) -> bool:
    """
    Evaluate one condition against a value snapshot keyed by field id.

    Example:
        >>> cond = Condition(depends_on="greeting", operator="contains", value="wor")
        >>> evaluate_condition(cond, {"greeting": "hello world"})
        True
        >>> evaluate_condition(cond, {})
        False
    """
    if condition.depends_on not in values:
        return False
    return OPERATOR_EVALUATORS[condition.operator](values[condition.depends_on], condition.value)


def is_visible(graph: ConditionGraph, field_id: str, values: Mapping[str, Any]) -> bool:
    condition = graph.condition_for(field_id)
    if condition is None:
        return True
    return evaluate_condition(condition, values)


def compute_visibility(graph: ConditionGraph, values: Mapping[str, Any]) -> dict[str, bool]:
    """
    Compute the visibility of every field in the graph.

    Args:
        graph: Validated condition graph of a compiled form
        values: Raw field values keyed by field id

    Returns:
        Field id -> visible, covering every field of the form
    """
    return {field_id: is_visible(graph, field_id, values) for field_id in graph.field_ids}
