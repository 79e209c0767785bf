"""
Condition Graph Construction.

Extracts the `field_id -> depends_on` edges declared by field conditions and
validates them:
- Every condition target exists in the form
- No field's condition targets itself
- The dependency relation is acyclic

A cycle would leave every field on it permanently undecidable, so cycles
are rejected at compile time and reported with the full list of fields
involved.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from form_compiler.core.errors import FormCompilationError
from form_compiler.domain.enums import CompileErrorKind
from form_compiler.domain.models import Condition, FieldDefinition
from form_compiler.domain.results import CompileError

logger = logging.getLogger(__name__)

_VISITING = 1
_VISITED = 2


@dataclass(frozen=True)
class ConditionGraph:
    """
    Directed graph of visibility dependencies.

    Each field has at most one outgoing edge (its condition). Fields without
    a condition are still listed in `field_ids` so the visibility map covers
    the whole form.
    """

    field_ids: tuple[str, ...]
    conditions: Mapping[str, Condition]

    @property
    def edges(self) -> list[tuple[str, str]]:
        """(field_id, depends_on) pairs in field order."""
        return [
            (field_id, self.conditions[field_id].depends_on)
            for field_id in self.field_ids
            if field_id in self.conditions
        ]

    def condition_for(self, field_id: str) -> Condition | None:
        return self.conditions.get(field_id)

    def depends_on(self, field_id: str) -> str | None:
        condition = self.conditions.get(field_id)
        return condition.depends_on if condition else None

    def dependents_of(self, field_id: str) -> list[str]:
        """Fields whose visibility must be recomputed when `field_id`'s value changes."""
        return [source for source, target in self.edges if target == field_id]


def find_cycles(edges: Mapping[str, str], order: Iterable[str]) -> list[list[str]]:
    """
    Find every cycle in a graph where each node has at most one outgoing edge.

    Depth-first walk with visiting/visited marking. When the walk reaches a
    node that is still being visited, the cycle is the part of the current
    path from that node onwards.

    Args:
        edges: source -> target
        order: Start nodes in the order they should be explored

    Returns:
        Each cycle as a list of node ids in dependency order, starting at
        the first node of the cycle reached from `order`
    """
    state: dict[str, int] = {}
    cycles: list[list[str]] = []

    for start in order:
        if start in state:
            continue

        path: list[str] = []
        node: str | None = start
        while node is not None and node not in state:
            state[node] = _VISITING
            path.append(node)
            node = edges.get(node)

        if node is not None and state[node] == _VISITING:
            cycles.append(path[path.index(node) :])

        for visited in path:
            state[visited] = _VISITED

    return cycles


def build_condition_graph(fields: Iterable[FieldDefinition]) -> ConditionGraph:
    """
    Build and validate the condition graph of a form.

    Args:
        fields: Field definitions in form order

    Returns:
        The validated `ConditionGraph`

    Raises:
        FormCompilationError: With every dangling condition, self reference
            and cycle found (all reported together)

    Example:
        >>> build_condition_graph([
        ...     FieldDefinition(id="a", name="a", type="text",
        ...                     condition={"depends_on": "b", "operator": "equals", "value": 1}),
        ...     FieldDefinition(id="b", name="b", type="text",
        ...                     condition={"depends_on": "a", "operator": "equals", "value": 1}),
        ... ])  # Raises: circular_condition naming ["a", "b"]
    """
    fields = list(fields)
    field_ids: list[str] = []
    known_ids: set[str] = set()
    for field_def in fields:
        if field_def.id not in known_ids:
            known_ids.add(field_def.id)
            field_ids.append(field_def.id)

    errors: list[CompileError] = []
    conditions: dict[str, Condition] = {}
    edges: dict[str, str] = {}

    for field_def in fields:
        condition = field_def.condition
        if condition is None or field_def.id in conditions:
            # Duplicate ids are reported by the form compiler; first one wins here
            continue
        conditions[field_def.id] = condition

        target = condition.depends_on
        if target == field_def.id:
            errors.append(
                CompileError(
                    kind=CompileErrorKind.SELF_REFERENCE,
                    field_id=field_def.id,
                    target=target,
                    message=f"Field '{field_def.id}' has a condition on itself",
                )
            )
        elif target not in known_ids:
            errors.append(
                CompileError(
                    kind=CompileErrorKind.DANGLING_CONDITION,
                    field_id=field_def.id,
                    target=target,
                    message=(
                        f"Field '{field_def.id}' has a condition on unknown field '{target}'"
                    ),
                )
            )
        else:
            edges[field_def.id] = target

    for cycle in find_cycles(edges, field_ids):
        errors.append(
            CompileError(
                kind=CompileErrorKind.CIRCULAR_CONDITION,
                field_id=cycle[0],
                cycle=tuple(cycle),
                message="Circular condition: " + " -> ".join([*cycle, cycle[0]]),
            )
        )

    if errors:
        logger.debug("Condition graph rejected with %d error(s)", len(errors))
        raise FormCompilationError(errors)

    return ConditionGraph(field_ids=tuple(field_ids), conditions=MappingProxyType(conditions))
