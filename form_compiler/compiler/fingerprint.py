"""
Structural fingerprint of a form definition.

The fingerprint covers everything that changes validation or visibility
outcomes: version, and per field (in order) its id, name, type, required
flag, constraint shape, select option values and condition. Labels,
placeholders and default values are excluded, so forms differing only in
presentation share one compiled form.

Condition and option constants are compared with strict equality, so their
Python type is part of the fingerprint: a `date` and its ISO string, or a
tuple and a list with the same items, fingerprint differently.
"""

from enum import Enum
from typing import Any

from form_compiler.compiler.canonicalizer import digest, to_canonical_json_string
from form_compiler.domain.models import FieldDefinition, FormDefinition


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


_JSON_SCALARS = (str, int, float, bool, type(None))


def typed_value(value: Any) -> Any:
    """
    JSON-encodable stand-in for a constant that keeps its Python type visible.

    Strings, numbers, bools, None and lists encode as themselves. Mappings,
    tuples and anything JSON has no native form for are wrapped in a
    `__type__` envelope.
    """
    if isinstance(value, _JSON_SCALARS):
        return value
    if isinstance(value, list):
        return [typed_value(item) for item in value]
    if isinstance(value, tuple):
        return {"__type__": "tuple", "items": [typed_value(item) for item in value]}
    if isinstance(value, dict):
        items = [[typed_value(k), typed_value(v)] for k, v in value.items()]
        items.sort(key=lambda kv: to_canonical_json_string(kv[0]))
        return {"__type__": "dict", "items": items}
    return {"__type__": type(value).__qualname__, "value": str(value)}


def field_shape(field: FieldDefinition) -> dict[str, Any]:
    """The fingerprinted part of one field definition."""
    condition = None
    if field.condition is not None:
        condition = {
            "depends_on": field.condition.depends_on,
            "operator": _enum_value(field.condition.operator),
            "value": typed_value(field.condition.value),
        }

    return {
        "id": field.id,
        "name": field.name,
        "type": _enum_value(field.type),
        "required": field.required,
        "constraints": field.constraints.model_dump(exclude_none=True),
        "options": [typed_value(option.value) for option in field.options],
        "condition": condition,
    }


def form_shape(definition: FormDefinition) -> dict[str, Any]:
    return {
        "version": definition.version,
        "fields": [field_shape(field) for field in definition.fields],
    }


def fingerprint_form(definition: FormDefinition) -> str:
    """
    Compute the cache key for a form definition.

    Example:
        >>> a = FormDefinition(version="1", fields=[{"id": "x", "name": "x", "type": "text"}])
        >>> b = FormDefinition(
        ...     version="1", fields=[{"id": "x", "name": "x", "type": "text", "label": "X"}]
        ... )
        >>> fingerprint_form(a) == fingerprint_form(b)
        True
    """
    return digest(form_shape(definition))
