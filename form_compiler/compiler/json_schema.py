"""
JSON Schema export.

Renders a form definition as a draft-07 JSON Schema document for
collaborators that validate submissions outside this package (API gateways,
client-side form libraries). The schema is derived from the compiled rules,
so it carries the same effective bounds as `validate`.

Conditional visibility cannot be expressed per field in plain draft-07, so
fields with a condition are never listed as `required`.
"""

from collections.abc import Mapping
from typing import Any

from form_compiler.compiler.canonicalizer import canonicalize_json
from form_compiler.compiler.compiler import FormSchemaCompiler, get_default_compiler
from form_compiler.compiler.field_rules import (
    CANONICAL_DATE_DISPLAY,
    NUMBER_MAX_VALUE,
    NUMBER_MIN_VALUE,
    CheckboxRule,
    DateRule,
    FieldRule,
    NumberRule,
    SelectRule,
    TextRule,
)
from form_compiler.domain.models import FieldDefinition, FormDefinition

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"


def _property_schema(field_def: FieldDefinition, rule: FieldRule) -> dict[str, Any]:
    schema: dict[str, Any] = {"title": field_def.label or field_def.name}

    if isinstance(rule, TextRule):
        schema["type"] = "string"
        schema["minLength"] = rule.min_length
        schema["maxLength"] = rule.max_length
        if rule.pattern is not None:
            schema["pattern"] = rule.pattern.pattern

    elif isinstance(rule, NumberRule):
        schema["type"] = "number"
        # Unset bounds default to the float range; leave them out of the schema
        if rule.min_value != NUMBER_MIN_VALUE:
            schema["minimum"] = rule.min_value
        if rule.max_value != NUMBER_MAX_VALUE:
            schema["maximum"] = rule.max_value

    elif isinstance(rule, SelectRule):
        if rule.allowed_values:
            schema["enum"] = list(rule.allowed_values)

    elif isinstance(rule, CheckboxRule):
        schema["type"] = "boolean"
        if rule.required:
            schema["const"] = True

    elif isinstance(rule, DateRule):
        schema["type"] = "string"
        schema["format"] = "date"
        schema["description"] = f"Date in {CANONICAL_DATE_DISPLAY} format"

    if field_def.default_value is not None:
        schema["default"] = field_def.default_value

    return schema


def to_json_schema(
    definition: FormDefinition | Mapping[str, Any],
    *,
    strict: bool = False,
    compiler: FormSchemaCompiler | None = None,
) -> dict[str, Any]:
    """
    Convert a form definition to a draft-07 JSON Schema.

    Args:
        definition: A `FormDefinition` or its JSON-shaped mapping
        strict: Reject properties that are not fields of the form
        compiler: Compiler to compile with (defaults to the shared compiler)

    Returns:
        Canonicalized JSON Schema dict with one property per field name

    Raises:
        FormCompilationError: If the definition does not compile

    Example:
        >>> to_json_schema({"version": "1.0", "fields": [
        ...     {"id": "ok", "name": "ok", "type": "checkbox", "required": True},
        ... ]})["properties"]["ok"]
        {'const': True, 'title': 'ok', 'type': 'boolean'}
    """
    if not isinstance(definition, FormDefinition):
        definition = FormDefinition.model_validate(definition)

    compiled = (compiler or get_default_compiler()).compile(definition)

    properties: dict[str, Any] = {}
    required: list[str] = []
    for field_def, rule in zip(definition.fields, compiled.rules, strict=True):
        properties[field_def.name] = _property_schema(field_def, rule)
        if field_def.required and field_def.condition is None:
            required.append(field_def.name)

    schema: dict[str, Any] = {
        "$schema": JSON_SCHEMA_DRAFT,
        "$id": f"#/schemas/form/{definition.version.replace('.', '-')}",
        "title": f"Form Schema - {definition.version}",
        "description": f"Form metadata version {definition.version}",
        "type": "object",
        "properties": properties,
        "additionalProperties": not strict,
    }
    if required:
        schema["required"] = required

    return canonicalize_json(schema)
