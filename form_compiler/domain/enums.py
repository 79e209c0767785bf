"""
Domain enums for form definitions and their compiled artifacts.

The string values are the ones used in persisted form-definition JSON,
so a definition saved by the form builder can be validated directly.
"""

from enum import Enum


class FieldType(str, Enum):
    """Closed set of field types a form definition may declare."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    SELECT = "select"
    CHECKBOX = "checkbox"
    DATE = "date"


class Operator(str, Enum):
    """
    Comparison operators allowed in a field visibility condition.
    Each condition compares one other field's value against a constant.
    """

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    CONTAINS = "contains"
    NOT_EMPTY = "not_empty"


class CompileErrorKind(str, Enum):
    """Structural defects found while compiling a form definition."""

    UNKNOWN_FIELD_TYPE = "unknown_field_type"
    INVALID_CONSTRAINT = "invalid_constraint"
    DANGLING_CONDITION = "dangling_condition"
    SELF_REFERENCE = "self_reference"
    CIRCULAR_CONDITION = "circular_condition"
    DUPLICATE_FIELD_ID = "duplicate_field_id"
    DUPLICATE_FIELD_NAME = "duplicate_field_name"


class ValidationErrorKind(str, Enum):
    """Defects in submitted data checked against a compiled form."""

    REQUIRED = "required"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    OUT_OF_RANGE = "out_of_range"
    PATTERN_MISMATCH = "pattern_mismatch"
    INVALID_OPTION = "invalid_option"
    INVALID_TYPE = "invalid_type"
