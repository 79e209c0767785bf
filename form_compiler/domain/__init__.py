"""Domain types for form definitions, compile errors and validation results."""

from form_compiler.domain.enums import CompileErrorKind, FieldType, Operator, ValidationErrorKind
from form_compiler.domain.models import (
    Condition,
    Constraints,
    FieldDefinition,
    FormDefinition,
    SelectOption,
)
from form_compiler.domain.results import (
    CacheStats,
    CompileError,
    ValidationError,
    ValidationResult,
)

__all__ = [
    "CacheStats",
    "CompileError",
    "CompileErrorKind",
    "Condition",
    "Constraints",
    "FieldDefinition",
    "FieldType",
    "FormDefinition",
    "Operator",
    "SelectOption",
    "ValidationError",
    "ValidationErrorKind",
    "ValidationResult",
]
