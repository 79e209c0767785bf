"""
Form Schema Compiler.

Compiles declarative form definitions into validators and visibility
evaluators, cached by structural fingerprint.

Usage:
    from form_compiler import compile_form, validate, compute_visibility

    form = compile_form(definition_json)
    result = validate(form, submitted_data)
    visibility = compute_visibility(form, values_by_field_id)
"""

from form_compiler.compiler import (
    CompilationCache,
    CompiledForm,
    FormSchemaCompiler,
    cache_stats,
    clear_cache,
    compile_form,
    compute_visibility,
    fingerprint_form,
    to_json_schema,
    validate,
    validate_partial,
)
from form_compiler.core.errors import (
    FormCompilationError,
    FormCompilerError,
    InvalidCompiledFormError,
)
from form_compiler.domain import (
    CacheStats,
    CompileError,
    CompileErrorKind,
    Condition,
    Constraints,
    FieldDefinition,
    FieldType,
    FormDefinition,
    Operator,
    SelectOption,
    ValidationError,
    ValidationErrorKind,
    ValidationResult,
)

__version__ = "0.1.0"

__all__ = [
    "CacheStats",
    "CompilationCache",
    "CompileError",
    "CompileErrorKind",
    "CompiledForm",
    "Condition",
    "Constraints",
    "FieldDefinition",
    "FieldType",
    "FormCompilationError",
    "FormCompilerError",
    "FormDefinition",
    "FormSchemaCompiler",
    "InvalidCompiledFormError",
    "Operator",
    "SelectOption",
    "ValidationError",
    "ValidationErrorKind",
    "ValidationResult",
    "cache_stats",
    "clear_cache",
    "compile_form",
    "compute_visibility",
    "fingerprint_form",
    "to_json_schema",
    "validate",
    "validate_partial",
]
