"""
Form schema compiler and conditional visibility engine.

This package turns declarative form definitions into cached, reusable
compiled forms that validate submitted data and compute field visibility.

Key Components:
- field_rules: Compiles one field definition into its validation rule
- condition_graph: Validates condition references and rejects cycles
- visibility: Evaluates field conditions against a value snapshot
- fingerprint / canonicalizer: Deterministic cache keys
- cache: Bounded LRU cache with single-flight compilation
- compiler: Public entry point composing all of the above
- json_schema: Draft-07 JSON Schema export

Design Principles:
- Determinism: Structurally identical definitions share one compiled form
- Completeness: Every compile error is reported in one pass
- Hidden fields are never validated
"""

from form_compiler.compiler.cache import CompilationCache
from form_compiler.compiler.compiler import (
    CompiledForm,
    FormSchemaCompiler,
    cache_stats,
    clear_cache,
    compile_form,
    compute_visibility,
    get_default_compiler,
    validate,
    validate_partial,
)
from form_compiler.compiler.fingerprint import fingerprint_form
from form_compiler.compiler.json_schema import to_json_schema

__all__ = [
    "CompilationCache",
    "CompiledForm",
    "FormSchemaCompiler",
    "cache_stats",
    "clear_cache",
    "compile_form",
    "compute_visibility",
    "fingerprint_form",
    "get_default_compiler",
    "to_json_schema",
    "validate",
    "validate_partial",
]
