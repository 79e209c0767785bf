"""
Form Schema Compiler.

Compiles a `FormDefinition` into a `CompiledForm`: one `FieldRule` per field
plus the validated `ConditionGraph`. This is the public entry point of the
package.

Compilation:
- Fingerprints the definition and looks it up in the `CompilationCache`
- On a miss, runs the identity pass (duplicate ids and names), the
  condition graph pass and the field rule pass
- Collects the errors of all three passes and raises them together
- Never returns a partially compiled form

A `CompiledForm` is immutable. Validation and visibility calls against it
need no locking and return fresh values owned by the caller.
"""

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from typing import Any

from form_compiler.compiler.cache import CompilationCache
from form_compiler.compiler.condition_graph import ConditionGraph, build_condition_graph
from form_compiler.compiler.field_rules import FieldRule, compile_field_rule
from form_compiler.compiler.fingerprint import fingerprint_form
from form_compiler.compiler.visibility import compute_visibility as _compute_visibility
from form_compiler.core.config import settings
from form_compiler.core.errors import FormCompilationError, InvalidCompiledFormError
from form_compiler.core.messages import render_message, resolve_locale
from form_compiler.core.observability import metrics, metrics_enabled
from form_compiler.domain.enums import CompileErrorKind
from form_compiler.domain.models import FieldDefinition, FormDefinition
from form_compiler.domain.results import CacheStats, CompileError, ValidationError, ValidationResult

logger = logging.getLogger(__name__)


class CompiledForm:
    """
    Compiled validation and visibility semantics for one fingerprint.

    Instances are only created by the compiler. All attributes are read-only.
    """

    __slots__ = ("_fingerprint", "_version", "_graph", "_rules")

    def __init__(
        self,
        fingerprint: str,
        version: str,
        graph: ConditionGraph,
        rules: Iterable[FieldRule],
    ):
        self._fingerprint = fingerprint
        self._version = version
        self._graph = graph
        self._rules = tuple(rules)

    def __repr__(self) -> str:
        return (
            f"CompiledForm(version={self._version!r}, fields={len(self._rules)}, "
            f"fingerprint={self._fingerprint[:12]!r})"
        )

    @property
    def fingerprint(self) -> str:
        return self._fingerprint

    @property
    def version(self) -> str:
        return self._version

    @property
    def graph(self) -> ConditionGraph:
        return self._graph

    @property
    def rules(self) -> tuple[FieldRule, ...]:
        return self._rules

    @property
    def field_ids(self) -> tuple[str, ...]:
        return tuple(rule.field_id for rule in self._rules)

    def rule_for(self, field_id: str) -> FieldRule | None:
        for rule in self._rules:
            if rule.field_id == field_id:
                return rule
        return None

    def compute_visibility(self, values: Mapping[str, Any]) -> dict[str, bool]:
        """Visibility of every field for raw values keyed by field id."""
        return _compute_visibility(self._graph, values)

    def validate(self, data: Mapping[str, Any], locale: str | None = None) -> ValidationResult:
        """
        Validate submitted data keyed by field name.

        Hidden fields are skipped entirely: they never produce an error and
        may be absent from `data`.
        """
        return self._validate(data, self._rules, locale)

    def validate_partial(
        self,
        data: Mapping[str, Any],
        changed_field_ids: Iterable[str],
        locale: str | None = None,
    ) -> ValidationResult:
        """
        Validate only the listed fields.

        Visibility is still computed from the whole of `data`. Ids that are
        not part of the form are ignored. A single id may be passed as a str.
        """
        if isinstance(changed_field_ids, str):
            changed = {changed_field_ids}
        else:
            changed = set(changed_field_ids)
        rules = [rule for rule in self._rules if rule.field_id in changed]
        return self._validate(data, rules, locale)

    def _snapshot(self, data: Mapping[str, Any]) -> dict[str, Any]:
        # Name-keyed data -> id-keyed snapshot; absent names stay absent
        return {rule.field_id: data[rule.name] for rule in self._rules if rule.name in data}

    def _validate(
        self,
        data: Mapping[str, Any],
        rules: Iterable[FieldRule],
        locale: str | None,
    ) -> ValidationResult:
        if not isinstance(data, Mapping):
            raise TypeError(f"data must be a mapping, got {type(data).__name__}")

        locale = resolve_locale(locale, settings.locale)
        visibility = _compute_visibility(self._graph, self._snapshot(data))

        errors: list[ValidationError] = []
        for rule in rules:
            if not visibility.get(rule.field_id, True):
                continue
            for violation in rule.check(data.get(rule.name)):
                params = dict(violation.params or {})
                errors.append(
                    ValidationError(
                        field_id=rule.field_id,
                        field_name=rule.name,
                        kind=violation.kind,
                        message=render_message(violation.message_key, locale, params),
                        params=params,
                    )
                )

        result = ValidationResult(errors=tuple(errors))
        if metrics_enabled():
            metrics.form_validations_total.labels(
                outcome="valid" if result.valid else "invalid"
            ).inc()
        return result


# =============================================================================
# Compilation
# =============================================================================


def _check_identity(fields: Iterable[FieldDefinition]) -> list[CompileError]:
    """Report every field whose id or name repeats an earlier field's."""
    errors: list[CompileError] = []
    seen_ids: set[str] = set()
    seen_names: dict[str, str] = {}

    for field_def in fields:
        if field_def.id in seen_ids:
            errors.append(
                CompileError(
                    kind=CompileErrorKind.DUPLICATE_FIELD_ID,
                    field_id=field_def.id,
                    message=f"Duplicate field id '{field_def.id}'",
                )
            )
        seen_ids.add(field_def.id)

        owner = seen_names.get(field_def.name)
        if owner is not None:
            errors.append(
                CompileError(
                    kind=CompileErrorKind.DUPLICATE_FIELD_NAME,
                    field_id=field_def.id,
                    target=owner,
                    message=(
                        f"Field '{field_def.id}' reuses name '{field_def.name}' "
                        f"of field '{owner}'"
                    ),
                )
            )
        else:
            seen_names[field_def.name] = field_def.id

    return errors


def _build_compiled_form(definition: FormDefinition, fingerprint: str) -> CompiledForm:
    """
    Run every compile pass and assemble the `CompiledForm`.

    Raises:
        FormCompilationError: With the errors of all passes, in pass order
    """
    start_time = time.perf_counter()
    logger.info(
        "Compiling form version %s: %d fields, fingerprint %s",
        definition.version,
        len(definition.fields),
        fingerprint[:12],
    )

    errors = _check_identity(definition.fields)

    graph = None
    try:
        graph = build_condition_graph(definition.fields)
    except FormCompilationError as e:
        errors.extend(e.errors)

    rules: list[FieldRule] = []
    for field_def in definition.fields:
        try:
            rules.append(compile_field_rule(field_def))
        except FormCompilationError as e:
            errors.extend(e.errors)

    duration = time.perf_counter() - start_time

    if errors or graph is None:
        logger.warning(
            "Form version %s rejected with %d compile error(s): %s",
            definition.version,
            len(errors),
            ", ".join(sorted({error.kind.value for error in errors})),
        )
        _record_compiler_metrics("error", duration, 0)
        raise FormCompilationError(errors)

    logger.info(
        "Compiled form version %s: %d fields, %d conditions, duration=%.6fs",
        definition.version,
        len(rules),
        len(graph.conditions),
        duration,
    )
    _record_compiler_metrics("success", duration, len(rules))

    return CompiledForm(
        fingerprint=fingerprint,
        version=definition.version,
        graph=graph,
        rules=rules,
    )


def _record_compiler_metrics(status: str, duration: float, field_count: int) -> None:
    """
    Record compiler metrics to Prometheus.

    Metrics failures are logged and ignored; they never break compilation.

    Args:
        status: "success" or "error"
        duration: Compilation duration in seconds
        field_count: Number of fields compiled
    """
    if not metrics_enabled():
        return
    try:
        metrics.form_compilations_total.labels(status=status).inc()
        metrics.form_compile_duration_seconds.observe(duration)
        if status == "success":
            metrics.form_compile_fields_count.observe(field_count)
    except Exception:
        logger.debug("Failed to record compiler metrics", exc_info=True)


def _require_compiled_form(form: Any) -> CompiledForm:
    if not isinstance(form, CompiledForm):
        raise InvalidCompiledFormError(
            f"Expected a CompiledForm produced by compile_form, got {type(form).__name__}",
            details={"type": type(form).__name__},
        )
    return form


class FormSchemaCompiler:
    """
    Compiles form definitions through an owned `CompilationCache`.

    Example:
        >>> compiler = FormSchemaCompiler(cache=CompilationCache(capacity=10))
        >>> form = compiler.compile({
        ...     "version": "1",
        ...     "fields": [{"id": "age", "name": "age", "type": "number",
        ...                 "constraints": {"minValue": 0, "maxValue": 150}}],
        ... })
        >>> compiler.validate(form, {"age": 200}).valid
        False
    """

    def __init__(self, cache: CompilationCache | None = None):
        self._cache = cache if cache is not None else CompilationCache()

    @property
    def cache(self) -> CompilationCache:
        return self._cache

    def compile(self, definition: FormDefinition | Mapping[str, Any]) -> CompiledForm:
        """
        Compile a form definition, reusing the cached form for its fingerprint.

        Args:
            definition: A `FormDefinition` or its JSON-shaped mapping

        Returns:
            The `CompiledForm`. Structurally identical definitions return the
            same instance while it stays cached.

        Raises:
            FormCompilationError: With every compile error found
            pydantic.ValidationError: If a mapping does not parse as a definition
        """
        if not isinstance(definition, FormDefinition):
            definition = FormDefinition.model_validate(definition)

        fingerprint = fingerprint_form(definition)
        return self._cache.get_or_compile(
            fingerprint, lambda: _build_compiled_form(definition, fingerprint)
        )

    def validate(
        self, form: CompiledForm, data: Mapping[str, Any], locale: str | None = None
    ) -> ValidationResult:
        return _require_compiled_form(form).validate(data, locale)

    def validate_partial(
        self,
        form: CompiledForm,
        data: Mapping[str, Any],
        changed_field_ids: Iterable[str],
        locale: str | None = None,
    ) -> ValidationResult:
        return _require_compiled_form(form).validate_partial(data, changed_field_ids, locale)

    def compute_visibility(self, form: CompiledForm, values: Mapping[str, Any]) -> dict[str, bool]:
        return _require_compiled_form(form).compute_visibility(values)

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()


# =============================================================================
# Module-level API
# =============================================================================

_default_compiler: FormSchemaCompiler | None = None
_default_compiler_lock = threading.Lock()


def get_default_compiler() -> FormSchemaCompiler:
    """Shared compiler used by the module-level functions, created on first use."""
    global _default_compiler
    with _default_compiler_lock:
        if _default_compiler is None:
            _default_compiler = FormSchemaCompiler()
        return _default_compiler


def compile_form(definition: FormDefinition | Mapping[str, Any]) -> CompiledForm:
    return get_default_compiler().compile(definition)


def validate(
    form: CompiledForm, data: Mapping[str, Any], locale: str | None = None
) -> ValidationResult:
    return _require_compiled_form(form).validate(data, locale)


def validate_partial(
    form: CompiledForm,
    data: Mapping[str, Any],
    changed_field_ids: Iterable[str],
    locale: str | None = None,
) -> ValidationResult:
    return _require_compiled_form(form).validate_partial(data, changed_field_ids, locale)


def compute_visibility(form: CompiledForm, values: Mapping[str, Any]) -> dict[str, bool]:
    return _require_compiled_form(form).compute_visibility(values)


def clear_cache() -> None:
    get_default_compiler().clear_cache()


def cache_stats() -> CacheStats:
    return get_default_compiler().cache_stats()
