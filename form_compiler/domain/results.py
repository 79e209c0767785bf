"""
Result models returned by the compiler, validator and cache.

`CompileError` describes a defect in a form definition and is surfaced to
the form author. `ValidationError` describes a defect in submitted data and
is surfaced to the person filling in the form. Both are plain data: the
compiler raises `FormCompilationError` carrying a list of `CompileError`,
while validation returns its errors inside a `ValidationResult`.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from form_compiler.domain.enums import CompileErrorKind, ValidationErrorKind


class CompileError(BaseModel):
    """One structural defect in a form definition."""

    model_config = ConfigDict(frozen=True)

    kind: CompileErrorKind
    message: str
    field_id: str | None = None
    target: str | None = Field(
        default=None, description="Condition target for dangling/self references"
    )
    cycle: tuple[str, ...] = Field(
        default=(), description="Field ids forming a circular condition, in dependency order"
    )


class ValidationError(BaseModel):
    """One failed constraint for one field."""

    model_config = ConfigDict(frozen=True)

    field_id: str
    field_name: str
    kind: ValidationErrorKind
    message: str
    params: dict[str, Any] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    """Outcome of validating submitted data against a compiled form."""

    model_config = ConfigDict(frozen=True)

    errors: tuple[ValidationError, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def errors_for(self, field_id: str) -> list[ValidationError]:
        """Errors reported for a single field, in the order they were found."""
        return [error for error in self.errors if error.field_id == field_id]

    def error_kinds(self) -> dict[str, list[ValidationErrorKind]]:
        """Map of field id to the kinds of errors reported for it."""
        kinds: dict[str, list[ValidationErrorKind]] = {}
        for error in self.errors:
            kinds.setdefault(error.field_id, []).append(error.kind)
        return kinds


class CacheStats(BaseModel):
    """Snapshot of compilation cache counters."""

    model_config = ConfigDict(frozen=True)

    size: int
    capacity: int
    hits: int = 0
    misses: int = 0
    shared: int = 0
    evictions: int = 0
    in_flight: int = 0
