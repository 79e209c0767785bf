"""
Field Rule Compilation.

Compiles one `FieldDefinition` into a `FieldRule`: the type-specific
validation logic for that field. This is the only place that branches on
the field type; every other component works with the compiled rule.

Checks performed at compile time:
- The field type is one of the known `FieldType` values
- Constraints are satisfiable (min <= max after defaults, non-negative
  lengths, compilable pattern)

A rule never raises on bad input data. `check` returns every violated
constraint for the value, so a single field may report several problems.
"""

import logging
import math
import re
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, NamedTuple

from form_compiler.core.errors import FormCompilationError
from form_compiler.domain.enums import CompileErrorKind, FieldType, ValidationErrorKind
from form_compiler.domain.models import FieldDefinition
from form_compiler.domain.results import CompileError

logger = logging.getLogger(__name__)


# Default length bounds when a text field sets none
TEXT_LENGTH_BOUNDS = (1, 500)
TEXTAREA_LENGTH_BOUNDS = (1, 2000)

# Default numeric bounds: the representable float range
NUMBER_MIN_VALUE = -sys.float_info.max
NUMBER_MAX_VALUE = sys.float_info.max

CANONICAL_DATE_FORMAT = "%Y-%m-%d"
CANONICAL_DATE_DISPLAY = "YYYY-MM-DD"
_DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class RuleViolation(NamedTuple):
    """One failed check, before it is turned into a localized ValidationError."""

    kind: ValidationErrorKind
    params: dict[str, Any] | None = None
    variant: str | None = None

    @property
    def message_key(self) -> str:
        if self.variant:
            return f"{self.kind.value}.{self.variant}"
        return self.kind.value


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def same_value(left: Any, right: Any) -> bool:
    """Strict equality: True never equals 1 and "1" never equals 1."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    return left == right


def coerce_number(value: Any) -> float | None:
    """
    Coerce an int, float or numeric string to float.

    Returns None for anything non-numeric, including bools and NaN. Ints
    beyond the float range become signed infinity.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            number = float(value)
        except OverflowError:
            number = math.inf if value > 0 else -math.inf
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number):
        return None
    return number


def parse_canonical_date(value: str) -> date | None:
    """Parse a zero-padded YYYY-MM-DD string into a date, or None."""
    if not _DATE_SHAPE.match(value):
        return None
    try:
        return datetime.strptime(value, CANONICAL_DATE_FORMAT).date()
    except ValueError:
        return None


# =============================================================================
# Field Rules
# =============================================================================


@dataclass(frozen=True)
class FieldRule(ABC):
    """Compiled validation semantics for one field. Concrete per field type."""

    field_type: ClassVar[FieldType]

    field_id: str
    name: str
    required: bool

    @abstractmethod
    def check(self, value: Any) -> list[RuleViolation]:
        """Return every constraint `value` violates; an empty list means valid."""


@dataclass(frozen=True)
class TextRule(FieldRule):
    field_type: ClassVar[FieldType] = FieldType.TEXT

    min_length: int = TEXT_LENGTH_BOUNDS[0]
    max_length: int = TEXT_LENGTH_BOUNDS[1]
    pattern: re.Pattern[str] | None = field(default=None, compare=False)

    def check(self, value: Any) -> list[RuleViolation]:
        if _is_empty(value):
            return [RuleViolation(ValidationErrorKind.REQUIRED)] if self.required else []

        if not isinstance(value, str):
            return [RuleViolation(ValidationErrorKind.INVALID_TYPE, {"expected": "string"})]

        if self.required and not value.strip():
            return [RuleViolation(ValidationErrorKind.REQUIRED)]

        violations = []
        length = len(value)
        if length < self.min_length:
            violations.append(
                RuleViolation(ValidationErrorKind.TOO_SHORT, {"min_length": self.min_length})
            )
        if length > self.max_length:
            violations.append(
                RuleViolation(ValidationErrorKind.TOO_LONG, {"max_length": self.max_length})
            )
        # Pattern is checked independently of length
        if self.pattern is not None and not self.pattern.search(value):
            violations.append(
                RuleViolation(
                    ValidationErrorKind.PATTERN_MISMATCH, {"pattern": self.pattern.pattern}
                )
            )
        return violations


@dataclass(frozen=True)
class TextareaRule(TextRule):
    field_type: ClassVar[FieldType] = FieldType.TEXTAREA

    min_length: int = TEXTAREA_LENGTH_BOUNDS[0]
    max_length: int = TEXTAREA_LENGTH_BOUNDS[1]


@dataclass(frozen=True)
class NumberRule(FieldRule):
    field_type: ClassVar[FieldType] = FieldType.NUMBER

    min_value: float = NUMBER_MIN_VALUE
    max_value: float = NUMBER_MAX_VALUE

    def check(self, value: Any) -> list[RuleViolation]:
        if _is_empty(value):
            return [RuleViolation(ValidationErrorKind.REQUIRED)] if self.required else []

        number = coerce_number(value)
        if number is None:
            return [RuleViolation(ValidationErrorKind.INVALID_TYPE, {"expected": "number"})]

        bounds = {"min_value": self.min_value, "max_value": self.max_value}
        if number < self.min_value:
            return [RuleViolation(ValidationErrorKind.OUT_OF_RANGE, bounds, variant="min")]
        if number > self.max_value:
            return [RuleViolation(ValidationErrorKind.OUT_OF_RANGE, bounds, variant="max")]
        return []


@dataclass(frozen=True)
class SelectRule(FieldRule):
    field_type: ClassVar[FieldType] = FieldType.SELECT

    allowed_values: tuple[Any, ...] = ()

    def check(self, value: Any) -> list[RuleViolation]:
        if _is_empty(value):
            return [RuleViolation(ValidationErrorKind.REQUIRED)] if self.required else []

        # No options means any value is accepted
        if self.allowed_values and not any(same_value(value, v) for v in self.allowed_values):
            return [RuleViolation(ValidationErrorKind.INVALID_OPTION, {"value": value})]
        return []


@dataclass(frozen=True)
class CheckboxRule(FieldRule):
    """
    A required checkbox must be checked ("I agree to the terms"), not merely
    present. Unchecked counts as missing.
    """

    field_type: ClassVar[FieldType] = FieldType.CHECKBOX

    def check(self, value: Any) -> list[RuleViolation]:
        if value is None:
            if self.required:
                return [RuleViolation(ValidationErrorKind.REQUIRED, variant="checkbox")]
            return []

        if not isinstance(value, bool):
            return [RuleViolation(ValidationErrorKind.INVALID_TYPE, {"expected": "boolean"})]

        if self.required and value is not True:
            return [RuleViolation(ValidationErrorKind.REQUIRED, variant="checkbox")]
        return []


@dataclass(frozen=True)
class DateRule(FieldRule):
    field_type: ClassVar[FieldType] = FieldType.DATE

    def check(self, value: Any) -> list[RuleViolation]:
        if _is_empty(value):
            return [RuleViolation(ValidationErrorKind.REQUIRED)] if self.required else []

        if isinstance(value, date):
            return []
        if isinstance(value, str) and parse_canonical_date(value) is not None:
            return []
        return [
            RuleViolation(
                ValidationErrorKind.INVALID_TYPE,
                {"expected": "date", "date_format": CANONICAL_DATE_DISPLAY},
                variant="date",
            )
        ]


# =============================================================================
# Compilation
# =============================================================================


def _invalid_constraint(field_def: FieldDefinition, message: str) -> CompileError:
    return CompileError(
        kind=CompileErrorKind.INVALID_CONSTRAINT,
        field_id=field_def.id,
        message=f"Field '{field_def.id}': {message}",
    )


def _build_text_rule(field_def: FieldDefinition, errors: list[CompileError]) -> FieldRule:
    if resolve_field_type(field_def.type) is FieldType.TEXTAREA:
        rule_cls, (default_min, default_max) = TextareaRule, TEXTAREA_LENGTH_BOUNDS
    else:
        rule_cls, (default_min, default_max) = TextRule, TEXT_LENGTH_BOUNDS
    constraints = field_def.constraints

    min_length = default_min if constraints.min_length is None else constraints.min_length
    max_length = default_max if constraints.max_length is None else constraints.max_length

    if min_length < 0:
        errors.append(_invalid_constraint(field_def, f"minLength must be >= 0, got {min_length}"))
    if max_length < 0:
        errors.append(_invalid_constraint(field_def, f"maxLength must be >= 0, got {max_length}"))
    if min_length > max_length:
        errors.append(
            _invalid_constraint(
                field_def, f"minLength ({min_length}) is greater than maxLength ({max_length})"
            )
        )

    pattern = None
    if constraints.pattern:
        try:
            pattern = re.compile(constraints.pattern)
        except re.error as e:
            errors.append(_invalid_constraint(field_def, f"invalid pattern: {e}"))

    return rule_cls(
        field_id=field_def.id,
        name=field_def.name,
        required=field_def.required,
        min_length=min_length,
        max_length=max_length,
        pattern=pattern,
    )


def _build_number_rule(field_def: FieldDefinition, errors: list[CompileError]) -> FieldRule:
    constraints = field_def.constraints
    min_value = NUMBER_MIN_VALUE if constraints.min_value is None else constraints.min_value
    max_value = NUMBER_MAX_VALUE if constraints.max_value is None else constraints.max_value

    if min_value > max_value:
        errors.append(
            _invalid_constraint(
                field_def, f"minValue ({min_value}) is greater than maxValue ({max_value})"
            )
        )

    return NumberRule(
        field_id=field_def.id,
        name=field_def.name,
        required=field_def.required,
        min_value=min_value,
        max_value=max_value,
    )


def _build_select_rule(field_def: FieldDefinition, errors: list[CompileError]) -> FieldRule:
    return SelectRule(
        field_id=field_def.id,
        name=field_def.name,
        required=field_def.required,
        allowed_values=tuple(option.value for option in field_def.options),
    )


def _build_checkbox_rule(field_def: FieldDefinition, errors: list[CompileError]) -> FieldRule:
    return CheckboxRule(field_id=field_def.id, name=field_def.name, required=field_def.required)


def _build_date_rule(field_def: FieldDefinition, errors: list[CompileError]) -> FieldRule:
    return DateRule(field_id=field_def.id, name=field_def.name, required=field_def.required)


RULE_BUILDERS: dict[FieldType, Callable[[FieldDefinition, list[CompileError]], FieldRule]] = {
    FieldType.TEXT: _build_text_rule,
    FieldType.TEXTAREA: _build_text_rule,
    FieldType.NUMBER: _build_number_rule,
    FieldType.SELECT: _build_select_rule,
    FieldType.CHECKBOX: _build_checkbox_rule,
    FieldType.DATE: _build_date_rule,
}


def resolve_field_type(raw_type: Any) -> FieldType | None:
    """Map a raw definition type to `FieldType`, or None when unknown."""
    try:
        return FieldType(raw_type)
    except ValueError:
        return None


def compile_field_rule(field_def: FieldDefinition) -> FieldRule:
    """
    Compile one field definition into its validation rule.

    Args:
        field_def: The field to compile

    Returns:
        The compiled `FieldRule` for the field's type

    Raises:
        FormCompilationError: With every defect found in this field
            (unknown type, unsatisfiable or malformed constraints). No rule
            is returned when any defect exists.

    Example:
        >>> rule = compile_field_rule(
        ...     FieldDefinition(id="age", name="age", type="number",
        ...                     constraints={"min_value": 0, "max_value": 150})
        ... )
        >>> rule.check(200)[0].kind
        <ValidationErrorKind.OUT_OF_RANGE: 'out_of_range'>
    """
    field_type = resolve_field_type(field_def.type)
    if field_type is None:
        raise FormCompilationError(
            [
                CompileError(
                    kind=CompileErrorKind.UNKNOWN_FIELD_TYPE,
                    field_id=field_def.id,
                    message=f"Field '{field_def.id}' has unknown type '{field_def.type}'",
                )
            ]
        )

    errors: list[CompileError] = []
    rule = RULE_BUILDERS[field_type](field_def, errors)

    if errors:
        logger.debug("Field '%s' failed to compile with %d error(s)", field_def.id, len(errors))
        raise FormCompilationError(errors)

    return rule
