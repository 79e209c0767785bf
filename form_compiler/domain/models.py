"""
Pydantic models for declarative form definitions.

These are the inputs to the compiler. Persisted definitions arrive as JSON
from the form builder (camelCase keys); Python callers may use snake_case.
All models are frozen so a definition cannot change underneath a compile.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from form_compiler.domain.enums import Operator

_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)


class SelectOption(BaseModel):
    """One choice of a select field."""

    model_config = _MODEL_CONFIG

    label: str = ""
    value: Any


class Constraints(BaseModel):
    """
    Type-dependent validation constraints.

    Only the subset meaningful for a field's type is applied; the rest are
    ignored rather than rejected:

    - text / textarea: min_length, max_length, pattern
    - number: min_value, max_value
    """

    model_config = _MODEL_CONFIG

    min_length: int | None = None
    max_length: int | None = None
    min_value: float | None = None
    max_value: float | None = None
    pattern: str | None = None


class Condition(BaseModel):
    """Show the owning field only when another field's value satisfies `operator`."""

    model_config = _MODEL_CONFIG

    depends_on: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("depends_on", "dependsOn", "fieldId"),
        description="Id of the field whose value controls visibility",
    )
    operator: Operator
    value: Any = None


class FieldDefinition(BaseModel):
    """
    Declarative definition of one form field.

    `type` is kept as the raw string from the definition; it is resolved to
    `FieldType` by the field rule compiler, which reports unknown types as
    compile errors instead of failing at parse time.
    """

    model_config = _MODEL_CONFIG

    id: str = Field(..., min_length=1, description="Unique id within the form")
    name: str = Field(..., min_length=1, description="Key of the value in submitted data")
    type: str
    label: str = ""
    placeholder: str | None = None
    required: bool = False
    constraints: Constraints = Field(default_factory=Constraints)
    options: tuple[SelectOption, ...] = ()
    default_value: Any = None
    condition: Condition | None = None


class FormDefinition(BaseModel):
    """Versioned, ordered list of field definitions."""

    model_config = _MODEL_CONFIG

    version: str = Field(..., min_length=1)
    fields: tuple[FieldDefinition, ...] = ()

    def field_ids(self) -> list[str]:
        """Field ids in definition order."""
        return [field.id for field in self.fields]
