"""
Exceptions raised by the form compiler.

Submitted-data problems are never raised; they are returned as
`ValidationError` values inside a `ValidationResult`. The exceptions here
cover defective form definitions and caller contract violations, and map to
HTTP status codes for whichever transport layer hosts the compiler.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from form_compiler.domain.results import CompileError


class FormCompilerError(Exception):
    """Base exception for all form compiler errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class FormCompilationError(FormCompilerError):
    """
    Raised when a form definition cannot be compiled.

    Carries every defect found across the identity, condition graph and
    field rule passes so a form author sees all of them at once.

    Examples:
    - Unknown field type
    - minLength greater than maxLength
    - Condition referencing a missing field
    - Circular conditions

    HTTP Status: 422 Unprocessable Entity
    """

    def __init__(self, errors: "list[CompileError]", message: str | None = None):
        self.errors = list(errors)
        if message is None:
            message = f"Form definition has {len(self.errors)} compile error(s)"
        super().__init__(
            message,
            details={"errors": [error.model_dump(mode="json") for error in self.errors]},
        )


class InvalidCompiledFormError(FormCompilerError):
    """
    Raised when validate/compute_visibility receive something that was not
    produced by a successful compile. This is a programming error.

    HTTP Status: 500 Internal Server Error
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    FormCompilationError: 422,
    InvalidCompiledFormError: 500,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
