"""
Tests for the exception hierarchy.

Tests cover:
- FormCompilationError message and details
- HTTP status mapping for transport collaborators
"""

import pytest

from form_compiler.core.errors import (
    FormCompilationError,
    FormCompilerError,
    InvalidCompiledFormError,
    get_status_code,
)
from form_compiler.domain.enums import CompileErrorKind
from form_compiler.domain.results import CompileError


def _error(field_id: str) -> CompileError:
    return CompileError(
        kind=CompileErrorKind.UNKNOWN_FIELD_TYPE,
        field_id=field_id,
        message=f"Field '{field_id}' has unknown type 'x'",
    )


class TestFormCompilationError:
    """Tests for the compile error exception."""

    @pytest.mark.anyio
    async def test_message_counts_errors(self):
        error = FormCompilationError([_error("a"), _error("b")])

        assert error.message == "Form definition has 2 compile error(s)"
        assert str(error) == error.message
        assert isinstance(error, FormCompilerError)

    @pytest.mark.anyio
    async def test_details_are_json_ready(self):
        error = FormCompilationError([_error("a")])

        assert error.details == {
            "errors": [
                {
                    "kind": "unknown_field_type",
                    "message": "Field 'a' has unknown type 'x'",
                    "field_id": "a",
                    "target": None,
                    "cycle": [],
                }
            ]
        }

    @pytest.mark.anyio
    async def test_custom_message(self):
        assert FormCompilationError([], message="nope").message == "nope"

    @pytest.mark.anyio
    async def test_base_error_defaults_details(self):
        assert FormCompilerError("boom").details == {}


class TestStatusCodes:
    """Tests for the HTTP status mapping."""

    @pytest.mark.anyio
    async def test_compile_errors_are_unprocessable(self):
        assert get_status_code(FormCompilationError([_error("a")])) == 422

    @pytest.mark.anyio
    async def test_contract_violations_are_server_errors(self):
        assert get_status_code(InvalidCompiledFormError("not compiled")) == 500

    @pytest.mark.anyio
    async def test_unknown_errors_default_to_500(self):
        assert get_status_code(KeyError("x")) == 500
