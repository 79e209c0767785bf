"""
Pytest configuration and shared fixtures for the form compiler tests.

Provides:
- AnyIO backend selection for `@pytest.mark.anyio` tests
- An isolated `FormSchemaCompiler` per test (own cache)
- Helpers building field dicts and form definitions in persisted JSON shape

Helper Functions:
- make_field(): Field definition dict (camelCase keys, as stored)
- make_form(): FormDefinition from field dicts
"""

from __future__ import annotations

import logging
from typing import Any

import pytest

from form_compiler.compiler.cache import CompilationCache
from form_compiler.compiler.compiler import FormSchemaCompiler
from form_compiler.domain.models import FormDefinition


def make_field(field_id: str, field_type: str = "text", **kwargs: Any) -> dict[str, Any]:
    """
    Build a field definition dict. `name` defaults to the id.

    Example:
        make_field("age", "number", required=True, constraints={"minValue": 0})
    """
    return {"id": field_id, "name": kwargs.pop("name", field_id), "type": field_type, **kwargs}


def make_form(*fields: dict[str, Any], version: str = "1.0.0") -> FormDefinition:
    return FormDefinition.model_validate({"version": version, "fields": list(fields)})


def when(depends_on: str, operator: str, value: Any = None) -> dict[str, Any]:
    """Condition dict for `make_field(..., condition=when(...))`."""
    return {"dependsOn": depends_on, "operator": operator, "value": value}


# =============================================================================
# Compiler Fixtures
# =============================================================================


@pytest.fixture
def cache() -> CompilationCache:
    return CompilationCache(capacity=16)


@pytest.fixture
def compiler(cache: CompilationCache) -> FormSchemaCompiler:
    """Compiler with its own cache, isolated from the module-level default."""
    return FormSchemaCompiler(cache=cache)


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after logging configuration tests."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"
