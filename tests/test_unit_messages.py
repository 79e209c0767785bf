"""
Unit tests for localized validation messages.

Tests cover:
- Rendering with parameters
- Variant keys and their fallback to the base kind
- Locale resolution and fallback
"""

import logging

import pytest

from form_compiler.core.messages import (
    DEFAULT_LOCALE,
    MESSAGE_CATALOG,
    render_message,
    resolve_locale,
)
from form_compiler.domain.enums import ValidationErrorKind


class TestRenderMessage:
    """Tests for message rendering."""

    @pytest.mark.anyio
    async def test_every_kind_has_a_message_in_every_locale(self):
        for catalog in MESSAGE_CATALOG.values():
            for kind in ValidationErrorKind:
                assert kind.value in catalog

    @pytest.mark.anyio
    async def test_catalogs_have_the_same_keys(self):
        assert set(MESSAGE_CATALOG["zh-CN"]) == set(MESSAGE_CATALOG["en-US"])

    @pytest.mark.anyio
    async def test_params_substituted(self):
        assert render_message("too_short", "en-US", {"min_length": 3}) == (
            "Must be at least 3 characters"
        )
        assert render_message("too_long", "zh-CN", {"max_length": 10}) == "不能超过10个字符"

    @pytest.mark.anyio
    async def test_integral_floats_render_as_integers(self):
        assert render_message("out_of_range.min", "en-US", {"min_value": 0.0}) == (
            "Must be at least 0"
        )
        assert render_message("out_of_range.max", "en-US", {"max_value": 2.5}) == (
            "Must be at most 2.5"
        )

    @pytest.mark.anyio
    async def test_unknown_variant_falls_back_to_kind(self):
        assert render_message("required.select") == "This field is required"

    @pytest.mark.anyio
    async def test_unknown_key_returned_as_is(self):
        assert render_message("no_such_message") == "no_such_message"


class TestResolveLocale:
    """Tests for locale resolution."""

    @pytest.mark.anyio
    async def test_supported_locale(self):
        assert resolve_locale("zh-CN") == "zh-CN"

    @pytest.mark.anyio
    async def test_none_uses_default(self):
        assert resolve_locale(None) == DEFAULT_LOCALE
        assert resolve_locale(None, "zh-CN") == "zh-CN"

    @pytest.mark.anyio
    async def test_unsupported_locale_warns_and_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING, logger="form_compiler.core.messages"):
            assert resolve_locale("de-DE") == DEFAULT_LOCALE

        assert "Unsupported locale 'de-DE'" in caplog.text
