"""
Localized validation messages.

Messages are keyed by validation error kind, optionally suffixed with a
variant (``out_of_range.min``, ``required.checkbox``). They intentionally
never mention the field label: labels are not part of a compiled form, and
the UI renders its own label next to each message.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"

_EN_US: dict[str, str] = {
    "required": "This field is required",
    "required.checkbox": "You must accept this option",
    "too_short": "Must be at least {min_length} characters",
    "too_long": "Must be at most {max_length} characters",
    "out_of_range.min": "Must be at least {min_value}",
    "out_of_range.max": "Must be at most {max_value}",
    "pattern_mismatch": "Invalid format",
    "invalid_option": "Please select a valid option",
    "invalid_type": "Expected a {expected} value",
    "invalid_type.date": "Expected a date in {date_format} format",
}

_ZH_CN: dict[str, str] = {
    "required": "此字段不能为空",
    "required.checkbox": "必须同意此选项",
    "too_short": "不能少于{min_length}个字符",
    "too_long": "不能超过{max_length}个字符",
    "out_of_range.min": "不能小于{min_value}",
    "out_of_range.max": "不能大于{max_value}",
    "pattern_mismatch": "格式不正确",
    "invalid_option": "请选择有效的选项",
    "invalid_type": "类型错误，应为{expected}",
    "invalid_type.date": "日期格式不正确，应为{date_format}",
}

MESSAGE_CATALOG: dict[str, dict[str, str]] = {
    "en-US": _EN_US,
    "zh-CN": _ZH_CN,
}

SUPPORTED_LOCALES = frozenset(MESSAGE_CATALOG)


def resolve_locale(locale: str | None, default: str = DEFAULT_LOCALE) -> str:
    """Return `locale` if it has a catalog, otherwise `default`."""
    if locale is None:
        return default
    if locale not in MESSAGE_CATALOG:
        logger.warning("Unsupported locale '%s', falling back to '%s'", locale, default)
        return default
    return locale


def _display(value: Any) -> Any:
    # 10.0 -> 10 so integral bounds read naturally
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def render_message(
    key: str, locale: str = DEFAULT_LOCALE, params: dict[str, Any] | None = None
) -> str:
    """
    Render the message for `key` in `locale`.

    A key with a variant falls back to its base kind when the variant has no
    template, so ``required.select`` renders as ``required``.

    Args:
        key: Message key, e.g. "too_short" or "out_of_range.max"
        locale: Locale with a catalog entry
        params: Values substituted into the template

    Returns:
        The rendered message
    """
    catalog = MESSAGE_CATALOG.get(locale, MESSAGE_CATALOG[DEFAULT_LOCALE])
    template = catalog.get(key) or catalog.get(key.split(".", 1)[0])
    if template is None:
        return key
    values = {name: _display(value) for name, value in (params or {}).items()}
    return template.format(**values)
