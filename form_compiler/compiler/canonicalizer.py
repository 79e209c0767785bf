"""
JSON Canonicalization for deterministic fingerprints and schema output.

Two structurally identical form definitions must produce byte-for-byte
identical canonical JSON, regardless of key order or object identity.
This is what makes the fingerprint usable as a compilation cache key.
"""

import hashlib
import json
from typing import Any


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Rebuild a JSON-like value with every mapping key sorted.

    Sorting applies at every nesting level. Tuples come back as lists and
    non-string keys are stringified.

    Args:
        obj: Python object (dict, list, tuple or primitive) to canonicalize

    Returns:
        The same value with mappings rebuilt in key order

    Note:
        Arrays preserve their input order. Field order is significant in a
        form definition, so it is never sorted here.
    """
    if isinstance(obj, dict):
        items = sorted(obj.items(), key=lambda kv: str(kv[0]))
        return {str(k): canonicalize_json(v) for k, v in items}

    elif isinstance(obj, (list, tuple)):
        return [canonicalize_json(item) for item in obj]

    else:
        return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Compact, key-sorted JSON text for `obj`.

    Values json cannot encode natively (dates, decimals) are rendered with
    `str` so that condition constants of those types still fingerprint.

    Example:
        >>> to_canonical_json_string({"version": "1.0.0", "fields": []})
        '{"fields":[],"version":"1.0.0"}'
    """
    canonical = canonicalize_json(obj)
    return json.dumps(
        canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
    )


def to_canonical_json_pretty(obj: Any) -> str:
    """Pretty-printed canonical JSON, for logs and generated documents."""
    canonical = canonicalize_json(obj)
    return json.dumps(canonical, sort_keys=True, indent=2, ensure_ascii=False, default=str)


def digest(obj: Any) -> str:
    """SHA-256 hex digest of the canonical JSON string of `obj`."""
    return hashlib.sha256(to_canonical_json_string(obj).encode("utf-8")).hexdigest()
