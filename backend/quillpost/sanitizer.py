"""
Quillpost Backend — Request Body Sanitizer
============================================

What:  Redacts sensitive keys from request bodies before they are logged.
How:   Pure recursive walk over nested mappings with a fixed deny-list.
Who:   RequestLoggingMiddleware (DEBUG body log line).

Rules:
    - A key in SENSITIVE_KEYS (case-sensitive) → "[REDACTED]", whatever the value
    - Any other key holding a mapping → sanitized recursively
    - Lists/tuples and scalars → passed through untouched, elements included
    - A mapping already on the current recursion path → {"[Circular]": True}
    - The input is never mutated; touched mappings are copied

Known gap:
    Lists are not walked, so `{"users": [{"password": "x"}]}` is logged with
    the password intact. See DESIGN.md before relying on this for anything
    sensitive.
"""

import json
from typing import Any, Mapping, Set

SENSITIVE_KEYS = frozenset({"password", "token", "secret", "authorization", "creditCard", "cvv"})
REDACTED = "[REDACTED]"
CIRCULAR_KEY = "[Circular]"
UNSERIALIZABLE_BODY = "[Unable to serialize - circular reference detected]"


def sanitize_body(value: Any) -> Any:
    """Return a redacted copy of `value` that is safe to write to logs."""
    if not isinstance(value, Mapping):
        return value
    return _sanitize_mapping(value, set())


def _sanitize_mapping(mapping: Mapping, on_path: Set[int]) -> dict:
    marker = id(mapping)
    if marker in on_path:
        return {CIRCULAR_KEY: True}

    on_path.add(marker)
    try:
        sanitized = {}
        for key, item in mapping.items():
            if key in SENSITIVE_KEYS:
                sanitized[key] = REDACTED
            elif isinstance(item, Mapping):
                sanitized[key] = _sanitize_mapping(item, on_path)
            else:
                sanitized[key] = item
        return sanitized
    finally:
        # Siblings may legitimately share a sub-mapping; only ancestors count
        on_path.discard(marker)


def serialize_for_log(value: Any) -> str:
    """
    Sanitize and JSON-encode a body for a log line. Never raises.

    Lists are not walked by the sanitizer, so a self-referencing list (or a
    value json cannot encode) still fails here; the whole line is then
    replaced by UNSERIALIZABLE_BODY.
    """
    try:
        return json.dumps(sanitize_body(value))
    except Exception:
        return UNSERIALIZABLE_BODY
