"""Value conversion helpers."""

from __future__ import annotations

import json
from typing import Any


def to_string(value: Any) -> str:
    """Convert a scalar (or JSON-able container) to its string form.

    Used for form-urlencoded values.

    Examples:
        >>> to_string(1)
        '1'
        >>> to_string(3.14)
        '3.14'
        >>> to_string(True)
        'true'
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)
