"""
Best-effort parsing of incomplete JSON from LLM token streams.

A streamed report is almost always cut off somewhere: mid-string, mid-key,
mid-array. ``parse_partial_json`` closes whatever is still open and tries a
strict parse of the result. It is recomputed from the whole buffer on every
call and carries no state between calls.

Handled repairs:
- Unterminated string -> closing quote appended
- Trailing comma -> dropped
- Trailing colon (``"key":``) -> ``null`` value appended
- Open objects/arrays -> closed in LIFO order

Anything else (missing commas between siblings, bad escapes, ...) is not
repaired and the attempt fails; the caller waits for more text. A closing
delimiter that does not match the innermost open structure is ignored by
the bracket tracking.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List

logger = logging.getLogger(__name__)

_CLOSERS = {"{": "}", "[": "]"}


class _RepairFailed:
    """Sentinel type for a failed repair (``None`` is a valid JSON value)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "REPAIR_FAILED"


REPAIR_FAILED = _RepairFailed()


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def strict_loads(text: str) -> Any:
    """Standard-conforming ``json.loads``. Raises ``ValueError`` on any problem."""
    return json.loads(text, parse_constant=_reject_constant)


def close_partial_json(text: str) -> str:
    """Return ``text`` with open strings and structures closed."""
    stack: List[str] = []
    in_string = False
    escaped = False

    for char in text:
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]"):
            if stack and stack[-1] == char:
                stack.pop()

    fixed = text
    if in_string:
        fixed += '"'

    fixed = fixed.rstrip()

    if fixed.endswith(","):
        fixed = fixed[:-1]
    if fixed.endswith(":"):
        fixed += " null"

    while stack:
        fixed += stack.pop()

    return fixed


def parse_partial_json(text: str) -> Any:
    """
    Parse a possibly truncated JSON document.

    Returns:
        The decoded value, or ``REPAIR_FAILED``. Never raises.
    """
    if not isinstance(text, str) or not text.strip():
        return REPAIR_FAILED

    try:
        return strict_loads(close_partial_json(text))
    except (ValueError, RecursionError):
        return REPAIR_FAILED


def is_repair_failure(value: Any) -> bool:
    return value is REPAIR_FAILED


# Short alias used by the accumulator
repair = parse_partial_json
