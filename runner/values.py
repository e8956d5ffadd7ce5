"""Display formatting for values produced by snippets."""
from __future__ import annotations

import json
from typing import Any

MAX_INLINE_ITEMS = 10
PREVIEW_ITEMS = 5
MAX_OBJECT_CHARS = 500

_BRACKETS = {
    list: ("[", "]"),
    tuple: ("(", ")"),
    set: ("{", "}"),
    frozenset: ("{", "}"),
}


def format_value(value: Any) -> str:
    """Format any value for display. Never raises; unserialisable values become ``[Object]``."""
    try:
        return _format(value)
    except Exception:
        return "[Object]"


def _format(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float, complex)):
        return str(value)
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    if isinstance(value, (list, tuple, set, frozenset)):
        return _format_sequence(value)
    if callable(value):
        name = getattr(value, "__name__", "") or ""
        if not name or name == "<lambda>":
            name = "anonymous"
        return f"[Function: {name}]"
    if isinstance(value, dict) or hasattr(value, "__dict__"):
        data = value if isinstance(value, dict) else vars(value)
        text = json.dumps(data, indent=2, default=_json_default, ensure_ascii=False)
        if len(text) > MAX_OBJECT_CHARS:
            return text[:MAX_OBJECT_CHARS] + "..."
        return text
    return str(value)


def _format_sequence(value) -> str:
    open_, close = next(b for t, b in _BRACKETS.items() if isinstance(value, t))
    items = list(value)
    if len(items) <= MAX_INLINE_ITEMS:
        return open_ + ", ".join(_format(v) for v in items) + close
    preview = ", ".join(_format(v) for v in items[:PREVIEW_ITEMS])
    return f"{type(value).__name__}({len(items)}) {open_}{preview}, ...{close}"


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if hasattr(obj, "__dict__") and not callable(obj):
        return vars(obj)
    return _format(obj)
