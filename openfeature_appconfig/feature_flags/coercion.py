"""
Value coercion from decoded JSON to the four flag output types.

Flag authors store values as native JSON types or as strings (object values
are often stored as JSON text). Every function here is permissive: an
unrecognized input yields the type's zero value and nothing is ever raised.
"""

from __future__ import annotations

import json
from typing import Any

from .models import FlagType

_TRUE_STRINGS = ("true", "1")


def _is_number(value: Any) -> bool:
    # bool is a subclass of int but is not a flag number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in _TRUE_STRINGS
    if _is_number(value):
        return value != 0
    return False


def coerce_string(value: Any) -> str:
    """
    Stringify a value.

    JSON spellings are used where Python's str() differs from JSON:
    None -> "", True -> "true", {"a": 1} -> '{"a":1}'.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        try:
            return json.dumps(value, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def coerce_number(value: Any) -> int | float:
    """
    Convert to int or float.

    Strings with a decimal point parse as float, other strings as int.
    """
    if _is_number(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return float(text) if "." in text else int(text)
        except ValueError:
            return 0
    return 0


def coerce_object(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


_COERCERS = {
    FlagType.BOOLEAN: coerce_boolean,
    FlagType.STRING: coerce_string,
    FlagType.NUMBER: coerce_number,
    FlagType.OBJECT: coerce_object,
}


def coerce(value: Any, flag_type: FlagType) -> Any:
    """Coerce a value to the requested flag type."""
    return _COERCERS[flag_type](value)
