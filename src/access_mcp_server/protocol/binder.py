"""Typed extraction of tool arguments.

Every tool handler reads its ``arguments`` object through these helpers.
Each helper raises ArgumentError with a client-facing message on the first
invalid property; the plugin layer turns that into a failed tool outcome.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

Primitive = str | int | float | bool | None


class ArgumentError(ValueError):
    """Raised when a tool argument is missing or has the wrong type."""

    pass


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def require_string(arguments: Mapping[str, Any], name: str) -> str:
    """Get a required, non-blank string argument.

    Args:
        arguments: Tool arguments.
        name: Property name.

    Returns:
        The trimmed string value.

    Raises:
        ArgumentError: If the property is missing, not a string, or blank.
    """
    value = arguments.get(name)
    if _is_blank(value):
        raise ArgumentError(f"{name} is required")
    return value.strip()


def require_text(arguments: Mapping[str, Any], name: str) -> str:
    """Get a required, non-blank text payload exactly as sent.

    Unlike require_string the value is not trimmed, so indentation and
    trailing newlines in code or exported definitions survive.

    Raises:
        ArgumentError: If the property is missing, not a string, or blank.
    """
    value = arguments.get(name)
    if _is_blank(value):
        raise ArgumentError(f"{name} is required")
    return value


def require_string_alias(arguments: Mapping[str, Any], *names: str) -> str:
    """Get a required string argument that may be sent under several names.

    Names are tried in priority order; the first non-blank string wins.

    Args:
        arguments: Tool arguments.
        *names: Canonical name first, then accepted aliases.

    Returns:
        The trimmed string value.

    Raises:
        ArgumentError: If none of the names holds a non-blank string.
    """
    for name in names:
        value = arguments.get(name)
        if not _is_blank(value):
            return value.strip()
    raise ArgumentError(f"{names[0]} is required")


def optional_string(arguments: Mapping[str, Any], *names: str) -> str | None:
    """Get an optional string argument, trying aliases in order.

    Absent, blank, or non-string values are treated as not provided.

    Returns:
        The trimmed string value, or None.
    """
    for name in names:
        value = arguments.get(name)
        if not _is_blank(value):
            return value.strip()
    return None


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return None
    else:
        return None
    if INT32_MIN <= number <= INT32_MAX:
        return number
    return None


def optional_int(arguments: Mapping[str, Any], name: str) -> int | None:
    """Get an optional 32-bit integer argument.

    Accepts JSON integers, integral floats, and strings holding an integer.

    Args:
        arguments: Tool arguments.
        name: Property name.

    Returns:
        The integer, or None if absent or null.

    Raises:
        ArgumentError: If the value cannot be read as an integer.
    """
    value = arguments.get(name)
    if value is None:
        return None
    number = _coerce_int(value)
    if number is None:
        raise ArgumentError(f"{name} must be an integer")
    return number


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
        number = _coerce_int(text)
        if number is not None:
            return number != 0
    return None


def optional_bool(arguments: Mapping[str, Any], name: str) -> bool | None:
    """Get an optional boolean argument.

    Accepts JSON booleans, numbers (non-zero is true), and strings holding
    "true"/"false" or an integer.

    Returns:
        The boolean, or None if absent or null.

    Raises:
        ArgumentError: If the value cannot be read as a boolean.
    """
    value = arguments.get(name)
    if value is None:
        return None
    flag = _coerce_bool(value)
    if flag is None:
        raise ArgumentError(f"{name} must be a boolean")
    return flag


def bool_or_default(arguments: Mapping[str, Any], name: str, default: bool) -> bool:
    """Get a boolean argument, falling back to a default.

    Same coercions as optional_bool, but unreadable values never fail.
    """
    flag = _coerce_bool(arguments.get(name))
    return default if flag is None else flag


def require_string_array(arguments: Mapping[str, Any], name: str) -> list[str]:
    """Get a required array of distinct, non-blank strings.

    Blank entries are dropped and the rest trimmed. Duplicates are removed
    case-insensitively, keeping the first spelling and the original order.

    Args:
        arguments: Tool arguments.
        name: Property name.

    Returns:
        The cleaned list of strings.

    Raises:
        ArgumentError: If the value is not an array of strings or nothing
            remains after cleaning.
    """
    value = arguments.get(name)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ArgumentError(f"{name} must be an array of strings")

    seen: set[str] = set()
    result: list[str] = []
    for item in value:
        text = item.strip()
        if not text:
            continue
        key = text.casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(text)

    if not result:
        raise ArgumentError(f"{name} must contain at least one non-empty value")
    return result


def _is_primitive(value: Any) -> bool:
    if value is None or isinstance(value, str | bool | int | float):
        return True
    if isinstance(value, list):
        return all(_is_primitive(item) for item in value)
    return False


def require_primitive(arguments: Mapping[str, Any], name: str) -> Primitive | list[Any]:
    """Get a required primitive value (null, string, boolean, number) or array of them.

    Raises:
        ArgumentError: If the property is absent or holds an object.
    """
    if name not in arguments:
        raise ArgumentError(f"{name} is required")
    return optional_primitive(arguments, name)


def optional_primitive(arguments: Mapping[str, Any], name: str) -> Primitive | list[Any]:
    """Get an optional primitive value or array of primitives.

    Returns:
        The value as sent, or None if absent.

    Raises:
        ArgumentError: If the value is an object or holds one.
    """
    value = arguments.get(name)
    if not _is_primitive(value):
        raise ArgumentError(f"{name} must be a primitive value")
    return value


def optional_primitive_array(arguments: Mapping[str, Any], name: str) -> list[Any] | None:
    """Get an optional array whose elements are all primitives.

    Returns:
        The array, or None if absent or null.

    Raises:
        ArgumentError: If the value is not an array of primitives.
    """
    value = arguments.get(name)
    if value is None:
        return None
    if not isinstance(value, list) or not _is_primitive(value):
        raise ArgumentError(f"{name} must be an array of primitive values")
    return value
