"""Fast JSON encoding and decoding for transport payloads."""

from typing import Any
import json

import msgspec
import orjson


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def _default(obj: Any) -> Any:
    """Fallback encoder for values orjson does not know natively."""
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if hasattr(obj, "value") and hasattr(obj, "name"):  # Enum-like
        return obj.value
    return str(obj)


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using fastest available library.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent, sort_keys)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)
    sort_keys = kwargs.get("sort_keys", False)

    if indent == 0:
        option = orjson.OPT_SORT_KEYS if sort_keys else 0
        try:
            return orjson.dumps(obj, default=_default, option=option).decode("utf-8")
        except (TypeError, ValueError, orjson.JSONEncodeError):
            # Integers outside 64-bit range, non-string keys
            pass

        if not sort_keys:
            try:
                return msgspec.json.encode(obj, enc_hook=_default).decode("utf-8")
            except (TypeError, ValueError):
                pass

    return json.dumps(obj, indent=indent if indent > 0 else None, sort_keys=sort_keys, default=_default)


def safe_json_loads(data: str | bytes, max_depth: int = 20) -> Any:
    """
    Decode a JSON document sent by a client.

    Args:
        data: JSON text or bytes
        max_depth: Maximum allowed nesting depth

    Returns:
        Decoded value

    Raises:
        JSONParseError: If the payload is malformed or too deeply nested
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        result = msgspec.json.decode(data)
    except msgspec.DecodeError as e:
        raise JSONParseError(f"Invalid JSON: {e}", e)

    validate_json_depth(result, max_depth)
    return result


def validate_json_depth(obj: Any, max_depth: int = 20, current_depth: int = 0) -> None:
    """
    Validate JSON nesting depth to prevent stack overflow.

    Args:
        obj: Object to validate
        max_depth: Maximum allowed nesting depth
        current_depth: Current depth (internal)

    Raises:
        JSONParseError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise JSONParseError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    if isinstance(obj, dict):
        for value in obj.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            validate_json_depth(item, max_depth, current_depth + 1)
