"""
Schemas & Wire Format
File: canonical.py

Purpose: Deterministic serialization for stored and transported proofs.
Two encodings of the same proof must be byte-identical so proof cache keys
are stable across processes and releases.

Canonical form:
- object keys sorted, no whitespace, ASCII only
- hashes and other byte strings as 0x-prefixed lowercase hex
- integers exact; floats have no canonical form and are rejected
- None values dropped from objects
- frozen proof dataclasses and Pydantic models serialize by field name

CRITICAL: All outputs from this module MUST be deterministic across runs.
"""

import dataclasses
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _canonicalize_mapping(mapping: dict, path: str) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, item in mapping.items():
        if not isinstance(key, str):
            raise CanonicalizationException(
                message=f"Object keys must be strings, got {type(key).__name__}",
                details={"path": path, "key": repr(key)},
            )
        if item is None:
            continue
        out[key] = canonicalize_value(item, _join(path, key))
    return out


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Recursively canonicalize a value for deterministic JSON serialization.

    Args:
        value: Any Python value to canonicalize.
        path: Current path for error reporting.

    Returns:
        A JSON-serializable canonical representation.

    Raises:
        CanonicalizationException: If the value has no canonical form.
            details["path"] names the offending location.
    """
    if isinstance(value, Enum):
        return canonicalize_value(value.value, path)

    # bool before int: bool is an int subclass
    if value is None or isinstance(value, (bool, str)):
        return value

    if isinstance(value, int):
        return int(value)

    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()

    if isinstance(value, float):
        raise CanonicalizationException(
            message=f"Floats have no canonical form: {value!r}",
            details={"path": path, "value": repr(value)},
        )

    if isinstance(value, BaseModel):
        dumped = value.model_dump(mode="python", by_alias=True, exclude_none=True)
        return _canonicalize_mapping(dumped, path)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return _canonicalize_mapping(fields, path)

    if isinstance(value, dict):
        return _canonicalize_mapping(value, path)

    if isinstance(value, (list, tuple)):
        return [canonicalize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Example:
        >>> dumps_canonical({"b": 2, "a": b"\\x01"})
        '{"a":"0x01","b":2}'
    """
    return json.dumps(
        canonicalize_value(obj),
        sort_keys=True,
        separators=CANONICAL_JSON_SEPARATORS,
        ensure_ascii=True,
    )


def canonical_bytes(obj: Any) -> bytes:
    """UTF-8 bytes of the canonical JSON form; the input to every canonical hash."""
    return dumps_canonical(obj).encode("utf-8")


def loads_canonical(json_str: str | bytes) -> Any:
    """Parse a canonical JSON string."""
    return json.loads(json_str)


def canonical_equals(obj1: Any, obj2: Any) -> bool:
    """Check if two objects have identical canonical JSON representations."""
    try:
        return dumps_canonical(obj1) == dumps_canonical(obj2)
    except CanonicalizationException:
        return False
