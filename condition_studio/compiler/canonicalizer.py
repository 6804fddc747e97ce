"""
JSON rendering of condition documents.

Two forms are produced:
- Display JSON: two-space indentation, keys in the order the compiler built
  them. This is what the hosting UI shows and what goes to encryption.
- Canonical JSON: sorted keys, no whitespace. Used for fingerprints and for
  comparing two compilations byte for byte.
"""

import hashlib
import json
from typing import Any

from pydantic import BaseModel


def _as_document(obj: Any) -> Any:
    """Turn an AST model into its plain document; other objects pass through."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    return obj


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON object.

    This function ensures:
    - All dictionary keys are sorted alphabetically
    - Nested structures are recursively canonicalized
    - List order is preserved (operand order is meaningful)

    Args:
        obj: Python object (dict, list, primitive or AST model) to canonicalize

    Returns:
        Canonicalized version with sorted keys at all levels

    Example:
        >>> canonicalize_json({"z": 1, "a": {"c": 2, "b": 3}})
        {'a': {'b': 3, 'c': 2}, 'z': 1}
    """
    obj = _as_document(obj)

    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}

    elif isinstance(obj, list):
        return [canonicalize_json(item) for item in obj]

    else:
        return obj


def to_condition_json(condition: Any) -> str:
    """
    Render a condition for display.

    Args:
        condition: AST model, plain document, or None for "no condition"

    Returns:
        JSON with two-space indentation and construction key order, or an
        empty string when there is no condition

    Example:
        >>> print(to_condition_json({"conditionType": "time", "chain": 1}))
        {
          "conditionType": "time",
          "chain": 1
        }
    """
    if condition is None:
        return ""
    return json.dumps(_as_document(condition), indent=2, ensure_ascii=False)


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert an object to a canonical JSON string.

    Args:
        obj: Python object or AST model to serialize

    Returns:
        Canonical JSON string with sorted keys and no extra whitespace

    Example:
        >>> to_canonical_json_string({"method": "blocktime", "chain": 1})
        '{"chain":1,"method":"blocktime"}'
    """
    canonical = canonicalize_json(obj)

    # separators=(',', ':') removes spaces after commas and colons
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def condition_fingerprint(obj: Any) -> str:
    """SHA-256 hex digest of the canonical JSON string."""
    return hashlib.sha256(to_canonical_json_string(obj).encode("utf-8")).hexdigest()
