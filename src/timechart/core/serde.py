"""
Canonical JSON serialization/deserialization utilities.

Provides a single canonical JSON policy so that the embedded chart state is
byte-stable across renders. This module is zero-IO and stdlib-only.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Re-rendering a reloaded artifact relies on this policy to reproduce the
      embedded payload exactly.
"""

from __future__ import annotations

import json
from typing import Any

__all__ = [
    "json_loads",
    "json_dumps_canonical",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Notes:
        This function assumes the input is JSON-serializable and does not perform
        coercion of unsupported types.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def json_loads(s: str) -> Any:
    """
    Deserialize a JSON string to Python objects using the stdlib json module.

    Args:
        s (str): JSON string to parse.

    Returns:
        Any: Decoded Python object (dict, list, str, int, float, bool, or None).
    """
    return json.loads(s)
