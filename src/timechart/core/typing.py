"""
Lightweight typing aliases used across the event model and the artifact codec.

Provides minimal NewTypes and aliases to improve readability and static checks.
This module contains no runtime logic and is zero-IO.

Examples:
    >>> from timechart.core.typing import ActorId
    >>> def lane_name(actor: ActorId) -> str:
    ...     return f"lane:{actor}"
    >>> lane_name(ActorId("kernel"))
    'lane:kernel'
"""

from __future__ import annotations

from typing import Any, NewType

__all__ = [
    "ActorId",
    "JsonDict",
]

# Actor identity doubles as its id.
ActorId = NewType("ActorId", str)

# Convenient JSON-like mapping alias. Kept intentionally broad for serde boundaries.
JsonDict = dict[str, Any]
