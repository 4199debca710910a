"""
Core exception types raised by the event/actor model.

Provides typed exceptions for model-level failures:
- DuplicateActor when an identity is registered twice.
- UnknownActor when an actor id was never registered.
- StoreInvariantError when a recovered store violates the model invariants.
- MarkupError when a string cannot be written into the rendered XML.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Artifact read/write and embedded-state failures live in timechart.io.errors.

Examples:
    >>> from timechart.core.errors import UnknownActor
    >>> try:
    ...     raise UnknownActor("Unknown actor id: 'ghost'")
    ... except LookupError as e:
    ...     msg = str(e)
    >>> "ghost" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "TimelineError",
    "DuplicateActor",
    "UnknownActor",
    "StoreInvariantError",
    "MarkupError",
]


class TimelineError(Exception):
    """Base class for event/actor model failures."""


class DuplicateActor(TimelineError, ValueError):
    """An actor with the same identity is already registered."""


class UnknownActor(TimelineError, LookupError):
    """The actor id was never registered with the store."""


class StoreInvariantError(TimelineError, ValueError):
    """Store contents violate identity or ordering invariants (e.g., mismatched actor/event keys)."""


class MarkupError(TimelineError, ValueError):
    """A string holds characters (or an attribute name) that XML cannot carry."""
