"""
Core package aggregator for timechart contracts (event model, errors, serde, typing).

## Contracts (single source of truth)
- Events — Actor, Event (Span | Instant) and EventStore with ordering/identity invariants.
- Errors — DuplicateActor, UnknownActor, StoreInvariantError, MarkupError.
- Grammar — XML Char and attribute-name checks for strings written into the SVG.
- Serde — canonical JSON used for the embedded chart state.
- Typing — ActorId, JsonDict aliases.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file or network IO.
- Times are signed integer microseconds; durations are non-negative.

## Downstream usage
- timechart.render — consumes EventStore to compute lane geometry and the SVG scene graph.
- timechart.io — serializes (RenderOptions, EventStore) into the artifact and validates it back.
- timechart.cli — registers actors and adds events between load and save.
"""

from __future__ import annotations

from .errors import DuplicateActor, MarkupError, StoreInvariantError, TimelineError, UnknownActor
from .events import Actor, Event, EventKind, EventStore, Instant, Span

__all__ = [
    "Actor",
    "Event",
    "EventKind",
    "EventStore",
    "Instant",
    "Span",
    "TimelineError",
    "DuplicateActor",
    "UnknownActor",
    "StoreInvariantError",
    "MarkupError",
]
