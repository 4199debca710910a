"""
timechart.io — Artifact persistence for rendered charts.

## Responsibilities
- Embed (RenderOptions, EventStore) inside the rendered SVG and recover it later; the
  artifact is the only persisted representation (no sidecar files).
- Guarantee atomic replacement of the target artifact (tmp -> fsync -> os.replace).
- Offer polars views of an artifact's events for inspection.

## Public API
- save / load / render / loads — artifact round-trip (see artifact).
- events_frame / actor_summary — tabular views (see frame).
- Artifact* errors (see errors).

## Import DAG discipline
- Depends on stdlib, pydantic, polars, timechart.core and timechart.render.
- MUST NOT import timechart.cli.

## Examples
```python
from timechart.core import Actor, Event, EventStore, Span
from timechart.io import load, save
from timechart.render import RenderOptions

store = EventStore()
store.register_actor(Actor(identity="kernel"))
store.add_event("kernel", Event(kind=Span(start=0, duration=1_200_000)))
save("boot.svg", RenderOptions(heading="boot"), store)  # doctest: +SKIP
options, store = load("boot.svg")  # doctest: +SKIP
```
"""

from __future__ import annotations

from .artifact import load, loads, render, save
from .frame import actor_summary, events_frame

__all__ = [
    "save",
    "load",
    "loads",
    "render",
    "events_frame",
    "actor_summary",
]
