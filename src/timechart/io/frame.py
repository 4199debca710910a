"""
Polars views over an EventStore.

Provides a flat, one-row-per-event table and a per-actor summary, used by the `show`
command to inspect what an artifact carries without opening it in a viewer.

Notes
- Read-only: never mutates the store.
- Rows follow lexicographic actor order, then each actor's (start, end) event order.
"""

from __future__ import annotations

from typing import Any

import polars as pl

from timechart.core.events import EventStore, Span

__all__ = [
    "EVENTS_SCHEMA",
    "events_frame",
    "actor_summary",
]

EVENTS_SCHEMA: dict[str, Any] = {
    "actor": pl.Utf8,
    "event_id": pl.Int64,
    "kind": pl.Utf8,
    "start": pl.Int64,
    "end": pl.Int64,
    "duration": pl.Int64,
    "value": pl.Utf8,
    "fill": pl.Utf8,
}


def events_frame(store: EventStore) -> pl.DataFrame:
    """
    Build a one-row-per-event DataFrame.

    Args:
        store (EventStore): Event model to flatten.

    Returns:
        pl.DataFrame: Columns per EVENTS_SCHEMA; ``end`` is null for open spans and
        ``duration`` is null for instants and open spans.
    """
    rows: list[dict[str, Any]] = []
    for actor_id in store.actors():
        for e in store.events_for(actor_id):
            rows.append(
                {
                    "actor": actor_id,
                    "event_id": e.event_id,
                    "kind": e.kind.kind,
                    "start": e.start_time(),
                    "end": e.end_time(),
                    "duration": e.kind.duration if isinstance(e.kind, Span) else None,
                    "value": e.value,
                    "fill": e.fields.get("fill"),
                }
            )
    return pl.DataFrame(rows, schema=EVENTS_SCHEMA)


def actor_summary(events: pl.DataFrame) -> pl.DataFrame:
    """Per-actor event count and time extent, in first-event order (lane order)."""
    return (
        events.group_by("actor", maintain_order=True)
        .agg(
            pl.len().alias("events"),
            pl.col("start").min().alias("first_start"),
            pl.col("end").max().alias("last_end"),
        )
        .sort("first_start", maintain_order=True)
    )
