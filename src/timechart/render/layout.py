"""
Geometry and layout engine: maps an EventStore onto pixel coordinates.

Overview
- Time bounds: first_event_time = min start (clamped to <= 0); last_event_time = max
  determinate end (open-ended spans do not extend it).
- Scale: pixel(t) = t / us_per_pixel, unclamped and possibly negative.
- Box: width = pixel(last - first); height = pixels_per_actor * actors with events.
- Lanes: actors with at least one event, ordered by their first event's start (stable
  over lexicographic actor order), stacked top to bottom.
- Grid: majors every us_per_line (labeled), `sublines` subdivisions between them;
  bounds rounded down/up to a major boundary so the grid covers every event.
- Grid size is capped at MAX_GRID_LINES (+1 closing major): sublines are dropped
  first, then majors are spaced at the smallest multiple of us_per_line that fits.
- Heading and canvas sizes follow the margins in RenderOptions.

Coordinates
- Lane, shape, grid and label coordinates are relative to the timeline group, whose
  origin is translated to (origin_x, heading_height) on the canvas.
- Heading coordinates are absolute canvas coordinates.

Notes
- compute_layout is pure and deterministic: the same (options, store) pair always
  yields the same TimelineLayout.
- The only failure is UnknownActor propagated from the store while iterating.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from timechart.core.events import Actor, Event, EventStore, Instant, Span

from .options import RenderOptions

__all__ = [
    "LINE_HEIGHT",
    "GRID_LABEL_Y",
    "MAX_GRID_LINES",
    "GridLine",
    "SpanRect",
    "InstantMarker",
    "Shape",
    "ActorLabel",
    "Lane",
    "HeadingLine",
    "TimelineLayout",
    "compute_layout",
    "time_bounds",
    "format_grid_time",
    "merge_fields",
]

# Approximate font height, used as the heading line height.
LINE_HEIGHT: float = 15.0

# Lane labels sit on a baseline at roughly 80% of the lane height.
_LABEL_BASELINE: float = 0.8

# Grid labels are drawn just above the timeline box.
GRID_LABEL_Y: float = -5.0

_US_PER_SECOND = 1_000_000

# Upper bound on grid lines per chart; wider ranges thin the grid instead.
MAX_GRID_LINES = 10_000


@dataclass(frozen=True)
class GridLine:
    time: int
    x: float
    height: float
    major: bool
    label: str | None = None


@dataclass(frozen=True)
class SpanRect:
    event: Event
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class InstantMarker:
    """Diamond marker centred on an instant, `half` pixels from centre to each tip."""

    event: Event
    cx: float
    cy: float
    half: float

    def points(self) -> list[tuple[float, float]]:
        return [
            (self.cx, self.cy - self.half),
            (self.cx + self.half, self.cy),
            (self.cx, self.cy + self.half),
            (self.cx - self.half, self.cy),
        ]


Shape = SpanRect | InstantMarker


@dataclass(frozen=True)
class ActorLabel:
    text: str
    x: float
    y: float
    anchor: Literal["left", "right"]


@dataclass(frozen=True)
class Lane:
    actor: Actor
    y: float
    shapes: tuple[Shape, ...]
    label: ActorLabel


@dataclass(frozen=True)
class HeadingLine:
    text: str
    x: float
    y: float


@dataclass(frozen=True)
class TimelineLayout:
    """
    Pixel-space description of one chart.

    Attributes:
        first_event_time (int): Left time bound (<= 0).
        last_event_time (int): Right time bound.
        box_width (float): Width of the timeline box in pixels.
        box_height (float): Height of the timeline box in pixels.
        heading_height (float): Vertical offset of the timeline box.
        canvas_width (float): Overall document width.
        canvas_height (float): Overall document height.
        origin_x (float): Horizontal translation of the timeline group.
        heading (tuple[HeadingLine, ...]): Heading text lines.
        grid (tuple[GridLine, ...]): Major and minor grid lines, left to right.
        lanes (tuple[Lane, ...]): One lane per actor with events, top to bottom.
    """

    first_event_time: int
    last_event_time: int
    box_width: float
    box_height: float
    heading_height: float
    canvas_width: float
    canvas_height: float
    origin_x: float
    heading: tuple[HeadingLine, ...]
    grid: tuple[GridLine, ...]
    lanes: tuple[Lane, ...]


def format_grid_time(us: int) -> str:
    """
    Format microseconds as "<seconds>.<microseconds>" for grid labels.

    Examples:
        >>> format_grid_time(2_000_000)
        '2.000000'
        >>> format_grid_time(-5_000_000)
        '-5.000000'
    """
    sign = "-" if us < 0 else ""
    seconds, micros = divmod(abs(us), _US_PER_SECOND)
    return f"{sign}{seconds}.{micros:06d}"


def merge_fields(attrs: Mapping[str, str], fields: Mapping[str, str]) -> dict[str, str]:
    """
    Merge event presentation fields onto a shape's own attributes.

    A field whose key already has a value is prepended to it with a space separator,
    so contributions accumulate instead of overwriting.

    Examples:
        >>> merge_fields({"class": "span"}, {"class": "late", "fill": "#AB7C94"})
        {'class': 'late span', 'fill': '#AB7C94'}
    """
    out = dict(attrs)
    for key, value in fields.items():
        current = out.get(key)
        out[key] = f"{value} {current}" if current else value
    return out


def time_bounds(store: EventStore) -> tuple[int, int]:
    """
    Compute (first_event_time, last_event_time) over all events.

    Returns:
        tuple[int, int]: Minimum start clamped to <= 0, and maximum determinate end
        (0 when no event has an end).
    """
    starts = [e.start_time() for e in store.all_events()]
    first = min(starts, default=0)
    if first > 0:
        first = 0
    ends = [end for e in store.all_events() if (end := e.end_time()) is not None]
    last = max(ends, default=0)
    return first, last


def _grid(options: RenderOptions, first: int, last: int, px, box_height: float) -> list[GridLine]:
    line = options.us_per_line
    grid_start = (first // line) * line
    grid_end = -((-last) // line) * line

    intervals = (grid_end - grid_start) // line
    sublines = options.sublines
    if intervals * sublines > MAX_GRID_LINES:
        sublines = 1
    step = line * max(1, -(-intervals // MAX_GRID_LINES))

    lines: list[GridLine] = []
    major = grid_start
    while True:
        lines.append(GridLine(major, px(major), box_height, True, format_grid_time(major)))
        if major >= grid_end:
            break
        for i in range(1, sublines):
            t = major + (i * step) // sublines
            lines.append(GridLine(t, px(t), box_height, False))
        major += step
    return lines


def _shape(options: RenderOptions, event: Event, lane_y: float, right_edge: float, px) -> Shape:
    kind = event.kind
    if isinstance(kind, Span):
        if kind.duration is not None:
            width = px(kind.duration)
        else:
            width = right_edge - px(kind.start)
        return SpanRect(
            event=event,
            x=px(kind.start),
            y=lane_y + options.actor_margin,
            width=width,
            height=options.pixels_per_actor - 2.0 * options.actor_margin,
        )
    if isinstance(kind, Instant):
        return InstantMarker(
            event=event,
            cx=px(kind.at),
            cy=lane_y + options.pixels_per_actor / 2.0,
            half=max(options.pixels_per_actor / 2.0 - options.actor_margin, 0.0),
        )
    raise TypeError(f"unsupported event kind {kind!r}")


def compute_layout(options: RenderOptions, store: EventStore) -> TimelineLayout:
    """
    Turn the event model into absolute pixel geometry.

    Args:
        options (RenderOptions): Scale, lane geometry, margins and heading.
        store (EventStore): Actors and events to lay out.

    Returns:
        TimelineLayout: Canvas size, heading, grid and lanes.

    Raises:
        UnknownActor: Propagated from the store; no independent validation is done.
    """

    def px(us: int) -> float:
        return us / options.us_per_pixel

    first, last = time_bounds(store)
    first_px = px(first)

    lanes_in: list[tuple[str, list[Event]]] = []
    for actor_id in store.actors():
        events = list(store.events_for(actor_id))
        if events:
            lanes_in.append((actor_id, events))
    lanes_in.sort(key=lambda item: item[1][0].start_time())

    heading_text = options.heading.splitlines()
    heading_height = options.top_margin + len(heading_text) * LINE_HEIGHT + 2.0 * LINE_HEIGHT

    box_width = px(last - first)
    box_height = len(lanes_in) * options.pixels_per_actor
    right_edge = first_px + box_width
    midpoint = first_px + box_width / 2.0

    lanes: list[Lane] = []
    y = 0.0
    for actor_id, events in lanes_in:
        shapes = tuple(_shape(options, e, y, right_edge, px) for e in events)

        start_px = px(events[0].start_time())
        if start_px < midpoint:
            anchor: Literal["left", "right"] = "left"
            label_x = start_px + options.actor_name_padding
        else:
            anchor = "right"
            label_x = start_px - options.actor_name_padding
        label = ActorLabel(
            text=actor_id,
            x=label_x,
            y=y + options.pixels_per_actor * _LABEL_BASELINE,
            anchor=anchor,
        )
        lanes.append(Lane(store.get_actor(actor_id), y, shapes, label))
        y += options.pixels_per_actor

    heading = tuple(
        HeadingLine(text, options.side_margin, options.top_margin + (i + 1) * LINE_HEIGHT)
        for i, text in enumerate(heading_text)
    )

    return TimelineLayout(
        first_event_time=first,
        last_event_time=last,
        box_width=box_width,
        box_height=box_height,
        heading_height=heading_height,
        canvas_width=box_width + 2.0 * options.side_margin,
        canvas_height=box_height + heading_height + options.top_margin,
        origin_x=options.side_margin - first_px,
        heading=heading,
        grid=tuple(_grid(options, first, last, px, box_height)),
        lanes=tuple(lanes),
    )
