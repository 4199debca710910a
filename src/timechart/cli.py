from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import polars as pl
from pydantic import ValidationError

from .core.errors import TimelineError
from .core.events import Actor, Event, EventKind, EventStore, Instant, Span
from .io.artifact import load, save
from .io.errors import ArtifactError
from .io.frame import actor_summary, events_frame
from .render.options import RenderOptions

PathLike = str | os.PathLike[str]


def create(
    path: PathLike,
    heading: str | None = None,
    *,
    options: RenderOptions | None = None,
) -> str:
    """Render an empty chart to `path`, optionally overriding the heading."""
    opts = options or RenderOptions()
    if heading is not None:
        opts = opts.with_overrides(heading=heading)
    return save(path, opts, EventStore())


def add_actor(path: PathLike, identity: str, tooltip: str | None = None) -> str:
    """Load the chart at `path`, register `identity` and re-render in place."""
    options, store = load(path)
    store.register_actor(Actor(identity=identity, tooltip=tooltip))
    return save(path, options, store)


def event_kind(start: int, duration: int | None, endless: bool) -> EventKind:
    """A bounded span if a duration is given, an open span if endless, else an instant."""
    if duration is not None:
        return Span(start=start, duration=duration)
    if endless:
        return Span(start=start, duration=None)
    return Instant(at=start)


def add_event(
    path: PathLike,
    actor: str,
    start: int,
    duration: int | None = None,
    *,
    endless: bool = False,
    color: str | None = None,
    value: str = "",
    tooltip: str | None = None,
) -> Event:
    """Load the chart at `path`, add one event to `actor` and re-render in place."""
    options, store = load(path)
    fields = {"fill": color} if color else {}
    event = Event(
        kind=event_kind(start, duration, endless), fields=fields, value=value, tooltip=tooltip
    )
    stored = store.add_event(actor, event)
    save(path, options, store)
    return stored


def rerender(path: PathLike, out: PathLike | None = None, **overrides: object) -> str:
    """Re-render an existing chart, persisting any explicit option overrides."""
    options, store = load(path)
    options = options.with_overrides(**overrides)
    return save(out if out is not None else path, options, store)


def _print_events(path: Path, n: int) -> None:
    _options, store = load(path)
    events = events_frame(store)
    with pl.Config(tbl_rows=n):
        print(actor_summary(events))
        print(events.head(n))


def _add_option_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--heading", type=str, default=None, help="Heading text (newlines allowed).")
    p.add_argument("--us-per-pixel", type=int, default=None, help="Microseconds per pixel.")
    p.add_argument("--us-per-line", type=int, default=None, help="Microseconds between grid lines.")
    p.add_argument("--sublines", type=int, default=None, help="Subdivisions per grid interval.")
    p.add_argument("--pixels-per-actor", type=float, default=None, help="Lane height in pixels.")


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    return {
        "heading": args.heading,
        "us_per_pixel": args.us_per_pixel,
        "us_per_line": args.us_per_line,
        "sublines": args.sublines,
        "pixels_per_actor": args.pixels_per_actor,
    }


def _cmd_create(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="create", description="Create an empty timeline chart.")
    p.add_argument("path", type=Path, help="Artifact path (SVG).")
    p.add_argument("--config", type=str, default=None, help="TOML file with [render] options.")
    _add_option_flags(p)
    args = p.parse_args(argv)

    options = RenderOptions.load(args.config).with_overrides(**_overrides(args))
    out = create(args.path, options=options)
    print(f"[INFO] Created {out}")
    return 0


def _cmd_add_actor(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="add-actor", description="Register an actor in a chart.")
    p.add_argument("path", type=Path, help="Artifact path (SVG).")
    p.add_argument("identity", type=str, help="Unique actor name.")
    p.add_argument("--tooltip", type=str, default=None, help="Hover text for the actor.")
    args = p.parse_args(argv)

    add_actor(args.path, args.identity, tooltip=args.tooltip)
    print(f"[INFO] Added actor {args.identity!r} to {args.path}")
    return 0


def _cmd_add_event(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="add-event", description="Add an event to an actor.")
    p.add_argument("path", type=Path, help="Artifact path (SVG).")
    p.add_argument("actor", type=str, help="Registered actor name.")
    p.add_argument("start", type=int, help="Start time in microseconds (may be negative).")
    p.add_argument("duration", type=int, nargs="?", default=None, help="Duration in microseconds.")
    p.add_argument("-e", "--endless", action="store_true", help="Open span to the right edge.")
    p.add_argument("-c", "--color", type=str, default=None, help="Fill color for the event.")
    p.add_argument("--value", type=str, default="", help="Free-text label stored with the event.")
    p.add_argument("--tooltip", type=str, default=None, help="Hover text for the event.")
    args = p.parse_args(argv)

    stored = add_event(
        args.path,
        args.actor,
        args.start,
        args.duration,
        endless=args.endless,
        color=args.color,
        value=args.value,
        tooltip=args.tooltip,
    )
    print(f"[INFO] Added {stored.kind.kind} event #{stored.event_id} to {args.actor!r}")
    return 0


def _cmd_render(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="render", description="Re-render an existing chart.")
    p.add_argument("path", type=Path, help="Artifact path (SVG).")
    p.add_argument("--out", type=Path, default=None, help="Write to this path instead.")
    _add_option_flags(p)
    args = p.parse_args(argv)

    out = rerender(args.path, args.out, **_overrides(args))
    print(f"[INFO] Rendered {out}")
    return 0


def _cmd_show(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="show", description="Show the events stored in a chart.")
    p.add_argument("path", type=Path, help="Artifact path (SVG).")
    p.add_argument("--n", type=int, default=20, help="Rows to display.")
    args = p.parse_args(argv)

    _print_events(args.path, n=args.n)
    return 0


_COMMANDS = {
    "create": _cmd_create,
    "add-actor": _cmd_add_actor,
    "add-event": _cmd_add_event,
    "render": _cmd_render,
    "show": _cmd_show,
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="timechart", description="Self-describing SVG timeline charts."
    )
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in _COMMANDS:
        sub.add_parser(name)
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    handler = _COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    else:
        try:
            code = handler(rest)
        except (TimelineError, ArtifactError, ValidationError) as e:
            print(f"[ERROR] {e}", file=sys.stderr)
            code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
