"""
timechart — Self-describing SVG timeline charts.

A chart is rendered from actors and their events (spans and instants) and embeds its
own state, so the same SVG can be reloaded, extended and re-rendered with no separate
database.

## Packages
- timechart.core — event/actor model, errors, canonical JSON.
- timechart.render — RenderOptions, layout engine, stylesheet, SVG scene graph.
- timechart.io — artifact codec (embed/recover state), atomic saves, polars views.
- timechart.cli — `timechart` command (create, add-actor, add-event, render, show).
"""

from __future__ import annotations

__version__ = "0.1.0"
