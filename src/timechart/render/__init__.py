"""
timechart.render — Geometry, chrome and SVG scene graph for a chart.

## Responsibilities
- RenderOptions: scale, lane geometry, margins and heading, plus env/TOML loaders.
- layout: deterministic mapping from EventStore to pixel geometry (TimelineLayout).
- style: the static stylesheet and the cursor time indicator script.
- svg: ElementTree scene graph assembly and serialization.

## Import DAG discipline
- Depends on stdlib, pydantic and timechart.core only.
- Performs no file IO; persistence and the embedded state live in timechart.io.
"""

from __future__ import annotations

from .layout import TimelineLayout, compute_layout
from .options import RenderOptions
from .svg import build_document, to_bytes

__all__ = [
    "RenderOptions",
    "TimelineLayout",
    "compute_layout",
    "build_document",
    "to_bytes",
]
