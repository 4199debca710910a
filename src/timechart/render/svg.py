"""
SVG scene graph emission.

Builds an ``xml.etree.ElementTree`` document from a TimelineLayout:

    <svg>
      <!-- embedded state -->        (optional, always first)
      <defs><style/></defs>          (static chrome, see render.style)
      <text class="heading"/>*       (one per heading line)
      <g transform="translate(...)"> (timeline box)
        <path/> <text class="label"/>   grid layer
        <g class="actor"> ... </g>      one per lane: shapes + one label
      </g>
      <rect id="indicator"/>        (cursor time indicator, drawn above the timeline)
      <text id="indicator-text"/>
      <script/>                     (moves the indicator, see render.style)
    </svg>

Notes
- Span events become ``rect.span``; instant events become ``polygon.instant`` diamonds.
- Event and actor tooltips become ``<title>`` children (native SVG hover text).
- Numbers are written in their shortest form (``20`` rather than ``20.0``) so output
  is stable across renders.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from timechart.core.events import EventStore

from .layout import (
    GRID_LABEL_Y,
    InstantMarker,
    Lane,
    SpanRect,
    TimelineLayout,
    compute_layout,
    merge_fields,
)
from .options import RenderOptions
from .style import indicator_script, style_element

__all__ = [
    "SVG_NS",
    "fmt_num",
    "build_document",
    "to_bytes",
]

SVG_NS = "http://www.w3.org/2000/svg"


def fmt_num(v: float) -> str:
    """
    Format a coordinate without a trailing ``.0``.

    Examples:
        >>> fmt_num(20.0), fmt_num(-0.0), fmt_num(0.5)
        ('20', '0', '0.5')
    """
    if isinstance(v, int):
        return str(v)
    if v.is_integer():
        return str(int(v))
    return repr(v)


def _add_title(parent: ET.Element, text: str | None) -> None:
    if text:
        ET.SubElement(parent, "title").text = text


def _grid_layer(group: ET.Element, layout: TimelineLayout) -> None:
    for line in layout.grid:
        x = fmt_num(line.x)
        if line.major:
            label = ET.SubElement(
                group, "text", {"class": "label", "x": x, "y": fmt_num(GRID_LABEL_Y)}
            )
            label.text = line.label
            attrs = {"d": f"M{x},0 l0,{fmt_num(line.height)} z"}
        else:
            attrs = {"d": f"M{x},0 l0,{fmt_num(line.height)} z", "class": "subline"}
        ET.SubElement(group, "path", attrs)


def _lane(group: ET.Element, lane: Lane) -> None:
    g = ET.SubElement(group, "g", {"class": "actor"})
    _add_title(g, lane.actor.tooltip)

    for shape in lane.shapes:
        if isinstance(shape, SpanRect):
            own = {
                "class": "span",
                "width": fmt_num(shape.width),
                "height": fmt_num(shape.height),
                "x": fmt_num(shape.x),
                "y": fmt_num(shape.y),
            }
            node = ET.SubElement(g, "rect", merge_fields(own, shape.event.fields))
        elif isinstance(shape, InstantMarker):
            points = " ".join(f"{fmt_num(px)},{fmt_num(py)}" for px, py in shape.points())
            own = {"class": "instant", "points": points}
            node = ET.SubElement(g, "polygon", merge_fields(own, shape.event.fields))
        else:
            raise TypeError(f"unsupported shape {shape!r}")
        _add_title(node, shape.event.tooltip)

    label = ET.SubElement(
        g,
        "text",
        {"class": lane.label.anchor, "x": fmt_num(lane.label.x), "y": fmt_num(lane.label.y)},
    )
    label.text = lane.label.text


def _indicator_layer(root: ET.Element, layout: TimelineLayout, options: RenderOptions) -> None:
    ET.SubElement(
        root,
        "rect",
        {
            "id": "indicator",
            "class": "indicator",
            "x": "0",
            "y": fmt_num(layout.heading_height),
            "width": "1",
            "height": fmt_num(layout.box_height),
        },
    )
    ET.SubElement(root, "text", {"id": "indicator-text", "class": "indicator"})
    script = ET.SubElement(root, "script", {"type": "text/javascript"})
    script.text = indicator_script(
        fmt_num(layout.heading_height), fmt_num(layout.origin_x), str(options.us_per_pixel)
    )


def build_document(
    options: RenderOptions, store: EventStore, *, state: str | None = None
) -> ET.Element:
    """
    Lay out the store and assemble the full SVG scene graph.

    Args:
        options (RenderOptions): Render configuration.
        store (EventStore): Event model to draw.
        state (str | None): Embedded-state payload placed in a comment as the first
            child of the root, ahead of every visual layer.

    Returns:
        xml.etree.ElementTree.Element: The ``<svg>`` root element.

    Raises:
        UnknownActor: Propagated from layout.
    """
    layout = compute_layout(options, store)

    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "version": "1.1",
            "width": fmt_num(layout.canvas_width),
            "height": fmt_num(layout.canvas_height),
        },
    )
    if state is not None:
        root.append(ET.Comment(state))
    root.append(style_element())

    for line in layout.heading:
        text = ET.SubElement(
            root, "text", {"class": "heading", "x": fmt_num(line.x), "y": fmt_num(line.y)}
        )
        text.text = line.text

    group = ET.SubElement(
        root,
        "g",
        {"transform": f"translate({fmt_num(layout.origin_x)}, {fmt_num(layout.heading_height)})"},
    )
    _grid_layer(group, layout)
    for lane in layout.lanes:
        _lane(group, lane)

    _indicator_layer(root, layout, options)
    return root


def to_bytes(root: ET.Element) -> bytes:
    """Serialize a scene graph to indented UTF-8 XML with a declaration."""
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"
