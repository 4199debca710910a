"""
Static visual chrome: the stylesheet and the cursor time indicator.

The stylesheet is a constant; geometry is controlled entirely by RenderOptions.
The indicator script is a template whose only inputs are three layout constants:
the timeline's vertical offset, its horizontal origin and the time scale. It moves a
vertical ``#indicator`` line with the pointer and writes the time under the cursor
into ``#indicator-text`` (in us, ms or s), following page scrolls as well.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

__all__ = [
    "STYLESHEET",
    "INDICATOR_SCRIPT",
    "style_element",
    "indicator_script",
]

STYLESHEET = """
        rect.span      { opacity: 0.7; }
        polygon.instant { opacity: 0.9; stroke: rgb(64,64,64); stroke-width: 0.5; }
        g.actor:hover rect, g.actor:hover polygon { opacity: 1.0; }
        path           { stroke: rgb(64,64,64); stroke-width: 1; }
        path.subline   { stroke: rgb(224,224,224); stroke-width: 0.7; }
        rect.indicator { fill: rgb(200,0,0); opacity: 0.6; pointer-events: none; }
        text           { font-family: Verdana, Helvetica; font-size: 14px; }
        text.heading   { font-family: Verdana, Helvetica; font-size: 14px; font-weight: bold; }
        text.left      { font-family: Verdana, Helvetica; font-size: 14px; text-anchor: start; }
        text.right     { font-family: Verdana, Helvetica; font-size: 14px; text-anchor: end; }
        text.label     { font-size: 10px; }
        text.indicator { font-size: 10px; pointer-events: none; }"""

INDICATOR_SCRIPT = """
const HEADING_HEIGHT = __HEADING_HEIGHT__;
const LEFT_OFFSET = __LEFT_OFFSET__;
const US_PER_PIXEL = __US_PER_PIXEL__;

function formatMicros(us) {
    const size = Math.abs(us);
    if (size < 1000) {
        return `${us}us`;
    }
    if (size < 1000000) {
        return `${us / 1000}ms`;
    }
    return `${us / 1000000}s`;
}

var lastPointer = {x: 0, y: 0};
var lastScroll = {top: 0, left: 0};

function moveIndicator(x, y) {
    const line = document.getElementById("indicator");
    line.setAttribute("x", x);
    line.setAttribute("y", HEADING_HEIGHT);

    const label = document.getElementById("indicator-text");
    label.setAttribute("x", x + 10);
    label.setAttribute("y", y - 10);
    label.textContent = formatMicros(Math.round((x - LEFT_OFFSET) * US_PER_PIXEL));
    lastPointer = {x: x, y: y};
}

document.addEventListener("mousemove", (e) => moveIndicator(e.pageX, e.pageY));

document.addEventListener("scroll", () => {
    const root = document.documentElement;
    const dx = root.scrollLeft - lastScroll.left;
    const dy = root.scrollTop - lastScroll.top;
    moveIndicator(lastPointer.x + dx, lastPointer.y + dy);
    lastScroll = {top: root.scrollTop, left: root.scrollLeft};
});
"""


def style_element() -> ET.Element:
    """Return a ``<defs><style>`` node carrying STYLESHEET."""
    defs = ET.Element("defs")
    style = ET.SubElement(defs, "style")
    style.text = STYLESHEET
    return defs


def indicator_script(heading_height: str, left_offset: str, us_per_pixel: str) -> str:
    """
    Fill INDICATOR_SCRIPT with already-formatted layout constants.

    Args:
        heading_height (str): Top of the timeline box, in canvas pixels.
        left_offset (str): Canvas x of time zero (the timeline group's translation).
        us_per_pixel (str): Microseconds per horizontal pixel.

    Returns:
        str: Script source ready to place in a ``<script>`` element.
    """
    return (
        INDICATOR_SCRIPT.replace("__HEADING_HEIGHT__", heading_height)
        .replace("__LEFT_OFFSET__", left_offset)
        .replace("__US_PER_PIXEL__", us_per_pixel)
    )
