"""
Markup grammar for strings that end up inside a rendered chart.

Actor identities, tooltips, event values, presentation fields and the heading are all
written into the SVG as element text, attribute values or attribute names, and the
embedded state must always parse back. These zero-IO helpers guard the two XML 1.0
productions involved.

Productions
- Char: characters allowed anywhere in a document. Rejects C0 controls other than tab,
  newline and carriage return, lone surrogates, and U+FFFE / U+FFFF.
- Attribute names: the ASCII subset of NCName (letter or underscore, then letters,
  digits, ``_``, ``-`` or ``.``). Colons are excluded since a prefix would need a
  namespace binding.

Downstream usage
- Validators in ``timechart.core.events`` and ``timechart.render.options`` call
  ``check_xml_text`` / ``check_xml_name`` and surface MarkupError as a pydantic
  ValidationError.

Examples:
    >>> from timechart.core.grammar import is_xml_name, is_xml_text
    >>> is_xml_text("Linux host\\n6.1"), is_xml_text("boot\\x1b[0m")
    (True, False)
    >>> is_xml_name("stroke-width"), is_xml_name("stroke width"), is_xml_name("xlink:href")
    (True, False, False)
"""

from __future__ import annotations

import re

from .errors import MarkupError

__all__ = [
    "is_xml_text",
    "is_xml_name",
    "check_xml_text",
    "check_xml_name",
]

_XML_CHARS_RE = re.compile(r"[\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]*")
_ATTR_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*")


def is_xml_text(s: str) -> bool:
    """Return True if every character of `s` matches the XML 1.0 Char production."""
    return _XML_CHARS_RE.fullmatch(s) is not None


def is_xml_name(s: str) -> bool:
    """Return True if `s` is usable as an unprefixed attribute name."""
    return _ATTR_NAME_RE.fullmatch(s) is not None


def check_xml_text(s: str, what: str) -> str:
    """
    Return `s` unchanged if it can be written into the artifact.

    Raises:
        MarkupError: If `s` holds a character XML 1.0 cannot represent.
    """
    if not is_xml_text(s):
        bad = next(ch for ch in s if not is_xml_text(ch))
        raise MarkupError(f"{what} contains a character not allowed in XML: {bad!r}")
    return s


def check_xml_name(s: str, what: str) -> str:
    """
    Return `s` unchanged if it is a valid attribute name.

    Raises:
        MarkupError: If `s` is not an unprefixed ASCII XML name.
    """
    if not is_xml_name(s):
        raise MarkupError(f"{what} is not a valid XML attribute name: {s!r}")
    return s
