"""
Self-describing artifact codec.

A rendered chart is both the picture and the database: the full (RenderOptions,
EventStore) pair is serialized to canonical JSON and embedded as an XML comment, the
first child of the ``<svg>`` root, ahead of every visual layer. Loading scans the root's
children in document order for the first comment and rebuilds the pair from it.

Payload
- Canonical JSON of ``{"options": RenderOptions, "store": EventStore}``.
- XML comments cannot contain ``--``; a ``-`` that would complete one is written as the
  JSON escape ``\\u002d``, which json.loads restores transparently.
- The payload is wrapped in single spaces inside the comment delimiters.

Write path
- The document is rendered fully in memory, then written tmp -> fsync -> os.replace, so a
  failed save leaves any prior artifact untouched.

Round-trip
- render(*load(path)) reproduces the bytes of the render that produced `path`.
"""

from __future__ import annotations

import json
import os
import xml.etree.ElementTree as ET
from pathlib import Path

from pydantic import ValidationError

from timechart.core.events import EventStore
from timechart.core.serde import json_dumps_canonical, json_loads
from timechart.core.typing import JsonDict
from timechart.render.options import RenderOptions
from timechart.render.svg import build_document, to_bytes

from .errors import (
    ArtifactReadError,
    ArtifactWriteError,
    EmbeddedStateNotFound,
    MalformedEmbeddedState,
    UnrecoverableEmbeddedState,
)
from .fs import fsync_file, makedirs, open_write, rename_atomic, remove_quietly

__all__ = [
    "encode_state",
    "decode_state",
    "extract_state",
    "render",
    "save",
    "load",
    "loads",
]

_STATE_KEYS = frozenset({"options", "store"})
_COMMENT_OPEN = "<!--"
_COMMENT_CLOSE = "-->"


def encode_state(options: RenderOptions, store: EventStore) -> str:
    """
    Serialize (options, store) into a comment-safe payload.

    Returns:
        str: Canonical JSON wrapped in single spaces, free of ``--`` sequences.
    """
    payload: JsonDict = {
        "options": options.model_dump(mode="json"),
        "store": store.model_dump(mode="json", by_alias=True),
    }
    text = json_dumps_canonical(payload)
    # Outside strings JSON never has two adjacent '-', so this only rewrites string content.
    text = text.replace("--", "-\\u002d")
    return f" {text} "


def _strip_delimiters(payload: str) -> str:
    text = payload.strip()
    if text.startswith(_COMMENT_OPEN) and text.endswith(_COMMENT_CLOSE):
        text = text[len(_COMMENT_OPEN) : -len(_COMMENT_CLOSE)].strip()
    return text


def decode_state(payload: str) -> tuple[RenderOptions, EventStore]:
    """
    Rebuild (options, store) from an embedded-state payload.

    Args:
        payload (str): Comment text, with or without the ``<!-- -->`` delimiters.

    Returns:
        tuple[RenderOptions, EventStore]

    Raises:
        MalformedEmbeddedState: If the payload is not JSON of the expected shape.
        UnrecoverableEmbeddedState: If options or store fail validation (including the
            store's identity and ordering invariants).
    """
    try:
        data = json_loads(_strip_delimiters(payload))
    except json.JSONDecodeError as e:
        raise MalformedEmbeddedState(f"embedded state is not valid JSON: {e}") from e
    if not isinstance(data, dict) or set(data) != _STATE_KEYS:
        raise MalformedEmbeddedState("embedded state must be an object with 'options' and 'store'")
    try:
        options = RenderOptions.model_validate(data["options"])
        store = EventStore.model_validate(data["store"])
    except ValidationError as e:
        raise UnrecoverableEmbeddedState(f"embedded state failed validation: {e}") from e
    return options, store


def extract_state(document: bytes | str) -> str:
    """
    Return the text of the first comment among the root element's children.

    Raises:
        ArtifactReadError: If the document is not well-formed XML.
        EmbeddedStateNotFound: If the root has no comment child.
    """
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        root = ET.fromstring(document, parser=parser)
    except ET.ParseError as e:
        raise ArtifactReadError(f"artifact is not well-formed XML: {e}") from e
    for node in root:
        if node.tag is ET.Comment:
            return node.text or ""
    raise EmbeddedStateNotFound("Failed to find embedded state comment in artifact")


def loads(document: bytes | str) -> tuple[RenderOptions, EventStore]:
    """Decode (options, store) from an in-memory artifact."""
    return decode_state(extract_state(document))


def render(options: RenderOptions, store: EventStore) -> bytes:
    """
    Render a complete artifact: embedded state, chrome, heading, grid and lanes.

    Raises:
        UnknownActor: Propagated from layout.
    """
    root = build_document(options, store, state=encode_state(options, store))
    return to_bytes(root)


def save(path: str | os.PathLike[str], options: RenderOptions, store: EventStore) -> str:
    """
    Render and atomically write an artifact.

    Args:
        path: Destination path; parent directories are created.
        options (RenderOptions): Render configuration, embedded in the artifact.
        store (EventStore): Event model, embedded in the artifact.

    Returns:
        str: The destination path.

    Raises:
        ArtifactWriteError: If any step of tmp write -> fsync -> rename fails. The
            temporary file is removed and the prior artifact is left in place.
    """
    data = render(options, store)
    final = os.fspath(path)
    tmp = final + ".tmp"
    try:
        makedirs(os.path.dirname(final), exist_ok=True)
        with open_write(tmp) as fh:
            fh.write(data)
            fsync_file(fh)
        rename_atomic(tmp, final)
    except OSError as e:
        remove_quietly(tmp)
        raise ArtifactWriteError(f"Failed to save artifact {final!r}: {e}") from e
    return final


def load(path: str | os.PathLike[str]) -> tuple[RenderOptions, EventStore]:
    """
    Read an artifact and recover its (options, store).

    Raises:
        ArtifactReadError: If the file cannot be read or parsed.
        EmbeddedStateNotFound: If it carries no embedded state.
        MalformedEmbeddedState: If the embedded payload is invalid.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ArtifactReadError(f"Failed to read artifact {os.fspath(path)!r}: {e}") from e
    return loads(data)
