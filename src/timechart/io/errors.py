"""
Custom exceptions for the timechart.io module.

Purpose
- Provide artifact-level error types that map cleanly to responsibilities in timechart.io.
- Keep timechart.core as the source of truth for model errors (see timechart.core.errors).

Boundaries
- timechart.core raises DuplicateActor / UnknownActor / StoreInvariantError.
- timechart.io raises Artifact* errors for reading, writing and recovering artifacts:
  - ArtifactReadError: the artifact could not be read or is not well-formed XML.
  - ArtifactWriteError: the atomic write path failed (tmp write/fsync/rename).
  - EmbeddedStateNotFound: no embedded-state comment among the root's children.
  - MalformedEmbeddedState: the payload is not valid JSON of the expected shape.
  - UnrecoverableEmbeddedState: the payload parsed but breaks option/model invariants.

Notes
- Every error is terminal for the current command; nothing here is retried.
"""

from __future__ import annotations


class ArtifactError(Exception):
    """
    Base class for artifact IO and codec errors.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from timechart.core errors.
    """


class ArtifactReadError(ArtifactError):
    """Raised when an artifact cannot be opened, read, or parsed as XML."""


class ArtifactWriteError(ArtifactError):
    """
    Raised when a render fails to replace the target artifact atomically.

    Notes:
        The write path is tmp file -> fsync -> os.replace(tmp, final). On failure the
        temporary file is removed and any prior artifact is left untouched.
    """


class EmbeddedStateNotFound(ArtifactError):
    """Raised when an artifact carries no embedded-state comment."""


class MalformedEmbeddedState(ArtifactError):
    """Raised when the embedded payload is not valid serialized state."""


class UnrecoverableEmbeddedState(MalformedEmbeddedState):
    """
    Raised when the payload deserializes but yields invalid options or a model that
    violates the store invariants (e.g., actor/event keys out of lockstep).
    """
