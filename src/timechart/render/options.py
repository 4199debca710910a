"""
Render configuration for timechart.

Defines RenderOptions, a frozen pydantic model carrying the timeline scale, lane
geometry, margins and heading text. RenderOptions is persisted inside every rendered
artifact next to the EventStore, so a reloaded chart re-renders identically unless a
caller explicitly overrides a value.

Configuration loaders
- Precedence: environment > TOML > defaults (see RenderOptions.load).
- TOML search when no path is given: ./timechart.toml ([render] table or top-level keys),
  then ./pyproject.toml under [tool.timechart.render].
- Environment variables use the TIMECHART_ prefix (e.g., TIMECHART_US_PER_PIXEL).

Notes
- Loaders are only consulted when creating a chart; artifacts carry their own options.
- Unparseable individual values are skipped and the base value is kept.
- The heading may hold any text XML can carry; control characters such as terminal
  escapes are rejected.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from timechart.core.grammar import check_xml_text

__all__ = [
    "RenderOptions",
]

_INT_KEYS = ("us_per_line", "sublines", "us_per_pixel")
_FLOAT_KEYS = (
    "pixels_per_actor",
    "actor_margin",
    "actor_name_padding",
    "top_margin",
    "side_margin",
)
_STR_KEYS = ("heading",)


class RenderOptions(BaseModel):
    """
    Scale, geometry and heading settings for one chart.

    Attributes:
        us_per_line (int): Microseconds between labeled major grid lines.
        sublines (int): Subdivisions of each major interval drawn as minor grid lines.
        us_per_pixel (int): Microseconds represented by one horizontal pixel.
        pixels_per_actor (float): Lane height for each actor with events.
        actor_margin (float): Vertical inset of shapes within their lane.
        actor_name_padding (float): Horizontal gap between a lane label and its first event.
        top_margin (float): Space above the heading and below the timeline box.
        side_margin (float): Space left and right of the timeline box.
        heading (str): Optional multi-line heading drawn above the timeline.

    Examples:
        >>> from timechart.render.options import RenderOptions
        >>> RenderOptions(heading="boot").us_per_pixel
        10000
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    us_per_line: int = Field(default=1_000_000, gt=0)
    sublines: int = Field(default=10, ge=1)
    us_per_pixel: int = Field(default=10_000, gt=0)
    pixels_per_actor: float = Field(default=20.0, gt=0.0)
    actor_margin: float = Field(default=0.5, ge=0.0)
    actor_name_padding: float = 5.0
    top_margin: float = 20.0
    side_margin: float = 20.0
    heading: str = ""

    @field_validator("heading")
    @classmethod
    def _check_heading(cls, v: str) -> str:
        return check_xml_text(v, "heading")

    def with_overrides(self, **overrides: Any) -> RenderOptions:
        """
        Return a validated copy with the non-None overrides applied.

        Raises:
            pydantic.ValidationError: If an override breaks a field constraint.
        """
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return type(self).model_validate(data)

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: RenderOptions, cfg: dict[str, Any] | None) -> RenderOptions:
        """Apply a loose config mapping onto RenderOptions, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        updates: dict[str, Any] = {}
        for key in _INT_KEYS:
            if key in cfg:
                try:
                    updates[key] = int(cfg[key])
                except (TypeError, ValueError):
                    pass
        for key in _FLOAT_KEYS:
            if key in cfg:
                try:
                    updates[key] = float(cfg[key])
                except (TypeError, ValueError):
                    pass
        for key in _STR_KEYS:
            if key in cfg and isinstance(cfg[key], str):
                updates[key] = cfg[key]

        s = base
        # Apply one key at a time so a single out-of-range value does not discard the rest.
        for key, value in updates.items():
            try:
                s = s.with_overrides(**{key: value})
            except ValidationError:
                pass
        return s

    @classmethod
    def from_env(
        cls, base: RenderOptions | None = None, prefix: str = "TIMECHART_"
    ) -> RenderOptions:
        """
        Build RenderOptions from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - TIMECHART_US_PER_LINE
            - TIMECHART_SUBLINES
            - TIMECHART_US_PER_PIXEL
            - TIMECHART_PIXELS_PER_ACTOR
            - TIMECHART_ACTOR_MARGIN
            - TIMECHART_ACTOR_NAME_PADDING
            - TIMECHART_TOP_MARGIN
            - TIMECHART_SIDE_MARGIN
            - TIMECHART_HEADING
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for key in (*_INT_KEYS, *_FLOAT_KEYS, *_STR_KEYS):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> RenderOptions:
        """
        Build RenderOptions from a TOML file.

        Search order when `path` is None:
            1) ./timechart.toml (with either a [render] table or direct keys)
            2) ./pyproject.toml under [tool.timechart.render]

        Returns defaults if no file is present or it cannot be parsed.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "timechart.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("timechart", {}).get("render", {}) if isinstance(tool, dict) else None
            elif isinstance(data.get("render"), dict):
                cfg = data["render"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> RenderOptions:
        """
        Load RenderOptions applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (timechart.toml, pyproject.toml).

        Returns:
            RenderOptions
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
