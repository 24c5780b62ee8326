from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import tomllib

from .model import DEFAULT_FONT, Interval, OutputType, SkylineConfig


@dataclass(frozen=True)
class SkylineSettings:
    username: str = ""
    token: str = ""
    contributions_file: str = "contributions.json"
    save: bool = False
    output: str = "skyline.scad"
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    aspect_ratio: str = "16:9"
    interval: Interval = "week"
    base_angle: float = 22.5
    base_height: float = 5.0
    base_margin: float = 1.0
    max_building_height: float = 20.0
    building_width: float = 2.0
    building_length: float = 2.0
    font: str = DEFAULT_FONT
    openscad: str = "openscad"
    timeout: Optional[float] = 600.0
    strict: bool = False
    trim_start: bool = False
    log_level: str = "INFO"

    def skyline_config(self) -> SkylineConfig:
        return SkylineConfig(
            aspect_ratio=parse_aspect_ratio(self.aspect_ratio),
            max_building_height=self.max_building_height,
            building_width=self.building_width,
            building_length=self.building_length,
            base_margin=self.base_margin,
            base_height=self.base_height,
            base_angle=self.base_angle,
            font=self.font,
        )


_FLOAT_FIELDS = {
    "base_angle",
    "base_height",
    "base_margin",
    "max_building_height",
    "building_width",
    "building_length",
    "timeout",
}
_INT_FIELDS = {"start_year", "end_year"}
_BOOL_FIELDS = {"save", "strict", "trim_start"}


def parse_aspect_ratio(value: str) -> tuple[int, int]:
    raw = (value or "").strip()
    parts = raw.split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid aspect ratio {value!r} (expected W:H, e.g. 16:9)")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValueError(f"Invalid aspect ratio {value!r} (expected W:H, e.g. 16:9)") from exc
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid aspect ratio {value!r}: both sides must be positive")
    return width, height


def output_type(path: Path | str) -> OutputType:
    suffix = Path(path).suffix.lower().lstrip(".")
    if not suffix:
        raise ValueError(f"Output file {path} must have an extension (.scad or .stl)")
    if suffix not in {"scad", "stl"}:
        raise ValueError(f"Output file {path} must be .scad or .stl")
    return suffix  # type: ignore[return-value]


def _coerce(path: Path, key: str, value: Any) -> Any:
    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise SystemExit(f"{path}: {key} must be true or false")
        return value
    if key in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SystemExit(f"{path}: {key} must be an integer")
        return value
    if key in _FLOAT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SystemExit(f"{path}: {key} must be a number")
        return float(value)
    if not isinstance(value, str):
        raise SystemExit(f"{path}: {key} must be a string")
    return value.strip()


def load_settings(path: Optional[Path], *, base: Optional[SkylineSettings] = None) -> SkylineSettings:
    """
    Read the `[skyline]` table of a TOML file on top of `base` (defaults when omitted).

    A missing file leaves `base` untouched so a default config path can always be passed.
    """

    settings = base or SkylineSettings()
    if path is None or not path.exists():
        return settings

    raw = tomllib.loads(path.read_text(encoding="utf-8"))
    table = raw.get("skyline", {})
    if not isinstance(table, dict):
        raise SystemExit(f"{path}: [skyline] must be a table")

    known = {f.name for f in fields(SkylineSettings)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise SystemExit(f"{path}: unknown [skyline] keys: {', '.join(unknown)}")

    values = {key: _coerce(path, key, value) for key, value in table.items()}
    if "interval" in values and values["interval"] not in {"day", "week"}:
        raise SystemExit(f"{path}: interval must be day or week")
    if "aspect_ratio" in values:
        try:
            parse_aspect_ratio(values["aspect_ratio"])
        except ValueError as exc:
            raise SystemExit(f"{path}: {exc}") from exc
    return replace(settings, **values)


def settings_from_env(base: Optional[SkylineSettings] = None) -> SkylineSettings:
    settings = base or SkylineSettings()
    return replace(
        settings,
        username=os.environ.get("GITHUB_USERNAME", "").strip() or settings.username,
        token=os.environ.get("GITHUB_TOKEN", "").strip() or settings.token,
    )
