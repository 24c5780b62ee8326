from .errors import (
    EmptyInputError,
    EmptyModelError,
    ExternalToolError,
    FetchError,
    InvalidDateKind,
    SkylineError,
    WriteError,
)
from .layout import SkylineGenerator, grid_size, layout
from .model import BoundingBox, Building, Contributions, Skyline, SkylineConfig, Stats
from .scad_render import render_scad, write_scad
from .stats import aggregate, max_count
from .stl_export import export_stl

__all__ = [
    "BoundingBox",
    "Building",
    "Contributions",
    "EmptyInputError",
    "EmptyModelError",
    "ExternalToolError",
    "FetchError",
    "InvalidDateKind",
    "Skyline",
    "SkylineConfig",
    "SkylineError",
    "SkylineGenerator",
    "Stats",
    "WriteError",
    "aggregate",
    "export_stl",
    "grid_size",
    "layout",
    "max_count",
    "render_scad",
    "write_scad",
]
