from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..common.logging_utils import format_elapsed_time, heartbeat
from .config import output_type
from .layout import layout
from .model import Contributions, Interval, Skyline, SkylineConfig
from .scad_render import render_scad, write_text_atomic
from .stats import aggregate
from .stl_export import export_stl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    skyline: Skyline
    scad_path: Path
    stl_path: Optional[Path] = None


def skyline_from_contributions(contribs: Contributions, *, config: SkylineConfig, interval: Interval) -> Skyline:
    stats = aggregate(contribs.by_date, interval)
    return layout(
        stats,
        config,
        text_left=f"@{contribs.username}" if contribs.username else "",
        text_right=contribs.year_range_text() if contribs.first_date and contribs.last_date else "",
    )


def build_skyline(
    contribs: Contributions,
    *,
    config: SkylineConfig,
    interval: Interval,
    output: Path,
    openscad_path: str = "openscad",
    timeout: Optional[float] = None,
    allow_empty: bool = True,
) -> BuildResult:
    """
    Turn contributions into a `.scad` program and, for `.stl` outputs, a compiled mesh.

    For STL output the program is written next to the mesh first (same stem, `.scad`) so it is
    still on disk if openscad fails.
    """

    kind = output_type(output)
    logger.info(
        "Total contributions: %d between %s and %s",
        contribs.total_contributions,
        contribs.first_date,
        contribs.last_date,
    )

    logger.info("Generating OpenSCAD ...")
    start = time.monotonic()
    skyline = skyline_from_contributions(contribs, config=config, interval=interval)
    scad_text = render_scad(skyline, allow_empty=allow_empty)
    scad_path = output if kind == "scad" else output.with_suffix(".scad")
    write_text_atomic(scad_text, scad_path)
    logger.info("OpenSCAD file written to %s in %s", scad_path, format_elapsed_time(time.monotonic() - start))

    if kind == "scad":
        return BuildResult(skyline=skyline, scad_path=scad_path)

    logger.info("Generating STL ...")
    start = time.monotonic()
    with heartbeat(f"openscad rendering {output.name}", logger=logger):
        export_stl(scad_text, output, openscad_path=openscad_path, timeout=timeout)
    logger.info("STL file written to %s in %s", output, format_elapsed_time(time.monotonic() - start))
    return BuildResult(skyline=skyline, scad_path=scad_path, stl_path=output)
