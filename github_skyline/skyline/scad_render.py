from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from .errors import EmptyModelError, WriteError
from .model import Skyline

logger = logging.getLogger(__name__)

BASE_COLOR = "cyan"
BUILDING_COLOR = "red"
TEXT_COLOR = "red"
TEXT_HEIGHT = 0.4

BASE_MODULE = """module base() {
    bottomWidth = baseWidth + 2 * baseOffset;
    bottomLength = baseLength + 2 * baseOffset;

    points = [
        // Bottom
        [0, 0, 0],
        [bottomWidth, 0, 0],
        [bottomWidth, bottomLength, 0],
        [0, bottomLength, 0],
        // Top
        [baseOffset, baseOffset, baseHeight],
        [baseWidth + baseOffset, baseOffset, baseHeight],
        [baseWidth + baseOffset, baseLength + baseOffset, baseHeight],
        [baseOffset, baseLength + baseOffset, baseHeight],
    ];

    faces = [
        [0, 1, 2, 3],  // Bottom
        [4, 5, 1, 0],  // Front
        [7, 6, 5, 4],  // Top
        [5, 6, 2, 1],  // Right
        [6, 7, 3, 2],  // Back
        [7, 4, 0, 3],  // Left
    ];

    color(baseColor)
        polyhedron(points, faces);

    if (textEnable) {
        textOffset = baseOffset + baseMargin;
        textSize = baseHeight - baseMargin;

        rotate([90 - baseAngle, 0, 0])
            translate([textOffset, 1, 0])
                color(textColor)
                    linear_extrude(textHeight)
                        text(textLeft, size = textSize, halign = "left", valign = "baseline", font = textFont);

        rotate([90 - baseAngle, 0, 0])
            translate([bottomWidth - textOffset, 1, 0])
                color(textColor)
                    linear_extrude(textHeight)
                        text(textRight, size = textSize, halign = "right", valign = "baseline", font = textFont);
    }
}"""

BUILDING_MODULE = """module building(row, col, contributions) {
    height = contributions / maxContributions * maxBuildingHeight;
    color(buildingColor)
        translate([
            (col * buildingWidth) + baseMargin + baseOffset,
            (row * buildingLength) + baseMargin + baseOffset,
            baseHeight
        ])
            cube([buildingWidth, buildingLength, height]);
}"""


def _num(value: float) -> str:
    return f"{float(value):.6f}"


def _scad_string(value: str) -> str:
    escaped = (value or "").replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def render_scad(skyline: Skyline, *, allow_empty: bool = True) -> str:
    """
    Serialize a skyline into an OpenSCAD program.

    The output depends only on the skyline value: same skyline, same bytes. Building heights are
    not written out; the `building` module re-derives them from the count so the program stands
    on its own.
    """

    visible = skyline.visible_buildings
    if not visible:
        if not allow_empty:
            raise EmptyModelError("Skyline has no building with a positive contribution count")
        logger.warning("Skyline has no contributions; emitting the base only")

    text_enable = bool(skyline.text_left or skyline.text_right)

    parts: list[str] = []
    parts.append("// GitHub Skyline Generator")
    parts.append("// Generated by github-skyline")
    parts.append("")

    parts.append("// Base Parameters")
    parts.append(f"baseMargin = {_num(skyline.base_margin)};")
    parts.append(f"baseAngle = {_num(skyline.base_angle)};")
    parts.append(f"baseHeight = {_num(skyline.base_height)};")
    parts.append(f"baseWidth = {_num(skyline.bounds.width)} + (2 * baseMargin);")
    parts.append(f"baseLength = {_num(skyline.bounds.length)} + (2 * baseMargin);")
    parts.append("baseOffset = baseHeight * tan(baseAngle);")
    parts.append(f"baseColor = {_scad_string(BASE_COLOR)};")

    parts.append("")
    parts.append("// Base Text")
    parts.append(f"textEnable = {'true' if text_enable else 'false'};")
    parts.append(f"textFont = {_scad_string(skyline.font)};")
    parts.append(f"textLeft = {_scad_string(skyline.text_left)};")
    parts.append(f"textRight = {_scad_string(skyline.text_right)};")
    parts.append(f"textColor = {_scad_string(TEXT_COLOR)};")
    parts.append(f"textHeight = {_num(TEXT_HEIGHT)};")

    parts.append("")
    parts.append("// Building Parameters")
    parts.append(f"buildingWidth = {_num(skyline.building_width)};")
    parts.append(f"buildingLength = {_num(skyline.building_length)};")
    parts.append(f"maxBuildingHeight = {_num(skyline.max_building_height)};")
    parts.append(f"buildingColor = {_scad_string(BUILDING_COLOR)};")

    parts.append("")
    parts.append("// GitHub Parameters")
    parts.append(f"maxContributions = {int(skyline.max_count)};")
    parts.append("")

    parts.append(BASE_MODULE)
    parts.append("")
    parts.append(BUILDING_MODULE)
    parts.append("")

    parts.append("union() {")
    parts.append("  base();")
    parts.append("  // building(row, col, contributions);")
    for building in visible:
        parts.append(f"  building({building.row}, {building.col}, {building.count}); // {building.date}")
    parts.append("}")

    return "\n".join(parts) + "\n"


def _file_mode(path: Path) -> int:
    """Mode for a freshly written file: keep an existing target's mode, else what open() would give."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_text_atomic(text: str, path: Path) -> Path:
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)
        # mkstemp creates 0600
        os.chmod(tmp_name, _file_mode(path))
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise WriteError(path, exc.strerror or str(exc)) from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    return path


def write_scad(skyline: Skyline, path: Path, *, allow_empty: bool = True) -> Path:
    return write_text_atomic(render_scad(skyline, allow_empty=allow_empty), path)
