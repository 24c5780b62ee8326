from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from github_skyline.skyline.errors import EmptyModelError, WriteError
from github_skyline.skyline.layout import layout
from github_skyline.skyline.model import SkylineConfig, Stats
from github_skyline.skyline.scad_render import render_scad, write_scad


def _skyline(*counts: int, **labels: str):
    stats = [Stats(date=f"2024-{i + 1:02d}", count=c) for i, c in enumerate(counts)]
    config = SkylineConfig(aspect_ratio=(2, 1), max_building_height=10.0, font="Liberation Sans")
    return layout(stats, config, **labels)


def _building_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.startswith("  building(")]


def test_render_is_deterministic() -> None:
    a = render_scad(_skyline(2, 4, 1, text_left="@octocat", text_right="2024"))
    b = render_scad(_skyline(2, 4, 1, text_left="@octocat", text_right="2024"))
    assert a == b
    assert a.encode("utf-8") == b.encode("utf-8")


def test_render_instantiates_positive_buildings_in_order() -> None:
    # 4 buckets at 2:1 -> 2 x 2 grid; lines are building(row, col, count).
    text = render_scad(_skyline(2, 0, 4, 1))
    assert _building_lines(text) == [
        "building(0, 0, 2); // 2024-01",
        "building(0, 1, 4); // 2024-03",
        "building(1, 1, 1); // 2024-04",
    ]


def test_render_parameter_block() -> None:
    text = render_scad(_skyline(2, 4, 1, text_left="@octocat", text_right="2023-2024"))
    assert "baseMargin = 1.000000;" in text
    assert "baseAngle = 22.500000;" in text
    assert "baseHeight = 5.000000;" in text
    assert "baseWidth = 6.000000 + (2 * baseMargin);" in text
    assert "baseLength = 2.000000 + (2 * baseMargin);" in text
    assert "baseOffset = baseHeight * tan(baseAngle);" in text
    assert "textEnable = true;" in text
    assert 'textFont = "Liberation Sans";' in text
    assert 'textLeft = "@octocat";' in text
    assert 'textRight = "2023-2024";' in text
    assert "buildingWidth = 2.000000;" in text
    assert "buildingLength = 2.000000;" in text
    assert "maxBuildingHeight = 10.000000;" in text
    assert "maxContributions = 4;" in text


def test_render_defines_modules_once_inside_single_union() -> None:
    text = render_scad(_skyline(2, 4, 1))
    assert text.count("module base()") == 1
    assert text.count("module building(row, col, contributions)") == 1
    assert "height = contributions / maxContributions * maxBuildingHeight;" in text
    assert text.count("union() {") == 1
    union_body = text.split("union() {", 1)[1]
    assert union_body.strip().endswith("}")
    assert "  base();" in union_body
    assert text.endswith("}\n")


def test_render_escapes_label_strings() -> None:
    text = render_scad(_skyline(1, text_left='@a"b\\c'))
    assert 'textLeft = "@a\\"b\\\\c";' in text


def test_render_without_labels_disables_text() -> None:
    assert "textEnable = false;" in render_scad(_skyline(1, 2))


def test_all_zero_counts_emit_base_only() -> None:
    text = render_scad(_skyline(0, 0, 0))
    assert _building_lines(text) == []
    assert "  base();" in text
    assert "maxContributions = 0;" in text


def test_all_zero_counts_strict_raises() -> None:
    with pytest.raises(EmptyModelError):
        render_scad(_skyline(0, 0), allow_empty=False)


def test_write_scad_writes_rendered_text(tmp_path: Path) -> None:
    skyline = _skyline(3, 1)
    out = write_scad(skyline, tmp_path / "nested" / "skyline.scad")
    assert out.read_text(encoding="utf-8") == render_scad(skyline)
    assert [p.name for p in out.parent.iterdir()] == ["skyline.scad"]


def test_write_scad_replaces_existing_file(tmp_path: Path) -> None:
    out = tmp_path / "skyline.scad"
    out.write_text("old", encoding="utf-8")
    write_scad(_skyline(1), out)
    assert out.read_text(encoding="utf-8").startswith("// GitHub Skyline Generator")


def test_write_scad_unwritable_path_raises_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(WriteError) as excinfo:
        write_scad(_skyline(1), blocker / "skyline.scad")
    assert excinfo.value.path == blocker / "skyline.scad"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["not-a-dir"]


def test_write_scad_strict_empty_writes_nothing(tmp_path: Path) -> None:
    out = tmp_path / "skyline.scad"
    with pytest.raises(EmptyModelError):
        write_scad(_skyline(0), out, allow_empty=False)
    assert not out.exists()


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_write_scad_new_file_follows_umask(tmp_path: Path) -> None:
    out = tmp_path / "skyline.scad"
    previous = os.umask(0o022)
    try:
        write_scad(_skyline(1), out)
    finally:
        os.umask(previous)
    assert stat.S_IMODE(out.stat().st_mode) == 0o644


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_write_scad_keeps_existing_file_mode(tmp_path: Path) -> None:
    out = tmp_path / "skyline.scad"
    out.write_text("old\n", encoding="utf-8")
    out.chmod(0o640)
    write_scad(_skyline(1), out)
    assert stat.S_IMODE(out.stat().st_mode) == 0o640
    assert out.read_text(encoding="utf-8") != "old\n"
