from __future__ import annotations

import pytest

from github_skyline.skyline.errors import EmptyInputError
from github_skyline.skyline.layout import SkylineGenerator, grid_size, layout
from github_skyline.skyline.model import SkylineConfig, Stats


def _stats(*counts: int) -> list[Stats]:
    return [Stats(date=str(i + 1), count=c) for i, c in enumerate(counts)]


def test_grid_size_three_buckets_wide_ratio() -> None:
    assert grid_size(3, 2.0) == (3, 1)


def test_grid_size_shrinks_trailing_columns() -> None:
    # sqrt(53 * 16/9) -> 10 cols, 6 rows would hold 60; shrink to ceil(53 / 6) = 9 cols.
    assert grid_size(53, 16 / 9) == (9, 6)


def test_grid_size_single_bucket() -> None:
    assert grid_size(1, 16 / 9) == (1, 1)


@pytest.mark.parametrize("ratio", [0.25, 1.0, 16 / 9, 2.0, 21 / 9, 5.0])
def test_grid_always_fits_without_empty_trailing_row(ratio: float) -> None:
    for n in range(1, 400):
        cols, rows = grid_size(n, ratio)
        assert cols * rows >= n
        assert cols * (rows - 1) < n


def test_grid_size_rejects_empty() -> None:
    with pytest.raises(EmptyInputError):
        grid_size(0, 1.0)


def test_layout_scenario_heights_and_positions() -> None:
    config = SkylineConfig(aspect_ratio=(2, 1), max_building_height=10.0)
    skyline = layout(_stats(2, 4, 1), config)
    assert (skyline.cols, skyline.rows) == (3, 1)
    assert [(b.col, b.row) for b in skyline.buildings] == [(0, 0), (1, 0), (2, 0)]
    assert [b.box.height for b in skyline.buildings] == pytest.approx([5.0, 10.0, 2.5])
    assert skyline.max_count == 4


def test_layout_empty_input_fails() -> None:
    with pytest.raises(EmptyInputError):
        layout([], SkylineConfig())


def test_buildings_fill_columns_first_in_bucket_order() -> None:
    skyline = layout(_stats(1, 2, 3, 4, 5), SkylineConfig(aspect_ratio=(1, 1)))
    assert (skyline.cols, skyline.rows) == (3, 2)
    assert [(b.col, b.row) for b in skyline.buildings] == [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0)]
    assert [b.date for b in skyline.buildings] == ["1", "2", "3", "4", "5"]
    order = [b.col * skyline.rows + b.row for b in skyline.buildings]
    assert order == sorted(order)
    assert skyline.cell(1, 1) is skyline.buildings[3]
    assert skyline.cell(2, 1) is None
    with pytest.raises(IndexError):
        skyline.cell(3, 0)


def test_building_boxes_follow_grid_cells() -> None:
    config = SkylineConfig(aspect_ratio=(1, 1), building_width=2.0, building_length=3.0, max_building_height=20.0)
    skyline = layout(_stats(1, 2, 3, 4), config)
    b = skyline.cell(1, 1)
    assert b is not None
    assert (b.box.min_x, b.box.max_x) == (2.0, 4.0)
    assert (b.box.min_y, b.box.max_y) == (3.0, 6.0)
    assert (b.box.width, b.box.length) == (2.0, 3.0)
    assert b.box.height == pytest.approx(20.0)


def test_bounds_use_grid_not_requested_ratio() -> None:
    config = SkylineConfig(aspect_ratio=(16, 9), building_width=2.0, building_length=2.5, max_building_height=12.0)
    skyline = layout(_stats(*([1] * 53)), config)
    assert skyline.bounds.width == pytest.approx(9 * 2.0)
    assert skyline.bounds.length == pytest.approx(6 * 2.5)
    assert skyline.bounds.height == 12.0
    assert (skyline.bounds.min_x, skyline.bounds.min_y) == (0.0, 0.0)
    assert (skyline.bounds.max_x, skyline.bounds.max_y) == (skyline.bounds.width, skyline.bounds.length)


def test_zero_counts_keep_their_cell() -> None:
    skyline = layout(_stats(0, 3, 0), SkylineConfig(aspect_ratio=(2, 1), max_building_height=9.0))
    assert len(skyline.buildings) == 3
    assert [b.box.height for b in skyline.buildings] == pytest.approx([0.0, 9.0, 0.0])
    assert [(b.col, b.row) for b in skyline.visible_buildings] == [(1, 0)]


def test_all_zero_counts_lay_out_flat() -> None:
    skyline = layout(_stats(0, 0, 0, 0), SkylineConfig())
    assert skyline.max_count == 0
    assert all(b.box.height == 0.0 for b in skyline.buildings)
    assert skyline.bounds.width > 0 and skyline.bounds.length > 0
    assert skyline.visible_buildings == ()


def test_generator_carries_config_and_labels() -> None:
    config = SkylineConfig(base_margin=2.0, base_height=4.0, base_angle=30.0, font="DejaVu Sans")
    skyline = SkylineGenerator(config).generate(_stats(1, 2), text_left="@octocat", text_right="2023-2024")
    assert (skyline.base_margin, skyline.base_height, skyline.base_angle) == (2.0, 4.0, 30.0)
    assert skyline.font == "DejaVu Sans"
    assert (skyline.text_left, skyline.text_right) == ("@octocat", "2023-2024")
