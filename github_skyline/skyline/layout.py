from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from .errors import EmptyInputError
from .model import BoundingBox, Building, Skyline, SkylineConfig, Stats
from .stats import max_count

logger = logging.getLogger(__name__)


def grid_size(num_buildings: int, aspect_ratio: float) -> tuple[int, int]:
    """
    Pick (cols, rows) for `num_buildings` cells, aiming for cols/rows close to `aspect_ratio`.

    The column count comes from sqrt(n * ratio); rows are whatever is needed to hold n. When the
    grid overshoots, columns are re-derived from the row count so no trailing column is left
    entirely empty. Rows are never recomputed after that.
    """

    if num_buildings <= 0:
        raise EmptyInputError("Cannot lay out a skyline without any contributions")
    n = float(num_buildings)
    cols = int(math.ceil(math.sqrt(n * aspect_ratio)))
    rows = int(math.ceil(n / cols))
    if cols * rows > num_buildings:
        cols = int(math.ceil(n / rows))
    return cols, rows


def building_height(count: int, max_contributions: int, max_building_height: float) -> float:
    if max_contributions <= 0:
        return 0.0
    return float(count) / float(max_contributions) * max_building_height


class SkylineGenerator:
    def __init__(self, config: SkylineConfig) -> None:
        self.config = config

    def compute_matrix(self, stats: Sequence[Stats]) -> tuple[int, int, list[Optional[Building]]]:
        """Place buckets column-major into a flat `col * rows + row` arena."""
        cfg = self.config
        cols, rows = grid_size(len(stats), cfg.ratio)
        top = max_count(stats)

        arena: list[Optional[Building]] = [None] * (cols * rows)
        for i, stat in enumerate(stats):
            col, row = divmod(i, rows)
            min_x = col * cfg.building_width
            min_y = row * cfg.building_length
            arena[col * rows + row] = Building(
                box=BoundingBox(
                    min_x=min_x,
                    min_y=min_y,
                    max_x=min_x + cfg.building_width,
                    max_y=min_y + cfg.building_length,
                    width=cfg.building_width,
                    length=cfg.building_length,
                    height=building_height(stat.count, top, cfg.max_building_height),
                ),
                col=col,
                row=row,
                count=stat.count,
                date=stat.date,
            )
        return cols, rows, arena

    def generate(self, stats: Sequence[Stats], *, text_left: str = "", text_right: str = "") -> Skyline:
        cfg = self.config
        cols, rows, arena = self.compute_matrix(stats)
        width = cols * cfg.building_width
        length = rows * cfg.building_length

        logger.info("Skyline details:")
        logger.info("  Buildings: %d (%d x %d matrix)", len(stats), cols, rows)
        logger.info("  Dimensions: %0.1fmm x %0.1fmm", width, length)

        return Skyline(
            buildings=tuple(b for b in arena if b is not None),
            cols=cols,
            rows=rows,
            bounds=BoundingBox(
                min_x=0.0,
                min_y=0.0,
                max_x=width,
                max_y=length,
                width=width,
                length=length,
                height=cfg.max_building_height,
            ),
            base_margin=cfg.base_margin,
            base_height=cfg.base_height,
            base_angle=cfg.base_angle,
            building_width=cfg.building_width,
            building_length=cfg.building_length,
            max_building_height=cfg.max_building_height,
            max_count=max_count(stats),
            font=cfg.font,
            text_left=text_left,
            text_right=text_right,
        )


def layout(stats: Sequence[Stats], config: SkylineConfig, *, text_left: str = "", text_right: str = "") -> Skyline:
    return SkylineGenerator(config).generate(stats, text_left=text_left, text_right=text_right)
