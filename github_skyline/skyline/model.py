from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional


Interval = Literal["day", "week"]
OutputType = Literal["scad", "stl"]

DEFAULT_FONT = "Liberation Sans:style=Bold"


@dataclass(frozen=True)
class Contributions:
    username: str
    total_contributions: int
    first_date: str
    last_date: str
    by_date: Mapping[str, int] = field(default_factory=dict)

    def year_range_text(self) -> str:
        start_year = self.first_date[:4]
        end_year = self.last_date[:4]
        if start_year == end_year:
            return start_year
        return f"{start_year}-{end_year}"


@dataclass(frozen=True)
class Stats:
    date: str
    count: int


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    width: float
    length: float
    height: float


@dataclass(frozen=True)
class Building:
    box: BoundingBox
    col: int
    row: int
    count: int
    date: str


@dataclass(frozen=True)
class SkylineConfig:
    aspect_ratio: tuple[int, int] = (16, 9)
    max_building_height: float = 20.0
    building_width: float = 2.0
    building_length: float = 2.0
    base_margin: float = 1.0
    base_height: float = 5.0
    base_angle: float = 22.5
    font: str = DEFAULT_FONT

    @property
    def ratio(self) -> float:
        return float(self.aspect_ratio[0]) / float(self.aspect_ratio[1])


@dataclass(frozen=True)
class Skyline:
    buildings: tuple[Building, ...]
    cols: int
    rows: int
    bounds: BoundingBox
    base_margin: float
    base_height: float
    base_angle: float
    building_width: float
    building_length: float
    max_building_height: float
    max_count: int
    font: str
    text_left: str
    text_right: str

    def cell(self, col: int, row: int) -> Optional[Building]:
        """Return the building placed at (col, row), or None for a trailing empty cell."""
        if not (0 <= col < self.cols and 0 <= row < self.rows):
            raise IndexError(f"cell ({col}, {row}) is outside the {self.cols}x{self.rows} grid")
        # Buildings are stored in column-major order, so the arena index is also the sequence index.
        index = col * self.rows + row
        if index >= len(self.buildings):
            return None
        return self.buildings[index]

    @property
    def visible_buildings(self) -> tuple[Building, ...]:
        return tuple(b for b in self.buildings if b.count > 0)
