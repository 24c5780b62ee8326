from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import date
from typing import Iterable, Mapping

from .errors import InvalidDateKind
from .model import Contributions, Interval, Stats

logger = logging.getLogger(__name__)

_DAY_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_day(key: str) -> date:
    # fromisoformat also accepts "20240105" and week dates on newer Pythons; only YYYY-MM-DD is valid here.
    if not isinstance(key, str) or not _DAY_RE.fullmatch(key):
        raise InvalidDateKind(key)
    try:
        return date.fromisoformat(key)
    except ValueError as exc:
        raise InvalidDateKind(key, str(exc)) from exc


def week_key(day: date) -> str:
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-{iso_week:02d}"


def per_day(by_date: Mapping[str, int]) -> list[Stats]:
    for key in by_date:
        parse_day(key)
    return [Stats(date=key, count=int(by_date[key])) for key in sorted(by_date)]


def per_week(by_date: Mapping[str, int]) -> list[Stats]:
    weeks: dict[str, int] = {}
    for key, count in by_date.items():
        bucket = week_key(parse_day(key))
        weeks[bucket] = weeks.get(bucket, 0) + int(count)
    return [Stats(date=key, count=weeks[key]) for key in sorted(weeks)]


def aggregate(by_date: Mapping[str, int], interval: Interval) -> list[Stats]:
    """
    Collapse a date -> count mapping into buckets sorted by key.

    Keys are either the date itself (`day`) or the ISO-8601 `YYYY-WW` week (`week`); both sort
    lexicographically in chronological order, which the layout relies on.
    """

    if interval == "day":
        stats = per_day(by_date)
    elif interval == "week":
        stats = per_week(by_date)
    else:
        raise ValueError(f"Invalid interval {interval!r}; must be day or week")
    logger.debug("Aggregated %d dates into %d %s buckets", len(by_date), len(stats), interval)
    return stats


def max_count(stats: Iterable[Stats]) -> int:
    return max((s.count for s in stats), default=0)


def trim_start_year(contribs: Contributions) -> Contributions:
    """Drop leading years without a single contribution and move first_date to Jan 1 of the first active year."""

    active_years = [parse_day(key).year for key, count in contribs.by_date.items() if count]
    if not active_years:
        return contribs
    first_year = min(active_years)
    logger.info("First contribution year: %d", first_year)

    by_date = {key: count for key, count in contribs.by_date.items() if parse_day(key).year >= first_year}
    return replace(
        contribs,
        by_date=by_date,
        first_date=f"{first_year}-01-01",
        total_contributions=sum(by_date.values()),
    )
