from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .model import Contributions


REQUIRED_KEYS = [
    "username",
    "total_contributions",
    "first_date",
    "last_date",
    "by_date",
]


def contributions_from_dict(raw: dict[str, Any], *, source: str = "contributions") -> Contributions:
    if not isinstance(raw, dict):
        raise ValueError(f"{source}: expected a JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in raw]
    if missing:
        raise ValueError(f"{source}: missing expected keys: {', '.join(missing)}")

    by_date_raw = raw.get("by_date") or {}
    if not isinstance(by_date_raw, dict):
        raise ValueError(f"{source}: by_date must be an object of date -> count")
    by_date: dict[str, int] = {}
    for date, count in by_date_raw.items():
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValueError(f"{source}: count for {date} must be an integer, got {count!r}")
        if count < 0:
            raise ValueError(f"{source}: count for {date} must be >= 0, got {count}")
        by_date[str(date)] = count

    return Contributions(
        username=str(raw.get("username") or ""),
        total_contributions=int(raw.get("total_contributions") or 0),
        first_date=str(raw.get("first_date") or ""),
        last_date=str(raw.get("last_date") or ""),
        by_date=by_date,
    )


def contributions_to_dict(contribs: Contributions) -> dict[str, Any]:
    return {
        "username": contribs.username,
        "total_contributions": contribs.total_contributions,
        "first_date": contribs.first_date,
        "last_date": contribs.last_date,
        "by_date": {key: contribs.by_date[key] for key in sorted(contribs.by_date)},
    }


def load_contributions(path: Path) -> Contributions:
    with path.open("r", encoding="utf-8") as handle:
        try:
            raw = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path}: invalid JSON ({exc})") from exc
    return contributions_from_dict(raw, source=str(path))


def save_contributions(contribs: Contributions, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(contributions_to_dict(contribs), handle, indent=2, ensure_ascii=False)
        handle.write("\n")
