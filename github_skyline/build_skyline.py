#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from dotenv import find_dotenv, load_dotenv

from github_skyline.common.logging_utils import setup_logging
from github_skyline.skyline.config import SkylineSettings, load_settings, output_type, parse_aspect_ratio, settings_from_env
from github_skyline.skyline.contributions_io import load_contributions, save_contributions
from github_skyline.skyline.errors import SkylineError
from github_skyline.skyline.github_fetch import GitHubContributionsFetcher
from github_skyline.skyline.model import Contributions
from github_skyline.skyline.pipeline import build_skyline
from github_skyline.skyline.stats import trim_start_year

DEFAULT_CONFIG = Path("skyline.toml")

logger = logging.getLogger("github_skyline")


def build_parser() -> argparse.ArgumentParser:
    # Every option defaults to None so only flags given on the command line override config/env values.
    parser = argparse.ArgumentParser(
        description="Generate a 3D-printable skyline (OpenSCAD or STL) from GitHub contributions.",
        epilog="Username and token default to GITHUB_USERNAME / GITHUB_TOKEN (a .env file is loaded if present).",
    )
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="TOML file with a [skyline] table (default: skyline.toml)")
    parser.add_argument("-u", "--username", help="GitHub username")
    parser.add_argument("-t", "--token", help="GitHub token")
    parser.add_argument("-s", "--save", action="store_true", default=None, help="Fetch from GitHub and save contributions to --contributions")
    parser.add_argument("-f", "--contributions", dest="contributions_file", help="File to save/load contributions (default: contributions.json)")
    parser.add_argument("-o", "--output", help="Output file (.scad or .stl; stl requires openscad)")
    parser.add_argument("-b", "--start", dest="start_year", type=int, help="Start year (default: end year)")
    parser.add_argument("-e", "--end", dest="end_year", type=int, help="End year (default: current year)")
    parser.add_argument("-a", "--aspect-ratio", help="Aspect ratio of the skyline, W:H (default: 16:9)")
    parser.add_argument("-A", "--base-angle", type=float, help="Slope of the base walls in degrees (default: 22.5)")
    parser.add_argument("-H", "--base-height", type=float, help="Height of the base in mm (default: 5)")
    parser.add_argument("-g", "--base-margin", type=float, help="Distance from the buildings to the base walls in mm (default: 1)")
    parser.add_argument("-m", "--max-building-height", type=float, help="Max building height in mm (default: 20)")
    parser.add_argument("-w", "--building-width", type=float, help="Building width in mm (default: 2)")
    parser.add_argument("-l", "--building-length", type=float, help="Building length in mm (default: 2)")
    parser.add_argument("-i", "--interval", choices=["day", "week"], help="Interval to bucket contributions by (default: week)")
    parser.add_argument("--font", help="Font for the base labels")
    parser.add_argument("--openscad", help="Path to the openscad executable (default: openscad)")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for openscad before giving up (default: 600)")
    parser.add_argument("--strict", action="store_true", default=None, help="Fail instead of writing a base-only model when there are no contributions")
    parser.add_argument("--trim-start", action="store_true", default=None, help="Drop leading years without contributions")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    return parser


def resolve_settings(args: argparse.Namespace) -> SkylineSettings:
    settings = load_settings(args.config)
    settings = settings_from_env(settings)
    overrides = {key: value for key, value in vars(args).items() if key != "config" and value is not None}
    return replace(settings, **overrides)


def load_or_fetch(settings: SkylineSettings) -> Contributions:
    contribs_path = Path(settings.contributions_file) if settings.contributions_file else None
    if contribs_path is not None and contribs_path.exists() and not settings.save:
        logger.info("Loading contributions from %s", contribs_path)
        return load_contributions(contribs_path)

    if not settings.username or not settings.token:
        raise ValueError("username and token are required to fetch contributions (or pass an existing --contributions file)")

    end_year = settings.end_year or date.today().year
    start_year = settings.start_year or end_year
    fetcher = GitHubContributionsFetcher(settings.username, settings.token)
    contribs = fetcher.fetch_contributions(start_year, end_year)

    if settings.save and contribs_path is not None:
        save_contributions(contribs, contribs_path)
        logger.info("Contributions saved to %s", contribs_path)
    return contribs


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    args = build_parser().parse_args(argv)

    try:
        settings = resolve_settings(args)
        setup_logging(settings.log_level, format_string="%(levelname)s: %(message)s")
        parse_aspect_ratio(settings.aspect_ratio)
        output = Path(settings.output)
        output_type(output)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    try:
        contribs = load_or_fetch(settings)
        if settings.trim_start:
            contribs = trim_start_year(contribs)
        build_skyline(
            contribs,
            config=settings.skyline_config(),
            interval=settings.interval,
            output=output,
            openscad_path=settings.openscad,
            timeout=settings.timeout,
            allow_empty=not settings.strict,
        )
    except (SkylineError, ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
