"""
CLI wrapper for compute_chart().

Usage:
    python3 -m bazi_chart.run --birth YYYY-MM-DDTHH:MM --gender GENDER \
        [--timezone ZONE] [--latitude LAT --longitude LON] \
        [--annual-year YEAR] [--calendar lunar|arithmetic|auto] \
        [--solar-terms table|ephemeris] [--output PATH] [--verbose]

Settings not given on the command line are read from BAZI_* environment
variables (see bazi_chart.config).
"""

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from bazi_chart.analysis import annual_interactions
from bazi_chart.chart import BirthInput, compute_chart, locate
from bazi_chart.config import CALENDAR_CHOICES, SOLAR_TERM_CHOICES, Settings
from bazi_chart.errors import BaziError
from bazi_chart.geo import Coordinates, TimezoneFinderResolver

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Compute a BaZi natal chart.")
    parser.add_argument("--birth", required=True, help="local wall-clock time, YYYY-MM-DDTHH:MM[:SS]")
    parser.add_argument("--gender", required=True, choices=["male", "female"])
    parser.add_argument("--timezone", default=None, help="IANA zone; looked up from coordinates if omitted")
    parser.add_argument("--latitude", type=float, default=None)
    parser.add_argument("--longitude", type=float, default=None)
    parser.add_argument("--annual-year", dest="annual_year", type=int, default=None)
    parser.add_argument("--calendar", choices=CALENDAR_CHOICES, default=None)
    parser.add_argument("--solar-terms", dest="solar_terms", choices=SOLAR_TERM_CHOICES, default=None)
    parser.add_argument("--output", type=Path, default=None, help="write the chart JSON here instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def settings_from_args(args) -> Settings:
    settings = Settings.from_env()
    overrides = {}
    if args.calendar:
        overrides["calendar"] = args.calendar
    if args.solar_terms:
        overrides["solar_terms"] = args.solar_terms
    return replace(settings, **overrides) if overrides else settings


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if (args.latitude is None) != (args.longitude is None):
        parser.error("--latitude and --longitude must be given together")

    coordinates = None
    if args.latitude is not None:
        try:
            coordinates = Coordinates(args.latitude, args.longitude)
        except ValueError as exc:
            parser.error(str(exc))

    birth = BirthInput(
        gender=args.gender,
        local_timestamp=args.birth,
        timezone_id=args.timezone,
        coordinates=coordinates,
    )
    birth = locate(birth, TimezoneFinderResolver())

    try:
        chart = compute_chart(birth, settings_from_args(args))
    except BaziError as exc:
        parser.exit(2, f"error: {exc}\n")

    result = chart.to_dict()
    if args.annual_year is not None:
        result["annual"] = annual_interactions(chart, args.annual_year)

    text = json.dumps(result, indent=2, ensure_ascii=False)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info("Chart written to %s", args.output)
    else:
        print(text)


if __name__ == "__main__":
    main()
