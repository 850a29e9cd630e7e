#!/usr/bin/env python3
"""Plan and draw a student's walking route for one day. Run as: campusroute SCHEDULE --crns "..." (or python -m campusroute.cli)."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import time
from typing import List, Optional, Tuple

from .distance import CalibrationConfig, DistanceCalculator, calibrated_calculator
from .io import ScheduleLoadError, ScheduleRepository, load_buildings_csv
from .models import Weekday
from .planner import RoutePlanner
from .registry import BuildingRegistry
from .render import BackgroundImage, RenderConfig, render_route
from .schedule import DailyItinerary, ScheduleService, parse_crns
from .svg import write_svg


def fmt_time(t: time) -> str:
    """datetime.time -> '2:05pm'."""
    ampm = "am" if t.hour < 12 else "pm"
    h12 = t.hour % 12 or 12
    return f"{h12}:{t.minute:02d}{ampm}"


def parse_size(value: str) -> Tuple[float, float]:
    """'1200x800' -> (1200.0, 800.0)."""
    try:
        w, h = value.lower().split("x", 1)
        size = (float(w), float(h))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}")
    if size[0] <= 0 or size[1] <= 0:
        raise argparse.ArgumentTypeError("width and height must be positive")
    return size


def print_itinerary_table(itinerary: DailyItinerary) -> None:
    print("=" * 96)
    print(f"{'#':<3} {'CRN':<8} {'COURSE':<12} {'TYPE':<10} {'TIME':<17} {'ROOM':<12} {'INSTRUCTOR':<24}")
    print("-" * 96)
    for i, entry in enumerate(itinerary.entries, start=1):
        o, s = entry.offering, entry.session
        time_str = f"{fmt_time(entry.start_time)}-{fmt_time(entry.end_time)}"
        instructor = o.instructor.name if o.instructor else "TBA"
        print(f"{i:<3} {o.crn:<8} {o.course.code:<12} {s.activity_type.value:<10} {time_str:<17} "
              f"{str(s.room):<12} {instructor:<24}")
    print("=" * 96)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Campus route planner: draw a day's walk between classes")
    parser.add_argument("schedule", help="term sheet (.csv or .xlsx), local path or http(s) URL")
    parser.add_argument("--crns", required=True, help='CRNs separated by spaces, commas or semicolons')
    parser.add_argument("--day", help="weekday name (default Monday)")
    parser.add_argument("--buildings", help="building seed CSV: code,name,x,y in map pixels")
    parser.add_argument("--map-size", type=parse_size, help="map image size in pixels, e.g. 1200x800")
    parser.add_argument("--map", dest="map_href", help="map image path/URL to embed as SVG background")
    parser.add_argument("--svg", help="write the rendered route to this SVG file")
    parser.add_argument("--width", type=float, default=1200.0, help="drawing surface width")
    parser.add_argument("--height", type=float, default=800.0, help="drawing surface height")
    parser.add_argument("--known-meters", type=float, default=CalibrationConfig.known_meters,
                        help="real distance between the two calibration buildings")
    parser.add_argument("--table", action="store_true", help="print the itinerary table")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.buildings and not args.map_size:
        print("--buildings needs --map-size to normalize pixel coordinates", file=sys.stderr)
        return 1
    if args.map_href and not args.map_size:
        print("--map needs --map-size to place the background image", file=sys.stderr)
        return 1

    registry = BuildingRegistry()
    if args.buildings:
        try:
            load_buildings_csv(args.buildings, args.map_size[0], args.map_size[1], registry)
        except (OSError, ValueError) as e:
            print(f"Could not read building seed: {e}", file=sys.stderr)
            return 1

    distance: DistanceCalculator = calibrated_calculator(
        registry, CalibrationConfig(known_meters=args.known_meters)
    )
    planner = RoutePlanner(distance)
    service = ScheduleService(ScheduleRepository(args.schedule, registry))

    crns = parse_crns(args.crns)
    if not crns:
        print("Enter at least one CRN.", file=sys.stderr)
        return 1
    day = Weekday.parse(args.day)

    try:
        offerings = service.offerings_by_crns(crns)
    except ScheduleLoadError as e:
        cause = f": {e.__cause__}" if e.__cause__ else ""
        print(f"Load failed: {e}{cause}", file=sys.stderr)
        return 1

    missing = service.missing_crns(crns, offerings)
    if missing:
        print(f"The following CRNs were not found: {', '.join(missing)}", file=sys.stderr)

    itinerary = service.daily_itinerary_from_offerings(offerings, day)
    if len(itinerary) == 0:
        print(f"No sessions found for {day.label} with the selected CRNs.")
        return 0

    model = planner.build_visualization(itinerary)
    if args.table:
        print_itinerary_table(itinerary)
    print("\n".join(model.summary_lines))

    if args.svg:
        background = None
        if args.map_href:
            background = BackgroundImage(args.map_href, args.map_size[0], args.map_size[1])
        commands = render_route(model, args.width, args.height, background, RenderConfig())
        out = write_svg(args.svg, commands, args.width, args.height)
        print(f"Wrote route drawing to {out}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
