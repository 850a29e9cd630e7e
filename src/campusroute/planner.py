from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Optional, Sequence

from .models import (
    Building,
    CourseOffering,
    RoutePath,
    RouteSegment,
    RouteVisualizationModel,
    Weekday,
)
from .schedule import DailyItinerary, ItineraryEntry

logger = logging.getLogger(__name__)

DistanceFn = Callable[[Optional[Building], Optional[Building]], float]


def same_building(a: Optional[Building], b: Optional[Building]) -> bool:
    """Codes compared ignoring case. Unknown buildings never match."""
    if a is None or b is None:
        return False
    return a.code.lower() == b.code.lower()


def format_meters(meters: float) -> str:
    """Whole meters, halves rounded up: 12.5 -> '13 m'."""
    whole = Decimal(meters).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"{whole} m"


def build_route_path(entries: Sequence[ItineraryEntry], distance: DistanceFn) -> RoutePath:
    """
    Every entry's building becomes a stop. A segment is added only when the
    building differs from the previous stop, so back-to-back classes in one
    building add no travel, while coming back later in the day does.
    """
    stops: List[Building] = []
    segments: List[RouteSegment] = []
    last: Optional[Building] = None

    for entry in entries:
        current = entry.session.building
        if current is None:
            logger.debug("Skipping %s: session has no building", entry.offering.crn)
            continue

        stops.append(current)
        if last is not None and not same_building(last, current):
            meters = distance(last, current)
            segments.append(RouteSegment(last, current, meters))
            logger.debug("Segment %s -> %s: %.1f m", last.code, current.code, meters)
        last = current

    return RoutePath(stops=stops, segments=segments)


def distinct_offerings(entries: Sequence[ItineraryEntry]) -> List[CourseOffering]:
    seen: Dict[str, CourseOffering] = {}
    for entry in entries:
        seen.setdefault(entry.offering.crn, entry.offering)
    return list(seen.values())


def distinct_buildings(stops: Sequence[Building]) -> List[Building]:
    seen: Dict[str, Building] = {}
    for b in stops:
        seen.setdefault(b.code, b)
    return list(seen.values())


def build_summary(
    day: Weekday,
    offerings: Sequence[CourseOffering],
    buildings: Sequence[Building],
    total_meters: float,
) -> List[str]:
    lines = [
        f"Selected Day: {day.label}",
        f"Number of Courses = {len(offerings)}",
    ]
    for offering in offerings:
        lines.append(f"• {offering.course.code}: {offering.course.title}")
    lines.append("")
    lines.append(f"Number of Different Buildings = {len(buildings)}")
    lines.append("")
    lines.append(f"Distance Traveled = {format_meters(total_meters)}")
    return lines


class RoutePlanner:
    """Turns a day's itinerary into the route + summary handed to the renderer."""

    def __init__(self, distance: DistanceFn):
        if distance is None:
            raise ValueError("Distance calculator is required")
        self.distance = distance

    def build_visualization(self, itinerary: DailyItinerary) -> RouteVisualizationModel:
        if itinerary is None:
            raise ValueError("Itinerary is required")

        # the itinerary is normally sorted already; re-sort so callers can't break ordering
        entries = sorted(itinerary.entries, key=lambda e: e.start_time)

        path = build_route_path(entries, self.distance)
        offerings = distinct_offerings(entries)
        buildings = distinct_buildings(path.stops)
        summary = build_summary(itinerary.day, offerings, buildings, path.total_distance_meters)

        logger.info(
            "Route for %s: %d stop(s), %d segment(s), %.0f m",
            itinerary.day.label, len(path.stops), len(path.segments), path.total_distance_meters,
        )
        return RouteVisualizationModel.of(itinerary.day, offerings, buildings, path, summary)
