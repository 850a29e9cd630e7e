# Campus route planner: schedule index, daily itinerary, walking route and route drawing
from .distance import CalibrationConfig, DistanceCalculator, calibrate_scale, calibrated_calculator
from .io import ScheduleLoadError, ScheduleRepository, load_buildings_csv
from .models import (
    ActivityType,
    Building,
    CampusCoordinate,
    Course,
    CourseOffering,
    DeliveryMode,
    Instructor,
    MeetingSession,
    Room,
    RoutePath,
    RouteSegment,
    RouteVisualizationModel,
    TimeSlot,
    Weekday,
)
from .planner import RoutePlanner
from .registry import BuildingRegistry, CatalogCache
from .render import BackgroundImage, RenderConfig, render_route
from .schedule import DailyItinerary, ItineraryEntry, ScheduleService, TermSchedule, build_itinerary, parse_crns

__all__ = [
    "ActivityType",
    "BackgroundImage",
    "Building",
    "BuildingRegistry",
    "CalibrationConfig",
    "CampusCoordinate",
    "CatalogCache",
    "Course",
    "CourseOffering",
    "DailyItinerary",
    "DeliveryMode",
    "DistanceCalculator",
    "Instructor",
    "ItineraryEntry",
    "MeetingSession",
    "RenderConfig",
    "Room",
    "RoutePath",
    "RoutePlanner",
    "RouteSegment",
    "RouteVisualizationModel",
    "ScheduleLoadError",
    "ScheduleRepository",
    "ScheduleService",
    "TermSchedule",
    "TimeSlot",
    "Weekday",
    "build_itinerary",
    "calibrate_scale",
    "calibrated_calculator",
    "load_buildings_csv",
    "parse_crns",
    "render_route",
]
