from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple


def _required(value: Optional[str], what: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{what} is required")
    return str(value).strip()


@dataclass(frozen=True)
class CampusCoordinate:
    """
    Normalized (0..1) point on the campus map image.
    x grows to the right, y grows downward, like image pixels.
    """

    x: float
    y: float

    def __post_init__(self):
        if not 0.0 <= self.x <= 1.0:
            raise ValueError(f"x must be within [0,1], got {self.x!r}")
        if not 0.0 <= self.y <= 1.0:
            raise ValueError(f"y must be within [0,1], got {self.y!r}")

    @classmethod
    def from_pixels(
        cls,
        pixel_x: float,
        pixel_y: float,
        image_width: float,
        image_height: float,
    ) -> "CampusCoordinate":
        if image_width <= 0 or image_height <= 0:
            raise ValueError("Map image dimensions must be positive")
        x = min(1.0, max(0.0, pixel_x / image_width))
        y = min(1.0, max(0.0, pixel_y / image_height))
        return cls(x, y)


CENTER = CampusCoordinate(0.5, 0.5)


@dataclass(frozen=True)
class Building:
    code: str
    name: str
    location: CampusCoordinate
    entrances: Tuple[CampusCoordinate, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "code", _required(self.code, "Building code"))
        object.__setattr__(self, "name", _required(self.name, "Building name"))
        if self.location is None:
            raise ValueError("Building location is required")
        object.__setattr__(
            self, "entrances", tuple(e for e in (self.entrances or ()) if e is not None)
        )

    @property
    def primary_entrance(self) -> CampusCoordinate:
        return self.entrances[0] if self.entrances else self.location

    def __str__(self) -> str:
        return f"{self.code} ({self.name})"


@dataclass(frozen=True)
class Course:
    code: str
    title: str
    department: str

    def __post_init__(self):
        object.__setattr__(self, "code", _required(self.code, "Course code"))
        object.__setattr__(self, "title", _required(self.title, "Course title"))
        object.__setattr__(self, "department", _required(self.department, "Department"))

    def __str__(self) -> str:
        return f"{self.code} - {self.title}"


@dataclass(frozen=True)
class Instructor:
    name: str
    email: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "name", _required(self.name, "Instructor name"))
        email = (self.email or "").strip()
        object.__setattr__(self, "email", email or None)

    def __str__(self) -> str:
        return self.name if self.email is None else f"{self.name} ({self.email})"


def floor_from_room(number: Optional[str]) -> int:
    """First digit found in the room token, e.g. '2-120' -> 2, 'B12' -> 1, 'LAB' -> 0."""
    for ch in number or "":
        if ch.isdigit():
            return int(ch)
    return 0


@dataclass(frozen=True)
class Room:
    number: str
    building: Building
    floor: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "number", _required(self.number, "Room number"))
        if self.building is None:
            raise ValueError("Building is required")
        if self.floor is None:
            object.__setattr__(self, "floor", floor_from_room(self.number))

    def __str__(self) -> str:
        return f"{self.building.code}-{self.number}"


@dataclass(frozen=True)
class TimeSlot:
    start: time
    end: time

    def __post_init__(self):
        if self.start is None or self.end is None:
            raise ValueError("Start and end time are required")
        if not self.start < self.end:
            raise ValueError(f"End time must be after start time ({self.start}-{self.end})")

    @property
    def duration(self) -> timedelta:
        day = datetime.min
        return datetime.combine(day, self.end) - datetime.combine(day, self.start)

    def overlaps(self, other: "TimeSlot") -> bool:
        if other is None:
            raise ValueError("Other time slot is required")
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{self.start:%H:%M} - {self.end:%H:%M}"


class Weekday(Enum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: Optional[str]) -> "Weekday":
        """Full day name, case-insensitive. Anything else means Monday."""
        if value is None:
            return cls.MONDAY
        return cls.__members__.get(str(value).strip().upper(), cls.MONDAY)

    @classmethod
    def from_letter(cls, letter: str) -> Optional["Weekday"]:
        return _DAY_LETTERS.get(letter.upper())


_DAY_LETTERS = {
    "U": Weekday.SUNDAY,
    "M": Weekday.MONDAY,
    "T": Weekday.TUESDAY,
    "W": Weekday.WEDNESDAY,
    "R": Weekday.THURSDAY,
    "H": Weekday.THURSDAY,
    "F": Weekday.FRIDAY,
    "S": Weekday.SATURDAY,
}


class _Modality(Enum):
    @classmethod
    def from_token(cls, token: Optional[str]):
        key = (token or "").strip().upper()
        if key in ("LEC", "LECT"):
            return cls.LECTURE
        if key == "LAB":
            return cls.LAB
        if key in ("COP", "INT"):
            return cls.INTERNSHIP
        return cls.OTHER


class ActivityType(_Modality):
    LECTURE = "lecture"
    LAB = "lab"
    INTERNSHIP = "internship"
    OTHER = "other"


class DeliveryMode(_Modality):
    LECTURE = "lecture"
    LAB = "lab"
    INTERNSHIP = "internship"
    OTHER = "other"


@dataclass(frozen=True)
class MeetingSession:
    day: Weekday
    time_slot: TimeSlot
    room: Room
    activity_type: ActivityType = ActivityType.OTHER

    def __post_init__(self):
        if self.day is None:
            raise ValueError("Day is required")
        if self.time_slot is None:
            raise ValueError("Time slot is required")
        if self.room is None:
            raise ValueError("Room is required")
        if self.activity_type is None:
            object.__setattr__(self, "activity_type", ActivityType.OTHER)

    @property
    def building(self) -> Building:
        return self.room.building


class CourseOffering:
    """
    One CRN's worth of scheduling data.

    Sessions are append-only. The instructor can be patched once through
    fill_instructor() when the first sheet row for the CRN left it blank.
    """

    def __init__(
        self,
        crn: str,
        course: Course,
        section: Optional[str] = "",
        delivery_mode: Optional[DeliveryMode] = DeliveryMode.OTHER,
        instructor: Optional[Instructor] = None,
    ):
        self.crn = _required(crn, "CRN")
        if course is None:
            raise ValueError("Course is required")
        self.course = course
        self.section = (section or "").strip()
        self.delivery_mode = delivery_mode or DeliveryMode.OTHER
        self._instructor = instructor
        self._sessions: List[MeetingSession] = []

    @property
    def instructor(self) -> Optional[Instructor]:
        return self._instructor

    def fill_instructor(self, instructor: Optional[Instructor]) -> bool:
        """Set the instructor only if none is known yet. Returns True when it was written."""
        if self._instructor is not None or instructor is None:
            return False
        self._instructor = instructor
        return True

    def add_session(self, session: MeetingSession) -> None:
        if session is None:
            raise ValueError("Session is required")
        self._sessions.append(session)

    @property
    def sessions(self) -> Tuple[MeetingSession, ...]:
        return tuple(self._sessions)

    def sessions_on(self, day: Weekday) -> List[MeetingSession]:
        return [s for s in self._sessions if s.day == day]

    def __repr__(self) -> str:
        return f"CourseOffering(crn={self.crn!r}, course={self.course.code!r}, sessions={len(self._sessions)})"


@dataclass(frozen=True)
class RouteSegment:
    from_building: Building
    to_building: Building
    distance_meters: float

    def __post_init__(self):
        if self.from_building is None or self.to_building is None:
            raise ValueError("Both segment buildings are required")
        if self.distance_meters < 0:
            raise ValueError("Distance cannot be negative")


@dataclass(frozen=True)
class RoutePath:
    stops: Tuple[Building, ...] = ()
    segments: Tuple[RouteSegment, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "stops", tuple(self.stops))
        object.__setattr__(self, "segments", tuple(self.segments))
        if self.stops and len(self.segments) > len(self.stops) - 1:
            raise ValueError("A route cannot have more segments than stops - 1")
        if not self.stops and self.segments:
            raise ValueError("Segments require stops")

    @property
    def total_distance_meters(self) -> float:
        total = 0.0
        for seg in self.segments:
            total += seg.distance_meters
        return total

    @property
    def is_empty(self) -> bool:
        return not self.stops


@dataclass(frozen=True)
class RouteVisualizationModel:
    day: Weekday
    offerings: Tuple[CourseOffering, ...]
    buildings: Tuple[Building, ...]
    path: RoutePath
    summary_lines: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def of(
        cls,
        day: Weekday,
        offerings: Iterable[CourseOffering],
        buildings: Iterable[Building],
        path: RoutePath,
        summary_lines: Iterable[str],
    ) -> "RouteVisualizationModel":
        return cls(day, tuple(offerings), tuple(buildings), path, tuple(summary_lines))
