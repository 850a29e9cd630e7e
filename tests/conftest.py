from datetime import time

import pytest

from campusroute.models import (
    ActivityType,
    Building,
    CampusCoordinate,
    Course,
    CourseOffering,
    MeetingSession,
    Room,
    TimeSlot,
    Weekday,
)
from campusroute.registry import BuildingRegistry


def make_building(code, x, y, name=None):
    return Building(code, name or f"Building {code}", CampusCoordinate(x, y))


def make_offering(crn, code, sessions=(), title=None):
    """sessions: iterable of (day, "HH:MM", "HH:MM", building)."""
    offering = CourseOffering(crn, Course(code, title or f"{code} title", "SWE"))
    for day, start, end, building in sessions:
        h1, m1 = map(int, start.split(":"))
        h2, m2 = map(int, end.split(":"))
        offering.add_session(
            MeetingSession(day, TimeSlot(time(h1, m1), time(h2, m2)), Room("120", building), ActivityType.LECTURE)
        )
    return offering


@pytest.fixture
def b22():
    return make_building("22", 0.2, 0.3)


@pytest.fixture
def b59():
    return make_building("59", 0.5, 0.7)


@pytest.fixture
def b11():
    return make_building("11", 0.8, 0.3)


@pytest.fixture
def registry(b22, b59, b11):
    reg = BuildingRegistry()
    for b in (b22, b59, b11):
        reg.register(b)
    return reg


MON = Weekday.MONDAY
TUE = Weekday.TUESDAY
