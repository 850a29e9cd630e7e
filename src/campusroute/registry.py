from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .models import CENTER, Building, CampusCoordinate, Course, Instructor

logger = logging.getLogger(__name__)


class BuildingRegistry:
    """
    One Building instance per code. Codes are trimmed but stay case-sensitive,
    so "b22" and "B22" are different buildings here.
    """

    def __init__(self) -> None:
        self._buildings: Dict[str, Building] = {}

    def get_or_create(
        self,
        code: str,
        name: Optional[str] = None,
        location: Optional[CampusCoordinate] = None,
    ) -> Building:
        if code is None or not code.strip():
            raise ValueError("Building code is required")
        key = code.strip()
        existing = self._buildings.get(key)
        if existing is not None:
            if location is not None and existing.location != location:
                logger.debug("Ignoring new location %s for known building %s", location, key)
            return existing

        if location is None:
            logger.warning("No coordinates for building %s, placing it at map center", key)
        building = Building(
            code=key,
            name=name.strip() if name and name.strip() else key,
            location=location if location is not None else CENTER,
        )
        self._buildings[key] = building
        return building

    def register(self, building: Building) -> None:
        """Add a fully populated building, replacing any placeholder with the same code."""
        self._buildings[building.code] = building

    def get(self, code: Optional[str]) -> Optional[Building]:
        if code is None:
            return None
        return self._buildings.get(code.strip())

    def all(self) -> List[Building]:
        return list(self._buildings.values())

    def __len__(self) -> int:
        return len(self._buildings)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip() in self._buildings


class CatalogCache:
    """Lookup-or-insert tables so every sheet row for a course/instructor shares one instance."""

    def __init__(self) -> None:
        self._courses: Dict[str, Course] = {}
        self._instructors: Dict[str, Instructor] = {}

    def course(self, code: Optional[str], title: Optional[str], department: Optional[str]) -> Course:
        key = (code or "").strip() or "UNKNOWN"
        course = self._courses.get(key)
        if course is None:
            course = Course(
                code=key,
                title=(title or "").strip() or key,
                department=(department or "").strip() or "N/A",
            )
            self._courses[key] = course
        return course

    def instructor(self, name: Optional[str]) -> Optional[Instructor]:
        key = (name or "").strip()
        if not key:
            return None
        instructor = self._instructors.get(key)
        if instructor is None:
            instructor = Instructor(key)
            self._instructors[key] = instructor
        return instructor

    @property
    def course_count(self) -> int:
        return len(self._courses)

    @property
    def instructor_count(self) -> int:
        return len(self._instructors)
