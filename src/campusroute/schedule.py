from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import time
from typing import Dict, Iterable, List, Optional, Tuple

from .models import CourseOffering, MeetingSession, Weekday

logger = logging.getLogger(__name__)

CRN_SPLIT_RE = re.compile(r"[\s,;]+")


class TermSchedule:
    """Read-only CRN -> offering index. Keeps insertion order; the first offering seen for a CRN wins."""

    def __init__(self, offerings: Iterable[Optional[CourseOffering]]):
        if offerings is None:
            raise ValueError("Offerings collection is required")
        by_crn: Dict[str, CourseOffering] = {}
        for offering in offerings:
            if offering is None:
                continue
            if offering.crn in by_crn:
                logger.debug("Duplicate CRN %s ignored", offering.crn)
                continue
            by_crn[offering.crn] = offering
        self._by_crn = by_crn

    def all_offerings(self) -> Tuple[CourseOffering, ...]:
        return tuple(self._by_crn.values())

    def find_by_crn(self, crn: Optional[str]) -> Optional[CourseOffering]:
        if crn is None or not crn.strip():
            return None
        return self._by_crn.get(crn.strip())

    def find_all_by_crns(self, crns: Iterable[str]) -> List[CourseOffering]:
        """
        Resolve CRNs in the order given. Unknown CRNs are dropped silently.
        A CRN requested twice is returned twice; callers dedup their input
        (see parse_crns) when they don't want that.
        """
        if crns is None:
            raise ValueError("CRNs iterable is required")
        out: List[CourseOffering] = []
        for crn in crns:
            offering = self.find_by_crn(crn)
            if offering is not None:
                out.append(offering)
        return out

    def __len__(self) -> int:
        return len(self._by_crn)

    def __contains__(self, crn: object) -> bool:
        return isinstance(crn, str) and self.find_by_crn(crn) is not None


def parse_crns(raw: Optional[str]) -> List[str]:
    """
    Splits free-form CRN input on whitespace, commas and semicolons.
    Tokens are trimmed and deduplicated in first-seen order; case is kept.
    """
    if raw is None:
        return []
    out: List[str] = []
    seen = set()
    for token in CRN_SPLIT_RE.split(raw):
        token = token.strip()
        if token and token not in seen:
            seen.add(token)
            out.append(token)
    return out


@dataclass(frozen=True)
class ItineraryEntry:
    offering: CourseOffering
    session: MeetingSession

    def __post_init__(self):
        if self.offering is None:
            raise ValueError("Course offering is required")
        if self.session is None:
            raise ValueError("Meeting session is required")

    @property
    def start_time(self) -> time:
        return self.session.time_slot.start

    @property
    def end_time(self) -> time:
        return self.session.time_slot.end


class DailyItinerary:
    def __init__(self, day: Weekday, entries: Optional[Iterable[Optional[ItineraryEntry]]] = None):
        if day is None:
            raise ValueError("Day is required")
        self.day = day
        self._entries: List[ItineraryEntry] = [e for e in (entries or ()) if e is not None]

    @property
    def entries(self) -> Tuple[ItineraryEntry, ...]:
        return tuple(self._entries)

    def sort_by_start_time(self) -> None:
        # list.sort is stable: same start time keeps encounter order
        self._entries.sort(key=lambda e: e.start_time)

    def __len__(self) -> int:
        return len(self._entries)


def build_itinerary(offerings: Iterable[CourseOffering], day: Optional[Weekday]) -> DailyItinerary:
    if day is None:
        raise ValueError("Day is required")
    entries = [
        ItineraryEntry(offering, session)
        for offering in offerings
        for session in offering.sessions_on(day)
    ]
    itinerary = DailyItinerary(day, entries)
    itinerary.sort_by_start_time()
    return itinerary


class ScheduleService:
    """Schedule queries on top of anything exposing get_term_schedule()."""

    def __init__(self, repository):
        if repository is None:
            raise ValueError("Schedule repository is required")
        self.repository = repository

    def offerings_by_crns(self, crns: Iterable[str]) -> List[CourseOffering]:
        if crns is None:
            raise ValueError("CRN collection is required")
        return self.repository.get_term_schedule().find_all_by_crns(crns)

    def daily_itinerary(self, crns: Iterable[str], day: Weekday) -> DailyItinerary:
        return self.daily_itinerary_from_offerings(self.offerings_by_crns(crns), day)

    def daily_itinerary_from_offerings(
        self, offerings: Iterable[CourseOffering], day: Weekday
    ) -> DailyItinerary:
        return build_itinerary(offerings, day)

    @staticmethod
    def missing_crns(requested: Iterable[str], offerings: Iterable[CourseOffering]) -> List[str]:
        found = {o.crn for o in offerings}
        return [crn for crn in requested if crn.strip() not in found]

    @staticmethod
    def list_course_codes(offerings: Iterable[CourseOffering]) -> List[str]:
        return _unique_casefold(o.course.code for o in offerings if o is not None)

    @staticmethod
    def list_course_titles(offerings: Iterable[CourseOffering]) -> List[str]:
        return _unique_casefold(o.course.title for o in offerings if o is not None)


def _unique_casefold(values: Iterable[str]) -> List[str]:
    # first spelling wins for values equal ignoring case
    picked: Dict[str, str] = {}
    for v in values:
        picked.setdefault(v.lower(), v)
    return [picked[k] for k in sorted(picked)]
