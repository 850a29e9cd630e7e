import pytest

from campusroute.models import Weekday
from campusroute.schedule import (
    DailyItinerary,
    ItineraryEntry,
    ScheduleService,
    TermSchedule,
    build_itinerary,
    parse_crns,
)

from conftest import MON, TUE, make_offering


class _FakeRepo:
    def __init__(self, schedule):
        self.schedule = schedule
        self.calls = 0

    def get_term_schedule(self):
        self.calls += 1
        return self.schedule


def test_find_all_by_crns_keeps_request_order_and_drops_misses():
    a, b = make_offering("A", "C1"), make_offering("B", "C2")
    schedule = TermSchedule([a, b])
    assert schedule.find_all_by_crns(["B", "Z", "A"]) == [b, a]


def test_find_all_by_crns_returns_duplicates_for_duplicate_requests():
    a = make_offering("A", "C1")
    assert TermSchedule([a]).find_all_by_crns(["A", "A"]) == [a, a]


def test_find_by_crn_misses_never_raise():
    schedule = TermSchedule([make_offering("A", "C1")])
    assert schedule.find_by_crn("Q") is None
    assert schedule.find_by_crn("") is None
    assert schedule.find_by_crn("   ") is None
    assert schedule.find_by_crn(None) is None
    assert schedule.find_by_crn(" A ").crn == "A"
    assert "A" in schedule and "Q" not in schedule


def test_first_offering_wins_on_duplicate_crn():
    first, second = make_offering("A", "C1"), make_offering("A", "C2")
    schedule = TermSchedule([first, None, second])
    assert len(schedule) == 1
    assert schedule.find_by_crn("A") is first


def test_all_offerings_is_insertion_ordered_snapshot():
    offerings = [make_offering(crn, "C") for crn in ("3", "1", "2")]
    schedule = TermSchedule(offerings)
    assert [o.crn for o in schedule.all_offerings()] == ["3", "1", "2"]
    assert isinstance(schedule.all_offerings(), tuple)


def test_parse_crns_splits_trims_and_dedups():
    assert parse_crns(" 111, 222;333\n111  abc ABC ") == ["111", "222", "333", "abc", "ABC"]
    assert parse_crns("") == []
    assert parse_crns(None) == []


def test_build_itinerary_filters_day_and_sorts(b22, b59):
    late = make_offering("1", "LATE", [(MON, "13:00", "13:50", b22), (TUE, "08:00", "08:50", b22)])
    early = make_offering("2", "EARLY", [(MON, "09:00", "09:50", b59)])
    itinerary = build_itinerary([late, early], MON)
    assert itinerary.day is MON
    assert [e.offering.crn for e in itinerary.entries] == ["2", "1"]
    assert [str(e.start_time) for e in itinerary.entries] == ["09:00:00", "13:00:00"]


def test_build_itinerary_sort_is_stable(b22, b59, b11):
    x = make_offering("X", "X", [(MON, "10:00", "10:50", b22)])
    y = make_offering("Y", "Y", [(MON, "10:00", "11:15", b59)])
    z = make_offering("Z", "Z", [(MON, "08:00", "08:50", b11), (MON, "10:00", "10:30", b11)])
    itinerary = build_itinerary([x, y, z], MON)
    crns = [e.offering.crn for e in itinerary.entries]
    assert crns == ["Z", "X", "Y", "Z"]


def test_build_itinerary_empty_and_missing_day(b22):
    assert len(build_itinerary([], MON)) == 0
    with pytest.raises(ValueError):
        build_itinerary([make_offering("1", "C", [(MON, "09:00", "09:50", b22)])], None)


def test_daily_itinerary_drops_none_and_requires_day(b22):
    o = make_offering("1", "C", [(MON, "09:00", "09:50", b22)])
    entry = ItineraryEntry(o, o.sessions[0])
    assert DailyItinerary(MON, [None, entry]).entries == (entry,)
    with pytest.raises(ValueError):
        DailyItinerary(None, [])
    with pytest.raises(ValueError):
        ItineraryEntry(o, None)


def test_service_resolves_crns_through_repository(b22):
    o = make_offering("1", "C", [(Weekday.WEDNESDAY, "09:00", "09:50", b22)])
    repo = _FakeRepo(TermSchedule([o]))
    service = ScheduleService(repo)
    itinerary = service.daily_itinerary(["1", "2"], Weekday.WEDNESDAY)
    assert len(itinerary) == 1
    assert service.missing_crns(["1", "2"], [o]) == ["2"]
    with pytest.raises(ValueError):
        ScheduleService(None)


def test_service_lists_unique_codes_and_titles_ignoring_case():
    offerings = [
        make_offering("1", "swe 316", title="Design"),
        make_offering("2", "SWE 316", title="design"),
        make_offering("3", "ICS 104", title="Intro"),
    ]
    assert ScheduleService.list_course_codes(offerings) == ["ICS 104", "swe 316"]
    assert ScheduleService.list_course_titles(offerings) == ["Design", "Intro"]
