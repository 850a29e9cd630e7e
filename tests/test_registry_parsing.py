from datetime import datetime, time

import pytest

from campusroute.models import CENTER, CampusCoordinate, Weekday
from campusroute.parsing import cell_text, clean_header, parse_days, parse_time
from campusroute.registry import BuildingRegistry, CatalogCache

from conftest import make_building


def test_get_or_create_returns_one_instance_per_code():
    reg = BuildingRegistry()
    first = reg.get_or_create(" 22 ")
    assert first.code == "22"
    assert first.name == "22"
    assert first.location == CENTER
    assert reg.get_or_create("22", "Other", CampusCoordinate(0.1, 0.1)) is first
    assert len(reg) == 1


def test_registry_is_case_sensitive():
    reg = BuildingRegistry()
    reg.get_or_create("b7")
    assert reg.get("B7") is None
    assert "b7" in reg and "B7" not in reg


def test_register_replaces_placeholder():
    reg = BuildingRegistry()
    reg.get_or_create("22")
    real = make_building("22", 0.2, 0.3, "Engineering")
    reg.register(real)
    assert reg.get("22") is real
    assert reg.get_or_create("22") is real
    assert reg.get(None) is None
    with pytest.raises(ValueError):
        reg.get_or_create("  ")


def test_catalog_cache_dedups_by_key():
    cat = CatalogCache()
    c1 = cat.course(" SWE 316 ", "Design", "SWE")
    c2 = cat.course("SWE 316", "Other title", "ICS")
    assert c1 is c2
    assert c1.title == "Design"
    fallback = cat.course("", "", "")
    assert (fallback.code, fallback.title, fallback.department) == ("UNKNOWN", "UNKNOWN", "N/A")
    assert cat.instructor(" Dr. A ") is cat.instructor("Dr. A")
    assert cat.instructor("") is None
    assert (cat.course_count, cat.instructor_count) == (2, 1)


def test_clean_header():
    assert clean_header(" Start Time ") == "start_time"
    assert clean_header("Bldg.") == "bldg"
    assert clean_header("L/T/P Hour") == "l_t_p_hour"


@pytest.mark.parametrize(
    "value,text",
    [(None, ""), (float("nan"), ""), (12345.0, "12345"), (7, "7"), (" 22 ", "22"), (1.5, "1.5")],
)
def test_cell_text(value, text):
    assert cell_text(value) == text


def test_parse_days_letters():
    assert parse_days("UTR") == [Weekday.SUNDAY, Weekday.TUESDAY, Weekday.THURSDAY]
    assert parse_days("mw") == [Weekday.MONDAY, Weekday.WEDNESDAY]
    assert parse_days("H-X") == [Weekday.THURSDAY]
    assert parse_days("MM") == [Weekday.MONDAY]
    assert parse_days(None) == []


@pytest.mark.parametrize(
    "value,expected",
    [
        (time(9, 30, 15), time(9, 30)),
        (datetime(2024, 1, 1, 13, 50), time(13, 50)),
        (0.375, time(9, 0)),
        (930, time(9, 30)),
        (1350.0, time(13, 50)),
        ("0930", time(9, 30)),
        ("930", time(9, 30)),
        ("9:30", time(9, 30)),
        ("13:50:00", time(13, 50)),
        ("1:50 PM", time(13, 50)),
        ("12:30 PM", time(12, 30)),
        ("12:05 am", time(0, 5)),
        ("9:30a.m.", time(9, 30)),
        ("13:50 PM", None),
        ("1:50 XM", None),
        ("", None),
        ("TBA", None),
        ("2575", None),
        (None, None),
        (float("nan"), None),
    ],
)
def test_parse_time(value, expected):
    assert parse_time(value) == expected
