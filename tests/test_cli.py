import argparse
from datetime import time

import pytest

from campusroute.cli import fmt_time, main, parse_size

SHEET = """CRN,Course,Title,Days,Start,End,Building,Room,Instructor
10001,SWE 316,Software Design,MW,0900,0950,22,120,Dr. A
10002,ICS 104,Programming,MT,1000,1050,59,2-105,Dr. B
"""

BUILDINGS = "code,name,x,y\n22,Engineering,240,240\n59,Library,600,560\n11,Gym,960,240\n"


@pytest.fixture
def files(tmp_path):
    sheet = tmp_path / "term.csv"
    sheet.write_text(SHEET, encoding="utf-8")
    seed = tmp_path / "buildings.csv"
    seed.write_text(BUILDINGS, encoding="utf-8")
    return sheet, seed


def test_fmt_time():
    assert fmt_time(time(14, 5)) == "2:05pm"
    assert fmt_time(time(0, 0)) == "12:00am"
    assert fmt_time(time(12, 30)) == "12:30pm"


def test_parse_size():
    assert parse_size("1200x800") == (1200.0, 800.0)
    for bad in ("1200", "0x800", "axb"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_size(bad)


def test_full_run_prints_summary_and_writes_svg(files, tmp_path, capsys):
    sheet, seed = files
    out = tmp_path / "route.svg"
    rc = main([
        str(sheet), "--crns", "10001, 10002 99999", "--day", "monday",
        "--buildings", str(seed), "--map-size", "1200x800",
        "--map", "campus.png", "--svg", str(out), "--table",
    ])
    captured = capsys.readouterr()
    assert rc == 0
    assert "Selected Day: Monday" in captured.out
    assert "Number of Courses = 2" in captured.out
    assert "• SWE 316: Software Design" in captured.out
    assert "Distance Traveled = 350 m" in captured.out
    assert "9:00am-9:50am" in captured.out
    assert "The following CRNs were not found: 99999" in captured.err

    svg = out.read_text(encoding="utf-8")
    assert 'href="campus.png"' in svg
    assert svg.count("<line") == 1
    assert ">START</text>" in svg and ">END</text>" in svg


def test_day_without_sessions(files, capsys):
    sheet, _ = files
    rc = main([str(sheet), "--crns", "10001", "--day", "Sunday"])
    assert rc == 0
    assert "No sessions found for Sunday with the selected CRNs." in capsys.readouterr().out


def test_blank_crn_input_is_rejected(files, capsys):
    sheet, _ = files
    assert main([str(sheet), "--crns", " ,; "]) == 1
    assert "Enter at least one CRN." in capsys.readouterr().err


def test_missing_schedule_file(tmp_path, capsys):
    rc = main([str(tmp_path / "nope.csv"), "--crns", "1"])
    assert rc == 1
    assert "Load failed" in capsys.readouterr().err


def test_buildings_need_map_size(files, capsys):
    sheet, seed = files
    assert main([str(sheet), "--crns", "10001", "--buildings", str(seed)]) == 1
    assert "--map-size" in capsys.readouterr().err


def test_map_needs_map_size(files, tmp_path, capsys):
    sheet, _ = files
    out = tmp_path / "route.svg"
    rc = main([str(sheet), "--crns", "10001", "--map", "campus.png", "--svg", str(out)])
    assert rc == 1
    assert "--map needs --map-size" in capsys.readouterr().err
    assert not out.exists()


def test_corrupt_workbook_reports_load_failure(tmp_path, capsys):
    sheet = tmp_path / "term.xlsx"
    sheet.write_bytes(b"PK\x03\x04" + b"garbage" * 20)
    assert main([str(sheet), "--crns", "10001"]) == 1
    assert "Load failed" in capsys.readouterr().err
