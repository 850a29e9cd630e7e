from __future__ import annotations

import csv
import logging
import threading
import zipfile
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

import pandas as pd
import requests
from openpyxl.utils.exceptions import InvalidFileException

from .models import ActivityType, Building, CampusCoordinate, CourseOffering, DeliveryMode, MeetingSession, Room, TimeSlot
from .parsing import cell_text, clean_header, parse_days, parse_time
from .registry import BuildingRegistry, CatalogCache
from .schedule import TermSchedule

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")
# pre-2007 binary workbooks, pandas reads them only through xlrd
LEGACY_EXCEL_SUFFIXES = (".xls",)
DOWNLOAD_TIMEOUT_S = 30

# cleaned header -> field, first alias present wins
COLUMN_ALIASES: Dict[str, tuple] = {
    "crn": ("crn",),
    "course": ("course", "course_code", "code"),
    "department": ("department", "dept"),
    "section": ("section", "sec"),
    "title": ("title", "course_title", "course_name"),
    "modality": ("modality", "type", "activity", "schedule_type"),
    "days": ("days", "day"),
    "start": ("start", "start_time", "begin"),
    "end": ("end", "end_time", "finish"),
    "building": ("building", "bldg", "building_code"),
    "room": ("room", "room_code"),
    "instructor": ("instructor", "faculty", "instructor_name"),
}


class ScheduleLoadError(RuntimeError):
    """The schedule source could not be read or parsed."""


def load_buildings_csv(
    path: str | Path,
    image_width: float,
    image_height: float,
    registry: Optional[BuildingRegistry] = None,
) -> BuildingRegistry:
    """
    Reads the building seed with header: code,name,x,y
    x/y are pixel positions on the campus map image; they are normalized
    against the image size and registered (overwriting placeholders).
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Map image dimensions must be positive")
    registry = registry if registry is not None else BuildingRegistry()
    p = Path(path)

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        for i, row in enumerate(reader):
            if i == 0 and row and row[0].strip().lower() == "code":
                continue
            if len(row) < 4 or not any(cell.strip() for cell in row):
                continue
            code, name = row[0].strip(), row[1].strip()
            if not code:
                continue
            location = CampusCoordinate.from_pixels(
                float(row[2]), float(row[3]), image_width, image_height
            )
            registry.register(
                Building(code=code, name=name or code, location=location, entrances=(location,))
            )
    logger.info("Loaded %d building(s) from %s", len(registry), p)
    return registry


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and urlparse(source).scheme in ("http", "https")


def fetch_bytes(url: str) -> bytes:
    r = requests.get(url, timeout=DOWNLOAD_TIMEOUT_S)
    r.raise_for_status()
    return r.content


def _normalize_rows(records: Iterable[Dict[Any, Any]]) -> List[Dict[str, Any]]:
    return [{clean_header(k): v for k, v in rec.items() if k is not None} for rec in records]


def _read_excel(data) -> List[Dict[str, Any]]:
    df = pd.read_excel(data, sheet_name=0, dtype=object)
    return _normalize_rows(df.to_dict(orient="records"))


def _read_csv_text(text: str) -> List[Dict[str, Any]]:
    return _normalize_rows(csv.DictReader(StringIO(text)))


def read_schedule_rows(source: str | Path) -> List[Dict[str, Any]]:
    """
    Rows of the term sheet as dicts keyed by cleaned header names.
    Excel workbooks (first sheet) go through pandas; anything else is read as
    CSV. http(s) sources are downloaded first. Legacy .xls workbooks raise
    ValueError.
    """
    path = urlparse(str(source)).path if is_url(source) else str(source)
    suffix = Path(path).suffix.lower()
    if suffix in LEGACY_EXCEL_SUFFIXES:
        raise ValueError(f"{suffix} workbooks are not supported, save the sheet as .xlsx or .csv")

    if is_url(source):
        content = fetch_bytes(str(source))
        if suffix in EXCEL_SUFFIXES:
            return _read_excel(BytesIO(content))
        return _read_csv_text(content.decode("utf-8-sig"))

    if suffix in EXCEL_SUFFIXES:
        return _read_excel(Path(source))
    return _read_csv_text(Path(source).read_text(encoding="utf-8-sig"))


def _raw(row: Dict[str, Any], name: str) -> Any:
    for alias in COLUMN_ALIASES[name]:
        if alias in row:
            return row[alias]
    return None


def _field(row: Dict[str, Any], name: str) -> str:
    return cell_text(_raw(row, name))


def offerings_from_rows(
    rows: Iterable[Dict[str, Any]],
    registry: BuildingRegistry,
    catalog: Optional[CatalogCache] = None,
) -> List[CourseOffering]:
    """
    Groups sheet rows into one offering per CRN. Each row adds one session per
    day letter. Rows with no CRN, no building or no valid time window are
    skipped.
    """
    catalog = catalog if catalog is not None else CatalogCache()
    offerings: List[CourseOffering] = []
    by_crn: Dict[str, CourseOffering] = {}
    skipped = {"missing_crn": 0, "bad_time": 0, "missing_building": 0}

    for row in rows:
        crn = _field(row, "crn")
        if not crn:
            skipped["missing_crn"] += 1
            continue

        course = catalog.course(_field(row, "course"), _field(row, "title"), _field(row, "department"))
        instructor = catalog.instructor(_field(row, "instructor"))
        modality = _field(row, "modality")

        start = parse_time(_raw(row, "start"))
        end = parse_time(_raw(row, "end"))
        if start is None or end is None or not start < end:
            skipped["bad_time"] += 1
            continue
        slot = TimeSlot(start, end)

        building_code = _field(row, "building")
        if not building_code:
            skipped["missing_building"] += 1
            continue
        room_number = _field(row, "room") or "Unknown"
        room = Room(room_number, registry.get_or_create(building_code))

        offering = by_crn.get(crn)
        if offering is None:
            offering = CourseOffering(
                crn=crn,
                course=course,
                section=_field(row, "section"),
                delivery_mode=DeliveryMode.from_token(modality),
                instructor=instructor,
            )
            by_crn[crn] = offering
            offerings.append(offering)
        else:
            offering.fill_instructor(instructor)

        activity = ActivityType.from_token(modality)
        for day in parse_days(_field(row, "days")):
            offering.add_session(MeetingSession(day, slot, room, activity))

    if any(skipped.values()):
        logger.info("Skipped rows: %s", ", ".join(f"{k}={v}" for k, v in skipped.items()))
    return offerings


class ScheduleRepository:
    """
    Loads the term schedule once and hands the same TermSchedule to every
    caller. Concurrent first calls block on a lock so the source is read at
    most once. A failed load leaves nothing cached and the next call retries.
    """

    def __init__(
        self,
        source: str | Path,
        registry: BuildingRegistry,
        catalog: Optional[CatalogCache] = None,
    ):
        if registry is None:
            raise ValueError("Building registry is required")
        self.source = source
        self.registry = registry
        self.catalog = catalog if catalog is not None else CatalogCache()
        self._lock = threading.Lock()
        self._cache: Optional[TermSchedule] = None

    def get_term_schedule(self) -> TermSchedule:
        result = self._cache
        if result is not None:
            return result
        with self._lock:
            if self._cache is None:
                self._cache = self._load()
            return self._cache

    def _load(self) -> TermSchedule:
        logger.info("Loading term schedule from %s", self.source)
        try:
            rows = read_schedule_rows(self.source)
        except (
            OSError,
            ValueError,
            KeyError,
            ImportError,
            csv.Error,
            zipfile.BadZipFile,
            InvalidFileException,
            requests.RequestException,
        ) as e:
            raise ScheduleLoadError(f"Failed to read schedule: {self.source}") from e
        schedule = TermSchedule(offerings_from_rows(rows, self.registry, self.catalog))
        logger.info("Loaded %d offering(s)", len(schedule))
        return schedule
