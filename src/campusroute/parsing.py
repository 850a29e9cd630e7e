from __future__ import annotations

import math
import numbers
import re
from datetime import datetime, time
from typing import Any, List, Optional

from .models import Weekday

# 930, 0930, 9:30, 13:50:00, 1:50 PM, 9:30a.m.
TIME_TEXT_RE = re.compile(r"^(\d{1,2}):?(\d{2})(?::\d{2})?\s*(?:([ap])\.?m\.?)?$", re.IGNORECASE)


def clean_header(col_name: Any) -> str:
    """'Start Time' -> 'start_time', 'Bldg.' -> 'bldg'."""
    return str(col_name).strip().lower().replace(" ", "_").replace("/", "_").replace(".", "")


def cell_text(value: Any) -> str:
    """
    Sheet cell as trimmed text. Numeric cells holding whole numbers (CRNs,
    building codes) lose their '.0'; blanks and NaN become ''.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        value = float(value)
        if math.isnan(value):
            return ""
        rounded = round(value)
        if abs(value - rounded) < 0.0001:
            return str(int(rounded))
        return str(value)
    return str(value).strip()


def parse_days(token: Optional[str]) -> List[Weekday]:
    """
    Expands a sheet day token into weekdays, e.g. 'UTR' -> Sun, Tue, Thu.
    Letters: U M T W R/H F S. Unknown letters are ignored; repeats collapse.
    """
    out: List[Weekday] = []
    for ch in (token or "").strip():
        day = Weekday.from_letter(ch)
        if day is not None and day not in out:
            out.append(day)
    return out


def _hhmm(digits: str) -> Optional[time]:
    if len(digits) == 3:
        digits = "0" + digits
    if len(digits) != 4 or not digits.isdigit():
        return None
    h, m = int(digits[:2]), int(digits[2:])
    if not (0 <= h < 24 and 0 <= m < 60):
        return None
    return time(h, m)


def parse_time(value: Any) -> Optional[time]:
    """
    Reads a start/end cell. Accepts time/datetime objects, Excel day
    fractions (0.375 -> 09:00), HHMM numbers (930, 1350) and strings like
    '0930', '9:30', '13:50' or '1:50 PM'. Returns None when the cell is unusable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.time().replace(second=0, microsecond=0)
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, numbers.Real):
        value = float(value)
        if math.isnan(value):
            return None
        if 0 <= value < 1:
            total_seconds = round(value * 24 * 60 * 60)
            hours, rest = divmod(total_seconds, 3600)
            return time(hours % 24, (rest // 60) % 60)
        return _hhmm(f"{int(round(value)):04d}")

    match = TIME_TEXT_RE.match(str(value).strip())
    if match is None:
        return None
    h, m = int(match.group(1)), int(match.group(2))
    meridiem = match.group(3)
    if meridiem:
        if not 1 <= h <= 12:
            return None
        h = h % 12 + (12 if meridiem.lower() == "p" else 0)
    if not (0 <= h < 24 and 0 <= m < 60):
        return None
    return time(h, m)
