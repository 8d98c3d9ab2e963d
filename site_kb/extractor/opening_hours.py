# site_kb/extractor/opening_hours.py
"""Opening hours from short lines carrying a weekday and an ``HH:MM`` time."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from site_kb.extractor.models import OpeningHoursEntry

MAX_HOURS_LINE = 120

_FULL_DAYS = (
    "montag", "dienstag", "mittwoch", "donnerstag", "freitag", "samstag", "sonnabend", "sonntag",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)
# abbreviations only in title case or all caps, lower-case "so" and "do" are common words
_SHORT_DAYS = (
    "Tues", "Thurs", "Thur", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun",
    "Mo", "Di", "Mi", "Do", "Fr", "Sa", "So",
)
_SHORT_DAYS += tuple(day.upper() for day in _SHORT_DAYS)
_DAY = r"(?:(?i:%s)|%s)\b\.?" % ("|".join(_FULL_DAYS), "|".join(_SHORT_DAYS))
DAY_SPAN_RE = re.compile(r"\b%s(?:\s*(?:-|–|—|bis|to)\s*%s)?" % (_DAY, _DAY))

_TIME = r"\b([01]?\d|2[0-4]):([0-5]\d)\b"
TIME_RE = re.compile(_TIME)
TIME_RANGE_RE = re.compile(r"%s\s*(?:-|–|—|bis|to|until)\s*%s" % (_TIME, _TIME))


def _hhmm(hours: str, minutes: str) -> str:
    return f"{int(hours):02d}:{minutes}"


def _times(segment: str) -> Optional[Tuple[str, str]]:
    match = TIME_RANGE_RE.search(segment)
    if match:
        return _hhmm(match.group(1), match.group(2)), _hhmm(match.group(3), match.group(4))
    found = TIME_RE.findall(segment)
    if len(found) >= 2:
        return _hhmm(*found[0]), _hhmm(*found[1])
    return None


def _day_label(span: str) -> str:
    return re.sub(r"\s*([-–—])\s*", r"\1", span.strip())


def parse_hours_line(line: str) -> List[OpeningHoursEntry]:
    """Entries of one line, e.g. ``"Mo-Fr 09:00-18:00, Sa 10:00-14:00"`` gives two.

    Days without their own times (``"Mo und Di 09:00-17:00"``) share the
    times of the next day group. Trailing days without times take the times
    written before the first day (``"09:00-18:00 Uhr, Montag bis Freitag"``).
    """
    if len(line) > MAX_HOURS_LINE or not TIME_RE.search(line):
        return []
    spans = list(DAY_SPAN_RE.finditer(line))
    entries: List[OpeningHoursEntry] = []
    pending: List[str] = []
    for position, span in enumerate(spans):
        end = spans[position + 1].start() if position + 1 < len(spans) else len(line)
        times = _times(line[span.end():end])
        pending.append(_day_label(span.group()))
        if times is None:
            continue
        entries.append(
            OpeningHoursEntry(day=", ".join(pending), opens=times[0], closes=times[1], raw=line)
        )
        pending = []
    if pending:
        leading = _times(line[:spans[0].start()])
        if leading is not None:
            entries.append(
                OpeningHoursEntry(day=", ".join(pending), opens=leading[0], closes=leading[1], raw=line)
            )
    return entries


def extract_opening_hours(lines: Iterable[str]) -> List[OpeningHoursEntry]:
    """Candidate entries from all *lines*, de-duplicated by (day, opens, closes)."""
    entries: List[OpeningHoursEntry] = []
    seen: set[Tuple[str, str, str]] = set()
    for line in lines:
        for entry in parse_hours_line(line):
            if entry.key not in seen:
                seen.add(entry.key)
                entries.append(entry)
    return entries


__all__ = ["extract_opening_hours", "parse_hours_line"]
