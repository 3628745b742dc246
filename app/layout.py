# Calendar grid and overlap layout helpers for the month, week and day views

import calendar
import datetime
import math
import re
from typing import Optional, List, Dict, Any, Tuple
from dateutil.relativedelta import relativedelta

MINUTES_PER_DAY = 24 * 60
MIN_VISIBLE_MINUTES = 15
DEFAULT_DURATION = datetime.timedelta(minutes=60)
EVENTS_PER_MONTH_CELL = 2

DARK_TEXT = "#111827"
LIGHT_TEXT = "#ffffff"
LUMINANCE_THRESHOLD = 0.6

_RGB_RE = re.compile(r"^rgba?\(\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)")


def start_of_week(day: datetime.date) -> datetime.date:
    """Sunday of the week holding day"""
    return day - datetime.timedelta(days=(day.weekday() + 1) % 7)


def week_days(day: datetime.date) -> List[datetime.date]:
    first = start_of_week(day)
    return [first + datetime.timedelta(days=i) for i in range(7)]


def day_bounds(day: datetime.date) -> Tuple[datetime.datetime, datetime.datetime]:
    """First and last moment of a day"""
    return datetime.datetime.combine(day, datetime.time.min), datetime.datetime.combine(day, datetime.time.max)


def visible_range(view: str, day: datetime.date) -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Range of wall clock time shown by a view.

    Args:
        view: "month", "week" or "day"
        day: Any day inside the period to show
    Returns:
        tuple: (first moment, last moment) as naive datetimes
    """
    if view == "month":
        first = day.replace(day=1)
        last = first + relativedelta(months=1) - datetime.timedelta(days=1)
    elif view == "week":
        first = start_of_week(day)
        last = first + datetime.timedelta(days=6)
    elif view == "day":
        first = last = day
    else:
        raise ValueError(f"Unknown view: {view}")
    return day_bounds(first)[0], day_bounds(last)[1]


def shift_date(view: str, day: datetime.date, step: int) -> datetime.date:
    """Previous (step -1) or next (step 1) period of a view, months clamp to their last day"""
    if view == "month":
        return day + relativedelta(months=step)
    if view == "week":
        return day + datetime.timedelta(days=7 * step)
    if view == "day":
        return day + datetime.timedelta(days=step)
    raise ValueError(f"Unknown view: {view}")


def _leading_blanks(year: int, month: int) -> int:
    # calendar.monthrange counts Monday as 0, the grid starts on Sunday
    return (calendar.monthrange(year, month)[0] + 1) % 7


def month_grid(year: int, month: int) -> List[Optional[int]]:
    """Day numbers of a month padded with None to whole Sunday based weeks"""
    days: List[Optional[int]] = [None] * _leading_blanks(year, month)
    days.extend(range(1, calendar.monthrange(year, month)[1] + 1))
    while len(days) % 7 != 0:
        days.append(None)
    return days


def mini_month_grid(year: int, month: int) -> List[Optional[int]]:
    """Like month_grid but without trailing padding"""
    days: List[Optional[int]] = [None] * _leading_blanks(year, month)
    days.extend(range(1, calendar.monthrange(year, month)[1] + 1))
    return days


def chunk_weeks(days: List[Any]) -> List[List[Any]]:
    return [days[i:i + 7] for i in range(0, len(days), 7)]


def to_local(dt: datetime.datetime, tz: Optional[datetime.tzinfo] = None) -> datetime.datetime:
    """Naive wall clock time of dt in tz, naive values are already wall clock"""
    if dt.tzinfo is None or tz is None:
        return dt.replace(tzinfo=None)
    return dt.astimezone(tz).replace(tzinfo=None)


def local_times(ev: Dict[str, Any], tz: Optional[datetime.tzinfo] = None) -> Tuple[datetime.datetime, datetime.datetime]:
    """Start and end of an event as wall clock times, a missing or non positive duration becomes an hour"""
    start = to_local(ev["start_time"], tz)
    end = ev.get("end_time")
    end = to_local(end, tz) if end is not None else None
    if end is None or end <= start:
        end = start + DEFAULT_DURATION
    return start, end


def events_starting_on(events: List[Dict[str, Any]], day: datetime.date, tz: Optional[datetime.tzinfo] = None) -> List[Dict[str, Any]]:
    """Events whose start falls on day, in start order"""
    found = [ev for ev in events if to_local(ev["start_time"], tz).date() == day]
    return sorted(found, key=lambda ev: to_local(ev["start_time"], tz))


def events_for_day(events: List[Dict[str, Any]], day: datetime.date, tz: Optional[datetime.tzinfo] = None) -> List[Dict[str, Any]]:
    """Events intersecting day, an event ending exactly at midnight does not reach into the next day"""
    day_start = datetime.datetime.combine(day, datetime.time.min)
    day_end = day_start + datetime.timedelta(days=1)
    result = []
    for ev in events:
        start, end = local_times(ev, tz)
        if start < day_end and end > day_start:
            result.append(ev)
    return result


def minutes_from_start_of_day(moment: datetime.datetime, day_start: datetime.datetime) -> int:
    """Minutes between midnight and moment, rounded half up and clamped to the day"""
    mins = math.floor((moment - day_start).total_seconds() / 60 + 0.5)
    return max(0, min(MINUTES_PER_DAY, mins))


def layout_day(events: List[Dict[str, Any]], day: datetime.date, tz: Optional[datetime.tzinfo] = None) -> List[Dict[str, Any]]:
    """
    Assign the events of a day to non overlapping columns.

    Events are placed in start order, longer events first on ties, into the
    first column whose last event has ended, or into a new column. All events
    of the day share the width given by the total number of columns.

    Args:
        events: Events to lay out, the ones not touching day are ignored
        day: Day to lay out
        tz: Timezone of the wall clock, None if event times already are wall clock
    Returns:
        List[Dict[str, Any]]: One entry per event with "event", "column", "columns"
        and the percentages "top", "height", "left", "width"
    """
    day_start = datetime.datetime.combine(day, datetime.time.min)
    items = []
    for ev in events_for_day(events, day, tz):
        start, end = local_times(ev, tz)
        start_min = minutes_from_start_of_day(start, day_start)
        end_min = minutes_from_start_of_day(end, day_start)
        duration = max(MIN_VISIBLE_MINUTES, end_min - start_min)
        items.append({"event": ev, "start_min": start_min, "end_min": start_min + duration, "duration": duration})

    items.sort(key=lambda item: (item["start_min"], -item["duration"]))

    column_ends: List[int] = []
    for item in items:
        for col, last_end in enumerate(column_ends):
            if item["start_min"] >= last_end:
                column_ends[col] = item["end_min"]
                item["column"] = col
                break
        else:
            column_ends.append(item["end_min"])
            item["column"] = len(column_ends) - 1

    columns = max(1, len(column_ends))
    width = 100 / columns
    return [
        {
            "event": item["event"],
            "column": item["column"],
            "columns": columns,
            "top": item["start_min"] / MINUTES_PER_DAY * 100,
            "height": item["duration"] / MINUTES_PER_DAY * 100,
            "left": item["column"] * width,
            "width": width,
        }
        for item in items
    ]


def _parse_color(color: str) -> Tuple[float, float, float]:
    text = str(getattr(color, "value", color)).strip()
    match = _RGB_RE.match(text)
    if match:
        return tuple(float(part) for part in match.groups())
    hex_part = text.lstrip("#")
    if len(hex_part) == 3:
        hex_part = "".join(c * 2 for c in hex_part)
    if len(hex_part) != 6:
        raise ValueError(f"invalid color: {color}")
    return int(hex_part[0:2], 16), int(hex_part[2:4], 16), int(hex_part[4:6], 16)


def contrast_color(color) -> str:
    """Readable text color on a background, dark on light backgrounds and white otherwise"""
    try:
        r, g, b = _parse_color(color)
    except (ValueError, TypeError):
        return LIGHT_TEXT
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return DARK_TEXT if luminance > LUMINANCE_THRESHOLD else LIGHT_TEXT
