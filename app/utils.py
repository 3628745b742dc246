# Utility functions for the eventcal api

import logging
from dateutil import parser
from typing import Optional, Dict, Any, Tuple
from fastapi import HTTPException
import datetime

logger = logging.getLogger(__name__)

# Fields that can not be cleared by an update, a null for them is ignored
REQUIRED_EVENT_FIELDS = ("title", "start_time", "end_time", "color", "all_day", "is_recurring")


def to_utc(dt: datetime.datetime) -> datetime.datetime:
    """Return an aware UTC datetime, naive values are taken to be UTC already"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def to_naive_utc(dt: datetime.datetime) -> datetime.datetime:
    """Return a naive UTC datetime as stored in the database"""
    return to_utc(dt).replace(tzinfo=None)


def validate_time_format(time_str):
    """
    Validate time format (ISO 8601) and return as aware UTC datetime object

    Args:
        time_str: Time string to validate

    Returns:
        datetime: Parsed datetime object if valid, None otherwise
    """
    try:
        return to_utc(parser.isoparse(time_str))
    except (ValueError, TypeError, OverflowError):
        logger.error(f"Invalid time format: {time_str}")
        return None


def parse_date_value(val) -> Optional[datetime.date]:
    """
    Normalize input to a date.

    Args:
        val: Input value (date, datetime, ISO 8601 date or datetime string)
    Returns:
        datetime.date or None if the value can not be read as a date
    """
    if isinstance(val, datetime.datetime):
        return to_utc(val).date()
    if isinstance(val, datetime.date):
        return val
    if isinstance(val, str):
        dt = validate_time_format(val)
        return dt.date() if dt is not None else None
    return None


def parse_window(start_date: Optional[str], end_date: Optional[str]) -> Optional[Tuple[datetime.datetime, datetime.datetime]]:
    """
    Parse the query window of an event listing.

    Returns:
        tuple: (start, end) as aware UTC datetimes, or None if no window was given

    Raises:
        HTTPException: If only one bound is given, a bound is malformed or start is not before end.
    """
    if not start_date and not end_date:
        return None
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail="Both 'startDate' and 'endDate' must be provided")

    start_dt = validate_time_format(start_date)
    if start_dt is None:
        raise HTTPException(status_code=400, detail=f"Invalid startDate time format: {start_date}")
    end_dt = validate_time_format(end_date)
    if end_dt is None:
        raise HTTPException(status_code=400, detail=f"Invalid endDate time format: {end_date}")
    if start_dt >= end_dt:
        raise HTTPException(status_code=400, detail="'startDate' must be before 'endDate'")
    return start_dt, end_dt


def overlaps(start, end, window_start, window_end) -> bool:
    """Closed interval overlap, an event touching a window bound is inside the window"""
    return start <= window_end and end >= window_start


def event_sort_key(ev: Dict[str, Any]):
    return (ev.get("start_time") or datetime.datetime.min.replace(tzinfo=datetime.timezone.utc), ev.get("id") or 0)


def validate_event_consistency(ev: Dict[str, Any]):
    """
    Check the rules spanning several fields of an event document.

    Raises:
        HTTPException: 400 if the end is not after the start, a recurring event has no
        pattern, or the recurrence ends before the event starts.
    """
    start = ev.get("start_time")
    end = ev.get("end_time")
    if start is None or end is None:
        raise HTTPException(status_code=400, detail="Title, start time, and end time are required")
    if end <= start:
        raise HTTPException(status_code=400, detail="End time must be after start time")

    if ev.get("is_recurring") and not ev.get("recurrence_pattern"):
        raise HTTPException(status_code=400, detail="Recurring events need a recurrence pattern")
    recurrence_end = ev.get("recurrence_end")
    if recurrence_end is not None and recurrence_end < to_utc(start).date():
        raise HTTPException(status_code=400, detail="Recurrence end must not be before the start date")


def collect_update_changes(update: Dict[str, Any]) -> Dict[str, Any]:
    """Drop explicit nulls for fields that can not be cleared"""
    return {k: v for k, v in update.items() if v is not None or k not in REQUIRED_EVENT_FIELDS}


def enum_value(val):
    return val.value if hasattr(val, "value") else val


def event_to_db_params(ev: Dict[str, Any]) -> Dict[str, Any]:
    """Convert event fields to the values stored in the events table"""
    params = {}
    for key, val in ev.items():
        if isinstance(val, datetime.datetime):
            val = to_naive_utc(val)
        params[key] = enum_value(val)
    return params


def row_to_event(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a row of the events table to an event dictionary.

    Args:
        row: Row as returned by a dictionary cursor
    Returns:
        Dict[str, Any]: Event with aware UTC datetimes and real booleans
    """
    ev = dict(row)
    for key in ("start_time", "end_time", "created_at", "updated_at"):
        if isinstance(ev.get(key), datetime.datetime):
            ev[key] = to_utc(ev[key])
    for key in ("all_day", "is_recurring"):
        ev[key] = bool(ev.get(key))
    if isinstance(ev.get("recurrence_end"), datetime.datetime):
        ev["recurrence_end"] = ev["recurrence_end"].date()
    ev.setdefault("parent_event_id", None)
    return ev
