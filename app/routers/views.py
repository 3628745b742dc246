# Views route of the API, render ready month, week and day grids

import logging
import datetime
from fastapi import APIRouter, HTTPException, Query
from typing import Optional, List, Dict, Any
import events_store
import layout
import schemas
import utils

logger = logging.getLogger(__name__)
router = APIRouter()

UPCOMING_DAYS = 7


def _client_tz(utc_offset_minutes: int) -> datetime.timezone:
    return datetime.timezone(datetime.timedelta(minutes=utc_offset_minutes))


def _today(tz: datetime.timezone) -> datetime.date:
    return datetime.datetime.now(datetime.timezone.utc).astimezone(tz).date()


def _parse_day(value: Optional[str], tz: datetime.timezone, name: str = "date") -> datetime.date:
    if not value:
        return _today(tz)
    day = utils.parse_date_value(value)
    if day is None:
        raise HTTPException(status_code=400, detail=f"Invalid {name} format: {value}")
    return day


def _aware(local_dt: datetime.datetime, tz: datetime.timezone) -> datetime.datetime:
    return local_dt.replace(tzinfo=tz)


def _load_events(range_start: datetime.datetime, range_end: datetime.datetime) -> List[Dict[str, Any]]:
    """Events of a range, recurring series expanded"""
    try:
        return events_store.fetch_events_between(range_start, range_end)
    except Exception as e:
        logger.error(f"Failed to load events for view: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to load events: {str(e)}")


def _chip(ev: Dict[str, Any]) -> Dict[str, Any]:
    return {"event": ev, "text_color": layout.contrast_color(ev.get("color"))}


def _day_column(events, day, today, tz) -> Dict[str, Any]:
    laid_out = []
    for item in layout.layout_day(events, day, tz):
        item["text_color"] = layout.contrast_color(item["event"].get("color"))
        laid_out.append(item)
    return {"date": day, "is_today": day == today, "events": laid_out}


@router.get("/month", response_model=schemas.MonthView)
async def month_view(
    date: Optional[str] = None,
    utc_offset_minutes: int = Query(0, alias="utcOffsetMinutes", ge=-14 * 60, le=14 * 60),
):
    """Month grid, weeks of day cells with the first events starting on each day"""
    tz = _client_tz(utc_offset_minutes)
    day = _parse_day(date, tz)
    today = _today(tz)
    range_start, range_end = layout.visible_range(schemas.View.MONTH.value, day)
    events = _load_events(_aware(range_start, tz), _aware(range_end, tz))

    cells = []
    for day_number in layout.month_grid(day.year, day.month):
        if day_number is None:
            cells.append({})
            continue
        cell_date = datetime.date(day.year, day.month, day_number)
        day_events = layout.events_starting_on(events, cell_date, tz)
        cells.append({
            "day": day_number,
            "date": cell_date,
            "is_today": cell_date == today,
            "events": [_chip(ev) for ev in day_events[:layout.EVENTS_PER_MONTH_CELL]],
            "more_count": max(0, len(day_events) - layout.EVENTS_PER_MONTH_CELL),
        })

    return {
        "year": day.year,
        "month": day.month,
        "range_start": _aware(range_start, tz),
        "range_end": _aware(range_end, tz),
        "previous": layout.shift_date(schemas.View.MONTH.value, day, -1),
        "next": layout.shift_date(schemas.View.MONTH.value, day, 1),
        "weeks": layout.chunk_weeks(cells),
    }


@router.get("/week", response_model=schemas.WeekView)
async def week_view(
    date: Optional[str] = None,
    utc_offset_minutes: int = Query(0, alias="utcOffsetMinutes", ge=-14 * 60, le=14 * 60),
):
    """Week grid, Sunday to Saturday, overlapping events side by side"""
    tz = _client_tz(utc_offset_minutes)
    day = _parse_day(date, tz)
    today = _today(tz)
    range_start, range_end = layout.visible_range(schemas.View.WEEK.value, day)
    events = _load_events(_aware(range_start, tz), _aware(range_end, tz))

    return {
        "range_start": _aware(range_start, tz),
        "range_end": _aware(range_end, tz),
        "previous": layout.shift_date(schemas.View.WEEK.value, day, -1),
        "next": layout.shift_date(schemas.View.WEEK.value, day, 1),
        "days": [_day_column(events, d, today, tz) for d in layout.week_days(day)],
    }


@router.get("/day", response_model=schemas.DayView)
async def day_view(
    date: Optional[str] = None,
    utc_offset_minutes: int = Query(0, alias="utcOffsetMinutes", ge=-14 * 60, le=14 * 60),
):
    """Single day column, overlapping events side by side"""
    tz = _client_tz(utc_offset_minutes)
    day = _parse_day(date, tz)
    range_start, range_end = layout.visible_range(schemas.View.DAY.value, day)
    events = _load_events(_aware(range_start, tz), _aware(range_end, tz))

    return {
        "range_start": _aware(range_start, tz),
        "range_end": _aware(range_end, tz),
        "previous": layout.shift_date(schemas.View.DAY.value, day, -1),
        "next": layout.shift_date(schemas.View.DAY.value, day, 1),
        "day": _day_column(events, day, _today(tz), tz),
    }


@router.get("/mini", response_model=schemas.MiniCalendarView)
async def mini_calendar(
    date: Optional[str] = None,
    selected: Optional[str] = None,
    utc_offset_minutes: int = Query(0, alias="utcOffsetMinutes", ge=-14 * 60, le=14 * 60),
):
    """Small month grid of the sidebar"""
    tz = _client_tz(utc_offset_minutes)
    day = _parse_day(date, tz)
    selected_day = _parse_day(selected, tz, "selected") if selected else None
    today = _today(tz)
    first = day.replace(day=1)

    days = []
    for day_number in layout.mini_month_grid(day.year, day.month):
        if day_number is None:
            days.append({})
            continue
        cell_date = datetime.date(day.year, day.month, day_number)
        days.append({
            "day": day_number,
            "date": cell_date,
            "is_today": cell_date == today,
            "is_selected": cell_date == selected_day,
        })

    return {
        "year": day.year,
        "month": day.month,
        "previous": layout.shift_date(schemas.View.MONTH.value, first, -1),
        "next": layout.shift_date(schemas.View.MONTH.value, first, 1),
        "days": days,
    }


@router.get("/upcoming", response_model=List[schemas.Event])
async def upcoming_events(
    limit: int = Query(5, ge=1, le=50),
    utc_offset_minutes: int = Query(0, alias="utcOffsetMinutes", ge=-14 * 60, le=14 * 60),
):
    """Next events of the coming week, starting from today's midnight"""
    tz = _client_tz(utc_offset_minutes)
    range_start = _aware(datetime.datetime.combine(_today(tz), datetime.time.min), tz)
    range_end = range_start + datetime.timedelta(days=UPCOMING_DAYS)
    events = _load_events(range_start, range_end)

    upcoming = [ev for ev in events if ev["start_time"] >= range_start]
    upcoming.sort(key=utils.event_sort_key)
    return upcoming[:limit]
