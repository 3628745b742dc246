# Recurring event expansion, turns stored series into the instances of a time window

import logging
import datetime
from typing import Optional, List, Dict, Any
import icalendar
import recurring_ical_events
import utils

logger = logging.getLogger(__name__)

FREQUENCIES = {
    "daily": "DAILY",
    "weekly": "WEEKLY",
    "monthly": "MONTHLY",
    "yearly": "YEARLY",
}

UID_PREFIX = "eventcal-"

# recurring_ical_events works on whole seconds, the window is widened by this
# much and the exact bounds are applied afterwards
_WINDOW_SLACK = datetime.timedelta(seconds=1)


def _frequency(ev: Dict[str, Any]) -> Optional[str]:
    if not ev.get("is_recurring"):
        return None
    return FREQUENCIES.get(utils.enum_value(ev.get("recurrence_pattern")))


def build_rrule(ev: Dict[str, Any]) -> Optional[str]:
    """
    Build the RRULE of a stored series.

    The recurrence end date is inclusive, the series may still start an
    instance on the last second of that day.

    Returns:
        str: RRULE value like "FREQ=WEEKLY;UNTIL=20240131T235959", None if the event does not recur
    """
    freq = _frequency(ev)
    if freq is None:
        return None
    rrule = f"FREQ={freq}"
    recurrence_end = ev.get("recurrence_end")
    if recurrence_end is not None:
        until = datetime.datetime.combine(recurrence_end, datetime.time(23, 59, 59))
        rrule += f";UNTIL={until:%Y%m%dT%H%M%S}"
    return rrule


def _event_to_ical_component(ev: Dict[str, Any]) -> Optional[icalendar.Event]:
    """
    Convert a stored series to an iCalendar Event component.

    Times are written as floating (naive) UTC values.

    Returns:
        Optional[icalendar.Event]: Component or None if the event is not a valid series.
    """
    rrule = build_rrule(ev)
    if rrule is None:
        return None
    start = ev.get("start_time")
    end = ev.get("end_time")
    if start is None or end is None:
        logger.warning(f"Skipping series without start or end time: {ev.get('id')}")
        return None
    ical_ev = icalendar.Event()
    ical_ev.add("uid", f"{UID_PREFIX}{ev.get('id')}")
    ical_ev.add("summary", ev.get("title") or "")
    ical_ev.add("dtstart", utils.to_naive_utc(start).replace(microsecond=0))
    ical_ev.add("dtend", utils.to_naive_utc(end).replace(microsecond=0))
    ical_ev.add("rrule", icalendar.prop.vRecur.from_ical(rrule))
    return ical_ev


def _build_ical_from_events(events: List[Dict[str, Any]]) -> icalendar.Calendar:
    """Builds an iCalendar Calendar holding one component per valid series."""
    cal = icalendar.Calendar()
    cal.add("prodid", "-//eventcal//calendar//EN")
    cal.add("version", "2.0")
    for ev in events:
        try:
            comp = _event_to_ical_component(ev)
            if comp is not None:
                cal.add_component(comp)
        except Exception as ex:
            logger.warning(f"Skipping event {ev.get('id')} due to recurrence data error: {ex}")
            continue
    return cal


def _series_id(comp) -> Optional[int]:
    uid = str(comp.get("UID") or "")
    if not uid.startswith(UID_PREFIX):
        return None
    try:
        return int(uid[len(UID_PREFIX):])
    except ValueError:
        return None


def make_instance(series: Dict[str, Any], start: datetime.datetime) -> Dict[str, Any]:
    """Copy a series to an instance starting at start, keeping the series duration"""
    duration = series["end_time"] - series["start_time"]
    instance = dict(series)
    instance["start_time"] = start
    instance["end_time"] = start + duration
    instance["parent_event_id"] = series.get("id")
    return instance


def expand_events(events: List[Dict[str, Any]], window_start, window_end) -> List[Dict[str, Any]]:
    """
    Expand recurring events into their instances overlapping a window.

    Args:
        events (List[Dict[str, Any]]): Stored events, only recurring ones produce instances.
        window_start (datetime): Start of window, naive values are UTC.
        window_end (datetime): End of window, naive values are UTC.

    Returns:
        List[Dict[str, Any]]: Instances sorted by start time, then series id.

    Raises:
        ValueError: If the window is empty.
    """
    start_dt = utils.to_utc(window_start)
    end_dt = utils.to_utc(window_end)
    if start_dt >= end_dt:
        raise ValueError("window start must be before window end")

    series_by_id = {ev.get("id"): ev for ev in events if _frequency(ev) is not None}
    if not series_by_id:
        return []

    cal = _build_ical_from_events(list(series_by_id.values()))
    a_calendar = icalendar.Calendar.from_ical(cal.to_ical())
    occurrences = recurring_ical_events.of(a_calendar, skip_bad_series=True).between(
        utils.to_naive_utc(start_dt - _WINDOW_SLACK),
        utils.to_naive_utc(end_dt + _WINDOW_SLACK),
    )

    results = []
    for comp in occurrences:
        series = series_by_id.get(_series_id(comp))
        if series is None:
            logger.warning(f"Occurrence without a known series: {comp.get('UID')}")
            continue
        occ_start = comp.get("DTSTART").dt
        if not isinstance(occ_start, datetime.datetime):
            occ_start = datetime.datetime.combine(occ_start, datetime.time.min)
        # Sub-second precision is lost in the iCalendar round trip
        occ_start = utils.to_utc(occ_start).replace(microsecond=utils.to_utc(series["start_time"]).microsecond)
        instance = make_instance(series, occ_start)
        if utils.overlaps(instance["start_time"], instance["end_time"], start_dt, end_dt):
            results.append(instance)

    results.sort(key=utils.event_sort_key)
    return results


def expand_event(event: Dict[str, Any], window_start, window_end) -> List[Dict[str, Any]]:
    """Expand a single series, see expand_events"""
    return expand_events([event], window_start, window_end)
