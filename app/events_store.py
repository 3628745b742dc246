# Persistence of events in the events table

import logging
from typing import Optional, List, Dict, Any
import database
import recurrence
import utils

logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id, title, description, start_time, end_time, location, color, all_day, "
    "is_recurring, recurrence_pattern, recurrence_end, created_at, updated_at"
)

WRITABLE_COLUMNS = (
    "title", "description", "start_time", "end_time", "location", "color",
    "all_day", "is_recurring", "recurrence_pattern", "recurrence_end",
)


def _get_cursor():
    cursor = database.get_cursor(dictionary=True)
    cursor.execute(f"USE {database.MYSQL_DATABASE}")
    return cursor


def _fetch(sql, params=()) -> List[Dict[str, Any]]:
    cursor = _get_cursor()
    cursor.execute(sql, tuple(params))
    return [utils.row_to_event(row) for row in cursor.fetchall()]


def insert_event(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a new event and return it as stored"""
    values = utils.event_to_db_params({k: v for k, v in fields.items() if k in WRITABLE_COLUMNS})
    columns = list(values.keys())
    insert_query = f"INSERT INTO events ({', '.join(columns)}) VALUES ({', '.join(['%s'] * len(columns))})"

    try:
        cursor = _get_cursor()
        cursor.execute(insert_query, tuple(values[c] for c in columns))
        event_id = cursor.lastrowid
        database.get_connection().commit()
    except Exception:
        database.get_connection().rollback()
        raise

    logger.info(f"Created event '{fields.get('title')}' with ID {event_id}")
    return fetch_event(event_id)


def fetch_event(event_id: int) -> Optional[Dict[str, Any]]:
    rows = _fetch(f"SELECT {EVENT_COLUMNS} FROM events WHERE id = %s", (event_id,))
    return rows[0] if rows else None


def fetch_all_events() -> List[Dict[str, Any]]:
    return _fetch(f"SELECT {EVENT_COLUMNS} FROM events ORDER BY start_time, id")


def fetch_events_in_range(window_start, window_end) -> List[Dict[str, Any]]:
    """Non recurring events overlapping the closed window"""
    sql = (
        f"SELECT {EVENT_COLUMNS} FROM events "
        "WHERE is_recurring = FALSE AND start_time <= %s AND end_time >= %s "
        "ORDER BY start_time, id"
    )
    return _fetch(sql, (utils.to_naive_utc(window_end), utils.to_naive_utc(window_start)))


def fetch_recurring_events(window_start, window_end) -> List[Dict[str, Any]]:
    """Series that may have instances inside the window, the last instance may run past the recurrence end"""
    sql = (
        f"SELECT {EVENT_COLUMNS} FROM events "
        "WHERE is_recurring = TRUE AND start_time <= %s "
        "AND (recurrence_end IS NULL OR TIMESTAMP(recurrence_end, '23:59:59.999999') "
        "+ INTERVAL TIMESTAMPDIFF(MICROSECOND, start_time, end_time) MICROSECOND >= %s) "
        "ORDER BY start_time, id"
    )
    return _fetch(sql, (utils.to_naive_utc(window_end), utils.to_naive_utc(window_start)))


def fetch_events_between(window_start, window_end) -> List[Dict[str, Any]]:
    """
    All events of a window, recurring series expanded into their instances.

    Returns:
        List[Dict[str, Any]]: Events and instances sorted by start time, then id.
    """
    results = fetch_events_in_range(window_start, window_end)
    series = fetch_recurring_events(window_start, window_end)
    results.extend(recurrence.expand_events(series, window_start, window_end))
    results.sort(key=utils.event_sort_key)
    logger.info(f"Found {len(results)} events between {window_start} and {window_end}")
    return results


def update_event(event_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply changes to an event and return it as stored, None if it does not exist"""
    values = utils.event_to_db_params({k: v for k, v in changes.items() if k in WRITABLE_COLUMNS})
    if not values:
        return fetch_event(event_id)

    columns = list(values.keys())
    update_query = f"UPDATE events SET {', '.join(f'{c} = %s' for c in columns)} WHERE id = %s"

    try:
        cursor = _get_cursor()
        cursor.execute(update_query, tuple(values[c] for c in columns) + (event_id,))
        database.get_connection().commit()
    except Exception:
        database.get_connection().rollback()
        raise

    logger.info(f"Updated event with ID {event_id}")
    return fetch_event(event_id)


def delete_event(event_id: int) -> bool:
    """Delete an event, False if there was none"""
    try:
        cursor = _get_cursor()
        cursor.execute("DELETE FROM events WHERE id = %s", (event_id,))
        deleted = cursor.rowcount > 0
        database.get_connection().commit()
    except Exception:
        database.get_connection().rollback()
        raise

    if deleted:
        logger.info(f"Deleted event with ID {event_id}")
    return deleted
