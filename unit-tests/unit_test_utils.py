# Shared utility functions for unit tests

import datetime
import events_store
import utils

STORE_FUNCTIONS = (
    "insert_event",
    "fetch_event",
    "fetch_all_events",
    "fetch_events_in_range",
    "fetch_recurring_events",
    "update_event",
    "delete_event",
)


class InMemoryEventStore:
    """Stand-in for the events table, stores rows the way MySQL hands them back"""

    def __init__(self):
        self.rows = {}
        self.next_id = 1

    def install(self, monkeypatch):
        for name in STORE_FUNCTIONS:
            monkeypatch.setattr(events_store, name, getattr(self, name))

    def _now(self):
        return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None, microsecond=0)

    def _read(self, row):
        return utils.row_to_event(row)

    def _sorted(self, rows):
        return [self._read(row) for row in sorted(rows, key=lambda r: (r["start_time"], r["id"]))]

    def insert_event(self, fields):
        row = {column: None for column in events_store.WRITABLE_COLUMNS}
        row.update({"color": "#1f2937", "all_day": False, "is_recurring": False})
        row.update(utils.event_to_db_params({k: v for k, v in fields.items() if k in events_store.WRITABLE_COLUMNS}))
        row["id"] = self.next_id
        row["created_at"] = row["updated_at"] = self._now()
        self.rows[row["id"]] = row
        self.next_id += 1
        return self._read(row)

    def fetch_event(self, event_id):
        row = self.rows.get(event_id)
        return self._read(row) if row else None

    def fetch_all_events(self):
        return self._sorted(self.rows.values())

    def fetch_events_in_range(self, window_start, window_end):
        start = utils.to_naive_utc(window_start)
        end = utils.to_naive_utc(window_end)
        return self._sorted(
            r for r in self.rows.values()
            if not r["is_recurring"] and r["start_time"] <= end and r["end_time"] >= start
        )

    def fetch_recurring_events(self, window_start, window_end):
        end = utils.to_naive_utc(window_end)
        start = utils.to_naive_utc(window_start)
        return self._sorted(
            r for r in self.rows.values()
            if r["is_recurring"] and r["start_time"] <= end
            and (r["recurrence_end"] is None
                 or datetime.datetime.combine(r["recurrence_end"], datetime.time.max)
                 + (r["end_time"] - r["start_time"]) >= start)
        )

    def update_event(self, event_id, changes):
        row = self.rows.get(event_id)
        if row is None:
            return None
        row.update(utils.event_to_db_params({k: v for k, v in changes.items() if k in events_store.WRITABLE_COLUMNS}))
        row["updated_at"] = self._now()
        return self._read(row)

    def delete_event(self, event_id):
        return self.rows.pop(event_id, None) is not None


def event_payload(**overrides):
    """JSON body of a one hour event on 2024-03-12, as the event form sends it"""
    payload = {
        "title": "Test Event",
        "description": "A very important meeting.",
        "startTime": "2024-03-12T10:00:00.000Z",
        "endTime": "2024-03-12T11:00:00.000Z",
        "location": "Room 1",
        "color": "#2563eb",
        "allDay": False,
        "isRecurring": False,
        "recurrencePattern": None,
        "recurrenceEnd": None,
    }
    payload.update(overrides)
    return payload


def create_test_event(client, **overrides):
    """Create an event through the API and return the response body"""
    response = client.post("/api/events", json=event_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


def utc(*args):
    return datetime.datetime(*args, tzinfo=datetime.timezone.utc)


def make_event(event_id, start, end, **fields):
    """Event dictionary as the store returns it"""
    ev = {
        "id": event_id,
        "title": f"Event {event_id}",
        "description": None,
        "start_time": start,
        "end_time": end,
        "location": None,
        "color": "#1f2937",
        "all_day": False,
        "is_recurring": False,
        "recurrence_pattern": None,
        "recurrence_end": None,
        "parent_event_id": None,
    }
    ev.update(fields)
    return ev
