# Test the shared utility module of the API

import datetime
import pytest
from fastapi import HTTPException
from utils import *
from unit_test_utils import utc


def test_to_utc():
    assert to_utc(datetime.datetime(2024, 1, 1, 10)) == utc(2024, 1, 1, 10)
    cet = datetime.timezone(datetime.timedelta(hours=1))
    converted = to_utc(datetime.datetime(2024, 1, 1, 10, tzinfo=cet))
    assert converted == utc(2024, 1, 1, 9)
    assert converted.tzinfo == datetime.timezone.utc
    assert to_naive_utc(datetime.datetime(2024, 1, 1, 10, tzinfo=cet)) == datetime.datetime(2024, 1, 1, 9)


def test_validate_time_format():
    assert validate_time_format("2023-01-01T10:00:00") == utc(2023, 1, 1, 10)
    assert validate_time_format("2023-01-01T10:00:00.000Z") == utc(2023, 1, 1, 10)
    assert validate_time_format("2023-01-01T10:00:00+02:00") == utc(2023, 1, 1, 8)
    assert validate_time_format("invalid") is None
    assert validate_time_format(None) is None


def test_parse_date_value():
    assert parse_date_value("2024-02-29") == datetime.date(2024, 2, 29)
    assert parse_date_value("2024-02-29T00:00:00.000Z") == datetime.date(2024, 2, 29)
    assert parse_date_value(datetime.date(2024, 2, 29)) == datetime.date(2024, 2, 29)
    assert parse_date_value(datetime.datetime(2024, 2, 29, 23)) == datetime.date(2024, 2, 29)
    assert parse_date_value("nope") is None
    assert parse_date_value(42) is None


def test_parse_window():
    assert parse_window(None, None) is None
    assert parse_window("2024-01-01", "2024-02-01") == (utc(2024, 1, 1), utc(2024, 2, 1))

    with pytest.raises(HTTPException, match="Both"):
        parse_window("2024-01-01", None)
    with pytest.raises(HTTPException, match="Invalid startDate"):
        parse_window("yesterday", "2024-02-01")
    with pytest.raises(HTTPException, match="Invalid endDate"):
        parse_window("2024-01-01", "tomorrow")
    with pytest.raises(HTTPException, match="must be before"):
        parse_window("2024-02-01", "2024-02-01")


def test_overlaps_is_closed():
    assert overlaps(1, 2, 2, 3)
    assert overlaps(3, 4, 2, 3)
    assert overlaps(1, 5, 2, 3)
    assert not overlaps(1, 2, 3, 4)


def test_validate_event_consistency():
    ok = {"start_time": utc(2024, 1, 1, 10), "end_time": utc(2024, 1, 1, 11)}
    validate_event_consistency(ok)
    validate_event_consistency({**ok, "is_recurring": True, "recurrence_pattern": "daily",
                                "recurrence_end": datetime.date(2024, 1, 1)})

    with pytest.raises(HTTPException, match="End time must be after start time") as exc:
        validate_event_consistency({**ok, "end_time": utc(2024, 1, 1, 10)})
    assert exc.value.status_code == 400
    with pytest.raises(HTTPException, match="recurrence pattern"):
        validate_event_consistency({**ok, "is_recurring": True})
    with pytest.raises(HTTPException, match="Recurrence end"):
        validate_event_consistency({**ok, "is_recurring": True, "recurrence_pattern": "weekly",
                                    "recurrence_end": datetime.date(2023, 12, 31)})
    with pytest.raises(HTTPException, match="Recurrence end"):
        validate_event_consistency({**ok, "recurrence_end": datetime.date(2023, 12, 31)})
    with pytest.raises(HTTPException, match="required"):
        validate_event_consistency({"start_time": utc(2024, 1, 1, 10)})


def test_collect_update_changes():
    changes = collect_update_changes({"title": None, "description": None, "location": "Here", "color": None})
    assert changes == {"description": None, "location": "Here"}


def test_event_to_db_params_and_back():
    cet = datetime.timezone(datetime.timedelta(hours=1))
    params = event_to_db_params({
        "start_time": datetime.datetime(2024, 1, 1, 10, tzinfo=cet),
        "color": type("Color", (), {"value": "#dc2626"})(),
        "title": "x",
    })
    assert params == {"start_time": datetime.datetime(2024, 1, 1, 9), "color": "#dc2626", "title": "x"}

    ev = row_to_event({
        "id": 1,
        "start_time": datetime.datetime(2024, 1, 1, 9),
        "end_time": datetime.datetime(2024, 1, 1, 10),
        "created_at": datetime.datetime(2023, 12, 1),
        "updated_at": None,
        "all_day": 1,
        "is_recurring": 0,
        "recurrence_end": None,
    })
    assert ev["start_time"] == utc(2024, 1, 1, 9)
    assert ev["created_at"] == utc(2023, 12, 1)
    assert ev["all_day"] is True and ev["is_recurring"] is False
    assert ev["parent_event_id"] is None


def test_event_sort_key():
    events = [{"id": 2, "start_time": utc(2024, 1, 1)}, {"id": 1, "start_time": utc(2024, 1, 1)}, {"id": 3, "start_time": utc(2023, 1, 1)}]
    assert [ev["id"] for ev in sorted(events, key=event_sort_key)] == [3, 1, 2]
