# Test the events route of the API

from unit_test_utils import create_test_event, event_payload


def test_event_crud(client):
    """Test the complete lifecycle: create, read, update, and delete for an event."""
    created = create_test_event(client, title="My Test Event")
    event_id = created["id"]
    assert created["title"] == "My Test Event"
    assert created["startTime"] == "2024-03-12T10:00:00Z"
    assert created["color"] == "#2563eb"
    assert created["parentEventId"] is None

    # Verify the event can be fetched by its ID
    response = client.get(f"/api/events/{event_id}")
    assert response.status_code == 200
    fetched = response.json()
    assert fetched["id"] == event_id
    assert fetched["location"] == "Room 1"

    # Update the title only, everything else is kept
    response = client.put(f"/api/events/{event_id}", json={"title": "Updated Event Title"})
    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Updated Event Title"
    assert updated["description"] == "A very important meeting."
    assert updated["endTime"] == "2024-03-12T11:00:00Z"

    # Delete the event
    response = client.delete(f"/api/events/{event_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Event deleted successfully"}

    # Verify the event is gone
    response = client.get(f"/api/events/{event_id}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found"


def test_create_validation(client, store):
    response = client.post("/api/events", json=event_payload(title=""))
    assert response.status_code == 422

    response = client.post("/api/events", json=event_payload(endTime="2024-03-12T09:00:00.000Z"))
    assert response.status_code == 400
    assert response.json()["detail"] == "End time must be after start time"

    response = client.post("/api/events", json=event_payload(isRecurring=True))
    assert response.status_code == 400

    response = client.post("/api/events", json=event_payload(
        isRecurring=True, recurrencePattern="daily", recurrenceEnd="2024-03-01"))
    assert response.status_code == 400

    response = client.post("/api/events", json=event_payload(recurrenceEnd="2024-01-01"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Recurrence end must not be before the start date"

    assert store.rows == {}


def test_update_null_semantics(client):
    created = create_test_event(client)
    event_id = created["id"]

    # Nulls clear optional fields and are ignored for required ones
    response = client.put(f"/api/events/{event_id}", json={"description": None, "title": None, "location": None})
    assert response.status_code == 200
    updated = response.json()
    assert updated["description"] is None
    assert updated["location"] is None
    assert updated["title"] == "Test Event"

    # An empty body changes nothing
    response = client.put(f"/api/events/{event_id}", json={})
    assert response.status_code == 200
    assert response.json()["title"] == "Test Event"


def test_update_validates_merged_event(client):
    event_id = create_test_event(client)["id"]

    response = client.put(f"/api/events/{event_id}", json={"endTime": "2024-03-12T08:00:00Z"})
    assert response.status_code == 400

    response = client.put(f"/api/events/{event_id}", json={"isRecurring": True})
    assert response.status_code == 400

    response = client.put(f"/api/events/{event_id}", json={"isRecurring": True, "recurrencePattern": "weekly"})
    assert response.status_code == 200
    assert response.json()["recurrencePattern"] == "weekly"


def test_missing_events(client):
    assert client.get("/api/events/999").status_code == 404
    assert client.put("/api/events/999", json={"title": "x"}).status_code == 404
    assert client.delete("/api/events/999").status_code == 404


def test_list_without_window_returns_stored_events(client):
    create_test_event(client, title="Later", startTime="2024-05-01T10:00:00Z", endTime="2024-05-01T11:00:00Z")
    create_test_event(client, title="Weekly", isRecurring=True, recurrencePattern="weekly")
    response = client.get("/api/events")
    assert response.status_code == 200
    events = response.json()
    assert [ev["title"] for ev in events] == ["Weekly", "Later"]
    assert events[0]["parentEventId"] is None


def test_query_expands_recurring_events(client):
    """Query a window holding single events and instances of recurring ones."""
    create_test_event(client, title="Doctor", startTime="2024-03-14T08:00:00Z", endTime="2024-03-14T09:00:00Z")
    create_test_event(client, title="Out of range", startTime="2024-04-14T08:00:00Z", endTime="2024-04-14T09:00:00Z")
    series = create_test_event(client, title="Team Sync", startTime="2024-03-01T10:00:00Z",
                               endTime="2024-03-01T11:00:00Z", isRecurring=True,
                               recurrencePattern="weekly", recurrenceEnd="2024-03-22")

    response = client.get("/api/events", params={
        "startDate": "2024-03-10T00:00:00.000Z",
        "endDate": "2024-03-31T23:59:59.999Z",
    })
    assert response.status_code == 200
    events = response.json()
    assert [(ev["title"], ev["startTime"]) for ev in events] == [
        ("Doctor", "2024-03-14T08:00:00Z"),
        ("Team Sync", "2024-03-15T10:00:00Z"),
        ("Team Sync", "2024-03-22T10:00:00Z"),
    ]
    instance = events[1]
    assert instance["id"] == series["id"]
    assert instance["parentEventId"] == series["id"]
    assert instance["endTime"] == "2024-03-15T11:00:00Z"


def test_query_keeps_last_instance_running_past_recurrence_end(client):
    create_test_event(client, title="Night Shift", startTime="2024-01-08T23:00:00Z",
                      endTime="2024-01-10T01:00:00Z", isRecurring=True,
                      recurrencePattern="daily", recurrenceEnd="2024-01-10")

    response = client.get("/api/events", params={
        "startDate": "2024-01-11T12:00:00Z",
        "endDate": "2024-01-11T18:00:00Z",
    })
    assert response.status_code == 200
    assert [(ev["startTime"], ev["endTime"]) for ev in response.json()] == [
        ("2024-01-10T23:00:00Z", "2024-01-12T01:00:00Z"),
    ]


def test_query_window_validation(client):
    assert client.get("/api/events", params={"startDate": "2024-03-10"}).status_code == 400
    assert client.get("/api/events", params={"startDate": "x", "endDate": "2024-03-10"}).status_code == 400
    response = client.get("/api/events", params={"startDate": "2024-03-10", "endDate": "2024-03-01"})
    assert response.status_code == 400
    assert "must be before" in response.json()["detail"]


def test_store_failure_is_a_server_error(client, monkeypatch):
    import events_store

    def broken(*args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(events_store, "fetch_all_events", broken)
    response = client.get("/api/events")
    assert response.status_code == 500
    assert "Failed to query events" in response.json()["detail"]
