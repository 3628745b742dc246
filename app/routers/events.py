# Events route of the API, the five operations on stored events

import logging
from fastapi import APIRouter, HTTPException, Query
from typing import Optional, List
import events_store
import schemas
import utils

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[schemas.Event])
async def list_events(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
):
    """
    List events.
    - Without a window every stored event is returned, series as stored.
    - With startDate and endDate the events overlapping the window are returned,
      recurring series expanded into their instances.
    """
    window = utils.parse_window(start_date, end_date)

    try:
        if window:
            events = events_store.fetch_events_between(*window)
        else:
            events = events_store.fetch_all_events()
            logger.info(f"Found {len(events)} events")
        return events
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to query events: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to query events: {str(e)}")


@router.get("/{event_id}", response_model=schemas.Event)
async def get_event(event_id: int):
    """Get a single event"""
    try:
        event = events_store.fetch_event(event_id)
    except Exception as e:
        logger.error(f"Failed to retrieve event {event_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to retrieve event {event_id}: {str(e)}")

    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("", response_model=schemas.Event, status_code=201)
async def create_event(event: schemas.EventCreate):
    """Create a new event"""
    fields = event.model_dump()
    utils.validate_event_consistency(fields)

    try:
        return events_store.insert_event(fields)
    except Exception as e:
        logger.error(f"Failed to create event: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create event: {str(e)}")


@router.put("/{event_id}", response_model=schemas.Event)
async def update_event(event_id: int, event_update: schemas.EventUpdate):
    """Update an existing event, fields left out of the body are kept"""
    try:
        current_event = events_store.fetch_event(event_id)
    except Exception as e:
        logger.error(f"Failed to retrieve event {event_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update event {event_id}: {str(e)}")

    if not current_event:
        logger.error(f"Event {event_id} not found")
        raise HTTPException(status_code=404, detail="Event not found")

    changes = utils.collect_update_changes(event_update.model_dump(exclude_unset=True))
    if not changes:
        return current_event

    # The merged document has to be valid as a whole
    utils.validate_event_consistency({**current_event, **changes})

    try:
        updated_event = events_store.update_event(event_id, changes)
    except Exception as e:
        logger.error(f"Failed to update event {event_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update event {event_id}: {str(e)}")

    if not updated_event:
        raise HTTPException(status_code=404, detail="Event not found")
    return updated_event


@router.delete("/{event_id}", response_model=schemas.MessageResponse)
async def delete_event(event_id: int):
    """Delete an event"""
    try:
        deleted = events_store.delete_event(event_id)
    except Exception as e:
        logger.error(f"Failed to delete event {event_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to delete event {event_id}: {str(e)}")

    if not deleted:
        logger.error(f"Event {event_id} not found for deletion")
        raise HTTPException(status_code=404, detail="Event not found")
    return {"message": "Event deleted successfully"}
