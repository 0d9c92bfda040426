"""
Events API endpoints
Uses EventService for business logic
"""
from fastapi import APIRouter, Depends, Query, Request

from event_booking.api.deps import get_event_service
from event_booking.core.security import CurrentUser, require_admin
from event_booking.middleware.rate_limiter import limiter
from event_booking.schemas import EventCreate, EventListResponse, EventResponse, EventUpdate
from event_booking.services import EventService

router = APIRouter()


@router.get("/events", response_model=EventListResponse)
@limiter.limit("30/minute")
async def list_events(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    event_service: EventService = Depends(get_event_service),
):
    """
    List events ordered by date

    - **page**: Page number (default: 1)
    - **page_size**: Items per page (default: 10, max: 100)
    """
    cached = await event_service.get_cached_event_list(page, page_size)
    if cached:
        return EventListResponse(**cached)

    version = await event_service.event_list_cache_version()
    events, total = await event_service.list_events(page=page, page_size=page_size)
    response = EventListResponse(
        events=[EventResponse.model_validate(event) for event in events],
        total=total,
        page=page,
        page_size=page_size,
    )
    await event_service.cache_event_list(page, page_size, response.model_dump(mode="json"), version)
    return response


@router.get("/events/{event_id}", response_model=EventResponse)
@limiter.limit("60/minute")
async def get_event(
    request: Request,
    event_id: int,
    event_service: EventService = Depends(get_event_service),
):
    """Get a specific event by ID (served from cache when possible)"""
    cached = await event_service.get_cached_event(event_id)
    if cached:
        return EventResponse(**cached)

    # Taken before the read so a booking committed meanwhile blocks the fill
    version = await event_service.event_cache_version(event_id)
    event = await event_service.get_event(event_id)
    response = EventResponse.model_validate(event)
    await event_service.cache_event(event_id, response.model_dump(mode="json"), version)
    return response


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(
    event_data: EventCreate,
    admin: CurrentUser = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
):
    """Create an event (admin only)"""
    event = await event_service.create_event(event_data.model_dump())
    return EventResponse.model_validate(event)


@router.put("/events/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    changes: EventUpdate,
    admin: CurrentUser = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
):
    """Update an event (admin only); only the supplied fields change"""
    event = await event_service.update_event(event_id, changes.model_dump(exclude_unset=True, exclude_none=True))
    return EventResponse.model_validate(event)


@router.delete("/events/{event_id}")
async def delete_event(
    event_id: int,
    admin: CurrentUser = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
):
    """Delete an event that has no bookings (admin only)"""
    await event_service.delete_event(event_id)
    return {"success": True, "message": "Event deleted successfully"}
