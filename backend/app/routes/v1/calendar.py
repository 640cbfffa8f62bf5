# backend/app/routes/v1/calendar.py
"""
Calendar routes - API v1

Personal calendar events under /api/v1/calendar. Every endpoint works on
the caller's own events only.

Endpoints:
    GET /events                   → Own events, optionally within [start_date, end_date]
    POST /events                  → Create an event
    PUT /events/{event_id}        → Update an own event
    DELETE /events/{event_id}     → Delete an own event
"""

import asyncio
from datetime import datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_calendar_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.calendar import CalendarEventCreate, CalendarEventResponse, CalendarEventUpdate
from ...services.calendar_service import CalendarService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["calendar-v1"])


@router.get("/events", response_model=List[CalendarEventResponse])
async def list_events(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> List[CalendarEventResponse]:
    events = await asyncio.to_thread(calendar_service.list_events, current_user.id, start_date, end_date)
    return [CalendarEventResponse.model_validate(e) for e in events]


@router.post("/events", response_model=CalendarEventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: CalendarEventCreate,
    current_user: User = Depends(get_current_user),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> CalendarEventResponse:
    try:
        event = await asyncio.to_thread(calendar_service.create_event, current_user.id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return CalendarEventResponse.model_validate(event)


@router.put("/events/{event_id}", response_model=CalendarEventResponse)
async def update_event(
    event_id: str,
    payload: CalendarEventUpdate,
    current_user: User = Depends(get_current_user),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> CalendarEventResponse:
    try:
        event = await asyncio.to_thread(calendar_service.update_event, current_user.id, event_id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return CalendarEventResponse.model_validate(event)


@router.delete("/events/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(calendar_service.delete_event, current_user.id, event_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Event deleted successfully")
