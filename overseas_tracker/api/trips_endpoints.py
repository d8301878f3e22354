"""
Trip API endpoints - Trip records, listings and versioned edits
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from overseas_tracker.core.dependencies import get_current_account, get_trip_service
from overseas_tracker.models.account import Account
from overseas_tracker.schemas.base import Envelope, Message
from overseas_tracker.schemas.trip import (
    MarkReturnedRequest,
    TripCreate,
    TripCreated,
    TripFilter,
    TripListView,
    TripRead,
    TripUpdateRequest,
    TripView,
)
from overseas_tracker.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("", response_model=Envelope[TripCreated], status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    """
    Create a new trip

    - **traveller_id**: Account travelling
    - **company_id**: Optional client company
    - **departure_date** / **return_date**: Calendar days; ISO timestamps are
      converted to the day in the configured timezone
    """
    trip = await service.create_trip(trip_data, actor_id=current_account.id)

    return Envelope(
        status="ok",
        data=TripCreated(trip_id=trip.id, status=trip.status, version=trip.version)
    )


@router.get("", response_model=Envelope[list[TripView]])
async def list_trips(
    view: TripListView = Query(TripListView.ALL),
    company_id: Optional[int] = Query(None),
    traveller_id: Optional[int] = Query(None),
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    """
    List trips with status recomputed for today

    - **view**: active, completed or all
    - **company_id** / **traveller_id**: Optional filters
    """
    filters = TripFilter(view=view, company_id=company_id, traveller_id=traveller_id)
    trips = await service.list_trips(filters)
    return Envelope(status="ok", data=trips)


@router.get("/active", response_model=Envelope[list[TripView]])
async def list_active_trips(
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    """Upcoming and in-progress trips, soonest departure first"""
    return Envelope(status="ok", data=await service.list_active_trips())


@router.get("/completed", response_model=Envelope[list[TripView]])
async def list_completed_trips(
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    """Finished trips, most recent departure first"""
    return Envelope(status="ok", data=await service.list_completed_trips())


@router.get("/{trip_id}", response_model=Envelope[TripView])
async def get_trip(
    trip_id: int,
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    trip = await service.get_trip_view(trip_id)
    return Envelope(status="ok", data=trip)


@router.put("/{trip_id}", response_model=Envelope[TripRead])
async def update_trip(
    trip_id: int,
    payload: TripUpdateRequest,
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    """
    Update a trip

    The body must carry the `expected_version` the client last read. If the
    trip has moved on, the response is 409 with the current record under
    `details.server_copy`.
    """
    trip = await service.update_trip(
        trip_id,
        payload.expected_version,
        payload.to_patch(),
        actor_id=current_account.id,
    )
    return Envelope(status="ok", data=TripRead.model_validate(trip))


@router.post("/{trip_id}/return", response_model=Envelope[TripRead])
async def mark_returned(
    trip_id: int,
    payload: Optional[MarkReturnedRequest] = None,
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    """Mark a trip completed, returning today unless a return date is given"""
    return_date = payload.return_date if payload else None
    trip = await service.mark_returned(trip_id, return_date, actor_id=current_account.id)
    return Envelope(status="ok", data=TripRead.model_validate(trip))


@router.delete("/{trip_id}", response_model=Envelope[Message])
async def delete_trip(
    trip_id: int,
    service: TripService = Depends(get_trip_service),
    current_account: Account = Depends(get_current_account),
):
    await service.delete_trip(trip_id, actor_id=current_account.id)
    return Envelope(status="ok", data=Message(message="Trip deleted"))
