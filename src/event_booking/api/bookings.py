"""Bookings API endpoints"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from event_booking.api.deps import get_booking_service
from event_booking.core.security import AuthorizationError, CurrentUser, get_current_user, require_admin
from event_booking.middleware.rate_limiter import limiter
from event_booking.models.booking import BookingStatus
from event_booking.schemas import (
    BookingCreate,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
)
from event_booking.services import BookingService

router = APIRouter()


async def _get_owned_booking(
    booking_service: BookingService,
    booking_id: int,
    current_user: CurrentUser,
):
    """Load a booking the caller owns (admins may access any booking)"""
    booking = await booking_service.get_booking(booking_id)
    if booking.user_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError("Not allowed to access this booking")
    return booking


@router.post("/bookings", response_model=BookingEnvelope, status_code=201)
@limiter.limit("10/minute")
async def create_booking(
    request: Request,
    booking_data: BookingCreate,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """
    Reserve seats on an event; the booking starts PENDING

    Errors:
    - 404: event not found
    - 409: not enough seats available
    - 503: contention or timeout, safe to retry
    """
    booking = await booking_service.create_booking(
        event_id=booking_data.event_id,
        user_id=current_user.id,
        seat_count=booking_data.seat_count,
    )
    return BookingEnvelope(
        message="Booking created successfully",
        booking=BookingResponse.from_booking(booking),
    )


@router.get("/bookings/my-bookings", response_model=BookingListResponse)
@limiter.limit("30/minute")
async def list_my_bookings(
    request: Request,
    status: Optional[BookingStatus] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """List the caller's bookings"""
    bookings = await booking_service.list_user_bookings(current_user.id, status=status)
    return BookingListResponse(
        bookings=[BookingResponse.from_booking(b, include_user=False) for b in bookings],
        total=len(bookings),
    )


@router.get("/bookings", response_model=BookingListResponse)
@limiter.limit("30/minute")
async def list_all_bookings(
    request: Request,
    status: Optional[BookingStatus] = Query(None),
    admin: CurrentUser = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
):
    """List every booking with its event and user (admin only)"""
    bookings = await booking_service.list_bookings(status=status)
    return BookingListResponse(
        bookings=[BookingResponse.from_booking(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/bookings/{booking_id}", response_model=BookingEnvelope)
@limiter.limit("60/minute")
async def get_booking(
    request: Request,
    booking_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Get a specific booking by ID"""
    booking = await _get_owned_booking(booking_service, booking_id, current_user)
    return BookingEnvelope(message="Booking found", booking=BookingResponse.from_booking(booking))


@router.patch("/bookings/{booking_id}/confirm", response_model=BookingEnvelope)
@limiter.limit("10/minute")
async def confirm_booking(
    request: Request,
    booking_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Confirm a booking"""
    await _get_owned_booking(booking_service, booking_id, current_user)
    booking = await booking_service.confirm_booking(booking_id)
    return BookingEnvelope(message="Booking confirmed", booking=BookingResponse.from_booking(booking))


@router.patch("/bookings/{booking_id}/cancel", response_model=BookingEnvelope)
@limiter.limit("10/minute")
async def cancel_booking(
    request: Request,
    booking_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Cancel a booking and release its seats"""
    await _get_owned_booking(booking_service, booking_id, current_user)
    booking = await booking_service.cancel_booking(booking_id)
    return BookingEnvelope(message="Booking cancelled", booking=BookingResponse.from_booking(booking))
