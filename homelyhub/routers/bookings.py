"""
Booking API endpoints for guests and hosts.
"""

from fastapi import APIRouter, Depends, status

from homelyhub.models.user import User
from homelyhub.services.booking import BookingService
from homelyhub.schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingDetailResponse,
    BookingListResponse,
)
from homelyhub.schemas.error import get_crud_error_responses, get_error_responses
from homelyhub.utils.dependencies import get_booking_service, get_current_user


router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
    description="Book an active property. The total is computed from the current nightly price.",
    responses=get_crud_error_responses()
)
async def create_booking(
    booking_data: BookingCreate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingCreatedResponse:
    booking = await booking_service.create_booking(current_user, booking_data)
    return BookingCreatedResponse(data=booking)


@router.get(
    "",
    response_model=BookingListResponse,
    status_code=status.HTTP_200_OK,
    summary="List my bookings",
    responses=get_error_responses(401)
)
async def list_my_bookings(
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingListResponse:
    bookings = await booking_service.list_my_bookings(current_user)
    return BookingListResponse(count=len(bookings), data=bookings)


@router.get(
    "/host/my-bookings",
    response_model=BookingListResponse,
    status_code=status.HTTP_200_OK,
    summary="List bookings on my properties",
    responses=get_error_responses(401)
)
async def list_host_bookings(
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingListResponse:
    bookings = await booking_service.list_host_bookings(current_user)
    return BookingListResponse(count=len(bookings), data=bookings)


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get booking by ID",
    description="Readable by the guest who made the booking, or by an admin.",
    responses=get_error_responses(400, 401, 403, 404)
)
async def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingDetailResponse:
    booking = await booking_service.get_booking(current_user, booking_id)
    return BookingDetailResponse(data=booking)
