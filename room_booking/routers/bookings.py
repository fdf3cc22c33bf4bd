# routers/bookings.py
from typing import List

from databases import Database
from fastapi import APIRouter, Depends, status

from room_booking.auth import Identity, get_current_identity
from room_booking.database import get_database
from room_booking.guard import BookingGuard
from room_booking.schemas import Booking, BookingCreate, BookingUpdate, Message
from room_booking.store import BookingStore

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def get_booking_guard(database: Database = Depends(get_database)) -> BookingGuard:
    return BookingGuard(BookingStore(database))


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate,
    identity: Identity = Depends(get_current_identity),
    guard: BookingGuard = Depends(get_booking_guard),
):
    return await guard.create(
        identity,
        room_id=booking.room_id,
        start_time=booking.start_time,
        end_time=booking.end_time,
        owner_id=booking.user_id,
        description=booking.description,
    )


@router.get("", response_model=List[Booking])
async def list_bookings(
    identity: Identity = Depends(get_current_identity), guard: BookingGuard = Depends(get_booking_guard)
):
    return await guard.list_all(identity)


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(
    booking_id: int,
    identity: Identity = Depends(get_current_identity),
    guard: BookingGuard = Depends(get_booking_guard),
):
    return await guard.get(identity, booking_id)


@router.put("/{booking_id}", response_model=Booking)
async def update_booking(
    booking_id: int,
    booking: BookingUpdate,
    identity: Identity = Depends(get_current_identity),
    guard: BookingGuard = Depends(get_booking_guard),
):
    return await guard.update(
        identity,
        booking_id,
        start_time=booking.start_time,
        end_time=booking.end_time,
        description=booking.description,
    )


@router.delete("/{booking_id}", response_model=Message)
async def cancel_booking(
    booking_id: int,
    identity: Identity = Depends(get_current_identity),
    guard: BookingGuard = Depends(get_booking_guard),
):
    return await guard.cancel(identity, booking_id)
