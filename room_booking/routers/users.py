# routers/users.py
from typing import List

from databases import Database
from fastapi import APIRouter, Depends

from room_booking.auth import Identity, get_current_identity, identity_from_record, require_admin
from room_booking.database import get_database
from room_booking.guard import BookingGuard
from room_booking.models import users
from room_booking.routers.bookings import get_booking_guard
from room_booking.schemas import Booking, UserSummary

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserSummary])
async def list_users(admin: Identity = Depends(require_admin), database: Database = Depends(get_database)):
    records = await database.fetch_all(users.select().order_by(users.c.id))
    return [identity_from_record(record) for record in records]


@router.get("/{user_id}/bookings", response_model=List[Booking])
async def list_upcoming_bookings(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    guard: BookingGuard = Depends(get_booking_guard),
):
    """Upcoming bookings for a user, soonest first."""
    return await guard.list_upcoming_for_user(identity, user_id)
