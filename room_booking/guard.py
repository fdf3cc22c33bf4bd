# guard.py
import logging
from datetime import datetime
from typing import Callable, List, Optional

from room_booking.auth import Identity
from room_booking.errors import Conflict, Forbidden, InvalidInput, InvalidState, NotFound
from room_booking.models import to_utc_naive, utcnow
from room_booking.store import BookingStore

logger = logging.getLogger(__name__)


def windows_overlap(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open overlap test: back-to-back windows do not conflict."""
    return start < other_end and end > other_start


def validate_window(start_time: Optional[datetime], end_time: Optional[datetime]):
    if start_time is None or end_time is None:
        raise InvalidInput("start_time and end_time are required")
    start_time, end_time = to_utc_naive(start_time), to_utc_naive(end_time)
    if start_time >= end_time:
        raise InvalidInput("start_time must be before end_time")
    return start_time, end_time


def can_manage(identity: Identity, booking) -> bool:
    return identity.is_admin or booking["user_id"] == identity.id


class BookingGuard:
    """
    Applies the overlap and authorization rules to every booking operation.
    The requester is always passed in explicitly; no state is kept between calls.
    """

    def __init__(self, store: BookingStore, now: Callable[[], datetime] = utcnow):
        self.store = store
        self.now = now

    async def create(
        self,
        requester: Identity,
        room_id: Optional[int],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
        owner_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> dict:
        if owner_id is not None and owner_id != requester.id and not requester.is_admin:
            raise Forbidden("Only admin can create bookings for other users")
        if room_id is None or start_time is None or end_time is None:
            raise InvalidInput("room_id, start_time, and end_time are required")
        start_time, end_time = validate_window(start_time, end_time)
        owner_id = requester.id if owner_id is None else owner_id

        async with self.store.transaction():
            if await self.store.lock_room(room_id) is None:
                raise NotFound("Room not found")
            if owner_id != requester.id and await self.store.get_user(owner_id) is None:
                raise NotFound("User not found")

            conflict = await self.store.find_conflict(room_id, start_time, end_time)
            if conflict is not None:
                logger.warning(
                    "Rejected booking for room %s %s-%s: overlaps booking %s",
                    room_id, start_time, end_time, conflict["id"],
                )
                raise Conflict("Room is already booked for this time")

            booking_id = await self.store.insert_booking(room_id, owner_id, start_time, end_time, description)

        logger.info("Booking %s created in room %s by user %s for user %s", booking_id, room_id, requester.id, owner_id)
        return await self.store.get_booking_view(booking_id)

    async def list_all(self, requester: Identity) -> List[dict]:
        if not requester.is_admin:
            raise Forbidden("Forbidden: Admins only")
        return await self.store.list_booking_views()

    async def get(self, requester: Identity, booking_id: int) -> dict:
        # Any authenticated identity may read any booking
        view = await self.store.get_booking_view(booking_id)
        if view is None:
            raise NotFound("Booking not found")
        return view

    async def update(
        self,
        requester: Identity,
        booking_id: int,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> dict:
        booking = await self.store.get_booking(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        if not can_manage(requester, booking):
            raise Forbidden("Not authorized")

        async with self.store.transaction():
            await self.store.lock_room(booking["room_id"])
            # Re-read under the room lock; a concurrent cancel may have removed it
            booking = await self.store.get_booking(booking_id)
            if booking is None:
                raise NotFound("Booking not found")

            start_time, end_time = validate_window(
                start_time if start_time is not None else booking["start_time"],
                end_time if end_time is not None else booking["end_time"],
            )
            if description is None:
                description = booking["description"]

            conflict = await self.store.find_conflict(
                booking["room_id"], start_time, end_time, exclude_id=booking_id
            )
            if conflict is not None:
                logger.warning(
                    "Rejected update of booking %s to %s-%s: overlaps booking %s",
                    booking_id, start_time, end_time, conflict["id"],
                )
                raise Conflict("Room is already booked for this time")
            await self.store.update_booking(booking_id, start_time, end_time, description)

        logger.info("Booking %s updated by user %s", booking_id, requester.id)
        return await self.store.get_booking_view(booking_id)

    async def cancel(self, requester: Identity, booking_id: int) -> dict:
        booking = await self.store.get_booking(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        if not can_manage(requester, booking):
            raise Forbidden("Not authorized")

        if not requester.is_admin and booking["start_time"] <= self.now():
            raise InvalidState("Cannot cancel past or ongoing bookings")

        await self.store.delete_booking(booking_id)
        logger.info("Booking %s cancelled by user %s", booking_id, requester.id)
        return {"message": "Booking cancelled successfully", "id": booking_id}

    async def list_upcoming_for_user(self, requester: Identity, user_id: int) -> List[dict]:
        if not requester.is_admin and requester.id != user_id:
            raise Forbidden("Not authorized to view these bookings")
        return await self.store.list_upcoming_views(user_id, self.now())
