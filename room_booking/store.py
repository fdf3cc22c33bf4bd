# store.py
from datetime import datetime
from typing import List, Optional

import sqlalchemy
from databases import Database

from room_booking.models import bookings, rooms, users, utcnow


def _booking_view_query():
    return sqlalchemy.select(
        bookings.c.id,
        bookings.c.room_id,
        bookings.c.user_id,
        bookings.c.start_time,
        bookings.c.end_time,
        bookings.c.description,
        bookings.c.created_at,
        rooms.c.name.label("room_name"),
        rooms.c.capacity.label("room_capacity"),
        rooms.c.location.label("room_location"),
        rooms.c.description.label("room_description"),
        users.c.username.label("user_username"),
        users.c.email.label("user_email"),
        users.c.role.label("user_role"),
    ).select_from(
        bookings.join(rooms, bookings.c.room_id == rooms.c.id)
        .join(users, bookings.c.user_id == users.c.id)
    )


def _as_view(record) -> dict:
    """Nest a joined booking row into booking, room and owner summary."""
    return {
        "id": record["id"],
        "room_id": record["room_id"],
        "user_id": record["user_id"],
        "start_time": record["start_time"],
        "end_time": record["end_time"],
        "description": record["description"],
        "created_at": record["created_at"],
        "room": {
            "id": record["room_id"],
            "name": record["room_name"],
            "capacity": record["room_capacity"],
            "location": record["room_location"],
            "description": record["room_description"],
        },
        "user": {
            "id": record["user_id"],
            "username": record["user_username"],
            "email": record["user_email"],
            "role": record["user_role"],
        },
    }


class BookingStore:
    """Persistence for reservations on top of an injected database handle."""

    def __init__(self, database: Database):
        self.database = database

    def transaction(self):
        return self.database.transaction()

    async def lock_room(self, room_id: int):
        # FOR UPDATE serializes writers per room; SQLite ignores it and locks the file
        query = rooms.select().where(rooms.c.id == room_id).with_for_update()
        return await self.database.fetch_one(query)

    async def get_user(self, user_id: int):
        return await self.database.fetch_one(users.select().where(users.c.id == user_id))

    async def get_booking(self, booking_id: int):
        return await self.database.fetch_one(bookings.select().where(bookings.c.id == booking_id))

    async def find_conflict(
        self, room_id: int, start_time: datetime, end_time: datetime, exclude_id: Optional[int] = None
    ):
        """Return one booking in the room whose half-open window meets [start_time, end_time)."""
        query = bookings.select().where(
            bookings.c.room_id == room_id,
            bookings.c.start_time < end_time,
            bookings.c.end_time > start_time,
        )
        if exclude_id is not None:
            query = query.where(bookings.c.id != exclude_id)
        return await self.database.fetch_one(query.limit(1))

    async def insert_booking(
        self, room_id: int, user_id: int, start_time: datetime, end_time: datetime, description: Optional[str]
    ) -> int:
        query = bookings.insert().values(
            room_id=room_id,
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            description=description,
            created_at=utcnow(),
        )
        return await self.database.execute(query)

    async def update_booking(
        self, booking_id: int, start_time: datetime, end_time: datetime, description: Optional[str]
    ):
        query = bookings.update().where(bookings.c.id == booking_id).values(
            start_time=start_time, end_time=end_time, description=description
        )
        await self.database.execute(query)

    async def delete_booking(self, booking_id: int):
        await self.database.execute(bookings.delete().where(bookings.c.id == booking_id))

    async def get_booking_view(self, booking_id: int) -> Optional[dict]:
        record = await self.database.fetch_one(_booking_view_query().where(bookings.c.id == booking_id))
        return _as_view(record) if record else None

    async def list_booking_views(self) -> List[dict]:
        query = _booking_view_query().order_by(sqlalchemy.desc(bookings.c.start_time))
        return [_as_view(record) for record in await self.database.fetch_all(query)]

    async def list_upcoming_views(self, user_id: int, after: datetime) -> List[dict]:
        query = (
            _booking_view_query()
            .where(bookings.c.user_id == user_id, bookings.c.start_time > after)
            .order_by(sqlalchemy.asc(bookings.c.start_time))
        )
        return [_as_view(record) for record in await self.database.fetch_all(query)]
