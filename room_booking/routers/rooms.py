# routers/rooms.py
from typing import List, Optional

from databases import Database
from fastapi import APIRouter, Depends, HTTPException, status

from room_booking.auth import Identity, get_current_identity, require_admin
from room_booking.database import get_database
from room_booking.models import bookings, rooms
from room_booking.schemas import Room, RoomCreate, RoomUpdate

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


def room_from_record(record) -> dict:
    return {
        "id": record["id"],
        "name": record["name"],
        "capacity": record["capacity"],
        "location": record["location"],
        "description": record["description"],
    }


async def _get_room_or_404(database: Database, room_id: int):
    room = await database.fetch_one(rooms.select().where(rooms.c.id == room_id))
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


async def _ensure_name_free(database: Database, name: str, room_id: Optional[int] = None):
    existing = await database.fetch_one(rooms.select().where(rooms.c.name == name))
    if existing and existing["id"] != room_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room name already exists.")


@router.get("", response_model=List[Room])
async def list_rooms(
    identity: Identity = Depends(get_current_identity), database: Database = Depends(get_database)
):
    records = await database.fetch_all(rooms.select().order_by(rooms.c.name))
    return [room_from_record(record) for record in records]


@router.get("/{room_id}", response_model=Room)
async def get_room(
    room_id: int, identity: Identity = Depends(get_current_identity), database: Database = Depends(get_database)
):
    return room_from_record(await _get_room_or_404(database, room_id))


@router.post("", response_model=Room, status_code=status.HTTP_201_CREATED)
async def create_room(
    room: RoomCreate, admin: Identity = Depends(require_admin), database: Database = Depends(get_database)
):
    await _ensure_name_free(database, room.name)
    room_id = await database.execute(rooms.insert().values(**room.model_dump()))
    return room_from_record(await _get_room_or_404(database, room_id))


@router.put("/{room_id}", response_model=Room)
async def update_room(
    room_id: int,
    room: RoomUpdate,
    admin: Identity = Depends(require_admin),
    database: Database = Depends(get_database),
):
    await _get_room_or_404(database, room_id)
    update_data = room.model_dump(exclude_unset=True)
    if "name" in update_data:
        await _ensure_name_free(database, update_data["name"], room_id)
    if update_data:
        await database.execute(rooms.update().where(rooms.c.id == room_id).values(**update_data))
    return room_from_record(await _get_room_or_404(database, room_id))


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: int, admin: Identity = Depends(require_admin), database: Database = Depends(get_database)
):
    await _get_room_or_404(database, room_id)
    async with database.transaction():
        # Delete associated bookings first to keep foreign keys intact
        await database.execute(bookings.delete().where(bookings.c.room_id == room_id))
        await database.execute(rooms.delete().where(rooms.c.id == room_id))
