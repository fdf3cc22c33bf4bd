# schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


# Auth
class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=5)


class LoginRequest(BaseModel):
    username: str
    password: str


class UserSummary(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    role: str


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserSummary


# Rooms
class RoomCreate(BaseModel):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    location: Optional[str] = None
    description: Optional[str] = None


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    capacity: Optional[int] = Field(default=None, gt=0)
    location: Optional[str] = None
    description: Optional[str] = None


class Room(BaseModel):
    id: int
    name: str
    capacity: int
    location: Optional[str] = None
    description: Optional[str] = None


# Bookings. Required fields are checked by the guard so a missing one is InvalidInput.
class BookingCreate(BaseModel):
    room_id: Optional[int] = None
    user_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None


class BookingUpdate(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None


class Booking(BaseModel):
    id: int
    room_id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    room: Room
    user: UserSummary


class Message(BaseModel):
    message: str
    id: Optional[int] = None
