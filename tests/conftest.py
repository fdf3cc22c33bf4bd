from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from room_booking.config import Settings
from room_booking.guard import windows_overlap
from room_booking.main import create_app

ADMIN_PASSWORD = "admin123"
PASSWORD = "secret1"


@pytest.fixture
def anyio_backend():
    return "asyncio"


class InMemoryBookingStore:
    """Stand-in for BookingStore keeping rooms, users and bookings in dicts."""

    def __init__(self):
        self.rooms = {}
        self.users = {}
        self.bookings = {}
        self._next_id = 1

    def add_room(self, room_id, name=None, capacity=10):
        self.rooms[room_id] = {
            "id": room_id,
            "name": name or f"Room {room_id}",
            "capacity": capacity,
            "location": None,
            "description": None,
        }

    def add_user(self, user_id, username, role="user"):
        self.users[user_id] = {
            "id": user_id,
            "username": username,
            "email": f"{username}@example.com",
            "role": role,
        }

    @asynccontextmanager
    async def _transaction(self):
        yield

    def transaction(self):
        return self._transaction()

    async def lock_room(self, room_id):
        return self.rooms.get(room_id)

    async def get_user(self, user_id):
        return self.users.get(user_id)

    async def get_booking(self, booking_id):
        booking = self.bookings.get(booking_id)
        return dict(booking) if booking else None

    async def find_conflict(self, room_id, start_time, end_time, exclude_id=None):
        for booking in self.bookings.values():
            if booking["room_id"] != room_id or booking["id"] == exclude_id:
                continue
            if windows_overlap(start_time, end_time, booking["start_time"], booking["end_time"]):
                return booking
        return None

    async def insert_booking(self, room_id, user_id, start_time, end_time, description):
        booking_id = self._next_id
        self._next_id += 1
        self.bookings[booking_id] = {
            "id": booking_id,
            "room_id": room_id,
            "user_id": user_id,
            "start_time": start_time,
            "end_time": end_time,
            "description": description,
            "created_at": None,
        }
        return booking_id

    async def update_booking(self, booking_id, start_time, end_time, description):
        self.bookings[booking_id].update(start_time=start_time, end_time=end_time, description=description)

    async def delete_booking(self, booking_id):
        del self.bookings[booking_id]

    def _view(self, booking):
        view = dict(booking)
        view["room"] = dict(self.rooms[booking["room_id"]])
        view["user"] = dict(self.users[booking["user_id"]])
        return view

    async def get_booking_view(self, booking_id):
        booking = self.bookings.get(booking_id)
        return self._view(booking) if booking else None

    async def list_booking_views(self):
        ordered = sorted(self.bookings.values(), key=lambda b: b["start_time"], reverse=True)
        return [self._view(b) for b in ordered]

    async def list_upcoming_views(self, user_id, after):
        upcoming = [b for b in self.bookings.values() if b["user_id"] == user_id and b["start_time"] > after]
        return [self._view(b) for b in sorted(upcoming, key=lambda b: b["start_time"])]


@pytest.fixture
def store():
    store = InMemoryBookingStore()
    store.add_user(1, "admin", role="admin")
    store.add_user(3, "carol")
    store.add_user(4, "dave")
    store.add_room(5)
    store.add_room(6)
    return store


# HTTP fixtures


def utc_now():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def window(days=1, hours=0, duration_minutes=60):
    """ISO start/end strings for a window offset from now."""
    start = utc_now().replace(microsecond=0) + timedelta(days=days, hours=hours)
    end = start + timedelta(minutes=duration_minutes)
    return start.isoformat(), end.isoformat()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        secret_key="test-secret",
        admin_username="admin",
        admin_email="admin@example.com",
        admin_password=ADMIN_PASSWORD,
        log_level="WARNING",
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


def register(client, username, password=PASSWORD):
    response = client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def login(client, username, password=PASSWORD):
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    # Tests pick the caller per request through the header
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def alice(client):
    user = register(client, "alice")
    return user, login(client, "alice")


@pytest.fixture
def bob(client):
    user = register(client, "bob")
    return user, login(client, "bob")


@pytest.fixture
def room_id(client, admin_headers):
    response = client.post(
        "/api/rooms", json={"name": "Board Room", "capacity": 8, "location": "2F"}, headers=admin_headers
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]
