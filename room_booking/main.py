# main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import fastapi
import uvicorn
from databases import Database
from fastapi.middleware.cors import CORSMiddleware

from room_booking.auth import create_user
from room_booking.config import Settings
from room_booking.database import create_database, create_tables
from room_booking.errors import register_error_handlers
from room_booking.models import ROLE_ADMIN, users
from room_booking.routers import auth, bookings, rooms
from room_booking.routers import users as users_router

logger = logging.getLogger(__name__)


async def seed_admin(database: Database, settings: Settings):
    """Create the configured admin account on first start."""
    async with database.transaction():
        query = users.select().where(users.c.username == settings.admin_username)
        if not await database.fetch_one(query):
            await create_user(
                database,
                username=settings.admin_username,
                email=settings.admin_email,
                password=settings.admin_password,
                role=ROLE_ADMIN,
            )
            logger.info("Created admin user %s", settings.admin_username)


def create_app(settings: Optional[Settings] = None) -> fastapi.FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.secret_key == Settings.secret_key:
        logger.warning("SECRET_KEY is not set; using the development default")

    database = create_database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: fastapi.FastAPI):
        await database.connect()
        # Create tables if they don't exist
        create_tables(settings.database_url)
        await seed_admin(database, settings)
        logger.info("Database connected")
        try:
            yield
        finally:
            await database.disconnect()
            logger.info("Database disconnected")

    app = fastapi.FastAPI(title="Room Booking", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(auth.router)
    app.include_router(rooms.router)
    app.include_router(bookings.router)
    app.include_router(users_router.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def run():
    """Console entry point: serve the app with uvicorn."""
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
