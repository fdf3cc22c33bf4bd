# routers/auth.py
import logging

from databases import Database
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from room_booking.auth import (
    TOKEN_COOKIE,
    Identity,
    authenticate,
    create_user,
    get_current_identity,
    get_user_by_id,
    identity_from_record,
    token_for_user,
)
from room_booking.database import get_database
from room_booking.models import users
from room_booking.schemas import LoginRequest, Token, UserCreate, UserSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
async def register_user(user: UserCreate, database: Database = Depends(get_database)):
    # Check if user already exists
    if await database.fetch_one(users.select().where(users.c.username == user.username)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already registered.")
    if await database.fetch_one(users.select().where(users.c.email == user.email)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered.")

    user_id = await create_user(database, user.username, user.email, user.password)
    logger.info("Registered user %s (%s)", user_id, user.username)
    return identity_from_record(await get_user_by_id(database, user_id))


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    database: Database = Depends(get_database),
):
    user_record = await authenticate(database, credentials.username, credentials.password)
    if user_record is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    settings = request.app.state.settings
    access_token = token_for_user(user_record, settings)
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        max_age=settings.access_token_expire_minutes * 60,
    )
    return {"access_token": access_token, "token_type": "bearer", "user": identity_from_record(user_record)}


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserSummary)
async def read_current_user(identity: Identity = Depends(get_current_identity)):
    return identity
