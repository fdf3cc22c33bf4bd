# auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from databases import Database
from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from room_booking.config import Settings
from room_booking.database import get_database
from room_booking.models import ROLE_ADMIN, ROLE_USER, users, utcnow

TOKEN_COOKIE = "token"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    """The verified caller, handed explicitly to every booking operation."""

    id: int
    username: str
    email: Optional[str] = None
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def token_for_user(user_record, settings: Settings) -> str:
    return create_access_token(
        data={
            "sub": user_record["username"],
            "id": user_record["id"],
            "username": user_record["username"],
            "role": user_record["role"],
        },
        settings=settings,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )


async def get_user_by_username(database: Database, username: str):
    return await database.fetch_one(users.select().where(users.c.username == username))


async def get_user_by_id(database: Database, user_id: int):
    return await database.fetch_one(users.select().where(users.c.id == user_id))


async def create_user(database: Database, username: str, email: str, password: str, role: str = ROLE_USER) -> int:
    query = users.insert().values(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        role=role,
        created_at=utcnow(),
    )
    return await database.execute(query)


async def authenticate(database: Database, username: str, password: str):
    user_record = await get_user_by_username(database, username)
    if not user_record or not verify_password(password, user_record["hashed_password"]):
        return None
    return user_record


def identity_from_record(user_record) -> Identity:
    return Identity(
        id=user_record["id"],
        username=user_record["username"],
        email=user_record["email"],
        role=user_record["role"],
    )


async def _decode_token_and_get_identity(token: Optional[str], settings: Settings, database: Database) -> Identity:
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        user_id = payload.get("id")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    # Role comes from the stored user so demotions apply to live tokens
    user_record = await get_user_by_id(database, int(user_id))
    if user_record is None:
        raise credentials_exception
    return identity_from_record(user_record)


async def get_current_identity(
    request: Request,
    token: Optional[str] = Cookie(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    database: Database = Depends(get_database),
) -> Identity:
    # An explicit Authorization header wins over the cookie
    if credentials is not None:
        token = credentials.credentials
    return await _decode_token_and_get_identity(token, request.app.state.settings, database)


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: Admins only")
    return identity
