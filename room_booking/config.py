# config.py
import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass
class Settings:
    """Runtime configuration for the booking service."""

    database_url: str = "sqlite:///./room_booking.db"
    secret_key: str = "change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    admin_username: str = "admin"
    admin_email: str = "admin@example.com"
    admin_password: str = "admin123"
    log_level: str = "INFO"
    cookie_secure: bool = False
    # Browser origins allowed to call the API with the token cookie
    cors_origins: Tuple[str, ...] = ("http://localhost:3000",)
    host: str = "127.0.0.1"
    port: int = 5050

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            secret_key=os.getenv("SECRET_KEY", cls.secret_key),
            algorithm=os.getenv("ALGORITHM", cls.algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", cls.access_token_expire_minutes)
            ),
            admin_username=os.getenv("ADMIN_USERNAME", cls.admin_username),
            admin_email=os.getenv("ADMIN_EMAIL", cls.admin_email),
            admin_password=os.getenv("ADMIN_PASSWORD", cls.admin_password),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            cookie_secure=_env_bool("COOKIE_SECURE", cls.cookie_secure),
            cors_origins=_env_list("CORS_ORIGINS", cls.cors_origins),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", cls.port)),
        )
