import json
import re
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _parse_cors_origins(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, list):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return []
    if raw == "*":
        return ["*"]

    # Prefer JSON, but tolerate comma/space separated values.
    if raw.startswith(("[", "{", '"', "'")):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]
        if isinstance(parsed, str):
            raw = parsed.strip()
            if not raw or raw == "[]":
                return []
            if raw == "*":
                return ["*"]

    parts = [p for p in re.split(r"[,\s]+", raw) if p]
    origins: list[str] = []
    for part in parts:
        if part == "*":
            return ["*"]
        if "://" in part:
            origins.append(part)
            continue
        # A bare host is allowed over both schemes.
        origins.append(f"http://{part}")
        origins.append(f"https://{part}")

    seen: set[str] = set()
    result: list[str] = []
    for origin in origins:
        if origin in seen:
            continue
        seen.add(origin)
        result.append(origin)
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - exposes exception messages in 500 responses
    debug: bool = False

    # PostgreSQL settings
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "eventsite"
    db_password: str = "eventsite"
    db_name: str = "eventsite"

    # Connection pool settings
    db_pool_size: int = 10
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 300
    db_pool_pre_ping: bool = True
    db_command_timeout: float = 30.0

    # SQLite pool settings (local runs and tests)
    db_sqlite_pool_size: int = 5
    db_sqlite_max_overflow: int = 10

    # Explicit DATABASE_URL (takes priority over db_* settings)
    database_url_override: str = Field(default="", validation_alias="DATABASE_URL")

    @property
    def database_url(self) -> str:
        """Build database connection URL.

        Priority:
        1. database_url_override (from DATABASE_URL env var or .env file)
        2. Built from db_* settings
        """
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}@"
            f"{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # Session credential settings
    session_secret: str = ""
    session_ttl_seconds: int = 60 * 60 * 24  # 24h
    session_cookie_name: str = "session"
    session_cookie_secure: bool = False
    session_clock_tolerance_seconds: int = 5

    # Quotas granted to attendees created without explicit values
    default_quota_indomie: int = 1
    default_quota_beer: int = 3

    # Admin attendee listing
    admin_page_size_default: int = 20
    admin_page_size_max: int = 100

    # QR rendering
    qr_box_size: int = 8
    qr_border: int = 2

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # CORS settings
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator("session_ttl_seconds")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        """Validate session TTL is positive."""
        if v < 1:
            raise ValueError("session_ttl_seconds must be at least 1")
        return v

    @field_validator("session_clock_tolerance_seconds")
    @classmethod
    def validate_clock_tolerance(cls, v: int) -> int:
        if v < 0:
            raise ValueError("session_clock_tolerance_seconds cannot be negative")
        return v

    @field_validator("default_quota_indomie", "default_quota_beer")
    @classmethod
    def validate_default_quota(cls, v: int) -> int:
        """Validate default quotas are non-negative."""
        if v < 0:
            raise ValueError("default quotas cannot be negative")
        return v

    @field_validator("admin_page_size_default", "admin_page_size_max")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page size values must be at least 1")
        return v

    @field_validator(
        "db_pool_size",
        "db_max_overflow",
        "db_sqlite_pool_size",
        "db_sqlite_max_overflow",
    )
    @classmethod
    def validate_pool_size_positive(cls, v: int) -> int:
        """Validate pool_size is positive."""
        if v < 1:
            raise ValueError("pool size values must be at least 1")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
