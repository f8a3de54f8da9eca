import json
import base64
from hashlib import sha256
from datetime import timedelta
from typing import Optional, List, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "SchoolDesk"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False)
    PRODUCTION: bool = Field(default=False)

    # Database Settings
    DATABASE_URL: str = Field(...)
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=10)
    DB_TIMEOUT_SECONDS: float = Field(default=15.0)
    DB_CONNECT_ATTEMPTS: int = Field(default=3)
    DB_ECHO: bool = Field(default=False)

    # Authentication Settings
    SECRET_KEY: str = Field(...)
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_DAYS: int = Field(default=7)
    TOKEN_ISSUER: str = Field(default="schooldesk")

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ]
    )

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: Optional[str] = Field(default=None)
    LOG_TO_FILES: bool = Field(default=True)

    # Bootstrap super admin, created on startup when both are set
    SUPER_ADMIN_EMAIL: Optional[str] = Field(default=None)
    SUPER_ADMIN_PASSWORD: Optional[str] = Field(default=None)
    SUPER_ADMIN_USERNAME: str = Field(default="superadmin")

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Stretch short secrets so HS256 always gets at least 32 bytes of key"""
        if not v:
            raise ValueError("SECRET_KEY must not be empty")
        if len(v.encode()) < 32:
            return base64.urlsafe_b64encode(sha256(v.encode()).digest()).decode()
        return v

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )


# Initialize settings
settings = Settings()


# Helper Functions
def get_token_expires_delta(days: Optional[int] = None) -> timedelta:
    if days is None:
        days = settings.ACCESS_TOKEN_EXPIRE_DAYS
    return timedelta(days=days)


def get_database_url() -> str:
    return settings.DATABASE_URL


def get_jwt_settings() -> dict:
    return {
        "secret_key": settings.SECRET_KEY,
        "algorithm": settings.ALGORITHM,
        "access_token_expire_days": settings.ACCESS_TOKEN_EXPIRE_DAYS,
        "token_issuer": settings.TOKEN_ISSUER
    }


def get_logging_config() -> Dict[str, Optional[str]]:
    return {
        "log_level": settings.LOG_LEVEL,
        "log_dir": settings.LOG_DIR
    }
