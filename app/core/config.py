"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "sqlite://",
    "sqlite+pysqlite://",
)

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_V1_PREFIX: str = "/api/v1"

    # SQLite file next to the working directory; use sqlite:// for an in-memory database
    DATABASE_URL: str = "sqlite:///./tree_service.db"
    # Create missing tables on startup. Disable when the schema is managed with Alembic.
    DB_AUTO_CREATE: bool = True
    # Seconds a transaction waits for another one holding the SQLite write lock.
    DB_LOCK_TIMEOUT_SEC: float = 30.0

    # When True, a parent_id pointing at a missing node is an error instead of being
    # treated as a root during path computation and cycle checks.
    STRICT_ANCESTRY: bool = True

    # JWT authentication
    JWT_SECRET: SecretStr = SecretStr("change-me-in-production-with-a-32-byte-secret")
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "tree-service"
    JWT_AUDIENCE: str = "tree-service-clients"
    JWT_EXPIRE_MINUTES: int = 60

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a SQLite URL (e.g. sqlite:///./tree_service.db)"
            )
        return v.strip()

    @field_validator("DB_LOCK_TIMEOUT_SEC")
    @classmethod
    def validate_db_lock_timeout(cls, v: float) -> float:
        if v <= 0 or v > 300:
            raise ValueError(
                "DB_LOCK_TIMEOUT_SEC must be greater than 0 and at most 300"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = (v or "").strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}")
        return level

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM", "JWT_ISSUER", "JWT_AUDIENCE")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM, JWT_ISSUER and JWT_AUDIENCE must be non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
