"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
    "sqlite+pysqlite://",
)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


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
    # Routes are served at the root (/books, /auth, /health) unless a prefix is set.
    API_PREFIX: str = ""
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # "memory" keeps books and accounts in process; nothing survives a restart.
    STORE_BACKEND: Literal["sql", "memory"] = "sql"

    # Required for the sql backend; no default so a missing value fails startup.
    DATABASE_URL: str | None = None
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_MAX_LIFETIME_SEC: int = 3600
    DB_POOL_IDLE_TIMEOUT_SEC: int = 900
    # Applied to pool checkout and to each statement.
    DB_TIMEOUT_SEC: float = 5.0
    # Dev convenience; production schemas are managed with alembic.
    DB_CREATE_TABLES: bool = False

    # JWT authentication. JWT_SECRET has no default: the service must not start without it.
    JWT_SECRET: SecretStr
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 15

    BCRYPT_ROUNDS: int = 12

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not v.strip():
            raise ValueError("DATABASE_URL must be non-empty when set")
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL (e.g. postgresql+psycopg2://)"
            )
        return v.strip()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}")
        return level

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api/v1) or be empty")
        return v

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("DB_POOL_MIN_SIZE", "DB_POOL_MAX_SIZE")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("DB pool sizes must be between 1 and 100")
        return v

    @field_validator("DB_POOL_MAX_LIFETIME_SEC", "DB_POOL_IDLE_TIMEOUT_SEC")
    @classmethod
    def validate_pool_durations(cls, v: int) -> int:
        if v < 1 or v > 86400:
            raise ValueError("DB pool lifetimes must be between 1 and 86400 seconds")
        return v

    @field_validator("DB_TIMEOUT_SEC")
    @classmethod
    def validate_db_timeout(cls, v: float) -> float:
        if v <= 0 or v > 60:
            raise ValueError("DB_TIMEOUT_SEC must be greater than 0 and at most 60")
        return v

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("HS"):
            raise ValueError("JWT_ALGORITHM must be a symmetric HMAC algorithm (HS256, HS384, HS512)")
        return v

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError("JWT_EXPIRE_MINUTES must be between 1 and 1440 (1 min to 1 day)")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 16:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 16")
        return v

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        if self.STORE_BACKEND == "sql" and not self.DATABASE_URL:
            raise ValueError("DATABASE_URL is required when STORE_BACKEND=sql")
        if self.DB_POOL_MAX_SIZE < self.DB_POOL_MIN_SIZE:
            raise ValueError("DB_POOL_MAX_SIZE must be >= DB_POOL_MIN_SIZE")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, built once on first call."""
    return Settings()
