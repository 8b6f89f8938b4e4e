from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Postgres
    DATABASE_URL: str
    DB_AUTO_CREATE_SCHEMA: bool = True

    # Google identity provider
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_USERINFO_URL: str = "https://www.googleapis.com/oauth2/v3/userinfo"
    GOOGLE_JWKS_URL: str = "https://www.googleapis.com/oauth2/v3/certs"
    IDENTITY_PROVIDER_TIMEOUT: float = 5.0

    # Secrets and passcodes
    HASHING_SECRET: str
    PASSCODE_HASH_ITERATIONS: int = 240_000
    PASSCODE_MAX_LENGTH: int = 128

    # Gift behaviour
    REOPEN_POLICY: Literal["idempotent", "error"] = "idempotent"
    ALLOW_EMAIL_ONLY_OPEN: bool = False
    APP_BASE_URL: str = "http://localhost:3000"
    DISPLAY_TIMEZONE: str = "UTC"

    # HTTP
    CORS_ALLOWED_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    TRUST_X_FORWARDED_FOR: bool = False
    TRUSTED_PROXY_IPS: list[str] = []

    # Redis / rate limiting on gift opening
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_FAIL_OPEN: bool = True
    RATE_LIMIT_OPEN_ATTEMPTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: int = 900

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_TIMEOUT: float = 10.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour
    DB_STATEMENT_TIMEOUT_MS: int = 5000

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def share_url(self, gift_id: str) -> str:
        """Link the sender hands to the recipient."""
        return f"{self.APP_BASE_URL.rstrip('/')}/gift/{gift_id}"

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update(
                {
                    "min_size": 1,
                    "max_size": min(self.DB_POOL_MAX_SIZE, 5),
                }
            )

        return config


settings = Settings()
