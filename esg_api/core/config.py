import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    APP_ENV: str = "development"
    APP_DEBUG: bool = False
    APP_VERSION: str | None = None  # e.g. "1.2.3" or git SHA, used as Sentry release tag
    FRONTEND_URL: str = "http://localhost:3000"

    # Security
    MAX_REQUEST_BODY_BYTES: int = 1_048_576  # 1 MB

    # Auth: JWT_SECRET has no default, the process refuses to boot without it
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12

    @model_validator(mode="after")
    def _validate_production_secrets(self) -> "Settings":
        if not self.JWT_SECRET.strip():
            print(  # noqa: T201
                "FATAL: JWT_SECRET must not be empty.",
                file=sys.stderr,
            )
            sys.exit(1)
        if self.APP_ENV == "production":
            if len(self.JWT_SECRET) < 32:
                print(  # noqa: T201
                    "FATAL: JWT_SECRET must be at least 32 characters in production.",
                    file=sys.stderr,
                )
                sys.exit(1)
            if not self.SENTRY_DSN:
                import warnings
                warnings.warn(
                    "SENTRY_DSN not set in production: errors will be invisible",
                    stacklevel=2,
                )
        return self

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./esg.db"
    # Create missing tables on startup (no migration tooling ships with the API)
    DATABASE_AUTO_CREATE: bool = True

    # Exports
    REPORT_CURRENCY: str = "INR"
    REPORT_BRAND_COLOR: str = "#1E3A5F"

    # Sentry error monitoring: set SENTRY_DSN to enable; no-op when unset
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"


settings = Settings()
