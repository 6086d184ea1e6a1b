"""Runtime settings resolved from the process environment."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

DEFAULT_DB_DRIVER = "postgresql+psycopg2"
DEFAULT_SESSION_COOKIE = "booktrack_session"


class BookTrackSettings(BaseSettings):
    """Configuration shared by the database layer, services and web API."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore", frozen=True)

    database_url_override: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL")
    )
    db_driver: str = Field(default=DEFAULT_DB_DRIVER, validation_alias=AliasChoices("DB_DRIVER"))
    db_host: str = Field(default="localhost", validation_alias=AliasChoices("DB_HOST"))
    db_port: Optional[int] = Field(default=None, validation_alias=AliasChoices("DB_PORT"))
    db_user: str = Field(default="booktrack", validation_alias=AliasChoices("DB_USER"))
    db_pass: Optional[SecretStr] = Field(default=None, validation_alias=AliasChoices("DB_PASS"))
    db_name: str = Field(default="booktrack", validation_alias=AliasChoices("DB_NAME"))

    app_env: str = Field(default="development", validation_alias=AliasChoices("APP_ENV"))
    session_cookie_name: str = Field(
        default=DEFAULT_SESSION_COOKIE, validation_alias=AliasChoices("BOOKTRACK_SESSION_COOKIE")
    )
    session_ttl_hours: int = Field(
        default=24, gt=0, validation_alias=AliasChoices("BOOKTRACK_SESSION_TTL_HOURS")
    )
    daily_fine: Decimal = Field(
        default=Decimal("1.00"), ge=0, validation_alias=AliasChoices("BOOKTRACK_DAILY_FINE")
    )
    loan_days: int = Field(default=14, gt=0, validation_alias=AliasChoices("BOOKTRACK_LOAN_DAYS"))
    reservation_days: int = Field(
        default=7, gt=0, validation_alias=AliasChoices("BOOKTRACK_RESERVATION_DAYS")
    )
    cors_origins: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("BOOKTRACK_CORS_ORIGINS")
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @property
    def database_url(self) -> str:
        """``DATABASE_URL`` when set, otherwise assembled from the ``DB_*`` parts."""

        if self.database_url_override is not None:
            explicit = self.database_url_override.get_secret_value().strip()
            if explicit:
                return explicit
        password = self.db_pass.get_secret_value() if self.db_pass is not None else None
        url = URL.create(
            drivername=self.db_driver,
            username=self.db_user,
            password=password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> BookTrackSettings:
    """Return the process-wide settings; ``get_settings.cache_clear()`` reloads."""

    return BookTrackSettings()


__all__ = ["BookTrackSettings", "get_settings"]
