# movie_api/core/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Store ---
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")  # e.g. postgresql+asyncpg://...

    # --- Auth ---
    jwt_secret: Optional[str] = Field(default=None, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=120, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    reset_token_expire_minutes: int = Field(default=60, alias="RESET_TOKEN_EXPIRE_MINUTES")

    # --- HTTP surface ---
    origin: str = Field(default="", alias="ORIGIN")  # comma-separated
    cookie_samesite: Literal["lax", "strict", "none"] = Field(default="lax", alias="COOKIE_SAMESITE")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    frontend_url: str = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # --- Outbound email ---
    smtp_host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: Optional[str] = Field(default=None, alias="SMTP_USER")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    mail_from: Optional[str] = Field(default=None, alias="MAIL_FROM")

    # --- Pexels ---
    pexels_api_key: Optional[str] = Field(default=None, alias="PEXELS_API_KEY")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.origin.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def missing_required(self) -> List[str]:
        """Names of the env vars the service cannot start without."""
        missing = []
        if not self.database_url:
            missing.append("DATABASE_URL")
        if not self.jwt_secret:
            missing.append("JWT_SECRET")
        return missing


@lru_cache
def get_settings() -> Settings:
    return Settings()
