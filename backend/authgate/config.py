"""Application configuration from environment."""
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FIREBASE_CERTS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # App
    app_name: str = "social-auth-gateway"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3001

    # CORS (comma-separated origins, e.g. http://localhost:3000,http://127.0.0.1:3000)
    cors_origins: str = Field(default="*", validation_alias=AliasChoices("CORS_ORIGINS", "ALLOWED_ORIGINS"))

    # Session credential: SECRET_KEY signs every issued session token
    session_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SECRET_KEY", "SESSION_SECRET"),
    )
    session_algorithm: str = "HS256"

    # Telegram Login Widget: the bot token derives the HMAC key
    telegram_bot_token: Optional[str] = None
    # Reject widget payloads older than this many seconds; unset or <= 0 disables the check
    telegram_auth_max_age: Optional[int] = None

    # Firebase ID tokens (federated + anonymous flows)
    firebase_project_id: Optional[str] = None
    firebase_certs_url: str = FIREBASE_CERTS_URL
    firebase_http_timeout: float = 10.0

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        if not origins:
            return ["*"]
        return origins

    @property
    def widget_max_age(self) -> Optional[int]:
        if not self.telegram_auth_max_age or self.telegram_auth_max_age <= 0:
            return None
        return self.telegram_auth_max_age


@lru_cache
def get_settings() -> Settings:
    return Settings()
