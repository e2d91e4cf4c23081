"""Process-wide secrets, derived once at startup and shared read-only by every request."""
import hashlib
from dataclasses import dataclass, field

from authgate.config import Settings
from authgate.errors import ConfigurationError


def derive_telegram_secret(bot_token: str) -> bytes:
    """HMAC key for widget payloads: SHA-256 of the bot token (https://core.telegram.org/widgets/login)."""
    return hashlib.sha256(bot_token.encode()).digest()


@dataclass(frozen=True)
class GatewaySecrets:
    session_signing_key: str = field(repr=False)
    telegram_secret: bytes = field(repr=False)


def load_secrets(settings: Settings) -> GatewaySecrets:
    session_secret = (settings.session_secret or "").strip()
    if not session_secret:
        raise ConfigurationError("SECRET_KEY is not configured")
    bot_token = (settings.telegram_bot_token or "").strip()
    if not bot_token:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN is not configured")
    return GatewaySecrets(
        session_signing_key=session_secret,
        telegram_secret=derive_telegram_secret(bot_token),
    )
