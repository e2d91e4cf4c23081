"""Verify Telegram Login Widget hash (https://core.telegram.org/widgets/login)."""
import hashlib
import hmac
import logging
import time
from typing import Any, Callable, Mapping, Optional

from authgate.auth.models import IdentityAssertion, Provider, TelegramClaims
from authgate.errors import InvalidWidgetSignature

logger = logging.getLogger(__name__)

# Allowed clock drift for auth_date in the future when a max age is enforced
AUTH_DATE_FUTURE_SKEW = 60


def _field_text(value: Any) -> str:
    # Booleans as the widget's JSON renders them
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value) if value is not None else ""


def _stringify(payload: Mapping[str, Any]) -> dict[str, str]:
    return {str(k): _field_text(v) for k, v in payload.items()}


def canonicalize(fields: Mapping[str, str]) -> str:
    """data-check-string: every received field except hash, sorted by key, one `key=value` per line."""
    return "\n".join(f"{k}={v}" for k, v in sorted(fields.items()) if k != "hash")


def compute_widget_hash(secret: bytes, fields: Mapping[str, str]) -> str:
    return hmac.new(
        secret,
        canonicalize(fields).encode(),
        hashlib.sha256,
    ).hexdigest()


class TelegramWidgetVerifier:
    """
    Checks a raw widget payload against the bot's shared secret.
    The data-check-string uses exactly the fields that were received, as Telegram documents.
    """

    def __init__(
        self,
        secret: bytes,
        *,
        max_age_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret
        self._max_age = max_age_seconds
        self._clock = clock

    def verify(self, payload: Mapping[str, Any]) -> IdentityAssertion:
        data = _stringify(payload)
        received_hash = data.pop("hash", "").lower()
        if not received_hash:
            raise InvalidWidgetSignature("missing hash")

        expected = compute_widget_hash(self._secret, data)
        if not hmac.compare_digest(expected.encode(), received_hash.encode()):
            raise InvalidWidgetSignature("hash mismatch")

        subject = data.get("id", "")
        if not subject:
            raise InvalidWidgetSignature("missing id")
        if self._max_age is not None:
            self._check_auth_date(data.get("auth_date"))

        claims = TelegramClaims(
            username=data.get("username"),
            firstName=data.get("first_name"),
            lastName=data.get("last_name"),
            photoUrl=data.get("photo_url"),
            authDate=data.get("auth_date"),
        )
        logger.debug("Telegram widget login verified for id=%s", subject)
        return IdentityAssertion(subject=subject, provider=Provider.TELEGRAM_WIDGET.value, claims=claims)

    def _check_auth_date(self, auth_date: Optional[str]) -> None:
        try:
            auth_date_int = int(auth_date)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise InvalidWidgetSignature("auth_date missing or not an integer")
        now = self._clock()
        if now - auth_date_int > self._max_age:
            raise InvalidWidgetSignature("auth_date is stale")
        if auth_date_int - now > AUTH_DATE_FUTURE_SKEW:
            raise InvalidWidgetSignature("auth_date is in the future")
