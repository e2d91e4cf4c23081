"""Session JWT issue and verify."""
import time
from typing import Any, Callable, Optional

import jwt

from authgate.auth.models import Provider, ProviderClaims, provider_tag

SESSION_TTL_SECONDS = 3600  # 1 hour, not configurable

REQUIRED_CLAIMS = ["uid", "provider", "iat", "exp"]


class SessionTokenIssuer:
    def __init__(
        self,
        signing_key: str,
        *,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._key = signing_key
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, subject: str, claims: ProviderClaims, provider: "Provider | str") -> str:
        issued_at = int(self._clock())
        payload: dict[str, Any] = claims.to_payload()
        payload["iat"] = issued_at
        payload["exp"] = issued_at + SESSION_TTL_SECONDS
        # Written last so nothing in the claims record can stand in for them.
        payload["uid"] = subject
        payload["provider"] = provider_tag(provider)
        return jwt.encode(payload, self._key, algorithm=self._algorithm)

    def decode(self, token: str) -> Optional[dict[str, Any]]:
        """Session claims if the signature is valid and the token has not expired, else None."""
        try:
            return jwt.decode(
                token,
                self._key,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError:
            return None
