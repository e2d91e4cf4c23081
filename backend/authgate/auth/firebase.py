"""Firebase ID token verification: the delegated root of trust for federated and anonymous sign-in."""
import logging
import re
import time
from typing import Any, Callable, Optional, Protocol

import httpx
import jwt

from authgate.auth.models import VerifiedToken
from authgate.config import FIREBASE_CERTS_URL
from authgate.errors import IdentityVerificationError

logger = logging.getLogger(__name__)

ISSUER_PREFIX = "https://securetoken.google.com/"
DEFAULT_KEYS_MAX_AGE = 3600
MAX_UID_LENGTH = 128
CLOCK_SKEW_SECONDS = 60

_MAX_AGE_RE = re.compile(r"max-age=(\d+)")


class DelegatedTokenVerifier(Protocol):
    async def verify_id_token(self, id_token: str) -> VerifiedToken:
        """Return the verified subject and claims or raise IdentityVerificationError."""
        ...


def _cache_max_age(cache_control: Optional[str]) -> int:
    m = _MAX_AGE_RE.search(cache_control or "")
    return int(m.group(1)) if m else DEFAULT_KEYS_MAX_AGE


class FirebaseTokenVerifier:
    """
    Verifies Firebase Auth ID tokens the way the Admin SDK does:
    RS256 signature against Google's securetoken keys, audience = project id,
    issuer = https://securetoken.google.com/<project id>, unexpired, non-empty sub.
    Signing keys are cached for the max-age Google sends with them.
    """

    def __init__(
        self,
        project_id: str,
        *,
        certs_url: str = FIREBASE_CERTS_URL,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._project_id = project_id
        self._issuer = f"{ISSUER_PREFIX}{project_id}"
        self._certs_url = certs_url
        self._timeout = timeout
        self._http_client = http_client
        self._clock = clock
        self._keys: dict[str, jwt.PyJWK] = {}
        self._keys_expire_at = 0.0

    async def verify_id_token(self, id_token: str) -> VerifiedToken:
        if not id_token or not isinstance(id_token, str):
            raise IdentityVerificationError("empty id token")
        try:
            header = jwt.get_unverified_header(id_token)
        except jwt.PyJWTError as e:
            raise IdentityVerificationError(f"malformed id token: {e}") from e
        if header.get("alg") != "RS256":
            raise IdentityVerificationError(f"unexpected algorithm {header.get('alg')!r}")
        kid = header.get("kid")
        if not kid:
            raise IdentityVerificationError("id token has no kid")

        keys = await self._get_keys()
        signing_key = keys.get(kid)
        if signing_key is None:
            raise IdentityVerificationError(f"unknown signing key {kid!r}")

        try:
            claims = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self._project_id,
                issuer=self._issuer,
                options={"require": ["exp", "iat", "aud", "iss", "sub"]},
            )
        except jwt.PyJWTError as e:
            raise IdentityVerificationError(f"id token rejected: {e}") from e

        uid = claims.get("sub")
        if not isinstance(uid, str) or not uid or len(uid) > MAX_UID_LENGTH:
            raise IdentityVerificationError("id token has an invalid sub")
        auth_time = claims.get("auth_time")
        if auth_time is not None:
            if not isinstance(auth_time, (int, float)) or auth_time > self._clock() + CLOCK_SKEW_SECONDS:
                raise IdentityVerificationError("id token auth_time is invalid")

        firebase = claims.get("firebase")
        sign_in_provider = firebase.get("sign_in_provider") if isinstance(firebase, dict) else None
        return VerifiedToken(
            uid=uid,
            sign_in_provider=sign_in_provider if isinstance(sign_in_provider, str) else None,
            claims=claims,
        )

    async def _get_keys(self) -> dict[str, jwt.PyJWK]:
        if self._keys and self._clock() < self._keys_expire_at:
            return self._keys
        try:
            r = await self._fetch_keys()
            r.raise_for_status()
            data: Any = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Fetching Firebase signing keys failed: %s", e)
            raise IdentityVerificationError("signing keys unavailable") from e

        keys: dict[str, jwt.PyJWK] = {}
        entries = data.get("keys") if isinstance(data, dict) else None
        for entry in entries or []:
            kid = entry.get("kid") if isinstance(entry, dict) else None
            if not kid:
                continue
            try:
                keys[kid] = jwt.PyJWK(entry, algorithm="RS256")
            except jwt.PyJWTError as e:
                logger.warning("Skipping unusable Firebase signing key %s: %s", kid, e)
        self._keys = keys
        self._keys_expire_at = self._clock() + _cache_max_age(r.headers.get("cache-control"))
        logger.info("Loaded %d Firebase signing keys", len(keys))
        return keys

    async def _fetch_keys(self) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(self._certs_url)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(self._certs_url)
