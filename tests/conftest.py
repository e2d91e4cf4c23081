"""
Pytest config.

Puts `backend/` on sys.path so `import authgate` works without an editable install,
and provides shared keys/signers for the Firebase and Telegram widget tests.
"""

from __future__ import annotations

import json
import sys
import time
from pathlib import Path
from typing import Any, Callable

import pytest


def _ensure_backend_on_syspath() -> None:
    backend = Path(__file__).resolve().parents[1] / "backend"
    backend_str = str(backend)
    if backend_str not in sys.path:
        sys.path.insert(0, backend_str)


_ensure_backend_on_syspath()

import httpx  # noqa: E402
import jwt  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402

from authgate.auth.models import VerifiedToken  # noqa: E402
from authgate.auth.secrets import derive_telegram_secret  # noqa: E402
from authgate.auth.telegram_widget import compute_widget_hash  # noqa: E402
from authgate.config import get_settings  # noqa: E402
from authgate.errors import IdentityVerificationError  # noqa: E402

BOT_TOKEN = "123456:test-bot-token"
SESSION_SECRET = "test-session-secret-for-unit-tests-only"
PROJECT_ID = "demo-social-auth"
KID = "test-key-1"


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def telegram_secret() -> bytes:
    return derive_telegram_secret(BOT_TOKEN)


@pytest.fixture
def sign_widget(telegram_secret: bytes) -> Callable[[dict[str, str]], dict[str, str]]:
    """Return a copy of the payload with the hash the Telegram widget would attach."""

    def _sign(fields: dict[str, str]) -> dict[str, str]:
        return {**fields, "hash": compute_widget_hash(telegram_secret, fields)}

    return _sign


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(rsa_private_key) -> dict[str, Any]:
    jwk = json.loads(jwt.algorithms.RSAAlgorithm.to_jwk(rsa_private_key.public_key()))
    jwk.update({"kid": KID, "alg": "RS256", "use": "sig"})
    return {"keys": [jwk]}


@pytest.fixture
def make_id_token(rsa_private_key) -> Callable[..., str]:
    """Mint a Firebase-shaped ID token signed with the test key."""

    def _make(
        uid: str = "user-1",
        *,
        sign_in_provider: str = "google.com",
        extra: dict[str, Any] | None = None,
        kid: str = KID,
        **overrides: Any,
    ) -> str:
        now = int(time.time())
        claims: dict[str, Any] = {
            "iss": f"https://securetoken.google.com/{PROJECT_ID}",
            "aud": PROJECT_ID,
            "auth_time": now - 30,
            "user_id": uid,
            "sub": uid,
            "iat": now - 10,
            "exp": now + 3600,
            "firebase": {"sign_in_provider": sign_in_provider, "identities": {}},
        }
        claims.update(extra or {})
        claims.update(overrides)
        return jwt.encode(claims, rsa_private_key, algorithm="RS256", headers={"kid": kid})

    return _make


@pytest.fixture
def certs_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def certs_transport(jwks, certs_requests) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        certs_requests.append(request)
        return httpx.Response(200, json=jwks, headers={"Cache-Control": "public, max-age=19800, must-revalidate"})

    return httpx.MockTransport(handler)


class FakeTokenVerifier:
    """Delegated verifier stand-in: accepts tokens registered in `tokens`."""

    def __init__(self, tokens: dict[str, VerifiedToken] | None = None) -> None:
        self.tokens = dict(tokens or {})
        self.calls: list[str] = []

    async def verify_id_token(self, id_token: str) -> VerifiedToken:
        self.calls.append(id_token)
        verified = self.tokens.get(id_token)
        if verified is None:
            raise IdentityVerificationError("unknown token")
        return verified


@pytest.fixture
def fake_verifier() -> FakeTokenVerifier:
    return FakeTokenVerifier(
        {
            "google-token": VerifiedToken(
                uid="g-uid",
                sign_in_provider="google.com",
                claims={"google": {"email": "a@b.com", "name": "Ann B", "picture": "https://img/a.png"}},
            ),
            "twitter-token": VerifiedToken(
                uid="t-uid",
                sign_in_provider="twitter.com",
                claims={"twitter": {"screen_name": "ann", "name": "Ann", "profile_image_url": "https://img/t.png"}},
            ),
            "guest-token": VerifiedToken(uid="anon-uid", sign_in_provider="anonymous", claims={}),
        }
    )
