from __future__ import annotations

import httpx
import pytest

from authgate.auth.gateway import AuthGateway, build_gateway
from authgate.auth.secrets import GatewaySecrets, derive_telegram_secret
from authgate.auth.session_tokens import SessionTokenIssuer
from authgate.auth.telegram_widget import TelegramWidgetVerifier
from authgate.config import Settings
from authgate.errors import ConfigurationError, IdentityVerificationError, InvalidWidgetSignature

from conftest import BOT_TOKEN, PROJECT_ID, SESSION_SECRET


@pytest.fixture
def issuer() -> SessionTokenIssuer:
    return SessionTokenIssuer(SESSION_SECRET)


@pytest.fixture
def gateway(fake_verifier, telegram_secret, issuer) -> AuthGateway:
    return AuthGateway(fake_verifier, TelegramWidgetVerifier(telegram_secret), issuer)


@pytest.mark.asyncio
async def test_google_token_issues_session_with_email(gateway, issuer) -> None:
    out = await gateway.verify_federated("google-token", "google")
    claims = issuer.decode(out.sessionToken)
    assert claims["provider"] == "google"
    assert claims["uid"] == "g-uid"
    assert claims["email"] == "a@b.com"
    assert claims["displayName"] == "Ann B"


@pytest.mark.asyncio
async def test_declared_provider_mismatch_carries_no_profile(gateway, issuer) -> None:
    out = await gateway.verify_federated("twitter-token", "google")
    claims = issuer.decode(out.sessionToken)
    assert claims["provider"] == "google"
    assert claims["uid"] == "t-uid"
    assert set(claims) == {"uid", "provider", "iat", "exp"}


@pytest.mark.asyncio
async def test_unknown_provider_tag_passes_through(gateway, issuer) -> None:
    out = await gateway.verify_federated("google-token", "github")
    claims = issuer.decode(out.sessionToken)
    assert claims["provider"] == "github"
    assert set(claims) == {"uid", "provider", "iat", "exp"}


@pytest.mark.asyncio
async def test_federated_anonymous_provider_marks_guest(gateway, issuer) -> None:
    out = await gateway.verify_federated("guest-token", "anonymous")
    assert issuer.decode(out.sessionToken)["isAnonymous"] is True


@pytest.mark.asyncio
async def test_rejected_token_propagates(gateway) -> None:
    with pytest.raises(IdentityVerificationError):
        await gateway.verify_federated("forged", "google")


@pytest.mark.asyncio
async def test_anonymous_flow_claims_are_exact(gateway, issuer) -> None:
    out = await gateway.verify_anonymous("guest-token")
    claims = issuer.decode(out.sessionToken)
    assert {k: v for k, v in claims.items() if k not in ("iat", "exp")} == {
        "provider": "anonymous",
        "isAnonymous": True,
        "uid": "anon-uid",
    }
    assert out.user.id == "anon-uid"
    assert out.user.isAnonymous is True


@pytest.mark.asyncio
async def test_anonymous_flow_ignores_provider_profile(gateway, issuer) -> None:
    out = await gateway.verify_anonymous("google-token")
    claims = issuer.decode(out.sessionToken)
    assert "email" not in claims
    assert claims["provider"] == "anonymous"


@pytest.mark.asyncio
async def test_anonymous_flow_rejects_bad_token(gateway) -> None:
    with pytest.raises(IdentityVerificationError):
        await gateway.verify_anonymous("forged")


def test_widget_flow_returns_user_echo(gateway, issuer, sign_widget) -> None:
    out = gateway.verify_widget(sign_widget({"id": "42", "first_name": "Ann", "auth_date": "100"}))
    assert out.user.id == "42"
    assert out.user.firstName == "Ann"
    assert out.user.username is None
    claims = issuer.decode(out.sessionToken)
    assert claims["uid"] == "42"
    assert claims["provider"] == "telegram-widget"
    assert claims["firstName"] == "Ann"
    assert claims["authDate"] == "100"
    assert "username" not in claims


def test_widget_flow_rejects_altered_hash(gateway, sign_widget) -> None:
    payload = sign_widget({"id": "42", "first_name": "Ann", "auth_date": "100"})
    payload["hash"] = ("f" if payload["hash"][0] != "f" else "e") + payload["hash"][1:]
    with pytest.raises(InvalidWidgetSignature):
        gateway.verify_widget(payload)


def test_build_gateway_requires_project_id() -> None:
    settings = Settings(session_secret=SESSION_SECRET, telegram_bot_token=BOT_TOKEN, firebase_project_id=None)
    secrets = GatewaySecrets(SESSION_SECRET, derive_telegram_secret(BOT_TOKEN))
    with pytest.raises(ConfigurationError):
        build_gateway(settings, secrets)


@pytest.mark.asyncio
async def test_built_gateway_verifies_real_firebase_tokens(certs_transport, make_id_token) -> None:
    settings = Settings(
        session_secret=SESSION_SECRET,
        telegram_bot_token=BOT_TOKEN,
        firebase_project_id=PROJECT_ID,
        firebase_certs_url="https://certs.test/jwk",
    )
    secrets = GatewaySecrets(SESSION_SECRET, derive_telegram_secret(BOT_TOKEN))
    gateway = build_gateway(settings, secrets, http_client=httpx.AsyncClient(transport=certs_transport))
    token = make_id_token("fb-uid", sign_in_provider="facebook.com", extra={"facebook": {"name": "Ann F"}})
    out = await gateway.verify_federated(token, "facebook")
    claims = gateway.issuer.decode(out.sessionToken)
    assert claims["uid"] == "fb-uid"
    assert claims["displayName"] == "Ann F"


@pytest.mark.asyncio
async def test_federated_flow_refuses_widget_provider_tag(gateway, fake_verifier) -> None:
    with pytest.raises(IdentityVerificationError):
        await gateway.verify_federated("google-token", "telegram-widget")
    assert fake_verifier.calls == []
