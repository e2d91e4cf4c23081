"""Authentication gateway: three verification flows, each ending in one session token."""
import logging
from typing import Any, Mapping, Optional

import httpx

from authgate.auth.firebase import DelegatedTokenVerifier, FirebaseTokenVerifier
from authgate.auth.models import AnonymousClaims, Provider
from authgate.auth.normalizer import normalize
from authgate.auth.secrets import GatewaySecrets
from authgate.auth.session_tokens import SessionTokenIssuer
from authgate.auth.telegram_widget import TelegramWidgetVerifier
from authgate.config import Settings
from authgate.errors import ConfigurationError, IdentityVerificationError
from authgate.schemas.auth import (
    AnonymousSessionOut,
    AnonymousUserOut,
    SessionOut,
    TelegramUserOut,
    WidgetSessionOut,
)

logger = logging.getLogger(__name__)


class AuthGateway:
    """Stateless; one instance is built at startup and shared by every request."""

    def __init__(
        self,
        token_verifier: DelegatedTokenVerifier,
        widget_verifier: TelegramWidgetVerifier,
        issuer: SessionTokenIssuer,
    ) -> None:
        self._token_verifier = token_verifier
        self._widget_verifier = widget_verifier
        self._issuer = issuer

    @property
    def issuer(self) -> SessionTokenIssuer:
        return self._issuer

    async def verify_federated(self, id_token: str, provider: str) -> SessionOut:
        """Federated (or anonymous) Firebase sign-in. Raises IdentityVerificationError."""
        if provider == Provider.TELEGRAM_WIDGET.value:
            # Reserved for payloads checked by the widget verifier.
            raise IdentityVerificationError(f"provider {provider!r} is not a federated provider")
        verified = await self._token_verifier.verify_id_token(id_token)
        claims = normalize(provider, verified)
        logger.info(
            "Federated login: provider=%s sign_in_provider=%s uid=%s",
            provider,
            verified.sign_in_provider,
            verified.uid,
        )
        return SessionOut(sessionToken=self._issuer.issue(verified.uid, claims, provider))

    async def verify_anonymous(self, id_token: str) -> AnonymousSessionOut:
        """Guest sign-in. Raises IdentityVerificationError."""
        verified = await self._token_verifier.verify_id_token(id_token)
        token = self._issuer.issue(verified.uid, AnonymousClaims(), Provider.ANONYMOUS)
        logger.info("Anonymous login: uid=%s", verified.uid)
        return AnonymousSessionOut(
            sessionToken=token,
            user=AnonymousUserOut(id=verified.uid),
        )

    def verify_widget(self, payload: Mapping[str, Any]) -> WidgetSessionOut:
        """Telegram Login Widget. Raises InvalidWidgetSignature."""
        assertion = self._widget_verifier.verify(payload)
        token = self._issuer.issue(assertion.subject, assertion.claims, assertion.provider)
        logger.info("Telegram widget login: id=%s", assertion.subject)
        profile = assertion.claims.to_payload()
        # Echo for immediate UI use; the token is the authoritative copy.
        return WidgetSessionOut(
            sessionToken=token,
            user=TelegramUserOut(
                id=assertion.subject,
                username=profile.get("username"),
                firstName=profile.get("firstName"),
                lastName=profile.get("lastName"),
                photoUrl=profile.get("photoUrl"),
            ),
        )


def build_gateway(
    settings: Settings,
    secrets: GatewaySecrets,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> AuthGateway:
    project_id = (settings.firebase_project_id or "").strip()
    if not project_id:
        raise ConfigurationError("FIREBASE_PROJECT_ID is not configured")
    return AuthGateway(
        token_verifier=FirebaseTokenVerifier(
            project_id,
            certs_url=settings.firebase_certs_url,
            timeout=settings.firebase_http_timeout,
            http_client=http_client,
        ),
        widget_verifier=TelegramWidgetVerifier(
            secrets.telegram_secret,
            max_age_seconds=settings.widget_max_age,
        ),
        issuer=SessionTokenIssuer(
            secrets.session_signing_key,
            algorithm=settings.session_algorithm,
        ),
    )
