"""Identity verification and session issuance: verifiers, claims normalizer, token issuer, gateway."""
from authgate.auth.gateway import AuthGateway, build_gateway
from authgate.auth.models import IdentityAssertion, Provider, VerifiedToken
from authgate.auth.normalizer import normalize
from authgate.auth.session_tokens import SessionTokenIssuer
from authgate.auth.telegram_widget import TelegramWidgetVerifier

__all__ = [
    "AuthGateway",
    "build_gateway",
    "IdentityAssertion",
    "Provider",
    "VerifiedToken",
    "normalize",
    "SessionTokenIssuer",
    "TelegramWidgetVerifier",
]
