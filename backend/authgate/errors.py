"""Error taxonomy. Messages go to server logs only, never to the client."""


class AuthGatewayError(Exception):
    """Base class for every error raised by the gateway core."""


class IdentityVerificationError(AuthGatewayError):
    """Delegated verifier rejected an ID token (bad signature, expired, malformed, wrong audience)."""


class InvalidWidgetSignature(AuthGatewayError):
    """Telegram widget payload failed the HMAC check or lacks a required field."""


class ConfigurationError(AuthGatewayError):
    """A required secret or setting is missing at startup."""
