"""Provider tags, per-provider claims records and the verified identity types."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict


class Provider(str, Enum):
    TWITTER = "twitter"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    ANONYMOUS = "anonymous"
    TELEGRAM_WIDGET = "telegram-widget"


# Firebase `firebase.sign_in_provider` value recorded for each federated provider
FEDERATED_SIGN_IN_PROVIDERS: dict[Provider, str] = {
    Provider.TWITTER: "twitter.com",
    Provider.GOOGLE: "google.com",
    Provider.FACEBOOK: "facebook.com",
}


def provider_tag(provider: "Provider | str") -> str:
    return provider.value if isinstance(provider, Provider) else str(provider)


class ProviderClaims(BaseModel):
    """Base for the claims a provider contributes to a session. Never carries uid or provider."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_payload(self) -> dict[str, Any]:
        # Unset attributes stay out of the token rather than showing up as null/"".
        return self.model_dump(exclude_none=True)


class NoClaims(ProviderClaims):
    pass


class TwitterClaims(ProviderClaims):
    username: Optional[str] = None
    displayName: Optional[str] = None
    photoUrl: Optional[str] = None


class GoogleClaims(ProviderClaims):
    email: Optional[str] = None
    displayName: Optional[str] = None
    photoUrl: Optional[str] = None


class FacebookClaims(ProviderClaims):
    email: Optional[str] = None
    displayName: Optional[str] = None
    photoUrl: Optional[str] = None


class AnonymousClaims(ProviderClaims):
    isAnonymous: Literal[True] = True


class TelegramClaims(ProviderClaims):
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    photoUrl: Optional[str] = None
    authDate: Optional[str] = None


@dataclass(frozen=True)
class VerifiedToken:
    """Output of the delegated verifier: the token's subject plus its decoded claims."""

    uid: str
    sign_in_provider: Optional[str]
    claims: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class IdentityAssertion:
    """Who authenticated, via which provider, with which provider-supplied attributes."""

    subject: str
    provider: str
    claims: ProviderClaims
