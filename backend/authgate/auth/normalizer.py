"""Map a verified Firebase token onto the claims record of the declared provider.

The caller declares the provider, but provider-specific fields are read only when the
token's own `sign_in_provider` agrees: a Twitter-issued token submitted as `google`
yields an empty GoogleClaims, never Twitter data relabelled as Google data.
"""
from typing import Any, Callable, Optional

from authgate.auth.models import (
    FEDERATED_SIGN_IN_PROVIDERS,
    AnonymousClaims,
    FacebookClaims,
    GoogleClaims,
    NoClaims,
    Provider,
    ProviderClaims,
    TwitterClaims,
    VerifiedToken,
)


def _section(verified: VerifiedToken, provider: Provider) -> dict[str, Any]:
    """Provider sub-object of the token claims, or {} when the token was not issued via that provider."""
    if verified.sign_in_provider != FEDERATED_SIGN_IN_PROVIDERS[provider]:
        return {}
    data = verified.claims.get(provider.value)
    return data if isinstance(data, dict) else {}


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _twitter(verified: VerifiedToken) -> TwitterClaims:
    data = _section(verified, Provider.TWITTER)
    return TwitterClaims(
        username=_str(data.get("screen_name")),
        displayName=_str(data.get("name")),
        photoUrl=_str(data.get("profile_image_url")),
    )


def _google(verified: VerifiedToken) -> GoogleClaims:
    data = _section(verified, Provider.GOOGLE)
    return GoogleClaims(
        email=_str(data.get("email")),
        displayName=_str(data.get("name")),
        photoUrl=_str(data.get("picture")),
    )


def _facebook(verified: VerifiedToken) -> FacebookClaims:
    data = _section(verified, Provider.FACEBOOK)
    picture = data.get("picture")
    picture_data = picture.get("data") if isinstance(picture, dict) else None
    photo_url = picture_data.get("url") if isinstance(picture_data, dict) else None
    return FacebookClaims(
        email=_str(data.get("email")),
        displayName=_str(data.get("name")),
        photoUrl=_str(photo_url),
    )


def _anonymous(verified: VerifiedToken) -> AnonymousClaims:
    return AnonymousClaims()


_NORMALIZERS: dict[Provider, Callable[[VerifiedToken], ProviderClaims]] = {
    Provider.TWITTER: _twitter,
    Provider.GOOGLE: _google,
    Provider.FACEBOOK: _facebook,
    Provider.ANONYMOUS: _anonymous,
}


def normalize(provider: str, verified: VerifiedToken) -> ProviderClaims:
    """Claims for `provider` (exact, case-sensitive tag). Unknown tags contribute nothing."""
    try:
        tag = Provider(provider)
    except ValueError:
        return NoClaims()
    rule = _NORMALIZERS.get(tag)
    if rule is None:
        return NoClaims()
    return rule(verified)
