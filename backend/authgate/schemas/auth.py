"""Request/response schemas for the auth endpoints."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class VerifyTokenIn(BaseModel):
    idToken: str
    provider: str


class AnonymousIn(BaseModel):
    idToken: str
    provider: Optional[str] = None  # sent by the client, always treated as "anonymous"


class SessionOut(BaseModel):
    sessionToken: str


class TelegramUserOut(BaseModel):
    id: str
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    photoUrl: Optional[str] = None


class WidgetSessionOut(SessionOut):
    user: TelegramUserOut


class AnonymousUserOut(BaseModel):
    id: str
    isAnonymous: Literal[True] = True


class AnonymousSessionOut(SessionOut):
    user: AnonymousUserOut


class SessionClaimsOut(BaseModel):
    """Decoded session token: fixed fields plus whatever the provider contributed."""

    model_config = ConfigDict(extra="allow")

    uid: str
    provider: str
    iat: int
    exp: int
