"""Auth API: Firebase ID token / Telegram Login Widget / anonymous guest -> session JWT."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from authgate.auth.gateway import AuthGateway
from authgate.deps import get_gateway, get_session_claims
from authgate.errors import IdentityVerificationError, InvalidWidgetSignature
from authgate.schemas.auth import (
    AnonymousIn,
    AnonymousSessionOut,
    SessionClaimsOut,
    SessionOut,
    VerifyTokenIn,
    WidgetSessionOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _unauthorized(exc: IdentityVerificationError) -> HTTPException:
    logger.info("ID token rejected: %s", exc)
    return HTTPException(status_code=401, detail="Unauthorized")


def _widget_forbidden(payload: dict[str, Any], exc: InvalidWidgetSignature) -> HTTPException:
    logger.info("Telegram widget login rejected (id=%s): %s", payload.get("id"), exc)
    return HTTPException(status_code=403, detail="Invalid authentication")


@router.post("/verify-token", response_model=SessionOut)
async def verify_token(body: VerifyTokenIn, gateway: AuthGateway = Depends(get_gateway)):
    """Firebase ID token from a federated sign-in (twitter, google, facebook, ...)."""
    try:
        return await gateway.verify_federated(body.idToken, body.provider)
    except IdentityVerificationError as e:
        raise _unauthorized(e)


@router.get("/telegram", response_model=WidgetSessionOut, response_model_exclude_none=True)
async def telegram_auth_redirect(request: Request, gateway: AuthGateway = Depends(get_gateway)):
    """Widget `data-auth-url` redirect: login data arrives as query parameters."""
    payload = dict(request.query_params)
    try:
        return gateway.verify_widget(payload)
    except InvalidWidgetSignature as e:
        raise _widget_forbidden(payload, e)


@router.post("/telegram", response_model=WidgetSessionOut, response_model_exclude_none=True)
async def telegram_auth(request: Request, gateway: AuthGateway = Depends(get_gateway)):
    """
    Widget `onauth` callback: body is the raw JSON from the widget
    (id, first_name, last_name?, username?, photo_url?, auth_date, hash).
    The hash is checked over exactly the fields that were sent.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    try:
        return gateway.verify_widget(payload)
    except InvalidWidgetSignature as e:
        raise _widget_forbidden(payload, e)


@router.post("/anonymous", response_model=AnonymousSessionOut)
async def anonymous_auth(body: AnonymousIn, gateway: AuthGateway = Depends(get_gateway)):
    """Firebase anonymous (guest) sign-in."""
    try:
        return await gateway.verify_anonymous(body.idToken)
    except IdentityVerificationError as e:
        raise _unauthorized(e)


@router.get("/session", response_model=SessionClaimsOut)
async def current_session(claims: dict[str, Any] = Depends(get_session_claims)):
    """Decoded claims of the bearer session token (401 if invalid or expired)."""
    return claims
