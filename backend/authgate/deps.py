"""Shared FastAPI dependencies."""
from typing import Any

from fastapi import Depends, Header, HTTPException, Request

from authgate.auth.gateway import AuthGateway


def get_gateway(request: Request) -> AuthGateway:
    """Gateway built once in the lifespan; see main.py."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=503, detail="Authentication is not configured")
    return gateway


def get_session_claims(
    authorization: str | None = Header(None, alias="Authorization"),
    gateway: AuthGateway = Depends(get_gateway),
) -> dict[str, Any]:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization")
    token = authorization[7:].strip()
    payload = gateway.issuer.decode(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload
