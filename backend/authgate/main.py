"""FastAPI application: social sign-in gateway issuing one session JWT for every provider."""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from authgate.api import auth
from authgate.auth.gateway import build_gateway
from authgate.auth.secrets import load_secrets
from authgate.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # ConfigurationError propagates: the server refuses to start without its secrets.
    secrets = load_secrets(settings)
    http_client = httpx.AsyncClient(timeout=settings.firebase_http_timeout)
    try:
        app.state.gateway = build_gateway(settings, secrets, http_client=http_client)
        logger.info(
            "Auth gateway ready (firebase project %s, widget max age %s)",
            settings.firebase_project_id,
            settings.widget_max_age or "off",
        )
        yield
    finally:
        app.state.gateway = None
        await http_client.aclose()


app = FastAPI(
    title="Social Auth Gateway",
    description="Verifies federated, anonymous and Telegram widget sign-ins and issues session tokens",
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def cross_origin_isolation_headers(request: Request, call_next):
    """Popup-based federated sign-in needs the opener kept across origins."""
    response = await call_next(request)
    response.headers["Cross-Origin-Opener-Policy"] = "same-origin-allow-popups"
    response.headers["Cross-Origin-Embedder-Policy"] = "require-corp"
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return 500 as JSON so CORS middleware adds headers."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.include_router(auth.router)


@app.get("/health")
def health():
    return {"status": "ok"}
