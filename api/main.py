"""
api/main.py -- FastAPI application entry point for Marinete Auth.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. log_requests       -- one access line per request, including failures
  2. CORSMiddleware     -- adds CORS headers for allowed browser origins
  3. SlowAPIMiddleware  -- default limits; the login limit is applied by its
                           @limiter.limit decorator, inside the route

Starlette makes the most recently registered middleware the outermost, so
the calls below register the innermost middleware first.

Lifespan wires the collaborators explicitly: UserStore -> credential
verifier, settings -> JWT codec, both -> TokenService on app.state. There is
no container; swapping a collaborator means building a different service.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException

from api.limiter import limiter
from api.models import HealthResponse, TokenResponse
from api.routes.auth import router as auth_router
from auth.errors import AuthError
from auth.service import TokenService
from auth.store import UserStore
from auth.tokens import JwtCodec
from auth.verifier import StoreCredentialVerifier
from core.config import get_settings

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("marinete.api")

_settings = get_settings()


def build_token_service(store: UserStore) -> TokenService:
    """Assemble a TokenService from a user store and the configured signing key."""
    codec = JwtCodec(
        _settings.secret_key,
        _settings.token_expire_seconds,
        algorithm=_settings.token_algorithm,
    )
    return TokenService(StoreCredentialVerifier(store), codec)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the user store on startup and dispose of it on shutdown."""
    logger.info("Marinete Auth starting up")
    app.state.user_store = UserStore(_settings.database_url)
    app.state.token_service = build_token_service(app.state.user_store)
    if not app.state.user_store.has_users():
        logger.warning("No users configured -- create one with: python main.py create-user EMAIL --password ...")
    logger.info("Token service initialized (ttl=%ds)", _settings.token_expire_seconds)

    yield

    app.state.user_store.close()
    logger.info("Marinete Auth shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Marinete Auth",
    description="Issues and refreshes JSON Web Tokens.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origin_list,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    status_code = 500  # call_next raised; the error handler answers with 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            status_code,
            ms,
            request.client.host if request.client else "unknown",
        )


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the TokenResponse envelope so clients parse failures
# the same way as successes: data is null and errors lists the messages.
# ---------------------------------------------------------------------------


def _envelope(status_code: int, errors: list[str]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=TokenResponse.failure(errors).model_dump())


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Return 400 for validation, credential and token failures."""
    return _envelope(400, exc.messages)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with one message per field when the body cannot be parsed."""
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body") or "body"
        errors.append(f"{field}: {err.get('msg', 'invalid value')}")
    logger.error("Error validating request: %s", errors)
    return _envelope(400, errors)


# SlowAPIMiddleware calls this handler without awaiting it, so it stays sync.
@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 when a rate limit is exceeded.

    Retry-After tells clients how many seconds to wait before retrying.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _envelope(429, ["Too many requests."])
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _envelope(exc.status_code, [str(exc.detail)])


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback is logged only, never written to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _envelope(500, ["An unexpected error occurred."])


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
