"""
api/routes/auth.py -- Token issuance and refresh endpoints.

Routes:
  POST /auth          -- email/password login; returns {data: {token}}
  POST /auth/refresh  -- Authorization header token; returns {data: {token}}

Both routes are public. Failures raise AuthError subclasses from the service
layer; the handler in api/main.py turns them into 400 envelopes, so the happy
path is all that lives here.

Security:
  POST /auth is rate-limited per client IP (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on every token response.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import LOGIN_RATE_LIMIT, limiter
from api.models import AuthRequest, TokenResponse
from auth.dependencies import get_authorization_header, get_token_service
from auth.service import TokenService

router = APIRouter()


def _token_response(token: str) -> JSONResponse:
    resp = JSONResponse(status_code=200, content=TokenResponse.success(token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth", response_model=TokenResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def issue_token(
    request: Request,
    body: AuthRequest,
    service: TokenService = Depends(get_token_service),
) -> JSONResponse:
    """Authenticate with email and password and return a new JWT."""
    token = service.issue_token(body.email, body.password)
    return _token_response(token)


@router.post("/auth/refresh", response_model=TokenResponse)
def refresh_token(
    authorization: str | None = Depends(get_authorization_header),
    service: TokenService = Depends(get_token_service),
) -> JSONResponse:
    """Exchange a valid token for a new one with a fresh expiry.

    The token is read from the Authorization header, with or without the
    "Bearer " prefix. The presented token is not revoked.
    """
    token = service.refresh_token(authorization)
    return _token_response(token)
