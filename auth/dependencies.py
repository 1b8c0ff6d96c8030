"""
auth/dependencies.py -- FastAPI Depends() helpers for the auth routes.

The TokenService is built once in the application lifespan and parked on
app.state. Routes receive it through get_token_service() instead of importing
a module-level singleton, so tests can swap in a service with fake
collaborators.

auth/dependencies.py may import from fastapi because it is part of the
FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Header, Request

from auth.service import TokenService


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_authorization_header(authorization: str | None = Header(default=None)) -> str | None:
    """Return the raw Authorization header value, or None when absent.

    Prefix handling belongs to TokenService.refresh_token(), which accepts
    the value with or without "Bearer ".
    """
    return authorization
