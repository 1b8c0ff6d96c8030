"""
API request and response models for the Marinete Auth REST endpoints.

These Pydantic v2 models define the HTTP transport contract. Every response,
success or failure, uses the same envelope: {"data": ..., "errors": [...]}.
Exactly one of the two is populated on a finished request.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AuthRequest(BaseModel):
    """Request body for POST /auth.

    Both fields are optional at the schema level so that blank and missing
    values reach TokenService, which reports every field problem at once.
    """

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TokenData(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class TokenResponse(BaseModel):
    """Envelope returned by POST /auth and POST /auth/refresh."""

    model_config = ConfigDict(frozen=True)

    data: Optional[TokenData] = None
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def success(cls, token: str) -> "TokenResponse":
        return cls(data=TokenData(token=token))

    @classmethod
    def failure(cls, errors: list[str]) -> "TokenResponse":
        return cls(errors=errors)


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
