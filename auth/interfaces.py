"""Collaborator interfaces for the token service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone

from auth.models import Principal


class CredentialVerifier(ABC):
    """Checks an email/password pair and resolves the matching principal."""

    @abstractmethod
    def verify(self, email: str, password: str) -> Principal:
        """Return the principal for valid credentials; raise AuthenticationFailed otherwise."""


class TokenCodec(ABC):
    """Mints, verifies and re-mints signed tokens."""

    @abstractmethod
    def encode(self, principal: Principal, expire_seconds: int | None = None) -> str:
        """Return a signed token for principal."""

    @abstractmethod
    def decode(self, token: str) -> dict | None:
        """Return verified claims, or None if the token is unusable."""

    @abstractmethod
    def refresh(self, token: str) -> str:
        """Return a new token for the same subject with a fresh expiry."""

    def get_subject(self, token: str) -> str | None:
        claims = self.decode(token)
        return claims["sub"] if claims else None

    def get_expiration(self, token: str) -> datetime | None:
        claims = self.decode(token)
        if not claims or "exp" not in claims:
            return None
        return datetime.fromtimestamp(claims["exp"], tz=timezone.utc)


__all__ = ["CredentialVerifier", "TokenCodec"]
