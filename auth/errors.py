"""
auth/errors.py -- Failure taxonomy for token issuance and refresh.

Every error carries an ordered list of human-readable messages. The API layer
turns any AuthError into a 400 response whose "errors" field is that list, so
route handlers never build error envelopes by hand.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for request-level authentication failures."""

    def __init__(self, messages: str | list[str]) -> None:
        self.messages: list[str] = [messages] if isinstance(messages, str) else list(messages)
        super().__init__("; ".join(self.messages))


class ValidationFailed(AuthError):
    """Malformed credential request. Carries one message per offending field."""


class AuthenticationFailed(AuthError):
    """Wrong email/password pair, unknown user, or inactive account."""


class TokenMissing(AuthError):
    """No Authorization header, or an empty token after prefix stripping."""


class TokenInvalid(AuthError):
    """Token signature invalid, malformed, or expired."""
