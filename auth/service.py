"""
auth/service.py -- Token issuance and refresh.

TokenService is the only component with request-level logic. Its collaborators
are passed in at construction:
  verifier -- checks an email/password pair and returns a Principal
  codec    -- signs, verifies and re-signs tokens

The verified Principal is a plain return value; nothing is stored in
request-global state. Tokens are self-contained, so the service keeps no state
between calls and concurrent requests need no coordination.

Error policy:
  Field validation collects every problem before raising ValidationFailed.
  Verification and decoding failures raise with a single message at once.
"""

from __future__ import annotations

import logging
import re

from auth.errors import TokenInvalid, TokenMissing, ValidationFailed
from auth.interfaces import CredentialVerifier, TokenCodec

logger = logging.getLogger("marinete.auth")

BEARER_PREFIX = "Bearer "

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


def strip_bearer(header_value: str | None) -> str | None:
    """Remove a leading "Bearer " (exact, case-sensitive) from a header value.

    Values without the prefix are returned unchanged. None stays None.
    """
    if header_value is not None and header_value.startswith(BEARER_PREFIX):
        return header_value[len(BEARER_PREFIX) :]
    return header_value


def validate_credentials(email: str | None, password: str | None) -> list[str]:
    """Return every field error for a credential pair (empty list when valid)."""
    errors: list[str] = []
    if email is None or not email.strip():
        errors.append("Email cannot be empty.")
    elif not _EMAIL_RE.match(email.strip()):
        errors.append("Invalid email.")
    if password is None or not password.strip():
        errors.append("Password cannot be empty.")
    return errors


class TokenService:
    """Issues tokens for valid credentials and refreshes valid tokens."""

    def __init__(self, verifier: CredentialVerifier, codec: TokenCodec) -> None:
        self._verifier = verifier
        self._codec = codec

    def issue_token(self, email: str | None, password: str | None) -> str:
        """Authenticate the pair and return a freshly minted token.

        Raises ValidationFailed (blank or malformed fields; the verifier is not
        contacted) or AuthenticationFailed (raised by the verifier).
        """
        errors = validate_credentials(email, password)
        if errors:
            logger.error("Error validating credentials: %s", errors)
            raise ValidationFailed(errors)

        email = email.strip()
        logger.info("Generating token for email %s.", email)
        principal = self._verifier.verify(email, password)
        return self._codec.encode(principal)

    def refresh_token(self, header_value: str | None) -> str:
        """Return a new token for the subject of the token in header_value.

        The old token is not revoked and keeps its original expiry.

        Raises TokenMissing (no value) or TokenInvalid (bad signature,
        malformed, or expired).
        """
        logger.info("Refreshing token.")
        token = strip_bearer(header_value)
        if not token:
            raise TokenMissing("Token not provided.")
        if self._codec.decode(token) is None:
            logger.warning("Refresh rejected: token invalid or expired")
            raise TokenInvalid("Token invalid or expired.")
        return self._codec.refresh(token)
