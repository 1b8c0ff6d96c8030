"""
auth/verifier.py -- Credential verification against the user store.

authenticate() always runs bcrypt, whether or not the email exists:
  - Unknown email: bcrypt runs against DUMMY_HASH (same cost as a real check)
  - Wrong password: bcrypt runs against the real hash (same cost)
This keeps response time from revealing which emails have accounts.

Every failure raises the same AuthenticationFailed message, so callers cannot
distinguish an unknown email from a wrong password or a disabled account.
"""

from __future__ import annotations

import logging

from auth.errors import AuthenticationFailed
from auth.interfaces import CredentialVerifier
from auth.models import Principal
from auth.store import UserStore
from auth.tokens import DUMMY_HASH, verify_password

logger = logging.getLogger("marinete.auth")

BAD_CREDENTIALS = "Invalid email or password."


class StoreCredentialVerifier(CredentialVerifier):
    """CredentialVerifier backed by a UserStore."""

    def __init__(self, store: UserStore) -> None:
        self._store = store

    def verify(self, email: str, password: str) -> Principal:
        user = self._store.get_by_email(email)
        if user is None or not user.hashed_password:
            verify_password(password, DUMMY_HASH)
            logger.warning("Authentication failed for %s: unknown email", email)
            raise AuthenticationFailed(BAD_CREDENTIALS)
        if not verify_password(password, user.hashed_password):
            logger.warning("Authentication failed for %s: bad password", email)
            raise AuthenticationFailed(BAD_CREDENTIALS)
        if not user.is_active:
            logger.warning("Authentication failed for %s: account disabled", email)
            raise AuthenticationFailed(BAD_CREDENTIALS)
        return Principal(subject=user.email, claims={"role": user.role})
