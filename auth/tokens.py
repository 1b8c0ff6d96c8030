"""
auth/tokens.py -- JWT codec and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256 by default. Tokens are signed with SECRET_KEY and
       carry sub (the user's email), role, iat, exp and a random jti. decode()
       returns None on any failure -- the service layer turns that into
       TokenInvalid.

       jti makes every minted token unique. Two tokens issued for the same
       subject within the same second would otherwise be byte-identical, and a
       refresh must always hand back a new value.

       refresh() copies the verified claims, replaces iat/exp/jti, and signs
       again. The old token is not revoked; it stays valid until its own exp.

  Passwords: bcrypt used directly (no passlib wrapper). _DUMMY_HASH enables
       timing equalization in the credential verifier so response time does
       not reveal whether an email exists.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from auth.errors import TokenInvalid
from auth.interfaces import TokenCodec
from auth.models import Principal

logger = logging.getLogger("marinete.auth")

_RESERVED_CLAIMS = {"sub", "iat", "exp", "jti"}

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Passwords longer than 72 bytes are silently truncated by bcrypt. The API
    layer caps password length at 255 characters.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash, computed once at module load so the first
# login attempt is not measurably slower than subsequent ones.
DUMMY_HASH: str = hash_password("marinete_timing_dummy")


# ---------------------------------------------------------------------------
# JWT codec
# ---------------------------------------------------------------------------


class JwtCodec(TokenCodec):
    """Signs and verifies JWTs with a process-wide secret.

    Usage:
        codec = JwtCodec(settings.secret_key, settings.token_expire_seconds)
        token = codec.encode(Principal(subject="ana@example.com", claims={"role": "user"}))
        codec.decode(token)["sub"]    # "ana@example.com"
        new_token = codec.refresh(token)
    """

    def __init__(self, secret_key: str, expire_seconds: int, algorithm: str = "HS256") -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expire_seconds = expire_seconds

    def encode(self, principal: Principal, expire_seconds: int | None = None) -> str:
        """Encode a signed JWT for principal.

        Args:
            principal:      Identity to embed; subject becomes "sub".
            expire_seconds: Lifetime override. None uses the codec default.
                            Negative values mint an already-expired token,
                            which tests use to exercise expiry handling.
        """
        claims = {k: v for k, v in principal.claims.items() if k not in _RESERVED_CLAIMS}
        return self._sign(principal.subject, claims, expire_seconds)

    def decode(self, token: str) -> dict | None:
        """Decode and verify a JWT. Returns the payload dict or None on any failure."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            return None
        if not payload.get("sub"):
            return None
        return payload

    def refresh(self, token: str) -> str:
        """Mint a new token for the subject of a valid token.

        Raises TokenInvalid if the token does not verify. The returned token
        carries the same custom claims, a new iat/exp and a new jti.
        """
        payload = self.decode(token)
        if payload is None:
            raise TokenInvalid("Token invalid or expired.")
        claims = {k: v for k, v in payload.items() if k not in _RESERVED_CLAIMS}
        return self._sign(payload["sub"], claims, None)

    def _sign(self, subject: str, claims: dict, expire_seconds: int | None) -> str:
        duration = self.expire_seconds if expire_seconds is None else expire_seconds
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "sub": subject,
            "iat": now,
            "exp": now + timedelta(seconds=duration),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
