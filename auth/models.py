"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class User:
    """A stored account. The email is the login name and the token subject."""

    email: str
    role: str = "user"  # "admin", "user"
    id: int | None = None
    hashed_password: str | None = None
    created_at: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Principal:
    """Authenticated identity produced by a CredentialVerifier.

    subject becomes the JWT "sub" claim; claims are embedded alongside it.
    Frozen because the token service only ever reads it.
    """

    subject: str
    claims: dict = field(default_factory=dict)
