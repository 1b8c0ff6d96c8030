"""
tests/conftest.py -- Shared test fixtures for Marinete Auth.

This module provides:
  - _make_test_store(): isolated named shared-memory SQLite user store
  - _patch_lifespan(): wires a test store and TokenService into app.state
  - api_client: TestClient plus the seeded store, for HTTP integration tests
  - codec: JwtCodec sharing the application's signing key
  - reset_rate_limits: clears slowapi counters before every test

Named shared-memory SQLite URIs (not plain :memory:) are required because
TestClient runs sync route handlers in a thread pool. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread.

The DEBUG env var must be set before any auth/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any auth/core import.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app, build_token_service
from auth.models import User
from auth.store import UserStore
from auth.tokens import JwtCodec, hash_password
from core.config import get_settings

USER_EMAIL = "ana@example.com"
USER_PASSWORD = "correct-horse-battery"
DISABLED_EMAIL = "gone@example.com"
DISABLED_PASSWORD = "disabled-pass-123"


def _make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return UserStore(db_url=f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true")


def _seed_users(store: UserStore) -> None:
    store.create_user(User(email=USER_EMAIL, role="user", hashed_password=hash_password(USER_PASSWORD)))
    store.create_user(
        User(
            email=DISABLED_EMAIL,
            role="user",
            hashed_password=hash_password(DISABLED_PASSWORD),
            is_active=False,
        )
    )


def _patch_lifespan(user_store: UserStore):
    """Return a lifespan that installs the test store instead of the real DB."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.token_service = build_token_service(user_store)
        yield

    return test_lifespan


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """Start every test with empty slowapi counters (shared in-memory storage)."""
    limiter.reset()


@pytest.fixture
def codec() -> JwtCodec:
    """Codec signing with the same key as the running app."""
    settings = get_settings()
    return JwtCodec(settings.secret_key, settings.token_expire_seconds, algorithm=settings.token_algorithm)


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    """Seeded store private to a single test."""
    store = _make_test_store(f"unit_{uuid.uuid4().hex}")
    _seed_users(store)
    yield store
    store.close()


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, store) for HTTP integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers backed by an isolated in-memory store.
    """
    store = _make_test_store(f"api_{request.module.__name__}")
    _seed_users(store)

    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store

    store.close()
