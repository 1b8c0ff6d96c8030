"""
tests/test_service.py -- Unit tests for auth/service.py.

TokenService is exercised with a MagicMock verifier so tests can assert on
whether (and how) the verifier was contacted, and with a real JwtCodec so
tokens are genuinely signed and checked.

Covers:
  - Bearer prefix stripping (exact, case-sensitive, optional)
  - Field validation collects every error and never reaches the verifier
  - Verifier failures propagate as AuthenticationFailed
  - Refresh: missing, invalid, expired; distinct tokens for the same subject
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from auth.errors import AuthenticationFailed, TokenInvalid, TokenMissing, ValidationFailed
from auth.interfaces import CredentialVerifier
from auth.models import Principal
from auth.service import TokenService, strip_bearer, validate_credentials
from auth.tokens import JwtCodec

PRINCIPAL = Principal(subject="ana@example.com", claims={"role": "user"})


@pytest.fixture
def verifier() -> MagicMock:
    mock = MagicMock(spec=CredentialVerifier)
    mock.verify.return_value = PRINCIPAL
    return mock


@pytest.fixture
def service(verifier: MagicMock, codec: JwtCodec) -> TokenService:
    return TokenService(verifier, codec)


class TestStripBearer:
    def test_prefix_removed(self) -> None:
        assert strip_bearer("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_value_without_prefix_unchanged(self) -> None:
        assert strip_bearer("abc.def.ghi") == "abc.def.ghi"

    def test_prefix_is_case_sensitive(self) -> None:
        assert strip_bearer("bearer abc") == "bearer abc"
        assert strip_bearer("BEARER abc") == "BEARER abc"

    def test_only_exact_seven_char_prefix(self) -> None:
        assert strip_bearer("Bearer") == "Bearer"
        assert strip_bearer("Bearer ") == ""
        assert strip_bearer("Bearer  abc") == " abc"

    def test_none_passes_through(self) -> None:
        assert strip_bearer(None) is None


class TestValidateCredentials:
    def test_valid_pair_has_no_errors(self) -> None:
        assert validate_credentials("ana@example.com", "pw") == []

    def test_all_errors_are_collected(self) -> None:
        assert validate_credentials("", "   ") == ["Email cannot be empty.", "Password cannot be empty."]

    def test_missing_fields(self) -> None:
        assert validate_credentials(None, None) == ["Email cannot be empty.", "Password cannot be empty."]

    def test_malformed_email(self) -> None:
        assert validate_credentials("not-an-email", "pw") == ["Invalid email."]
        assert validate_credentials("two@@example.com", "pw") == ["Invalid email."]

    def test_dotless_domain_is_accepted(self) -> None:
        assert validate_credentials("ops@localhost", "pw") == []


class TestIssueToken:
    def test_correct_credentials_return_token(self, service: TokenService, verifier: MagicMock, codec: JwtCodec) -> None:
        token = service.issue_token("ana@example.com", "pw")
        assert token
        assert codec.get_subject(token) == "ana@example.com"
        verifier.verify.assert_called_once_with("ana@example.com", "pw")

    def test_email_is_trimmed_before_verification(self, service: TokenService, verifier: MagicMock) -> None:
        service.issue_token("  ana@example.com ", "pw")
        verifier.verify.assert_called_once_with("ana@example.com", "pw")

    @pytest.mark.parametrize(
        ("email", "password"),
        [("", "pw"), ("ana@example.com", ""), ("   ", "   "), (None, "pw"), ("ana@example.com", None)],
    )
    def test_blank_fields_never_reach_verifier(
        self, service: TokenService, verifier: MagicMock, email: str | None, password: str | None
    ) -> None:
        with pytest.raises(ValidationFailed) as excinfo:
            service.issue_token(email, password)
        assert excinfo.value.messages
        verifier.verify.assert_not_called()

    def test_both_blank_reports_two_messages(self, service: TokenService) -> None:
        with pytest.raises(ValidationFailed) as excinfo:
            service.issue_token("", "")
        assert len(excinfo.value.messages) == 2

    def test_verifier_rejection_propagates(self, service: TokenService, verifier: MagicMock) -> None:
        verifier.verify.side_effect = AuthenticationFailed("Invalid email or password.")
        with pytest.raises(AuthenticationFailed) as excinfo:
            service.issue_token("ana@example.com", "wrong")
        assert excinfo.value.messages == ["Invalid email or password."]


class TestRefreshToken:
    @pytest.mark.parametrize("header", [None, "", "Bearer "])
    def test_missing_token(self, service: TokenService, header: str | None) -> None:
        with pytest.raises(TokenMissing) as excinfo:
            service.refresh_token(header)
        assert excinfo.value.messages == ["Token not provided."]

    @pytest.mark.parametrize("prefix", ["Bearer ", ""])
    def test_valid_token_is_refreshed(self, service: TokenService, codec: JwtCodec, prefix: str) -> None:
        old = codec.encode(PRINCIPAL)
        new = service.refresh_token(prefix + old)
        assert new != old
        assert codec.get_subject(new) == codec.get_subject(old)

    def test_expired_token_is_invalid(self, service: TokenService, codec: JwtCodec) -> None:
        expired = codec.encode(PRINCIPAL, expire_seconds=-5)
        with pytest.raises(TokenInvalid) as excinfo:
            service.refresh_token(f"Bearer {expired}")
        assert excinfo.value.messages == ["Token invalid or expired."]

    def test_lowercase_prefix_is_not_stripped(self, service: TokenService, codec: JwtCodec) -> None:
        with pytest.raises(TokenInvalid):
            service.refresh_token(f"bearer {codec.encode(PRINCIPAL)}")

    def test_repeated_refresh_gives_distinct_tokens(self, service: TokenService, codec: JwtCodec) -> None:
        original = codec.encode(PRINCIPAL)
        tokens = {service.refresh_token(original) for _ in range(5)}
        assert len(tokens) == 5
        assert original not in tokens
        assert {codec.get_subject(t) for t in tokens} == {"ana@example.com"}

    def test_refresh_does_not_touch_verifier(self, service: TokenService, verifier: MagicMock, codec: JwtCodec) -> None:
        service.refresh_token(codec.encode(PRINCIPAL))
        verifier.verify.assert_not_called()
