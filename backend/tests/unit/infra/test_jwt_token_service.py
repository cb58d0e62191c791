"""Unit tests for the PyJWT-backed token service."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from freezegun import freeze_time

from channelhub.infra.jwt.jwt_token_service import JWTTokenService
from channelhub.services._shared.errors import InvalidTokenError

ACCESS = "unit-access-secret-0123456789abcdef"
REFRESH = "unit-refresh-secret-0123456789abcdef"


@pytest.fixture()
def tokens() -> JWTTokenService:
    return JWTTokenService(
        access_secret=ACCESS,
        refresh_secret=REFRESH,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=10),
    )


class TestJWTTokenService:
    def test_issue_returns_distinct_tokens_for_same_account(self, tokens):
        first = tokens.issue(7)
        second = tokens.issue(7)

        assert first.access_token != first.refresh_token
        assert first.refresh_token != second.refresh_token
        assert tokens.verify(first.access_token, "access") == 7
        assert tokens.verify(first.refresh_token, "refresh") == 7

    def test_access_token_carries_public_claims_only(self, tokens):
        pair = tokens.issue(3, {"username": "alice", "email": "alice@example.com", "sub": "999"})

        access = tokens.decode(pair.access_token, "access")
        refresh = tokens.decode(pair.refresh_token, "refresh")

        assert access["sub"] == "3"  # reserved claims cannot be overridden
        assert access["username"] == "alice"
        assert access["fresh"] is False
        assert "username" not in refresh
        assert "fresh" not in refresh

    def test_tokens_are_signed_with_separate_secrets(self, tokens):
        pair = tokens.issue(1)

        jwt.decode(pair.access_token, ACCESS, algorithms=["HS256"])
        jwt.decode(pair.refresh_token, REFRESH, algorithms=["HS256"])
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(pair.refresh_token, ACCESS, algorithms=["HS256"])

    def test_verify_rejects_wrong_kind(self, tokens):
        pair = tokens.issue(1)

        with pytest.raises(InvalidTokenError):
            tokens.verify(pair.access_token, "refresh")
        with pytest.raises(InvalidTokenError):
            tokens.verify(pair.refresh_token, "access")

    def test_verify_rejects_tampered_and_garbage_tokens(self, tokens):
        pair = tokens.issue(1)
        header, payload, signature = pair.refresh_token.split(".")
        tampered = f"{header}.{payload}.{signature[::-1]}"

        for candidate in (tampered, "not-a-jwt", ""):
            with pytest.raises(InvalidTokenError):
                tokens.verify(candidate, "refresh")

    def test_verify_rejects_expired_token(self, tokens):
        with freeze_time("2025-03-01 12:00:00"):
            pair = tokens.issue(5)

        with freeze_time("2025-03-01 12:14:00"):
            assert tokens.verify(pair.access_token, "access") == 5

        with freeze_time("2025-03-01 12:16:00"):
            with pytest.raises(InvalidTokenError):
                tokens.verify(pair.access_token, "access")
            assert tokens.verify(pair.refresh_token, "refresh") == 5

    def test_verify_rejects_token_without_required_claims(self, tokens):
        token = jwt.encode({"sub": "1", "type": "refresh"}, REFRESH, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            tokens.verify(token, "refresh")

    @pytest.mark.parametrize(
        ("access", "refresh"),
        [("", REFRESH), (ACCESS, ""), (ACCESS, ACCESS)],
    )
    def test_rejects_missing_or_shared_secrets(self, access, refresh):
        with pytest.raises(ValueError):
            JWTTokenService(access_secret=access, refresh_secret=refresh)
