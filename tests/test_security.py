# =============================================================================
# tests/test_security.py - Password Hashing and Token Tests
# =============================================================================

from datetime import timedelta

import pytest
from jose import jwt

from lib.security import PasswordHasher, TokenError, TokenService


class TestPasswordHasher:
    """Tests for bcrypt hashing."""

    def test_hash_verifies(self):
        """Test hashing with the configured rounds."""
        hasher = PasswordHasher(rounds=4)

        digest = hasher.hash("Abcd1234")

        assert digest.startswith("$2b$04$")
        assert hasher.verify("Abcd1234", digest)
        assert not hasher.verify("abcd1234", digest)

    @pytest.mark.parametrize("digest", [None, "", "not-a-hash"])
    def test_unusable_digest_never_matches(self, digest):
        """Test that missing or foreign digests never match."""
        assert PasswordHasher(rounds=4).verify("Abcd1234", digest) is False


    def test_dummy_verify_never_matches(self):
        """Test that the dummy check always fails."""
        assert PasswordHasher(rounds=4).dummy_verify() is False


class TestTokenService:
    """Tests for JWT issue and verify."""

    def test_round_trip_keeps_claims(self):
        """Test that issued claims survive verification."""
        tokens = TokenService("test-secret-key-for-signing")

        claims = tokens.verify(tokens.issue({"sub": "7", "role": "admin"}))

        assert claims["sub"] == "7"
        assert claims["role"] == "admin"
        assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())

    def test_expired_token(self):
        """Test TOKEN_EXPIRED for a token past its exp."""
        tokens = TokenService("test-secret-key-for-signing")
        token = tokens.issue({"sub": "7"}, ttl=timedelta(seconds=-10))

        with pytest.raises(TokenError) as exc_info:
            tokens.verify(token)

        assert exc_info.value.code == "TOKEN_EXPIRED"

    def test_wrong_secret(self):
        """Test that a token signed with another key is rejected."""
        token = TokenService("another-secret-key-000").issue({"sub": "7"})

        with pytest.raises(TokenError) as exc_info:
            TokenService("test-secret-key-for-signing").verify(token)

        assert exc_info.value.code == "INVALID_TOKEN"

    def test_algorithm_is_pinned(self):
        """Test that tokens signed with another algorithm are rejected."""
        token = jwt.encode({"sub": "7"}, "test-secret-key-for-signing", algorithm="HS512")

        with pytest.raises(TokenError):
            TokenService("test-secret-key-for-signing", algorithm="HS256").verify(token)
