# =============================================================================
# lib/security.py - Password Hashing and Access Tokens
# =============================================================================
# Credential primitives used by the account service and the auth gate:
# - PasswordHasher: bcrypt hashing via passlib
# - TokenService: HS256 JWT issue/verify via python-jose
#
# Both are constructed with explicit configuration (no module-level secrets).
# =============================================================================

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from jose import jwt, ExpiredSignatureError, JWTError
from passlib.context import CryptContext

from lib.utils import ApplicationError, utc_now

logger = logging.getLogger(__name__)


class TokenError(ApplicationError):
    """Raised when an access token is missing claims, malformed or expired."""

    def __init__(self, message: str, code: str = "INVALID_TOKEN"):
        super().__init__(message, code=code)


class PasswordHasher:
    """
    Hash and verify passwords with bcrypt.

    Example:
        hasher = PasswordHasher(rounds=10)
        digest = hasher.hash("Abcd1234")
        hasher.verify("Abcd1234", digest)  # True
    """

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str | None) -> bool:
        """Check a password against a stored digest. Unknown or empty digests never match."""
        if not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except ValueError:
            logger.warning("Stored password digest is not a recognised hash")
            return False

    def dummy_verify(self) -> bool:
        """Compare against a throwaway digest. Always False."""
        return self._context.dummy_verify()


class TokenService:
    """
    Issue and verify signed access tokens.

    Tokens carry the caller's claims plus `iat` and `exp`.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", default_ttl: timedelta | None = None):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._default_ttl = default_ttl or timedelta(days=7)

    def issue(self, claims: dict[str, Any], ttl: timedelta | None = None) -> str:
        """
        Sign a token for the given claims.

        Args:
            claims: Payload claims (e.g. sub, email, role)
            ttl: Lifetime of the token; defaults to the configured TTL

        Returns:
            Encoded JWT string
        """
        issued_at = utc_now()
        payload = {
            **claims,
            "iat": issued_at,
            "exp": issued_at + (ttl or self._default_ttl),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a token.

        Returns:
            The token's claims

        Raises:
            TokenError: If the token is expired, tampered with or malformed
        """
        try:
            return jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise TokenError("Token has expired", code="TOKEN_EXPIRED") from e
        except JWTError as e:
            raise TokenError(f"Invalid token: {e}") from e
