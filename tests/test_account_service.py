# =============================================================================
# tests/test_account_service.py - Account Service Tests
# =============================================================================
# Registration, admin creation, login and self-service profile updates.
# =============================================================================

import asyncio
from unittest.mock import MagicMock

from app.auth.models import AuthUser
from core.models import AccountRecord, AccountRole, FailureKind, TokenResponse
from core.services import INVALID_CREDENTIALS

VALID_ACCOUNT = {"username": "ana", "email": "ana@x.com", "password": "Abcd1234"}


def run(coro):
    return asyncio.run(coro)


class TestCreateAccount:
    """Tests for admin account creation."""

    def test_create_returns_record_without_password(self, store, account_service):
        """Test that the created record never exposes the password."""
        # Act
        result = run(account_service.create(VALID_ACCOUNT))

        # Assert
        assert isinstance(result, AccountRecord)
        assert result.id == 1
        assert result.role == AccountRole.USER
        assert result.created_at is not None and result.updated_at is not None
        assert "password" not in result.model_dump()

    def test_password_is_stored_hashed(self, store, account_service, hasher):
        """Test that only a bcrypt digest is persisted."""
        run(account_service.create(VALID_ACCOUNT))

        digest = store.row("users", 1)["password"]
        assert digest != "Abcd1234"
        assert hasher.verify("Abcd1234", digest)

    def test_duplicate_email_conflicts_before_write(self, store, account_service):
        """Test CONFLICT on a taken email, with no write."""
        store.seed("users", username="other", email="ana@x.com", password="x", role="user")

        result = run(account_service.create(VALID_ACCOUNT))

        assert result.code == FailureKind.CONFLICT
        assert result.problems == ["Email 'ana@x.com' is already in use."]
        assert store.writes == []

    def test_admin_can_choose_role(self, account_service):
        """Test that admin creation honours the role field."""
        result = run(account_service.create({**VALID_ACCOUNT, "role": "admin"}))

        assert result.role == AccountRole.ADMIN

    def test_weak_password_lists_every_problem(self, account_service):
        """Test that each unmet password criterion is reported."""
        result = run(account_service.create({**VALID_ACCOUNT, "password": "short"}))

        assert result.code == FailureKind.INVALID_INPUT
        assert result.problems == [
            "Password must be at least 8 characters long.",
            "Password must contain at least one digit.",
        ]


class TestRegister:
    """Tests for self-registration."""

    def test_role_is_always_user(self, account_service):
        """Test that a role in the registration payload is ignored."""
        result = run(account_service.register({**VALID_ACCOUNT, "role": "admin"}))

        assert result.role == AccountRole.USER

    def test_avatar_not_accepted(self, store, account_service):
        """Test that registration cannot set an avatar."""
        run(account_service.register({**VALID_ACCOUNT, "avatar_url": "https://x.com/a.png"}))

        assert "avatar_url" not in store.writes[0].columns


class TestLogin:
    """Tests for credential exchange."""

    def test_valid_credentials_issue_token(self, account_service, tokens):
        """Test that a matching password yields a token with the account claims."""
        run(account_service.register(VALID_ACCOUNT))

        result = run(account_service.login({"email": "ANA@x.com", "password": "Abcd1234"}))

        assert isinstance(result, TokenResponse)
        claims = tokens.verify(result.token)
        assert claims["sub"] == "1"
        assert claims["email"] == "ana@x.com"
        assert claims["role"] == "user"

    def test_wrong_password(self, account_service):
        """Test UNAUTHORIZED on a bad password."""
        run(account_service.register(VALID_ACCOUNT))

        result = run(account_service.login({"email": "ana@x.com", "password": "Wrong1234"}))

        assert result.code == FailureKind.UNAUTHORIZED
        assert result.summary == INVALID_CREDENTIALS

    def test_unknown_email_is_indistinguishable(self, account_service):
        """Test that an unknown email gets the same failure as a bad password."""
        result = run(account_service.login({"email": "nobody@x.com", "password": "Abcd1234"}))

        assert result.code == FailureKind.UNAUTHORIZED
        assert result.problems == [INVALID_CREDENTIALS]

    def test_unknown_email_still_runs_a_hash_check(self, account_service, hasher, monkeypatch):
        """Test that an unknown email spends a dummy bcrypt check."""
        # Arrange: Spy on both hash paths
        dummy_verify = MagicMock(return_value=False)
        verify = MagicMock(return_value=False)
        monkeypatch.setattr(hasher, "dummy_verify", dummy_verify)
        monkeypatch.setattr(hasher, "verify", verify)

        # Act
        result = run(account_service.login({"email": "nobody@x.com", "password": "Abcd1234"}))

        # Assert: Same bcrypt cost as a wrong password
        assert result.code == FailureKind.UNAUTHORIZED
        dummy_verify.assert_called_once_with()
        verify.assert_not_called()

    def test_known_email_verifies_stored_digest(self, account_service, hasher, monkeypatch):
        """Test that a known email checks its own digest, not the dummy."""
        run(account_service.register(VALID_ACCOUNT))
        dummy_verify = MagicMock(return_value=False)
        monkeypatch.setattr(hasher, "dummy_verify", dummy_verify)

        result = run(account_service.login({"email": "ana@x.com", "password": "Wrong1234"}))

        assert result.code == FailureKind.UNAUTHORIZED
        dummy_verify.assert_not_called()

    def test_missing_credentials(self, store, account_service):
        """Test that missing credentials are INVALID_INPUT without a lookup."""
        result = run(account_service.login({"email": " "}))

        assert result.code == FailureKind.INVALID_INPUT
        assert result.problems == ["Email is required.", "Password is required."]
        assert store.calls == []


class TestProfile:
    """Tests for the caller's own profile."""

    def test_profile_update_ignores_role(self, store, account_service):
        """Test that a caller cannot change their own role."""
        # Arrange
        store.seed("users", username="ana", email="ana@x.com", password="x", role="user")
        actor = AuthUser(id=1, email="ana@x.com", role="user")

        # Act
        result = run(account_service.update_profile(actor, {"role": "admin", "phone": "5550101"}))

        # Assert
        assert result.role == AccountRole.USER
        assert result.phone == "5550101"
        assert store.writes[0].columns == ["phone", "updated_at"]

    def test_profile_of_deleted_account(self, account_service):
        """Test NOT_FOUND when the token outlives the account."""
        actor = AuthUser(id=42, email="gone@x.com", role="user")

        result = run(account_service.get_profile(actor))

        assert result.code == FailureKind.NOT_FOUND
