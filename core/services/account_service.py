# =============================================================================
# core/services/account_service.py - Account Business Logic
# =============================================================================
# Accounts use the generic resource workflow plus:
# - password hashing before insert (the hash never leaves the service)
# - self-registration and login
# - self-service profile reads and updates
# =============================================================================

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from core.models.account import AccountRole, TokenResponse
from core.models.failure import FailureEnvelope, FailureKind
from core.resources import ACCOUNTS, PROFILE_FIELDS, REGISTER_FIELDS
from core.services.resource_service import ResourceService
from core.validation import collect_failure, failure
from core.validation.rules import normalize_email
from lib.security import PasswordHasher, TokenService
from lib.store import Store
from lib.utils import utc_now

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AccountService(ResourceService):
    """
    Service for account management and authentication.

    Example:
        service = AccountService(store, PasswordHasher(), TokenService(secret))
        result = await service.register({"username": "ana", "email": "ana@x.com", "password": "Abcd1234"})
    """

    def __init__(
        self,
        store: Store,
        hasher: PasswordHasher,
        tokens: TokenService,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(ACCOUNTS, store, clock=clock)
        self.hasher = hasher
        self.tokens = tokens

    async def _before_insert(self, values: dict[str, Any]) -> dict[str, Any]:
        digest = await run_in_threadpool(self.hasher.hash, values["password"])
        return {**values, "password": digest}

    # -------------------------------------------------------------------------
    # Self-service
    # -------------------------------------------------------------------------

    async def register(self, payload: Mapping[str, Any]) -> BaseModel | FailureEnvelope:
        """Create a standard account; any role in the payload is ignored."""
        return await self.create(
            {**payload, "role": AccountRole.USER.value},
            fields=REGISTER_FIELDS,
        )

    async def get_profile(self, actor: Any) -> BaseModel | FailureEnvelope:
        return await self.get(actor.id, actor=actor)

    async def update_profile(
        self, actor: Any, payload: Mapping[str, Any]
    ) -> BaseModel | FailureEnvelope:
        """Partial update of the caller's own account (role excluded)."""
        return await self.update(actor.id, payload, actor=actor, fields=PROFILE_FIELDS)

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    async def login(self, payload: Mapping[str, Any]) -> TokenResponse | FailureEnvelope:
        """
        Exchange email and password for an access token.

        Returns:
            TokenResponse on success; INVALID_INPUT when a credential is
            missing; UNAUTHORIZED when the email is unknown or the password
            does not match (the two cases are indistinguishable).
        """
        email = payload.get("email")
        password = payload.get("password")

        rejection = collect_failure(
            "Missing credentials",
            [] if isinstance(email, str) and email.strip() else ["Email is required."],
            [] if isinstance(password, str) and password else ["Password is required."],
            clock=self.clock,
        )
        if rejection:
            return rejection

        row = await self.store.fetch_by_unique_field(
            self.resource.table, "email", normalize_email(email)
        )
        digest = row.get("password") if row else None
        if digest:
            verified = await run_in_threadpool(self.hasher.verify, password, digest)
        else:
            verified = await run_in_threadpool(self.hasher.dummy_verify)
        if not verified:
            logger.warning("Login rejected: invalid credentials")
            return failure(
                FailureKind.UNAUTHORIZED, INVALID_CREDENTIALS, [INVALID_CREDENTIALS], clock=self.clock
            )

        token = self.tokens.issue(
            {"sub": str(row["id"]), "email": row["email"], "role": row.get("role", AccountRole.USER.value)}
        )
        logger.info(f"User {row['id']} logged in")
        return TokenResponse(token=token)
