"""
Demo implementation of AuthService using in-memory accounts.

This service is useful for:
- Local development without a Supabase project
- Tests that need sign-in/sign-out transitions

Accounts are confirmed immediately on sign-up (no email is sent), so a
sign-up signs the new user in. Passwords are kept as salted SHA-256 digests.
"""

import hashlib
import secrets
import uuid
from dataclasses import dataclass

from invoice_editor.auth.auth_service import (
    AuthFailed,
    AuthService,
    SignUpOutcome,
    validate_email,
    validate_new_password,
)
from invoice_editor.auth.session import AuthEvent, AuthSession, Identity
from invoice_editor.errors import Unauthenticated, ValidationError
from invoice_editor.lib import logs

LOG = logs.logger(__file__)


@dataclass
class DemoAccount:
    """A stored demo account."""

    user_id: str
    email: str
    salt: str
    digest: str
    confirmed: bool = True

    def check(self, password: str) -> bool:
        return secrets.compare_digest(self.digest, _digest(self.salt, password))


def _digest(salt: str, password: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


class DemoAccountRegistry:
    """Accounts shared by every DemoAuthService in the process."""

    def __init__(self) -> None:
        self._accounts: dict[str, DemoAccount] = {}
        self.reset_requests: list[str] = []

    def find(self, email: str) -> DemoAccount | None:
        return self._accounts.get(email.lower())

    def create(self, email: str, password: str, confirmed: bool = True) -> DemoAccount:
        salt = secrets.token_hex(8)
        account = DemoAccount(
            user_id=str(uuid.uuid4()),
            email=email,
            salt=salt,
            digest=_digest(salt, password),
            confirmed=confirmed,
        )
        self._accounts[email.lower()] = account
        return account

    def set_password(self, email: str, password: str) -> None:
        account = self._accounts[email.lower()]
        account.digest = _digest(account.salt, password)


class DemoAuthService(AuthService):
    """In-memory account management with the same contract as Supabase."""

    def __init__(
        self,
        registry: DemoAccountRegistry | None = None,
        session: AuthSession | None = None,
    ) -> None:
        super().__init__(session)
        self.registry = registry or DemoAccountRegistry()

    async def refresh(self) -> Identity | None:
        return self.session.identity

    async def sign_in(self, email: str, password: str) -> Identity:
        email = validate_email(email)
        account = self.registry.find(email)
        if account is None or not account.check(password):
            raise AuthFailed("Invalid login credentials")
        if not account.confirmed:
            raise AuthFailed("Email not confirmed")
        identity = Identity(user_id=account.user_id, email=account.email)
        self.session.set_identity(identity, AuthEvent.SIGNED_IN)
        return identity

    async def sign_up(
        self, email: str, password: str, confirm_password: str
    ) -> SignUpOutcome:
        email = validate_email(email)
        validate_new_password(password, confirm_password)
        existing = self.registry.find(email)
        if existing is not None and existing.confirmed:
            raise ValidationError("email", message_key="emailAlreadyRegistered")
        account = existing or self.registry.create(email, password)
        LOG.info("Demo account created for %s", account.email)
        self.session.set_identity(
            Identity(user_id=account.user_id, email=account.email), AuthEvent.SIGNED_IN
        )
        return SignUpOutcome.SIGNED_IN

    async def sign_out(self) -> None:
        self.session.set_identity(None, AuthEvent.SIGNED_OUT)

    async def request_password_reset(self, email: str) -> None:
        email = validate_email(email)
        # Unknown emails are accepted silently.
        if self.registry.find(email) is not None:
            self.registry.reset_requests.append(email)

    async def update_password(self, password: str, confirm_password: str) -> None:
        identity = self.session.identity
        if identity is None:
            raise Unauthenticated()
        validate_new_password(password, confirm_password)
        self.registry.set_password(identity.email, password)
        self.session.set_identity(identity, AuthEvent.USER_UPDATED)
