"""
Supabase-backed implementation of AuthService.

Wraps the auth (GoTrue) API of an async Supabase client. The same client is
shared with SupabaseInvoiceStore: once a user signs in, the client sends
the user's access token with table requests, so row level security scopes
every query to that user.

Provider events (sign-in from another tab, token refresh, password recovery
links) arrive through on_auth_state_change and are forwarded to the
AuthSession.
"""

from typing import Any

from supabase import AsyncClient, AuthError

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

# Provider events forwarded as-is. Sign-in and sign-out are inferred from the
# identity change so a sign-in we performed ourselves is not reported twice.
_FORWARDED_EVENTS = {
    AuthEvent.PASSWORD_RECOVERY.value: AuthEvent.PASSWORD_RECOVERY,
    AuthEvent.USER_UPDATED.value: AuthEvent.USER_UPDATED,
}


def _identity(user: Any) -> Identity | None:
    """Build an Identity from a Supabase user object."""
    if user is None:
        return None
    return Identity(user_id=str(user.id), email=getattr(user, "email", "") or "")


class SupabaseAuthService(AuthService):
    """
    Account management through Supabase Auth.

    Attributes:
        client: Async Supabase client shared with the invoice store.
        redirect_url: Optional URL used in password reset emails.
    """

    def __init__(
        self,
        client: AsyncClient,
        session: AuthSession | None = None,
        redirect_url: str | None = None,
    ) -> None:
        super().__init__(session)
        self.client = client
        self.redirect_url = redirect_url
        self._subscription = client.auth.on_auth_state_change(self._on_provider_event)

    def close(self) -> None:
        """Detach from provider events."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_provider_event(self, event: str, session: Any) -> None:
        identity = _identity(session.user) if session else None
        name = getattr(event, "value", event)
        self.session.set_identity(identity, _FORWARDED_EVENTS.get(str(name)))

    async def refresh(self) -> Identity | None:
        try:
            current = await self.client.auth.get_session()
        except AuthError as exc:
            LOG.warning("Could not read auth session: %s", exc)
            current = None
        identity = _identity(current.user) if current else None
        self.session.set_identity(identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        email = validate_email(email)
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            LOG.info("Sign-in rejected for %s: %s", email, exc)
            raise AuthFailed(str(exc)) from exc
        identity = _identity(response.user)
        if identity is None:
            raise AuthFailed("Sign-in returned no user")
        self.session.set_identity(identity)
        return identity

    async def sign_up(
        self, email: str, password: str, confirm_password: str
    ) -> SignUpOutcome:
        email = validate_email(email)
        validate_new_password(password, confirm_password)
        try:
            response = await self.client.auth.sign_up(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            LOG.info("Sign-up rejected for %s: %s", email, exc)
            raise AuthFailed(str(exc)) from exc

        user = response.user
        # The provider does not fail for existing accounts; a confirmed user
        # coming back without a session means the email was already taken.
        already_confirmed = user is not None and getattr(user, "email_confirmed_at", None)
        if already_confirmed and response.session is None:
            raise ValidationError("email", message_key="emailAlreadyRegistered")
        if response.session is not None:
            self.session.set_identity(_identity(user))
            return SignUpOutcome.SIGNED_IN
        return SignUpOutcome.CONFIRMATION_SENT

    async def sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        except AuthError as exc:
            LOG.warning("Sign-out failed on the provider: %s", exc)
        self.session.set_identity(None)

    async def request_password_reset(self, email: str) -> None:
        email = validate_email(email)
        options = {"redirect_to": self.redirect_url} if self.redirect_url else {}
        try:
            await self.client.auth.reset_password_for_email(email, options)
        except AuthError as exc:
            LOG.info("Password reset request failed for %s: %s", email, exc)
            raise AuthFailed(str(exc)) from exc

    async def update_password(self, password: str, confirm_password: str) -> None:
        identity = self.session.identity
        if identity is None:
            raise Unauthenticated()
        validate_new_password(password, confirm_password)
        try:
            await self.client.auth.update_user({"password": password})
        except AuthError as exc:
            raise AuthFailed(str(exc)) from exc
        self.session.set_identity(identity, AuthEvent.USER_UPDATED)
