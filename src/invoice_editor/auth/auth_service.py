"""
Abstract base class defining the account operations the UI relies on.

Implementations:
- DemoAuthService: In-memory accounts for development and tests
- SupabaseAuthService: Supabase Auth (GoTrue) backed accounts

Every implementation owns an AuthSession and keeps it current: a successful
sign-in sets the identity, sign-out clears it. Provider failures are
converted to AuthFailed; bad form input raises ValidationError before the
provider is contacted.

Registered-email policy: a sign-up for an email that already belongs to a
confirmed account is reported as "already registered", using only the
signal the provider returns from the sign-up call. Password reset always
reports success, so the reset form cannot be used to probe which emails
have accounts.
"""

from abc import ABC, abstractmethod
from enum import Enum

from invoice_editor.auth.session import AuthSession, Identity
from invoice_editor.errors import InvoiceEditorError, ValidationError

MIN_PASSWORD_LENGTH = 6


class AuthFailed(InvoiceEditorError):
    """The auth provider rejected the request; `detail` is its message."""

    default_key = "authFailed"

    def __init__(self, detail: str) -> None:
        super().__init__(detail, params={"detail": detail})


class SignUpOutcome(str, Enum):
    """Result of a sign-up that the provider accepted."""

    SIGNED_IN = "signed_in"
    CONFIRMATION_SENT = "confirmation_sent"


def validate_new_password(password: str, confirm_password: str) -> None:
    """
    Check a new password and its confirmation.

    Raises:
        ValidationError: If they differ or the password is too short.
    """
    if password != confirm_password:
        raise ValidationError("confirm_password", message_key="passwordsDoNotMatch")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("password", message_key="passwordLengthError")


def validate_email(email: str) -> str:
    """Return the trimmed email, raising ValidationError when it is empty."""
    email = (email or "").strip()
    if not email or "@" not in email:
        raise ValidationError("email", message_key="invalidEmail")
    return email


class AuthService(ABC):
    """
    Abstract base class for account management.

    Attributes:
        session: Session whose identity this service maintains.
    """

    def __init__(self, session: AuthSession | None = None) -> None:
        self.session = session or AuthSession()

    @property
    def identity(self) -> Identity | None:
        return self.session.identity

    def close(self) -> None:
        """Release provider subscriptions. Nothing to release by default."""

    @abstractmethod
    async def refresh(self) -> Identity | None:
        """Re-read the current identity from the provider."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, confirm_password: str
    ) -> SignUpOutcome:
        """
        Create an account.

        Raises:
            ValidationError: Passwords differ, password too short, or the
                email already belongs to a confirmed account.
            AuthFailed: The provider rejected the request.
        """

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session."""

    @abstractmethod
    async def request_password_reset(self, email: str) -> None:
        """Send a password reset link. Succeeds for unknown emails too."""

    @abstractmethod
    async def update_password(self, password: str, confirm_password: str) -> None:
        """
        Change the signed-in user's password.

        Raises:
            Unauthenticated: Nobody is signed in.
            ValidationError: Passwords differ or are too short.
        """
