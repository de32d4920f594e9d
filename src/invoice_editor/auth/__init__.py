"""
Authentication for the Invoice Editor.

Identity and change notifications live in AuthSession; account operations
are provided by an AuthService implementation:
- demo: In-memory accounts (no Supabase project required)
- supabase: Supabase Auth via the async Supabase client
"""

from invoice_editor.auth.auth_service import (
    AuthFailed,
    AuthService,
    SignUpOutcome,
    validate_new_password,
)
from invoice_editor.auth.auth_service_demo import DemoAccountRegistry, DemoAuthService
from invoice_editor.auth.session import AuthEvent, AuthSession, Identity

__all__ = [
    "AuthEvent",
    "AuthFailed",
    "AuthService",
    "AuthSession",
    "DemoAccountRegistry",
    "DemoAuthService",
    "Identity",
    "SignUpOutcome",
    "validate_new_password",
]
