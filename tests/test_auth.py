import asyncio

import pytest

from invoice_editor.auth import AuthEvent, AuthFailed, AuthSession, SignUpOutcome
from invoice_editor.errors import Unauthenticated, ValidationError

from conftest import ALICE


def test_session_infers_events() -> None:
    session = AuthSession()
    events = []
    session.subscribe(lambda event, identity: events.append((event, identity)))

    session.set_identity(ALICE)
    session.set_identity(ALICE)
    session.set_identity(None)

    assert events == [(AuthEvent.SIGNED_IN, ALICE), (AuthEvent.SIGNED_OUT, None)]


def test_unsubscribe_stops_notifications() -> None:
    session = AuthSession()
    events = []
    unsubscribe = session.subscribe(lambda event, identity: events.append(event))

    unsubscribe()
    unsubscribe()
    session.set_identity(ALICE)

    assert events == []
    assert session.is_authenticated


def test_sign_up_then_sign_in(auth) -> None:
    outcome = asyncio.run(auth.sign_up("new@example.com", "secret1", "secret1"))
    assert outcome is SignUpOutcome.SIGNED_IN
    assert auth.identity.email == "new@example.com"

    asyncio.run(auth.sign_out())
    assert auth.identity is None

    identity = asyncio.run(auth.sign_in("New@Example.com", "secret1"))
    assert identity.email == "new@example.com"


def test_sign_in_with_wrong_password(auth, accounts) -> None:
    accounts.create("alice@example.com", "secret1")

    with pytest.raises(AuthFailed) as info:
        asyncio.run(auth.sign_in("alice@example.com", "nope"))

    assert info.value.message_key == "authFailed"
    assert info.value.params["detail"] == "Invalid login credentials"
    assert auth.identity is None


@pytest.mark.parametrize(
    "password, confirm, key",
    [("secret1", "secret2", "passwordsDoNotMatch"), ("abc", "abc", "passwordLengthError")],
)
def test_sign_up_rejects_bad_passwords(auth, accounts, password, confirm, key) -> None:
    with pytest.raises(ValidationError) as info:
        asyncio.run(auth.sign_up("x@example.com", password, confirm))

    assert info.value.message_key == key
    assert accounts.find("x@example.com") is None


def test_sign_up_with_registered_email(auth, accounts) -> None:
    accounts.create("alice@example.com", "secret1")

    with pytest.raises(ValidationError) as info:
        asyncio.run(auth.sign_up("alice@example.com", "another1", "another1"))

    assert info.value.message_key == "emailAlreadyRegistered"
    assert auth.identity is None


def test_sign_in_requires_an_email(auth) -> None:
    with pytest.raises(ValidationError) as info:
        asyncio.run(auth.sign_in("   ", "secret1"))

    assert info.value.field == "email"


def test_password_reset_never_reveals_accounts(auth, accounts) -> None:
    accounts.create("alice@example.com", "secret1")

    asyncio.run(auth.request_password_reset("alice@example.com"))
    asyncio.run(auth.request_password_reset("nobody@example.com"))

    assert accounts.reset_requests == ["alice@example.com"]


def test_update_password(auth, accounts) -> None:
    with pytest.raises(Unauthenticated):
        asyncio.run(auth.update_password("secret2", "secret2"))

    asyncio.run(auth.sign_up("alice@example.com", "secret1", "secret1"))
    events = []
    auth.session.subscribe(lambda event, identity: events.append(event))

    asyncio.run(auth.update_password("secret2", "secret2"))
    asyncio.run(auth.sign_out())

    assert events == [AuthEvent.USER_UPDATED, AuthEvent.SIGNED_OUT]
    assert accounts.find("alice@example.com").check("secret2")
