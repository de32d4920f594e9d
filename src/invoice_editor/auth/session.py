"""
Current identity and auth change notifications.

AuthSession is the single place that knows who is signed in. Components do
not read identity from globals; they receive the session object and either
read `session.identity` when they need it or register a callback to react
to sign-in and sign-out. Registration returns an unsubscribe function so
owners can detach deterministically when they are closed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from invoice_editor.lib import logs

LOG = logs.logger(__file__)


@dataclass(frozen=True, slots=True)
class Identity:
    """The authenticated principal store operations are scoped to."""

    user_id: str
    email: str = ""


class AuthEvent(str, Enum):
    """Auth state transitions reported to subscribers."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    USER_UPDATED = "USER_UPDATED"


AuthCallback = Callable[[AuthEvent, Identity | None], None]


class AuthSession:
    """
    Holds the current identity and notifies subscribers when it changes.

    Callbacks run synchronously, in registration order, on the thread that
    reported the change.
    """

    def __init__(self, identity: Identity | None = None) -> None:
        self._identity = identity
        self._callbacks: list[AuthCallback] = []

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def subscribe(self, callback: AuthCallback) -> Callable[[], None]:
        """
        Register a callback for auth events.

        Returns:
            Function that removes the callback. Calling it twice is harmless.
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def set_identity(self, identity: Identity | None, event: AuthEvent | None = None) -> None:
        """
        Record a new identity and notify subscribers.

        When no event is given it is inferred: a new identity is SIGNED_IN,
        losing the identity is SIGNED_OUT, and an unchanged identity emits
        nothing.
        """
        previous = self._identity
        self._identity = identity
        if event is None:
            if identity == previous:
                return
            event = AuthEvent.SIGNED_IN if identity else AuthEvent.SIGNED_OUT
        LOG.info("Auth event %s (user=%s)", event.value, identity.user_id if identity else None)
        for callback in list(self._callbacks):
            callback(event, identity)
