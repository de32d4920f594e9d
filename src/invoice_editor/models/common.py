"""
Common state models shared by the view models and the Reflex state.

- Banner: transient success/error message shown above a page
- View: the page currently shown by the workspace

Banners carry a translation key rather than text so they can be rendered
in whichever language is selected when they are displayed.
"""

from dataclasses import dataclass, field
from enum import Enum

from invoice_editor.errors import InvoiceEditorError

# Seconds a banner stays visible before the UI dismisses it.
BANNER_TIMEOUT = 3


class View(str, Enum):
    """Pages of the application."""

    AUTH = "auth"
    LIST = "list"
    EDITOR = "editor"
    UPDATE_PASSWORD = "update_password"


@dataclass
class Banner:
    """
    Transient message shown to the user.

    Attributes:
        kind: "success" or "error".
        key: Translation key of the message.
        params: Placeholder values for the translation.
    """

    kind: str
    key: str
    params: dict = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.kind == "error"

    @classmethod
    def success(cls, key: str, **params) -> "Banner":
        return cls(kind="success", key=key, params=params)

    @classmethod
    def error(cls, key: str, **params) -> "Banner":
        return cls(kind="error", key=key, params=params)

    @classmethod
    def from_error(cls, error: InvoiceEditorError) -> "Banner":
        """Build an error banner from a surfaced error."""
        return cls(kind="error", key=error.message_key, params=dict(error.params))

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary."""
        return {"kind": self.kind, "key": self.key, "params": self.params}

    @classmethod
    def from_dict(cls, data: dict | None) -> "Banner | None":
        """Deserialize from dictionary."""
        if not data:
            return None
        return cls(
            kind=data.get("kind", "error"),
            key=data.get("key", ""),
            params=data.get("params", {}),
        )
