"""
Error taxonomy for the Invoice Editor.

Every failure that reaches the UI is one of the classes below. Each error
carries a translation key (see invoice_editor.i18n) so the UI can show a
localized message without inspecting the exception type.

- Unauthenticated: an identity is required but nobody is signed in
- StoreUnavailable: the invoice table does not exist (provisioning problem)
- StoreError: any other remote failure, retryable by the user
- ValidationError: bad input for a specific field, shown inline
- ExportError: the document could not be rendered
- SaveInProgress: a save for the same draft is already awaiting a response
"""

from __future__ import annotations


class InvoiceEditorError(Exception):
    """Base class for all errors surfaced to the UI."""

    default_key = "errorOccurred"

    def __init__(
        self,
        message: str | None = None,
        message_key: str | None = None,
        params: dict | None = None,
    ) -> None:
        self.message_key = message_key or self.default_key
        self.params = params or {}
        super().__init__(message or self.message_key)


class Unauthenticated(InvoiceEditorError):
    default_key = "mustBeLoggedInToSave"


class StoreUnavailable(InvoiceEditorError):
    default_key = "databaseSetupError"


class StoreError(InvoiceEditorError):
    default_key = "errorOccurred"


class ValidationError(InvoiceEditorError):
    """Invalid input for a single field; `field` names where to show it."""

    def __init__(
        self,
        field: str,
        message: str | None = None,
        message_key: str | None = None,
        params: dict | None = None,
    ) -> None:
        self.field = field
        super().__init__(message, message_key, params)


class ExportError(InvoiceEditorError):
    default_key = "pdfGenerationError"


class SaveInProgress(InvoiceEditorError):
    default_key = "saving"
