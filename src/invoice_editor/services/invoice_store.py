"""
Abstract base class defining the invoice persistence contract.

All store implementations extend InvoiceStore and provide three coroutines:
list_invoices(), upsert_invoice() and delete_invoice(). Every operation is
scoped to the identity the AuthSession currently reports; the store reads it
on each call and never caches it.

Implementations:
- DemoInvoiceStore: In-memory rows for development and tests
- SupabaseInvoiceStore: Supabase table protected by row level security
"""

from abc import ABC, abstractmethod

from invoice_editor.auth.session import AuthSession, Identity
from invoice_editor.errors import Unauthenticated
from invoice_editor.models.invoice import Invoice, StoredInvoice


class InvoiceStore(ABC):
    """
    Abstract base class for invoice persistence.

    Failures are reported only as Unauthenticated, StoreUnavailable or
    StoreError; raw client exceptions never leave an implementation.
    """

    def __init__(self, session: AuthSession) -> None:
        self.session = session

    def require_identity(self) -> Identity:
        """Return the current identity or raise Unauthenticated."""
        identity = self.session.identity
        if identity is None:
            raise Unauthenticated()
        return identity

    @abstractmethod
    async def list_invoices(self) -> list[StoredInvoice]:
        """
        Return the current user's invoices, most recently updated first.

        Raises:
            Unauthenticated: Nobody is signed in.
            StoreUnavailable: The invoice table does not exist.
            StoreError: Any other failure.
        """

    @abstractmethod
    async def upsert_invoice(self, invoice: Invoice) -> StoredInvoice:
        """
        Insert or overwrite an invoice keyed by its id.

        A new identifier is generated when the invoice has none. The stored
        row is stamped with the current time.

        Raises:
            Unauthenticated: Nobody is signed in.
            StoreError: The write failed.
        """

    @abstractmethod
    async def delete_invoice(self, invoice_id: str) -> bool:
        """
        Delete an invoice by id.

        Returns:
            True if a row was removed. Unknown ids are a no-op returning False.

        Raises:
            Unauthenticated: Nobody is signed in.
            StoreError: The delete failed.
        """
