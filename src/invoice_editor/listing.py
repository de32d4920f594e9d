"""
View model for the saved-invoice list.

Fetches the signed-in user's invoices, hands a chosen invoice (or a blank
template) to the editor, and deletes invoices after an explicit
confirmation step. Store errors are turned into banners here; nothing
raised by the store reaches the UI.
"""

from invoice_editor.editor import InvoiceEditor
from invoice_editor.errors import (
    InvoiceEditorError,
    StoreUnavailable,
    Unauthenticated,
)
from invoice_editor.lib import logs
from invoice_editor.models.common import Banner
from invoice_editor.models.invoice import Invoice, InvoiceSummary, total
from invoice_editor.services.invoice_store import InvoiceStore
from invoice_editor.utils import format_currency, format_date

LOG = logs.logger(__file__)


class InvoiceListViewModel:
    """
    State behind the invoice list page.

    Attributes:
        invoices: Invoices in the order the store returned them.
        loading: True while a fetch is running.
        deleting: True while a delete is running.
        pending_delete: Invoice awaiting delete confirmation, if any.
        banner: Last success/error message.
    """

    def __init__(self, store: InvoiceStore, editor: InvoiceEditor) -> None:
        self._store = store
        self._editor = editor
        self.invoices: list[Invoice] = []
        self.loading = False
        self.deleting = False
        self.pending_delete: Invoice | None = None
        self.banner: Banner | None = None

    async def activate(self) -> None:
        """Fetch the list when the page is shown."""
        await self.refresh()

    async def refresh(self) -> None:
        self.loading = True
        try:
            stored = await self._store.list_invoices()
            self.invoices = [entry.invoice for entry in stored]
        except StoreUnavailable as exc:
            LOG.error("Invoice table missing: %s", exc)
            self.banner = Banner.error("databaseSetupError")
        except Unauthenticated as exc:
            self.invoices = []
            self.banner = Banner.from_error(exc)
        except InvoiceEditorError as exc:
            LOG.error("Error fetching invoices: %s", exc)
            self.banner = Banner.error("fetchInvoicesError")
        finally:
            self.loading = False

    def clear(self) -> None:
        """Forget everything shown (used on sign-out)."""
        self.invoices = []
        self.pending_delete = None
        self.banner = None

    def find(self, invoice_id: str) -> Invoice | None:
        return next((inv for inv in self.invoices if inv.id == invoice_id), None)

    def select_invoice(self, invoice: Invoice) -> None:
        """Open an invoice in the editor."""
        self._editor.load(invoice)

    def new_invoice(self) -> None:
        """Open a blank template in the editor."""
        self._editor.reset()

    def request_delete(self, invoice_id: str) -> bool:
        """
        Ask for confirmation before deleting.

        Returns:
            True if a confirmation is now pending.
        """
        invoice = self.find(invoice_id)
        if invoice is None:
            return False
        self.pending_delete = invoice
        return True

    def cancel_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        """
        Delete the invoice awaiting confirmation, then re-fetch the list.

        Returns:
            True if the delete succeeded. Without a pending confirmation
            nothing is sent to the store and False is returned. A row that
            was already gone also returns False and re-fetches the list.
        """
        invoice = self.pending_delete
        if invoice is None or invoice.id is None:
            return False
        self.pending_delete = None
        self.deleting = True
        try:
            deleted = await self._store.delete_invoice(invoice.id)
        except InvoiceEditorError as exc:
            LOG.error("Error deleting invoice %s: %s", invoice.id, exc)
            self.banner = Banner.error("deleteInvoiceError")
            return False
        finally:
            self.deleting = False

        if not deleted:
            LOG.warning("Invoice %s was already deleted", invoice.id)
            self.banner = Banner.error("invoiceAlreadyDeleted")
            await self.refresh()
            return False

        self.banner = Banner.success("deleteInvoiceSuccess")
        if invoice.id in (self._editor.baseline.id, self._editor.draft.id):
            self._editor.reset()
        await self.refresh()
        return True

    def summaries(self, locale: str = "en") -> list[InvoiceSummary]:
        """Rows for the list table: number, client, due date, amount."""
        active_id = self._editor.draft.id
        return [
            InvoiceSummary(
                id=invoice.id or "",
                invoice_number=invoice.invoice_number,
                client=invoice.recipient.name,
                due_date=format_date(invoice.due_date, locale),
                amount=format_currency(total(invoice), invoice.currency, locale),
                active=invoice.id is not None and invoice.id == active_id,
            )
            for invoice in self.invoices
        ]
