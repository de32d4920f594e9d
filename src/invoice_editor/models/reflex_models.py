"""
Reflex-compatible models for the Invoice Editor.

These models extend rx.Base so they can be used with rx.foreach and
other Reflex reactive components. They are display copies: the editor
keeps the authoritative frozen dataclasses.
"""

import reflex as rx

from invoice_editor.models.invoice import Invoice, InvoiceSummary
from invoice_editor.preview import InvoicePreview


class LineItemModel(rx.Base):
    """Editable line item row."""

    id: str = ""
    description: str = ""
    quantity: float = 1
    price: float = 0
    error: str = ""


class PartyModel(rx.Base):
    """Sender or recipient form section."""

    name: str = ""
    address: str = ""
    email: str = ""


class DraftModel(rx.Base):
    """Form values of the invoice being edited."""

    id: str = ""
    invoice_number: str = ""
    date: str = ""
    due_date: str = ""
    sender: PartyModel = PartyModel()
    recipient: PartyModel = PartyModel()
    logo: str = ""
    logo_width: int = 150
    items: list[LineItemModel] = []
    notes: str = ""
    tax_rate: float = 0
    currency: str = "EUR"


class PreviewLineModel(rx.Base):
    description: str = ""
    quantity: str = ""
    price: str = ""
    total: str = ""


class PreviewPartyModel(rx.Base):
    name: str = ""
    address_lines: list[str] = []
    email: str = ""


class PreviewModel(rx.Base):
    """Formatted invoice shown in the preview pane."""

    invoice_number: str = ""
    date: str = ""
    due_date: str = ""
    sender: PreviewPartyModel = PreviewPartyModel()
    recipient: PreviewPartyModel = PreviewPartyModel()
    lines: list[PreviewLineModel] = []
    subtotal: str = ""
    tax: str = ""
    total: str = ""
    tax_label: str = ""
    notes: str = ""
    logo: str = ""
    logo_width: int = 150


class InvoiceRowModel(rx.Base):
    """One row of the saved-invoice table."""

    id: str = ""
    invoice_number: str = ""
    client: str = ""
    due_date: str = ""
    amount: str = ""
    active: bool = False


def draft_to_model(invoice: Invoice, item_errors: dict[str, str] | None = None) -> DraftModel:
    """
    Convert the editor draft into form values.

    item_errors maps line item ids to the message shown under that row.
    """
    item_errors = item_errors or {}
    return DraftModel(
        id=invoice.id or "",
        invoice_number=invoice.invoice_number,
        date=invoice.date.isoformat(),
        due_date=invoice.due_date.isoformat(),
        sender=PartyModel(
            name=invoice.sender.name,
            address=invoice.sender.address,
            email=invoice.sender.email,
        ),
        recipient=PartyModel(
            name=invoice.recipient.name,
            address=invoice.recipient.address,
            email=invoice.recipient.email,
        ),
        logo=invoice.sender.logo or "",
        logo_width=invoice.sender.logo_width,
        items=[
            LineItemModel(
                id=item.id,
                description=item.description,
                quantity=item.quantity,
                price=item.price,
                error=item_errors.get(item.id, ""),
            )
            for item in invoice.items
        ],
        notes=invoice.notes,
        tax_rate=invoice.tax_rate,
        currency=invoice.currency,
    )


def preview_to_model(preview: InvoicePreview) -> PreviewModel:
    return PreviewModel(
        invoice_number=preview.invoice_number,
        date=preview.date,
        due_date=preview.due_date,
        sender=PreviewPartyModel(
            name=preview.sender.name,
            address_lines=list(preview.sender.address_lines),
            email=preview.sender.email,
        ),
        recipient=PreviewPartyModel(
            name=preview.recipient.name,
            address_lines=list(preview.recipient.address_lines),
            email=preview.recipient.email,
        ),
        lines=[
            PreviewLineModel(
                description=line.description,
                quantity=line.quantity,
                price=line.price,
                total=line.total,
            )
            for line in preview.lines
        ],
        subtotal=preview.subtotal,
        tax=preview.tax,
        total=preview.total,
        tax_label=preview.tax_label,
        notes=preview.notes,
        logo=preview.logo or "",
        logo_width=preview.logo_width,
    )


def summary_to_model(summary: InvoiceSummary) -> InvoiceRowModel:
    return InvoiceRowModel(
        id=summary.id,
        invoice_number=summary.invoice_number,
        client=summary.client,
        due_date=summary.due_date,
        amount=summary.amount,
        active=summary.active,
    )
