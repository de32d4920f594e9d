"""
Display representation of an invoice draft.

InvoicePreview is what the preview pane shows and what the exporter
captures: every amount is already formatted, every label already
translated. Amounts are formatted in the home locale of the invoice
currency so a EUR invoice reads "1.050,00 €" whatever the UI language.
"""

from dataclasses import dataclass, field

from invoice_editor.i18n import Translator
from invoice_editor.models.invoice import Invoice, Party, compute_totals
from invoice_editor.utils import format_currency


def _format_number(value: float) -> str:
    """Render a quantity or rate without a trailing ".0" for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


@dataclass(frozen=True, slots=True)
class PreviewParty:
    name: str
    address_lines: tuple[str, ...]
    email: str


@dataclass(frozen=True, slots=True)
class PreviewLine:
    description: str
    quantity: str
    price: str
    total: str


@dataclass(frozen=True, slots=True)
class InvoicePreview:
    """
    Formatted snapshot of one invoice.

    Attributes:
        invoice_number: Number printed under the title.
        labels: Translated captions keyed by translation key.
        logo: Sender logo as a data URL, if any.
        logo_width: Display width of the logo in pixels.
        tax_label: Caption of the tax row, e.g. "Tax (5%)".
    """

    invoice_number: str
    date: str
    due_date: str
    sender: PreviewParty
    recipient: PreviewParty
    lines: tuple[PreviewLine, ...]
    subtotal: str
    tax: str
    total: str
    tax_label: str
    notes: str
    currency: str
    logo: str | None = None
    logo_width: int = 150
    labels: dict[str, str] = field(default_factory=dict)


_LABEL_KEYS = (
    "invoiceTitle",
    "billTo",
    "date",
    "dueDate",
    "item",
    "quantityShort",
    "price",
    "total",
    "subtotal",
    "tax",
    "notes",
)


def _party(party: Party) -> PreviewParty:
    return PreviewParty(
        name=party.name,
        address_lines=tuple(party.address_lines()),
        email=party.email,
    )


def build_preview(invoice: Invoice, translator: Translator | None = None) -> InvoicePreview:
    """
    Build the formatted preview of an invoice.

    Args:
        invoice: Draft to render.
        translator: Label language; English when omitted.

    Returns:
        InvoicePreview whose totals are derived from the invoice items.
    """
    translator = translator or Translator()
    totals = compute_totals(invoice)

    def money(value: float) -> str:
        return format_currency(value, invoice.currency)

    return InvoicePreview(
        invoice_number=invoice.invoice_number,
        date=invoice.date.isoformat(),
        due_date=invoice.due_date.isoformat(),
        sender=_party(invoice.sender),
        recipient=_party(invoice.recipient),
        lines=tuple(
            PreviewLine(
                description=item.description,
                quantity=_format_number(item.quantity),
                price=money(item.price),
                total=money(item.line_total),
            )
            for item in invoice.items
        ),
        subtotal=money(totals.subtotal),
        tax=money(totals.tax_amount),
        total=money(totals.total),
        tax_label=f"{translator('tax')} ({_format_number(invoice.tax_rate)}%)",
        notes=invoice.notes,
        currency=invoice.currency,
        logo=invoice.sender.logo,
        logo_width=invoice.sender.logo_width,
        labels={key: translator(key) for key in _LABEL_KEYS},
    )
