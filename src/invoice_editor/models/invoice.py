"""
Invoice domain models, derived totals and serialization helpers.

The hierarchy mirrors the JSON blob stored in the invoice table:

    Invoice
    ├── Party (sender "from", with optional logo)
    ├── Party (recipient "to")
    └── LineItem[] (description, quantity, unit price)

All models are frozen dataclasses. Editing an invoice means building a new
value with dataclasses.replace, so two draft snapshots never share mutable
state. Subtotal, tax and total are never stored; they are always derived
from the line items and tax rate by the functions in this module.

Serialization functions convert between dataclasses and the camelCase
dictionaries kept in the `invoice_data` column.
"""

import base64
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any, Mapping

from invoice_editor.utils import CURRENCY_LOCALES, parse_date, parse_number

CURRENCIES: tuple[str, ...] = tuple(CURRENCY_LOCALES)

MAX_LOGO_BYTES = 2 * 1024 * 1024
DEFAULT_LOGO_WIDTH = 150
MIN_LOGO_WIDTH = 50
MAX_LOGO_WIDTH = 300


def new_item_id() -> str:
    """Return a fresh opaque line item identifier."""
    return str(uuid.uuid4())


@dataclass(frozen=True, slots=True)
class LineItem:
    """A single billed line: quantity units at a unit price."""

    id: str
    description: str = ""
    quantity: float = 1
    price: float = 0

    @property
    def line_total(self) -> float:
        return self.quantity * self.price


@dataclass(frozen=True, slots=True)
class Party:
    """
    Sender or recipient of the invoice.

    Attributes:
        name: Display name.
        address: Free text; commas separate the printed lines.
        email: Contact address.
        logo: Sender only. Image payload as a base64 data URL.
        logo_width: Sender only. Display width of the logo in pixels.
    """

    name: str = ""
    address: str = ""
    email: str = ""
    logo: str | None = None
    logo_width: int = DEFAULT_LOGO_WIDTH

    def address_lines(self) -> list[str]:
        """Return the address split into display lines."""
        return [line.strip() for line in self.address.split(",") if line.strip()]


@dataclass(frozen=True, slots=True)
class Invoice:
    """Primary dataclass for invoices. `id` is None until the first save."""

    invoice_number: str
    date: date
    due_date: date
    sender: Party
    recipient: Party
    items: tuple[LineItem, ...] = ()
    notes: str = ""
    tax_rate: float = 0
    currency: str = "EUR"
    id: str | None = None

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def item(self, item_id: str) -> LineItem | None:
        """Return the line item with the given id, if present."""
        return next((item for item in self.items if item.id == item_id), None)


@dataclass(frozen=True, slots=True)
class Totals:
    """Derived monetary values of an invoice."""

    subtotal: float
    tax_amount: float
    total: float


@dataclass(frozen=True, slots=True)
class StoredInvoice:
    """An invoice as returned by the store, with its last update time."""

    invoice: Invoice
    updated_at: datetime | None = None


def subtotal(invoice: Invoice) -> float:
    """Sum of quantity × price over all line items."""
    return sum((item.line_total for item in invoice.items), 0)


def tax_amount(invoice: Invoice) -> float:
    """Tax on the subtotal at the invoice tax rate (a percentage)."""
    return subtotal(invoice) * invoice.tax_rate / 100


def total(invoice: Invoice) -> float:
    """Subtotal plus tax."""
    return subtotal(invoice) + tax_amount(invoice)


def compute_totals(invoice: Invoice) -> Totals:
    """Return all derived totals in one pass."""
    sub = subtotal(invoice)
    tax = sub * invoice.tax_rate / 100
    return Totals(subtotal=sub, tax_amount=tax, total=sub + tax)


def new_invoice(today: date | None = None) -> Invoice:
    """Return the blank template shown when a new invoice is started."""
    today = today or date.today()
    return Invoice(
        invoice_number="INV-001",
        date=today,
        due_date=today + timedelta(days=30),
        sender=Party(
            name="Your Company",
            address="123 Your Street, Your City",
            email="your.email@example.com",
        ),
        recipient=Party(
            name="Client Company",
            address="456 Client Avenue, Client City",
            email="client.email@example.com",
        ),
        items=(
            LineItem(
                id=new_item_id(),
                description="Web Development Service",
                quantity=10,
                price=100,
            ),
        ),
        notes="Thank you for your business. Please pay within 30 days.",
        tax_rate=5,
        currency="EUR",
    )


def with_id(invoice: Invoice, invoice_id: str | None = None) -> Invoice:
    """Return the invoice with an identifier, generating one when absent."""
    if invoice.id:
        return invoice
    return replace(invoice, id=invoice_id or str(uuid.uuid4()))


def encode_logo(payload: bytes, media_type: str) -> str:
    """Encode an image payload as a data URL for inline storage."""
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def decode_logo(data_url: str) -> tuple[str, bytes]:
    """
    Decode a logo data URL.

    Returns:
        Tuple of (media type, raw bytes).

    Raises:
        ValueError: If the value is not a base64 data URL.
    """
    header, sep, encoded = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Logo is not a base64 data URL")
    media_type = header[len("data:") : -len(";base64")]
    return media_type, base64.b64decode(encoded)


def _serialize_party(party: Party, include_logo: bool) -> dict:
    data = {"name": party.name, "address": party.address, "email": party.email}
    if include_logo:
        if party.logo:
            data["logo"] = party.logo
        data["logoWidth"] = party.logo_width
    return data


def serialize_invoice(invoice: Invoice) -> dict:
    """Convert an Invoice into the JSON blob stored in the invoice table."""
    data = {
        "invoiceNumber": invoice.invoice_number,
        "date": invoice.date.isoformat(),
        "dueDate": invoice.due_date.isoformat(),
        "from": _serialize_party(invoice.sender, include_logo=True),
        "to": _serialize_party(invoice.recipient, include_logo=False),
        "items": [
            {
                "id": item.id,
                "description": item.description,
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in invoice.items
        ],
        "notes": invoice.notes,
        "taxRate": invoice.tax_rate,
        "currency": invoice.currency,
    }
    if invoice.id:
        data["id"] = invoice.id
    return data


def _deserialize_party(payload: Mapping[str, Any] | None) -> Party:
    payload = payload or {}
    return Party(
        name=payload.get("name", ""),
        address=payload.get("address", ""),
        email=payload.get("email", ""),
        logo=payload.get("logo") or None,
        logo_width=int(payload.get("logoWidth") or DEFAULT_LOGO_WIDTH),
    )


def deserialize_invoice(payload: Mapping[str, Any]) -> Invoice:
    """Convert a stored JSON blob back into an Invoice dataclass."""
    today = date.today()
    issue_date = parse_date(payload.get("date")) or today
    return Invoice(
        id=payload.get("id") or None,
        invoice_number=payload.get("invoiceNumber", ""),
        date=issue_date,
        due_date=parse_date(payload.get("dueDate")) or issue_date,
        sender=_deserialize_party(payload.get("from")),
        recipient=_deserialize_party(payload.get("to")),
        items=tuple(
            LineItem(
                id=item.get("id") or new_item_id(),
                description=item.get("description", ""),
                quantity=parse_number(item.get("quantity")),
                price=parse_number(item.get("price")),
            )
            for item in payload.get("items", [])
        ),
        notes=payload.get("notes", ""),
        tax_rate=parse_number(payload.get("taxRate")),
        currency=payload.get("currency") or "EUR",
    )


@dataclass(slots=True)
class InvoiceSummary:
    """One row of the saved-invoice list."""

    id: str
    invoice_number: str
    client: str
    due_date: str
    amount: str
    active: bool = field(default=False)
