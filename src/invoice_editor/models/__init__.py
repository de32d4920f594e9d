"""
Data models and serialization helpers for the Invoice Editor.

This package provides:
- Invoice domain models (Invoice, LineItem, Party)
- Derived totals (subtotal, tax_amount, total, compute_totals)
- Serialization to and from the stored JSON blob
- Shared UI state models (Banner, View)
"""

from invoice_editor.models.common import BANNER_TIMEOUT, Banner, View
from invoice_editor.models.invoice import (
    CURRENCIES,
    CURRENCY_LOCALES,
    Invoice,
    InvoiceSummary,
    LineItem,
    Party,
    StoredInvoice,
    Totals,
    compute_totals,
    deserialize_invoice,
    new_invoice,
    serialize_invoice,
    subtotal,
    tax_amount,
    total,
)

__all__ = [
    "BANNER_TIMEOUT",
    "Banner",
    "CURRENCIES",
    "CURRENCY_LOCALES",
    "Invoice",
    "InvoiceSummary",
    "LineItem",
    "Party",
    "StoredInvoice",
    "Totals",
    "View",
    "compute_totals",
    "deserialize_invoice",
    "new_invoice",
    "serialize_invoice",
    "subtotal",
    "tax_amount",
    "total",
]
