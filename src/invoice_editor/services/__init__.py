"""
Store factory for the Invoice Editor.

This module provides get_invoice_store(), which returns the InvoiceStore
implementation for a backend kind.

Available Implementations:
- demo: In-memory rows (no Supabase project required)
- supabase: Supabase table protected by row level security

The Supabase implementation is imported lazily so the demo backend works
without contacting or configuring Supabase.
"""

from typing import Any, Callable, Dict

from invoice_editor.auth.session import AuthSession
from invoice_editor.lib import logs
from invoice_editor.services.invoice_store import InvoiceStore
from invoice_editor.services.invoice_store_demo import DemoInvoiceStore, DemoTable

LOG = logs.logger(__file__)


def _supabase_store(session: AuthSession, **options: Any) -> InvoiceStore:
    from invoice_editor.services.invoice_store_impl import SupabaseInvoiceStore

    return SupabaseInvoiceStore(options["client"], session, options["table_name"])


_STORE_REGISTRY: Dict[str, Callable[..., InvoiceStore]] = {
    "demo": lambda session, **options: DemoInvoiceStore(session, options.get("table")),
    "supabase": _supabase_store,
}


def get_invoice_store(kind: str, session: AuthSession, **options: Any) -> InvoiceStore:
    """
    Return a store implementation bound to the given session.

    Args:
        kind: "demo" or "supabase".
        session: Session the store reads its identity from.
        **options: Implementation options (demo: table; supabase: client,
            table_name).

    Raises:
        ValueError: If the kind is unknown.
    """
    resolved_kind = kind.lower()
    LOG.info("get_invoice_store - kind:%s", resolved_kind)
    try:
        factory = _STORE_REGISTRY[resolved_kind]
    except KeyError as exc:
        msg = f"Unknown invoice store kind: {resolved_kind}"
        raise ValueError(msg) from exc
    return factory(session, **options)


__all__ = ["DemoInvoiceStore", "DemoTable", "InvoiceStore", "get_invoice_store"]
