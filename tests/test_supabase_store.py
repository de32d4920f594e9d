"""SupabaseInvoiceStore against a recorded fake of the PostgREST query builder."""

import asyncio
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from invoice_editor.auth import AuthSession
from invoice_editor.errors import StoreError, StoreUnavailable, Unauthenticated
from invoice_editor.models.invoice import serialize_invoice, with_id
from invoice_editor.services.invoice_store_impl import SupabaseInvoiceStore


class FakeQuery:
    def __init__(self, client: "FakeClient") -> None:
        self.client = client

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.client.calls.append((name, args, kwargs))
            return self

        return record

    async def execute(self):
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.data)


class FakeClient:
    def __init__(self, data=None, error: Exception | None = None) -> None:
        self.data = data if data is not None else []
        self.error = error
        self.calls: list[tuple] = []
        self.tables: list[str] = []

    def table(self, name: str) -> FakeQuery:
        self.tables.append(name)
        return FakeQuery(self)


def _store(client: FakeClient, session) -> SupabaseInvoiceStore:
    return SupabaseInvoiceStore(client, session, "invoices")


def test_list_selects_newest_first(session, make_invoice) -> None:
    invoice = with_id(make_invoice((1, 10)), "row-1")
    client = FakeClient(
        data=[
            {
                "id": "row-1",
                "invoice_data": serialize_invoice(invoice),
                "updated_at": "2024-03-01T12:00:00Z",
            }
        ]
    )

    stored = asyncio.run(_store(client, session).list_invoices())

    assert client.tables == ["invoices"]
    assert ("select", ("id, invoice_data, updated_at",), {}) in client.calls
    assert ("order", ("updated_at",), {"desc": True}) in client.calls
    assert stored[0].invoice == invoice
    assert stored[0].updated_at.year == 2024


def test_upsert_sends_owner_and_blob(session, make_invoice) -> None:
    client = FakeClient()
    draft = make_invoice((2, 5))

    stored = asyncio.run(_store(client, session).upsert_invoice(draft))

    name, args, _ = client.calls[0]
    payload = args[0]
    assert name == "upsert"
    assert payload["user_id"] == "user-alice"
    assert payload["id"] == stored.invoice.id
    assert payload["invoice_data"]["invoiceNumber"] == draft.invoice_number
    assert stored.updated_at is not None


def test_delete_reports_whether_a_row_was_removed(session) -> None:
    removed = FakeClient(data=[{"id": "row-1"}])
    missing = FakeClient(data=[])

    assert asyncio.run(_store(removed, session).delete_invoice("row-1")) is True
    assert ("eq", ("id", "row-1"), {}) in removed.calls
    assert asyncio.run(_store(missing, session).delete_invoice("row-1")) is False


def test_missing_table_is_store_unavailable(session) -> None:
    error = APIError({"message": 'relation "public.invoices" does not exist', "code": "42P01"})
    client = FakeClient(error=error)

    with pytest.raises(StoreUnavailable) as info:
        asyncio.run(_store(client, session).list_invoices())

    assert info.value.message_key == "databaseSetupError"


def test_other_api_errors_are_store_errors(session, make_invoice) -> None:
    client = FakeClient(error=APIError({"message": "permission denied", "code": "42501"}))

    with pytest.raises(StoreError) as info:
        asyncio.run(_store(client, session).upsert_invoice(make_invoice()))

    assert info.value.message_key == "failedToSaveInvoice"


def test_network_errors_are_store_errors(session) -> None:
    client = FakeClient(error=httpx.ConnectError("connection refused"))

    with pytest.raises(StoreError) as info:
        asyncio.run(_store(client, session).delete_invoice("row-1"))

    assert info.value.message_key == "deleteInvoiceError"


def test_requires_identity_before_any_request() -> None:
    client = FakeClient()

    with pytest.raises(Unauthenticated):
        asyncio.run(_store(client, AuthSession()).list_invoices())

    assert client.tables == []
