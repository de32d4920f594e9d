import asyncio
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from invoice_editor.auth import AuthSession
from invoice_editor.errors import StoreError, Unauthenticated
from invoice_editor.services import DemoInvoiceStore, DemoTable, get_invoice_store

from conftest import BOB


def test_saved_invoice_round_trips(store, make_invoice) -> None:
    draft = make_invoice((3, 40), (1, 15), currency="GBP")

    saved = asyncio.run(store.upsert_invoice(draft))
    listed = asyncio.run(store.list_invoices())

    assert saved.invoice.id
    assert saved.updated_at is not None
    assert len(listed) == 1
    fetched = listed[0].invoice
    assert fetched.id == saved.invoice.id
    assert replace(fetched, id=None) == draft


def test_upserting_twice_keeps_one_row(store, table, make_invoice) -> None:
    saved = asyncio.run(store.upsert_invoice(make_invoice((1, 1))))

    again = asyncio.run(store.upsert_invoice(replace(saved.invoice, notes="changed")))

    assert again.invoice.id == saved.invoice.id
    assert list(table.rows) == [saved.invoice.id]
    assert asyncio.run(store.list_invoices())[0].invoice.notes == "changed"


def test_list_orders_by_most_recent_update(store, make_invoice) -> None:
    first = asyncio.run(store.upsert_invoice(make_invoice(invoice_number="A")))
    asyncio.run(store.upsert_invoice(make_invoice(invoice_number="B")))
    asyncio.run(store.upsert_invoice(first.invoice))

    numbers = [entry.invoice.invoice_number for entry in asyncio.run(store.list_invoices())]

    assert numbers == ["A", "B"]


def test_rows_are_scoped_to_owner(store, table, make_invoice) -> None:
    saved = asyncio.run(store.upsert_invoice(make_invoice()))
    other = DemoInvoiceStore(AuthSession(BOB), table)

    assert asyncio.run(other.list_invoices()) == []
    assert asyncio.run(other.delete_invoice(saved.invoice.id)) is False
    with pytest.raises(StoreError):
        asyncio.run(other.upsert_invoice(saved.invoice))
    assert len(asyncio.run(store.list_invoices())) == 1


def test_delete_unknown_id_is_a_no_op(store) -> None:
    assert asyncio.run(store.delete_invoice("does-not-exist")) is False


def test_delete_removes_row(store, make_invoice) -> None:
    saved = asyncio.run(store.upsert_invoice(make_invoice()))

    assert asyncio.run(store.delete_invoice(saved.invoice.id)) is True
    assert asyncio.run(store.list_invoices()) == []


def test_operations_require_identity(table, make_invoice) -> None:
    anonymous = DemoInvoiceStore(AuthSession(), table)

    with pytest.raises(Unauthenticated):
        asyncio.run(anonymous.list_invoices())
    with pytest.raises(Unauthenticated):
        asyncio.run(anonymous.upsert_invoice(make_invoice()))
    with pytest.raises(Unauthenticated):
        asyncio.run(anonymous.delete_invoice("x"))
    assert table.rows == {}


def test_stamps_strictly_increase() -> None:
    frozen = datetime(2024, 1, 1, tzinfo=timezone.utc)
    table = DemoTable(clock=lambda: frozen)

    first, second = table.stamp(), table.stamp()

    assert first == frozen
    assert second > first


def test_store_factory(session) -> None:
    assert isinstance(get_invoice_store("DEMO", session), DemoInvoiceStore)
    with pytest.raises(ValueError):
        get_invoice_store("sqlite", session)
