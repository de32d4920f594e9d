import asyncio
from datetime import date

import pytest

from invoice_editor.auth import AuthSession
from invoice_editor.editor import EditorStatus, InvoiceEditor
from invoice_editor.errors import SaveInProgress, StoreError, Unauthenticated, ValidationError
from invoice_editor.models.invoice import MAX_LOGO_BYTES, StoredInvoice, compute_totals, with_id
from invoice_editor.models.reflex_models import draft_to_model
from invoice_editor.services.invoice_store import InvoiceStore


class ControlledStore(InvoiceStore):
    """Store whose upserts wait for the test to release them."""

    def __init__(self, session: AuthSession) -> None:
        super().__init__(session)
        self.release = asyncio.Event()
        self.upserts = []
        self.fail = False

    async def list_invoices(self):
        return []

    async def upsert_invoice(self, invoice):
        self.require_identity()
        self.upserts.append(invoice)
        await self.release.wait()
        if self.fail:
            raise StoreError("boom", message_key="failedToSaveInvoice")
        return StoredInvoice(invoice=with_id(invoice, "saved-1"))

    async def delete_invoice(self, invoice_id):
        return False


class CountingStore(ControlledStore):
    def __init__(self, session: AuthSession) -> None:
        super().__init__(session)
        self.release.set()


def test_adding_item_updates_totals(editor) -> None:
    editor.update_line_item(editor.draft.items[0].id, "quantity", 10)
    editor.update_line_item(editor.draft.items[0].id, "price", 100)
    editor.update_field("tax_rate", "5")

    item = editor.add_line_item()
    editor.update_line_item(item.id, "quantity", "2")
    editor.update_line_item(item.id, "price", "25")

    assert editor.totals.subtotal == 1050
    assert editor.totals.tax_amount == pytest.approx(52.5)
    assert editor.totals.total == pytest.approx(1102.5)
    assert editor.status is EditorStatus.DIRTY


def test_new_line_item_defaults(editor) -> None:
    item = editor.add_line_item()

    assert (item.description, item.quantity, item.price) == ("", 1, 0)
    assert editor.draft.items[-1] == item


def test_remove_line_item(editor) -> None:
    first = editor.draft.items[0]

    editor.remove_line_item(first.id)

    assert editor.draft.items == ()
    assert compute_totals(editor.draft).total == 0


def test_line_item_errors_follow_their_row(editor) -> None:
    first = editor.draft.items[0]
    second = editor.add_line_item()

    with pytest.raises(ValidationError):
        editor.update_line_item(second.id, "discount", 5)

    assert list(editor.item_errors(second.id)) == [f"items.{second.id}.discount"]
    assert editor.item_errors(first.id) == {}

    editor.remove_line_item(second.id)

    assert editor.field_errors == {}


def test_edit_of_removed_line_item_is_reported_on_the_list(editor) -> None:
    (item,) = editor.draft.items
    editor.remove_line_item(item.id)

    with pytest.raises(ValidationError):
        editor.update_line_item(item.id, "price", 3)

    assert list(editor.field_errors) == ["items"]
    editor.add_line_item()
    editor.update_line_item(editor.draft.items[0].id, "price", 3)
    assert editor.field_errors == {}


def test_row_errors_reach_the_form_model(editor) -> None:
    (item,) = editor.draft.items

    model = draft_to_model(editor.draft, {item.id: "Unknown line item field: discount"})

    assert model.items[0].error == "Unknown line item field: discount"
    assert draft_to_model(editor.draft).items[0].error == ""


def test_field_updates(editor) -> None:
    editor.update_field("from.name", "Acme")
    editor.update_field("to.address", "1 Road, Town")
    editor.update_field("due_date", "2030-01-31")
    editor.update_field("currency", "usd")

    draft = editor.draft
    assert draft.sender.name == "Acme"
    assert draft.recipient.address_lines() == ["1 Road", "Town"]
    assert draft.due_date == date(2030, 1, 31)
    assert draft.currency == "USD"


@pytest.mark.parametrize(
    "path, value",
    [("currency", "XYZ"), ("date", "31/31/2024"), ("from.phone", "1"), ("bogus", 1)],
)
def test_invalid_field_is_rejected_inline(editor, path, value) -> None:
    before = editor.draft

    with pytest.raises(ValidationError) as info:
        editor.update_field(path, value)

    assert editor.draft is before
    assert editor.field_errors[path] is info.value


def test_inline_error_clears_when_corrected(editor) -> None:
    with pytest.raises(ValidationError):
        editor.update_field("currency", "XYZ")

    editor.update_field("currency", "GBP")

    assert "currency" not in editor.field_errors


def test_save_while_signed_out_is_rejected() -> None:
    session = AuthSession()
    store = CountingStore(session)
    editor = InvoiceEditor(store, session)
    editor.update_field("notes", "keep me")
    before = editor.draft

    with pytest.raises(Unauthenticated):
        asyncio.run(editor.save())

    assert editor.draft is before
    assert editor.status is EditorStatus.DIRTY
    assert store.upserts == []


def test_oversized_logo_is_rejected(editor) -> None:
    before = editor.draft.sender.logo

    with pytest.raises(ValidationError) as info:
        editor.attach_logo(b"\0" * (3 * 1024 * 1024))

    assert info.value.message_key == "logoSizeError"
    assert editor.draft.sender.logo == before
    assert "from.logo" in editor.field_errors


def test_logo_attach_resize_remove(editor) -> None:
    editor.attach_logo(b"x" * MAX_LOGO_BYTES, "image/jpeg", width=120)

    assert editor.draft.sender.logo.startswith("data:image/jpeg;base64,")
    assert editor.draft.sender.logo_width == 120

    editor.set_logo_width("300")
    assert editor.draft.sender.logo_width == 300
    with pytest.raises(ValidationError):
        editor.set_logo_width(20)
    assert editor.draft.sender.logo_width == 300

    editor.remove_logo()
    assert editor.draft.sender.logo is None


def test_save_success_moves_to_clean(session, editor) -> None:
    editor.update_field("notes", "hello")

    result = asyncio.run(editor.save())

    assert result.applied
    assert result.navigate_to_list
    assert editor.status is EditorStatus.CLEAN
    assert editor.draft.id == result.invoice.id
    assert editor.baseline == editor.draft
    assert editor.draft_key == result.invoice.id


def test_save_failure_keeps_draft(session) -> None:
    store = ControlledStore(session)
    store.fail = True
    store.release.set()
    editor = InvoiceEditor(store, session)
    editor.update_field("notes", "draft text")

    with pytest.raises(StoreError):
        asyncio.run(editor.save())

    assert editor.status is EditorStatus.SAVE_ERROR
    assert editor.draft.notes == "draft text"
    assert editor.error is not None

    store.fail = False
    result = asyncio.run(editor.save())
    assert result.applied
    assert editor.status is EditorStatus.CLEAN


def test_second_save_while_in_flight_is_rejected(session) -> None:
    store = ControlledStore(session)
    editor = InvoiceEditor(store, session)

    async def scenario():
        first = asyncio.create_task(editor.save())
        await asyncio.sleep(0)
        assert editor.status is EditorStatus.SAVING
        with pytest.raises(SaveInProgress):
            await editor.save()
        store.release.set()
        return await first

    result = asyncio.run(scenario())

    assert result.applied
    assert len(store.upserts) == 1


def test_edits_during_save_stay_dirty(session) -> None:
    store = ControlledStore(session)
    editor = InvoiceEditor(store, session)

    async def scenario():
        task = asyncio.create_task(editor.save())
        await asyncio.sleep(0)
        editor.update_field("notes", "typed while saving")
        assert editor.status is EditorStatus.SAVING
        store.release.set()
        return await task

    result = asyncio.run(scenario())

    assert result.applied
    assert not result.navigate_to_list
    assert editor.status is EditorStatus.DIRTY
    assert editor.draft.notes == "typed while saving"
    assert editor.draft.id == "saved-1"


def test_stale_save_response_is_discarded(session, make_invoice) -> None:
    store = ControlledStore(session)
    editor = InvoiceEditor(store, session)
    other = with_id(make_invoice(invoice_number="OTHER"), "other-id")

    async def scenario():
        task = asyncio.create_task(editor.save())
        await asyncio.sleep(0)
        editor.load(other)
        store.release.set()
        return await task

    result = asyncio.run(scenario())

    assert not result.applied
    assert editor.draft is other
    assert editor.status is EditorStatus.CLEAN


def test_stale_save_failure_is_discarded(session) -> None:
    store = ControlledStore(session)
    store.fail = True
    editor = InvoiceEditor(store, session)

    async def scenario():
        task = asyncio.create_task(editor.save())
        await asyncio.sleep(0)
        editor.reset()
        store.release.set()
        return await task

    result = asyncio.run(scenario())

    assert not result.applied
    assert editor.status is EditorStatus.CLEAN
    assert editor.error is None


def test_undo_redo(editor) -> None:
    original = editor.draft
    editor.update_field("notes", "one")
    editor.update_field("notes", "two")

    assert editor.undo().notes == "one"
    assert editor.undo() == original
    assert not editor.can_undo
    assert editor.redo().notes == "one"

    editor.update_field("notes", "branch")
    assert not editor.can_redo
    assert editor.draft.notes == "branch"


def test_load_and_reset(editor, make_invoice) -> None:
    invoice = with_id(make_invoice((1, 1)), "abc")

    editor.load(invoice)
    assert editor.draft is invoice
    assert editor.draft_key == "abc"
    assert editor.status is EditorStatus.CLEAN

    editor.reset()
    assert editor.draft.id is None
    assert editor.draft.invoice_number == "INV-001"
    assert editor.draft_key.startswith("draft:")
