"""
Editing state for a single invoice draft.

InvoiceEditor holds the draft currently shown in the form, the baseline it
was loaded from (or last saved as), and a status:

    CLEAN       draft matches the baseline
    DIRTY       draft has been edited since
    SAVING      an upsert for this draft is awaiting a response
    SAVE_ERROR  the last save failed; the draft is kept for a retry

Every edit builds a new Invoice value; earlier snapshots are never mutated,
which is what makes undo/redo a matter of moving through a list.

Saves are asynchronous and the form stays editable meanwhile. Each save is
tagged with the key of the draft it was issued for. When the response
arrives it is applied only if the editor still shows that draft; otherwise
it is dropped. A second save for a draft that is already saving is refused.
"""

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from invoice_editor.auth.session import AuthSession
from invoice_editor.errors import (
    InvoiceEditorError,
    SaveInProgress,
    Unauthenticated,
    ValidationError,
)
from invoice_editor.lib import logs
from invoice_editor.models.invoice import (
    CURRENCIES,
    MAX_LOGO_BYTES,
    MAX_LOGO_WIDTH,
    MIN_LOGO_WIDTH,
    Invoice,
    LineItem,
    Totals,
    compute_totals,
    encode_logo,
    new_invoice,
    new_item_id,
)
from invoice_editor.services.invoice_store import InvoiceStore
from invoice_editor.utils import parse_date, parse_number

LOG = logs.logger(__file__)

_PARTY_SECTIONS = {"from": "sender", "to": "recipient"}
_PARTY_FIELDS = {"name", "address", "email"}
_TEXT_FIELDS = {"invoice_number", "notes"}
_DATE_FIELDS = {"date", "due_date"}
_ITEM_FIELDS = {"description", "quantity", "price"}


class EditorStatus(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"
    SAVE_ERROR = "save_error"


@dataclass(frozen=True, slots=True)
class SaveResult:
    """
    Outcome of a save that reached the store.

    Attributes:
        invoice: The invoice as stored (always carries an id).
        applied: False when the editor had moved to another draft and the
            response was dropped.
        navigate_to_list: True when the caller should return to the list.
    """

    invoice: Invoice
    applied: bool
    navigate_to_list: bool


def _draft_key(invoice: Invoice) -> str:
    return invoice.id or f"draft:{uuid.uuid4()}"


class InvoiceEditor:
    """
    State machine over one invoice draft.

    Attributes:
        status: Current EditorStatus.
        error: Error of the last failed save, if any.
        field_errors: Inline validation errors keyed by field path. An entry
            stays until that field receives a valid value.
    """

    def __init__(
        self,
        store: InvoiceStore,
        session: AuthSession,
        invoice: Invoice | None = None,
    ) -> None:
        self._store = store
        self._session = session
        self._in_flight: set[str] = set()
        self.load(invoice or new_invoice())

    # -- state -------------------------------------------------------------

    @property
    def draft(self) -> Invoice:
        return self._draft

    @property
    def baseline(self) -> Invoice:
        return self._baseline

    @property
    def draft_key(self) -> str:
        """Identifier of the draft being shown; changes on load/reset/first save."""
        return self._key

    @property
    def totals(self) -> Totals:
        return compute_totals(self._draft)

    @property
    def is_saving(self) -> bool:
        return self._key in self._in_flight

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._history) - 1

    def load(self, invoice: Invoice) -> None:
        """Make the invoice the new baseline and draft."""
        self._baseline = invoice
        self._draft = invoice
        self._key = _draft_key(invoice)
        self._history: list[Invoice] = [invoice]
        self._cursor = 0
        self._edited_while_saving = False
        self.status = EditorStatus.CLEAN
        self.error: InvoiceEditorError | None = None
        self.field_errors: dict[str, ValidationError] = {}
        LOG.debug("Editor loaded %s", self._key)

    def reset(self) -> None:
        """Replace the draft with a blank template."""
        self.load(new_invoice())

    def _apply(self, draft: Invoice, path: str | None = None) -> Invoice:
        if path is not None:
            self.field_errors.pop(path, None)
        if draft == self._draft:
            return draft
        del self._history[self._cursor + 1 :]
        self._history.append(draft)
        self._cursor = len(self._history) - 1
        self._set_draft(draft)
        return draft

    def _set_draft(self, draft: Invoice) -> None:
        self._draft = draft
        if self.status is EditorStatus.SAVING:
            self._edited_while_saving = True
        else:
            self.status = EditorStatus.DIRTY
            self.error = None

    def _reject(self, error: ValidationError) -> ValidationError:
        self.field_errors[error.field] = error
        return error

    def item_errors(self, item_id: str) -> dict[str, ValidationError]:
        """Errors recorded against one line item, keyed by field path."""
        prefix = f"items.{item_id}."
        return {path: error for path, error in self.field_errors.items() if path.startswith(prefix)}

    # -- field edits -------------------------------------------------------

    def update_field(self, path: str, value: Any) -> Invoice:
        """
        Set a top-level field or a party field.

        Args:
            path: "invoice_number", "date", "due_date", "notes", "tax_rate",
                "currency", or "from.<field>" / "to.<field>" where field is
                name, address or email.
            value: New value. Dates accept date objects or ISO strings;
                tax_rate accepts numbers or numeric strings.

        Returns:
            The new draft.

        Raises:
            ValidationError: Unknown path, unparseable date or unsupported
                currency. The draft is left unchanged.
        """
        section, _, name = path.partition(".")
        if name:
            attribute = _PARTY_SECTIONS.get(section)
            if attribute is None or name not in _PARTY_FIELDS:
                raise self._reject(ValidationError(path, f"Unknown field: {path}"))
            party = replace(getattr(self._draft, attribute), **{name: str(value or "")})
            return self._apply(replace(self._draft, **{attribute: party}), path)

        if path in _TEXT_FIELDS:
            return self._apply(replace(self._draft, **{path: str(value or "")}), path)
        if path in _DATE_FIELDS:
            parsed = parse_date(value)
            if parsed is None:
                raise self._reject(ValidationError(path, f"Invalid date: {value!r}"))
            return self._apply(replace(self._draft, **{path: parsed}), path)
        if path == "tax_rate":
            return self._apply(replace(self._draft, tax_rate=parse_number(value)), path)
        if path == "currency":
            currency = str(value or "").upper()
            if currency not in CURRENCIES:
                raise self._reject(ValidationError(path, f"Unsupported currency: {value!r}"))
            return self._apply(replace(self._draft, currency=currency), path)
        raise self._reject(ValidationError(path, f"Unknown field: {path}"))

    # -- line items --------------------------------------------------------

    def add_line_item(self) -> LineItem:
        """Append an empty line item (quantity 1, price 0) and return it."""
        item = LineItem(id=new_item_id(), description="", quantity=1, price=0)
        self._apply(replace(self._draft, items=self._draft.items + (item,)))
        return item

    def remove_line_item(self, item_id: str) -> Invoice:
        """Remove a line item and its errors. Unknown ids leave the draft unchanged."""
        for path in self.item_errors(item_id):
            del self.field_errors[path]
        self.field_errors.pop("items", None)
        items = tuple(item for item in self._draft.items if item.id != item_id)
        return self._apply(replace(self._draft, items=items))

    def update_line_item(self, item_id: str, field: str, value: Any) -> Invoice:
        """
        Replace one field of one line item.

        Errors are recorded under items.<item id>.<field>, or under "items"
        when the row no longer exists.

        Raises:
            ValidationError: Unknown item id or field name.
        """
        path = f"items.{item_id}.{field}"
        if field not in _ITEM_FIELDS:
            raise self._reject(ValidationError(path, f"Unknown line item field: {field}"))
        if self._draft.item(item_id) is None:
            raise self._reject(ValidationError("items", f"Unknown line item: {item_id}"))
        self.field_errors.pop("items", None)
        new_value = str(value or "") if field == "description" else parse_number(value)
        items = tuple(
            replace(item, **{field: new_value}) if item.id == item_id else item
            for item in self._draft.items
        )
        return self._apply(replace(self._draft, items=items), path)

    # -- logo --------------------------------------------------------------

    def attach_logo(
        self, payload: bytes, media_type: str = "image/png", width: int | None = None
    ) -> Invoice:
        """
        Store an image inline on the sender.

        Raises:
            ValidationError: Payload larger than 2 MiB or width outside
                50-300 px. The draft is left unchanged.
        """
        if len(payload) > MAX_LOGO_BYTES:
            raise self._reject(
                ValidationError("from.logo", message_key="logoSizeError")
            )
        width = self._checked_width(self._draft.sender.logo_width if width is None else width)
        sender = replace(
            self._draft.sender, logo=encode_logo(payload, media_type), logo_width=width
        )
        return self._apply(replace(self._draft, sender=sender), "from.logo")

    def set_logo_width(self, width: int | str) -> Invoice:
        """Change the logo display width (50-300 px)."""
        width = self._checked_width(width)
        sender = replace(self._draft.sender, logo_width=width)
        return self._apply(replace(self._draft, sender=sender), "from.logo_width")

    def remove_logo(self) -> Invoice:
        sender = replace(self._draft.sender, logo=None)
        return self._apply(replace(self._draft, sender=sender), "from.logo")

    def _checked_width(self, width: int | str) -> int:
        value = int(parse_number(width))
        if not MIN_LOGO_WIDTH <= value <= MAX_LOGO_WIDTH:
            raise self._reject(
                ValidationError("from.logo_width", message_key="logoWidthError")
            )
        return value

    # -- history -----------------------------------------------------------

    def undo(self) -> Invoice:
        if self.can_undo:
            self._cursor -= 1
            self._set_draft(self._history[self._cursor])
        return self._draft

    def redo(self) -> Invoice:
        if self.can_redo:
            self._cursor += 1
            self._set_draft(self._history[self._cursor])
        return self._draft

    # -- persistence -------------------------------------------------------

    async def save(self) -> SaveResult:
        """
        Upsert the draft through the store.

        Returns:
            SaveResult for a save that reached the store.

        Raises:
            Unauthenticated: Nobody is signed in. No store call is made and
                neither draft nor status change.
            SaveInProgress: A save for this draft is already in flight.
            StoreError, StoreUnavailable: The store rejected the write; the
                editor moves to SAVE_ERROR and keeps the draft.
        """
        if self._session.identity is None:
            raise Unauthenticated()
        key = self._key
        if key in self._in_flight:
            raise SaveInProgress()

        issued = self._draft
        self._in_flight.add(key)
        self.status = EditorStatus.SAVING
        self.error = None
        self._edited_while_saving = False
        LOG.info("Saving invoice %s (%s)", issued.id or "new", issued.invoice_number)
        try:
            stored = await self._store.upsert_invoice(issued)
        except InvoiceEditorError as exc:
            if key != self._key:
                LOG.info("Dropping failed save for %s; editor moved on", key)
                return SaveResult(invoice=issued, applied=False, navigate_to_list=False)
            self.status = EditorStatus.SAVE_ERROR
            self.error = exc
            raise
        finally:
            self._in_flight.discard(key)

        saved = stored.invoice
        if key != self._key:
            LOG.info("Dropping save response for %s; editor moved on", key)
            return SaveResult(invoice=saved, applied=False, navigate_to_list=False)

        self._baseline = saved
        self._key = saved.id
        if self._edited_while_saving:
            # Keep the edits made meanwhile on top of the new identity.
            self._draft = replace(self._draft, id=saved.id)
            self.status = EditorStatus.DIRTY
        else:
            self._draft = saved
            self.status = EditorStatus.CLEAN
        self._history = [self._draft]
        self._cursor = 0
        self._edited_while_saving = False
        return SaveResult(
            invoice=saved,
            applied=True,
            navigate_to_list=self.status is EditorStatus.CLEAN,
        )
