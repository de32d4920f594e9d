"""Shared fixtures: a signed-in session over an in-memory store."""

from datetime import date
from pathlib import Path

import pytest

from invoice_editor.auth import AuthSession, DemoAccountRegistry, DemoAuthService, Identity
from invoice_editor.editor import InvoiceEditor
from invoice_editor.listing import InvoiceListViewModel
from invoice_editor.models.invoice import Invoice, LineItem, Party
from invoice_editor.preferences import Preferences
from invoice_editor.services import DemoInvoiceStore, DemoTable

ALICE = Identity(user_id="user-alice", email="alice@example.com")
BOB = Identity(user_id="user-bob", email="bob@example.com")


@pytest.fixture
def session() -> AuthSession:
    return AuthSession(ALICE)


@pytest.fixture
def table() -> DemoTable:
    return DemoTable()


@pytest.fixture
def store(session: AuthSession, table: DemoTable) -> DemoInvoiceStore:
    return DemoInvoiceStore(session, table)


@pytest.fixture
def editor(store: DemoInvoiceStore, session: AuthSession) -> InvoiceEditor:
    return InvoiceEditor(store, session)


@pytest.fixture
def listing(store: DemoInvoiceStore, editor: InvoiceEditor) -> InvoiceListViewModel:
    return InvoiceListViewModel(store, editor)


@pytest.fixture
def accounts() -> DemoAccountRegistry:
    return DemoAccountRegistry()


@pytest.fixture
def auth(accounts: DemoAccountRegistry) -> DemoAuthService:
    return DemoAuthService(accounts, AuthSession())


@pytest.fixture
def preferences(tmp_path: Path):
    prefs = Preferences(tmp_path / "prefs")
    yield prefs
    prefs.close()


@pytest.fixture
def make_invoice():
    """Factory for invoices with a fixed issue date and simple parties."""

    def _make(*items: tuple[float, float], **overrides) -> Invoice:
        values = dict(
            invoice_number="INV-100",
            date=date(2024, 3, 1),
            due_date=date(2024, 3, 31),
            sender=Party(name="Acme Ltd", address="1 Main St, Springfield", email="billing@acme.test"),
            recipient=Party(name="Globex", address="9 Side Rd, Shelbyville", email="ap@globex.test"),
            items=tuple(
                LineItem(id=f"item-{index}", description=f"Item {index}", quantity=qty, price=price)
                for index, (qty, price) in enumerate(items)
            ),
            notes="Net 30",
            tax_rate=5,
            currency="USD",
        )
        values.update(overrides)
        return Invoice(**values)

    return _make
