"""End-to-end flows through InvoiceWorkspace on the demo backend."""

import asyncio
from pathlib import Path

import diskcache
import pytest

from invoice_editor.auth import AuthEvent
from invoice_editor.config import Settings
from invoice_editor.models.common import View
from invoice_editor.preferences import Preferences
from invoice_editor.services import DemoInvoiceStore
from invoice_editor.workspace import (
    DEMO_EMAIL,
    DEMO_PASSWORD,
    InvoiceWorkspace,
    WorkspaceRegistry,
    build_workspace,
)


@pytest.fixture
def workspace(auth, accounts, table, preferences):
    accounts.create("alice@example.com", "secret1")
    workspace = InvoiceWorkspace(auth, DemoInvoiceStore(auth.session, table), preferences)
    yield workspace
    workspace.close()


def _sign_in(workspace) -> None:
    assert asyncio.run(workspace.sign_in("alice@example.com", "secret1"))


def test_starts_on_auth_page(workspace) -> None:
    assert workspace.view is View.AUTH
    assert workspace.translator.language == "en"


def test_sign_in_shows_list(workspace) -> None:
    _sign_in(workspace)

    assert workspace.view is View.LIST
    assert workspace.listing.invoices == []
    assert workspace.auth_notice is None


def test_failed_sign_in_sets_notice(workspace) -> None:
    assert not asyncio.run(workspace.sign_in("alice@example.com", "wrong"))

    assert workspace.view is View.AUTH
    assert workspace.auth_notice.key == "authFailed"


def test_save_returns_to_list_with_banner(workspace) -> None:
    _sign_in(workspace)
    workspace.new_invoice()
    workspace.editor.update_field("invoice_number", "INV-42")

    result = asyncio.run(workspace.save())

    assert result.applied
    assert workspace.view is View.LIST
    assert workspace.banner.key == "invoiceSavedSuccess"
    assert workspace.banner.params == {"invoiceNumber": "INV-42"}
    assert [invoice.invoice_number for invoice in workspace.listing.invoices] == ["INV-42"]


def test_save_while_signed_out_resumes_after_sign_in(workspace) -> None:
    workspace.new_invoice()
    workspace.editor.update_field("notes", "unsaved work")

    assert asyncio.run(workspace.save()) is None
    assert workspace.view is View.AUTH
    assert workspace.auth_notice.key == "mustBeLoggedInToSave"

    _sign_in(workspace)

    assert workspace.view is View.EDITOR
    assert workspace.editor.draft.notes == "unsaved work"


def test_sign_out_clears_everything(workspace) -> None:
    _sign_in(workspace)
    workspace.new_invoice()
    workspace.editor.update_field("notes", "secret")
    asyncio.run(workspace.save())

    asyncio.run(workspace.sign_out())

    assert workspace.view is View.AUTH
    assert workspace.listing.invoices == []
    assert workspace.editor.draft.id is None
    assert workspace.editor.draft.notes != "secret"
    assert workspace.banner is None


def test_open_and_delete_invoice(workspace) -> None:
    _sign_in(workspace)
    workspace.new_invoice()
    asyncio.run(workspace.save())
    (saved,) = workspace.listing.invoices

    assert workspace.open_invoice(saved.id)
    assert workspace.view is View.EDITOR
    assert not workspace.open_invoice("missing")

    workspace.request_delete(saved.id)
    assert asyncio.run(workspace.confirm_delete())
    assert workspace.listing.invoices == []
    assert workspace.banner.key == "deleteInvoiceSuccess"
    assert workspace.editor.draft.id is None


def test_password_recovery_flow(workspace) -> None:
    _sign_in(workspace)
    workspace.session.set_identity(workspace.session.identity, AuthEvent.PASSWORD_RECOVERY)
    assert workspace.view is View.UPDATE_PASSWORD

    assert not asyncio.run(workspace.update_password("newpass", "different"))
    assert workspace.auth_notice.key == "passwordsDoNotMatch"

    assert asyncio.run(workspace.update_password("newpass", "newpass"))
    assert workspace.view is View.LIST
    assert workspace.banner.key == "passwordUpdateSuccess"


def test_password_reset_always_confirms(workspace) -> None:
    assert asyncio.run(workspace.request_password_reset("nobody@example.com"))
    assert workspace.auth_notice.key == "checkEmailReset"


def test_language_change_updates_preview(workspace) -> None:
    workspace.set_language("vi")

    assert workspace.translator.language == "vi"
    assert workspace.preview().labels["tax"] == "Thuế"
    assert workspace.preferences.saved_language == "vi"


def test_browser_language_is_used_until_one_is_saved(auth, table, preferences) -> None:
    store = DemoInvoiceStore(auth.session, table)

    first = InvoiceWorkspace(auth, store, preferences, browser_language="nl-NL")
    assert first.translator.language == "nl"
    first.close()

    preferences.set_language("vi")
    second = InvoiceWorkspace(auth, store, preferences, browser_language="nl-NL")
    assert second.translator.language == "vi"
    second.close()


def test_export_uses_theme(workspace) -> None:
    workspace.toggle_theme()

    document = workspace.export()

    assert document.filename == "Invoice-INV-001.pdf"
    assert document.content.startswith(b"%PDF")


def test_close_detaches_from_session(workspace) -> None:
    workspace.close()
    _sign_in(workspace)

    assert workspace.view is View.AUTH


def test_build_workspace_on_demo_backend(tmp_path: Path, preferences) -> None:
    settings = Settings(
        backend="demo",
        supabase_url="",
        supabase_key="",
        table_name="invoices",
        prefs_dir=tmp_path,
        port=8000,
        demo_seed=True,
    )

    async def scenario():
        workspace = await build_workspace(settings, preferences)
        await workspace.sign_in(DEMO_EMAIL, DEMO_PASSWORD)
        return workspace

    workspace = asyncio.run(scenario())

    assert workspace.view is View.LIST
    assert len(workspace.listing.invoices) >= 1
    workspace.close()


def test_language_and_theme_stay_with_their_browser(auth, table, tmp_path: Path) -> None:
    shared = diskcache.Cache(str(tmp_path / "shared"))
    store = DemoInvoiceStore(auth.session, table)
    mine = InvoiceWorkspace(auth, store, Preferences(shared, "browser-a"))
    theirs = InvoiceWorkspace(auth, store, Preferences(shared, "browser-b"))
    mine.set_language("nl")

    theirs.set_language("vi")
    theirs.toggle_theme()

    assert mine.translator.language == "nl"
    assert mine.preferences.theme == "light"
    assert theirs.translator.language == "vi"
    mine.close()
    theirs.close()
    shared.close()


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _registered(auth, table, preferences) -> InvoiceWorkspace:
    return InvoiceWorkspace(auth, DemoInvoiceStore(auth.session, table), preferences)


def test_registry_closes_least_recently_used(auth, accounts, table, preferences) -> None:
    accounts.create("alice@example.com", "secret1")
    registry = WorkspaceRegistry(max_size=2)
    first, second, third = (_registered(auth, table, preferences) for _ in range(3))
    registry.put("tab-1", first)
    registry.put("tab-2", second)
    assert registry.get("tab-1") is first

    registry.put("tab-3", third)

    assert "tab-2" not in registry
    assert len(registry) == 2
    _sign_in(first)
    assert first.view is View.LIST
    assert second.view is View.AUTH
    registry.close()


def test_registry_closes_idle_workspaces(auth, accounts, table, preferences) -> None:
    accounts.create("alice@example.com", "secret1")
    clock = _Clock()
    registry = WorkspaceRegistry(ttl=60, clock=clock)
    idle = _registered(auth, table, preferences)
    active = _registered(auth, table, preferences)
    registry.put("idle", idle)
    registry.put("active", active)

    clock.now = 45
    assert registry.get("active") is active
    clock.now = 90

    assert registry.get("idle") is None
    assert "active" in registry
    _sign_in(active)
    assert idle.view is View.AUTH
    assert active.view is View.LIST
    registry.close()
    assert len(registry) == 0
