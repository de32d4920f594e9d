"""
Per-session composition of the Invoice Editor.

An InvoiceWorkspace owns one editor and one list view model bound to an
auth session and a store, and decides which page is shown:

    auth              nobody signed in
    list              saved invoices
    editor            form and preview of the current draft
    update_password   reached from a password recovery link

It subscribes to the AuthSession when created and reacts to identity
changes: signing out wipes the draft and the list, signing in shows the
list and marks it for re-fetching. close() removes its subscriptions.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from functools import cache
from typing import Callable

from invoice_editor.auth.auth_service import AuthService, SignUpOutcome
from invoice_editor.auth.auth_service_demo import DemoAccountRegistry, DemoAuthService
from invoice_editor.auth.session import AuthEvent, AuthSession, Identity
from invoice_editor.config import Settings, load_settings
from invoice_editor.editor import InvoiceEditor, SaveResult
from invoice_editor.errors import (
    ExportError,
    InvoiceEditorError,
    SaveInProgress,
    Unauthenticated,
)
from invoice_editor.export import ExportedDocument, ExportOptions, export_pdf
from invoice_editor.i18n import Translator, detect_language
from invoice_editor.lib import logs
from invoice_editor.listing import InvoiceListViewModel
from invoice_editor.models.common import Banner, View
from invoice_editor.models.invoice import new_invoice, serialize_invoice, with_id
from invoice_editor.preferences import DEFAULT_BROWSER_ID, Preferences, get_preferences
from invoice_editor.preview import InvoicePreview, build_preview
from invoice_editor.services import DemoTable, get_invoice_store
from invoice_editor.services.invoice_store import InvoiceStore
from invoice_editor.services.invoice_store_demo import DemoRow

LOG = logs.logger(__file__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo1234"


class InvoiceWorkspace:
    """
    Application state for one browser session.

    Attributes:
        view: Page currently shown.
        banner: Message shown above list and editor pages.
        auth_notice: Message shown on the auth and update-password pages.
        translator: Lookup for the current UI language.
    """

    def __init__(
        self,
        auth: AuthService,
        store: InvoiceStore,
        preferences: Preferences,
        browser_language: str | None = None,
    ) -> None:
        self.auth = auth
        self.session: AuthSession = auth.session
        self.store = store
        self.preferences = preferences
        self.editor = InvoiceEditor(store, self.session)
        self.listing = InvoiceListViewModel(store, self.editor)
        self.translator = Translator(
            detect_language(preferences.saved_language, browser_language)
        )
        self.banner: Banner | None = None
        self.auth_notice: Banner | None = None
        self.view = View.LIST if self.session.is_authenticated else View.AUTH
        self._list_stale = self.session.is_authenticated
        self._resume_editor = False
        self._unsubscribers = [
            self.session.subscribe(self._on_auth_event),
            preferences.subscribe(self._on_preference),
        ]

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Pick up an existing provider session and load the list."""
        await self.auth.refresh()
        await self.refresh_if_stale()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.auth.close()

    def _on_auth_event(self, event: AuthEvent, identity: Identity | None) -> None:
        if event is AuthEvent.SIGNED_OUT:
            self.editor.reset()
            self.listing.clear()
            self.banner = None
            self._resume_editor = False
            self._list_stale = False
            self.view = View.AUTH
        elif event is AuthEvent.SIGNED_IN:
            self.auth_notice = None
            self._list_stale = True
            self.view = View.EDITOR if self._resume_editor else View.LIST
            self._resume_editor = False
        elif event is AuthEvent.PASSWORD_RECOVERY:
            self.auth_notice = None
            self.view = View.UPDATE_PASSWORD
        LOG.debug("View after %s: %s", event.value, self.view.value)

    def _on_preference(self, name: str, value: str) -> None:
        if name == "language":
            self.translator = Translator(value)

    async def refresh_if_stale(self) -> None:
        """Re-fetch the list if a sign-in happened since the last fetch."""
        if self._list_stale and self.session.is_authenticated:
            self._list_stale = False
            await self._refresh_list()

    async def _refresh_list(self) -> None:
        await self.listing.refresh()
        self._take_list_banner()

    def _take_list_banner(self) -> None:
        if self.listing.banner is not None:
            self.banner = self.listing.banner
            self.listing.banner = None

    def dismiss_banner(self) -> None:
        self.banner = None

    # -- account -----------------------------------------------------------

    async def _run_auth(self, operation) -> bool:
        try:
            await operation
        except InvoiceEditorError as exc:
            LOG.info("Auth request failed: %s", exc)
            self.auth_notice = Banner.from_error(exc)
            return False
        await self.refresh_if_stale()
        return True

    async def sign_in(self, email: str, password: str) -> bool:
        self.auth_notice = None
        return await self._run_auth(self.auth.sign_in(email, password))

    async def sign_up(self, email: str, password: str, confirm_password: str) -> bool:
        self.auth_notice = None
        try:
            outcome = await self.auth.sign_up(email, password, confirm_password)
        except InvoiceEditorError as exc:
            self.auth_notice = Banner.from_error(exc)
            return False
        if outcome is SignUpOutcome.CONFIRMATION_SENT:
            self.auth_notice = Banner.success("checkEmailConfirm")
        await self.refresh_if_stale()
        return True

    async def sign_out(self) -> None:
        await self.auth.sign_out()

    async def request_password_reset(self, email: str) -> bool:
        """Send a reset link; unknown emails get the same confirmation."""
        self.auth_notice = None
        ok = await self._run_auth(self.auth.request_password_reset(email))
        if ok:
            self.auth_notice = Banner.success("checkEmailReset")
        return ok

    async def update_password(self, password: str, confirm_password: str) -> bool:
        self.auth_notice = None
        ok = await self._run_auth(self.auth.update_password(password, confirm_password))
        if ok:
            self.banner = Banner.success("passwordUpdateSuccess")
            self.view = View.LIST
            await self._refresh_list()
        return ok

    # -- navigation --------------------------------------------------------

    def open_invoice(self, invoice_id: str) -> bool:
        invoice = self.listing.find(invoice_id)
        if invoice is None:
            return False
        self.listing.select_invoice(invoice)
        self.view = View.EDITOR
        return True

    def new_invoice(self) -> None:
        self.listing.new_invoice()
        self.view = View.EDITOR

    async def back_to_list(self) -> None:
        self.view = View.LIST
        await self._refresh_list()

    # -- list --------------------------------------------------------------

    def request_delete(self, invoice_id: str) -> bool:
        return self.listing.request_delete(invoice_id)

    def cancel_delete(self) -> None:
        self.listing.cancel_delete()

    async def confirm_delete(self) -> bool:
        deleted = await self.listing.confirm_delete()
        self._take_list_banner()
        return deleted

    # -- editor ------------------------------------------------------------

    async def save(self) -> SaveResult | None:
        """
        Save the current draft and translate the outcome into a banner.

        Returns:
            SaveResult when the store accepted the write, otherwise None.
        """
        try:
            result = await self.editor.save()
        except Unauthenticated as exc:
            self.auth_notice = Banner.from_error(exc)
            self._resume_editor = True
            self.view = View.AUTH
            return None
        except SaveInProgress:
            LOG.info("Save already in flight for %s", self.editor.draft_key)
            return None
        except InvoiceEditorError as exc:
            self.banner = Banner.from_error(exc)
            return None

        if result.applied:
            self.banner = Banner.success(
                "invoiceSavedSuccess", invoiceNumber=result.invoice.invoice_number
            )
            if result.navigate_to_list:
                await self.back_to_list()
        return result

    def preview(self) -> InvoicePreview:
        return build_preview(self.editor.draft, self.translator)

    def export(self) -> ExportedDocument | None:
        """Render the current preview to PDF; failures become a banner."""
        options = ExportOptions.for_theme(self.preferences.theme)
        try:
            return export_pdf(self.preview(), options)
        except ExportError as exc:
            self.banner = Banner.from_error(exc)
            return None

    # -- preferences -------------------------------------------------------

    def set_language(self, language: str) -> None:
        # Observers are not notified when the stored value is unchanged.
        self.translator = Translator(self.preferences.set_language(language))

    def toggle_theme(self) -> str:
        return self.preferences.toggle_theme()


@dataclass
class DemoBackend:
    """Accounts and rows shared by every demo workspace in the process."""

    accounts: DemoAccountRegistry
    table: DemoTable


@cache
def demo_backend(seed: bool = True) -> DemoBackend:
    """Return the process-wide demo backend, optionally with a sample account."""
    backend = DemoBackend(accounts=DemoAccountRegistry(), table=DemoTable())
    if seed:
        account = backend.accounts.create(DEMO_EMAIL, DEMO_PASSWORD)
        invoice = with_id(new_invoice())
        backend.table.rows[invoice.id] = DemoRow(
            id=invoice.id,
            user_id=account.user_id,
            invoice_data=serialize_invoice(invoice),
            updated_at=backend.table.stamp(),
        )
        LOG.info("Seeded demo account %s", DEMO_EMAIL)
    return backend


async def build_workspace(
    settings: Settings | None = None,
    preferences: Preferences | None = None,
    browser_language: str | None = None,
    browser_id: str | None = None,
) -> InvoiceWorkspace:
    """
    Create and start a workspace for the configured backend.

    Supabase gets one client per workspace, since the client carries the
    signed-in user's session. The demo backend is shared process-wide.
    Preferences are scoped to `browser_id` unless an instance is passed in.
    """
    settings = settings or load_settings()
    preferences = preferences or get_preferences(browser_id or DEFAULT_BROWSER_ID)
    session = AuthSession()
    if settings.use_supabase:
        from supabase import acreate_client

        from invoice_editor.auth.auth_service_impl import SupabaseAuthService

        client = await acreate_client(settings.supabase_url, settings.supabase_key)
        auth: AuthService = SupabaseAuthService(client, session)
        store = get_invoice_store(
            "supabase", session, client=client, table_name=settings.table_name
        )
    else:
        backend = demo_backend(settings.demo_seed)
        auth = DemoAuthService(backend.accounts, session)
        store = get_invoice_store("demo", session, table=backend.table)
    LOG.info("build_workspace - backend:%s", settings.backend)
    workspace = InvoiceWorkspace(auth, store, preferences, browser_language)
    await workspace.start()
    return workspace


class WorkspaceRegistry:
    """
    Live workspaces keyed by Reflex client token.

    A workspace idle for longer than `ttl` seconds is closed and dropped on
    the next registry access, and the least recently used workspace is
    closed once more than `max_size` are held. A tab whose workspace was
    dropped gets a fresh one (signed out, blank draft) on its next event.
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, tuple[InvoiceWorkspace, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: str) -> bool:
        return token in self._entries

    def get(self, token: str) -> InvoiceWorkspace | None:
        """Return the token's workspace and mark it used, or None."""
        self.prune()
        entry = self._entries.get(token)
        if entry is None:
            return None
        self._entries[token] = (entry[0], self._clock())
        self._entries.move_to_end(token)
        return entry[0]

    def put(self, token: str, workspace: InvoiceWorkspace) -> None:
        previous = self._entries.pop(token, None)
        if previous is not None and previous[0] is not workspace:
            previous[0].close()
        self._entries[token] = (workspace, self._clock())
        while len(self._entries) > self.max_size:
            self.discard(next(iter(self._entries)))

    def discard(self, token: str) -> None:
        entry = self._entries.pop(token, None)
        if entry is not None:
            LOG.info("Closing workspace %s (%s left)", token, len(self._entries))
            entry[0].close()

    def prune(self) -> list[str]:
        """Close every workspace idle for longer than the TTL."""
        deadline = self._clock() - self.ttl
        expired = [token for token, (_, used) in self._entries.items() if used < deadline]
        for token in expired:
            self.discard(token)
        return expired

    def close(self) -> None:
        for token in list(self._entries):
            self.discard(token)
