"""
Reflex state management for the Invoice Editor application.

AppState is a thin adapter: every handler forwards to the browser tab's
InvoiceWorkspace and then copies the workspace into public vars with
_sync(). Workspaces are kept in a module-level registry keyed by the
client token and closed once idle or crowded out, so the state itself only
holds plain values. Preferences follow a random id kept in the browser's
local storage.
"""

import asyncio
import uuid

import reflex as rx

from invoice_editor.config import load_settings
from invoice_editor.errors import ValidationError
from invoice_editor.i18n import LANGUAGES
from invoice_editor.lib import logs
from invoice_editor.models.common import BANNER_TIMEOUT, Banner, View
from invoice_editor.models.invoice import CURRENCIES
from invoice_editor.models.reflex_models import (
    DraftModel,
    InvoiceRowModel,
    PreviewModel,
    draft_to_model,
    preview_to_model,
    summary_to_model,
)
from invoice_editor.workspace import InvoiceWorkspace, WorkspaceRegistry, build_workspace

LOG = logs.logger(__file__)

LOGO_UPLOAD_ID = "logo_upload"

_WORKSPACES = WorkspaceRegistry(
    max_size=load_settings().max_workspaces, ttl=load_settings().workspace_ttl
)


class AppState(rx.State):
    """
    Main application state for the Invoice Editor.

    Mirrors the workspace: current view, banners, the draft and its
    preview, and the saved-invoice list.
    """

    # Page and preferences
    view: str = View.AUTH.value
    language: str = "en"
    theme: str = "light"
    labels: dict[str, str] = {}
    user_email: str = ""
    browser_id: str = rx.LocalStorage("", name="invoice_editor_browser")

    # Messages
    banner_kind: str = ""
    banner_text: str = ""
    auth_notice_kind: str = ""
    auth_notice_text: str = ""
    auth_mode: str = "sign_in"

    # Editor
    draft: DraftModel = DraftModel()
    preview: PreviewModel = PreviewModel()
    field_errors: dict[str, str] = {}
    editor_status: str = "clean"
    is_saving: bool = False
    can_undo: bool = False
    can_redo: bool = False
    exporting: bool = False

    # List
    invoices: list[InvoiceRowModel] = []
    list_loading: bool = False
    deleting: bool = False
    pending_delete_number: str = ""

    busy: bool = False

    _banner_token: int = 0

    @rx.var
    def languages(self) -> list[list[str]]:
        return [[code, name] for code, name in LANGUAGES.items()]

    @rx.var
    def currencies(self) -> list[str]:
        return list(CURRENCIES)

    @rx.var
    def editing_existing(self) -> bool:
        return self.draft.id != ""

    @rx.var
    def delete_dialog_open(self) -> bool:
        return self.pending_delete_number != ""

    @rx.var
    def delete_prompt(self) -> str:
        template = self.labels.get("deleteConfirm", "")
        return template.replace("{{invoiceNumber}}", self.pending_delete_number)

    @rx.var
    def editor_title(self) -> str:
        """Heading of the editor page: "Editing: INV-001" or "New Invoice"."""
        if not self.draft.id:
            return self.labels.get("newInvoice", "")
        template = self.labels.get("editingInvoice", "")
        return template.replace("{{invoiceNumber}}", self.draft.invoice_number)

    # -- workspace plumbing ------------------------------------------------

    async def _workspace(self) -> InvoiceWorkspace:
        token = self.router.session.client_token
        workspace = _WORKSPACES.get(token)
        if workspace is None:
            browser = self.router.headers.accept_language or None
            if not self.browser_id:
                self.browser_id = uuid.uuid4().hex
            workspace = await build_workspace(browser_language=browser, browser_id=self.browser_id)
            _WORKSPACES.put(token, workspace)
            LOG.info("Workspace created for %s (%s active)", token, len(_WORKSPACES))
        return workspace

    def _text(self, workspace: InvoiceWorkspace, banner: Banner | None) -> str:
        if banner is None:
            return ""
        return workspace.translator(banner.key, **banner.params)

    def _sync(self, workspace: InvoiceWorkspace):
        """Copy the workspace into public vars; schedule banner expiry if it changed."""
        translator = workspace.translator
        editor = workspace.editor
        listing = workspace.listing
        identity = workspace.session.identity

        self.view = workspace.view.value
        self.language = translator.language
        self.theme = workspace.preferences.theme
        self.labels = translator.labels()
        self.user_email = identity.email if identity else ""

        self.auth_notice_kind = workspace.auth_notice.kind if workspace.auth_notice else ""
        self.auth_notice_text = self._text(workspace, workspace.auth_notice)

        self.field_errors = {
            path: translator(error.message_key, **error.params)
            if error.message_key != "errorOccurred"
            else str(error)
            for path, error in editor.field_errors.items()
        }
        item_errors = {
            item.id: " ".join(self.field_errors[path] for path in editor.item_errors(item.id))
            for item in editor.draft.items
        }
        self.draft = draft_to_model(editor.draft, item_errors)
        self.preview = preview_to_model(workspace.preview())
        self.editor_status = editor.status.value
        self.is_saving = editor.is_saving
        self.can_undo = editor.can_undo
        self.can_redo = editor.can_redo

        self.invoices = [summary_to_model(row) for row in listing.summaries(translator.language)]
        self.list_loading = listing.loading
        self.deleting = listing.deleting
        pending = listing.pending_delete
        self.pending_delete_number = pending.invoice_number if pending else ""

        banner_text = self._text(workspace, workspace.banner)
        changed = banner_text != self.banner_text
        self.banner_kind = workspace.banner.kind if workspace.banner else ""
        self.banner_text = banner_text
        if changed and banner_text:
            self._banner_token += 1
            return AppState.expire_banner(self._banner_token)
        return None

    @rx.event(background=True)
    async def expire_banner(self, token: int):
        """Clear the banner after BANNER_TIMEOUT seconds unless it was replaced."""
        await asyncio.sleep(BANNER_TIMEOUT)
        async with self:
            if token != self._banner_token:
                return
            workspace = _WORKSPACES.get(self.router.session.client_token)
            if workspace is not None:
                workspace.dismiss_banner()
            self.banner_kind = ""
            self.banner_text = ""

    @rx.event
    async def on_load(self):
        """Create (or reattach to) the workspace and render it."""
        workspace = await self._workspace()
        await workspace.refresh_if_stale()
        return self._sync(workspace)

    # -- account -----------------------------------------------------------

    @rx.event
    def set_auth_mode(self, mode: str):
        self.auth_mode = mode
        self.auth_notice_kind = ""
        self.auth_notice_text = ""

    @rx.event
    async def handle_auth(self, form_data: dict):
        """Sign in, sign up or request a reset depending on auth_mode."""
        workspace = await self._workspace()
        email = form_data.get("email", "")
        password = form_data.get("password", "")
        self.busy = True
        yield
        try:
            if self.auth_mode == "sign_up":
                await workspace.sign_up(email, password, form_data.get("confirm_password", ""))
            elif self.auth_mode == "reset":
                await workspace.request_password_reset(email)
            else:
                await workspace.sign_in(email, password)
        finally:
            self.busy = False
        yield self._sync(workspace)

    @rx.event
    async def handle_update_password(self, form_data: dict):
        workspace = await self._workspace()
        await workspace.update_password(
            form_data.get("password", ""), form_data.get("confirm_password", "")
        )
        return self._sync(workspace)

    @rx.event
    async def sign_out(self):
        workspace = await self._workspace()
        await workspace.sign_out()
        self.auth_mode = "sign_in"
        return self._sync(workspace)

    # -- preferences -------------------------------------------------------

    @rx.event
    async def set_language(self, language: str):
        workspace = await self._workspace()
        workspace.set_language(language)
        return self._sync(workspace)

    @rx.event
    async def toggle_theme(self):
        workspace = await self._workspace()
        workspace.toggle_theme()
        return self._sync(workspace)

    # -- list --------------------------------------------------------------

    @rx.event
    async def new_invoice(self):
        workspace = await self._workspace()
        workspace.new_invoice()
        return self._sync(workspace)

    @rx.event
    async def open_invoice(self, invoice_id: str):
        workspace = await self._workspace()
        workspace.open_invoice(invoice_id)
        return self._sync(workspace)

    @rx.event
    async def back_to_list(self):
        workspace = await self._workspace()
        self.list_loading = True
        yield
        await workspace.back_to_list()
        yield self._sync(workspace)

    @rx.event
    async def request_delete(self, invoice_id: str):
        workspace = await self._workspace()
        workspace.request_delete(invoice_id)
        return self._sync(workspace)

    @rx.event
    async def cancel_delete(self):
        workspace = await self._workspace()
        workspace.cancel_delete()
        return self._sync(workspace)

    @rx.event
    async def confirm_delete(self):
        workspace = await self._workspace()
        self.deleting = True
        yield
        await workspace.confirm_delete()
        yield self._sync(workspace)

    # -- editor ------------------------------------------------------------

    async def _edit(self, action):
        workspace = await self._workspace()
        try:
            action(workspace.editor)
        except ValidationError as exc:
            LOG.debug("Rejected edit %s: %s", exc.field, exc)
        return self._sync(workspace)

    @rx.event
    async def update_field(self, path: str, value: str):
        return await self._edit(lambda editor: editor.update_field(path, value))

    @rx.event
    async def update_item(self, item_id: str, field: str, value: str):
        return await self._edit(lambda editor: editor.update_line_item(item_id, field, value))

    @rx.event
    async def add_item(self):
        return await self._edit(lambda editor: editor.add_line_item())

    @rx.event
    async def remove_item(self, item_id: str):
        return await self._edit(lambda editor: editor.remove_line_item(item_id))

    @rx.event
    async def set_logo_width(self, value: list[int | float]):
        width = value[0] if isinstance(value, list) else value
        return await self._edit(lambda editor: editor.set_logo_width(width))

    @rx.event
    async def remove_logo(self):
        return await self._edit(lambda editor: editor.remove_logo())

    @rx.event
    async def handle_logo_upload(self, files: list[rx.UploadFile]):
        if not files:
            return None
        upload = files[0]
        payload = await upload.read()
        media_type = upload.content_type or "image/png"
        return await self._edit(lambda editor: editor.attach_logo(payload, media_type))

    @rx.event
    async def undo(self):
        return await self._edit(lambda editor: editor.undo())

    @rx.event
    async def redo(self):
        return await self._edit(lambda editor: editor.redo())

    @rx.event(background=True)
    async def save(self):
        """Save the draft; edits made while the request runs stay in the draft."""
        async with self:
            workspace = await self._workspace()
            self.is_saving = True
            self.editor_status = "saving"
        await workspace.save()
        async with self:
            expiry = self._sync(workspace)
        return expiry

    @rx.event(background=True)
    async def download_pdf(self):
        async with self:
            if self.exporting:
                return None
            workspace = await self._workspace()
            self.exporting = True
        try:
            document = await asyncio.get_running_loop().run_in_executor(None, workspace.export)
        finally:
            async with self:
                self.exporting = False
                expiry = self._sync(workspace)
        events = [expiry] if expiry is not None else []
        if document is not None:
            events.append(rx.download(data=document.content, filename=document.filename))
        return events
