"""
Reflex UI components for the Invoice Editor.

This package provides the page sections:
- header: title bar with language switcher, theme toggle and sign-out
- auth_panel: sign in / sign up / reset and update-password forms
- invoice_list: saved-invoice table with delete confirmation
- invoice_form: editable draft (parties, line items, logo, tax, currency)
- invoice_preview: formatted invoice and PDF download

Components are functions returning rx.Component and read AppState vars.
"""

from invoice_editor.components.auth_panel import auth_panel, update_password_panel
from invoice_editor.components.header import banner, page_header
from invoice_editor.components.invoice_form import invoice_form
from invoice_editor.components.invoice_list import invoice_list
from invoice_editor.components.invoice_preview import invoice_preview

__all__ = [
    "auth_panel",
    "banner",
    "invoice_form",
    "invoice_list",
    "invoice_preview",
    "page_header",
    "update_password_panel",
]
