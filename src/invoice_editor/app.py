"""
Reflex application entry point for the Invoice Editor.

This module initializes the Reflex app and defines the main page layout:
the header, then one of the auth, update-password, list or editor pages
depending on AppState.view.
"""

import reflex as rx

from invoice_editor.components import (
    auth_panel,
    banner,
    invoice_form,
    invoice_list,
    invoice_preview,
    page_header,
    update_password_panel,
)
from invoice_editor.config import load_settings
from invoice_editor.lib import logs
from invoice_editor.state import AppState

LOG = logs.logger(__file__)

APP_TITLE = "Invoice Generator"
_FONT_URL = "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap"

_SETTINGS = load_settings()
LOG.info("backend: %s", _SETTINGS.backend)
if _SETTINGS.use_supabase:
    LOG.info("INVOICE_TABLE_NAME: %s", _SETTINGS.table_name)


def _editor_page() -> rx.Component:
    return rx.box(
        invoice_form(),
        invoice_preview(),
        class_name="editor-layout",
    )


def index() -> rx.Component:
    """
    Build the main page layout.

    Returns:
        The complete page component with header, banner and current view.
    """
    return rx.box(
        rx.box(
            page_header(),
            banner(),
            rx.match(
                AppState.view,
                ("auth", auth_panel()),
                ("update_password", update_password_panel()),
                ("editor", _editor_page()),
                invoice_list(),
            ),
            class_name="app-container",
        ),
        class_name=rx.cond(AppState.theme == "dark", "app-shell dark", "app-shell"),
    )


# Create the Reflex app
app = rx.App(
    theme=rx.theme(
        appearance="inherit",
        has_background=True,
        radius="large",
    ),
    stylesheets=[
        _FONT_URL,
        "/styles.css",
    ],
)

# Add the index page
app.add_page(
    index,
    title=APP_TITLE,
    on_load=AppState.on_load,
)


def main() -> None:
    """Entrypoint used by the `invoice-editor` console script."""
    import subprocess
    import sys

    subprocess.run(
        [sys.executable, "-m", "reflex", "run", "--frontend-port", str(_SETTINGS.port)]
    )


if __name__ == "__main__":
    main()
