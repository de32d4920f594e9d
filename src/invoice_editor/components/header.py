"""
Header bar and banner for the Invoice Editor.

The header shows the app title, the language switcher, the theme toggle
and, when signed in, the user's email with a sign-out button.
"""

import reflex as rx

from invoice_editor.components.labels import t
from invoice_editor.state import AppState


def page_header() -> rx.Component:
    """Build the title bar shown on every page."""
    return rx.box(
        rx.box(
            rx.icon("file-text", class_name="title-icon"),
            rx.heading(t("invoiceGenerator"), size="6", as_="h1"),
            class_name="title-row",
        ),
        rx.box(
            _language_switcher(),
            rx.button(
                rx.cond(
                    AppState.theme == "dark",
                    rx.icon("sun", size=18),
                    rx.icon("moon", size=18),
                ),
                on_click=AppState.toggle_theme,
                variant="ghost",
                title=t("toggleTheme"),
                aria_label=t("toggleTheme"),
            ),
            rx.cond(
                AppState.user_email != "",
                rx.box(
                    rx.text(
                        rx.text.span(t("signedInAs"), " "),
                        rx.text.span(AppState.user_email, class_name="strong"),
                        class_name="muted",
                    ),
                    rx.button(
                        rx.icon("log-out", size=16),
                        t("signOut"),
                        on_click=AppState.sign_out,
                        variant="soft",
                    ),
                    class_name="user-row",
                ),
            ),
            class_name="header-actions",
        ),
        class_name="page-header",
    )


def _language_switcher() -> rx.Component:
    return rx.select.root(
        rx.select.trigger(aria_label=t("language")),
        rx.select.content(
            rx.foreach(
                AppState.languages,
                lambda option: rx.select.item(option[1], value=option[0]),
            ),
        ),
        value=AppState.language,
        on_change=AppState.set_language,
    )


def banner() -> rx.Component:
    """Success/error message; AppState clears it after a few seconds."""
    return rx.cond(
        AppState.banner_text != "",
        rx.callout(
            AppState.banner_text,
            icon=rx.cond(AppState.banner_kind == "error", "triangle-alert", "check"),
            color_scheme=rx.cond(AppState.banner_kind == "error", "red", "green"),
            class_name="banner",
        ),
    )
