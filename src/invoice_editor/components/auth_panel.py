"""
Account forms: sign in, sign up, password reset and password update.

One form serves the first three; AppState.auth_mode decides which fields
and which submit label are shown.
"""

import reflex as rx

from invoice_editor.components.labels import t
from invoice_editor.state import AppState


def auth_panel() -> rx.Component:
    """Build the sign-in / sign-up / reset card."""
    return rx.box(
        rx.heading(
            rx.match(
                AppState.auth_mode,
                ("sign_up", t("createAccountTitle")),
                ("reset", t("resetPasswordTitle")),
                t("signInTitle"),
            ),
            size="5",
            as_="h2",
        ),
        rx.text(
            rx.cond(AppState.auth_mode == "reset", t("resetPasswordDesc"), t("authDesc")),
            class_name="muted",
        ),
        _notice(),
        rx.form(
            _field(t("emailAddress"), "email", "email"),
            rx.cond(
                AppState.auth_mode != "reset",
                _field(t("password"), "password", "password"),
            ),
            rx.cond(
                AppState.auth_mode == "sign_up",
                _field(t("confirmPassword"), "confirm_password", "password"),
            ),
            rx.button(
                rx.cond(
                    AppState.busy,
                    t("processing"),
                    rx.match(
                        AppState.auth_mode,
                        ("sign_up", t("signUp")),
                        ("reset", t("sendResetLink")),
                        t("signIn"),
                    ),
                ),
                type="submit",
                loading=AppState.busy,
                class_name="primary-button",
            ),
            on_submit=AppState.handle_auth,
            reset_on_submit=False,
            class_name="auth-form",
        ),
        _mode_links(),
        class_name="card auth-card",
    )


def _mode_links() -> rx.Component:
    return rx.box(
        rx.cond(
            AppState.auth_mode == "sign_in",
            rx.link(t("forgotPassword"), on_click=AppState.set_auth_mode("reset")),
        ),
        rx.match(
            AppState.auth_mode,
            ("sign_up", rx.link(t("alreadyHaveAccount"), on_click=AppState.set_auth_mode("sign_in"))),
            ("reset", rx.link(t("backToSignIn"), on_click=AppState.set_auth_mode("sign_in"))),
            rx.link(t("dontHaveAccount"), on_click=AppState.set_auth_mode("sign_up")),
        ),
        class_name="auth-links",
    )


def update_password_panel() -> rx.Component:
    """Build the form reached from a password recovery link."""
    return rx.box(
        rx.heading(t("updatePasswordTitle"), size="5", as_="h2"),
        rx.text(t("updatePasswordDesc"), class_name="muted"),
        _notice(),
        rx.form(
            _field(t("newPassword"), "password", "password"),
            _field(t("confirmNewPassword"), "confirm_password", "password"),
            rx.button(t("updatePasswordButton"), type="submit", class_name="primary-button"),
            on_submit=AppState.handle_update_password,
            class_name="auth-form",
        ),
        class_name="card auth-card",
    )


def _notice() -> rx.Component:
    return rx.cond(
        AppState.auth_notice_text != "",
        rx.callout(
            AppState.auth_notice_text,
            color_scheme=rx.cond(AppState.auth_notice_kind == "error", "red", "green"),
            size="1",
        ),
    )


def _field(label: rx.Var, name: str, input_type: str) -> rx.Component:
    return rx.box(
        rx.text(label, as_="label", html_for=name, class_name="label"),
        rx.input(id=name, name=name, type=input_type, required=True),
        class_name="form-field",
    )
