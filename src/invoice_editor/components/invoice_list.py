"""
Saved-invoice table for Reflex.

Lists the signed-in user's invoices with edit and delete actions. Deleting
opens a confirmation dialog; nothing is sent to the store until the user
confirms.
"""

import reflex as rx

from invoice_editor.components.labels import t
from invoice_editor.models.reflex_models import InvoiceRowModel
from invoice_editor.state import AppState


def invoice_list() -> rx.Component:
    """
    Build the list page body.

    Returns:
        Header with the new-invoice button, then loading, empty or table.
    """
    return rx.box(
        rx.box(
            rx.heading(t("myInvoices"), size="5", as_="h2"),
            rx.button(
                rx.icon("plus", size=18),
                t("newInvoice"),
                on_click=AppState.new_invoice,
                aria_label=t("createNewInvoiceAria"),
                class_name="primary-button",
            ),
            class_name="list-header",
        ),
        rx.cond(
            AppState.list_loading,
            _loader(),
            rx.cond(AppState.invoices.length() == 0, _empty(), _table()),
        ),
        _confirm_dialog(),
        class_name="card list-card",
    )


def _table() -> rx.Component:
    return rx.table.root(
        rx.table.header(
            rx.table.row(
                rx.table.column_header_cell(t("invoiceListNumber")),
                rx.table.column_header_cell(t("invoiceListClient")),
                rx.table.column_header_cell(t("invoiceListDueDate")),
                rx.table.column_header_cell(t("invoiceListAmount"), justify="end"),
                rx.table.column_header_cell(t("invoiceListActions"), justify="end"),
            ),
        ),
        rx.table.body(rx.foreach(AppState.invoices, _row)),
        width="100%",
    )


def _row(invoice: InvoiceRowModel) -> rx.Component:
    return rx.table.row(
        rx.table.row_header_cell(invoice.invoice_number),
        rx.table.cell(invoice.client),
        rx.table.cell(invoice.due_date),
        rx.table.cell(invoice.amount, justify="end"),
        rx.table.cell(
            rx.box(
                rx.icon_button(
                    rx.icon("pencil", size=16),
                    on_click=AppState.open_invoice(invoice.id),
                    variant="ghost",
                ),
                rx.icon_button(
                    rx.icon("trash-2", size=16),
                    on_click=AppState.request_delete(invoice.id),
                    disabled=AppState.deleting,
                    color_scheme="red",
                    variant="ghost",
                ),
                class_name="row-actions",
            ),
            justify="end",
        ),
        class_name=rx.cond(invoice.active, "active-row", ""),
    )


def _confirm_dialog() -> rx.Component:
    return rx.alert_dialog.root(
        rx.alert_dialog.content(
            rx.alert_dialog.title(t("deleteInvoiceTitle")),
            rx.alert_dialog.description(AppState.delete_prompt),
            rx.flex(
                rx.alert_dialog.cancel(
                    rx.button(t("cancel"), variant="soft", on_click=AppState.cancel_delete),
                ),
                rx.alert_dialog.action(
                    rx.button(
                        t("delete"),
                        color_scheme="red",
                        loading=AppState.deleting,
                        on_click=AppState.confirm_delete,
                    ),
                ),
                spacing="3",
                justify="end",
            ),
        ),
        open=AppState.delete_dialog_open,
    )


def _empty() -> rx.Component:
    return rx.box(
        rx.icon("file-x", class_name="empty-icon", size=48),
        rx.text(t("noSavedInvoices"), class_name="muted"),
        class_name="empty-state",
    )


def _loader() -> rx.Component:
    return rx.box(
        rx.spinner(),
        rx.text(t("loadingInvoices"), class_name="muted"),
        class_name="loading-state",
    )
