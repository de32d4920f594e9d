"""
Invoice preview pane for Reflex.

Renders AppState.preview, the already formatted InvoicePreview of the
draft, and the PDF download button. The PDF is drawn from the same
preview so what is downloaded matches what is shown.
"""

import reflex as rx

from invoice_editor.components.labels import t
from invoice_editor.models.reflex_models import PreviewLineModel, PreviewPartyModel
from invoice_editor.state import AppState


def invoice_preview() -> rx.Component:
    preview = AppState.preview
    return rx.box(
        rx.box(
            rx.box(
                rx.box(
                    rx.cond(
                        preview.logo != "",
                        rx.image(src=preview.logo, width=f"{preview.logo_width}px", alt="logo"),
                    ),
                    rx.heading(t("invoiceTitle"), size="7", as_="h2"),
                    rx.text(f"# {preview.invoice_number}", class_name="muted"),
                ),
                _party(preview.sender, align="right"),
                class_name="preview-header",
            ),
            rx.box(
                rx.box(
                    rx.text(t("billTo"), class_name="label"),
                    _party(preview.recipient, align="left"),
                ),
                rx.box(
                    _dated(t("date"), preview.date),
                    _dated(t("dueDate"), preview.due_date),
                    class_name="align-right",
                ),
                class_name="preview-parties",
            ),
            rx.el.table(
                rx.el.thead(
                    rx.el.tr(
                        rx.el.th(t("item")),
                        rx.el.th(t("quantityShort"), class_name="center"),
                        rx.el.th(t("price"), class_name="right"),
                        rx.el.th(t("total"), class_name="right"),
                    ),
                ),
                rx.el.tbody(rx.foreach(preview.lines, _line)),
                class_name="preview-table",
            ),
            rx.box(
                _totals_row(f"{t('subtotal')}:", preview.subtotal),
                _totals_row(f"{preview.tax_label}:", preview.tax),
                _totals_row(f"{t('total')}:", preview.total, emphasize=True),
                class_name="totals",
            ),
            rx.text(preview.notes, class_name="muted notes"),
            id="invoice-preview",
            class_name="card preview-card",
        ),
        rx.button(
            rx.icon("download", size=16),
            rx.cond(AppState.exporting, t("generating"), t("downloadPdf")),
            on_click=AppState.download_pdf,
            loading=AppState.exporting,
            disabled=AppState.exporting,
            class_name="download-button",
        ),
        class_name="preview-column",
    )


def _party(party: PreviewPartyModel, align: str) -> rx.Component:
    return rx.box(
        rx.text(party.name, class_name="strong"),
        rx.foreach(party.address_lines, lambda line: rx.text(line, class_name="muted")),
        rx.text(party.email, class_name="muted"),
        class_name=f"party-block align-{align}",
    )


def _dated(label: rx.Var, value: rx.Var) -> rx.Component:
    return rx.text(
        rx.text.span(label, ": ", class_name="label"),
        rx.text.span(value),
    )


def _line(line: PreviewLineModel) -> rx.Component:
    return rx.el.tr(
        rx.el.td(line.description),
        rx.el.td(line.quantity, class_name="center"),
        rx.el.td(line.price, class_name="right"),
        rx.el.td(line.total, class_name="right"),
    )


def _totals_row(label, value: rx.Var, emphasize: bool = False) -> rx.Component:
    """Build a row within the totals section."""
    class_name = "totals-row emphasize" if emphasize else "totals-row"
    return rx.box(rx.text(label), rx.text(value), class_name=class_name)
