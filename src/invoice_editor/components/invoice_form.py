"""
Invoice editing form for Reflex.

Every input sends its value to AppState on change; the editor validates it
and the preview re-renders from the new draft. Inline errors come from
AppState.field_errors and stay until the field gets a valid value.
"""

import reflex as rx

from invoice_editor.components.labels import t
from invoice_editor.models.invoice import MAX_LOGO_WIDTH, MIN_LOGO_WIDTH
from invoice_editor.models.reflex_models import LineItemModel
from invoice_editor.state import LOGO_UPLOAD_ID, AppState


def invoice_form() -> rx.Component:
    """
    Build the editor column: toolbar, parties, meta fields, items, notes.

    Returns:
        The form card component.
    """
    draft = AppState.draft
    return rx.box(
        _toolbar(),
        rx.box(
            _party_section("from", t("from"), draft.sender, with_logo=True),
            _party_section("to", t("to"), draft.recipient, with_logo=False),
            class_name="form-grid",
        ),
        rx.box(
            _text_input(t("invoiceNumber"), "invoice_number", draft.invoice_number),
            _text_input(t("date"), "date", draft.date, input_type="date"),
            _text_input(t("dueDate"), "due_date", draft.due_date, input_type="date"),
            class_name="form-grid three surface",
        ),
        _items_section(),
        rx.box(
            rx.box(
                rx.text(t("notes"), as_="label", class_name="label"),
                rx.text_area(
                    value=draft.notes,
                    on_change=lambda value: AppState.update_field("notes", value),
                ),
                class_name="form-field",
            ),
            rx.box(
                _text_input(t("taxRate"), "tax_rate", draft.tax_rate, input_type="number"),
                rx.box(
                    rx.text(t("currency"), as_="label", class_name="label"),
                    rx.select(
                        AppState.currencies,
                        value=draft.currency,
                        on_change=lambda value: AppState.update_field("currency", value),
                    ),
                    _error("currency"),
                    class_name="form-field",
                ),
                class_name="form-grid",
            ),
            class_name="form-grid surface",
        ),
        class_name="card form-card",
    )


def _toolbar() -> rx.Component:
    return rx.box(
        rx.button(
            rx.icon("arrow-left", size=16),
            t("backToList"),
            on_click=AppState.back_to_list,
            variant="soft",
        ),
        rx.heading(AppState.editor_title, size="4", as_="h2"),
        rx.box(
            rx.icon_button(
                rx.icon("undo-2", size=16),
                on_click=AppState.undo,
                disabled=~AppState.can_undo,
                title=t("undo"),
                variant="ghost",
            ),
            rx.icon_button(
                rx.icon("redo-2", size=16),
                on_click=AppState.redo,
                disabled=~AppState.can_redo,
                title=t("redo"),
                variant="ghost",
            ),
            rx.button(
                rx.icon("save", size=16),
                rx.cond(
                    AppState.is_saving,
                    t("saving"),
                    rx.cond(AppState.editing_existing, t("updateInvoice"), t("saveInvoice")),
                ),
                on_click=AppState.save,
                loading=AppState.is_saving,
                disabled=AppState.is_saving,
                class_name="primary-button",
            ),
            class_name="toolbar-actions",
        ),
        class_name="form-toolbar",
    )


def _party_section(section: str, title: rx.Var, party, with_logo: bool) -> rx.Component:
    children = [
        rx.heading(title, size="3", as_="h3"),
        _text_input(t("name"), f"{section}.name", party.name),
        _text_input(t("address"), f"{section}.address", party.address),
        _text_input(t("email"), f"{section}.email", party.email, input_type="email"),
    ]
    if with_logo:
        children.append(_logo_field())
    return rx.box(*children, class_name="surface party-form")


def _logo_field() -> rx.Component:
    draft = AppState.draft
    return rx.box(
        rx.text(t("logo"), as_="label", class_name="label"),
        rx.cond(
            draft.logo != "",
            rx.box(
                rx.image(src=draft.logo, width=f"{draft.logo_width}px", alt="logo"),
                rx.text(t("logoSize"), class_name="label"),
                rx.slider(
                    default_value=[draft.logo_width],
                    min=MIN_LOGO_WIDTH,
                    max=MAX_LOGO_WIDTH,
                    on_value_commit=AppState.set_logo_width,
                ),
                rx.button(t("removeLogo"), on_click=AppState.remove_logo, variant="soft", color_scheme="red"),
                class_name="logo-preview",
            ),
            rx.upload(
                rx.button(rx.icon("image-plus", size=16), t("uploadLogo"), variant="soft"),
                id=LOGO_UPLOAD_ID,
                accept={"image/*": []},
                max_files=1,
                on_drop=AppState.handle_logo_upload(rx.upload_files(upload_id=LOGO_UPLOAD_ID)),
                border="none",
                padding="0",
            ),
        ),
        _error("from.logo"),
        _error("from.logo_width"),
        class_name="form-field",
    )


def _items_section() -> rx.Component:
    return rx.box(
        rx.heading(t("items"), size="3", as_="h3"),
        rx.foreach(AppState.draft.items, _item_row),
        _error("items"),
        rx.button(
            rx.icon("plus", size=16),
            t("addItem"),
            on_click=AppState.add_item,
            class_name="primary-button",
        ),
        class_name="surface items-section",
    )


def _item_row(item: LineItemModel) -> rx.Component:
    return rx.box(
        rx.input(
            value=item.description,
            placeholder=t("description"),
            on_change=lambda value: AppState.update_item(item.id, "description", value),
            class_name="grow",
        ),
        rx.input(
            value=item.quantity,
            type="number",
            placeholder=t("quantityShort"),
            on_change=lambda value: AppState.update_item(item.id, "quantity", value),
            class_name="narrow",
        ),
        rx.input(
            value=item.price,
            type="number",
            placeholder=t("price"),
            on_change=lambda value: AppState.update_item(item.id, "price", value),
            class_name="narrow",
        ),
        rx.icon_button(
            rx.icon("trash-2", size=16),
            on_click=AppState.remove_item(item.id),
            color_scheme="red",
            variant="ghost",
        ),
        rx.cond(item.error != "", rx.text(item.error, class_name="field-error item-error")),
        class_name="item-row",
    )


def _text_input(label: rx.Var, path: str, value, input_type: str = "text") -> rx.Component:
    return rx.box(
        rx.text(label, as_="label", class_name="label"),
        rx.input(
            value=value,
            type=input_type,
            on_change=lambda new_value: AppState.update_field(path, new_value),
        ),
        _error(path),
        class_name="form-field",
    )


def _error(path: str) -> rx.Component:
    return rx.cond(
        AppState.field_errors.contains(path),
        rx.text(AppState.field_errors[path], class_name="field-error"),
    )
