import io
import unicodedata
from dataclasses import replace

import pytest
from pypdf import PdfReader

from invoice_editor.errors import ExportError
from invoice_editor.export import (
    ExportOptions,
    _PdfWriter,
    export_filename,
    export_pdf,
    printable,
    register_fonts,
)
from invoice_editor.i18n import Translator
from invoice_editor.models.invoice import Party
from invoice_editor.preview import build_preview

PIXEL_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def test_preview_formats_in_home_locale(make_invoice) -> None:
    invoice = make_invoice((10, 100), (2, 25), currency="EUR")

    preview = build_preview(invoice, Translator("nl"))

    assert preview.subtotal == "1.050,00\xa0€"
    assert preview.total == "1.102,50\xa0€"
    assert preview.tax_label == "Btw (5%)"
    assert preview.lines[1].quantity == "2"
    assert preview.sender.address_lines == ("1 Main St", "Springfield")
    assert preview.due_date == "2024-03-31"
    assert preview.labels["tax"] == "Btw"


def test_fractional_rates_keep_their_decimals(make_invoice) -> None:
    preview = build_preview(make_invoice((1.5, 10), tax_rate=7.25))

    assert preview.tax_label == "Tax (7.25%)"
    assert preview.lines[0].quantity == "1.5"


def test_export_produces_pdf(make_invoice) -> None:
    preview = build_preview(make_invoice((10, 100), (2, 25)))

    document = export_pdf(preview)

    assert document.filename == "Invoice-INV-100.pdf"
    assert document.media_type == "application/pdf"
    assert document.content.startswith(b"%PDF")
    assert b"%%EOF" in document.content[-16:]


def test_export_with_logo_and_dark_theme(make_invoice) -> None:
    invoice = make_invoice((1, 1))
    invoice = replace(invoice, sender=replace(invoice.sender, logo=PIXEL_PNG, logo_width=80))

    document = export_pdf(build_preview(invoice), ExportOptions.for_theme("dark"))

    assert document.content.startswith(b"%PDF")


def test_long_invoices_span_pages(make_invoice) -> None:
    short = export_pdf(build_preview(make_invoice((1, 1))))
    long = export_pdf(build_preview(make_invoice(*[(1, 1)] * 120, notes="word " * 400)))

    assert len(long.content) > len(short.content)


def test_broken_logo_raises_export_error(make_invoice) -> None:
    invoice = make_invoice((1, 1))
    invoice = replace(invoice, sender=Party(name="Acme", logo="data:image/png;base64,AAAA"))
    preview = build_preview(invoice)

    with pytest.raises(ExportError) as info:
        export_pdf(preview)

    assert info.value.message_key == "pdfGenerationError"
    assert invoice.sender.logo == "data:image/png;base64,AAAA"


def test_scale_is_at_least_two() -> None:
    assert _PdfWriter(ExportOptions(scale=1)).scale == 2
    assert _PdfWriter(ExportOptions(scale=3)).scale == 3


def test_theme_options() -> None:
    dark = ExportOptions.for_theme("dark")
    assert (dark.background, dark.foreground) == ("#111827", "#f9fafb")
    assert ExportOptions.for_theme("unknown") == ExportOptions.for_theme("light")


@pytest.mark.parametrize(
    "number, expected",
    [("INV-001", "Invoice-INV-001.pdf"), ("2024/03", "Invoice-2024-03.pdf"), ("  ", "Invoice-draft.pdf")],
)
def test_export_filename(number, expected) -> None:
    assert export_filename(number) == expected


def _pdf_text(document) -> str:
    reader = PdfReader(io.BytesIO(document.content))
    text = "\n".join(page.extract_text() for page in reader.pages)
    return unicodedata.normalize("NFKC", text)


@pytest.mark.parametrize(
    "currency, language",
    [("VND", "vi"), ("JPY", "en"), ("EUR", "nl"), ("GBP", "en"), ("USD", "vi")],
)
def test_pdf_text_matches_preview(make_invoice, currency, language) -> None:
    preview = build_preview(make_invoice((10, 100), currency=currency), Translator(language))

    text = _pdf_text(export_pdf(preview))

    assert unicodedata.normalize("NFKC", preview.total) in text
    assert preview.labels["invoiceTitle"] in text
    assert "■" not in text


def test_vietnamese_labels_keep_their_diacritics(make_invoice) -> None:
    preview = build_preview(make_invoice((10, 100), currency="VND"), Translator("vi"))

    text = _pdf_text(export_pdf(preview))

    assert "HOÁ ĐƠN" in text
    assert "Tổng cộng" in text
    assert "₫" in text


def test_missing_glyphs_fall_back_to_compatibility_form() -> None:
    regular, bold = register_fonts()

    assert printable("￥1,050", regular) == "¥1,050"
    assert printable("1.050\xa0₫", bold) == "1.050\xa0₫"
