"""
PDF export of the invoice preview.

The exporter draws the InvoicePreview exactly as shown on screen: it reads
the already formatted strings and never recomputes totals. Pages are
rendered at `scale` times the A4 point size and painted with the theme
background first, so a dark-theme export keeps its dark page.

Text is set in the bundled DejaVu Sans, which covers Vietnamese and the
currency symbols of every supported currency. Characters the font has no
glyph for (the fullwidth yen Babel emits for ja_JP) are drawn in their
NFKC compatibility form.

Any failure inside ReportLab (a corrupt logo, a font problem) surfaces as
ExportError; the draft the preview was built from is never touched.
"""

import io
import re
import unicodedata
from dataclasses import dataclass
from functools import cache
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from invoice_editor.errors import ExportError
from invoice_editor.lib import logs
from invoice_editor.models.invoice import decode_logo
from invoice_editor.preview import InvoicePreview, PreviewParty

LOG = logs.logger(__file__)

THEME_COLORS: dict[str, tuple[str, str]] = {
    "light": ("#ffffff", "#1f2937"),
    "dark": ("#111827", "#f9fafb"),
}

MIN_SCALE = 2
FONT_DIR = Path(__file__).parent / "fonts"
_MARGIN = 40
_FONT = "DejaVuSans"
_FONT_BOLD = "DejaVuSans-Bold"
_LINE = 14


@cache
def register_fonts() -> tuple[str, str]:
    """Register the bundled regular and bold fonts with ReportLab once per process."""
    pdfmetrics.registerFont(TTFont(_FONT, str(FONT_DIR / "DejaVuSans.ttf")))
    pdfmetrics.registerFont(TTFont(_FONT_BOLD, str(FONT_DIR / "DejaVuSans-Bold.ttf")))
    LOG.debug("Registered PDF fonts from %s", FONT_DIR)
    return _FONT, _FONT_BOLD


def printable(value: str, font: str = _FONT) -> str:
    """Replace characters missing from the font with their NFKC form."""
    glyphs = pdfmetrics.getFont(font).face.charToGlyph
    return "".join(
        char if ord(char) in glyphs else unicodedata.normalize("NFKC", char)
        for char in value
    )


@dataclass(frozen=True, slots=True)
class ExportOptions:
    """
    Rendering options for export_pdf.

    Attributes:
        scale: Resolution multiplier; values below 2 are raised to 2.
        background: Page fill colour as a hex string.
        foreground: Text colour as a hex string.
    """

    scale: float = MIN_SCALE
    background: str = "#ffffff"
    foreground: str = "#1f2937"

    @classmethod
    def for_theme(cls, theme: str, scale: float = MIN_SCALE) -> "ExportOptions":
        background, foreground = THEME_COLORS.get(theme, THEME_COLORS["light"])
        return cls(scale=scale, background=background, foreground=foreground)


@dataclass(frozen=True, slots=True)
class ExportedDocument:
    filename: str
    content: bytes
    media_type: str = "application/pdf"


def export_filename(invoice_number: str) -> str:
    """Return "Invoice-<number>.pdf" with path separators removed."""
    number = re.sub(r"[\\/]+", "-", invoice_number.strip()) or "draft"
    return f"Invoice-{number}.pdf"


class _PdfWriter:
    """Cursor-based drawing over a scaled ReportLab canvas."""

    def __init__(self, options: ExportOptions) -> None:
        self.options = options
        self.font, self.bold_font = register_fonts()
        self.scale = max(float(options.scale), MIN_SCALE)
        self.width, self.height = A4
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(
            self.buffer, pagesize=(self.width * self.scale, self.height * self.scale)
        )
        self.y = 0.0
        self._start_page()

    def _start_page(self) -> None:
        c = self.canvas
        c.scale(self.scale, self.scale)
        c.setFillColor(colors.HexColor(self.options.background))
        c.rect(0, 0, self.width, self.height, stroke=0, fill=1)
        c.setFillColor(colors.HexColor(self.options.foreground))
        c.setStrokeColor(colors.HexColor(self.options.foreground))
        self.y = self.height - _MARGIN

    def ensure_room(self, needed: float) -> None:
        if self.y - needed < _MARGIN:
            self.canvas.showPage()
            self._start_page()

    def text(self, x: float, value: str, size: int = 10, bold: bool = False) -> None:
        font = self.bold_font if bold else self.font
        self.canvas.setFont(font, size)
        self.canvas.drawString(x, self.y, printable(value, font))

    def right(self, x: float, value: str, size: int = 10, bold: bool = False) -> None:
        font = self.bold_font if bold else self.font
        self.canvas.setFont(font, size)
        self.canvas.drawRightString(x, self.y, printable(value, font))

    def rule(self, x1: float, x2: float, width: float = 0.5) -> None:
        self.canvas.setLineWidth(width)
        self.canvas.line(x1, self.y, x2, self.y)

    def down(self, amount: float = _LINE) -> None:
        self.y -= amount

    def finish(self) -> bytes:
        self.canvas.showPage()
        self.canvas.save()
        return self.buffer.getvalue()


def _wrap(value: str, width: float, size: int = 10) -> list[str]:
    """Greedy word wrap by rendered string width."""
    lines: list[str] = []
    for paragraph in printable(value).splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}".strip()
            if current and stringWidth(candidate, _FONT, size) > width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def _draw_logo(pdf: _PdfWriter, preview: InvoicePreview) -> float:
    """Draw the sender logo top-left and return its height in points."""
    if not preview.logo:
        return 0
    _, payload = decode_logo(preview.logo)
    image = ImageReader(io.BytesIO(payload))
    image_width, image_height = image.getSize()
    width = float(preview.logo_width) * 0.75
    height = width * image_height / image_width if image_width else width
    pdf.canvas.drawImage(
        image, _MARGIN, pdf.y - height + 10, width=width, height=height, mask="auto"
    )
    return height


def _draw_party(pdf: _PdfWriter, x: float, party: PreviewParty, align_right: bool) -> None:
    draw = pdf.right if align_right else pdf.text
    draw(x, party.name, size=11, bold=True)
    for line in [*party.address_lines, party.email]:
        pdf.down()
        draw(x, line, size=9)


def _render(pdf: _PdfWriter, preview: InvoicePreview) -> None:
    labels = preview.labels
    left, right = _MARGIN, pdf.width - _MARGIN
    top = pdf.y

    # Header: title or logo on the left, sender on the right.
    logo_height = _draw_logo(pdf, preview)
    if logo_height:
        pdf.down(logo_height + 4)
    pdf.text(left, labels.get("invoiceTitle", "INVOICE"), size=22, bold=True)
    pdf.down(16)
    pdf.text(left, f"# {preview.invoice_number}", size=10)
    header_bottom = pdf.y

    pdf.y = top
    _draw_party(pdf, right, preview.sender, align_right=True)
    pdf.y = min(pdf.y, header_bottom) - 28

    # Recipient and dates.
    section_top = pdf.y
    pdf.text(left, labels.get("billTo", "BILL TO"), size=9, bold=True)
    pdf.down()
    _draw_party(pdf, left, preview.recipient, align_right=False)
    recipient_bottom = pdf.y
    pdf.y = section_top
    pdf.right(right, f"{labels.get('date', 'Date')}: {preview.date}")
    pdf.down()
    pdf.right(right, f"{labels.get('dueDate', 'Due Date')}: {preview.due_date}")
    pdf.y = min(pdf.y, recipient_bottom) - 28

    # Line items.
    qty_x, price_x, total_x = left + 300, left + 400, right
    pdf.text(left, labels.get("item", "Item"), bold=True)
    pdf.right(qty_x, labels.get("quantityShort", "Qty"), bold=True)
    pdf.right(price_x, labels.get("price", "Price"), bold=True)
    pdf.right(total_x, labels.get("total", "Total"), bold=True)
    pdf.down(6)
    pdf.rule(left, right)
    for line in preview.lines:
        description = _wrap(line.description, qty_x - left - 40)
        pdf.ensure_room(_LINE * (len(description) + 1))
        pdf.down()
        pdf.text(left, description[0])
        pdf.right(qty_x, line.quantity)
        pdf.right(price_x, line.price)
        pdf.right(total_x, line.total)
        for extra in description[1:]:
            pdf.down()
            pdf.text(left, extra)
        pdf.down(6)
        pdf.rule(left, right, width=0.25)

    # Totals.
    pdf.ensure_room(_LINE * 5)
    label_x = right - 180
    pdf.down(20)
    pdf.text(label_x, f"{labels.get('subtotal', 'Subtotal')}:")
    pdf.right(right, preview.subtotal)
    pdf.down()
    pdf.text(label_x, f"{preview.tax_label}:")
    pdf.right(right, preview.tax)
    pdf.down(8)
    pdf.rule(label_x, right, width=1.5)
    pdf.down(14)
    pdf.text(label_x, f"{labels.get('total', 'Total')}:", size=13, bold=True)
    pdf.right(right, preview.total, size=13, bold=True)

    if preview.notes:
        pdf.down(30)
        for line in _wrap(preview.notes, right - left, size=9):
            pdf.ensure_room(_LINE)
            pdf.text(left, line, size=9)
            pdf.down(12)


def export_pdf(
    preview: InvoicePreview, options: ExportOptions | None = None
) -> ExportedDocument:
    """
    Render the preview into a PDF document.

    Args:
        preview: Formatted invoice as displayed.
        options: Scale and colours; light theme at scale 2 when omitted.

    Returns:
        ExportedDocument named "Invoice-<number>.pdf".

    Raises:
        ExportError: If rendering fails for any reason.
    """
    options = options or ExportOptions()
    filename = export_filename(preview.invoice_number)
    LOG.info("Exporting %s (scale %s)", filename, options.scale)
    try:
        pdf = _PdfWriter(options)
        _render(pdf, preview)
        content = pdf.finish()
    except Exception as exc:
        LOG.error("PDF export failed for %s: %s", filename, exc, exc_info=True)
        raise ExportError(str(exc)) from exc
    return ExportedDocument(filename=filename, content=content)
