from io import BytesIO

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from eventcheck.attendee import Attendee
from eventcheck.settings import AppSettings

FONT_NAME = "Courier"
FONT_NAME_BOLD = "Courier-Bold"
FONT_SIZE = 9
CELL_PADDING = 12
# reportlab table sizing is based on absolute widths; keep these constants together for consistency

TICKET_FONT = "Helvetica"
TICKET_FONT_BOLD = "Helvetica-Bold"
QR_SIZE = 1.6 * inch


def generate_ticket_pdf(attendee: Attendee, settings: AppSettings) -> bytes:
    """
    Render an attendee's ticket: branded header, ticket details and a scannable QR code.

    Args:
        attendee: The ticket holder.
        settings: Application settings; only `pdf_settings` is used.

    Returns:
        bytes: The PDF document.
    """
    pdf_settings = settings.pdf_settings
    buffer = BytesIO()
    page_width, page_height = letter
    c = canvas.Canvas(buffer, pagesize=letter)
    c.setTitle(f"Ticket {attendee.id}")

    # header band
    header_height = 0.9 * inch
    c.setFillColor(colors.HexColor(pdf_settings.primary_color))
    c.rect(0, page_height - header_height, page_width, header_height, stroke=0, fill=1)

    c.setFillColor(colors.white)
    c.setFont(TICKET_FONT_BOLD, 20)
    c.drawString(0.5 * inch, page_height - 0.45 * inch, pdf_settings.organization_name)
    c.setFont(TICKET_FONT, 12)
    c.drawString(
        0.5 * inch,
        page_height - 0.72 * inch,
        f"Event: {attendee.form_title or 'Event Registration'}",
    )
    c.setFont(TICKET_FONT, 8)
    for i, line in enumerate(pdf_settings.organization_info.splitlines()):
        c.drawRightString(
            page_width - 0.5 * inch, page_height - (0.3 + 0.15 * i) * inch, line
        )

    # ticket details box
    box_top = page_height - 1.3 * inch
    box_height = 2.6 * inch
    c.setStrokeColor(colors.lightgrey)
    c.roundRect(
        0.5 * inch, box_top - box_height, page_width - inch, box_height, 6, stroke=1
    )

    c.setFillColor(colors.black)
    rows = [
        ("Attendee Name:", attendee.name, 16),
        ("Ticket Type:", attendee.ticket_type or "General Admission", 12),
        ("Ticket ID:", attendee.id, 12),
    ]
    if attendee.invoice_id:
        rows.append(("Invoice #:", attendee.invoice_id, 12))

    y = box_top - 0.4 * inch
    for label, value, size in rows:
        c.setFont(TICKET_FONT, 9)
        c.drawString(0.75 * inch, y, label)
        c.setFont(TICKET_FONT_BOLD, size)
        c.drawString(0.75 * inch, y - 0.22 * inch, str(value))
        y -= 0.55 * inch

    # QR code with the check-in payload
    qr_x = page_width - 0.75 * inch - QR_SIZE
    qr_y = box_top - 0.25 * inch - QR_SIZE
    renderPDF.draw(_qr_drawing(attendee.qr_payload or attendee.id), c, qr_x, qr_y)
    c.setFont(TICKET_FONT, 8)
    c.drawCentredString(qr_x + QR_SIZE / 2, qr_y - 0.15 * inch, "Scan at Entry")

    c.setFillColor(colors.grey)
    c.setFont(TICKET_FONT, 9)
    c.drawCentredString(page_width / 2, 0.6 * inch, pdf_settings.footer_text)

    c.showPage()
    c.save()
    return buffer.getvalue()


def _qr_drawing(payload: str, size: float = QR_SIZE) -> Drawing:
    """Scale a reportlab QR widget into a square drawing of `size` points."""
    widget = QrCodeWidget(payload)
    x1, y1, x2, y2 = widget.getBounds()
    width, height = x2 - x1, y2 - y1
    drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
    drawing.add(widget)
    return drawing


def compute_scaled_col_widths(data, font_name, font_size, padding, total_width):
    """Compute column widths scaled to fit the available page width to avoid overflow or truncation."""

    num_cols = len(data[0])
    max_widths = [0] * num_cols
    for row in data:
        for idx, cell in enumerate(row):
            text = str(cell)
            width = stringWidth(text, font_name, font_size)
            max_widths[idx] = max(max_widths[idx], width)
    raw_widths = [width + padding for width in max_widths]
    raw_total = sum(raw_widths)
    return [width * total_width / raw_total for width in raw_widths]


class NumberedCanvas(canvas.Canvas):
    """Canvas subclass that prints 'Page X of Y' in the footer."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        num_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(num_pages)
            super().showPage()
        super().save()

    def draw_page_number(self, total):
        self.setFont(FONT_NAME, FONT_SIZE)
        text = f"Page {self.getPageNumber()} of {total}"
        self.drawCentredString(self._pagesize[0] / 2, 0.5 * inch, text)
