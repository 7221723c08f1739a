from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from eventcheck.export import ExportTable
from eventcheck.exporters import Exporter, register
from eventcheck.pdf import (
    CELL_PADDING,
    FONT_NAME,
    FONT_NAME_BOLD,
    FONT_SIZE,
    NumberedCanvas,
    compute_scaled_col_widths,
)


@register
class PdfRosterExporter(Exporter):
    """Printable attendee roster with the same columns as the CSV export."""

    format_name = "pdf"
    extension = "pdf"

    def render(self, table: ExportTable, title: str = "") -> bytes:
        buffer = BytesIO()
        pagesize = landscape(letter)
        doc = SimpleDocTemplate(buffer, pagesize=pagesize, topMargin=0.75 * inch)
        available_width = pagesize[0] - doc.leftMargin - doc.rightMargin

        styles = getSampleStyleSheet()
        elements = [
            Paragraph(title or "Attendees", styles["Title"]),
            Paragraph(f"{len(table.rows)} records", styles["Normal"]),
            Spacer(1, 6),
            self._build_table(table, available_width),
        ]

        # custom canvas prints "Page X of Y" in the footer
        doc.build(elements, canvasmaker=NumberedCanvas)
        return buffer.getvalue()

    def _build_table(self, table: ExportTable, available_width):
        """Build the roster table; header row repeats on every page."""

        table_data = [table.header] + table.rows
        col_widths = compute_scaled_col_widths(
            data=table_data,
            font_name=FONT_NAME,
            font_size=FONT_SIZE,
            padding=CELL_PADDING,
            total_width=available_width,
        )
        roster = Table(table_data, colWidths=col_widths, repeatRows=1)
        roster.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                    ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                    ("FONTNAME", (0, 0), (-1, 0), FONT_NAME_BOLD),
                    ("FONTNAME", (0, 1), (-1, -1), FONT_NAME),
                    ("FONTSIZE", (0, 0), (-1, -1), FONT_SIZE),
                ]
            )
        )
        return roster
