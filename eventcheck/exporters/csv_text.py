from eventcheck.export import ExportTable, to_csv_text
from eventcheck.exporters import Exporter, register


@register
class CsvExporter(Exporter):
    """Comma-delimited text with every cell quoted, UTF-8 encoded."""

    format_name = "csv"
    extension = "csv"

    def render(self, table: ExportTable, title: str = "") -> bytes:
        return to_csv_text(table).encode("utf-8")
