from io import BytesIO

import pytest
from pypdf import PdfReader

from eventcheck.export import DEFAULT_FIELD_MASK, project
from eventcheck.exporters import Exporter, _registry, get_exporter, get_exporters, register
from eventcheck.pdf import compute_scaled_col_widths, generate_ticket_pdf
from eventcheck.settings import AppSettings, PdfSettings


def pdf_text(data: bytes) -> str:
    return "".join(page.extract_text() for page in PdfReader(BytesIO(data)).pages)


class TestTicketPdf:
    """Per-attendee ticket documents"""

    def test_ticket_contents(self, by_id):
        settings = AppSettings(
            pdf_settings=PdfSettings(organization_name="Gala Committee")
        )
        text = pdf_text(generate_ticket_pdf(by_id["REG-1001"], settings))
        assert "Gala Committee" in text
        assert "Ava Thompson" in text
        assert "REG-1001" in text
        assert "INV-5001" in text
        assert "Scan at Entry" in text

    def test_single_page(self, by_id):
        data = generate_ticket_pdf(by_id["REG-1006"], AppSettings())
        assert len(PdfReader(BytesIO(data)).pages) == 1


class TestExporters:
    """Registered export formats"""

    def test_registry(self):
        assert {"csv", "pdf"} <= set(get_exporters())

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="xlsx"):
            get_exporter("xlsx")

    def test_register_custom_format(self, monkeypatch):
        monkeypatch.setattr(_registry, "_registry", dict(_registry._registry))

        @register
        class TsvExporter(Exporter):
            extension = "tsv"

            def render(self, table, title=""):
                lines = ["\t".join(row) for row in [table.header, *table.rows]]
                return "\n".join(lines).encode("utf-8")

        assert get_exporter("tsv") is TsvExporter
        assert {"csv", "pdf", "tsv"} <= set(get_exporters())

    def test_csv_render(self, attendees):
        table = project(attendees, {"id": True})
        data = get_exporter("csv")().render(table)
        assert data.decode("utf-8").splitlines()[:2] == ['"Registration ID"', '"REG-1001"']

    def test_pdf_roster_paginates(self, attendees):
        table = project(attendees * 10, DEFAULT_FIELD_MASK)
        data = get_exporter("pdf")().render(table, title="Spring Gala 2025")
        reader = PdfReader(BytesIO(data))
        assert len(reader.pages) > 1
        last = reader.pages[-1].extract_text()
        assert f"Page {len(reader.pages)} of {len(reader.pages)}" in last

    def test_write(self, attendees, tmp_path):
        table = project(attendees, {"id": True})
        path = get_exporter("csv")().write(table, tmp_path / "out.csv")
        assert path.read_bytes().startswith(b'"Registration ID"')


def test_col_widths_fill_available_width():
    widths = compute_scaled_col_widths(
        [["a", "bbbb"], ["cc", "d"]], "Courier", 9, 12, total_width=500
    )
    assert round(sum(widths), 6) == 500
    assert widths[1] > widths[0]
