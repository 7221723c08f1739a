from abc import ABC, abstractmethod
from pathlib import Path

from eventcheck.export import ExportTable


class Exporter(ABC):
    """
    Interface for all export formats.
    """

    extension = "txt"

    @abstractmethod
    def render(self, table: ExportTable, title: str = "") -> bytes:
        """
        Serialize a projected `ExportTable` into the bytes of an export file.
        """
        raise NotImplementedError

    def write(self, table: ExportTable, path: Path, title: str = "") -> Path:
        """Render `table` and write it to `path`.

        Nothing is written if rendering fails, so a failed export never leaves a
        partial file behind.

        Args:
            table: Projected export table.
            path: Destination file.
            title: Optional document title for formats that show one.

        Returns:
            Path: The written file.
        """
        payload = self.render(table, title=title)
        path = Path(path)
        path.write_bytes(payload)
        return path
