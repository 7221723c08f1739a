from eventcheck.exporters._base import Exporter
from eventcheck.exporters._registry import get_exporter, get_exporters, register

# format modules register themselves on import
from eventcheck.exporters import csv_text, pdf_roster
