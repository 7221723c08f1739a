"""
Projection of a filtered attendee set onto a selected list of export columns.

Exports always cover every attendee passed in; callers pass the filtered set, never the
current page.
"""

import csv
import io
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Iterable, Mapping

from eventcheck import errors
from eventcheck.attendee import Attendee
from eventcheck.utils import FILENAME_TIMESTAMP_FORMAT, format_answer, format_timestamp

TIMESTAMP_FIELDS = ("registeredAt", "checkedInAt")
ANSWER_PREFIX = "answers."

# declaration order is the column order of the export
DEFAULT_FIELD_LABELS = {
    "id": "Registration ID",
    "name": "Name",
    "email": "Email",
    "formTitle": "Event",
    "ticketType": "Ticket Type",
    "paymentStatus": "Payment Status",
    "paymentAmount": "Amount",
    "invoiceId": "Invoice ID",
    "transactionId": "Transaction ID",
    "registeredAt": "Registered At",
    "checkedInAt": "Checked In At",
    "donatedSeats": "Donated Seats",
    "donatedTables": "Donated Tables",
    "donationType": "Donation Type",
    "dietaryPreferences": "Dietary Preferences",
    "isPrimary": "Primary",
    "primaryAttendeeId": "Purchaser ID",
}

DEFAULT_FIELD_MASK = {
    "id": True,
    "name": True,
    "email": True,
    "formTitle": True,
    "ticketType": True,
    "paymentStatus": True,
    "paymentAmount": False,
    "invoiceId": False,
    "transactionId": False,
    "registeredAt": True,
    "checkedInAt": True,
    "donatedSeats": False,
    "donatedTables": False,
    "donationType": False,
    "dietaryPreferences": False,
    "isPrimary": False,
    "primaryAttendeeId": False,
}


@dataclass(frozen=True)
class ExportTable:
    """Header row plus one row of cell strings per exported attendee."""

    keys: list[str]
    header: list[str]
    rows: list[list[str]] = field(default_factory=list)


def selected_fields(field_mask: Mapping[str, bool]) -> list[str]:
    """Returns the included keys in mask declaration order."""
    return [key for key, included in field_mask.items() if included]


def build_field_mask(fields: Iterable[str], available=DEFAULT_FIELD_LABELS) -> dict:
    """
    Builds a mask over `available` that includes exactly `fields`.

    Answer keys (`answers.<key>`) are appended after the standard fields.

    Raises:
        ValidationError: If a requested field is not exportable.
    """
    requested = list(dict.fromkeys(f.strip() for f in fields if f.strip()))
    unknown = [
        f for f in requested if f not in available and not f.startswith(ANSWER_PREFIX)
    ]
    if unknown:
        raise errors.ValidationError(f"Unknown export field(s): {', '.join(unknown)}")
    mask = {key: key in requested for key in available}
    mask.update({f: True for f in requested if f.startswith(ANSWER_PREFIX)})
    return mask


def format_cell(record: dict, key: str, tz: tzinfo | None = None) -> str:
    """
    Reads and formats one export cell from a camelCase attendee record.

    Timestamps are rendered as `YYYY-MM-DD HH:MM:SS` in local time (or `tz`), missing
    values become empty strings, and answer lists are comma-joined.
    """
    if key.startswith(ANSWER_PREFIX):
        value = (record.get("answers") or {}).get(key[len(ANSWER_PREFIX) :])
    else:
        value = record.get(key)

    if value is None:
        return ""
    if key in TIMESTAMP_FIELDS:
        return format_timestamp(value, tz=tz)
    if isinstance(value, bool):
        return "true" if value else "false"
    return format_answer(value)


def project(
    filtered: Iterable[Attendee],
    field_mask: Mapping[str, bool],
    field_labels: Mapping[str, str] = DEFAULT_FIELD_LABELS,
    tz: tzinfo | None = None,
) -> ExportTable:
    """
    Maps a filtered attendee set and a field selection onto a tabular export.

    Args:
        filtered: Every attendee to export, in output order.
        field_mask: Field key -> inclusion flag. Column order follows the mask.
        field_labels: Field key -> header label. Unlabelled keys use the key itself.
        tz: Timezone for timestamp cells. Defaults to local time.

    Returns:
        ExportTable: Header and rows.

    Raises:
        ValidationError: If no field is selected.
    """
    keys = selected_fields(field_mask)
    if not keys:
        raise errors.ValidationError("Select at least one field to export.")

    header = [field_labels.get(key, key) for key in keys]
    rows = []
    for attendee in filtered:
        record = attendee.to_record()
        rows.append([format_cell(record, key, tz) for key in keys])
    return ExportTable(keys=keys, header=header, rows=rows)


def to_csv_text(table: ExportTable) -> str:
    """Serializes an export with every cell quoted and rows joined by newlines."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(table.header)
    writer.writerows(table.rows)
    return buffer.getvalue().removesuffix("\n")


def project_csv(
    filtered: Iterable[Attendee],
    field_mask: Mapping[str, bool],
    field_labels: Mapping[str, str] = DEFAULT_FIELD_LABELS,
    tz: tzinfo | None = None,
) -> str:
    """Projects and serializes in one step; see `project`."""
    return to_csv_text(project(filtered, field_mask, field_labels, tz=tz))


def export_filename(now: datetime | None = None, extension: str = "csv") -> str:
    """Returns `attendees_<YYYYMMDD_HHMM>.<extension>` for `now` (default: current time)."""
    moment = now or datetime.now()
    return f"attendees_{moment.strftime(FILENAME_TIMESTAMP_FORMAT)}.{extension}"
