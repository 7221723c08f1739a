import json
import logging
import os
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from eventcheck.attendee import Attendee, load_attendees
from eventcheck.errors import PersistenceError
from eventcheck.utils import now_iso

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "registeredAt")


class AttendeeStore(Protocol):
    """Persistence collaborator. The console never writes records any other way."""

    def list_attendees(self) -> list[Attendee]: ...

    def update_attendee(self, id: str, patch: dict) -> Attendee: ...

    def delete_attendee(self, id: str) -> None: ...

    def check_in(self, id: str, now: str | None = None) -> Attendee: ...


class JsonAttendeeStore:
    """
    Keeps the attendee snapshot in a JSON file holding a list of camelCase records.

    Every read goes back to the file, so a fresh `list_attendees()` call reflects the
    latest committed update or delete.
    """

    def __init__(self, path):
        self.path = Path(path)

    def __repr__(self):
        return f"JsonAttendeeStore({self.path})"

    def _read_records(self) -> list[dict]:
        try:
            with open(self.path, encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read attendees from {self.path}: {e}") from e
        if not isinstance(records, list):
            raise PersistenceError(f"{self.path} must contain a list of attendee records")
        return records

    def _write_records(self, records: list[dict]) -> None:
        # write a sibling file and swap it in so a failed write leaves the old snapshot intact
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write attendees to {self.path}: {e}") from e

    @staticmethod
    def _index_of(records: list[dict], id: str) -> int:
        for i, record in enumerate(records):
            if record.get("id") == id:
                return i
        raise PersistenceError(f"Attendee ID {id} not found")

    def list_attendees(self) -> list[Attendee]:
        try:
            return load_attendees(self._read_records())
        except ValidationError as e:
            raise PersistenceError(f"Invalid attendee record in {self.path}: {e}") from e

    def update_attendee(self, id: str, patch: dict) -> Attendee:
        """
        Apply a partial camelCase patch to one record.

        Raises:
            PersistenceError: If the record is missing, the patch touches an immutable
                field, the patched record is invalid, or the file cannot be written.
        """
        locked = [key for key in IMMUTABLE_FIELDS if key in patch]
        if locked:
            raise PersistenceError(f"Cannot modify immutable field(s): {', '.join(locked)}")

        records = self._read_records()
        index = self._index_of(records, id)
        updated = {**records[index], **patch}
        try:
            attendee = Attendee.model_validate(updated)
        except ValidationError as e:
            raise PersistenceError(f"Update rejected for attendee {id}: {e}") from e

        records[index] = updated
        self._write_records(records)
        logger.info("Updated attendee %s (%s)", id, ", ".join(sorted(patch)) or "no changes")
        return attendee

    def delete_attendee(self, id: str) -> None:
        records = self._read_records()
        index = self._index_of(records, id)
        del records[index]
        self._write_records(records)
        logger.info("Deleted attendee %s", id)

    def check_in(self, id: str, now: str | None = None) -> Attendee:
        """
        Mark an attendee as checked in. Already checked-in attendees keep their original
        timestamp.
        """
        records = self._read_records()
        index = self._index_of(records, id)
        if records[index].get("checkedInAt"):
            return Attendee.model_validate(records[index])

        records[index] = {**records[index], "checkedInAt": now or now_iso()}
        self._write_records(records)
        logger.info("Checked in attendee %s", id)
        return Attendee.model_validate(records[index])
