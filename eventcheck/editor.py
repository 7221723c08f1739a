import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from eventcheck import errors
from eventcheck.attendee import Attendee, DonationType, PaymentStatus
from eventcheck.utils import now_iso, parse_timestamp

logger = logging.getLogger(__name__)

# draft attribute -> camelCase record key
EDITABLE_FIELDS = {
    "name": "name",
    "email": "email",
    "ticket_type": "ticketType",
    "payment_status": "paymentStatus",
    "invoice_id": "invoiceId",
    "checked_in_at": "checkedInAt",
    "donated_seats": "donatedSeats",
    "donated_tables": "donatedTables",
    "donation_type": "donationType",
    "dietary_preferences": "dietaryPreferences",
    "answers": "answers",
}


@dataclass
class Draft:
    """
    A mutable working copy of one attendee.

    The draft never shares state with the canonical record: answers are deep-copied and
    enums are held as their plain string values.
    """

    attendee_id: str
    registered_at: str
    name: str
    email: str
    ticket_type: str = ""
    payment_status: str | None = None
    invoice_id: str | None = None
    checked_in_at: str | None = None
    donated_seats: int = 0
    donated_tables: int = 0
    donation_type: str | None = None
    dietary_preferences: str | None = None
    answers: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_attendee(cls, attendee: Attendee) -> "Draft":
        record = attendee.to_record()
        return cls(
            attendee_id=attendee.id,
            registered_at=attendee.registered_at,
            **{attr: copy.deepcopy(record[key]) for attr, key in EDITABLE_FIELDS.items()},
        )

    @property
    def checked_in(self) -> bool:
        return self.checked_in_at is not None

    def set_checked_in(self, enabled: bool, now: str | None = None):
        """
        Toggle check-in. Enabling stamps the current time (or `now`); disabling clears it.
        """
        self.checked_in_at = (now or now_iso()) if enabled else None

    def validate(self):
        """
        Raises:
            ValidationError: If the draft cannot be committed.
        """
        problems = []
        if not self.name.strip():
            problems.append("name is required")
        if "@" not in self.email:
            problems.append(f"email {self.email!r} is not a valid address")
        if self.payment_status is not None and self.payment_status not in {
            s.value for s in PaymentStatus
        }:
            problems.append(f"unknown payment status {self.payment_status!r}")
        if self.donation_type is not None and self.donation_type not in {
            t.value for t in DonationType
        }:
            problems.append(f"unknown donation type {self.donation_type!r}")
        if self.donated_seats < 0 or self.donated_tables < 0:
            problems.append("donation counts cannot be negative")
        if self.donated_tables > 0 and self.donation_type != DonationType.TABLE.value:
            problems.append("donated tables require donation type 'table'")
        if self.checked_in_at is not None:
            try:
                checked_in = parse_timestamp(self.checked_in_at).astimezone()
            except ValueError:
                problems.append(f"check-in time {self.checked_in_at!r} is not a timestamp")
            else:
                registered = parse_timestamp(self.registered_at).astimezone()
                if checked_in < registered:
                    problems.append("check-in cannot be earlier than registration")

        if problems:
            raise errors.ValidationError(
                f"Cannot save attendee {self.attendee_id}: {'; '.join(problems)}"
            )

    def to_patch(self, original: Attendee) -> dict:
        """Returns the camelCase fields whose values differ from `original`."""
        record = original.to_record()
        patch = {}
        for attr, key in EDITABLE_FIELDS.items():
            value = getattr(self, attr)
            if value != record.get(key):
                patch[key] = copy.deepcopy(value)
        return patch


class RecordEditor:
    """
    Stages and commits edits to a single attendee.

    Attributes:
        original (Attendee or None): The record being edited.
        draft (Draft or None): The working copy.
    """

    def __init__(self):
        self.original = None
        self.draft = None

    @property
    def is_editing(self):
        return self.draft is not None

    def stage_edit(self, attendee: Attendee) -> Draft:
        """
        Start editing `attendee`. Any draft for another attendee is discarded.
        """
        if self.draft is not None and self.original.id != attendee.id:
            logger.debug("Discarding draft for %s", self.original.id)
        self.original = attendee
        self.draft = Draft.from_attendee(attendee)
        return self.draft

    def discard(self):
        """Drop the draft without side effects."""
        self.original = None
        self.draft = None

    def commit(self, store) -> Attendee:
        """
        Validate the draft and send the changed fields to the store.

        On a persistence failure the draft is kept so that no edits are lost.

        Args:
            store: Persistence collaborator with `update_attendee(id, patch)`.

        Returns:
            Attendee: The updated record.

        Raises:
            ValidationError: If the draft is invalid.
            PersistenceError: If the store rejects the update.
        """
        if self.draft is None:
            raise ValueError("No edit in progress")

        self.draft.validate()
        patch = self.draft.to_patch(self.original)
        if not patch:
            original = self.original
            self.discard()
            return original

        updated = store.update_attendee(self.original.id, patch)
        logger.info("Committed edit to %s: %s", self.original.id, ", ".join(patch))
        self.discard()
        return updated
