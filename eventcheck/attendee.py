from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from eventcheck.utils import parse_timestamp


class PaymentStatus(str, Enum):
    FREE = "free"
    PAID = "paid"
    PENDING = "pending"


class DonationType(str, Enum):
    SEAT = "seat"
    TABLE = "table"


class Attendee(BaseModel):
    """
    A single registration record, as stored by the persistence collaborator.

    Records are parsed from camelCase JSON (`isTest`, `primaryAttendeeId`, ...) and are
    immutable once loaded; edits are staged on a separate draft (see `editor.Draft`).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: str = Field(..., description="Submission or invoice identifier.")
    name: str = Field(..., description="Attendee display name.")
    email: str = Field(..., description="Attendee email address.")
    is_test: bool = Field(False, description="Preview/test submission flag.")
    is_primary: bool = Field(
        True, description="False marks a guest linked to a purchaser."
    )
    primary_attendee_id: str | None = Field(
        None, description="Purchaser id; only meaningful for guests."
    )
    form_id: str = Field("", description="Originating registration form.")
    form_title: str = Field("", description="Snapshot of the form title.")
    ticket_type: str = Field("", description="Summary of tickets purchased.")
    registered_at: str = Field(..., description="ISO-8601 registration time.")
    checked_in_at: str | None = Field(
        None, description="ISO-8601 check-in time, or None if not checked in."
    )
    payment_status: PaymentStatus | None = None
    invoice_id: str | None = None
    transaction_id: str | None = None
    payment_amount: str | None = None
    donated_seats: int = Field(0, ge=0)
    donated_tables: int = Field(0, ge=0)
    donation_type: DonationType | None = None
    dietary_preferences: str | None = None
    qr_payload: str = Field("", description="Opaque check-in payload.")
    answers: dict[str, Any] = Field(default_factory=dict)

    @field_validator("is_primary", mode="before")
    @classmethod
    def _primary_when_absent(cls, value):
        return True if value is None else value

    @field_validator("is_test", mode="before")
    @classmethod
    def _not_test_when_absent(cls, value):
        return False if value is None else value

    @field_validator("form_id", "form_title", "ticket_type", "qr_payload", mode="before")
    @classmethod
    def _empty_string_when_absent(cls, value):
        return "" if value is None else value

    @field_validator("donated_seats", "donated_tables", mode="before")
    @classmethod
    def _zero_when_absent(cls, value):
        return 0 if value is None else value

    @field_validator("answers", mode="before")
    @classmethod
    def _empty_answers_when_absent(cls, value):
        return {} if value is None else value

    @field_validator("registered_at", "checked_in_at")
    @classmethod
    def _iso_timestamp(cls, value):
        if value is None:
            return value
        try:
            parse_timestamp(value)
        except ValueError:
            raise ValueError(f"{value!r} is not an ISO-8601 timestamp")
        return value

    def __repr__(self):
        return f"{self.name}"

    @property
    def is_guest(self) -> bool:
        """Guests are non-primary records linked to a purchaser."""
        return not self.is_primary

    @property
    def is_checked_in(self) -> bool:
        return self.checked_in_at is not None

    @property
    def has_donation(self) -> bool:
        return self.donated_seats > 0 or self.donated_tables > 0

    def to_record(self) -> dict[str, Any]:
        """Returns the camelCase JSON form of this attendee."""
        return self.model_dump(by_alias=True, mode="json")


def load_attendees(records: list[dict]) -> list[Attendee]:
    """
    Parses a list of camelCase attendee records.

    Raises:
        pydantic.ValidationError: If a record is missing required fields or has bad values.
    """
    return [Attendee.model_validate(record) for record in records]
