import pytest
from pydantic import ValidationError

from conftest import make_attendee
from eventcheck.attendee import Attendee, DonationType, PaymentStatus


class TestAttendeeParsing:
    """camelCase records parse into immutable attendees"""

    def test_sample_records_load(self, attendees, by_id):
        assert len(attendees) == 9
        ava = by_id["REG-1001"]
        assert ava.payment_status is PaymentStatus.PAID
        assert ava.is_primary and not ava.is_guest
        assert ava.is_checked_in
        assert ava.answers["field_sessions"] == ["Keynote", "Auction"]

    def test_defaults_for_missing_fields(self, by_id):
        sofia = by_id["REG-1006"]
        assert sofia.payment_status is None
        assert sofia.donated_seats == 0 and sofia.donated_tables == 0
        assert sofia.answers == {}
        assert not sofia.is_test

    def test_nulls_become_defaults(self):
        attendee = Attendee.model_validate(
            {
                "id": "X",
                "name": "N",
                "email": "n@example.com",
                "registeredAt": "2025-01-01T00:00:00Z",
                "isPrimary": None,
                "isTest": None,
                "donatedSeats": None,
                "answers": None,
                "formTitle": None,
            }
        )
        assert attendee.is_primary
        assert not attendee.is_test
        assert attendee.donated_seats == 0
        assert attendee.answers == {}
        assert attendee.form_title == ""

    def test_negative_donation_rejected(self):
        with pytest.raises(ValidationError):
            make_attendee(donated_seats=-1)

    @pytest.mark.parametrize("value", ["yesterday", "03/01/2025", ""])
    def test_malformed_registration_time_rejected(self, value):
        with pytest.raises(ValidationError, match="ISO-8601"):
            make_attendee(registered_at=value)

    def test_timestamp_without_offset_accepted(self):
        assert make_attendee(checked_in_at="2025-03-01T09:15:00").is_checked_in

    def test_records_are_frozen(self, by_id):
        with pytest.raises(ValidationError):
            by_id["REG-1001"].name = "Changed"

    def test_to_record_uses_camel_case(self, by_id):
        record = by_id["REG-1004"].to_record()
        assert record["donatedTables"] == 1
        assert record["donationType"] == DonationType.TABLE.value
        assert record["registeredAt"] == "2025-03-05T14:00:00Z"
        assert "donated_tables" not in record

    def test_repr_is_name(self):
        assert repr(make_attendee(name="Jordan")) == "Jordan"
