from eventcheck.checkin import ScanStatus, check_in_by_payload, find_by_payload


class TestFindByPayload:
    """Resolving scanned payloads"""

    def test_matches_qr_payload(self, attendees):
        assert find_by_payload(attendees, "QR-LIAM-1002").id == "REG-1002"

    def test_falls_back_to_id(self, attendees):
        assert find_by_payload(attendees, " REG-1003 ").id == "REG-1003"

    def test_unknown_or_empty(self, attendees):
        assert find_by_payload(attendees, "QR-NOPE") is None
        assert find_by_payload(attendees, "   ") is None


class TestCheckInByPayload:
    """Check-in through the store side channel"""

    def test_checks_in(self, store):
        result = check_in_by_payload(
            store, store.list_attendees(), "QR-LIAM-1002", now="2025-04-12T19:00:00.000Z"
        )
        assert result.status is ScanStatus.CHECKED_IN
        assert result.attendee.checked_in_at == "2025-04-12T19:00:00.000Z"
        assert {a.id: a for a in store.list_attendees()}["REG-1002"].is_checked_in

    def test_already_checked_in(self, store):
        result = check_in_by_payload(store, store.list_attendees(), "QR-AVA-1001")
        assert result.status is ScanStatus.ALREADY_CHECKED_IN
        assert result.attendee.checked_in_at == "2025-04-12T18:05:00Z"

    def test_not_found(self, store):
        result = check_in_by_payload(store, store.list_attendees(), "QR-NOPE")
        assert result.status is ScanStatus.NOT_FOUND
        assert result.attendee is None
