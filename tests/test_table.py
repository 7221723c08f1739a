from conftest import make_attendee
from eventcheck.classify import Tab
from eventcheck.filters import filter_attendees
from eventcheck.table import Table, count_seated, group_tables, guest_invite_link


class TestGroupTables:
    """Purchaser/guest grouping for the table view"""

    def test_tables_sorted_newest_first(self, attendees):
        tables = group_tables(attendees)
        assert [t.id for t in tables] == ["REG-1008", "REG-1005", "REG-1004", "REG-1001"]

    def test_guests_join_their_purchaser(self, attendees):
        table = {t.id: t for t in group_tables(attendees)}["REG-1001"]
        assert [g.id for g in table.guests] == ["REG-1002", "REG-1003"]
        assert table.attendees[0].id == "REG-1001"
        assert table.seats == table.total == 3

    def test_orphan_guests_are_left_out(self, attendees):
        seated = {a.id for t in group_tables(attendees) for a in t.attendees}
        # REG-1006 points at a missing purchaser, REG-1009 at a test record
        assert "REG-1006" not in seated
        assert "REG-1009" not in seated

    def test_test_records_never_seated(self, attendees):
        seated = {a.id for t in group_tables(attendees) for a in t.attendees}
        assert "REG-1007" not in seated

    def test_each_attendee_seated_at_most_once(self, attendees):
        seated = [a.id for t in group_tables(attendees) for a in t.attendees]
        assert len(seated) == len(set(seated))
        assert count_seated(group_tables(attendees)) == len(seated) == 6

    def test_search_keeps_whole_tables(self, attendees):
        tables = group_tables(attendees, search="noah")
        assert len(tables) == 1
        assert tables[0].id == "REG-1001"
        assert tables[0].seats == 3

    def test_search_without_match(self, attendees):
        assert group_tables(attendees, search="nobody-here") == []

    def test_empty_snapshot(self):
        assert group_tables([]) == []

    def test_purchaser_guest_and_orphan(self):
        purchaser = make_attendee(id="P")
        guest = make_attendee(id="G1", is_primary=False, primary_attendee_id="P")
        orphan = make_attendee(id="G2", is_primary=False, primary_attendee_id="MISSING")
        assert group_tables([purchaser, guest, orphan], "") == [Table(purchaser, [guest])]

    def test_grouping_is_idempotent(self, attendees):
        assert group_tables(attendees) == group_tables(attendees)
        assert group_tables(attendees, "noah") == group_tables(attendees, "noah")

    def test_grouping_after_filtering(self, attendees):
        filtered = filter_attendees(attendees, Tab.LIVE, status_filter="pending")
        first = group_tables(filtered)
        assert group_tables(filtered) == first
        # REG-1001 is checked in, so its guests lose their purchaser
        assert [t.id for t in first] == ["REG-1005", "REG-1004"]


class TestGuestInviteLink:
    """Registration links shared with guests"""

    def test_purchaser_link(self, by_id):
        link = guest_invite_link("https://events.example.com/", by_id["REG-1001"])
        assert link == "https://events.example.com/register/gala-2025?guestRef=REG-1001"

    def test_guest_resolves_to_purchaser(self, by_id):
        link = guest_invite_link("https://events.example.com", by_id["REG-1002"])
        assert link.endswith("?guestRef=REG-1001")

    def test_form_id_is_quoted(self):
        attendee = make_attendee(id="P-1", form_id="spring gala/2025")
        link = guest_invite_link("http://localhost:3000", attendee)
        assert link == "http://localhost:3000/register/spring%20gala%2F2025?guestRef=P-1"
