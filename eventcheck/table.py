import logging
from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import quote, urlencode

from eventcheck.attendee import Attendee
from eventcheck.group import Group

logger = logging.getLogger(__name__)


@dataclass
class Table(Group):
    """
    Represents a purchaser (the table head) and the guests registered under them.

    Attributes:
        primary (Attendee): The purchaser heading the table.
        guests (list[Attendee]): Linked guests, in snapshot order.
    """

    primary: Attendee
    guests: list[Attendee] = field(default_factory=list)

    def __repr__(self):
        return f"{self.primary.name} (+{len(self.guests)})"

    @property
    def id(self):
        return self.primary.id

    @property
    def attendees(self):
        """Head first, then guests."""
        return [self.primary, *self.guests]

    @property
    def seats(self):
        return len(self.attendees)

    def add_guest(self, guest: Attendee):
        """Adds a guest to the table."""
        self.guests.append(guest)

    def matches(self, search: str) -> bool:
        """True if the head or any guest has the term in their name or email."""
        term = search.strip().lower()
        if not term:
            return True
        return any(
            term in a.name.lower() or term in a.email.lower() for a in self.attendees
        )


def resolve_table(tables: dict[str, Table], guest: Attendee) -> Table | None:
    """
    Resolves a guest's purchaser reference to a table.

    Returns:
        Table or None: The purchaser's table, or None when the reference is unresolved.
    """
    if not guest.primary_attendee_id:
        return None
    return tables.get(guest.primary_attendee_id)


def group_tables(attendees: Iterable[Attendee], search: str = "") -> list[Table]:
    """
    Rebuilds purchaser/guest tables from a flat attendee list.

    Only non-test attendees take part, whatever tab is active. Every primary attendee
    heads a table, and each guest joins the table of the purchaser it references.
    Guests whose purchaser is missing (deleted, test-only or never existed) are left out
    of every table; this is a data-quality condition rather than an error.

    A search keeps whole tables: if any member matches, the head and all guests stay.

    Args:
        attendees: Snapshot of attendee records.
        search (str): Free-text term matched against names and emails.

    Returns:
        list[Table]: Tables sorted by head registration time, newest first.
    """
    roster = [a for a in attendees if not a.is_test]

    tables: dict[str, Table] = {}
    for a in roster:
        if a.is_primary:
            tables.setdefault(a.id, Table(a))

    for a in roster:
        if not a.is_guest:
            continue
        table = resolve_table(tables, a)
        if table is None:
            logger.debug(
                "Guest %s references unknown purchaser %r", a.id, a.primary_attendee_id
            )
            continue
        table.add_guest(a)

    result = [t for t in tables.values() if t.matches(search)]
    # ISO-8601 strings sort chronologically
    return sorted(result, key=lambda t: t.primary.registered_at, reverse=True)


def count_seated(tables: Iterable[Table]) -> int:
    """Total attendees shown across the given tables."""
    return sum(t.seats for t in tables)


def guest_invite_link(origin: str, attendee: Attendee) -> str:
    """
    Builds the registration link a purchaser shares with their guests.

    Guests resolve to their purchaser's id, so the link always points at the table head.

    Args:
        origin (str): Public origin of the registration site, e.g. `https://events.example.com`.
        attendee (Attendee): The purchaser (or one of their guests).

    Returns:
        str: `<origin>/register/<formId>?guestRef=<primaryId>`.
    """
    primary_id = (
        attendee.primary_attendee_id
        if attendee.is_guest and attendee.primary_attendee_id
        else attendee.id
    )
    query = urlencode({"guestRef": primary_id})
    return f"{origin.rstrip('/')}/register/{quote(attendee.form_id, safe='')}?{query}"
