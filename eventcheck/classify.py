"""Attendee categories, tab membership and display badges."""

from enum import Enum

from eventcheck.attendee import Attendee
from eventcheck.utils import pluralize


class Category(str, Enum):
    TEST = "test"
    DONOR = "donor"
    LIVE = "live"


class Tab(str, Enum):
    LIVE = "live"
    DONOR = "donor"
    TEST = "test"


TAB_LABELS = {
    Tab.LIVE: "Live Attendees",
    Tab.DONOR: "Donors",
    Tab.TEST: "Test / Previews",
}


def classify(attendee: Attendee) -> Category:
    """
    Assigns an attendee to its primary category.

    Test records are always `test`, regardless of donation fields. Otherwise any donated
    seat or table makes the record a `donor`; everything else is `live`.

    Note that the category is a label, not the tab partition: donors are also members of
    the live tab (see `in_tab`).
    """
    if attendee.is_test:
        return Category.TEST
    if attendee.has_donation:
        return Category.DONOR
    return Category.LIVE


def is_live(attendee: Attendee) -> bool:
    return not attendee.is_test


def is_donor(attendee: Attendee) -> bool:
    return not attendee.is_test and attendee.has_donation


def is_test(attendee: Attendee) -> bool:
    return attendee.is_test


_TAB_MEMBERSHIP = {
    Tab.LIVE: is_live,
    Tab.DONOR: is_donor,
    Tab.TEST: is_test,
}


def in_tab(attendee: Attendee, tab: Tab) -> bool:
    """Returns True if the attendee is listed under `tab`. Live is a superset of donor."""
    return _TAB_MEMBERSHIP[Tab(tab)](attendee)


def badges(attendee: Attendee) -> list[str]:
    """
    Returns the display badges for an attendee.

    Seat and table donations each get a badge only when their own count is positive.
    """
    labels = []
    if attendee.is_test:
        labels.append("TEST")
    if attendee.is_guest:
        labels.append("GUEST")
    if attendee.donated_seats > 0:
        labels.append(f"DONATED {pluralize(attendee.donated_seats, 'SEAT')}")
    if attendee.donated_tables > 0:
        labels.append(f"DONATED {pluralize(attendee.donated_tables, 'TABLE')}")
    return labels
