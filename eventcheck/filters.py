"""Search, status and payment predicates over a tab-scoped attendee list."""

from enum import Enum
from typing import Iterable

from eventcheck.attendee import Attendee
from eventcheck.classify import Tab, in_tab


class StatusFilter(str, Enum):
    ALL = "all"
    CHECKED_IN = "checked-in"
    PENDING = "pending"


class PaymentFilter(str, Enum):
    ALL = "all"
    PAID = "paid"
    FREE = "free"
    PENDING = "pending"


def matches_search(attendee: Attendee, search: str) -> bool:
    """Case-insensitive substring match on name, email and id. Empty search matches all."""
    term = search.strip().lower()
    if not term:
        return True
    return any(
        term in (value or "").lower()
        for value in (attendee.name, attendee.email, attendee.id)
    )


def matches_status(attendee: Attendee, status_filter: StatusFilter) -> bool:
    status_filter = StatusFilter(status_filter)
    if status_filter is StatusFilter.CHECKED_IN:
        return attendee.is_checked_in
    if status_filter is StatusFilter.PENDING:
        return not attendee.is_checked_in
    return True


def matches_payment(attendee: Attendee, payment_filter: PaymentFilter) -> bool:
    """
    Exact match against the payment status.

    A record without a payment status matches none of paid, pending or free.
    """
    payment_filter = PaymentFilter(payment_filter)
    if payment_filter is PaymentFilter.ALL:
        return True
    if attendee.payment_status is None:
        return False
    return attendee.payment_status.value == payment_filter.value


def filter_attendees(
    attendees: Iterable[Attendee],
    tab: Tab = Tab.LIVE,
    search: str = "",
    status_filter: StatusFilter = StatusFilter.ALL,
    payment_filter: PaymentFilter = PaymentFilter.ALL,
) -> list[Attendee]:
    """
    Returns the attendees passing the tab, search, status and payment predicates.

    The predicates are independent and combined with a logical AND, so the order they are
    applied in does not matter. Input order is preserved.

    Args:
        attendees: Snapshot of attendee records.
        tab (Tab): Tab whose membership rule applies.
        search (str): Free-text search term.
        status_filter (StatusFilter): Check-in status predicate.
        payment_filter (PaymentFilter): Payment status predicate.

    Returns:
        list[Attendee]: Matching attendees in input order.
    """
    tab = Tab(tab)
    status_filter = StatusFilter(status_filter)
    payment_filter = PaymentFilter(payment_filter)
    return [
        a
        for a in attendees
        if in_tab(a, tab)
        and matches_search(a, search)
        and matches_status(a, status_filter)
        and matches_payment(a, payment_filter)
    ]
