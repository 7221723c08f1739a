"""Check-in side channel: resolve a scanned QR payload and stamp the attendee."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from eventcheck.attendee import Attendee
from eventcheck.group import Roster

logger = logging.getLogger(__name__)


class ScanStatus(str, Enum):
    CHECKED_IN = "checked_in"
    ALREADY_CHECKED_IN = "already_checked_in"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ScanResult:
    status: ScanStatus
    attendee: Attendee | None = None


def find_by_payload(attendees: Iterable[Attendee], payload: str) -> Attendee | None:
    """Match a scanned payload against QR payloads first, then registration ids."""
    payload = payload.strip()
    if not payload:
        return None
    roster = Roster(tuple(attendees))
    matches = roster.get_attendees_by_attribute("qr_payload", payload)
    if matches:
        return matches[0]
    return roster.find_attendee(payload)


def check_in_by_payload(store, attendees, payload: str, now: str | None = None) -> ScanResult:
    """
    Check in the attendee identified by a scanned payload.

    Args:
        store: Persistence collaborator providing `check_in(id, now)`.
        attendees: Current snapshot used to resolve the payload.
        payload (str): Scanned QR content or a typed registration id.
        now (str | None): Check-in timestamp; defaults to the current time.

    Returns:
        ScanResult: Outcome and the (updated) attendee when one was found.
    """
    attendee = find_by_payload(attendees, payload)
    if attendee is None:
        logger.info("No attendee matches scanned payload")
        return ScanResult(ScanStatus.NOT_FOUND)
    if attendee.is_checked_in:
        return ScanResult(ScanStatus.ALREADY_CHECKED_IN, attendee)

    updated = store.check_in(attendee.id, now)
    return ScanResult(ScanStatus.CHECKED_IN, updated)
