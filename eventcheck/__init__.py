"""Attendee console for event registrations."""

__version__ = "0.3.0"
